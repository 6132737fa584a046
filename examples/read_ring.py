"""Scan for a ring and print what it reports.

Usage:
    uv run python examples/read_ring.py --scan
    uv run python examples/read_ring.py AA:BB:CC:DD:EE:FF --heart-rate --steps
    uv run python examples/read_ring.py AA:BB:CC:DD:EE:FF --log 2025-05-12
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import date, datetime

from colmi_ring import (
    ColmiRingDevice,
    ColmiRingError,
    HeartRateLog,
    RealTimeReading,
    discover_devices,
)


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _print_log(log: HeartRateLog) -> None:
    """Print the measured samples of a heart-rate log."""
    if log.is_empty:
        print(f"[{_timestamp()}] No heart-rate data for {log.timestamp:%Y-%m-%d}")
        return
    measured = [(rate, ts) for rate, ts in log.heart_rates_with_times() if rate > 0]
    print(f"[{_timestamp()}] Heart-rate log: {len(measured)} samples, every {log.range} min")
    for rate, ts in measured:
        print(f"  {ts:%H:%M} {rate} bpm")


async def scan(duration: float) -> None:
    print(f"Scanning for rings ({duration:.1f}s)...")
    found = await discover_devices(timeout=duration)
    if not found:
        print("No rings found")
    for address, name in sorted(found.items()):
        print(f"  {address}: {name}")


async def read(args: argparse.Namespace) -> None:
    async with ColmiRingDevice(args.address, timeout=args.timeout) as ring:
        info = await ring.get_device_info()
        print(f"[{_timestamp()}] hw={info.hardware_version} fw={info.firmware_version}")

        battery = await ring.get_battery()
        print(f"[{_timestamp()}] battery={battery.level}% charging={battery.charging}")

        settings = await ring.get_heart_rate_log_settings()
        print(
            f"[{_timestamp()}] hr_logging={'on' if settings.enabled else 'off'} "
            f"interval={settings.interval}min"
        )

        if args.set_time:
            await ring.set_time()
            print(f"[{_timestamp()}] time set")

        if args.heart_rate:
            reading = await ring.get_real_time_reading(RealTimeReading.HEART_RATE)
            print(f"[{_timestamp()}] heart_rate={reading.value} bpm")

        if args.spo2:
            reading = await ring.get_real_time_reading(RealTimeReading.SPO2)
            print(f"[{_timestamp()}] spo2={reading.value}%")

        if args.log:
            _print_log(await ring.get_heart_rate_log(args.log))

        if args.steps:
            try:
                details = await ring.get_steps(args.day_offset)
            except ColmiRingError as err:
                print(f"[{_timestamp()}] steps unavailable: {err}")
            else:
                print(
                    f"[{_timestamp()}] steps={sum(d.steps for d in details)} "
                    f"calories={sum(d.calories for d in details)} "
                    f"distance={sum(d.distance for d in details)}m"
                )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Read data from a Colmi smart ring.")
    parser.add_argument("address", nargs="?", help="Ring MAC address")
    parser.add_argument("--scan", action="store_true", help="Scan for rings and exit.")
    parser.add_argument("--duration", type=float, default=10.0, help="Scan duration in seconds. Default: 10")
    parser.add_argument("--timeout", type=float, default=10.0, help="Reply timeout in seconds. Default: 10")
    parser.add_argument("--heart-rate", action="store_true", help="Take a real-time heart-rate reading.")
    parser.add_argument("--spo2", action="store_true", help="Take a real-time SpO2 reading.")
    parser.add_argument("--log", type=date.fromisoformat, help="Download the heart-rate log of a day (YYYY-MM-DD).")
    parser.add_argument("--steps", action="store_true", help="Download sport details.")
    parser.add_argument("--day-offset", type=int, default=0, help="Days back for --steps. Default: 0")
    parser.add_argument("--set-time", action="store_true", help="Set the ring's clock to now.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()
    if not args.scan and not args.address:
        parser.error("address is required unless --scan is given")
    return args


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        if args.scan:
            asyncio.run(scan(args.duration))
        else:
            asyncio.run(read(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
