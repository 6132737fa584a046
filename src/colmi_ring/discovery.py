"""Scanning for rings."""

from __future__ import annotations

import logging

from bleak import BleakScanner

_LOGGER = logging.getLogger(__name__)

# Advertised names seen on Colmi rings
DEFAULT_NAME_PREFIXES = ("R01", "R02", "R03", "R06", "R09", "R10", "COLMI")


async def discover_devices(
        timeout: float = 10.0,
        name_prefixes: tuple[str, ...] = DEFAULT_NAME_PREFIXES,
) -> dict[str, str]:
    """Scan for nearby rings.

    Args:
        timeout: Scan duration in seconds (default: 10)
        name_prefixes: Advertised name prefixes to accept

    Returns:
        Mapping of address to advertised name
    """
    _LOGGER.debug("Scanning for rings for %.1fs", timeout)
    devices = await BleakScanner.discover(timeout=timeout)

    found = {
        device.address: device.name
        for device in devices
        if device.name and device.name.upper().startswith(tuple(p.upper() for p in name_prefixes))
    }
    _LOGGER.info("Found %d ring(s)", len(found))
    return found
