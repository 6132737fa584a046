"""Test real-time measurements."""

from __future__ import annotations

import asyncio
import logging

import pytest

from colmi_ring.exceptions import (
    BLETimeoutError,
    BLEConnectionError,
    DeviceReportedError,
    PreconditionViolationError,
)
from colmi_ring.models import RealTimeAction, RealTimeReading, Reading
from colmi_ring.protocol.commands import build_real_time_command
from colmi_ring.protocol.correlator import CommandCorrelator
from colmi_ring.protocol.packet import encode
from colmi_ring.protocol.real_time import (
    RealTimeReadingStream,
    is_acknowledgement,
    real_time_reply_filter,
)

START_HR = bytes(build_real_time_command(RealTimeReading.HEART_RATE, RealTimeAction.START))
STOP_HR = bytes(build_real_time_command(RealTimeReading.HEART_RATE, RealTimeAction.STOP))


class _FakeRing:
    """Answers a START command with a scripted series of 105 replies."""

    def __init__(self, replies: list[bytes] | None = None, stop_error: Exception | None = None):
        self.replies = replies or []
        self.stop_error = stop_error
        self.written: list[bytes] = []
        self.correlator = CommandCorrelator(self.write, timeout=1.0)

    async def write(self, data: bytes) -> None:
        self.written.append(data)
        if data[0] == 106 and self.stop_error is not None:
            raise self.stop_error
        if data[0] == 105:
            loop = asyncio.get_running_loop()
            for reply in self.replies:
                loop.call_soon(self.correlator.resolve, encode(105, reply))


class TestReplyFilter:
    """Test classification of 105 replies."""

    def test_acknowledgement(self):
        assert is_acknowledgement(encode(105, bytes([1, 0, 0])))
        assert not is_acknowledgement(encode(105, bytes([1, 0, 75])))
        assert not is_acknowledgement(encode(105, bytes([1, 3, 0])))

    def test_filter_skips_ack(self):
        accept = real_time_reply_filter(RealTimeReading.HEART_RATE)
        assert accept(encode(105, bytes([1, 0, 0]))) is False

    def test_filter_accepts_value(self):
        accept = real_time_reply_filter(RealTimeReading.HEART_RATE)
        assert accept(encode(105, bytes([1, 0, 75]))) is True

    def test_filter_skips_other_kind(self):
        accept = real_time_reply_filter(RealTimeReading.HEART_RATE)
        assert accept(encode(105, bytes([RealTimeReading.SPO2, 0, 98]))) is False

    def test_filter_raises_on_error_code(self):
        accept = real_time_reply_filter(RealTimeReading.SPO2)
        with pytest.raises(DeviceReportedError) as exc_info:
            accept(encode(105, bytes([RealTimeReading.SPO2, 2, 0])))
        assert exc_info.value.code == 2


@pytest.mark.asyncio
async def test_read_skips_ack_and_returns_value() -> None:
    """The zero-value ACK is ignored; the first real value is returned."""
    ring = _FakeRing([bytes([1, 0, 0]), bytes([1, 0, 75])])
    stream = RealTimeReadingStream(ring.correlator)

    reading = await stream.read(RealTimeReading.HEART_RATE)

    assert reading == Reading(RealTimeReading.HEART_RATE, 75)
    assert ring.written == [START_HR, STOP_HR]


@pytest.mark.asyncio
async def test_read_accepts_int_kind() -> None:
    ring = _FakeRing([bytes([3, 0, 97])])
    stream = RealTimeReadingStream(ring.correlator)

    reading = await stream.read(3)

    assert reading.kind is RealTimeReading.SPO2
    assert reading.value == 97


@pytest.mark.asyncio
async def test_read_error_code_raises_and_stops() -> None:
    """A non-zero error code fails the read, and the stop is still sent."""
    ring = _FakeRing([bytes([1, 1, 0])])
    stream = RealTimeReadingStream(ring.correlator)

    with pytest.raises(DeviceReportedError) as exc_info:
        await stream.read(RealTimeReading.HEART_RATE)

    assert exc_info.value.code == 1
    assert ring.written == [START_HR, STOP_HR]


@pytest.mark.asyncio
async def test_read_timeout_still_stops() -> None:
    """Only an ACK arrives: the read times out and the stop is still sent."""
    ring = _FakeRing([bytes([1, 0, 0])])
    stream = RealTimeReadingStream(ring.correlator)

    with pytest.raises(BLETimeoutError):
        await stream.read(RealTimeReading.HEART_RATE, timeout=0.05)

    assert ring.written == [START_HR, STOP_HR]


@pytest.mark.asyncio
async def test_stop_failure_is_logged_not_raised(caplog) -> None:
    ring = _FakeRing([bytes([1, 0, 80])], stop_error=BLEConnectionError("write failed"))
    stream = RealTimeReadingStream(ring.correlator)

    with caplog.at_level(logging.WARNING):
        reading = await stream.read(RealTimeReading.HEART_RATE)

    assert reading.value == 80
    assert "Failed to stop real-time HEART_RATE" in caplog.text


@pytest.mark.asyncio
async def test_stop_failure_from_any_transport_error(caplog) -> None:
    """A non-library exception while stopping still does not fail the read."""
    ring = _FakeRing([bytes([1, 0, 64])], stop_error=OSError("adapter reset"))
    stream = RealTimeReadingStream(ring.correlator)

    with caplog.at_level(logging.WARNING):
        reading = await stream.read(RealTimeReading.HEART_RATE)

    assert reading.value == 64
    assert "adapter reset" in caplog.text


@pytest.mark.asyncio
async def test_unknown_kind_is_rejected_before_sending() -> None:
    ring = _FakeRing()
    stream = RealTimeReadingStream(ring.correlator)

    with pytest.raises(PreconditionViolationError):
        await stream.read(6)
    assert ring.written == []
