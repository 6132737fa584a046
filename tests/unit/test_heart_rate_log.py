"""Test heart-rate log reassembly."""

import struct
from datetime import date, datetime, timezone

import pytest

from colmi_ring.exceptions import (
    IncompleteReassemblyError,
    NoDataError,
    PreconditionViolationError,
)
from colmi_ring.models import SAMPLES_PER_DAY, AssemblyState, HeartRateLog
from colmi_ring.protocol.heart_rate_log import HeartRateLogAssembler
from colmi_ring.protocol.packet import encode

TIMESTAMP = 1_678_886_400  # 2023-03-15T13:20:00Z


def _header(size: int, range_minutes: int = 5):
    return encode(21, bytes([0, size, range_minutes]))


def _first(rates, timestamp: int = TIMESTAMP):
    return encode(21, bytes([1]) + struct.pack("<i", timestamp) + bytes(rates))


def _data(subtype: int, rates):
    return encode(21, bytes([subtype]) + bytes(rates))


RATES_1 = [60, 61, 62, 63, 64, 65, 66, 67, 68]
RATES_2 = [70, 71, 72, 73, 74, 75, 76, 77, 78, 79, 80, 81, 82]


@pytest.fixture
def assembler() -> HeartRateLogAssembler:
    return HeartRateLogAssembler()


class TestHeaderAndData:
    """Test the packet-by-packet state machine."""

    def test_header_allocates_with_gap_markers(self, assembler):
        assembler.begin(date(2024, 1, 1))
        assert assembler.state == AssemblyState.AWAITING_HEADER

        assert assembler.feed(_header(2, 10)) is None

        assert assembler.state == AssemblyState.ACCUMULATING
        assert assembler.size == 2
        assert assembler.range == 10
        assert assembler.raw_heart_rates == [-1] * 26

    def test_first_data_packet(self, assembler):
        assembler.feed(_header(3))

        assert assembler.feed(_first(RATES_1)) is None

        assert assembler.timestamp == datetime.fromtimestamp(TIMESTAMP, tz=timezone.utc)
        assert assembler.raw_heart_rates[:9] == RATES_1
        assert assembler.index == 9

    def test_full_sequence(self, assembler):
        assembler.begin(date(2023, 3, 15))
        assembler.feed(_header(2, 10))
        assembler.feed(_first(RATES_1))

        log = assembler.feed(_data(2, RATES_2))

        assert isinstance(log, HeartRateLog)
        assert len(log.heart_rates) == SAMPLES_PER_DAY
        assert log.heart_rates[:22] == RATES_1 + RATES_2
        assert log.heart_rates[22:] == [0] * (SAMPLES_PER_DAY - 22)
        assert log.timestamp == datetime.fromtimestamp(TIMESTAMP, tz=timezone.utc)
        assert log.size == 2
        assert log.index == 22
        assert log.range == 10
        assert assembler.state == AssemblyState.IDLE
        assert assembler.raw_heart_rates == []

    def test_terminal_packet_is_size_minus_one(self, assembler):
        assembler.feed(_header(4))
        assembler.feed(_first(RATES_1))
        assert assembler.feed(_data(2, RATES_2)) is None

        log = assembler.feed(_data(3, RATES_2))

        assert log is not None
        assert log.index == 9 + 13 + 13
        assert log.heart_rates[:35] == RATES_1 + RATES_2 + RATES_2

    def test_single_data_packet_log(self, assembler):
        assembler.feed(_header(1))

        log = assembler.feed(_first(RATES_1))

        assert log is not None
        assert log.size == 1
        assert log.index == 9
        assert log.heart_rates[:9] == RATES_1

    def test_full_day_is_truncated(self, assembler):
        # 24 packets: 9 + 22 * 13 = 295 samples
        assembler.feed(_header(24))
        assembler.feed(_first([50] * 9))
        log = None
        for subtype in range(2, 24):
            log = assembler.feed(_data(subtype, [50] * 13))

        assert log is not None
        assert log.index == 295
        assert log.heart_rates == [50] * SAMPLES_PER_DAY

    def test_day_just_short_of_full_is_padded(self, assembler):
        # 23 packets: 9 + 21 * 13 = 282 samples in a 299-slot buffer
        assembler.feed(_header(23))
        assembler.feed(_first([55] * 9))
        log = None
        for subtype in range(2, 23):
            log = assembler.feed(_data(subtype, [55] * 13))

        assert log is not None
        assert log.index == 282
        assert len(log.heart_rates) == SAMPLES_PER_DAY
        assert log.heart_rates == [55] * 282 + [0] * 6

    def test_ignores_other_packets(self, assembler):
        assert assembler.feed(encode(3, bytes([80, 1]))) is None
        assert assembler.feed(bytes([21, 0, 2])) is None
        assert assembler.state == AssemblyState.IDLE


class TestTermination:
    """Test sentinel and error endings."""

    def test_no_data_with_target_day_yields_empty_log(self, assembler):
        assembler.begin(date(2024, 1, 15))

        log = assembler.feed(_data(255, []))

        assert log.size == 0
        assert log.index == 0
        assert log.heart_rates == []
        assert log.is_empty
        assert log.range == 5
        assert log.timestamp == datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert assembler.state == AssemblyState.IDLE

    def test_no_data_accepts_bad_checksum(self, assembler):
        assembler.begin(datetime(2024, 1, 15, 18, 30, tzinfo=timezone.utc))
        log = assembler.feed(bytes([21, 255] + [0] * 14))
        assert log.timestamp == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_no_data_without_target_day(self, assembler):
        with pytest.raises(NoDataError):
            assembler.feed(_data(255, []))
        assert assembler.state == AssemblyState.IDLE

    def test_missing_timestamp_is_incomplete(self, assembler):
        assembler.feed(_header(4))
        assembler.feed(_data(2, RATES_2))

        with pytest.raises(IncompleteReassemblyError, match="base timestamp"):
            assembler.feed(_data(3, RATES_2))
        assert assembler.state == AssemblyState.IDLE

    def test_today_fast_path(self, assembler):
        assembler.begin(date.today(), is_today=True)
        assembler.feed(_header(24))
        assembler.feed(_first(RATES_1))
        assembler.feed(_data(2, RATES_2))

        log = assembler.feed(_data(23, [0] * 13))

        assert log is not None
        assert log.index == 22
        assert log.heart_rates[:22] == RATES_1 + RATES_2

    def test_subtype_23_is_data_when_not_today(self, assembler):
        assembler.begin(date(2024, 1, 1))
        assembler.feed(_header(30))
        assembler.feed(_first(RATES_1))

        assert assembler.feed(_data(23, RATES_2)) is None
        assert assembler.index == 22


class TestSingleFlight:
    """Test that only one download runs at a time."""

    def test_begin_twice_is_rejected(self, assembler):
        assembler.begin(date(2024, 1, 1))
        with pytest.raises(PreconditionViolationError, match="already in progress"):
            assembler.begin(date(2024, 1, 2))

    def test_begin_allowed_after_reset(self, assembler):
        assembler.begin(date(2024, 1, 1))
        assembler.reset()
        assembler.begin(date(2024, 1, 2))
        assert assembler.state == AssemblyState.AWAITING_HEADER

    def test_begin_allowed_after_completion(self, assembler):
        assembler.begin(date(2024, 1, 1))
        assembler.feed(_data(255, []))
        assembler.begin(date(2024, 1, 2))
        assert assembler.is_active
