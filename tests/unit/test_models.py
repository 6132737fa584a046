"""Test model enums and conversions."""

from datetime import datetime, timedelta, timezone

from colmi_ring.models import (
    SAMPLES_PER_DAY,
    AssemblyState,
    HeartRateLog,
    RealTimeAction,
    RealTimeReading,
    SportDetail,
    normalize_heart_rates,
)


class TestRealTimeReading:
    """Test RealTimeReading enum."""

    def test_real_time_reading_values(self):
        assert RealTimeReading.HEART_RATE == 1
        assert RealTimeReading.BLOOD_PRESSURE == 2
        assert RealTimeReading.SPO2 == 3
        assert RealTimeReading.FATIGUE == 4
        assert RealTimeReading.HEALTH_CHECK == 5
        assert RealTimeReading.ECG == 7
        assert RealTimeReading.PRESSURE == 8
        assert RealTimeReading.BLOOD_SUGAR == 9
        assert RealTimeReading.HRV == 10

    def test_real_time_reading_from_int(self):
        assert RealTimeReading(3) is RealTimeReading.SPO2
        assert RealTimeReading(3).name == "SPO2"


class TestRealTimeAction:
    """Test RealTimeAction enum."""

    def test_real_time_action_values(self):
        assert RealTimeAction.START == 1
        assert RealTimeAction.PAUSE == 2
        assert RealTimeAction.CONTINUE == 3
        assert RealTimeAction.STOP == 4


class TestAssemblyState:

    def test_assembly_state_values(self):
        assert AssemblyState.IDLE == 0
        assert AssemblyState.AWAITING_HEADER == 1
        assert AssemblyState.ACCUMULATING == 2


class TestHeartRateLog:
    """Test heart-rate log helpers."""

    def test_normalize_pads_with_zeros(self):
        samples = normalize_heart_rates([60, 61])
        assert len(samples) == SAMPLES_PER_DAY
        assert samples[:3] == [60, 61, 0]

    def test_normalize_truncates(self):
        assert normalize_heart_rates([70] * 300) == [70] * SAMPLES_PER_DAY

    def test_normalize_exact_day_unchanged(self):
        samples = list(range(SAMPLES_PER_DAY))
        assert normalize_heart_rates(samples) == samples

    def test_heart_rates_with_times(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        log = HeartRateLog(heart_rates=[60, 0, 72], timestamp=start, size=1, index=3, range=10)

        pairs = log.heart_rates_with_times()

        assert pairs == [
            (60, start),
            (0, start + timedelta(minutes=10)),
            (72, start + timedelta(minutes=20)),
        ]

    def test_heart_rates_with_times_without_timestamp(self):
        assert HeartRateLog(heart_rates=[60]).heart_rates_with_times() == []

    def test_empty_log(self):
        log = HeartRateLog()
        assert log.is_empty
        assert log.range == 5


class TestSportDetail:

    def test_timestamp_uses_quarter_hours(self):
        detail = SportDetail(
            year=2024, month=7, day=15, time_index=40, calories=100, steps=200, distance=300
        )
        assert detail.timestamp == datetime(2024, 7, 15, 10, 0, tzinfo=timezone.utc)
