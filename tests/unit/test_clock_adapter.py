from datetime import UTC, datetime

from waypoint.adapters.clock import SystemClock


def test_system_clock():
    clock = SystemClock()
    now = clock.now_utc()
    assert isinstance(now, datetime)
    assert now.tzinfo is UTC
    # Sanity check: is it close to real now?
    real_now = datetime.now(UTC)
    diff = abs((real_now - now).total_seconds())
    assert diff < 1.0
