import pytest

from autopoweroff.watchdog.timer import WatchdogTimer


def test_timer_starts_full():
    timer = WatchdogTimer(grace_ticks=60)
    assert timer.remaining == 60
    assert timer.is_full is True
    assert timer.expired is False
    assert timer.grace_period == 60.0


def test_decrement_floors_at_zero():
    timer = WatchdogTimer(grace_ticks=2)
    assert timer.decrement() == 1
    assert timer.decrement() == 0
    assert timer.decrement() == 0
    assert timer.expired is True


def test_reset_refills():
    timer = WatchdogTimer(grace_ticks=5, tick_interval=0.5)
    timer.decrement()
    timer.decrement()
    assert timer.remaining_seconds == 1.5
    assert timer.reset() == 5
    assert timer.is_full is True


@pytest.mark.parametrize("grace, tick, ticks", [
    (60, 1, 60),
    (0.3, 0.1, 3),
    (3, 0.1, 30),
    (10, 3, 4),
    (0.5, 1, 1),
])
def test_from_seconds(grace, tick, ticks):
    assert WatchdogTimer.from_seconds(grace, tick).grace_ticks == ticks


@pytest.mark.parametrize("kwargs", [
    {"grace_ticks": 0},
    {"grace_ticks": 3, "tick_interval": 0},
])
def test_invalid_timer(kwargs):
    with pytest.raises(ValueError):
        WatchdogTimer(**kwargs)
