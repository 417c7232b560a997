from __future__ import annotations

import asyncio

import pytest

from revenue_engine.workers.polling import RevenuePoller, next_tick


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


@pytest.mark.parametrize(
    ("scheduled", "now", "expected"),
    [
        (60.0, 50.0, 60.0),
        (60.0, 60.0, 60.0),
        (60.0, 90.0, 90.0),
        (60.0, 95.0, 120.0),
        (60.0, 151.0, 180.0),
    ],
)
def test_next_tick_skips_missed_slots(scheduled: float, now: float, expected: float) -> None:
    assert next_tick(scheduled, now, 30.0) == expected


def test_ticks_follow_fixed_schedule() -> None:
    clock = FakeClock()
    calls: list[float] = []
    poller = RevenuePoller(lambda: calls.append(clock.now), interval=30.0, sleep_fn=clock.sleep, clock=clock)

    asyncio.run(poller.run(iterations=3))

    assert calls == [30.0, 60.0, 90.0]
    assert clock.sleeps == [30.0, 30.0, 30.0]
    assert poller.ticks == 3


def test_slow_tick_does_not_stack() -> None:
    clock = FakeClock()
    calls: list[float] = []

    def slow_tick() -> None:
        calls.append(clock.now)
        clock.now += 45.0

    poller = RevenuePoller(slow_tick, interval=30.0, sleep_fn=clock.sleep, clock=clock)

    asyncio.run(poller.run(iterations=2))

    assert calls == [30.0, 90.0]
    assert clock.sleeps == [30.0, 15.0]


def test_failing_tick_keeps_polling(caplog: pytest.LogCaptureFixture) -> None:
    clock = FakeClock()
    attempts: list[int] = []

    def flaky() -> None:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("boom")

    poller = RevenuePoller(flaky, interval=30.0, sleep_fn=clock.sleep, clock=clock)

    with caplog.at_level("ERROR", logger="revenue_engine.workers.polling"):
        asyncio.run(poller.run(iterations=2))

    assert len(attempts) == 2
    assert "background refresh tick raised" in caplog.text


def test_start_and_stop_cancel_the_loop() -> None:
    clock = FakeClock()

    async def scenario() -> tuple[bool, bool]:
        poller = RevenuePoller(lambda: None, interval=30.0, clock=clock)
        poller.start()
        first = poller.start()
        started = poller.running and first is poller.start()
        await poller.stop()
        return started, poller.running

    started, running_after_stop = asyncio.run(scenario())

    assert started
    assert not running_after_stop


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RevenuePoller(lambda: None, interval=0)
