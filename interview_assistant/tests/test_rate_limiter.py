import asyncio

from interview_assistant.services.tools.rate_limiter import RequestThrottle


class FakeClock:
    """Monotonic clock that only moves when the throttle sleeps or a test advances it."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


def make_throttle(min_interval: float = 60.0):
    clock = FakeClock()
    return RequestThrottle(min_interval, clock=clock, sleep=clock.sleep), clock


def test_first_request_is_admitted_immediately():
    throttle, clock = make_throttle()

    asyncio.run(throttle.acquire())

    assert clock.sleeps == []
    assert throttle.last_request == 100.0


def test_second_request_waits_for_the_remaining_interval():
    throttle, clock = make_throttle()

    async def run():
        await throttle.acquire()
        clock.now += 45
        await throttle.acquire()

    asyncio.run(run())

    assert clock.sleeps == [15]
    assert throttle.last_request == 160.0


def test_no_wait_once_interval_has_passed():
    throttle, clock = make_throttle()

    async def run():
        await throttle.acquire()
        clock.now += 61
        await throttle.acquire()

    asyncio.run(run())

    assert clock.sleeps == []


def test_concurrent_callers_are_spaced_by_the_interval():
    throttle, clock = make_throttle()
    admissions = []

    async def caller():
        await throttle.acquire()
        admissions.append(clock())

    async def run():
        await asyncio.gather(*(caller() for _ in range(4)))

    asyncio.run(run())

    assert len(admissions) == 4
    gaps = [later - earlier for earlier, later in zip(admissions, admissions[1:])]
    assert all(gap >= 60 for gap in gaps)


def test_zero_interval_never_sleeps():
    throttle, clock = make_throttle(0)

    async def run():
        for _ in range(3):
            await throttle.acquire()

    asyncio.run(run())

    assert clock.sleeps == []
