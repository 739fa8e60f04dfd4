from django.utils import timezone


class SystemClock:
    """Wall clock in whole POSIX seconds."""

    def __call__(self):
        return int(timezone.now().timestamp())


class FixedClock:
    """
    A clock that only moves when told to.
    Used by tests and by anything replaying a known timeline.
    """

    def __init__(self, now=0):
        self.now = int(now)

    def __call__(self):
        return self.now

    def advance(self, seconds=0, hours=0):
        self.now += int(seconds) + int(hours) * 3600
        return self.now
