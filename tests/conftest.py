import pytest

from enphase_intervals import Interval

START = 1704067200  # 2024-01-01T00:00:00Z
DAY = 86400
HALF_DAY = DAY // 2


class FakeClient:
    """Stands in for EnphaseClient; returns canned intervals and records each window"""

    def __init__(self, intervals_by_window=None, fail_on_call=None, error=None):
        self.intervals_by_window = intervals_by_window or {}
        self.fail_on_call = fail_on_call
        self.error = error
        self.calls = []

    def get_intervals(self, endpoint, start_at, end_at):
        self.calls.append((endpoint, start_at, end_at))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise self.error
        return list(self.intervals_by_window.get((endpoint, start_at, end_at), []))


@pytest.fixture
def two_day_production():
    # Day 1: 5000 Wh, day 2: 2000 Wh, two half-day intervals each
    return [
        Interval(end_at=START + HALF_DAY, production_wh=2500),
        Interval(end_at=START + DAY, production_wh=2500),
        Interval(end_at=START + DAY + HALF_DAY, production_wh=1000),
        Interval(end_at=START + 2 * DAY, production_wh=1000),
    ]


@pytest.fixture
def two_day_consumption():
    # Day 1: 3000 Wh, day 2: 4000 Wh
    return [
        Interval(end_at=START + HALF_DAY, consumption_wh=1500),
        Interval(end_at=START + DAY, consumption_wh=1500),
        Interval(end_at=START + DAY + HALF_DAY, consumption_wh=2000),
        Interval(end_at=START + 2 * DAY, consumption_wh=2000),
    ]
