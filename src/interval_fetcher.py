"""
Paginated interval fetcher
Walks a date range in fixed windows so each request stays under the API's query span limit
"""
import time
import logging
from typing import Callable, Iterator, List, Tuple

from enphase_client import EnphaseAPIError, EnphaseClient
from enphase_intervals import ONE_DAY_IN_SECONDS, EnphaseEndpoint, Interval
from decider_settings import DEFAULT_MAX_QUERY_DAYS, DEFAULT_QUERY_DELAY

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when any window of a range fetch fails; no partial result is returned"""

    def __init__(self, endpoint: EnphaseEndpoint, window_start: int, window_end: int, message: str):
        super().__init__(
            f"Failed to fetch {endpoint.label} window [{window_start}, {window_end}): {message}"
        )
        self.endpoint = endpoint
        self.window_start = window_start
        self.window_end = window_end


def iter_windows(start_at: int, end_at: int, max_days: int = DEFAULT_MAX_QUERY_DAYS) -> Iterator[Tuple[int, int]]:
    """
    Yield (window_start, window_end) pairs covering [start_at, end_at)

    Each window starts where the previous one nominally ended, so a short
    final window never shifts the ones before it.
    """
    if max_days < 1:
        raise ValueError(f"max_days must be >= 1, got {max_days}")

    step = max_days * ONE_DAY_IN_SECONDS
    start = start_at
    while start < end_at:
        yield start, min(start + step, end_at)
        start += step


class IntervalFetcher:
    """Fetches a complete, ordered interval sequence for one endpoint over a date range"""

    def __init__(self, client: EnphaseClient, max_days: int = DEFAULT_MAX_QUERY_DAYS,
                 delay: float = DEFAULT_QUERY_DELAY, sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            client: Client used for each windowed request
            max_days: Window size in days
            delay: Seconds to wait between requests
            sleep: Blocking wait used for pacing
        """
        self.client = client
        self.max_days = max_days
        self.delay = delay
        self._sleep = sleep

    def fetch(self, endpoint: EnphaseEndpoint, start_at: int, end_at: int) -> List[Interval]:
        """
        Fetch every window of [start_at, end_at) for an endpoint

        Args:
            endpoint: Production or consumption
            start_at: Unix timestamp of the first day boundary
            end_at: Unix timestamp the range stops at (exclusive)

        Returns:
            All intervals, concatenated in window order
        """
        windows = list(iter_windows(start_at, end_at, self.max_days))
        logger.info(f"Fetching {endpoint.label} in {len(windows)} window(s) of up to {self.max_days} days")

        intervals: List[Interval] = []
        for index, (window_start, window_end) in enumerate(windows):
            try:
                intervals.extend(self.client.get_intervals(endpoint, window_start, window_end))
            except EnphaseAPIError as e:
                raise FetchError(endpoint, window_start, window_end, str(e)) from e

            if index + 1 < len(windows):
                days_to_go = (end_at - windows[index + 1][0]) // ONE_DAY_IN_SECONDS
                logger.info(f"{days_to_go} days of {endpoint.label} to go - next API call will be done shortly.")
                self._sleep(self.delay)

        logger.info(f"Fetched {len(intervals)} {endpoint.label} intervals in total")
        return intervals

    def fetch_production(self, start_at: int, end_at: int) -> List[Interval]:
        return self.fetch(EnphaseEndpoint.PRODUCTION, start_at, end_at)

    def fetch_consumption(self, start_at: int, end_at: int) -> List[Interval]:
        return self.fetch(EnphaseEndpoint.CONSUMPTION, start_at, end_at)
