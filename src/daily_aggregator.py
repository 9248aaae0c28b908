"""
Daily aggregation of interval energy
Buckets an ordered interval sequence into days counted from a start timestamp
"""
import logging
from typing import Callable, List, Sequence

from enphase_intervals import ONE_DAY_IN_SECONDS, Interval

logger = logging.getLogger(__name__)

Extractor = Callable[[Interval], int]
Combiner = Callable[[Interval, Interval], int]


class AlignmentError(ValueError):
    """Raised when production and consumption data cannot be compared interval by interval"""


def production_wh(interval: Interval) -> int:
    return interval.production_wh


def consumption_wh(interval: Interval) -> int:
    return interval.consumption_wh


def exported_wh(production: Interval, consumption: Interval) -> int:
    """Production left over after simultaneous consumption"""
    return max(0, production.production_wh - consumption.consumption_wh)


def imported_wh(production: Interval, consumption: Interval) -> int:
    """Consumption not covered by simultaneous production"""
    return max(0, consumption.consumption_wh - production.production_wh)


def _bucket_by_day(end_ats: Sequence[int], values: Sequence[int], start_at: int) -> List[int]:
    # A day closes only at an interval edge: the whole interval counts
    # towards the day its end_at is checked against.
    daily: List[int] = []
    next_day = start_at + ONE_DAY_IN_SECONDS
    current = 0
    for end_at, value in zip(end_ats, values):
        current += value
        if end_at >= next_day:
            daily.append(current)
            current = 0
            next_day += ONE_DAY_IN_SECONDS

    if current:
        logger.warning(f"Dropping {current} Wh after the last complete day ({len(daily)} days)")
    return daily


def daily_totals(intervals: Sequence[Interval], extractor: Extractor, start_at: int) -> List[int]:
    """
    Sum an extracted value per day

    Args:
        intervals: Time-ordered intervals
        extractor: Picks the value to sum from each interval
        start_at: Unix timestamp of the first day's start

    Returns:
        One total per completed day
    """
    return _bucket_by_day(
        [interval.end_at for interval in intervals],
        [extractor(interval) for interval in intervals],
        start_at,
    )


def check_alignment(production: Sequence[Interval], consumption: Sequence[Interval]) -> None:
    """Raise AlignmentError unless both sequences have the same length and interval boundaries"""
    if len(production) != len(consumption):
        raise AlignmentError(
            f"Production has {len(production)} intervals but consumption has {len(consumption)}"
        )
    for index, (p, c) in enumerate(zip(production, consumption)):
        if p.end_at != c.end_at:
            raise AlignmentError(
                f"Interval {index} ends at {p.end_at} for production but {c.end_at} for consumption"
            )


def daily_paired_totals(production: Sequence[Interval], consumption: Sequence[Interval],
                        combiner: Combiner, start_at: int) -> List[int]:
    """
    Sum a value combined from matching production and consumption intervals per day

    Args:
        production: Time-ordered production intervals
        consumption: Consumption intervals aligned with production
        combiner: Computes the value for one (production, consumption) pair
        start_at: Unix timestamp of the first day's start

    Returns:
        One total per completed day
    """
    check_alignment(production, consumption)
    return _bucket_by_day(
        [p.end_at for p in production],
        [combiner(p, c) for p, c in zip(production, consumption)],
        start_at,
    )


def daily_net(daily_production: Sequence[int], daily_consumption: Sequence[int]) -> List[int]:
    """Consumption minus production for each day"""
    if len(daily_production) != len(daily_consumption):
        raise AlignmentError(
            f"Got {len(daily_production)} production days but {len(daily_consumption)} consumption days"
        )
    return [c - p for p, c in zip(daily_production, daily_consumption)]
