"""
Enphase Interval Model
Typed view of the intervals returned by the v2 production and consumption stats endpoints
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

logger = logging.getLogger(__name__)

ONE_DAY_IN_SECONDS = 60 * 60 * 24


class EnphaseEndpoint(Enum):
    """Stats endpoints queried for a system, with the interval field each one reports"""

    PRODUCTION = ("production", "rgm_stats", "wh_del")
    CONSUMPTION = ("consumption", "consumption_stats", "enwh")

    def __init__(self, label: str, path: str, wh_field: str):
        self.label = label
        self.path = path
        self.wh_field = wh_field


@dataclass(frozen=True)
class Interval:
    """One reported time bucket. end_at is the inclusive end, in Unix seconds."""

    end_at: int
    production_wh: int = 0
    consumption_wh: int = 0


class IntervalParseError(ValueError):
    """Raised when an API payload does not contain a usable intervals array"""


def parse_intervals(payload: Dict, endpoint: EnphaseEndpoint) -> List[Interval]:
    """
    Convert one stats response into Interval objects

    Args:
        payload: Decoded JSON body of a stats response
        endpoint: Endpoint the payload came from, selects wh_del or enwh

    Returns:
        Intervals in the order the API returned them
    """
    if not isinstance(payload, dict):
        raise IntervalParseError(f"Expected a JSON object, got {type(payload).__name__}")

    raw_intervals = payload.get("intervals")
    if raw_intervals is None:
        # The API omits the array when a window has no data at all
        logger.debug(f"No intervals key in {endpoint.label} response")
        return []
    if not isinstance(raw_intervals, list):
        raise IntervalParseError(f"'intervals' must be a list, got {type(raw_intervals).__name__}")

    intervals = []
    for raw in raw_intervals:
        try:
            end_at = int(raw["end_at"])
            wh = int(raw.get(endpoint.wh_field, 0) or 0)
        except (KeyError, TypeError, ValueError) as e:
            raise IntervalParseError(f"Malformed {endpoint.label} interval {raw!r}: {e}") from e
        if wh < 0:
            raise IntervalParseError(f"Negative {endpoint.wh_field} in {endpoint.label} interval {raw!r}")

        if endpoint is EnphaseEndpoint.PRODUCTION:
            intervals.append(Interval(end_at=end_at, production_wh=wh))
        else:
            intervals.append(Interval(end_at=end_at, consumption_wh=wh))

    return intervals
