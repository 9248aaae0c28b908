"""
Battery sizing statistics
Averages the daily series and renders the summary shown to the user
"""
import logging
from dataclasses import dataclass
from typing import List, Sequence

from daily_aggregator import AlignmentError

logger = logging.getLogger(__name__)

RULE = "=" * 46

TIP = (
    "Tip: Although there are other factors to consider, you can compare\n"
    "your average daily imported to average daily exported above to gauge\n"
    "the size of battery you could add to reduce your imports.\n"
    "A battery with a size similar to your average daily exported energy\n"
    "would allow you to import that much less energy from the grid."
)


class EmptyRangeError(ZeroDivisionError):
    """Raised when there is no complete day to average"""


def average(values: Sequence[int]) -> int:
    """
    Arithmetic mean rounded to the nearest integer, halves away from zero

    Raises:
        EmptyRangeError: values is empty
    """
    if not values:
        raise EmptyRangeError("Cannot average an empty series: no complete day of data in range")

    total = sum(values)
    count = len(values)
    # Integer arithmetic so large Wh totals never lose precision
    rounded = (2 * abs(total) + count) // (2 * count)
    return rounded if total >= 0 else -rounded


@dataclass(frozen=True)
class BatteryReport:
    days: int
    average_production_wh: int
    average_consumption_wh: int
    average_net_wh: int
    average_exported_wh: int
    average_imported_wh: int


def build_report(production: Sequence[int], consumption: Sequence[int], net: Sequence[int],
                 exported: Sequence[int], imported: Sequence[int]) -> BatteryReport:
    """
    Average each daily series into a report

    Args:
        production: Daily production Wh
        consumption: Daily consumption Wh
        net: Daily consumption minus production
        exported: Daily exported Wh
        imported: Daily imported Wh
    """
    lengths = {len(series) for series in (production, consumption, net, exported, imported)}
    if len(lengths) > 1:
        raise AlignmentError(f"Daily series differ in length: {sorted(lengths)}")

    report = BatteryReport(
        days=len(production),
        average_production_wh=average(production),
        average_consumption_wh=average(consumption),
        average_net_wh=average(net),
        average_exported_wh=average(exported),
        average_imported_wh=average(imported),
    )
    logger.info(f"Averaged {report.days} days of data")
    return report


def format_report(report: BatteryReport) -> str:
    lines: List[str] = [
        RULE,
        f"Days averaged:                  {report.days}",
        f"Average daily production (wh):  {report.average_production_wh}",
        f"Average daily consumption (wh): {report.average_consumption_wh}",
        f"Average daily net energy (wh):  {report.average_net_wh}",
        f"Average daily exported (wh):    {report.average_exported_wh}",
        f"Average daily imported (wh):    {report.average_imported_wh}",
        RULE,
        "",
        TIP,
    ]
    return "\n".join(lines)
