# careerlog/csv_export.py
"""
CSV exporter: one row per period, in period insertion order.

Columns (locked):
  Month, VAB, SPH, RnD, Current Funds, Current Sci, Total sci earned,
  Contract advances, Contract rewards, Contract penalties, Other funds earned,
  Launch fees, Maintenance, Tooling, Entry Costs, Facility construction costs,
  Other Fees, Launches, Accepted contracts, Completed contracts, Tech, Facilities

Currency columns carry no decimals, science columns one; list columns are
joined with ", ".
"""
from __future__ import annotations

import csv
import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Iterable, Iterator, List

from .aggregates import aggregate_period
from .errors import ExportError
from .records import ContractEventType, LogPeriod
from .timeline import month_label

log = logging.getLogger("CareerLog.Export")
log.addHandler(logging.NullHandler())

COLUMNS: List[str] = [
    "Month",
    "VAB",
    "SPH",
    "RnD",
    "Current Funds",
    "Current Sci",
    "Total sci earned",
    "Contract advances",
    "Contract rewards",
    "Contract penalties",
    "Other funds earned",
    "Launch fees",
    "Maintenance",
    "Tooling",
    "Entry Costs",
    "Facility construction costs",
    "Other Fees",
    "Launches",
    "Accepted contracts",
    "Completed contracts",
    "Tech",
    "Facilities",
]


def format_number(value: float, digits: int) -> str:
    """Fixed-point with half-away-from-zero rounding; never renders ``-0``."""
    if not math.isfinite(value):
        raise ExportError(f"cannot write {value!r} to the CSV")
    quantum = Decimal(1).scaleb(-digits)
    d = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    if d == 0:
        d = abs(d)
    return f"{d:.{digits}f}"


def _f0(value: float) -> str:
    return format_number(value, 0)


def _f1(value: float) -> str:
    return format_number(value, 1)


def _join(items: Iterable[Any]) -> str:
    return ", ".join("" if i is None else str(i) for i in items)


def build_row(career_log: Any, period: LogPeriod) -> List[str]:
    agg = aggregate_period(career_log, period)
    contracts = [c for c in career_log.contract_events if c.is_in_period(period)]
    return [
        month_label(period.start_ut),
        str(period.vab_upgrades),
        str(period.sph_upgrades),
        str(period.rnd_upgrades),
        _f0(period.current_funds),
        _f1(period.current_sci),
        _f1(period.science_earned),
        _f0(agg.advance_funds),
        _f0(agg.reward_funds),
        _f0(agg.failure_funds),
        _f0(period.other_funds_earned),
        _f0(period.launch_fees),
        _f0(period.maintenance_fees),
        _f0(period.tooling_fees),
        _f0(period.entry_costs),
        _f0(agg.construction_fees),
        _f0(period.other_fees - agg.construction_fees),
        _join(l.vessel_name for l in career_log.launch_events if l.is_in_period(period)),
        _join(c.display_name for c in contracts if c.type is ContractEventType.Accept),
        _join(c.display_name for c in contracts if c.type is ContractEventType.Complete),
        _join(t.node_name for t in career_log.tech_events if t.is_in_period(period)),
        _join(f.describe() for f in career_log.facility_events if f.is_in_period(period)),
    ]


def build_csv_rows(career_log: Any) -> Iterator[List[str]]:
    for period in career_log.periods:
        yield build_row(career_log, period)


def export_to_file(career_log: Any, path: str | Path) -> Path:
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(COLUMNS)
            count = 0
            for row in build_csv_rows(career_log):
                w.writerow(row)
                count += 1
    except OSError as exc:
        raise ExportError(f"Cannot write career log CSV to {p}: {exc}") from exc
    log.info("Exported %d periods to %s", count, p)
    return p
