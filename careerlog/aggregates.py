# careerlog/aggregates.py
"""Per-period figures derived from the event logs (shared by both exporters)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .records import ConstructionState, ContractEvent, ContractEventType, LogPeriod

_FAILURE_TYPES = {ContractEventType.Cancel, ContractEventType.Fail}


@dataclass(frozen=True)
class PeriodAggregates:
    advance_funds: float
    reward_funds: float
    failure_funds: float
    construction_fees: float


def _contract_sum(events: Iterable[ContractEvent], period: LogPeriod, types: Any) -> float:
    return sum(e.funds_change for e in events if e.type in types and e.is_in_period(period))


def aggregate_period(career_log: Any, period: LogPeriod) -> PeriodAggregates:
    contracts = career_log.contract_events
    # Penalties are stored as negative deltas; report them as a positive amount.
    failure = -_contract_sum(contracts, period, _FAILURE_TYPES)
    construction = sum(
        f.cost
        for f in career_log.facility_events
        if f.state is ConstructionState.Started and f.is_in_period(period)
    )
    return PeriodAggregates(
        advance_funds=_contract_sum(contracts, period, {ContractEventType.Accept}),
        reward_funds=_contract_sum(contracts, period, {ContractEventType.Complete}),
        failure_funds=failure or 0.0,
        construction_fees=construction,
    )
