# careerlog/scope.py
"""
Career event scope tokens.

Callers that move funds on behalf of a specific activity (maintenance
payments, tooling purchases) or that perform programmatic transactions that
must not be logged pass a scope token into the mutating call:

    log.record_funds_change(-5000, TransactionReason.Other, scope=CareerEventScope.maintenance())
    log.record_funds_change(+1e6, TransactionReason.Cheating, scope=CareerEventScope.ignored())
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CareerEventType(Enum):
    Maintenance = "Maintenance"
    Tooling = "Tooling"


@dataclass(frozen=True)
class CareerEventScope:
    event_type: Optional[CareerEventType] = None
    ignore: bool = False

    @classmethod
    def ignored(cls) -> "CareerEventScope":
        return cls(ignore=True)

    @classmethod
    def maintenance(cls) -> "CareerEventScope":
        return cls(event_type=CareerEventType.Maintenance)

    @classmethod
    def tooling(cls) -> "CareerEventScope":
        return cls(event_type=CareerEventType.Tooling)


def should_ignore(scope: Optional[CareerEventScope]) -> bool:
    return scope is not None and scope.ignore


def scope_type(scope: Optional[CareerEventScope]) -> Optional[CareerEventType]:
    return scope.event_type if scope is not None else None
