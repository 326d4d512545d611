"""Collaborator interfaces the career log consumes from the host game."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from .records import SpaceCenterFacility

log = logging.getLogger("CareerLog.Host")
log.addHandler(logging.NullHandler())

T = TypeVar("T")

PRELAUNCH = "PRELAUNCH"


@runtime_checkable
class ContractNamer(Protocol):
    """Resolves the stable internal identifier of a host contract."""

    def internal_name(self, contract: Any) -> str:
        """Return the contract type name used to correlate contract events."""


class AttributeContractNamer:
    """Reads ``contract.internal_name``; falls back to the contract's class name."""

    def __init__(self, attribute: str = "internal_name") -> None:
        self.attribute = attribute

    def internal_name(self, contract: Any) -> str:
        value = getattr(contract, self.attribute, None)
        if value:
            return str(value)
        return type(contract).__name__


def _zero() -> float:
    return 0.0


def _no_upgrades(facility: SpaceCenterFacility) -> int:
    return 0


def _unit_multiplier() -> float:
    return 1.0


@dataclass
class HostServices:
    """
    Bundle of host queries. Every member is a plain callable so an embedding
    environment can wire lambdas or bound methods; the defaults describe a
    detached host (clock at 0, empty treasury), which is what offline tools
    loading a save use.
    """

    clock: Callable[[], float] = _zero
    funds: Callable[[], float] = _zero
    science: Callable[[], float] = _zero
    spent_upgrades: Callable[[SpaceCenterFacility], int] = _no_upgrades
    science_points_total: Callable[[], float] = _zero
    funds_gain_multiplier: Callable[[], float] = _unit_multiplier
    contract_namer: ContractNamer = field(default_factory=AttributeContractNamer)


def best_effort(query: Callable[..., T], *args: Any, default: T, what: str = "") -> T:
    """
    Run a host query; on failure log the exception and return ``default``.
    A NaN or infinite float counts as a failed query.
    """
    name = what or getattr(query, "__name__", query)
    try:
        result = query(*args)
    except Exception:
        log.exception("Host query %s failed; using %r", name, default)
        return default
    if isinstance(result, float) and not math.isfinite(result):
        log.warning("Host query %s returned %r; using %r", name, result, default)
        return default
    return result


def situation_name(situation: Any) -> str:
    """Normalize a vessel situation given as enum, name or string."""
    name = getattr(situation, "name", situation)
    return str(name).upper() if name is not None else ""


@dataclass
class CurrencyModifierQuery:
    """Payload of a host currency change; only the funds component is logged."""

    reason: Any = None
    funds: float = 0.0
    science: float = 0.0
    reputation: float = 0.0
