# careerlog/career_log.py
"""
Career log aggregator.

One instance per game session owns:
  - the period map (start UT -> LogPeriod), in insertion order
  - four append-only event logs: contracts, launches, facility constructions, techs
  - the persisted period pointers (CurPeriodStart / NextPeriodStart)

Host callbacks are routed to the ``on_*`` handlers through an EventHub. Every
mutating entry point accepts an optional CareerEventScope; an ignore scope or
a disabled log turns the call into a no-op.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import csv_export
from . import events as ev
from .config_node import ConfigNode
from .events import EventHub, Handler
from .host import PRELAUNCH, HostServices, best_effort, situation_name
from .records import (
    CONTRACT_FUNDS_REASONS,
    LAUNCH_FEE_REASONS,
    ConstructionState,
    ContractEvent,
    ContractEventType,
    FacilityConstructionEvent,
    LaunchEvent,
    LogPeriod,
    SpaceCenterFacility,
    TechResearchEvent,
    TransactionReason,
    coerce_enum,
    node_float,
)
from .scope import CareerEventScope, CareerEventType, scope_type, should_ignore
from .settings import CareerLogSettings
from .timeline import period_end
from .web_export import WebExporter

log = logging.getLogger("CareerLog")
log.addHandler(logging.NullHandler())


class CareerLog:
    def __init__(
        self,
        host: Optional[HostServices] = None,
        settings: Optional[CareerLogSettings] = None,
    ) -> None:
        self.host = host or HostServices()
        self.settings = settings or CareerLogSettings()
        self.enabled: bool = self.settings.enabled
        self.log_period_months: int = self.settings.log_period_months

        # persisted pointers
        self.cur_period_start: float = 0.0
        self.next_period_start: float = 0.0

        self._periods: Dict[float, LogPeriod] = {}
        self._contract_events: List[ContractEvent] = []
        self._launch_events: List[LaunchEvent] = []
        self._facility_events: List[FacilityConstructionEvent] = []
        self._tech_events: List[TechResearchEvent] = []

        self._current: Optional[LogPeriod] = None
        self._launched = False
        self._prev_funds_change_amount: float = 0.0
        self._prev_funds_change_reason: Optional[TransactionReason] = None

        self._hub: Optional[EventHub] = None
        self._subscriptions: List[Tuple[str, Handler]] = []
        self._events_bound = False

    # ----- read-only views ---------------------------------------------------

    @property
    def periods(self) -> List[LogPeriod]:
        return list(self._periods.values())

    @property
    def contract_events(self) -> List[ContractEvent]:
        return list(self._contract_events)

    @property
    def launch_events(self) -> List[LaunchEvent]:
        return list(self._launch_events)

    @property
    def facility_events(self) -> List[FacilityConstructionEvent]:
        return list(self._facility_events)

    @property
    def tech_events(self) -> List[TechResearchEvent]:
        return list(self._tech_events)

    def get_period(self, start_ut: float) -> Optional[LogPeriod]:
        return self._periods.get(start_ut)

    # ----- periods -----------------------------------------------------------

    @property
    def current_period(self) -> LogPeriod:
        """The period accepting mutations; rolls over first if the clock passed the boundary."""
        now = self._now()
        while now >= self.next_period_start:
            self._switch_to_next_period()

        if self._current is None:
            self._current = self.get_or_create_period(self.cur_period_start)
        return self._current

    def get_or_create_period(self, start_ut: float) -> LogPeriod:
        period = self._periods.get(start_ut)
        if period is None:
            period = LogPeriod(start_ut=start_ut, end_ut=period_end(start_ut, self.log_period_months))
            self._periods[start_ut] = period
        return period

    def _switch_to_next_period(self) -> None:
        closing = self._current or self.get_or_create_period(self.cur_period_start)
        self._snapshot(closing)

        self._current = self.get_or_create_period(self.next_period_start)
        self.cur_period_start = self.next_period_start
        self.next_period_start = self._current.end_ut
        log.debug("Switched to period %s-%s", self.cur_period_start, self.next_period_start)

    def _snapshot(self, period: LogPeriod) -> None:
        h = self.host
        period.current_funds = best_effort(h.funds, default=0.0, what="funds")
        period.current_sci = best_effort(h.science, default=0.0, what="science")
        period.vab_upgrades = best_effort(
            h.spent_upgrades, SpaceCenterFacility.VehicleAssemblyBuilding, default=0, what="VAB upgrades"
        )
        period.sph_upgrades = best_effort(
            h.spent_upgrades, SpaceCenterFacility.SpaceplaneHangar, default=0, what="SPH upgrades"
        )
        period.rnd_upgrades = best_effort(
            h.spent_upgrades, SpaceCenterFacility.ResearchAndDevelopment, default=0, what="RnD upgrades"
        )
        # the host reports -1 until the first science point is earned
        period.science_earned = max(0.0, best_effort(h.science_points_total, default=0.0, what="science total"))
        period.funds_gain_mult = best_effort(h.funds_gain_multiplier, default=1.0, what="funds gain multiplier")

    def _now(self) -> float:
        return best_effort(self.host.clock, default=self.cur_period_start, what="clock")

    def _ignored(self, scope: Optional[CareerEventScope]) -> bool:
        return should_ignore(scope) or not self.enabled

    # ----- funds -------------------------------------------------------------

    def on_currency_modified(self, query: Any, scope: Optional[CareerEventScope] = None) -> None:
        if self._ignored(scope):
            return
        delta = float(getattr(query, "funds", 0.0) or 0.0)
        if delta != 0.0:
            self.record_funds_change(delta, getattr(query, "reason", None), scope=scope)

    def record_funds_change(
        self,
        delta: float,
        reason: Any,
        scope: Optional[CareerEventScope] = None,
    ) -> None:
        if self._ignored(scope):
            return
        if not math.isfinite(delta):
            log.warning("Ignoring funds change of %r (%s)", delta, reason)
            return

        reason = coerce_enum(TransactionReason, reason, TransactionReason.NONE)
        self._prev_funds_change_amount = delta
        self._prev_funds_change_reason = reason

        period = self.current_period
        kind = scope_type(scope)

        if reason in CONTRACT_FUNDS_REASONS:
            period.contract_rewards += delta
        elif kind is CareerEventType.Maintenance:
            period.maintenance_fees -= delta
        elif kind is CareerEventType.Tooling:
            period.tooling_fees -= delta
        elif reason in LAUNCH_FEE_REASONS:
            period.launch_fees -= delta
        elif reason is TransactionReason.RnDPartPurchase:
            period.entry_costs -= delta
        elif delta > 0:
            period.other_funds_earned += delta
        else:
            period.other_fees -= delta

    # ----- contracts ---------------------------------------------------------

    def _internal_name(self, contract: Any) -> Optional[str]:
        return best_effort(self.host.contract_namer.internal_name, contract, default=None, what="contract name")

    def _append_contract(
        self,
        contract: Any,
        type_: ContractEventType,
        funds_change: float,
        rep_change: float,
        ut: Optional[float] = None,
        internal_name: Optional[str] = None,
    ) -> ContractEvent:
        entry = ContractEvent(
            ut=self._now() if ut is None else ut,
            type=type_,
            funds_change=_amount(funds_change),
            rep_change=_amount(rep_change),
            display_name=getattr(contract, "title", None),
            internal_name=internal_name if internal_name is not None else self._internal_name(contract),
        )
        self._contract_events.append(entry)
        return entry

    def on_contract_accepted(self, contract: Any, scope: Optional[CareerEventScope] = None) -> None:
        # Record contracts are auto-accepted; their acceptance is not a player decision.
        if self._ignored(scope) or getattr(contract, "auto_accept", False):
            return
        self._append_contract(contract, ContractEventType.Accept, getattr(contract, "funds_advance", 0.0), 0.0)

    def on_contract_completed(self, contract: Any, scope: Optional[CareerEventScope] = None) -> None:
        if self._ignored(scope):
            return
        self._append_contract(
            contract,
            ContractEventType.Complete,
            getattr(contract, "funds_completion", 0.0),
            getattr(contract, "reputation_completion", 0.0),
        )

    def on_contract_cancelled(self, contract: Any, scope: Optional[CareerEventScope] = None) -> None:
        if self._ignored(scope):
            return

        # The host charges the penalty first, then announces the cancellation.
        funds_change = 0.0
        if self._prev_funds_change_reason is TransactionReason.ContractPenalty:
            log.info("Found that %s was given as contract penalty", self._prev_funds_change_amount)
            funds_change = self._prev_funds_change_amount

        self._append_contract(contract, ContractEventType.Cancel, funds_change, 0.0)

    def on_contract_failed(self, contract: Any, scope: Optional[CareerEventScope] = None) -> None:
        if self._ignored(scope):
            return

        internal_name = self._internal_name(contract)
        ut = self._now()
        if any(e.ut == ut and e.internal_name == internal_name for e in self._contract_events):
            # Already recorded at this instant: the contract was cancelled, not failed.
            return

        self._append_contract(
            contract,
            ContractEventType.Fail,
            getattr(contract, "funds_failure", 0.0),
            getattr(contract, "reputation_failure", 0.0),
            ut=ut,
            internal_name=internal_name,
        )

    # ----- launches ----------------------------------------------------------

    def on_vessel_situation_change(
        self,
        vessel: Any,
        from_situation: Any,
        to_situation: Any = None,
        active_vessel: Any = None,
        scope: Optional[CareerEventScope] = None,
    ) -> None:
        if self._ignored(scope):
            return

        # Joint-rigidity fixes can put a vessel back into PRELAUNCH; only the first departure counts.
        if self._launched or situation_name(from_situation) != PRELAUNCH:
            return
        if active_vessel is None or vessel is not active_vessel:
            return

        name = getattr(active_vessel, "vessel_name", None)
        log.info("Launching %s", name)
        self._launched = True
        self._launch_events.append(LaunchEvent(ut=self._now(), vessel_name=name))

    # ----- tech & facilities -------------------------------------------------

    def add_tech_event(self, node_name: str, scope: Optional[CareerEventScope] = None) -> None:
        if self._ignored(scope):
            return
        self._tech_events.append(TechResearchEvent(ut=self._now(), node_name=node_name))

    def on_tech_completed(self, tech_node: Any, scope: Optional[CareerEventScope] = None) -> None:
        self.add_tech_event(getattr(tech_node, "tech_id", None), scope=scope)

    def add_facility_construction_event(
        self,
        facility: Any,
        new_level: int,
        cost: float,
        state: ConstructionState,
        scope: Optional[CareerEventScope] = None,
    ) -> None:
        if self._ignored(scope):
            return
        resolved = coerce_enum(SpaceCenterFacility, facility)
        if resolved is None:
            log.warning("Skipping construction event for unknown facility %r", facility)
            return
        self._facility_events.append(
            FacilityConstructionEvent(
                ut=self._now(),
                facility=resolved,
                new_level=int(new_level),
                cost=float(cost),
                state=coerce_enum(ConstructionState, state, ConstructionState.Started),
            )
        )

    def _on_facility_upgrade(self, upgrade: Any, state: ConstructionState, scope: Optional[CareerEventScope]) -> None:
        # Third-party facilities have no host facility type.
        facility = getattr(upgrade, "facility_type", None)
        if facility is None:
            return
        self.add_facility_construction_event(
            facility,
            getattr(upgrade, "upgrade_level", 0),
            getattr(upgrade, "cost", 0.0),
            state,
            scope=scope,
        )

    def on_facility_upgrade_queued(self, upgrade: Any, scope: Optional[CareerEventScope] = None) -> None:
        self._on_facility_upgrade(upgrade, ConstructionState.Started, scope)

    def on_facility_upgrade_completed(self, upgrade: Any, scope: Optional[CareerEventScope] = None) -> None:
        self._on_facility_upgrade(upgrade, ConstructionState.Completed, scope)

    # ----- settings & event binding ------------------------------------------

    def apply_settings(self, settings: Optional[CareerLogSettings] = None) -> None:
        if settings is not None:
            self.settings = settings
            self.log_period_months = settings.log_period_months
        self.enabled = self.settings.enabled
        if self.enabled and self._hub is not None and not self._events_bound:
            self._bind_gameplay_events(self._hub)

    def on_game_state_loaded(self, settings: Optional[CareerLogSettings] = None) -> None:
        self.apply_settings(settings)

    def on_settings_applied(self, settings: Optional[CareerLogSettings] = None) -> None:
        self.apply_settings(settings)

    def attach(self, hub: EventHub) -> None:
        """Start a host session: subscribe to lifecycle, tech and facility events."""
        if self._hub is not None:
            self.detach()
        self._hub = hub
        self._launched = False

        self._subscribe(hub, ev.GAME_STATE_LOADED, self.on_game_state_loaded)
        self._subscribe(hub, ev.SETTINGS_APPLIED, self.on_settings_applied)
        self._subscribe(hub, ev.TECH_COMPLETED, self.on_tech_completed)
        self._subscribe(hub, ev.FACILITY_UPGRADE_QUEUED, self.on_facility_upgrade_queued)
        self._subscribe(hub, ev.FACILITY_UPGRADE_COMPLETED, self.on_facility_upgrade_completed)

        if self.enabled:
            self._bind_gameplay_events(hub)

    def detach(self) -> None:
        if self._hub is None:
            return
        for name, handler in self._subscriptions:
            self._hub.unsubscribe(name, handler)
        self._subscriptions.clear()
        self._events_bound = False
        self._hub = None

    @property
    def events_bound(self) -> bool:
        return self._events_bound

    def _bind_gameplay_events(self, hub: EventHub) -> None:
        self._events_bound = True
        self._subscribe(hub, ev.VESSEL_SITUATION_CHANGED, self.on_vessel_situation_change)
        self._subscribe(hub, ev.CURRENCY_MODIFIED, self.on_currency_modified)
        self._subscribe(hub, ev.CONTRACT_ACCEPTED, self.on_contract_accepted)
        self._subscribe(hub, ev.CONTRACT_COMPLETED, self.on_contract_completed)
        self._subscribe(hub, ev.CONTRACT_FAILED, self.on_contract_failed)
        self._subscribe(hub, ev.CONTRACT_CANCELLED, self.on_contract_cancelled)

    def _subscribe(self, hub: EventHub, name: str, handler: Callable[..., Any]) -> None:
        hub.subscribe(name, handler)
        self._subscriptions.append((name, handler))

    # ----- persistence -------------------------------------------------------

    def load(self, node: ConfigNode) -> None:
        self.cur_period_start = node_float(node, "CurPeriodStart", self.cur_period_start)
        self.next_period_start = node_float(node, "NextPeriodStart", self.next_period_start)

        for section in node.get_nodes("LOGPERIODS"):
            for pn in section.get_nodes("LOGPERIOD"):
                period = LogPeriod.from_node(pn)
                if period.start_ut in self._periods:
                    log.error("LOGPERIOD for %s already exists, skipping...", period.start_ut)
                    continue
                self._periods[period.start_ut] = period

        for section in node.get_nodes("CONTRACTS"):
            self._contract_events.extend(ContractEvent.from_node(n) for n in section.get_nodes("CONTRACT"))

        for section in node.get_nodes("LAUNCHEVENTS"):
            self._launch_events.extend(LaunchEvent.from_node(n) for n in section.get_nodes("LAUNCHEVENT"))

        for section in node.get_nodes("FACILITYCONSTRUCTIONS"):
            self._facility_events.extend(
                FacilityConstructionEvent.from_node(n) for n in section.get_nodes("FACILITYCONSTRUCTION")
            )

        for section in node.get_nodes("TECHS"):
            self._tech_events.extend(TechResearchEvent.from_node(n) for n in section.get_nodes("TECH"))

        self._current = None

    def save(self, node: ConfigNode) -> None:
        node.set_value("CurPeriodStart", self.cur_period_start)
        node.set_value("NextPeriodStart", self.next_period_start)

        section = node.add_node("LOGPERIODS")
        for period in self._periods.values():
            period.save(section.add_node("LOGPERIOD"))

        section = node.add_node("CONTRACTS")
        for c in self._contract_events:
            c.save(section.add_node("CONTRACT"))

        section = node.add_node("LAUNCHEVENTS")
        for l in self._launch_events:
            l.save(section.add_node("LAUNCHEVENT"))

        section = node.add_node("FACILITYCONSTRUCTIONS")
        for fc in self._facility_events:
            fc.save(section.add_node("FACILITYCONSTRUCTION"))

        section = node.add_node("TECHS")
        for t in self._tech_events:
            t.save(section.add_node("TECH"))

    # ----- exports -----------------------------------------------------------

    def export_to_file(self, path: str) -> None:
        csv_export.export_to_file(self, path)

    def export_to_web(
        self,
        server_url: str,
        token: str,
        on_success: Callable[[], None],
        on_fail: Callable[[str], None],
    ) -> bool:
        exporter = WebExporter(career_uuid=self.settings.career_uuid, timeout=self.settings.timeout)
        return exporter.export(self, server_url, token, on_success, on_fail)


def _amount(value: Any) -> float:
    """Contract amounts as floats; missing or non-finite values count as 0."""
    amount = float(value or 0.0)
    return amount if math.isfinite(amount) else 0.0
