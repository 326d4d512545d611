# careerlog/records.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from .config_node import ConfigNode
from .timeline import iso_date

E = TypeVar("E", bound=Enum)


# --------------------------
# Enums
# --------------------------

class ContractEventType(Enum):
    Accept = "Accept"
    Complete = "Complete"
    Fail = "Fail"
    Cancel = "Cancel"


class ConstructionState(Enum):
    Started = "Started"
    Completed = "Completed"


class SpaceCenterFacility(Enum):
    Administration = "Administration"
    AstronautComplex = "AstronautComplex"
    LaunchPad = "LaunchPad"
    MissionControl = "MissionControl"
    ResearchAndDevelopment = "ResearchAndDevelopment"
    Runway = "Runway"
    SpaceplaneHangar = "SpaceplaneHangar"
    TrackingStation = "TrackingStation"
    VehicleAssemblyBuilding = "VehicleAssemblyBuilding"


class TransactionReason(Enum):
    """Host reason codes attached to a funds change (only a subset drives classification)."""
    NONE = "None"
    ContractAdvance = "ContractAdvance"
    ContractReward = "ContractReward"
    ContractPenalty = "ContractPenalty"
    ContractDecline = "ContractDecline"
    VesselRollout = "VesselRollout"
    VesselRecovery = "VesselRecovery"
    VesselLoss = "VesselLoss"
    RnDPartPurchase = "RnDPartPurchase"
    RnDTechResearch = "RnDTechResearch"
    StructureConstruction = "StructureConstruction"
    StructureRepair = "StructureRepair"
    StructureCollapse = "StructureCollapse"
    StrategyInput = "StrategyInput"
    StrategyOutput = "StrategyOutput"
    StrategySetup = "StrategySetup"
    CrewRecruited = "CrewRecruited"
    Progression = "Progression"
    Cheating = "Cheating"
    Other = "Other"


CONTRACT_FUNDS_REASONS = frozenset({
    TransactionReason.ContractPenalty,
    TransactionReason.ContractDecline,
    TransactionReason.ContractAdvance,
    TransactionReason.ContractReward,
})

LAUNCH_FEE_REASONS = frozenset({
    TransactionReason.VesselRollout,
    TransactionReason.VesselRecovery,
})


def coerce_enum(enum_cls: Type[E], value: Any, default: Optional[E] = None) -> Optional[E]:
    """Accept an enum member, its value, or its name; ``default`` otherwise."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, Enum):
        value = value.name
    if value is None:
        return default
    text = str(value).strip()
    try:
        return enum_cls(text)
    except ValueError:
        pass
    try:
        return enum_cls[text]
    except KeyError:
        return default


# --------------------------
# Node helpers
# --------------------------

def node_float(node: ConfigNode, key: str, default: float = 0.0) -> float:
    raw = node.get_value(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int(node: ConfigNode, key: str, default: int = 0) -> int:
    raw = node.get_value(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        try:
            return int(float(raw))
        except ValueError:
            return default


def _str(node: ConfigNode, key: str) -> Optional[str]:
    raw = node.get_value(key)
    return raw if raw not in (None, "") else None


# --------------------------
# Periods
# --------------------------

@dataclass
class LogPeriod:
    start_ut: float
    end_ut: float
    # point-in-time snapshots, taken when the period is closed
    current_funds: float = 0.0
    current_sci: float = 0.0
    science_earned: float = 0.0
    vab_upgrades: int = 0
    sph_upgrades: int = 0
    rnd_upgrades: int = 0
    funds_gain_mult: float = 1.0
    # running totals; fees are positive magnitudes
    contract_rewards: float = 0.0
    maintenance_fees: float = 0.0
    tooling_fees: float = 0.0
    launch_fees: float = 0.0
    entry_costs: float = 0.0
    other_funds_earned: float = 0.0
    other_fees: float = 0.0

    def net_funds_change(self) -> float:
        return (
            self.contract_rewards
            + self.other_funds_earned
            - self.maintenance_fees
            - self.tooling_fees
            - self.launch_fees
            - self.entry_costs
            - self.other_fees
        )

    def contains(self, ut: float) -> bool:
        return self.start_ut <= ut < self.end_ut

    def save(self, node: ConfigNode) -> None:
        node.add_value("StartUT", self.start_ut)
        node.add_value("EndUT", self.end_ut)
        node.add_value("CurrentFunds", self.current_funds)
        node.add_value("CurrentSci", self.current_sci)
        node.add_value("ScienceEarned", self.science_earned)
        node.add_value("VABUpgrades", self.vab_upgrades)
        node.add_value("SPHUpgrades", self.sph_upgrades)
        node.add_value("RnDUpgrades", self.rnd_upgrades)
        node.add_value("ContractRewards", self.contract_rewards)
        node.add_value("MaintenanceFees", self.maintenance_fees)
        node.add_value("ToolingFees", self.tooling_fees)
        node.add_value("LaunchFees", self.launch_fees)
        node.add_value("EntryCosts", self.entry_costs)
        node.add_value("OtherFundsEarned", self.other_funds_earned)
        node.add_value("OtherFees", self.other_fees)
        node.add_value("FundsGainMult", self.funds_gain_mult)

    @classmethod
    def from_node(cls, node: ConfigNode) -> "LogPeriod":
        return cls(
            start_ut=node_float(node, "StartUT"),
            end_ut=node_float(node, "EndUT"),
            current_funds=node_float(node, "CurrentFunds"),
            current_sci=node_float(node, "CurrentSci"),
            science_earned=node_float(node, "ScienceEarned"),
            vab_upgrades=_int(node, "VABUpgrades"),
            sph_upgrades=_int(node, "SPHUpgrades"),
            rnd_upgrades=_int(node, "RnDUpgrades"),
            funds_gain_mult=node_float(node, "FundsGainMult", 1.0),
            contract_rewards=node_float(node, "ContractRewards"),
            maintenance_fees=node_float(node, "MaintenanceFees"),
            tooling_fees=node_float(node, "ToolingFees"),
            launch_fees=node_float(node, "LaunchFees"),
            entry_costs=node_float(node, "EntryCosts"),
            other_funds_earned=node_float(node, "OtherFundsEarned"),
            other_fees=node_float(node, "OtherFees"),
        )


# --------------------------
# Event log entries
# --------------------------

@dataclass
class CareerEvent:
    ut: float

    def is_in_period(self, period: LogPeriod) -> bool:
        return period.contains(self.ut)

    def save(self, node: ConfigNode) -> None:
        node.add_value("UT", self.ut)


@dataclass
class ContractEvent(CareerEvent):
    type: ContractEventType = ContractEventType.Accept
    funds_change: float = 0.0
    rep_change: float = 0.0
    display_name: Optional[str] = None
    internal_name: Optional[str] = None

    def save(self, node: ConfigNode) -> None:
        super().save(node)
        node.add_value("Type", self.type.value)
        node.add_value("FundsChange", self.funds_change)
        node.add_value("RepChange", self.rep_change)
        node.add_value("DisplayName", self.display_name)
        node.add_value("InternalName", self.internal_name)

    @classmethod
    def from_node(cls, node: ConfigNode) -> "ContractEvent":
        return cls(
            ut=node_float(node, "UT"),
            type=coerce_enum(ContractEventType, node.get_value("Type"), ContractEventType.Accept),
            funds_change=node_float(node, "FundsChange"),
            rep_change=node_float(node, "RepChange"),
            display_name=_str(node, "DisplayName"),
            internal_name=_str(node, "InternalName"),
        )

    def to_dto(self, career_uuid: str) -> Dict[str, Any]:
        return {
            "careerUuid": career_uuid,
            "date": iso_date(self.ut),
            "type": self.type.value,
            "fundsChange": self.funds_change,
            "repChange": self.rep_change,
            "name": self.display_name or "",
            "internalName": self.internal_name or "",
        }


@dataclass
class LaunchEvent(CareerEvent):
    vessel_name: Optional[str] = None

    def save(self, node: ConfigNode) -> None:
        super().save(node)
        node.add_value("VesselName", self.vessel_name)

    @classmethod
    def from_node(cls, node: ConfigNode) -> "LaunchEvent":
        return cls(ut=node_float(node, "UT"), vessel_name=_str(node, "VesselName"))

    def to_dto(self, career_uuid: str) -> Dict[str, Any]:
        return {
            "careerUuid": career_uuid,
            "date": iso_date(self.ut),
            "vesselName": self.vessel_name or "",
        }


@dataclass
class FacilityConstructionEvent(CareerEvent):
    facility: SpaceCenterFacility = SpaceCenterFacility.VehicleAssemblyBuilding
    new_level: int = 0
    cost: float = 0.0
    state: ConstructionState = ConstructionState.Started

    def describe(self) -> str:
        # Levels are zero-based in the host; players count from 1.
        return f"{self.facility.value} ({self.new_level + 1}) - {self.state.value}"

    def save(self, node: ConfigNode) -> None:
        super().save(node)
        node.add_value("Facility", self.facility.value)
        node.add_value("NewLevel", self.new_level)
        node.add_value("Cost", self.cost)
        node.add_value("State", self.state.value)

    @classmethod
    def from_node(cls, node: ConfigNode) -> "FacilityConstructionEvent":
        return cls(
            ut=node_float(node, "UT"),
            facility=coerce_enum(
                SpaceCenterFacility, node.get_value("Facility"), SpaceCenterFacility.VehicleAssemblyBuilding
            ),
            new_level=_int(node, "NewLevel"),
            cost=node_float(node, "Cost"),
            state=coerce_enum(ConstructionState, node.get_value("State"), ConstructionState.Started),
        )

    def to_dto(self, career_uuid: str) -> Dict[str, Any]:
        return {
            "careerUuid": career_uuid,
            "date": iso_date(self.ut),
            "facility": self.facility.value,
            "newLevel": self.new_level,
            "cost": self.cost,
            "state": self.state.value,
        }


@dataclass
class TechResearchEvent(CareerEvent):
    node_name: Optional[str] = None

    def save(self, node: ConfigNode) -> None:
        super().save(node)
        node.add_value("NodeName", self.node_name)

    @classmethod
    def from_node(cls, node: ConfigNode) -> "TechResearchEvent":
        return cls(ut=node_float(node, "UT"), node_name=_str(node, "NodeName"))

    def to_dto(self, career_uuid: str) -> Dict[str, Any]:
        return {
            "careerUuid": career_uuid,
            "date": iso_date(self.ut),
            "nodeName": self.node_name or "",
        }
