# careerlog/__init__.py
"""
Career log - period telemetry for a career-mode flight simulation.

Buckets host gameplay events (funds changes, contracts, launches, facility
construction, tech research) into calendar periods and exports them to CSV
or to a remote server as JSON.
"""

__version__ = "1.0.0"

from .career_log import CareerLog
from .config_node import ConfigNode
from .csv_export import COLUMNS as CSV_COLUMNS, build_csv_rows, export_to_file
from .errors import CareerLogError, ConfigNodeParseError, ExportError, SettingsError
from .events import EventHub
from .host import AttributeContractNamer, ContractNamer, CurrencyModifierQuery, HostServices
from .records import (
    ConstructionState,
    ContractEvent,
    ContractEventType,
    FacilityConstructionEvent,
    LaunchEvent,
    LogPeriod,
    SpaceCenterFacility,
    TechResearchEvent,
    TransactionReason,
)
from .savefile import load_save_file, write_save_file
from .scope import CareerEventScope, CareerEventType
from .settings import CareerLogSettings, load_settings
from .timeline import ut_to_date
from .web_export import WebExporter, build_payload

__all__ = [
    "CareerLog",
    "ConfigNode",
    "EventHub",
    "HostServices",
    "ContractNamer",
    "AttributeContractNamer",
    "CurrencyModifierQuery",
    "CareerEventScope",
    "CareerEventType",
    "CareerLogSettings",
    "load_settings",
    # records
    "LogPeriod",
    "ContractEvent",
    "ContractEventType",
    "LaunchEvent",
    "FacilityConstructionEvent",
    "ConstructionState",
    "TechResearchEvent",
    "SpaceCenterFacility",
    "TransactionReason",
    # exports
    "CSV_COLUMNS",
    "build_csv_rows",
    "export_to_file",
    "WebExporter",
    "build_payload",
    "load_save_file",
    "write_save_file",
    "ut_to_date",
    # errors
    "CareerLogError",
    "ConfigNodeParseError",
    "ExportError",
    "SettingsError",
]
