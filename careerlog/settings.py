"""Runtime settings for the career log."""

from __future__ import annotations

import json
import platform
import uuid
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import SettingsError

ENABLED_DEFAULT: bool = False
LOG_PERIOD_MONTHS_DEFAULT: int = 1
TIMEOUT_DEFAULT: float = 30.0

_FLAG_WORDS = {
    "true": True,
    "yes": True,
    "on": True,
    "1": True,
    "false": False,
    "no": False,
    "off": False,
    "0": False,
}


def parse_flag(value: Any, default: bool = ENABLED_DEFAULT) -> bool:
    """Read an on/off setting given as a bool, 0/1 or a yes/no style word."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _FLAG_WORDS:
        return _FLAG_WORDS[value.strip().lower()]
    raise SettingsError(f"enabled: cannot interpret {value!r} as a flag")


def default_career_uuid() -> str:
    """Stable per-machine identifier used to group uploads from one install."""
    return str(uuid.uuid5(uuid.NAMESPACE_DNS, platform.node() or "localhost"))


@dataclass(frozen=True)
class CareerLogSettings:
    enabled: bool = ENABLED_DEFAULT
    log_period_months: int = LOG_PERIOD_MONTHS_DEFAULT
    server_url: Optional[str] = None
    token: Optional[str] = None
    csv_path: Optional[str] = None
    career_uuid: str = field(default_factory=default_career_uuid)
    timeout: float = TIMEOUT_DEFAULT

    def __post_init__(self) -> None:
        months = self.log_period_months
        # a zero-length period would never let the clock catch up
        if isinstance(months, bool) or not isinstance(months, int) or months < 1:
            raise SettingsError(f"log_period_months must be a whole number >= 1, got {months!r}")

    def with_overrides(self, **overrides: Any) -> "CareerLogSettings":
        """Return a copy with every non-``None`` override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def settings_from_mapping(data: Dict[str, Any]) -> CareerLogSettings:
    """Build settings from a plain mapping; unknown keys are ignored."""

    if not isinstance(data, dict):
        raise SettingsError("Settings root must be a mapping.")
    # accept either a bare mapping or one nested under "career_log"
    block = data.get("career_log", data)
    if not isinstance(block, dict):
        raise SettingsError("'career_log' must be a mapping.")

    known = {f.name for f in fields(CareerLogSettings)}
    kwargs: Dict[str, Any] = {}
    for key, value in block.items():
        if key not in known or value is None:
            continue
        kwargs[key] = value

    if "enabled" in kwargs:
        kwargs["enabled"] = parse_flag(kwargs["enabled"])

    if "log_period_months" in kwargs:
        try:
            kwargs["log_period_months"] = int(kwargs["log_period_months"])
        except (TypeError, ValueError):
            raise SettingsError("log_period_months must be an integer") from None

    if "timeout" in kwargs:
        try:
            kwargs["timeout"] = float(kwargs["timeout"])
        except (TypeError, ValueError):
            raise SettingsError("timeout must be a number") from None

    for key in ("server_url", "token", "csv_path", "career_uuid"):
        if key in kwargs:
            kwargs[key] = str(kwargs[key])

    return CareerLogSettings(**kwargs)


def load_settings(path: str | Path) -> CareerLogSettings:
    """Load settings from a YAML or JSON document."""

    p = Path(path)
    text = p.read_text(encoding="utf-8")

    if p.suffix.lower() in {".yaml", ".yml"}:
        try:
            data: Any = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise SettingsError(f"{p}: invalid YAML: {exc}") from exc
    else:
        try:
            data = json.loads(text or "{}")
        except json.JSONDecodeError as exc:
            raise SettingsError(f"{p}: invalid JSON: {exc}") from exc

    return settings_from_mapping(data)
