"""
Career log uploader.
Serializes every period and event log into one JSON document and PATCHes it
to ``{server_url}/{token}``. Fire-and-forget: no retry, the outcome is
reported through the success/failure callbacks.
"""
from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import requests

from .aggregates import aggregate_period
from .errors import ExportError
from .records import LogPeriod
from .settings import TIMEOUT_DEFAULT, default_career_uuid
from .timeline import iso_date

log = logging.getLogger("CareerLog.Export")
log.addHandler(logging.NullHandler())


def period_to_dto(career_log: Any, period: LogPeriod, career_uuid: str) -> Dict[str, Any]:
    agg = aggregate_period(career_log, period)
    return {
        "careerUuid": career_uuid,
        "startDate": iso_date(period.start_ut),
        "endDate": iso_date(period.end_ut),
        "vabUpgrades": period.vab_upgrades,
        "sphUpgrades": period.sph_upgrades,
        "rndUpgrades": period.rnd_upgrades,
        "currentFunds": period.current_funds,
        "currentSci": period.current_sci,
        "scienceEarned": period.science_earned,
        "advanceFunds": agg.advance_funds,
        "rewardFunds": agg.reward_funds,
        "failureFunds": agg.failure_funds,
        "otherFundsEarned": period.other_funds_earned,
        "launchFees": period.launch_fees,
        "maintenanceFees": period.maintenance_fees,
        "toolingFees": period.tooling_fees,
        "entryCosts": period.entry_costs,
        # Kept as the server receives it today: the period's OtherFees, while
        # otherFees subtracts the construction costs found in the facility log.
        "constructionFees": period.other_fees,
        "otherFees": period.other_fees - agg.construction_fees,
        "fundsGainMult": period.funds_gain_mult,
    }


def build_payload(career_log: Any, career_uuid: str) -> Dict[str, List[Dict[str, Any]]]:
    return {
        "periods": [period_to_dto(career_log, p, career_uuid) for p in career_log.periods],
        "contractEvents": [c.to_dto(career_uuid) for c in career_log.contract_events],
        "facilityEvents": [f.to_dto(career_uuid) for f in career_log.facility_events],
        "techEvents": [t.to_dto(career_uuid) for t in career_log.tech_events],
        "launchEvents": [l.to_dto(career_uuid) for l in career_log.launch_events],
    }


def encode_payload(career_log: Any, career_uuid: str) -> str:
    try:
        return json.dumps(build_payload(career_log, career_uuid), allow_nan=False)
    except ValueError as exc:
        raise ExportError(f"career log holds a non-finite number: {exc}") from exc


def build_url(server_url: str, token: str) -> str:
    return f"{server_url.rstrip('/')}/{token}"


class WebExporter:
    def __init__(self, career_uuid: Optional[str] = None, timeout: float = TIMEOUT_DEFAULT) -> None:
        self.career_uuid = career_uuid or default_career_uuid()
        self.timeout = float(timeout)

    def export(
        self,
        career_log: Any,
        server_url: str,
        token: str,
        on_success: Callable[[], None],
        on_fail: Callable[[str], None],
    ) -> bool:
        """Send the document; returns True when ``on_success`` was invoked."""
        data = self._encode(career_log, on_fail)
        if data is None:
            return False
        return self._send(build_url(server_url, token), data, on_success, on_fail)

    def export_in_background(
        self,
        career_log: Any,
        server_url: str,
        token: str,
        on_success: Callable[[], None],
        on_fail: Callable[[str], None],
    ) -> Optional[threading.Thread]:
        # The document is built on the calling thread; the worker only sends it.
        data = self._encode(career_log, on_fail)
        if data is None:
            return None
        url = build_url(server_url, token)
        thread = threading.Thread(
            target=self._send,
            args=(url, data, on_success, on_fail),
            daemon=True,
            name=f"careerlog-upload:{url}",
        )
        thread.start()
        return thread

    def _encode(self, career_log: Any, on_fail: Callable[[str], None]) -> Optional[str]:
        try:
            return encode_payload(career_log, self.career_uuid)
        except ExportError as exc:
            log.warning("Not sending career log: %s", exc)
            on_fail(str(exc))
            return None

    def _send(
        self,
        url: str,
        data: str,
        on_success: Callable[[], None],
        on_fail: Callable[[str], None],
    ) -> bool:
        log.debug("Request payload: %s", data)
        headers = {"Content-Type": "application/json"}
        try:
            response = requests.patch(url, data=data.encode("utf-8"), headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            body = getattr(getattr(exc, "response", None), "text", "")
            log.warning("Error while sending career log to %s: %s; %s", url, exc, body)
            on_fail(str(exc))
            return False

        log.info("Received: %s", response.text)
        on_success()
        return True
