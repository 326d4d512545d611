# careerlog/events.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

log = logging.getLogger("CareerLog.Events")
log.addHandler(logging.NullHandler())

Handler = Callable[..., Any]

# ---------------------------------------------------------------------------
# Host event names
# ---------------------------------------------------------------------------

GAME_STATE_LOADED = "game_state_loaded"
SETTINGS_APPLIED = "settings_applied"
CURRENCY_MODIFIED = "currency_modified"
CONTRACT_ACCEPTED = "contract_accepted"
CONTRACT_COMPLETED = "contract_completed"
CONTRACT_FAILED = "contract_failed"
CONTRACT_CANCELLED = "contract_cancelled"
VESSEL_SITUATION_CHANGED = "vessel_situation_changed"
TECH_COMPLETED = "tech_completed"
FACILITY_UPGRADE_QUEUED = "facility_upgrade_queued"
FACILITY_UPGRADE_COMPLETED = "facility_upgrade_completed"


class EventHub:
    """
    Synchronous in-process observer registry.

    Handlers run on the publishing thread in registration order. A handler
    that raises is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._subs: Dict[str, List[Handler]] = {}

    def subscribe(self, event_name: str, handler: Handler) -> None:
        handlers = self._subs.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_name: str, handler: Handler) -> None:
        handlers = self._subs.get(event_name)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            self._subs.pop(event_name, None)

    def handlers(self, event_name: str) -> List[Handler]:
        return list(self._subs.get(event_name, ()))

    def publish(self, event_name: str, *args: Any, **kwargs: Any) -> int:
        """Dispatch to every handler of ``event_name``; returns how many were called."""
        handlers = self.handlers(event_name)
        for handler in handlers:
            try:
                handler(*args, **kwargs)
            except Exception:
                log.exception("Handler %r for %s failed", handler, event_name)
        return len(handlers)
