"""Session-scoped deduplication of alert notifications."""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List

from . import keys
from .alert import AlertItem
from .alerts import alert_days_left
from .calculations import DateLike
from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotifiedAlertSet:
    """Ids of alerts already surfaced to the user."""

    ids: FrozenSet[str] = frozenset()

    def __contains__(self, alert_id: str) -> bool:
        return alert_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def union(self, alert_ids: Iterable[str]) -> "NotifiedAlertSet":
        return NotifiedAlertSet(self.ids | frozenset(alert_ids))


class NotificationDeduplicator:
    """
    Ensures each alert is notified at most once per session.

    The notified-set lives under the session-only key in the given session
    storage, which is discarded when the session ends. Within a session it
    only grows; ``clear`` empties it wholesale and is only used on logout.
    """

    def __init__(self, session_storage: PersistenceAdapter):
        self.session_storage = session_storage

    def notified(self) -> NotifiedAlertSet:
        stored = self.session_storage.load(keys.NOTIFIED_ALERTS, [])
        if not isinstance(stored, list):
            logger.warning("Ignoring malformed notified-set: %r", stored)
            stored = []
        return NotifiedAlertSet(frozenset(str(i) for i in stored))

    def filter_unnotified(
        self, alerts: Iterable[AlertItem], reminder_lead_time: int, now: DateLike
    ) -> List[AlertItem]:
        """Alerts due within the lead time that have not been notified yet."""
        notified = self.notified()
        return [
            alert
            for alert in alerts
            if 0 <= alert_days_left(alert, now) <= reminder_lead_time
            and alert.id not in notified
        ]

    def mark_notified(self, alert_ids: Iterable[str]) -> NotifiedAlertSet:
        """Union ids into the stored set (read-modify-write)."""
        updated = self.notified().union(alert_ids)
        self.session_storage.save(keys.NOTIFIED_ALERTS, sorted(updated.ids))
        return updated

    def clear(self) -> None:
        logger.info("Clearing notified alerts")
        self.session_storage.remove(keys.NOTIFIED_ALERTS)
