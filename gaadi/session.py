"""Session lifecycle: login builds an EntityStore, logout tears it down."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from jsonschema import ValidationError

from . import keys
from .alert import AlertItem
from .alerts import derive_alerts
from .calculations import DateLike
from .notifications import NotificationDeduplicator
from .persistence import MemoryAdapter, PersistenceAdapter
from .profile import User
from .records import from_dict, to_dict, validate_payload
from .store import EntityStore

logger = logging.getLogger(__name__)

LOCAL_USER_ID = "local-user"


class Session:
    """
    One user's time in the app.

    ``durable`` holds the user's data across runs. ``session_storage`` holds
    state that must not outlive the session (the notified-set); by default a
    fresh MemoryAdapter, so it disappears with the process.
    """

    def __init__(
        self,
        durable: PersistenceAdapter,
        session_storage: Optional[PersistenceAdapter] = None,
    ):
        self.durable = durable
        self.session_storage = session_storage or MemoryAdapter()
        self.deduplicator = NotificationDeduplicator(self.session_storage)
        self.store: Optional[EntityStore] = None

    @property
    def is_authenticated(self) -> bool:
        return self.store is not None and self.store.user is not None

    def login(self, email: str) -> EntityStore:
        """Sign in (no password check) and load the user's data."""
        user = User(id=LOCAL_USER_ID, email=email)
        self.durable.bind_user(user.id)
        self.durable.save(keys.USER, to_dict(user))
        logger.info("Logged in as %s", email)
        return self._open(user)

    def resume(self) -> Optional[EntityStore]:
        """Re-open the stored user's session, if one was left signed in."""
        self.durable.bind_user(LOCAL_USER_ID)
        data = self.durable.load(keys.USER, None)
        if data is None:
            return None
        try:
            validate_payload(keys.USER, data)
            user = from_dict(User, data)
        except (ValidationError, TypeError) as e:
            logger.warning("Discarding unreadable stored user: %s", e)
            self.durable.remove(keys.USER)
            return None
        return self._open(user)

    def _open(self, user: User) -> EntityStore:
        store = EntityStore(self.durable, deduplicator=self.deduplicator)
        store.initialize(user)
        self.store = store
        return store

    def logout(self) -> None:
        if self.store is not None:
            self.store.logout()
        self.store = None

    def alerts(self, now: Optional[DateLike] = None) -> List[AlertItem]:
        if self.store is None:
            return []
        return derive_alerts(
            self.store.service_records,
            self.store.insurance_policies,
            now or datetime.now(),
        )

    def pending_notifications(self, now: Optional[DateLike] = None) -> List[AlertItem]:
        """Alerts that should pop up now. Empty when notifications are off."""
        if self.store is None or not self.store.settings.notifications_enabled:
            return []
        now = now or datetime.now()
        return self.deduplicator.filter_unnotified(
            self.alerts(now), self.store.settings.reminder_lead_time, now
        )

    def acknowledge(self, alerts: Iterable[AlertItem]) -> None:
        """Record that the given alerts have been shown."""
        self.deduplicator.mark_notified(alert.id for alert in alerts)
