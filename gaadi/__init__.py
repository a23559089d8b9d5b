"""
Personal vehicle records and reminders.

This package provides the data layer behind myGaadi:
- Vehicle, ServiceRecord, Expense, InsurancePolicy, Document: stored records
- Profile, User: identity
- EntityStore: in-memory collections written through to a persistence adapter
- YamlFileAdapter, DocumentStoreAdapter, MemoryAdapter: backing stores
- derive_alerts: upcoming service and insurance alerts
- NotificationDeduplicator: at-most-once alert notifications per session
- Session: login/logout lifecycle around an EntityStore
"""

from .status import Urgency
from .vehicle import Vehicle
from .service_record import ServiceRecord
from .expense import Expense, ExpenseCategory
from .insurance_policy import InsurancePolicy
from .document import Document, DocumentType
from .profile import Profile, User
from .alert import AlertItem, AlertKind
from .errors import (
    GaadiError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    EntityNotFound,
    UnauthenticatedMutation,
)
from .calculations import classify_urgency, days_left, is_past, parse_date
from .alerts import alert_label, alert_urgency, derive_alerts
from .notifications import NotificationDeduplicator, NotifiedAlertSet
from .persistence import (
    DocumentStoreAdapter,
    MemoryAdapter,
    PersistenceAdapter,
    YamlFileAdapter,
)
from .settings import AppSettings, load_settings, save_settings, load_theme, save_theme
from .store import EntityStore
from .activity import build_assistant_request, expense_summary, recent_activity, upcoming_for_vehicle
from .session import Session

__all__ = [
    "Urgency",
    "Vehicle",
    "ServiceRecord",
    "Expense",
    "ExpenseCategory",
    "InsurancePolicy",
    "Document",
    "DocumentType",
    "Profile",
    "User",
    "AlertItem",
    "AlertKind",
    "GaadiError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "EntityNotFound",
    "UnauthenticatedMutation",
    "classify_urgency",
    "days_left",
    "is_past",
    "parse_date",
    "alert_label",
    "alert_urgency",
    "derive_alerts",
    "NotificationDeduplicator",
    "NotifiedAlertSet",
    "DocumentStoreAdapter",
    "MemoryAdapter",
    "PersistenceAdapter",
    "YamlFileAdapter",
    "AppSettings",
    "load_settings",
    "save_settings",
    "load_theme",
    "save_theme",
    "EntityStore",
    "build_assistant_request",
    "expense_summary",
    "recent_activity",
    "upcoming_for_vehicle",
    "Session",
]
