"""EntityStore - the in-memory source of truth for one session's records."""

import dataclasses
import logging
import threading
from typing import Any, Callable, List, Optional

from jsonschema import ValidationError

from . import keys
from .calculations import DateLike, parse_date, to_iso
from .document import Document, DocumentType
from .errors import EntityNotFound
from .expense import Expense, ExpenseCategory
from .ids import IdGenerator
from .insurance_policy import InsurancePolicy
from .notifications import NotificationDeduplicator
from .persistence import PersistenceAdapter
from .profile import Profile, User
from .records import collection_from_dicts, collection_to_dicts, from_dict, to_dict, validate_payload
from .service_record import ServiceRecord
from .settings import AppSettings, load_settings, save_settings
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

UNKNOWN_VEHICLE = "Unknown"


class EntityStore:
    """
    Cache of the user's vehicles, service records, expenses, insurance
    policies and documents, written through to a persistence adapter.

    Lifecycle: construct when the user authenticates, call ``initialize``,
    pass the instance to whatever needs the data, call ``logout`` when the
    session ends and drop the instance.

    Collection ordering:
    - vehicles: name ascending
    - service records, expenses: date descending
    - documents: upload date descending
    - insurance policies: expiry date ascending

    Mutations made with no user present return without effect. Every
    mutation runs under one lock so read-modify-write cycles never interleave.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        deduplicator: Optional[NotificationDeduplicator] = None,
        id_generator: Optional[IdGenerator] = None,
    ):
        self.adapter = adapter
        self.deduplicator = deduplicator
        self.settings = AppSettings()
        self.user: Optional[User] = None
        self.profile: Optional[Profile] = None
        self.is_loading = False
        self._ids = id_generator or IdGenerator()
        self._lock = threading.RLock()
        self._vehicles: List[Vehicle] = []
        self._service_records: List[ServiceRecord] = []
        self._expenses: List[Expense] = []
        self._insurance_policies: List[InsurancePolicy] = []
        self._documents: List[Document] = []

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    @property
    def vehicles(self) -> List[Vehicle]:
        return list(self._vehicles)

    @property
    def service_records(self) -> List[ServiceRecord]:
        return list(self._service_records)

    @property
    def expenses(self) -> List[Expense]:
        return list(self._expenses)

    @property
    def insurance_policies(self) -> List[InsurancePolicy]:
        return list(self._insurance_policies)

    @property
    def documents(self) -> List[Document]:
        return list(self._documents)

    @property
    def is_ready(self) -> bool:
        return self.user is not None and not self.is_loading

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        for vehicle in self._vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self, user: User) -> None:
        """
        Load everything stored for a user.

        Runs under the store lock, so two initializations never interleave and
        no mutation can observe a half-loaded store. Seeds and saves a default
        profile the first time a user logs in.
        """
        with self._lock:
            self.is_loading = True
            try:
                self.adapter.bind_user(user.id)
                profile = self._load_profile()
                if profile is None:
                    profile = Profile.default_for(user.email)
                    self.adapter.save(keys.PROFILE, to_dict(profile))
                    logger.info("Created default profile for user %s", user.id)

                self.settings = load_settings(self.adapter)
                self._vehicles = self._load_collection(keys.VEHICLES)
                self._service_records = self._load_collection(keys.SERVICE_RECORDS)
                self._expenses = self._load_collection(keys.EXPENSES)
                self._insurance_policies = self._load_collection(keys.INSURANCE_POLICIES)
                self._documents = self._load_collection(keys.DOCUMENTS)
                self.profile = profile
                self.user = user
            finally:
                self.is_loading = False
            logger.info(
                "Loaded %d vehicles, %d services, %d expenses, %d policies, %d documents",
                len(self._vehicles),
                len(self._service_records),
                len(self._expenses),
                len(self._insurance_policies),
                len(self._documents),
            )

    def _load_profile(self) -> Optional[Profile]:
        data = self.adapter.load(keys.PROFILE, None)
        if data is None:
            return None
        try:
            validate_payload(keys.PROFILE, data)
            return from_dict(Profile, data)
        except (ValidationError, TypeError) as e:
            logger.warning("Discarding unreadable profile: %s", e)
            return None

    def _load_collection(self, key: str) -> List[Any]:
        data = self.adapter.load(key, [])
        try:
            return collection_from_dicts(key, data)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Discarding unreadable collection %r: %s", key, e)
            return []

    def _persist(self, key: str, items: List[Any]) -> None:
        self.adapter.save(key, collection_to_dicts(items))

    def _require_user(self, action: str) -> bool:
        if self.user is None:
            logger.debug("Ignoring %s: no authenticated user", action)
            return False
        return True

    def _vehicle_name(self, vehicle_id: str) -> str:
        vehicle = self.get_vehicle(vehicle_id)
        return vehicle.name if vehicle else UNKNOWN_VEHICLE

    # -------------------------------------------------------------------------
    # Vehicles
    # -------------------------------------------------------------------------

    def add_vehicle(
        self,
        name: str,
        make: str,
        model: str,
        year: int,
        registration_number: str,
        image_url: str = "",
        custom_image_url: Optional[str] = None,
        data_ai_hint: str = "",
    ) -> Optional[Vehicle]:
        with self._lock:
            if not self._require_user("add vehicle"):
                return None
            vehicle = Vehicle(
                id=self._ids.next_id("v"),
                user_id=self.user.id,
                name=name,
                make=make,
                model=model,
                year=year,
                registration_number=registration_number,
                image_url=image_url,
                custom_image_url=custom_image_url,
                data_ai_hint=data_ai_hint,
            )
            self._vehicles = sorted(self._vehicles + [vehicle], key=lambda v: v.name)
            self._persist(keys.VEHICLES, self._vehicles)
            return vehicle

    def update_vehicle(self, vehicle_id: str, **changes) -> Optional[Vehicle]:
        """
        Merge changes into a vehicle.

        Records that already copied the old name keep it. Raises
        EntityNotFound for an unknown id, leaving the collection untouched.
        """
        if "id" in changes or "user_id" in changes:
            raise ValueError("id and user_id cannot be changed")
        with self._lock:
            if not self._require_user("update vehicle"):
                return None
            current = self.get_vehicle(vehicle_id)
            if current is None:
                raise EntityNotFound("Vehicle", vehicle_id)
            updated = dataclasses.replace(current, **changes)
            self._vehicles = sorted(
                [updated if v.id == vehicle_id else v for v in self._vehicles],
                key=lambda v: v.name,
            )
            self._persist(keys.VEHICLES, self._vehicles)
            return updated

    # -------------------------------------------------------------------------
    # Vehicle records
    # -------------------------------------------------------------------------

    def _prepend_sorted(
        self, items: List[Any], item: Any, date_of: Callable[[Any], str]
    ) -> List[Any]:
        # Newest first; an equal date keeps the new item in front.
        return sorted([item] + items, key=lambda x: parse_date(date_of(x)), reverse=True)

    def add_service_record(
        self,
        vehicle_id: str,
        service: str,
        date: DateLike,
        cost: float,
        notes: str = "",
        next_due_date: Optional[DateLike] = None,
    ) -> Optional[ServiceRecord]:
        with self._lock:
            if not self._require_user("add service record"):
                return None
            record = ServiceRecord(
                id=self._ids.next_id("s"),
                user_id=self.user.id,
                vehicle_id=vehicle_id,
                vehicle_name=self._vehicle_name(vehicle_id),
                service=service,
                date=to_iso(date),
                cost=cost,
                notes=notes,
                next_due_date=to_iso(next_due_date) if next_due_date else None,
            )
            self._service_records = self._prepend_sorted(
                self._service_records, record, lambda r: r.date
            )
            self._persist(keys.SERVICE_RECORDS, self._service_records)
            return record

    def add_expense(
        self,
        vehicle_id: str,
        category: ExpenseCategory,
        date: DateLike,
        amount: float,
        description: str = "",
    ) -> Optional[Expense]:
        with self._lock:
            if not self._require_user("add expense"):
                return None
            expense = Expense(
                id=self._ids.next_id("e"),
                user_id=self.user.id,
                vehicle_id=vehicle_id,
                vehicle_name=self._vehicle_name(vehicle_id),
                category=category,
                date=to_iso(date),
                amount=amount,
                description=description,
            )
            self._expenses = self._prepend_sorted(self._expenses, expense, lambda e: e.date)
            self._persist(keys.EXPENSES, self._expenses)
            return expense

    def add_insurance_policy(
        self,
        vehicle_id: str,
        provider: str,
        policy_number: str,
        expiry_date: DateLike,
    ) -> Optional[InsurancePolicy]:
        with self._lock:
            if not self._require_user("add insurance policy"):
                return None
            policy = InsurancePolicy(
                id=self._ids.next_id("i"),
                user_id=self.user.id,
                vehicle_id=vehicle_id,
                vehicle_name=self._vehicle_name(vehicle_id),
                provider=provider,
                policy_number=policy_number,
                expiry_date=to_iso(expiry_date),
            )
            self._insurance_policies = sorted(
                self._insurance_policies + [policy],
                key=lambda p: parse_date(p.expiry_date),
            )
            self._persist(keys.INSURANCE_POLICIES, self._insurance_policies)
            return policy

    def add_document(
        self,
        vehicle_id: str,
        document_type: DocumentType,
        file_name: str,
        upload_date: DateLike,
        file_url: str,
    ) -> Optional[Document]:
        with self._lock:
            if not self._require_user("add document"):
                return None
            document = Document(
                id=self._ids.next_id("d"),
                user_id=self.user.id,
                vehicle_id=vehicle_id,
                vehicle_name=self._vehicle_name(vehicle_id),
                document_type=document_type,
                file_name=file_name,
                upload_date=to_iso(upload_date),
                file_url=file_url,
            )
            self._documents = self._prepend_sorted(
                self._documents, document, lambda d: d.upload_date
            )
            self._persist(keys.DOCUMENTS, self._documents)
            return document

    def delete_document(self, document_id: str) -> bool:
        """Remove a document. Returns False (still persisting) if it was absent."""
        with self._lock:
            if not self._require_user("delete document"):
                return False
            remaining = [d for d in self._documents if d.id != document_id]
            removed = len(remaining) != len(self._documents)
            self._documents = remaining
            self._persist(keys.DOCUMENTS, self._documents)
            return removed

    # -------------------------------------------------------------------------
    # Profile and settings
    # -------------------------------------------------------------------------

    def set_profile(self, profile: Profile) -> None:
        with self._lock:
            if not self._require_user("set profile"):
                return
            self.profile = profile
            self.adapter.save(keys.PROFILE, to_dict(profile))

    def update_settings(self, **changes) -> AppSettings:
        with self._lock:
            self.settings = self.settings.replace(**changes)
            save_settings(self.adapter, self.settings)
            return self.settings

    # -------------------------------------------------------------------------
    # Bulk removal
    # -------------------------------------------------------------------------

    def clear_all_data(self) -> None:
        """Empty the five record collections. User and profile are kept."""
        with self._lock:
            self._vehicles = []
            self._service_records = []
            self._expenses = []
            self._insurance_policies = []
            self._documents = []
            for key in keys.COLLECTIONS:
                self.adapter.remove(key)
            logger.info("Cleared all vehicle data")

    def logout(self) -> None:
        """
        Forget the user, profile and all records, in memory and in storage.

        Settings and theme survive. The notified-set is cleared too when the
        clear_data_on_logout setting is on.
        """
        with self._lock:
            if self.settings.clear_data_on_logout and self.deduplicator is not None:
                self.deduplicator.clear()
            self._vehicles = []
            self._service_records = []
            self._expenses = []
            self._insurance_policies = []
            self._documents = []
            for key in (keys.USER, keys.PROFILE) + keys.COLLECTIONS:
                self.adapter.remove(key)
            self.adapter.bind_user(None)
            self.user = None
            self.profile = None
            logger.info("Logged out")
