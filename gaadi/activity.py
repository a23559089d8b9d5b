"""Views derived across collections: activity feed, spending, assistant payload."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from .calculations import DateLike, is_past, parse_date
from .expense import Expense, ExpenseCategory
from .insurance_policy import InsurancePolicy
from .records import collection_to_dicts
from .service_record import ServiceRecord


@dataclass
class ActivityEntry:
    """One row of the merged activity feed."""

    kind: str  # "expense" or "service"
    record: Union[Expense, ServiceRecord]

    @property
    def date(self) -> str:
        return self.record.date

    @property
    def title(self) -> str:
        if isinstance(self.record, Expense):
            return self.record.description
        return self.record.service

    @property
    def amount(self) -> Optional[float]:
        if isinstance(self.record, Expense):
            return self.record.amount
        return None


def recent_activity(
    expenses: Iterable[Expense],
    service_records: Iterable[ServiceRecord],
    sort_order: str = "newest",
) -> List[ActivityEntry]:
    """Expenses and services merged by date. Recomputed on every call."""
    entries = [ActivityEntry("expense", e) for e in expenses]
    entries.extend(ActivityEntry("service", s) for s in service_records)
    return sorted(
        entries, key=lambda a: parse_date(a.date), reverse=(sort_order == "newest")
    )


def expense_summary(expenses: Iterable[Expense]) -> Dict[str, float]:
    """
    Total spending per category plus a grand total under "Total".

    Only categories with at least one expense appear.
    """
    totals: Dict[str, float] = {}
    for expense in expenses:
        name = ExpenseCategory(expense.category).value
        totals[name] = totals.get(name, 0) + expense.amount
    totals["Total"] = sum(totals.values())
    return totals


@dataclass
class VehicleUpcoming:
    next_service: Optional[ServiceRecord] = None
    next_insurance: Optional[InsurancePolicy] = None


def upcoming_for_vehicle(
    vehicle_id: str,
    service_records: Iterable[ServiceRecord],
    insurance_policies: Iterable[InsurancePolicy],
    now: DateLike,
) -> VehicleUpcoming:
    """Soonest upcoming service and insurance expiry for one vehicle."""
    services = [
        s
        for s in service_records
        if s.vehicle_id == vehicle_id and s.next_due_date and not is_past(s.next_due_date, now)
    ]
    policies = [
        p
        for p in insurance_policies
        if p.vehicle_id == vehicle_id and not is_past(p.expiry_date, now)
    ]
    return VehicleUpcoming(
        next_service=min(services, key=lambda s: parse_date(s.next_due_date), default=None),
        next_insurance=min(policies, key=lambda p: parse_date(p.expiry_date), default=None),
    )


def build_assistant_request(query: str, store) -> Dict[str, object]:
    """
    Payload for the hosted chat flow: the question plus current snapshots
    of the user's data for the model's lookup tools.
    """
    return {
        "query": query,
        "vehicles": collection_to_dicts(store.vehicles),
        "serviceRecords": collection_to_dicts(store.service_records),
        "expenses": collection_to_dicts(store.expenses),
        "insurancePolicies": collection_to_dicts(store.insurance_policies),
    }
