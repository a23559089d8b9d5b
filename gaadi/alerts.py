"""Derivation of upcoming alerts from service and insurance records."""

from typing import Iterable, List

from .alert import AlertItem, AlertKind
from .calculations import DateLike, classify_urgency, days_left, is_past, parse_date
from .insurance_policy import InsurancePolicy
from .service_record import ServiceRecord
from .status import Urgency


def derive_alerts(
    service_records: Iterable[ServiceRecord],
    insurance_policies: Iterable[InsurancePolicy],
    now: DateLike,
) -> List[AlertItem]:
    """
    Compute upcoming alerts, soonest first.

    Logic:
    - Services with a next due date that is not before today
    - Policies whose expiry date is not before today
    - Merged and sorted by their due/expiry date; ties keep input order
      (services before insurance)
    """
    alerts = [
        AlertItem(
            kind=AlertKind.SERVICE,
            source_id=record.id,
            vehicle_name=record.vehicle_name,
            date=record.next_due_date,
            description=record.service,
        )
        for record in service_records
        if record.next_due_date and not is_past(record.next_due_date, now)
    ]
    alerts.extend(
        AlertItem(
            kind=AlertKind.INSURANCE,
            source_id=policy.id,
            vehicle_name=policy.vehicle_name,
            date=policy.expiry_date,
            provider=policy.provider,
        )
        for policy in insurance_policies
        if not is_past(policy.expiry_date, now)
    )
    return sorted(alerts, key=lambda a: parse_date(a.date))


def alert_days_left(alert: AlertItem, now: DateLike) -> int:
    return days_left(alert.date, now)


def alert_urgency(alert: AlertItem, reminder_lead_time: int, now: DateLike) -> Urgency:
    """Presentation urgency for an alert. Does not affect filtering."""
    return classify_urgency(alert_days_left(alert, now), reminder_lead_time)


def alert_label(alert: AlertItem, now: DateLike) -> str:
    """Badge text, e.g. '12 days left'. Anything at or below zero reads as today."""
    remaining = alert_days_left(alert, now)
    if remaining <= 0:
        return "Due Today" if alert.kind == AlertKind.SERVICE else "Expires Today"
    return f"{remaining} days left"
