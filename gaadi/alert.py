"""AlertItem dataclass for derived upcoming events."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AlertKind(Enum):
    SERVICE = "service"
    INSURANCE = "insurance"


@dataclass(frozen=True)
class AlertItem:
    """
    An upcoming service due date or insurance expiry.

    Alerts are never persisted; they are derived fresh from the records they
    point at. ``id`` is stable across derivations and is what the notified-set
    remembers.
    """

    kind: AlertKind
    source_id: str
    vehicle_name: str
    date: str
    description: Optional[str] = None
    provider: Optional[str] = None

    @property
    def id(self) -> str:
        return f"{self.kind.value}-{self.source_id}"

    @property
    def title(self) -> str:
        if self.kind == AlertKind.SERVICE:
            return self.description or "Service"
        return "Insurance Renewal"

    @property
    def subtitle(self) -> str:
        if self.kind == AlertKind.INSURANCE and self.provider:
            return f"{self.vehicle_name} ({self.provider})"
        return self.vehicle_name
