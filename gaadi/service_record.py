"""ServiceRecord class for maintenance performed on a vehicle."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ServiceRecord:
    """
    A record of service performed.

    vehicle_name is copied from the vehicle when the record is created and
    is not updated if the vehicle is later renamed.
    """

    id: str
    user_id: str
    vehicle_id: str
    vehicle_name: str
    service: str
    date: str
    cost: float
    notes: str = ""
    next_due_date: Optional[str] = None
