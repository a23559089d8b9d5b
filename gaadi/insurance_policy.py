"""InsurancePolicy class."""

from dataclasses import dataclass


@dataclass
class InsurancePolicy:
    id: str
    user_id: str
    vehicle_id: str
    vehicle_name: str
    provider: str
    policy_number: str
    expiry_date: str
