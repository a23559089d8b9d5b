"""User identity and profile classes."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class User:
    """Authenticated identity."""

    id: str
    email: str


@dataclass
class Profile:
    """Personal details shown on the profile page. One per user."""

    name: str
    avatar_url: Optional[str] = None
    dob: Optional[str] = None
    blood_group: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    license_number: Optional[str] = None
    license_expiry_date: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None

    @classmethod
    def default_for(cls, email: Optional[str]) -> "Profile":
        """Profile seeded on first login, named after the email local-part."""
        local_part = (email or "").split("@")[0]
        return cls(name=local_part or "User", avatar_url=None)
