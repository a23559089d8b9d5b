"""Vehicle class for the user's garage."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Vehicle:
    """A vehicle owned by the user. The id never changes after creation."""

    id: str
    user_id: str
    name: str
    make: str
    model: str
    year: int
    registration_number: str
    image_url: str = ""
    custom_image_url: Optional[str] = None
    data_ai_hint: str = ""

    @property
    def display_image(self) -> str:
        """Custom image if one was generated or uploaded, else the stock image."""
        return self.custom_image_url or self.image_url

    @property
    def description(self) -> str:
        """Human-readable make/model/year."""
        return f"{self.year} {self.make} {self.model}"
