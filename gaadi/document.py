"""Document class and its type enum."""

from dataclasses import dataclass
from enum import Enum


class DocumentType(Enum):
    REGISTRATION = "Registration"
    INSURANCE = "Insurance"
    SERVICE = "Service"
    OTHER = "Other"


@dataclass
class Document:
    """
    An uploaded vehicle document.

    file_url is an opaque handle; the core never reads document contents.
    """

    id: str
    user_id: str
    vehicle_id: str
    vehicle_name: str
    document_type: DocumentType
    file_name: str
    upload_date: str
    file_url: str

    def __post_init__(self):
        self.document_type = DocumentType(self.document_type)
