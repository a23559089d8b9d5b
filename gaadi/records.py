"""Conversion between entity objects and their stored camelCase dicts."""

import dataclasses
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Type

import yaml
from jsonschema import validate

from . import keys
from .calculations import parse_date
from .document import Document
from .expense import Expense
from .insurance_policy import InsurancePolicy
from .profile import Profile, User
from .service_record import ServiceRecord
from .vehicle import Vehicle

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"

ENTITY_TYPES: Dict[str, Type] = {
    keys.VEHICLES: Vehicle,
    keys.SERVICE_RECORDS: ServiceRecord,
    keys.EXPENSES: Expense,
    keys.INSURANCE_POLICIES: InsurancePolicy,
    keys.DOCUMENTS: Document,
    keys.PROFILE: Profile,
    keys.USER: User,
}

DATE_FIELDS = ("date", "nextDueDate", "expiryDate", "uploadDate")

_schema_cache: Dict[str, Any] = {}


def _camel(name: str) -> str:
    """snake_case field name -> camelCase storage key."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_dict(obj: Any) -> Dict[str, Any]:
    """
    Serialize an entity to its stored dict format (camelCase keys).

    None values are omitted for cleaner storage.
    """
    d: Dict[str, Any] = {}
    for field in dataclasses.fields(obj):
        value = getattr(obj, field.name)
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        d[_camel(field.name)] = value
    return d


def from_dict(cls: Type, data: Dict[str, Any]) -> Any:
    """Parse a stored dict into an entity. Unknown keys are ignored."""
    kwargs = {}
    for field in dataclasses.fields(cls):
        key = _camel(field.name)
        if key in data:
            kwargs[field.name] = data[key]
    return cls(**kwargs)


def load_schema() -> dict:
    """Load the JSON schema for stored collections from schema.yaml."""
    if "schema" not in _schema_cache:
        with open(SCHEMA_PATH) as f:
            _schema_cache["schema"] = yaml.safe_load(f)
    return _schema_cache["schema"]


def validate_payload(key: str, payload: Any) -> None:
    """
    Validate a stored payload for a key against its schema.

    Raises jsonschema.ValidationError on mismatch. Keys without a schema
    are accepted as-is.
    """
    schema = load_schema()
    definition = schema["properties"].get(key)
    if definition is None:
        return
    validate(instance=payload, schema={**definition, "definitions": schema["definitions"]})


def collection_from_dicts(key: str, items: List[Dict[str, Any]]) -> List[Any]:
    """
    Validate and parse a stored collection.

    Raises ValidationError on schema mismatch and ValueError if any date
    field does not parse, so one bad record rejects the whole collection.
    """
    validate_payload(key, items)
    for item in items:
        for field in DATE_FIELDS:
            if item.get(field) is not None:
                parse_date(item[field])
    cls = ENTITY_TYPES[key]
    return [from_dict(cls, item) for item in items]


def collection_to_dicts(items: List[Any]) -> List[Dict[str, Any]]:
    return [to_dict(item) for item in items]
