"""JSON shapes for API responses: dataclasses to camelCase dicts."""

import dataclasses
from datetime import datetime
from enum import Enum

from pydantic.alias_generators import to_camel


def to_json(value):
    """Recursively convert dataclasses, enums and datetimes to JSON-ready values.

    Dataclass field names become camelCase; plain dict keys are kept.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            to_camel(f.name): to_json(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    return value


def camel_keys(data: dict) -> dict:
    return {to_camel(k): v for k, v in data.items()}
