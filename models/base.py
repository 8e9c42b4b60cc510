"""
Model Base
----------
Shared decoding for Challonge JSON entities and form encoding for
request payloads.

Challonge wraps every entity in an envelope keyed by its type name
({"tournament": {...}}) and returns indexes as arrays of envelopes.
Null attributes fall back to the field default.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, ClassVar, List, Optional, Tuple, Type, TypeVar

from pydantic import (
    BaseModel, BeforeValidator, ConfigDict, TypeAdapter, ValidationError, model_validator,
)

from core.errors import DecodeError

M = TypeVar("M", bound="ChallongeModel")

FormPairs = List[Tuple[str, str]]

_DATETIME = TypeAdapter(datetime)


def _lenient_datetime(value: Any) -> Any:
    # Optional timestamps that do not parse are left unset
    if value is None or isinstance(value, datetime):
        return value
    try:
        return _DATETIME.validate_python(value)
    except ValidationError:
        return None


OptionalTimestamp = Annotated[Optional[datetime], BeforeValidator(_lenient_datetime)]


class ChallongeModel(BaseModel):
    """Base for entities returned by the API."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    ENVELOPE: ClassVar[str] = ""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @classmethod
    def decode(cls: Type[M], value: Any) -> M:
        """Decode one enveloped entity."""
        inner = unwrap(value, cls.ENVELOPE)
        try:
            return cls.model_validate(inner)
        except ValidationError as e:
            raise DecodeError(f"Invalid {cls.ENVELOPE}: {e.error_count()} field error(s)", inner) from e

    @classmethod
    def decode_index(cls: Type[M], value: Any) -> List[M]:
        """Decode an array of enveloped entities."""
        if not isinstance(value, list):
            raise DecodeError("Expected array", value)
        return [cls.decode(item) for item in value]


def unwrap(value: Any, envelope: str) -> dict:
    """Strip the {"<envelope>": {...}} wrapper."""
    if not isinstance(value, dict):
        raise DecodeError("Expected object", value)
    if envelope not in value:
        raise DecodeError("Unexpected absent key", envelope)
    inner = value[envelope]
    if not isinstance(inner, dict):
        raise DecodeError("Expected object", inner)
    return inner


def unwrap_list(value: Any, envelope: str) -> Any:
    """Unwrap nested entity lists (included participants, matches...)."""
    if not isinstance(value, list):
        return value
    return [item[envelope] if isinstance(item, dict) and envelope in item else item for item in value]


def form_value(value: Any) -> str:
    """Render a value the way Challonge expects in a form body."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)


def query_flag(value: bool) -> str:
    """Query string booleans are sent as 1/0."""
    return "1" if value else "0"
