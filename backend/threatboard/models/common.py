"""
Shared field types, response envelopes and validation helpers.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix. Naive values are UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _lowercase(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _non_empty_reference(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise PydanticCustomError("missing", "Field required")
    return value.strip() if isinstance(value, str) else value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value.strip() if isinstance(value, str) else value


NonEmptyStr = Annotated[str, Field(min_length=1)]
LowerStr = Annotated[str, BeforeValidator(_lowercase)]
Timestamp = Annotated[datetime, PlainSerializer(format_timestamp, return_type=str)]

Severity = Annotated[
    Literal["low", "medium", "high", "critical"], BeforeValidator(_lowercase)
]

# Record id in either backend: sequential int (JSON files) or opaque string (documents)
Reference = Annotated[Union[int, str], BeforeValidator(_non_empty_reference)]
OptionalReference = Annotated[Optional[Union[int, str]], BeforeValidator(_blank_to_none)]


class RecordModel(BaseModel):
    """Base for request bodies: trims strings and drops unknown keys."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class UpdateModel(RecordModel):
    """
    Base for update whitelists.

    Only fields declared on the subclass can be changed; ``id`` is never one of
    them. Fields listed in ``required`` cannot be cleared with null.
    """
    required: ClassVar[tuple[str, ...]] = ()

    def changes(self) -> dict:
        data = self.model_dump(mode="json", exclude_unset=True)
        return {
            k: v for k, v in data.items()
            if not (v is None and k in self.required)
        }


class PageMetaOut(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: bool


class ListResponse(BaseModel):
    data: list[dict]
    meta: PageMetaOut


class ItemResponse(BaseModel):
    message: str
    data: dict


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    message: str


REQUIRED_ERROR_TYPES = {"missing", "string_too_short"}


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc if not isinstance(p, int)]
    return parts[0] if parts else "body"


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Turn a pydantic error into one human-readable, field-specific sentence."""
    errors = exc.errors()
    required: list[str] = []
    for err in errors:
        if err["type"] in REQUIRED_ERROR_TYPES and len(err["loc"]) == 1:
            name = _field_name(err["loc"])
            if name not in required:
                required.append(name)
    if required:
        if len(required) == 1:
            return f"Field '{required[0]}' is required"
        return f"Fields {', '.join(repr(r) for r in required)} are required"

    first = errors[0]
    return f"Invalid value for field '{_field_name(first['loc'])}': {first['msg']}"
