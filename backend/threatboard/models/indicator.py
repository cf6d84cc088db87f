"""
Indicator of compromise (IOC) models.
"""
from typing import Annotated, Any, ClassVar, Literal, Optional

from pydantic import BeforeValidator, Field

from .common import (
    LowerStr,
    NonEmptyStr,
    RecordModel,
    Reference,
    Severity,
    Timestamp,
    UpdateModel,
)

INDICATOR_TYPES = {"ip": "IP", "domain": "Domain", "url": "URL", "hash": "Hash"}
MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100


def _indicator_type(value: Any) -> Any:
    if isinstance(value, str):
        return INDICATOR_TYPES.get(value.strip().lower(), value)
    return value


def _uppercase(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


def _clamp_confidence(value: Any) -> Any:
    """Clamp numeric confidence into [0, 100]; non-numeric input is left to fail."""
    if isinstance(value, bool):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    return int(max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, round(number))))


def _lowercase_tags(value: Any) -> Any:
    if isinstance(value, list):
        return [t.strip().lower() if isinstance(t, str) else t for t in value]
    return value


IndicatorType = Annotated[Literal["IP", "Domain", "URL", "Hash"], BeforeValidator(_indicator_type)]
TLP = Annotated[Literal["WHITE", "GREEN", "AMBER", "RED"], BeforeValidator(_uppercase)]
Confidence = Annotated[int, BeforeValidator(_clamp_confidence)]
Tags = Annotated[list[str], BeforeValidator(_lowercase_tags)]


class IndicatorCreate(RecordModel):
    """Fields accepted when creating an indicator."""
    type: IndicatorType
    value: NonEmptyStr
    confidence: Confidence = 50
    severity: Severity = "medium"
    tags: Tags = Field(default_factory=list)
    firstSeen: Optional[Timestamp] = None
    lastSeen: Optional[Timestamp] = None
    source: Reference
    description: str = ""
    tlp: TLP = "WHITE"
    threat_types: list[str] = Field(default_factory=list)
    status: LowerStr = "active"


class IndicatorUpdate(UpdateModel):
    """Fields a client may change on an existing indicator."""
    required: ClassVar[tuple[str, ...]] = ("type", "value", "source")

    type: Optional[IndicatorType] = None
    value: Optional[NonEmptyStr] = None
    confidence: Optional[Confidence] = None
    severity: Optional[Severity] = None
    tags: Optional[Tags] = None
    firstSeen: Optional[Timestamp] = None
    lastSeen: Optional[Timestamp] = None
    source: Optional[Reference] = None
    description: Optional[str] = None
    tlp: Optional[TLP] = None
    threat_types: Optional[list[str]] = None
    status: Optional[LowerStr] = None
