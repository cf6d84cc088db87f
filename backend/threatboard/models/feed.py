"""
Threat feed / intelligence source models.
"""
from typing import Annotated, ClassVar, Literal, Optional

from pydantic import BeforeValidator, Field

from .common import LowerStr, NonEmptyStr, RecordModel, UpdateModel
from .compat import coerce_reliability

FeedName = Annotated[str, Field(min_length=1, max_length=100)]
FeedDescription = Annotated[str, Field(min_length=1, max_length=500)]
Reliability = Annotated[
    Literal["low", "medium", "high", "very-high"],
    BeforeValidator(coerce_reliability),
]
Counter = Annotated[int, Field(ge=0)]


class FeedCreate(RecordModel):
    """Fields accepted when creating a feed."""
    name: FeedName
    type: NonEmptyStr
    url: NonEmptyStr
    description: FeedDescription
    status: LowerStr = "active"
    update_frequency: Optional[str] = None
    reliability: Reliability = "medium"
    tags: list[str] = Field(default_factory=list)
    data_types: list[str] = Field(default_factory=list)
    format: Optional[str] = None
    authentication: Optional[str] = None
    source_organization: Optional[str] = None
    tlp_levels: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)


class FeedUpdate(UpdateModel):
    """Fields a client may change on an existing feed."""
    required: ClassVar[tuple[str, ...]] = ("name", "type", "url", "description")

    name: Optional[FeedName] = None
    type: Optional[NonEmptyStr] = None
    url: Optional[NonEmptyStr] = None
    description: Optional[FeedDescription] = None
    status: Optional[LowerStr] = None
    update_frequency: Optional[str] = None
    reliability: Optional[Reliability] = None
    tags: Optional[list[str]] = None
    data_types: Optional[list[str]] = None
    format: Optional[str] = None
    authentication: Optional[str] = None
    source_organization: Optional[str] = None
    tlp_levels: Optional[list[str]] = None
    categories: Optional[list[str]] = None
    total_indicators: Optional[Counter] = None
    new_indicators_today: Optional[Counter] = None
