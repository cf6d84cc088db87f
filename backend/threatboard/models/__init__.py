from .actor import ActorCreate, ActorUpdate
from .indicator import IndicatorCreate, IndicatorUpdate
from .incident import Impact, IncidentCreate, IncidentUpdate
from .feed import FeedCreate, FeedUpdate
from .user import LoginRequest, RegisterRequest
from .common import (
    ErrorResponse,
    ItemResponse,
    ListResponse,
    MessageResponse,
    PageMetaOut,
    describe_validation_error,
)
from .compat import canonicalize

__all__ = [
    "ActorCreate",
    "ActorUpdate",
    "IndicatorCreate",
    "IndicatorUpdate",
    "Impact",
    "IncidentCreate",
    "IncidentUpdate",
    "FeedCreate",
    "FeedUpdate",
    "LoginRequest",
    "RegisterRequest",
    "ErrorResponse",
    "ItemResponse",
    "ListResponse",
    "MessageResponse",
    "PageMetaOut",
    "describe_validation_error",
    "canonicalize",
]
