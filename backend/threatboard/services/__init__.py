from .query_filter import FilterSpec, PageMeta, apply_query
from .store import ResourceStore, JsonFileStore, DocumentStore
from .resources import ResourceDefinition, ResourceController, ResourceRegistry
from .catalog import RESOURCE_DEFINITIONS, build_registry
from .stats import collect_stats
from .auth import UserService

__all__ = [
    "FilterSpec",
    "PageMeta",
    "apply_query",
    "ResourceStore",
    "JsonFileStore",
    "DocumentStore",
    "ResourceDefinition",
    "ResourceController",
    "ResourceRegistry",
    "RESOURCE_DEFINITIONS",
    "build_registry",
    "collect_stats",
    "UserService",
]
