"""
Entity definitions for the four record types and the registry factory.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy.engine import Engine

from ..db import create_session_factory, init_db
from ..models.common import format_timestamp
from ..models.actor import ActorCreate, ActorUpdate
from ..models.feed import FeedCreate, FeedUpdate
from ..models.incident import IncidentCreate, IncidentUpdate
from ..models.indicator import IndicatorCreate, IndicatorUpdate
from ..utils.config import Settings
from .query_filter import CARD_GRID_PAGE_SIZE, FilterSpec
from .resources import ResourceDefinition, ResourceRegistry
from .store import DocumentStore, JsonFileStore, ResourceStore

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


def timestamp(now: datetime) -> str:
    """Format for every server-stamped date, shared with client-supplied indicator dates."""
    return format_timestamp(now)


def field_is(record: dict, field: str, value: str) -> bool:
    """Case-insensitive comparison of one record field against a value."""
    return str(record.get(field) or "").lower() == value.lower()


def is_active_with_severity(record: dict, level: str) -> bool:
    return field_is(record, "severity", level) and field_is(record, "status", "active")


def is_open_critical(record: dict) -> bool:
    return field_is(record, "severity", "critical") and not field_is(record, "status", "closed")


def _stamp_actor(fields: dict, now: datetime) -> dict:
    today = now.date().isoformat()
    return {
        **fields,
        "firstSeen": fields.get("firstSeen") or today,
        "lastSeen": fields.get("lastSeen") or today,
    }


def _stamp_indicator(fields: dict, now: datetime) -> dict:
    ts = timestamp(now)
    return {
        **fields,
        "firstSeen": fields.get("firstSeen") or ts,
        "lastSeen": fields.get("lastSeen") or ts,
    }


def _stamp_incident(fields: dict, now: datetime) -> dict:
    ts = timestamp(now)
    return {
        **fields,
        "date_discovered": ts,
        "date_updated": ts,
        "timeline": [{"timestamp": ts, "event": "Incident created"}],
    }


def _update_incident(existing: dict, changes: dict, now: datetime) -> dict:
    """Refresh date_updated and append status changes and notes to the timeline."""
    ts = timestamp(now)
    changes = dict(changes)
    note = changes.pop("timeline_event", None)

    timeline = list(existing.get("timeline") or [])
    new_status = changes.get("status")
    old_status = existing.get("status")
    if new_status and str(new_status).lower() != str(old_status or "").lower():
        timeline.append({
            "timestamp": ts,
            "event": f"Status changed from {old_status} to {new_status}",
        })
    if note:
        timeline.append({"timestamp": ts, "event": note})
    if len(timeline) != len(existing.get("timeline") or []):
        changes["timeline"] = timeline

    changes["date_updated"] = ts
    return changes


def _stamp_feed(fields: dict, now: datetime) -> dict:
    return {
        **fields,
        "last_updated": timestamp(now),
        "total_indicators": 0,
        "new_indicators_today": 0,
    }


def _update_feed(existing: dict, changes: dict, now: datetime) -> dict:
    return {**changes, "last_updated": timestamp(now)}


ACTORS = ResourceDefinition(
    name="actors",
    label="Threat actor",
    plural="threat actors",
    create_model=ActorCreate,
    update_model=ActorUpdate,
    filters=FilterSpec(
        search_fields=("name", "description", "origin"),
        search_list_fields=("aliases",),
        categorical={
            "origin": "origin",
            "status": "status",
            "motivation": "motivation",
            "sophistication": "sophistication",
        },
    ),
    on_create=_stamp_actor,
)

INDICATORS = ResourceDefinition(
    name="indicators",
    label="Indicator",
    plural="indicators",
    create_model=IndicatorCreate,
    update_model=IndicatorUpdate,
    filters=FilterSpec(
        search_fields=("value", "description", "source"),
        search_list_fields=("tags",),
        categorical={
            "type": "type",
            "status": "status",
            "severity": "severity",
            "tlp": "tlp",
        },
        thresholds={"confidence": "confidence"},
    ),
    unique_fields=("value",),
    references={"source": "feeds"},
    on_create=_stamp_indicator,
)

INCIDENTS = ResourceDefinition(
    name="incidents",
    label="Incident",
    plural="incidents",
    create_model=IncidentCreate,
    update_model=IncidentUpdate,
    filters=FilterSpec(
        search_fields=("title", "description", "threat_actor", "attack_vector"),
        search_list_fields=("affected_systems",),
        categorical={"severity": "severity", "status": "status"},
    ),
    references={"threat_actor": "actors", "indicators": "indicators"},
    on_create=_stamp_incident,
    on_update=_update_incident,
)

FEEDS = ResourceDefinition(
    name="feeds",
    label="Threat feed",
    plural="threat feeds",
    create_model=FeedCreate,
    update_model=FeedUpdate,
    filters=FilterSpec(
        search_fields=("name", "description", "source_organization"),
        search_list_fields=("tags",),
        categorical={"type": "type", "status": "status", "reliability": "reliability"},
        default_limit=CARD_GRID_PAGE_SIZE,
    ),
    unique_fields=("name",),
    on_create=_stamp_feed,
    on_update=_update_feed,
)

RESOURCE_DEFINITIONS = (ACTORS, INDICATORS, INCIDENTS, FEEDS)


def build_registry(settings: Settings, engine: Optional[Engine] = None) -> ResourceRegistry:
    """
    Open one store per collection on the configured backend.

    Args:
        settings: Application settings
        engine: SQLAlchemy engine, required for the document backend
    """
    if settings.storage_backend == "document":
        if engine is None:
            raise ValueError("The document storage backend requires a database engine")
        init_db(engine)
        session_factory = create_session_factory(engine)

        def open_store(collection: str) -> ResourceStore:
            return DocumentStore(collection, session_factory)
    else:
        data_dir = Path(settings.data_dir)

        def open_store(collection: str) -> ResourceStore:
            return JsonFileStore(collection, data_dir)

    registry = ResourceRegistry(users=open_store(USERS_COLLECTION))
    for definition in RESOURCE_DEFINITIONS:
        registry.register(definition, open_store(definition.name))
    logger.info(
        f"Opened {len(RESOURCE_DEFINITIONS)} collections on the {settings.storage_backend} backend"
    )
    return registry
