"""
Compatibility mapping from the legacy document-store field names onto the
canonical record schema.

Legacy records (``actorName``, ``indicatorType``, ``severityLevel``...) are
renamed on the way in, both when reading stored collections and when accepting
request bodies. A legacy key never overwrites a canonical key that is already
present.
"""
from typing import Any, Optional

LEGACY_FIELDS: dict[str, dict[str, str]] = {
    "actors": {
        "actorName": "name",
        "knownAliases": "aliases",
        "alias": "aliases",
        "sophisticationLevel": "sophistication",
        "activeSince": "firstSeen",
        "lastActivity": "lastSeen",
        "targetSectors": "targets",
        "isActive": "status",
    },
    "indicators": {
        "indicatorType": "type",
        "severityLevel": "severity",
        "isActive": "status",
    },
    "incidents": {
        "incidentTitle": "title",
        "reportedDate": "date_discovered",
        "affectedAssets": "affected_systems",
        "relatedIndicators": "indicators",
        "linkedActors": "threat_actor",
        "assignedTo": "analyst",
    },
    "feeds": {
        "sourceName": "name",
        "sourceType": "type",
        "reliabilityScore": "reliability",
        "lastChecked": "last_updated",
        "isActive": "status",
    },
}

# Upper bounds of each reliability band on the legacy 0-10 score
RELIABILITY_BANDS = ((3, "low"), (6, "medium"), (8, "high"), (10, "very-high"))


def reliability_from_score(score: float) -> str:
    """Map a legacy 0-10 reliability score onto the ordinal scale."""
    score = max(0.0, min(float(score), 10.0))
    for upper, label in RELIABILITY_BANDS:
        if score <= upper:
            return label
    return "very-high"


def coerce_reliability(value: Any) -> Any:
    """Accept ordinal labels as-is and translate numeric scores."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return reliability_from_score(value)
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return reliability_from_score(float(stripped))
        except ValueError:
            return stripped.lower().replace(" ", "-").replace("_", "-")
    return value


def _status_from_flag(flag: Any) -> str:
    return "active" if flag else "inactive"


def _first(value: Any) -> Optional[Any]:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def canonicalize(resource: str, record: dict) -> dict:
    """
    Return a copy of ``record`` using canonical field names.

    Args:
        resource: Collection name (actors, indicators, incidents, feeds)
        record: Stored record or request body, possibly using legacy names
    """
    mapping = LEGACY_FIELDS.get(resource, {})
    out = dict(record)

    if "_id" in out:
        legacy_id = out.pop("_id")
        out.setdefault("id", legacy_id)

    for legacy, canonical in mapping.items():
        if legacy not in out:
            continue
        value = out.pop(legacy)
        if canonical in out:
            continue
        if legacy == "isActive":
            value = _status_from_flag(value)
        elif legacy == "linkedActors":
            value = _first(value)
        out[canonical] = value

    if resource == "actors" and isinstance(out.get("motivation"), list):
        out["motivation"] = _first(out["motivation"]) or "unknown"

    if resource == "feeds" and "reliability" in out:
        out["reliability"] = coerce_reliability(out["reliability"])

    return out
