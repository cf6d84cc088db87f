"""
Aggregate counts for the dashboard.
"""
from datetime import datetime, timezone

from .catalog import field_is, is_active_with_severity, is_open_critical, timestamp
from .resources import ResourceRegistry


def collect_stats(registry: ResourceRegistry) -> dict:
    """Count every collection plus the critical and active subsets."""
    actors = registry["actors"].all()
    indicators = registry["indicators"].all()
    incidents = registry["incidents"].all()
    feeds = registry["feeds"].all()

    return {
        "totalActors": len(actors),
        "totalIndicators": len(indicators),
        "totalIncidents": len(incidents),
        "totalFeeds": len(feeds),
        "criticalIncidents": sum(1 for i in incidents if is_open_critical(i)),
        "criticalIndicators": sum(
            1 for i in indicators if is_active_with_severity(i, "critical")
        ),
        "activeActors": sum(1 for a in actors if field_is(a, "status", "active")),
        "activeFeeds": sum(1 for f in feeds if field_is(f, "status", "active")),
        "timestamp": timestamp(datetime.now(timezone.utc)),
    }
