"""Tests for Pydantic models and the legacy field mapping."""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from threatboard.models.actor import ActorCreate, ActorUpdate
from threatboard.models.common import describe_validation_error, format_timestamp
from threatboard.models.compat import canonicalize, coerce_reliability, reliability_from_score
from threatboard.models.feed import FeedCreate, FeedUpdate
from threatboard.models.incident import IncidentCreate, IncidentUpdate
from threatboard.models.indicator import IndicatorCreate, IndicatorUpdate
from threatboard.models.user import RegisterRequest


class TestActorModels:
    def test_defaults(self):
        actor = ActorCreate(name="APT99", origin="Unknown", description="test")
        assert actor.aliases == []
        assert actor.sophistication == "intermediate"
        assert actor.motivation == "unknown"
        assert actor.status == "active"
        assert actor.firstSeen is None

    def test_enums_are_lowercased(self):
        actor = ActorCreate(
            name="APT99", origin="Unknown", description="test",
            sophistication="Expert", motivation="Espionage", status="INACTIVE",
        )
        assert actor.sophistication == "expert"
        assert actor.motivation == "espionage"
        assert actor.status == "inactive"

    def test_name_length(self):
        with pytest.raises(ValidationError):
            ActorCreate(name="x" * 101, origin="Unknown", description="test")

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            ActorCreate(name="   ", origin="Unknown", description="test")

    def test_update_changes_only_sent_fields(self):
        update = ActorUpdate.model_validate({"status": "inactive", "id": 5, "colour": "red"})
        assert update.changes() == {"status": "inactive"}

    def test_update_cannot_clear_required_fields(self):
        update = ActorUpdate.model_validate({"name": None, "targets": None})
        assert update.changes() == {"targets": None}


class TestIndicatorModels:
    def test_type_is_canonicalized(self):
        ind = IndicatorCreate(type="ip", value="1.2.3.4", source="OTX")
        assert ind.type == "IP"
        assert IndicatorCreate(type="DOMAIN", value="a.example", source="OTX").type == "Domain"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            IndicatorCreate(type="email", value="a@b.c", source="OTX")

    def test_confidence_is_clamped(self):
        assert IndicatorCreate(type="IP", value="1", source="s", confidence=150).confidence == 100
        assert IndicatorCreate(type="IP", value="1", source="s", confidence=-3).confidence == 0
        assert IndicatorCreate(type="IP", value="1", source="s", confidence="72.6").confidence == 73

    def test_non_numeric_confidence_rejected(self):
        with pytest.raises(ValidationError):
            IndicatorCreate(type="IP", value="1", source="s", confidence="high")

    def test_tlp_and_tags_normalized(self):
        ind = IndicatorCreate(type="IP", value="1", source="s", tlp="amber", tags=[" C2 ", "APT"])
        assert ind.tlp == "AMBER"
        assert ind.tags == ["c2", "apt"]

    def test_defaults(self):
        ind = IndicatorCreate(type="IP", value="1", source="s")
        assert ind.confidence == 50
        assert ind.severity == "medium"
        assert ind.tlp == "WHITE"
        assert ind.status == "active"

    def test_empty_source_is_missing(self):
        with pytest.raises(ValidationError) as exc_info:
            IndicatorCreate(type="IP", value="1", source="  ")
        assert describe_validation_error(exc_info.value) == "Field 'source' is required"

    def test_update_whitelist(self):
        update = IndicatorUpdate.model_validate({"severity": "HIGH", "firstSeenBy": "x"})
        assert update.changes() == {"severity": "high"}

    def test_dates_use_server_timestamp_format(self):
        indicator = IndicatorCreate.model_validate({
            "type": "ip", "value": "203.0.113.9", "source": "OTX",
            "firstSeen": "2024-01-01T00:00:00",
            "lastSeen": "2024-01-02T03:04:05.678+02:00",
        })
        data = indicator.model_dump(mode="json")
        assert data["firstSeen"] == "2024-01-01T00:00:00.000Z"
        assert data["lastSeen"] == "2024-01-02T01:04:05.678Z"

    def test_update_dates_use_server_timestamp_format(self):
        update = IndicatorUpdate.model_validate({"lastSeen": "2024-06-01T12:00:00Z"})
        assert update.changes() == {"lastSeen": "2024-06-01T12:00:00.000Z"}


class TestFormatTimestamp:
    def test_naive_is_utc(self):
        assert format_timestamp(datetime(2024, 5, 1, 12, 30, 45, 123456)) == "2024-05-01T12:30:45.123Z"

    def test_aware_is_converted(self):
        value = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2024-05-01T12:30:00.000Z"


class TestIncidentModels:
    def test_defaults(self):
        incident = IncidentCreate(title="Breach", description="Something happened")
        assert incident.status == "new"
        assert incident.severity == "medium"
        assert incident.impact.confidentiality == "low"
        assert incident.threat_actor is None

    def test_blank_threat_actor_is_none(self):
        incident = IncidentCreate(title="Breach", description="d", threat_actor="  ")
        assert incident.threat_actor is None

    def test_invalid_status_rejected(self):
        with pytest.raises(ValidationError):
            IncidentCreate(title="Breach", description="d", status="done")

    def test_timeline_is_not_writable(self):
        update = IncidentUpdate.model_validate({
            "timeline": [],
            "timeline_event": "Contained at the firewall",
        })
        assert update.changes() == {"timeline_event": "Contained at the firewall"}


class TestFeedModels:
    def test_reliability_labels(self):
        feed = FeedCreate(name="OTX", type="community", url="https://x", description="d",
                          reliability="Very High")
        assert feed.reliability == "very-high"

    def test_numeric_reliability(self):
        feed = FeedCreate(name="OTX", type="community", url="https://x", description="d",
                          reliability=7.5)
        assert feed.reliability == "high"

    def test_counters_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            FeedUpdate(total_indicators=-1)


class TestReliability:
    def test_bands(self):
        assert reliability_from_score(0) == "low"
        assert reliability_from_score(3) == "low"
        assert reliability_from_score(5) == "medium"
        assert reliability_from_score(8) == "high"
        assert reliability_from_score(9.5) == "very-high"
        assert reliability_from_score(42) == "very-high"

    def test_coerce_leaves_unknown_text(self):
        assert coerce_reliability("bogus") == "bogus"
        assert coerce_reliability("4") == "medium"


class TestCanonicalize:
    def test_legacy_actor(self):
        record = canonicalize("actors", {
            "_id": "abc",
            "actorName": "APT1",
            "knownAliases": ["Comment Crew"],
            "motivation": ["espionage", "financial"],
            "isActive": False,
        })
        assert record == {
            "id": "abc",
            "name": "APT1",
            "aliases": ["Comment Crew"],
            "motivation": "espionage",
            "status": "inactive",
        }

    def test_canonical_key_wins(self):
        record = canonicalize("indicators", {"severity": "low", "severityLevel": "critical"})
        assert record == {"severity": "low"}

    def test_legacy_incident(self):
        record = canonicalize("incidents", {
            "incidentTitle": "Breach",
            "linkedActors": ["a1", "a2"],
            "relatedIndicators": ["i1"],
        })
        assert record == {"title": "Breach", "threat_actor": "a1", "indicators": ["i1"]}

    def test_legacy_feed(self):
        record = canonicalize("feeds", {"sourceName": "OTX", "reliabilityScore": 2, "isActive": True})
        assert record == {"name": "OTX", "reliability": "low", "status": "active"}

    def test_input_is_not_mutated(self):
        original = {"actorName": "APT1"}
        canonicalize("actors", original)
        assert original == {"actorName": "APT1"}


class TestDescribeValidationError:
    def test_single_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            IndicatorCreate.model_validate({"type": "IP", "source": "s"})
        assert describe_validation_error(exc_info.value) == "Field 'value' is required"

    def test_several_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            ActorCreate.model_validate({"origin": "x"})
        assert describe_validation_error(exc_info.value) == "Fields 'name', 'description' are required"

    def test_invalid_value(self):
        with pytest.raises(ValidationError) as exc_info:
            ActorCreate.model_validate({"name": "a", "origin": "b", "description": "c", "status": "gone"})
        assert describe_validation_error(exc_info.value).startswith("Invalid value for field 'status'")


class TestRegisterRequest:
    def test_email_lowercased(self):
        req = RegisterRequest(username="analyst", email="Analyst@Example.COM", password="secret1")
        assert req.email == "analyst@example.com"

    def test_bad_email(self):
        with pytest.raises(ValidationError):
            RegisterRequest(username="analyst", email="not-an-email", password="secret1")

    def test_short_password(self):
        with pytest.raises(ValidationError):
            RegisterRequest(username="analyst", email="a@b.co", password="123")
