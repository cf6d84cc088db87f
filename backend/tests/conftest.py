"""Shared test fixtures."""
import json

import pytest
from fastapi.testclient import TestClient

from threatboard.main import create_app
from threatboard.services.store import JsonFileStore
from threatboard.utils.config import Settings


@pytest.fixture
def data_dir(tmp_path):
    """Empty data directory for the JSON backend."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def seed(data_dir):
    """Write records straight into a collection file."""
    def write(collection, records):
        path = data_dir / f"{collection}.json"
        path.write_text(json.dumps(records, indent=2), encoding="utf-8")
        return path
    return write


@pytest.fixture
def read_collection(data_dir):
    """Read a collection file back as stored."""
    def read(collection):
        path = data_dir / f"{collection}.json"
        if not path.exists():
            return []
        return json.loads(path.read_text(encoding="utf-8"))
    return read


@pytest.fixture
def settings(data_dir):
    """Settings for a JSON-backed app with the login gate off."""
    return Settings(
        _env_file=None,
        environment="test",
        data_dir=str(data_dir),
        auth_enabled=False,
        rate_limit_enabled=False,
    )


@pytest.fixture
def client(settings):
    """FastAPI test client."""
    return TestClient(create_app(settings))


@pytest.fixture
def auth_settings(data_dir):
    """Settings with the login gate on."""
    return Settings(
        _env_file=None,
        environment="test",
        data_dir=str(data_dir),
        auth_enabled=True,
        secret_key="test-secret",
        rate_limit_enabled=False,
    )


@pytest.fixture
def auth_client(auth_settings):
    """Test client for an app that requires a bearer token on writes."""
    return TestClient(create_app(auth_settings))


@pytest.fixture
def auth_headers(auth_client):
    """Register an analyst and return their bearer header."""
    response = auth_client.post("/api/auth/register", json={
        "username": "analyst",
        "email": "analyst@example.com",
        "password": "s3cretpass",
    })
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def document_settings(tmp_path):
    """Settings for the SQLAlchemy document backend on a temporary SQLite file."""
    return Settings(
        _env_file=None,
        environment="test",
        storage_backend="document",
        database_url=f"sqlite:///{tmp_path / 'threatboard.db'}",
        auth_enabled=False,
        rate_limit_enabled=False,
    )


@pytest.fixture
def document_client(document_settings):
    """Test client for an app on the document backend."""
    return TestClient(create_app(document_settings))


@pytest.fixture
def actor_store(data_dir):
    return JsonFileStore("actors", data_dir)


@pytest.fixture
def sample_actors():
    return [
        {
            "id": 1,
            "name": "APT28",
            "aliases": ["Fancy Bear", "Sofacy"],
            "origin": "Russia",
            "firstSeen": "2007-01-01",
            "lastSeen": "2024-03-01",
            "tactics": ["Initial Access"],
            "techniques": ["T1566"],
            "description": "State-sponsored espionage group",
            "sophistication": "expert",
            "motivation": "espionage",
            "targets": ["Government"],
            "status": "active",
        },
        {
            "id": 2,
            "name": "Lazarus Group",
            "aliases": ["Hidden Cobra"],
            "origin": "North Korea",
            "firstSeen": "2009-01-01",
            "lastSeen": "2024-02-15",
            "description": "Financially motivated intrusions",
            "sophistication": "advanced",
            "motivation": "financial",
            "status": "active",
        },
        {
            "id": 5,
            "name": "Old Crew",
            "aliases": [],
            "origin": "russia",
            "description": "Dormant actor",
            "sophistication": "beginner",
            "motivation": "hacktivist",
            "status": "inactive",
        },
    ]


@pytest.fixture
def sample_indicators():
    """Eight indicators, three of them critical under the legacy field name."""
    return [
        {"id": 1, "indicatorType": "IP", "value": "203.0.113.5", "severityLevel": "critical",
         "confidence": 95, "source": "AlienVault OTX", "status": "active", "tags": ["c2"]},
        {"id": 2, "indicatorType": "Domain", "value": "evil.example", "severityLevel": "critical",
         "confidence": 80, "source": "Abuse.ch", "status": "active", "tags": ["phishing"]},
        {"id": 3, "indicatorType": "Hash", "value": "d41d8cd98f00b204e9800998ecf8427e",
         "severityLevel": "critical", "confidence": 60, "source": "Internal", "status": "inactive"},
        {"id": 4, "type": "IP", "value": "198.51.100.7", "severity": "high",
         "confidence": 70, "source": "AlienVault OTX", "status": "active"},
        {"id": 5, "type": "URL", "value": "http://bad.example/payload", "severity": "medium",
         "confidence": 50, "source": "Abuse.ch", "status": "active"},
        {"id": 6, "type": "Domain", "value": "login-update.example", "severity": "low",
         "confidence": 30, "source": "Internal", "status": "active", "tags": ["Phishing"]},
        {"id": 7, "type": "IP", "value": "192.0.2.44", "severity": "high",
         "confidence": 90, "source": "Internal", "status": "inactive"},
        {"id": 8, "type": "Hash", "value": "e3b0c44298fc1c149afbf4c8996fb924", "severity": "medium",
         "confidence": 10, "source": "Abuse.ch", "status": "active"},
    ]


@pytest.fixture
def sample_incidents():
    return [
        {
            "id": 1,
            "title": "Phishing campaign against finance",
            "description": "Credential phishing emails",
            "severity": "critical",
            "status": "investigating",
            "affected_systems": ["mail-01"],
            "threat_actor": "APT28",
            "attack_vector": "Email",
            "date_discovered": "2024-03-01T10:00:00.000Z",
            "date_updated": "2024-03-01T10:00:00.000Z",
            "timeline": [{"timestamp": "2024-03-01T10:00:00.000Z", "event": "Incident created"}],
        },
        {
            "id": 2,
            "title": "Ransomware on file server",
            "description": "Encrypted shares",
            "severity": "critical",
            "status": "closed",
            "affected_systems": ["fs-02"],
        },
        {
            "id": 3,
            "incidentTitle": "Suspicious VPN logins",
            "description": "Logins from unusual locations",
            "severity": "medium",
            "status": "new",
            "affectedAssets": ["vpn-gw"],
        },
    ]


@pytest.fixture
def sample_feeds():
    return [
        {"id": 1, "name": "AlienVault OTX", "type": "community", "url": "https://otx.example",
         "description": "Open threat exchange", "status": "active", "reliability": "high",
         "tags": ["community"], "source_organization": "AT&T"},
        {"id": 2, "sourceName": "Abuse.ch", "sourceType": "open-source", "url": "https://abuse.example",
         "description": "Malware URLs", "isActive": True, "reliabilityScore": 9},
        {"id": 3, "name": "Old Feed", "type": "commercial", "url": "https://old.example",
         "description": "Retired", "status": "inactive", "reliability": "low"},
    ]


@pytest.fixture
def seeded(seed, sample_actors, sample_indicators, sample_incidents, sample_feeds):
    """Seed all four collections."""
    seed("actors", sample_actors)
    seed("indicators", sample_indicators)
    seed("incidents", sample_incidents)
    seed("feeds", sample_feeds)
