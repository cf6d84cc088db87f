"""
Server-rendered page shells for the browser frontend.

Each resource page is the same template, driven by the filter and form field
configuration below. Data is fetched by the page's manager script.
"""
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from .templates import render

router = APIRouter(include_in_schema=False)

SEVERITIES = ["low", "medium", "high", "critical"]

PAGES = {
    "actors": {
        "title": "Threat Actors",
        "singular": "Threat Actor",
        "script": "actors.js",
        "view": "table",
        "page_size": 10,
        "columns": ["Name", "Origin", "Motivation", "Sophistication", "Last Seen", "Status", ""],
        "filters": [
            {"param": "origin", "label": "Origin", "input": "text"},
            {"param": "motivation", "label": "Motivation",
             "options": ["financial", "political", "hacktivist", "espionage", "unknown"]},
            {"param": "status", "label": "Status", "options": ["active", "inactive"]},
        ],
        "fields": [
            {"name": "name", "label": "Name", "required": True},
            {"name": "aliases", "label": "Aliases (comma separated)", "kind": "list"},
            {"name": "origin", "label": "Origin", "required": True},
            {"name": "description", "label": "Description", "kind": "textarea", "required": True},
            {"name": "motivation", "label": "Motivation", "kind": "select",
             "options": ["financial", "political", "hacktivist", "espionage", "unknown"]},
            {"name": "sophistication", "label": "Sophistication", "kind": "select",
             "options": ["beginner", "intermediate", "advanced", "expert"]},
            {"name": "tactics", "label": "Tactics (comma separated)", "kind": "list"},
            {"name": "techniques", "label": "Techniques (comma separated)", "kind": "list"},
            {"name": "targets", "label": "Targets (comma separated)", "kind": "list"},
            {"name": "status", "label": "Status", "kind": "select", "options": ["active", "inactive"]},
        ],
    },
    "indicators": {
        "title": "Threat Indicators",
        "singular": "Indicator",
        "script": "indicators.js",
        "view": "table",
        "page_size": 10,
        "columns": ["Type", "Value", "Confidence", "Severity", "Source", "Last Seen", "Status", ""],
        "filters": [
            {"param": "type", "label": "Type", "options": ["IP", "Domain", "URL", "Hash"]},
            {"param": "severity", "label": "Severity", "options": SEVERITIES},
            {"param": "confidence", "label": "Min. confidence", "options": ["25", "50", "75", "90"]},
            {"param": "status", "label": "Status", "options": ["active", "inactive"]},
        ],
        "fields": [
            {"name": "type", "label": "Type", "kind": "select", "options": ["IP", "Domain", "URL", "Hash"],
             "required": True},
            {"name": "value", "label": "Value", "required": True},
            {"name": "source", "label": "Source", "required": True},
            {"name": "confidence", "label": "Confidence (0-100)", "kind": "number"},
            {"name": "severity", "label": "Severity", "kind": "select", "options": SEVERITIES},
            {"name": "tlp", "label": "TLP", "kind": "select", "options": ["WHITE", "GREEN", "AMBER", "RED"]},
            {"name": "tags", "label": "Tags (comma separated)", "kind": "list"},
            {"name": "description", "label": "Description", "kind": "textarea"},
            {"name": "status", "label": "Status", "kind": "select", "options": ["active", "inactive"]},
        ],
    },
    "incidents": {
        "title": "Security Incidents",
        "singular": "Incident",
        "script": "incidents.js",
        "view": "table",
        "page_size": 10,
        "columns": ["Title", "Severity", "Status", "Threat Actor", "Discovered", "Updated", ""],
        "filters": [
            {"param": "severity", "label": "Severity", "options": SEVERITIES},
            {"param": "status", "label": "Status",
             "options": ["new", "investigating", "contained", "resolved", "closed"]},
        ],
        "fields": [
            {"name": "title", "label": "Title", "required": True},
            {"name": "description", "label": "Description", "kind": "textarea", "required": True},
            {"name": "severity", "label": "Severity", "kind": "select", "options": SEVERITIES},
            {"name": "status", "label": "Status", "kind": "select",
             "options": ["new", "investigating", "contained", "resolved", "closed"]},
            {"name": "threat_actor", "label": "Threat actor"},
            {"name": "attack_vector", "label": "Attack vector"},
            {"name": "affected_systems", "label": "Affected systems (comma separated)", "kind": "list"},
            {"name": "analyst", "label": "Analyst"},
            {"name": "timeline_event", "label": "Add timeline note", "edit_only": True},
        ],
    },
    "feeds": {
        "title": "Threat Feeds",
        "singular": "Feed",
        "script": "feeds.js",
        "view": "grid",
        "page_size": 9,
        "columns": [],
        "filters": [
            {"param": "type", "label": "Type", "input": "text"},
            {"param": "reliability", "label": "Reliability",
             "options": ["low", "medium", "high", "very-high"]},
            {"param": "status", "label": "Status", "options": ["active", "inactive"]},
        ],
        "fields": [
            {"name": "name", "label": "Name", "required": True},
            {"name": "type", "label": "Type", "required": True},
            {"name": "url", "label": "URL", "required": True},
            {"name": "description", "label": "Description", "kind": "textarea", "required": True},
            {"name": "reliability", "label": "Reliability", "kind": "select",
             "options": ["low", "medium", "high", "very-high"]},
            {"name": "update_frequency", "label": "Update frequency"},
            {"name": "format", "label": "Format"},
            {"name": "source_organization", "label": "Organization"},
            {"name": "tags", "label": "Tags (comma separated)", "kind": "list"},
            {"name": "status", "label": "Status", "kind": "select", "options": ["active", "inactive"]},
        ],
    },
}


@router.get("/", response_class=HTMLResponse)
@router.get("/dashboard", response_class=HTMLResponse)
def dashboard():
    return render("dashboard.html", {"active": "dashboard", "pages": PAGES})


@router.get("/login", response_class=HTMLResponse)
def login_page():
    return render("login.html", {"mode": "login"})


@router.get("/signup", response_class=HTMLResponse)
def signup_page():
    return render("login.html", {"mode": "signup"})


def _resource_page(resource: str):
    def page():
        return render("resource.html", {
            "active": resource,
            "resource": resource,
            "pages": PAGES,
            "page": PAGES[resource],
        })
    page.__name__ = f"{resource}_page"
    return page


for _resource in PAGES:
    router.add_api_route(f"/{_resource}", _resource_page(_resource), response_class=HTMLResponse)
