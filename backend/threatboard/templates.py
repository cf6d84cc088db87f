"""
Jinja2 environment for the HTML page shells.

Pages only lay out the shell and name the script that fills it; records are
fetched by the browser from the JSON API.
"""
from pathlib import Path

from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render(name: str, context: dict) -> HTMLResponse:
    """Render a template from ``templates/`` into an HTML response."""
    return HTMLResponse(env.get_template(name).render(**context))
