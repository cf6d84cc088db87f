"""Threat intelligence dashboard: REST API and browser frontend."""

__version__ = "1.0.0"
