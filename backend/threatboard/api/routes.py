"""
Shared API dependencies plus the health and statistics endpoints.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..errors import UnauthorizedError
from ..services.auth import UserService
from ..services.catalog import timestamp
from ..services.resources import ResourceRegistry
from ..services.stats import collect_stats
from ..utils.config import Settings, get_settings

logger = logging.getLogger(__name__)
router = APIRouter()

limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_settings().rate_limit_enabled,
)

# Per-app limits; the limiter reads them on every request
_rate_limits = {"auth": get_settings().auth_rate_limit}


def configure_rate_limits(settings: Settings) -> None:
    """Apply an app's rate-limit settings to the shared limiter."""
    limiter.enabled = settings.rate_limit_enabled
    _rate_limits["auth"] = settings.auth_rate_limit


def auth_rate_limit() -> str:
    return _rate_limits["auth"]


security_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Dependency to get the settings the running app was built with."""
    return request.app.state.settings


def get_registry(request: Request) -> ResourceRegistry:
    """Dependency to get the store registry owned by the running app."""
    return request.app.state.registry


def get_user_service(
    registry: ResourceRegistry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings),
) -> UserService:
    """Dependency to get the user account service."""
    return UserService(registry.users, settings)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    users: UserService = Depends(get_user_service),
) -> dict:
    """Dependency resolving the bearer token to a user. Always enforced."""
    if credentials is None:
        raise UnauthorizedError("Authentication token required")
    return users.resolve_token(credentials.credentials)


def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    users: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_app_settings),
) -> Optional[dict]:
    """Dependency guarding write operations; a no-op when auth is disabled."""
    if not settings.auth_enabled:
        return None
    return get_current_user(credentials, users)


@router.get("/health", tags=["Health"])
def health_check(request: Request, settings: Settings = Depends(get_app_settings)):
    """Health check endpoint."""
    return {
        "status": "OK",
        "timestamp": timestamp(datetime.now(timezone.utc)),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "environment": settings.environment,
    }


@router.get("/stats", tags=["Health"])
def get_stats(registry: ResourceRegistry = Depends(get_registry)):
    """
    Aggregate record counts.

    Includes per-collection totals, critical incidents that are not closed,
    critical indicators that are active, and active actors and feeds.
    """
    return {"data": collect_stats(registry)}
