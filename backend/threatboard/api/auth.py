"""
Authentication routes: register, login, current user, logout.
"""
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from ..services.auth import UserService, public_user
from .routes import auth_rate_limit, get_current_user, get_user_service, limiter

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", status_code=201)
@limiter.limit(auth_rate_limit)
def register(
    request: Request,
    payload: Any = Body(...),
    users: UserService = Depends(get_user_service),
):
    """Create an account and return a bearer token for it."""
    user, token = users.register(payload)
    return {
        "message": "User registered successfully",
        "token": token,
        "user": public_user(user),
    }


@router.post("/login")
@limiter.limit(auth_rate_limit)
def login(
    request: Request,
    payload: Any = Body(...),
    users: UserService = Depends(get_user_service),
):
    """Exchange email and password for a bearer token."""
    user, token = users.authenticate(payload)
    logger.info(f"User {user['id']} logged in")
    return {
        "message": "Login successful",
        "token": token,
        "user": public_user(user),
    }


@router.get("/me")
def current_user(user: dict = Depends(get_current_user)):
    """Return the account the bearer token belongs to."""
    return {"user": public_user(user)}


@router.post("/logout")
def logout():
    """Tokens are dropped on the client; nothing is tracked server-side."""
    return {"message": "Logout successful"}
