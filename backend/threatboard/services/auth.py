"""
Login gate: password hashing, JWT issuance and the user account service.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
import jwt
from jwt.exceptions import PyJWTError
from pydantic import ValidationError as PydanticValidationError

from ..errors import StorageError, UnauthorizedError, ValidationError
from ..models.common import describe_validation_error
from ..models.user import LoginRequest, RegisterRequest
from ..utils.config import Settings
from .catalog import timestamp
from .store import ResourceStore

logger = logging.getLogger(__name__)


BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(
    data: dict,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
) -> Optional[dict]:
    """Decode and validate a JWT token. Returns None on failure."""
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except PyJWTError:
        return None


def public_user(record: dict) -> dict:
    """User fields that are safe to send to the client."""
    return {
        "id": record.get("id"),
        "username": record.get("username"),
        "email": record.get("email"),
        "createdAt": record.get("createdAt"),
        "lastLogin": record.get("lastLogin"),
    }


class UserService:
    """Registers users, checks credentials and resolves bearer tokens."""

    def __init__(self, store: ResourceStore, settings: Settings):
        self.store = store
        self.settings = settings

    def _issue_token(self, user: dict) -> str:
        return create_access_token(
            {"sub": str(user["id"])},
            self.settings.secret_key,
            algorithm=self.settings.jwt_algorithm,
            expires_minutes=self.settings.jwt_expiry_minutes,
        )

    @staticmethod
    def _parse(model, payload: Any):
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(describe_validation_error(e)) from e

    def _find_by_email(self, email: str) -> Optional[dict]:
        for user in self.store.list():
            if str(user.get("email", "")).lower() == email:
                return user
        return None

    def register(self, payload: Any) -> tuple[dict, str]:
        request = self._parse(RegisterRequest, payload)
        for user in self.store.list():
            if str(user.get("email", "")).lower() == request.email:
                raise ValidationError("Email already registered")
            if str(user.get("username", "")).lower() == request.username.lower():
                raise ValidationError("Username already taken")

        try:
            user = self.store.create({
                "username": request.username,
                "email": request.email,
                "password_hash": hash_password(request.password),
                "createdAt": timestamp(datetime.now(timezone.utc)),
                "lastLogin": None,
            })
        except StorageError as e:
            logger.error(f"Failed to store new user: {e}")
            raise StorageError("Error registering user") from e
        logger.info(f"Registered user {user['id']}")
        return user, self._issue_token(user)

    def authenticate(self, payload: Any) -> tuple[dict, str]:
        request = self._parse(LoginRequest, payload)
        user = self._find_by_email(request.email)
        if user is None or not verify_password(request.password, user.get("password_hash", "")):
            raise UnauthorizedError("Invalid credentials")

        try:
            user = self.store.update(
                user["id"], {"lastLogin": timestamp(datetime.now(timezone.utc))}
            ) or user
        except StorageError as e:
            # Login still succeeds when the last-login stamp cannot be written
            logger.error(f"Failed to record login for user {user['id']}: {e}")
        return user, self._issue_token(user)

    def resolve_token(self, token: str) -> dict:
        """Return the user a bearer token belongs to, or raise UnauthorizedError."""
        payload = decode_access_token(
            token, self.settings.secret_key, algorithm=self.settings.jwt_algorithm
        )
        if not payload or "sub" not in payload:
            raise UnauthorizedError("Invalid or expired token")
        user_id = self.store.parse_id(str(payload["sub"]))
        user = self.store.get(user_id) if user_id is not None else None
        if user is None:
            raise UnauthorizedError("User no longer exists")
        return user
