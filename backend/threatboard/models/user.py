"""
Account models for the login gate.
"""
from typing import Annotated

from pydantic import Field, field_validator

from .common import RecordModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(RecordModel):
    username: Annotated[str, Field(min_length=3, max_length=50)]
    email: Annotated[str, Field(min_length=1, pattern=EMAIL_PATTERN)]
    # bcrypt only hashes the first 72 bytes
    password: Annotated[str, Field(min_length=6, max_length=72)]

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(RecordModel):
    email: Annotated[str, Field(min_length=1)]
    password: Annotated[str, Field(min_length=1)]

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()
