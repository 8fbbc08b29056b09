"""Request/response schemas for auth endpoints."""

from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    field_validator,
)

from notekeeper.core.security import (
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)

FORGOT_PASSWORD_MESSAGE = (
    "If an account exists with this email, you will receive password reset instructions."
)


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


# Trimmed, checked by email-validator, then lower-cased for storage and lookup.
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(str.lower)]

_email_adapter = TypeAdapter(NormalizedEmail)


def normalize_email(value: str) -> str:
    """Trim and lower-case an email; raise ValueError if it is not well-formed."""
    return _email_adapter.validate_python(value)


def normalize_username(value: str) -> str:
    username = (value or "").strip()
    if len(username) < USERNAME_MIN_LEN:
        raise ValueError(f"Username must be at least {USERNAME_MIN_LEN} characters long")
    if len(username) > USERNAME_MAX_LEN:
        raise ValueError(f"Username must be at most {USERNAME_MAX_LEN} characters long")
    return username


class SignupRequest(BaseModel):
    """New account credentials. Every invalid field is reported."""

    username: str = Field(..., description="Display name (min 3 chars)")
    email: NormalizedEmail = Field(..., description="Email address")
    password: str = Field(..., description="Password (min 6 chars)")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return normalize_username(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < PASSWORD_MIN_LEN:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LEN} characters long")
        return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: NormalizedEmail = Field(..., description="Email address")
    password: str = Field(..., description="Password")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class ForgotPasswordRequest(BaseModel):
    email: NormalizedEmail = Field(..., description="Email address of the account")


class UserPublic(BaseModel):
    """Public projection of a user. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    role: str


class CurrentUser(UserPublic):
    """Authenticated user resolved by the auth gate, passed into handlers."""


class AuthResponse(BaseModel):
    """Session token plus the user it was issued for."""

    token: str = Field(..., description="JWT session token; send as 'Authorization: Bearer <token>'")
    user: UserPublic


class MessageResponse(BaseModel):
    message: str
