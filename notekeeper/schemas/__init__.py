"""Pydantic request/response schemas."""

from notekeeper.schemas.admin import RoleUpdateRequest, UserAdminView
from notekeeper.schemas.auth import (
    AuthResponse,
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    SignupRequest,
    UserPublic,
)
from notekeeper.schemas.health import HealthResponse
from notekeeper.schemas.notes import NoteResponse, NoteWrite

__all__ = [
    "AuthResponse",
    "CurrentUser",
    "ForgotPasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "NoteResponse",
    "NoteWrite",
    "RoleUpdateRequest",
    "SignupRequest",
    "UserAdminView",
    "UserPublic",
]
