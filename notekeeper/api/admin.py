"""Admin-only user management (RBAC)."""

import logging

from fastapi import APIRouter

from notekeeper.api.deps import AdminDep, DbDep
from notekeeper.models import Role, User
from notekeeper.schemas.admin import RoleUpdateRequest, UserAdminView
from notekeeper.services import users

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/users", response_model=list[UserAdminView])
def list_users(_admin: AdminDep, db: DbDep) -> list[User]:
    """List all users (admin only). Password hashes and reset tokens are never included."""
    return users.list_users(db)


@router.patch("/users/{user_id}/role", response_model=UserAdminView)
def update_user_role(
    user_id: str,
    body: RoleUpdateRequest,
    admin: AdminDep,
    db: DbDep,
) -> User:
    """Set a user's role to 'user' or 'admin'. 404 if the user does not exist."""
    user = users.set_role(db, user_id, Role(body.role))
    logger.info(
        "User role updated",
        extra={"admin_id": admin.id, "target_user_id": user.id, "role": user.role},
    )
    return user
