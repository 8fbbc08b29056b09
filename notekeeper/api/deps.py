"""Auth gate dependencies: get_current_user, require_roles, require_admin."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from notekeeper.core.config import Settings, get_settings
from notekeeper.core.database import get_db
from notekeeper.core.errors import AuthenticationError, AuthorizationError
from notekeeper.core.security import verify_access_token
from notekeeper.models import Role
from notekeeper.schemas.auth import CurrentUser
from notekeeper.services import users

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

SettingsDep = Annotated[Settings, Depends(get_settings)]
DbDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: DbDep,
    settings: SettingsDep,
) -> CurrentUser:
    """Dependency: require a valid Bearer token for an existing user. Raises 401 otherwise."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    user_id = verify_access_token(credentials.credentials, settings)
    if user_id is None:
        raise AuthenticationError("Invalid or expired token")
    user = users.find_by_id(db, user_id)
    if user is None:
        # A well-signed token does not mean the account still exists.
        logger.info("Token subject no longer exists", extra={"user_id": user_id})
        raise AuthenticationError("Invalid or expired token")
    return CurrentUser.model_validate(user)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def require_roles(*roles: Role | str) -> Callable[[CurrentUser], CurrentUser]:
    """Build a dependency that authenticates, then allows only the given roles (403 otherwise)."""
    allowed = frozenset(r.value if isinstance(r, Role) else r for r in roles)

    def dependency(current_user: CurrentUserDep) -> CurrentUser:
        if current_user.role not in allowed:
            logger.info(
                "Role check failed",
                extra={"user_id": current_user.id, "role": current_user.role},
            )
            raise AuthorizationError()
        return current_user

    return dependency


require_admin = require_roles(Role.ADMIN)

AdminDep = Annotated[CurrentUser, Depends(require_admin)]
