from fastapi import Depends

from auth.auth_utils import CurrentUser, get_current_user
from constants import ROLE_ADMIN, ROLE_MODERATOR
from utils.exceptions import ForbiddenException


def require_roles(*roles: str):
    """Build a dependency that admits only callers holding one of ``roles``."""
    async def verify_role(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise ForbiddenException(
                f"User role '{current_user.role}' is not authorized to access this route"
            )
        return current_user

    return verify_role


verify_admin = require_roles(ROLE_ADMIN)
verify_event_manager = require_roles(ROLE_ADMIN, ROLE_MODERATOR)
