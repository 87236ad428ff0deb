# cleancloak/routers/deps.py

from dataclasses import dataclass
from typing import Iterable
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from cleancloak.core.jwt import TokenService, InvalidTokenError, TokenConfigError, get_token_service
from cleancloak.core.logger import get_logger
from cleancloak.core.security import SESSION_COOKIE_NAME, LOGOUT_COOKIE_VALUE
from cleancloak.db.mongo import get_db, USERS
from cleancloak.models.user import UserRole
from cleancloak.utils.errors import UnauthorizedRequestError, ForbiddenError, InternalServerError

logger = get_logger("deps")


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: UserRole

    @property
    def object_id(self) -> ObjectId:
        return ObjectId(self.id)


async def get_current_user(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentUser:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token or token == LOGOUT_COOKIE_VALUE:
        raise UnauthorizedRequestError("Not authorized to access this route. Please login.")

    try:
        user_id = tokens.verify(token)
    except TokenConfigError:
        logger.error("Token verification attempted without a signing secret")
        raise InternalServerError("Server configuration error. Please contact support.")
    except InvalidTokenError as e:
        logger.info(f"Rejected session token: {e}")
        raise UnauthorizedRequestError("Invalid token")

    try:
        user = await db[USERS].find_one({"_id": ObjectId(user_id)}, {"role": 1})
    except (InvalidId, TypeError):
        user = None

    if not user:
        raise UnauthorizedRequestError("Not authorized, user not found")

    current = CurrentUser(id=str(user["_id"]), role=UserRole(user.get("role", UserRole.CLIENT)))
    request.state.user = current
    return current


def authorize(current_user: CurrentUser, allowed: Iterable[UserRole]) -> CurrentUser:
    if current_user.role not in set(allowed):
        raise ForbiddenError(
            f"User role '{current_user.role.value}' is not authorized to access this route"
        )
    return current_user


def require_roles(*roles: UserRole):
    """Dependency factory: only the given roles pass."""
    for role in roles:
        if not isinstance(role, UserRole):
            raise TypeError(f"require_roles expects UserRole members, got {role!r}")
    allowed = frozenset(roles)

    def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        return authorize(current_user, allowed)

    return _checker


require_admin = require_roles(UserRole.ADMIN)
require_cleaner = require_roles(UserRole.CLEANER)
