# cleancloak/routers/auth.py

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from cleancloak.core.jwt import TokenService, get_token_service
from cleancloak.core.logger import get_logger
from cleancloak.core.security import (
    hash_password, verify_password, dummy_verify, set_session_cookie, clear_session_cookie,
)
from cleancloak.db.mongo import get_db, USERS
from cleancloak.models.common import is_phone
from cleancloak.models.user import RegisterRequest, LoginRequest, public_user
from cleancloak.routers.deps import CurrentUser, get_current_user
from cleancloak.utils.errors import ConflictError, UnauthorizedRequestError
from cleancloak.utils.responses import format_response

router = APIRouter(tags=["auth"])
logger = get_logger("auth")

DUPLICATE_PHONE = "User with this phone number already exists"
INVALID_CREDENTIALS = "Invalid credentials"


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register a new user")
async def register(
    user: RegisterRequest,
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    logger.info(f"Registration attempt for phone ending {user.phone[-4:]} as {user.role.value}")

    existing = await db[USERS].find_one({"phone": user.phone}, {"_id": 1})
    if existing:
        raise ConflictError(DUPLICATE_PHONE)

    now = datetime.now(timezone.utc)
    user_doc = {
        "name": user.name,
        "phone": user.phone,
        "password": await hash_password(user.password),
        "role": user.role.value,
        "email": None,
        "profile_image": "",
        "device_tokens": [],
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = await db[USERS].insert_one(user_doc)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration for the same phone.
        raise ConflictError(DUPLICATE_PHONE)
    user_doc["_id"] = result.inserted_id

    set_session_cookie(response, tokens.issue(str(result.inserted_id)))
    logger.info(f"User {result.inserted_id} registered")
    return format_response(
        success=True,
        data={"user": public_user(user_doc)},
        message="User registered successfully",
    )


@router.post("/login", summary="Login with phone number or name")
async def login(
    credentials: LoginRequest,
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    identifier = credentials.identifier
    # Names are not unique; the first stored match is used.
    query = {"phone": identifier} if is_phone(identifier) else {"name": identifier}
    existing_user = await db[USERS].find_one(query, sort=[("_id", 1)])

    if not existing_user:
        await dummy_verify()
        logger.warning("Login failed: no matching user")
        raise UnauthorizedRequestError(INVALID_CREDENTIALS)

    if not await verify_password(credentials.password, existing_user.get("password", "")):
        logger.warning(f"Login failed: password mismatch for user {existing_user['_id']}")
        raise UnauthorizedRequestError(INVALID_CREDENTIALS)

    set_session_cookie(response, tokens.issue(str(existing_user["_id"])))
    logger.info(f"Login successful for user {existing_user['_id']}")
    return format_response(
        success=True,
        data={"user": public_user(existing_user)},
        message="Login successful",
    )


@router.get("/me", summary="Get current user info")
async def whoami(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    user = await db[USERS].find_one({"_id": current_user.object_id}, {"password": 0})
    if not user:
        raise UnauthorizedRequestError("Not authorized, user not found")
    return format_response(success=True, data={"user": public_user(user)})


@router.post("/logout", summary="Logout and clear auth cookie")
async def logout(response: Response):
    clear_session_cookie(response)
    return format_response(success=True, message="User logged out successfully")
