# cleancloak/routers/users.py

from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from cleancloak.core.logger import get_logger
from cleancloak.db.mongo import get_db, USERS
from cleancloak.models.user import UserUpdateRequest, DeviceTokenRequest, user_profile
from cleancloak.routers.auth import DUPLICATE_PHONE
from cleancloak.routers.deps import CurrentUser, get_current_user
from cleancloak.utils.errors import ConflictError, NotFoundError
from cleancloak.utils.responses import format_response

router = APIRouter(tags=["users"])
logger = get_logger("users")


@router.get("/profile", summary="Get own user profile")
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    user = await db[USERS].find_one({"_id": current_user.object_id}, {"password": 0})
    if not user:
        raise NotFoundError("User not found")
    return format_response(success=True, data={"user": user_profile(user)})


@router.put("/profile", summary="Update own user profile")
async def update_profile(
    update: UserUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    changes = update.model_dump(exclude_none=True)

    if "phone" in changes:
        taken = await db[USERS].find_one(
            {"phone": changes["phone"], "_id": {"$ne": current_user.object_id}}, {"_id": 1}
        )
        if taken:
            raise ConflictError(DUPLICATE_PHONE)

    changes["updated_at"] = datetime.now(timezone.utc)
    try:
        user = await db[USERS].find_one_and_update(
            {"_id": current_user.object_id},
            {"$set": changes},
            projection={"password": 0},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        raise ConflictError(DUPLICATE_PHONE)

    if not user:
        raise NotFoundError("User not found")

    logger.info(f"User {current_user.id} updated fields: {sorted(k for k in changes if k != 'updated_at')}")
    return format_response(
        success=True,
        data={"user": user_profile(user)},
        message="Profile updated successfully",
    )


@router.post("/device-token", summary="Register a push notification device token")
async def save_device_token(
    req: DeviceTokenRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    result = await db[USERS].update_one(
        {"_id": current_user.object_id},
        {"$addToSet": {"device_tokens": req.device_token}},
    )
    if result.matched_count == 0:
        raise NotFoundError("User not found")
    return format_response(success=True, message="Device token saved successfully")
