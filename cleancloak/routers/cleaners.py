# cleancloak/routers/cleaners.py

import re
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError
from cleancloak.core.logger import get_logger
from cleancloak.db.mongo import get_db, CLEANER_PROFILES
from cleancloak.models.cleaner_profile import (
    ApprovalStatus, CleanerProfileCreate, CleanerProfileUpdate,
)
from cleancloak.routers.deps import CurrentUser, get_current_user, require_cleaner
from cleancloak.services.approval import parse_object_id, PROFILE_NOT_FOUND
from cleancloak.utils.errors import ConflictError, NotFoundError
from cleancloak.utils.responses import format_response
from cleancloak.services.profiles import profile_view, profile_views

router = APIRouter(tags=["cleaners"])
logger = get_logger("cleaners")

PROFILE_EXISTS = "Profile already exists. Use PUT to update."


@router.post("/profile", status_code=status.HTTP_201_CREATED, summary="Create own cleaner profile")
async def create_profile(
    profile: CleanerProfileCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    existing = await db[CLEANER_PROFILES].find_one({"user": current_user.object_id}, {"_id": 1})
    if existing:
        raise ConflictError(PROFILE_EXISTS)

    now = datetime.now(timezone.utc)
    doc = profile.model_dump(exclude_none=True)
    doc.update({
        "user": current_user.object_id,
        "rating": 0,
        "completed_jobs": 0,
        "approval_status": ApprovalStatus.PENDING.value,
        "verified": False,
        "approval_notes": "",
        "approval_history": [],
        "created_at": now,
        "updated_at": now,
    })
    doc.setdefault("is_available", True)
    doc.setdefault("services", [])

    try:
        result = await db[CLEANER_PROFILES].insert_one(doc)
    except DuplicateKeyError:
        raise ConflictError(PROFILE_EXISTS)
    doc["_id"] = result.inserted_id

    logger.info(f"Cleaner profile {result.inserted_id} created for user {current_user.id}")
    return format_response(
        success=True,
        data={"profile": await profile_view(db, doc)},
        message="Profile created successfully! You can now access all platform features.",
    )


@router.get("/profile", summary="Get own cleaner profile")
async def get_own_profile(
    current_user: CurrentUser = Depends(require_cleaner),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    profile = await db[CLEANER_PROFILES].find_one({"user": current_user.object_id})
    if not profile:
        raise NotFoundError("Profile not found")
    return format_response(success=True, data={"profile": await profile_view(db, profile)})


@router.put("/profile", summary="Update own cleaner profile")
async def update_own_profile(
    update: CleanerProfileUpdate,
    current_user: CurrentUser = Depends(require_cleaner),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    changes["updated_at"] = datetime.now(timezone.utc)

    profile = await db[CLEANER_PROFILES].find_one_and_update(
        {"user": current_user.object_id},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if not profile:
        raise NotFoundError("Profile not found")

    return format_response(
        success=True,
        data={"profile": await profile_view(db, profile)},
        message="Profile updated successfully",
    )


@router.get("", summary="List available cleaners")
async def list_cleaners(
    service: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    query = {"is_available": True}
    if service:
        query["services"] = service
    if city:
        query["city"] = {"$regex": re.escape(city), "$options": "i"}
    if min_rating is not None:
        query["rating"] = {"$gte": min_rating}

    cursor = db[CLEANER_PROFILES].find(query).sort(
        [("rating", DESCENDING), ("completed_jobs", DESCENDING)]
    )
    cleaners = await profile_views(db, await cursor.to_list(length=None))
    return format_response(success=True, data={"count": len(cleaners), "cleaners": cleaners})


@router.get("/{profile_id}", summary="Get a cleaner profile by id")
async def get_cleaner(profile_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    oid = parse_object_id(profile_id)
    profile = await db[CLEANER_PROFILES].find_one({"_id": oid}) if oid else None
    if not profile:
        raise NotFoundError(PROFILE_NOT_FOUND)
    return format_response(success=True, data={"profile": await profile_view(db, profile)})
