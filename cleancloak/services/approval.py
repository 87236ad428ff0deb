# cleancloak/services/approval.py

import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from cleancloak.core.logger import get_logger
from cleancloak.db.mongo import CLEANER_PROFILES
from cleancloak.models.cleaner_profile import ApprovalStatus
from cleancloak.utils.errors import NotFoundError, ConflictError
from cleancloak.utils.pagination import build_pagination, build_sort

logger = get_logger("approval")

PROFILE_NOT_FOUND = "Cleaner profile not found"


def parse_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def build_profile_filter(
    status: Optional[ApprovalStatus] = None,
    city: Optional[str] = None,
    service: Optional[str] = None,
) -> dict:
    query = {}
    if status is not None:
        query["approval_status"] = status.value
    if city:
        query["city"] = {"$regex": re.escape(city), "$options": "i"}
    if service:
        query["services"] = service
    return query


async def _transition(
    db: AsyncIOMotorDatabase,
    profile_id: str,
    target: ApprovalStatus,
    set_fields: dict,
    history_notes: str,
    admin_id: str,
) -> dict:
    """
    Move a profile to ``target`` in a single conditional update.

    The filter only matches when the profile is not already in ``target``,
    so concurrent calls cannot both append a history entry.
    """
    oid = parse_object_id(profile_id)
    if oid is None:
        raise NotFoundError(PROFILE_NOT_FOUND)

    now = set_fields.get("updated_at") or datetime.now(timezone.utc)
    entry = {
        "status": target.value,
        "notes": history_notes,
        "admin": parse_object_id(admin_id) or admin_id,
        "changed_at": now,
    }
    updated = await db[CLEANER_PROFILES].find_one_and_update(
        {"_id": oid, "approval_status": {"$ne": target.value}},
        {
            "$set": {"approval_status": target.value, **set_fields},
            "$push": {"approval_history": entry},
        },
        return_document=ReturnDocument.AFTER,
    )
    if updated is not None:
        logger.info(f"Profile {profile_id} moved to {target.value} by admin {admin_id}")
        return updated

    exists = await db[CLEANER_PROFILES].find_one({"_id": oid}, {"_id": 1})
    if not exists:
        raise NotFoundError(PROFILE_NOT_FOUND)
    raise ConflictError(f"Profile is already {target.value}")


async def approve_profile(
    db: AsyncIOMotorDatabase,
    profile_id: str,
    admin_id: str,
    notes: Optional[str] = None,
) -> dict:
    now = datetime.now(timezone.utc)
    return await _transition(
        db,
        profile_id,
        ApprovalStatus.APPROVED,
        {
            "approved_at": now,
            "approval_notes": notes or "",
            "verified": True,
            "updated_at": now,
        },
        notes or "Approved by admin",
        admin_id,
    )


async def reject_profile(
    db: AsyncIOMotorDatabase,
    profile_id: str,
    admin_id: str,
    reason: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    # verified is left untouched on rejection, matching existing data.
    now = datetime.now(timezone.utc)
    return await _transition(
        db,
        profile_id,
        ApprovalStatus.REJECTED,
        {
            "rejected_at": now,
            "approval_notes": notes or reason or "",
            "updated_at": now,
        },
        notes or reason or "Rejected by admin",
        admin_id,
    )


async def list_profiles_by_status(
    db: AsyncIOMotorDatabase,
    status: ApprovalStatus,
    city: Optional[str] = None,
    service: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "created_at",
) -> Tuple[List[dict], int]:
    query = build_profile_filter(status, city, service)
    skip, limit = build_pagination(page, limit)
    cursor = (
        db[CLEANER_PROFILES]
        .find(query)
        .sort(build_sort(sort_by, "desc") + [("_id", -1)])
        .skip(skip)
        .limit(limit)
    )
    items = await cursor.to_list(length=limit)
    total = await db[CLEANER_PROFILES].count_documents(query)
    return items, total


async def list_pending_profiles(db, city=None, service=None, page=1, limit=10):
    return await list_profiles_by_status(
        db, ApprovalStatus.PENDING, city, service, page, limit, sort_by="created_at"
    )
