# cleancloak/routers/admin.py

from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import Field
from cleancloak.db.mongo import get_db, CLEANER_PROFILES
from cleancloak.models.cleaner_profile import ApprovalStatus
from cleancloak.models.common import CamelModel
from cleancloak.routers.deps import CurrentUser, require_admin
from cleancloak.routers.verification import display_name, paged_profiles
from cleancloak.services.approval import (
    approve_profile, reject_profile, list_profiles_by_status, list_pending_profiles,
    parse_object_id, PROFILE_NOT_FOUND,
)
from cleancloak.services.profiles import profile_view
from cleancloak.utils.errors import NotFoundError
from cleancloak.utils.responses import format_response

router = APIRouter(tags=["admin"])


class DecisionRequest(CamelModel):
    notes: Optional[str] = Field(None, max_length=1000)


@router.get("/cleaners/pending", summary="List pending cleaner profiles")
async def pending_cleaners(
    city: Optional[str] = Query(None),
    service: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    items, total = await list_pending_profiles(db, city, service, page, limit)
    return format_response(success=True, data=await paged_profiles(db, items, total, page, limit))


@router.get("/cleaners/approved", summary="List approved cleaner profiles")
async def approved_cleaners(
    city: Optional[str] = Query(None),
    service: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    items, total = await list_profiles_by_status(
        db, ApprovalStatus.APPROVED, city, service, page, limit, sort_by="approved_at"
    )
    return format_response(success=True, data=await paged_profiles(db, items, total, page, limit))


@router.get("/cleaners/{profile_id}", summary="Get a cleaner profile with approval history")
async def cleaner_detail(
    profile_id: str,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    oid = parse_object_id(profile_id)
    profile = await db[CLEANER_PROFILES].find_one({"_id": oid}) if oid else None
    if not profile:
        raise NotFoundError(PROFILE_NOT_FOUND)
    return format_response(
        success=True,
        data={"profile": await profile_view(db, profile, with_admins=True)},
    )


@router.put("/cleaners/{profile_id}/approve", summary="Approve a cleaner profile")
async def approve_cleaner(
    profile_id: str,
    req: Optional[DecisionRequest] = Body(None),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    req = req or DecisionRequest()
    doc = await approve_profile(db, profile_id, current_user.id, req.notes)
    return format_response(
        success=True,
        data={"profile": await profile_view(db, doc, with_admins=True)},
        message=f"{display_name(doc)} approved successfully",
    )


@router.put("/cleaners/{profile_id}/reject", summary="Reject a cleaner profile")
async def reject_cleaner(
    profile_id: str,
    req: Optional[DecisionRequest] = Body(None),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    req = req or DecisionRequest()
    doc = await reject_profile(db, profile_id, current_user.id, notes=req.notes)
    return format_response(
        success=True,
        data={"profile": await profile_view(db, doc, with_admins=True)},
        message=f"{display_name(doc)} rejected",
    )


@router.get("/dashboard/stats", summary="Cleaner approval statistics")
async def dashboard_stats(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    profiles = db[CLEANER_PROFILES]
    total = await profiles.count_documents({})
    counts = {}
    for status in ApprovalStatus:
        counts[status] = await profiles.count_documents({"approval_status": status.value})

    avg_rating = 0
    pipeline = [
        {"$match": {"approval_status": ApprovalStatus.APPROVED.value}},
        {"$group": {"_id": None, "avgRating": {"$avg": "$rating"}}},
    ]
    async for row in profiles.aggregate(pipeline):
        avg_rating = row.get("avgRating") or 0

    stats = {
        "totalCleaners": total,
        "pendingCleaners": counts[ApprovalStatus.PENDING],
        "approvedCleaners": counts[ApprovalStatus.APPROVED],
        "rejectedCleaners": counts[ApprovalStatus.REJECTED],
        "avgRating": avg_rating,
    }
    return format_response(success=True, data={"stats": stats})
