# cleancloak/routers/verification.py

from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import Field
from cleancloak.db.mongo import get_db
from cleancloak.models.common import CamelModel
from cleancloak.routers.deps import CurrentUser, require_admin
from cleancloak.services.approval import approve_profile, reject_profile, list_pending_profiles
from cleancloak.services.profiles import profile_view, profile_views
from cleancloak.utils.pagination import page_count
from cleancloak.utils.responses import format_response

router = APIRouter(tags=["verification"])


class ApproveRequest(CamelModel):
    admin_notes: Optional[str] = Field(None, max_length=1000)


class RejectRequest(CamelModel):
    rejection_reason: Optional[str] = Field(None, max_length=1000)
    admin_notes: Optional[str] = Field(None, max_length=1000)


async def paged_profiles(db: AsyncIOMotorDatabase, items, total: int, page: int, limit: int) -> dict:
    cleaners = await profile_views(db, items)
    return {
        "count": len(cleaners),
        "total": total,
        "page": page,
        "pages": page_count(total, limit),
        "cleaners": cleaners,
    }


def display_name(doc: dict) -> str:
    return f"{doc.get('first_name', '')} {doc.get('last_name', '')}".strip()


@router.get("/status", summary="Verification service status")
async def verification_status():
    return {"message": "Verification status OK"}


@router.get("/pending-profiles", summary="List cleaner profiles awaiting approval")
async def pending_profiles(
    city: Optional[str] = Query(None),
    service: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    items, total = await list_pending_profiles(db, city, service, page, limit)
    return format_response(success=True, data=await paged_profiles(db, items, total, page, limit))


@router.put("/approve-profile/{profile_id}", summary="Approve a cleaner profile")
async def approve(
    profile_id: str,
    req: Optional[ApproveRequest] = Body(None),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    req = req or ApproveRequest()
    doc = await approve_profile(db, profile_id, current_user.id, req.admin_notes)
    return format_response(
        success=True,
        data={"profile": await profile_view(db, doc)},
        message=f"{display_name(doc)} approved successfully",
    )


@router.put("/reject-profile/{profile_id}", summary="Reject a cleaner profile")
async def reject(
    profile_id: str,
    req: Optional[RejectRequest] = Body(None),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    req = req or RejectRequest()
    doc = await reject_profile(db, profile_id, current_user.id, req.rejection_reason, req.admin_notes)
    return format_response(
        success=True,
        data={"profile": await profile_view(db, doc)},
        message=f"{display_name(doc)} rejected",
    )
