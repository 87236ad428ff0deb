# cleancloak/routers/tracking.py

from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from cleancloak.core.logger import get_logger
from cleancloak.db.mongo import get_db, BOOKINGS, TRACKINGS
from cleancloak.models.tracking import (
    LocationUpdate, StartTrackingRequest, TrackingStatus, TrackingStatusUpdate, tracking_out,
)
from cleancloak.models.user import UserRole
from cleancloak.routers.deps import CurrentUser, get_current_user, require_cleaner
from cleancloak.services.approval import parse_object_id
from cleancloak.utils.errors import ForbiddenError, NotFoundError
from cleancloak.utils.responses import format_response

router = APIRouter(tags=["tracking"])
logger = get_logger("tracking")


def _location_fields(loc: LocationUpdate, now: datetime) -> tuple:
    current = {"latitude": loc.latitude, "longitude": loc.longitude, "address": loc.address}
    point = {"latitude": loc.latitude, "longitude": loc.longitude, "timestamp": now}
    return current, point


async def _find_booking(db: AsyncIOMotorDatabase, booking_id: str):
    oid = parse_object_id(booking_id)
    if oid is None:
        return None
    return await db[BOOKINGS].find_one({"_id": oid}, {"client": 1, "cleaner": 1})


async def _owned_tracking(db: AsyncIOMotorDatabase, booking_id: str, cleaner: CurrentUser) -> dict:
    oid = parse_object_id(booking_id)
    tracking = await db[TRACKINGS].find_one({"booking": oid}) if oid else None
    if not tracking:
        raise NotFoundError("Tracking not found")
    if str(tracking.get("cleaner")) != cleaner.id:
        raise ForbiddenError("Not authorized")
    return tracking


@router.post("", summary="Start or refresh tracking for a booking")
async def start_tracking(
    req: StartTrackingRequest,
    current_user: CurrentUser = Depends(require_cleaner),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    booking = await _find_booking(db, req.booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if str(booking.get("cleaner")) != current_user.id:
        raise ForbiddenError("Not authorized to track this booking")

    now = datetime.now(timezone.utc)
    current, point = _location_fields(req, now)
    tracking = await db[TRACKINGS].find_one_and_update(
        {"booking": booking["_id"]},
        {
            "$set": {"current_location": current, "updated_at": now},
            "$push": {"location_history": point},
            "$setOnInsert": {
                "cleaner": current_user.object_id,
                "status": TrackingStatus.ON_WAY.value,
                "created_at": now,
            },
        },
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return format_response(success=True, data={"tracking": tracking_out(tracking)})


@router.get("/{booking_id}", summary="Get live tracking for a booking")
async def get_tracking(
    booking_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    oid = parse_object_id(booking_id)
    tracking = await db[TRACKINGS].find_one({"booking": oid}) if oid else None
    if not tracking:
        raise NotFoundError("Tracking not found")

    booking = await _find_booking(db, booking_id)
    participants = set()
    if booking:
        participants = {str(booking.get("client")), str(booking.get("cleaner"))}
    if current_user.id not in participants and current_user.role is not UserRole.ADMIN:
        raise ForbiddenError("Not authorized to view this tracking")

    return format_response(success=True, data={"tracking": tracking_out(tracking)})


@router.put("/{booking_id}/location", summary="Update the cleaner's current location")
async def update_location(
    booking_id: str,
    loc: LocationUpdate,
    current_user: CurrentUser = Depends(require_cleaner),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    tracking = await _owned_tracking(db, booking_id, current_user)
    now = datetime.now(timezone.utc)
    current, point = _location_fields(loc, now)
    tracking = await db[TRACKINGS].find_one_and_update(
        {"_id": tracking["_id"]},
        {
            "$set": {"current_location": current, "updated_at": now},
            "$push": {"location_history": point},
        },
        return_document=ReturnDocument.AFTER,
    )
    return format_response(success=True, data={"tracking": tracking_out(tracking)})


@router.put("/{booking_id}/status", summary="Update tracking status")
async def update_status(
    booking_id: str,
    update: TrackingStatusUpdate,
    current_user: CurrentUser = Depends(require_cleaner),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    tracking = await _owned_tracking(db, booking_id, current_user)
    changes = {"status": update.status.value, "updated_at": datetime.now(timezone.utc)}
    if update.estimated_arrival:
        changes["estimated_arrival"] = update.estimated_arrival

    tracking = await db[TRACKINGS].find_one_and_update(
        {"_id": tracking["_id"]},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )

    booking = await _find_booking(db, booking_id)
    if booking and booking.get("client"):
        # Push delivery lives in the notification service.
        logger.info(
            f"cleaner_status_update for client {booking['client']}: "
            f"booking {booking_id} is {update.status.value}"
        )

    return format_response(success=True, data={"tracking": tracking_out(tracking)})
