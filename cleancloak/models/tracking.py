# cleancloak/models/tracking.py
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import AliasChoices, Field
from cleancloak.models.common import CamelModel, PyObjectId


class TrackingStatus(str, Enum):
    ON_WAY = "on-way"
    ARRIVED = "arrived"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class LocationUpdate(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None


class StartTrackingRequest(LocationUpdate):
    booking_id: str


class TrackingStatusUpdate(CamelModel):
    status: TrackingStatus
    estimated_arrival: Optional[str] = None


class CurrentLocation(CamelModel):
    latitude: float
    longitude: float
    address: Optional[str] = None


class LocationPoint(CamelModel):
    latitude: float
    longitude: float
    timestamp: Optional[datetime] = None


class TrackingOut(CamelModel):
    id: PyObjectId = Field(validation_alias=AliasChoices("_id", "id"))
    booking: PyObjectId
    cleaner: PyObjectId
    status: TrackingStatus = TrackingStatus.ON_WAY
    current_location: Optional[CurrentLocation] = None
    location_history: List[LocationPoint] = Field(default_factory=list)
    estimated_arrival: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None


def tracking_out(doc: dict) -> dict:
    data = dict(doc)
    data.setdefault("last_updated", data.get("updated_at"))
    return TrackingOut.model_validate(data).to_json()
