# tests/test_verification.py

import asyncio
import math
from datetime import datetime, timedelta, timezone
import pytest
from bson import ObjectId

from cleancloak.models.user import UserRole
from cleancloak.routers.deps import CurrentUser, authorize, require_roles
from cleancloak.services import approval
from cleancloak.utils.errors import ConflictError, ForbiddenError, NotFoundError


@pytest.fixture
def admin(register):
    c, user = register(role="admin")
    return c, user


@pytest.fixture
def pending_profile(register, profile_payload):
    c, user = register(role="cleaner")
    resp = c.post("/api/cleaners/profile", json=profile_payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["profile"]


def _history(profile):
    return [(h["status"], h["notes"]) for h in profile["approvalHistory"]]


@pytest.mark.parametrize("role", list(UserRole))
def test_authorize_admin_gate_for_every_role(role):
    identity = CurrentUser(id=str(ObjectId()), role=role)
    if role is UserRole.ADMIN:
        assert authorize(identity, [UserRole.ADMIN]) is identity
    else:
        with pytest.raises(ForbiddenError):
            authorize(identity, [UserRole.ADMIN])


def test_require_roles_rejects_plain_strings():
    with pytest.raises(TypeError):
        require_roles("admin")


def test_profile_starts_pending(pending_profile):
    assert pending_profile["approvalStatus"] == "pending"
    assert pending_profile["verified"] is False
    assert pending_profile["approvalHistory"] == []


def test_approve_sets_verified_and_appends_one_entry(admin, pending_profile):
    c, admin_user = admin
    resp = c.put(
        f"/api/verification/approve-profile/{pending_profile['id']}",
        json={"adminNotes": "Documents checked"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Jane Wanjiku approved successfully"
    profile = body["data"]["profile"]
    assert profile["approvalStatus"] == "approved"
    assert profile["verified"] is True
    assert profile["approvedAt"] is not None
    assert profile["approvalNotes"] == "Documents checked"
    assert len(profile["approvalHistory"]) == 1
    assert profile["approvalHistory"][0]["admin"]["id"] == admin_user["id"]
    assert profile["approvalHistory"][0]["status"] == "approved"


def test_second_approve_conflicts_without_new_history(admin, pending_profile, db):
    c, _ = admin
    url = f"/api/verification/approve-profile/{pending_profile['id']}"
    assert c.put(url).status_code == 200

    resp = c.put(url)
    assert resp.status_code == 400
    assert resp.json()["error"]["detail"] == "Profile is already approved"

    stored = asyncio.run(db.cleaner_profiles.find_one({"_id": ObjectId(pending_profile["id"])}))
    assert len(stored["approval_history"]) == 1


def test_reject_then_approve_records_history_in_order(admin, pending_profile):
    c, _ = admin
    pid = pending_profile["id"]

    rejected = c.put(
        f"/api/verification/reject-profile/{pid}", json={"rejectionReason": "Blurry ID photo"}
    )
    assert rejected.status_code == 200
    assert rejected.json()["message"] == "Jane Wanjiku rejected"
    profile = rejected.json()["data"]["profile"]
    assert profile["approvalStatus"] == "rejected"
    assert profile["approvalNotes"] == "Blurry ID photo"
    assert profile["rejectedAt"] is not None

    again = c.put(f"/api/verification/reject-profile/{pid}")
    assert again.status_code == 400
    assert again.json()["error"]["detail"] == "Profile is already rejected"

    approved = c.put(f"/api/verification/approve-profile/{pid}")
    assert approved.status_code == 200
    assert _history(approved.json()["data"]["profile"]) == [
        ("rejected", "Blurry ID photo"),
        ("approved", "Approved by admin"),
    ]


def test_reject_after_approve_keeps_verified_flag(admin, pending_profile):
    c, _ = admin
    pid = pending_profile["id"]
    c.put(f"/api/verification/approve-profile/{pid}")
    resp = c.put(f"/api/verification/reject-profile/{pid}", json={"adminNotes": "Complaints"})
    profile = resp.json()["data"]["profile"]
    assert profile["approvalStatus"] == "rejected"
    assert profile["verified"] is True
    assert _history(profile) == [("approved", "Approved by admin"), ("rejected", "Complaints")]


@pytest.mark.parametrize("profile_id", [str(ObjectId()), "not-an-id"])
def test_approve_missing_profile_is_not_found(admin, profile_id):
    c, _ = admin
    resp = c.put(f"/api/verification/approve-profile/{profile_id}")
    assert resp.status_code == 404
    assert resp.json()["error"]["detail"] == "Cleaner profile not found"


def test_non_admin_cannot_approve(register, pending_profile):
    c, _ = register(role="team_leader")
    resp = c.put(f"/api/verification/approve-profile/{pending_profile['id']}")
    assert resp.status_code == 403


def test_anonymous_cannot_list_pending(client):
    assert client.get("/api/verification/pending-profiles").status_code == 401


def _seed_profiles(db, cities):
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    docs = []
    for i, city in enumerate(cities):
        docs.append({
            "user": ObjectId(),
            "first_name": f"Cleaner{i}",
            "last_name": "Test",
            "city": city,
            "services": ["home-cleaning"] if i % 2 == 0 else ["car-detailing"],
            "is_available": True,
            "rating": 0,
            "completed_jobs": 0,
            "approval_status": "pending",
            "verified": False,
            "approval_history": [],
            "created_at": base + timedelta(minutes=i),
        })
    asyncio.run(db.cleaner_profiles.insert_many(docs))


def test_pending_list_filters_city_case_insensitively_and_paginates(admin, db):
    _seed_profiles(db, ["Nairobi", "nairobi west", "Mombasa", "NAIROBI", "Kisumu", "Nairobi"])
    c, _ = admin

    resp = c.get("/api/verification/pending-profiles", params={"city": "Nairobi", "limit": 3})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total"] == 4
    assert data["pages"] == math.ceil(4 / 3) == 2
    assert data["page"] == 1
    assert data["count"] == 3
    assert all("nairobi" in p["city"].lower() for p in data["cleaners"])
    created = [p["createdAt"] for p in data["cleaners"]]
    assert created == sorted(created, reverse=True)

    second = c.get(
        "/api/verification/pending-profiles", params={"city": "Nairobi", "limit": 3, "page": 2}
    ).json()["data"]
    assert second["count"] == 1
    first_ids = {p["id"] for p in data["cleaners"]}
    assert second["cleaners"][0]["id"] not in first_ids


def test_pending_list_filters_by_service(admin, db):
    _seed_profiles(db, ["Nairobi", "Nairobi", "Nairobi"])
    c, _ = admin
    data = c.get(
        "/api/verification/pending-profiles", params={"service": "car-detailing"}
    ).json()["data"]
    assert data["total"] == 1
    assert data["cleaners"][0]["services"] == ["car-detailing"]


def test_pending_list_excludes_decided_profiles(admin, pending_profile):
    c, _ = admin
    c.put(f"/api/verification/approve-profile/{pending_profile['id']}")
    data = c.get("/api/verification/pending-profiles").json()["data"]
    assert data["total"] == 0
    assert data["pages"] == 0


def test_city_filter_is_not_a_regex(db):
    _seed_profiles(db, ["Nairobi", "N.+"])
    items, total = asyncio.run(approval.list_pending_profiles(db, city=".+"))
    assert total == 1
    assert items[0]["city"] == "N.+"


def test_service_layer_errors(db):
    admin_id = str(ObjectId())
    with pytest.raises(NotFoundError):
        asyncio.run(approval.approve_profile(db, str(ObjectId()), admin_id))

    _seed_profiles(db, ["Nakuru"])
    profile = asyncio.run(db.cleaner_profiles.find_one({}))
    asyncio.run(approval.approve_profile(db, str(profile["_id"]), admin_id, "ok"))
    with pytest.raises(ConflictError):
        asyncio.run(approval.approve_profile(db, str(profile["_id"]), admin_id))
