# cleancloak/services/profiles.py

from typing import List
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from cleancloak.db.mongo import USERS
from cleancloak.models.cleaner_profile import profile_out

# Never includes the password hash.
USER_REF_PROJECTION = {"name": 1, "phone": 1, "email": 1, "profile_image": 1}


def _admin_ids(profile: dict):
    for entry in profile.get("approval_history") or []:
        if isinstance(entry.get("admin"), ObjectId):
            yield entry["admin"]


async def populate_users(
    db: AsyncIOMotorDatabase,
    profiles: List[dict],
    with_admins: bool = False,
) -> List[dict]:
    """
    Swap each profile's ``user`` id for that account's public details.

    With ``with_admins`` the admin on every approval history entry is named
    as well. All accounts are fetched in a single query. Ids whose account
    no longer exists are left as they are.
    """
    ids = {p["user"] for p in profiles if isinstance(p.get("user"), ObjectId)}
    if with_admins:
        for p in profiles:
            ids.update(_admin_ids(p))
    if not ids:
        return profiles

    cursor = db[USERS].find({"_id": {"$in": list(ids)}}, USER_REF_PROJECTION)
    accounts = {u["_id"]: u async for u in cursor}

    populated = []
    for p in profiles:
        p = dict(p)
        p["user"] = accounts.get(p.get("user"), p.get("user"))
        if with_admins:
            history = []
            for entry in p.get("approval_history") or []:
                admin = accounts.get(entry.get("admin"))
                if admin is not None:
                    entry = {**entry, "admin": {"_id": admin["_id"], "name": admin.get("name")}}
                history.append(entry)
            p["approval_history"] = history
        populated.append(p)
    return populated


async def profile_views(db: AsyncIOMotorDatabase, profiles: List[dict], with_admins: bool = False) -> List[dict]:
    return [profile_out(p) for p in await populate_users(db, profiles, with_admins)]


async def profile_view(db: AsyncIOMotorDatabase, profile: dict, with_admins: bool = False) -> dict:
    views = await profile_views(db, [profile], with_admins)
    return views[0]
