# cleancloak/scripts/create_admin.py

import argparse
import asyncio
import getpass
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from cleancloak.core.config import settings
from cleancloak.core.security import hash_password
from cleancloak.db.mongo import USERS, ensure_indexes
from cleancloak.models.user import RegisterRequest, UserRole


async def create_admin(db: AsyncIOMotorDatabase, name: str, phone: str, password: str) -> str:
    """Create an admin account, or promote the user that already owns ``phone``."""
    req = RegisterRequest(name=name, phone=phone, password=password, role=UserRole.ADMIN)

    existing = await db[USERS].find_one({"phone": req.phone})
    if existing:
        if existing.get("role") == UserRole.ADMIN.value:
            return f"Admin user with phone {req.phone} already exists"
        await db[USERS].update_one(
            {"_id": existing["_id"]},
            {"$set": {"role": UserRole.ADMIN.value, "updated_at": datetime.now(timezone.utc)}},
        )
        return f"User with phone {req.phone} promoted to admin"

    now = datetime.now(timezone.utc)
    await db[USERS].insert_one({
        "name": req.name,
        "phone": req.phone,
        "password": await hash_password(req.password),
        "role": UserRole.ADMIN.value,
        "email": None,
        "profile_image": "",
        "device_tokens": [],
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    })
    return f"Admin user {req.phone} created successfully"


async def main():
    parser = argparse.ArgumentParser(description="Create or promote a CleanCloak admin user")
    parser.add_argument("--phone", required=True)
    parser.add_argument("--name", default="Admin User")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Admin password: ")

    client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
    try:
        db = client[settings.MONGODB_DB]
        await ensure_indexes(db)
        print(await create_admin(db, args.name, args.phone, password))
    finally:
        client.close()

if __name__ == "__main__":
    asyncio.run(main())
