"""
PMS - Seed the initial superadmin (dev/staging)
Creates the superadmin if missing and issues a session token for it.
Run: python scripts/seed_superadmin.py
"""

import asyncio
import os
import secrets
import sys
import uuid
from datetime import datetime, timezone, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config import client, db, hash_password, now_iso, SESSION_TTL_DAYS  # noqa: E402

SUPERADMIN_EMAIL = os.environ.get("SUPERADMIN_EMAIL", "admin@true.com")
SUPERADMIN_PASSWORD = os.environ.get("SUPERADMIN_PASSWORD", "admin123")


async def seed():
    user = await db.users.find_one({"email": SUPERADMIN_EMAIL}, {"_id": 0})
    if user:
        print(f"  Exists: {SUPERADMIN_EMAIL}")
    else:
        user = {
            "id": str(uuid.uuid4()),
            "email": SUPERADMIN_EMAIL,
            "password": hash_password(SUPERADMIN_PASSWORD),
            "first_name": "Super",
            "last_name": "Admin",
            "role": "SUPERADMIN",
            "hospital_id": None,
            "is_active": True,
            "created_at": now_iso(),
        }
        await db.users.insert_one(dict(user))
        print(f"  Created: {SUPERADMIN_EMAIL}")

    token = secrets.token_urlsafe(32)
    expires_at = (datetime.now(timezone.utc) + timedelta(days=SESSION_TTL_DAYS)).isoformat()
    await db.sessions.insert_one({
        "token": token,
        "user_id": user["id"],
        "created_at": now_iso(),
        "expires_at": expires_at,
    })
    print(f"  Session token (valid {SESSION_TTL_DAYS} days): {token}")


async def main():
    await seed()
    client.close()


if __name__ == "__main__":
    asyncio.run(main())
