"""
Test factories: users, hospitals, uploads and an in-memory file storage.
"""

import uuid
from typing import Optional

from models import Actor, Role, LeadCreate

HOSPITAL_A = "hospital-a"
HOSPITAL_B = "hospital-b"


def add_hospital(store, hospital_id: str, name: str = "", is_active: bool = True) -> dict:
    hospital = {
        "id": hospital_id,
        "name": name or hospital_id.replace("-", " ").title(),
        "is_active": is_active,
        "created_at": "2026-01-01T00:00:00+00:00",
    }
    store.hospitals.rows.append(hospital)
    return hospital


def add_user(
    store,
    role: Role,
    hospital_id: Optional[str] = HOSPITAL_A,
    created_at: str = "2026-01-01T00:00:00+00:00",
    is_active: bool = True,
    first_name: str = "",
    last_name: str = "",
    user_id: Optional[str] = None,
) -> Actor:
    user = {
        "id": user_id or str(uuid.uuid4()),
        "email": f"{uuid.uuid4().hex[:8]}@example.com",
        "password": "hashed",
        "first_name": first_name or role.value.title(),
        "last_name": last_name or "User",
        "role": role.value,
        "hospital_id": hospital_id,
        "is_active": is_active,
        "created_at": created_at,
    }
    store.users.rows.append(user)
    return Actor.from_user(user)


def lead_input(phone: str = "9876543210", **fields) -> LeadCreate:
    data = {"name": "Ravi Kumar", "phone": phone, "specialisation": "Cardiology", "remarks": ""}
    data.update(fields)
    return LeadCreate(**data)


class FakeUpload:
    """Quacks like fastapi.UploadFile for storage code"""

    def __init__(self, filename: str, content: bytes = b"data"):
        self.filename = filename
        self.content = content

    async def read(self) -> bytes:
        return self.content


class MemoryFileStorage:
    def __init__(self, fail: bool = False):
        self.files = {}
        self.removed = []
        self.fail = fail

    async def store(self, upload) -> str:
        if self.fail:
            raise OSError("disk full")
        url = f"/uploads/{uuid.uuid4().hex[:8]}-{upload.filename}"
        self.files[url] = await upload.read()
        return url

    async def remove(self, file_url: str) -> None:
        self.files.pop(file_url, None)
        self.removed.append(file_url)
