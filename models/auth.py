"""
PMS - Roles & acting user
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel


class Role(str, Enum):
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    PARTNER = "PARTNER"
    SALES_PERSON = "SALES_PERSON"


class Actor(BaseModel):
    """Authenticated user performing an operation"""
    id: str
    role: Role
    hospital_id: Optional[str] = None
    email: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN

    @classmethod
    def from_user(cls, user: dict) -> "Actor":
        return cls(
            id=user["id"],
            role=user["role"],
            hospital_id=user.get("hospital_id"),
            email=user.get("email", ""),
            first_name=user.get("first_name", ""),
            last_name=user.get("last_name", ""),
        )


class TransferAdminData(BaseModel):
    target_admin_id: str
