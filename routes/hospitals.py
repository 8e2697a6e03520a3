"""
PMS - Routes Hospitals
"""

from fastapi import APIRouter, Depends

from models import Actor, Role
from routes.auth import require_roles
from services.store import get_store
from services.accounts import deactivate_hospital

router = APIRouter(prefix="/hospitals", tags=["Hospitals"])


@router.delete("/{hospital_id}")
async def deactivate(
    hospital_id: str,
    user: Actor = Depends(require_roles(Role.SUPERADMIN)),
    store=Depends(get_store),
):
    return await deactivate_hospital(store, hospital_id, user)
