"""
PMS - Routes Users
Deactivation and admin data reassignment. Account creation lives elsewhere.
"""

from fastapi import APIRouter, Depends

from models import Actor, TransferAdminData
from routes.auth import get_current_user
from services.store import get_store
from services.accounts import deactivate_user
from services.admin_reassignment import reassign_admin_data

router = APIRouter(prefix="/users", tags=["Users"])


@router.delete("/{user_id}")
async def deactivate(user_id: str, user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await deactivate_user(store, user_id, user)


@router.post("/{user_id}/reassign")
async def reassign(
    user_id: str,
    data: TransferAdminData,
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
):
    counts = await reassign_admin_data(store, user_id, data.target_admin_id, user)
    return {"message": "Admin data reassigned", **counts}
