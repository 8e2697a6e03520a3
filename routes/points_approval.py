"""
PMS - Routes Points approval
Partner point rates and the superadmin approval queue.
"""

from fastapi import APIRouter, Depends

from models import Actor, PartnerPointsSet
from routes.auth import get_current_user
from services.store import get_store
from services.partner_points import (
    set_partner_points,
    approve,
    reject,
    list_pending,
    get_partner_points,
    get_partner_points_entry,
)

router = APIRouter(prefix="/points-approval", tags=["Points approval"])


@router.get("/pending")
async def pending(user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await list_pending(store, user)


@router.post("/partner-points")
async def set_points(data: PartnerPointsSet, user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await set_partner_points(store, data.partner_id, data.status, data.points, user)


@router.get("/partner-points")
async def partner_points(partner_id: str = "", user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await get_partner_points(store, partner_id, user)


@router.get("/partner-points/{entry_id}")
async def partner_points_entry(entry_id: str, user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await get_partner_points_entry(store, entry_id, user)


@router.post("/{entry_id}/approve")
async def approve_entry(entry_id: str, user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await approve(store, entry_id, user)


@router.post("/{entry_id}/reject")
async def reject_entry(entry_id: str, user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await reject(store, entry_id, user)
