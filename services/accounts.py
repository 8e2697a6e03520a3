"""
PMS - Account deactivation (soft delete)

Users and hospitals are never removed here: is_active flips to false and
the row stays readable by id. Leads, by contrast, are hard-deleted.
"""

import logging

from models import Actor, Role
from services.errors import NotFoundError, AuthorizationError
from services.permissions import require_role, MANAGERS
from services.event_logger import log_event

logger = logging.getLogger("accounts")


async def deactivate_user(store, user_id: str, actor: Actor) -> dict:
    require_role(actor, *MANAGERS, action="deactivate_user")

    user = await store.users.get(user_id)
    if not user:
        raise NotFoundError("User not found")
    if actor.role == Role.ADMIN and user.get("hospital_id") != actor.hospital_id:
        raise AuthorizationError("Not authorized")

    await store.users.deactivate(user_id)
    logger.info(f"[DEACTIVATE] user={user_id} role={user.get('role')} by={actor.id}")
    await log_event(store, "user_deactivated", "user", user_id, actor, hospital_id=user.get("hospital_id"))
    return await store.users.get(user_id)


async def deactivate_hospital(store, hospital_id: str, actor: Actor) -> dict:
    require_role(actor, Role.SUPERADMIN, action="deactivate_hospital")

    hospital = await store.hospitals.get(hospital_id)
    if not hospital:
        raise NotFoundError("Hospital not found")

    await store.hospitals.deactivate(hospital_id)
    logger.info(f"[DEACTIVATE] hospital={hospital_id} by={actor.id}")
    await log_event(store, "hospital_deactivated", "hospital", hospital_id, actor, hospital_id=hospital_id)
    return await store.hospitals.get(hospital_id)
