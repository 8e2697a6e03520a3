"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Partner points approval                                               ║
║                                                                              ║
║  One row per (partner, status), upserted.                                    ║
║                                                                              ║
║  Entry state depends on who writes the rate:                                 ║
║  - ADMIN edit      -> PENDING  (superadmin must approve/reject)              ║
║  - SUPERADMIN edit -> APPROVED (skips PENDING)                               ║
║                                                                              ║
║  approve/reject: superadmin only, existence check only, repeated calls       ║
║  simply overwrite (idempotent).                                              ║
║  Only APPROVED rows feed the points policy.                                  ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import List

from models import Actor, Role, ApprovalStatus, RATED_STATUSES, LeadStatus
from services.errors import ValidationError, AuthorizationError, NotFoundError
from services.permissions import require_role, MANAGERS
from services.event_logger import log_event

logger = logging.getLogger("partner_points")

ENTRY_STATUS_BY_ROLE = {
    Role.SUPERADMIN: ApprovalStatus.APPROVED,
    Role.ADMIN: ApprovalStatus.PENDING,
}


async def set_partner_points(store, partner_id: str, status, points: int, actor: Actor) -> dict:
    require_role(actor, *MANAGERS, action="set_partner_points")

    if not partner_id or status is None or isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError("partner_id, status, and points are required")
    try:
        status = LeadStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown status: {status}")
    if status not in RATED_STATUSES:
        raise ValidationError(
            f"Partner points can only be set for {[s.value for s in RATED_STATUSES]}"
        )
    if points < 0:
        raise ValidationError("points cannot be negative")

    partner = await store.users.get(partner_id)
    if not partner:
        raise NotFoundError("Partner not found")
    if partner.get("role") != Role.PARTNER.value:
        raise ValidationError("User is not a partner")
    if actor.role == Role.ADMIN and partner.get("hospital_id") != actor.hospital_id:
        raise AuthorizationError("Not authorized")

    approval_status = ENTRY_STATUS_BY_ROLE[actor.role]
    entry = await store.partner_points.upsert(partner_id, status.value, points, approval_status.value)

    logger.info(
        f"[PARTNER_POINTS] partner={partner_id} status={status.value} points={points} "
        f"-> {approval_status.value} by={actor.role.value}:{actor.id}"
    )
    await log_event(
        store, "partner_points_set", "partner_points", entry["id"], actor,
        hospital_id=partner.get("hospital_id"),
        details={"partner_id": partner_id, "status": status.value, "points": points,
                 "approval_status": approval_status.value}
    )
    return entry


async def _decide(store, entry_id: str, decision: ApprovalStatus, actor: Actor) -> dict:
    require_role(actor, Role.SUPERADMIN, action=f"partner_points_{decision.value.lower()}")

    updated = await store.partner_points.set_approval(entry_id, decision.value)
    if updated is None:
        raise NotFoundError("Partner points entry not found")

    logger.info(f"[PARTNER_POINTS] entry={entry_id} -> {decision.value}")
    await log_event(
        store, f"partner_points_{decision.value.lower()}", "partner_points", entry_id, actor,
        details={"partner_id": updated.get("partner_id"), "status": updated.get("status"),
                 "points": updated.get("points")}
    )
    return updated


async def approve(store, entry_id: str, actor: Actor) -> dict:
    return await _decide(store, entry_id, ApprovalStatus.APPROVED, actor)


async def reject(store, entry_id: str, actor: Actor) -> dict:
    return await _decide(store, entry_id, ApprovalStatus.REJECTED, actor)


async def list_pending(store, actor: Actor) -> List[dict]:
    """Pending requests with the partner's display name"""
    require_role(actor, Role.SUPERADMIN, action="list_pending_points")

    pending = await store.partner_points.list_by_approval(ApprovalStatus.PENDING.value)
    partners = await store.users.get_many(p["partner_id"] for p in pending)
    result = []
    for p in pending:
        partner = partners.get(p["partner_id"])
        result.append({
            "id": p["id"],
            "partner_id": p["partner_id"],
            "partner": f"{partner.get('first_name', '')} {partner.get('last_name', '')}".strip() if partner else "",
            "lead_status": p["status"],
            "requested_points": p["points"],
            "status": p["approval_status"],
        })
    return result


async def get_partner_points(store, partner_id: str, actor: Actor) -> List[dict]:
    if not partner_id:
        raise ValidationError("partner_id required")
    if actor.role == Role.PARTNER and partner_id != actor.id:
        raise AuthorizationError("Not authorized")
    return await store.partner_points.list_for_partner(partner_id)


async def get_partner_points_entry(store, entry_id: str, actor: Actor) -> dict:
    entry = await store.partner_points.get(entry_id)
    if not entry:
        raise NotFoundError("Not found")
    if actor.role == Role.PARTNER and entry["partner_id"] != actor.id:
        raise AuthorizationError("Not authorized")
    return entry
