"""
PMS - Event Logger

Audit trail for sensitive actions (lead intake/deletion, reassignment,
point-rate approvals, account deactivation).
Single function to call from any service.
"""

import uuid
from typing import Optional

from config import now_iso
from models import Actor


async def log_event(
    store,
    action: str,
    entity_type: str,
    entity_id: str,
    actor: Optional[Actor] = None,
    hospital_id: Optional[str] = None,
    details: dict = None,
):
    """
    Write a single event to the event_log collection.

    Args:
        action: e.g. lead_created, lead_duplicate, lead_deleted, points_approved
        entity_type: lead | partner_points | user | hospital
        entity_id: ID of the primary entity
        actor: user performing the action (None = system)
        hospital_id: hospital the entity belongs to, when known
        details: free-form dict (old_value, new_value, counts, ...)
    """
    await store.events.insert({
        "id": str(uuid.uuid4()),
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "hospital_id": hospital_id,
        "user_id": actor.id if actor else "system",
        "user_role": actor.role.value if actor else "system",
        "details": details or {},
        "created_at": now_iso()
    })
