"""
PMS - Lead reassignment (partner and/or sales person ownership)

Only the provided fields change. The new partner / sales person is not
checked for activity or hospital membership.
"""

import logging
from typing import Optional

from config import now_iso
from models import Actor
from services.errors import ValidationError, NotFoundError
from services.permissions import require_role, ensure_lead_access, MANAGERS
from services.lead_lifecycle import with_related_one
from services.event_logger import log_event

logger = logging.getLogger("lead_reassignment")


async def reassign_lead(
    store,
    lead_id: str,
    actor: Actor,
    partner_id: Optional[str] = None,
    sales_person_id: Optional[str] = None,
) -> dict:
    require_role(actor, *MANAGERS, action="reassign_lead")
    if not partner_id and not sales_person_id:
        raise ValidationError("partner_id or sales_person_id required")

    lead = await store.leads.get(lead_id)
    if not lead:
        raise NotFoundError("Lead not found")
    ensure_lead_access(actor, lead)

    fields = {"updated_at": now_iso()}
    if partner_id:
        fields["partner_id"] = partner_id
    if sales_person_id:
        fields["sales_person_id"] = sales_person_id

    updated = await store.leads.update(lead_id, fields)
    logger.info(
        f"[REASSIGN] lead={lead_id} partner {lead.get('partner_id')} -> {updated.get('partner_id')} "
        f"sales {lead.get('sales_person_id')} -> {updated.get('sales_person_id')}"
    )
    await log_event(
        store, "lead_reassigned", "lead", lead_id, actor,
        hospital_id=lead.get("hospital_id"),
        details={
            "old": {"partner_id": lead.get("partner_id"), "sales_person_id": lead.get("sales_person_id")},
            "new": {"partner_id": updated.get("partner_id"), "sales_person_id": updated.get("sales_person_id")},
        }
    )
    return await with_related_one(store, updated)
