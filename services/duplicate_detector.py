"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Duplicate detection on lead intake                                    ║
║                                                                              ║
║  Rules:                                                                      ║
║  - Criterion: same phone, lead not deleted, ANY status, ANY hospital         ║
║  - DUPLICATE rows match too: resubmitting a duplicated phone keeps           ║
║    producing new DUPLICATE rows                                              ║
║  - Only checked on creation, never on update                                 ║
║                                                                              ║
║  On a hit the intended lead is NOT created; an audit row with                ║
║  status=DUPLICATE, points=0, no sales person is stored instead.              ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import uuid
from typing import Optional

from config import now_iso
from models import LeadStatus

logger = logging.getLogger("duplicate_detector")


async def find_active_duplicate(store, phone: str) -> Optional[dict]:
    if not phone:
        return None
    return await store.leads.find_active_by_phone(phone)


async def record_duplicate(
    store,
    name: str,
    phone: str,
    remarks: str,
    partner_id: Optional[str],
    hospital_id: str,
    created_by_id: str,
    specialisation: Optional[str] = None,
    original_lead_id: Optional[str] = None,
) -> dict:
    """Store the DUPLICATE audit row for a rejected submission."""
    now = now_iso()
    lead_doc = {
        "id": str(uuid.uuid4()),
        "name": name,
        "phone": phone,
        "remarks": remarks or "",
        "status": LeadStatus.DUPLICATE.value,
        "points": 0,
        "points_override": None,
        "specialisation": specialisation,
        "is_deleted": False,
        "partner_id": partner_id,
        "hospital_id": hospital_id,
        "created_by_id": created_by_id,
        "sales_person_id": None,
        "duplicate_of": original_lead_id,
        "created_at": now,
        "updated_at": now,
    }
    await store.leads.insert(lead_doc)
    logger.info(
        f"[DUPLICATE] phone={phone} original={original_lead_id} "
        f"audit_row={lead_doc['id']} by={created_by_id}"
    )
    return lead_doc
