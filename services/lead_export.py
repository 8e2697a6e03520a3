"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Lead CSV export                                                       ║
║                                                                              ║
║  COLUMNS (exact order):                                                      ║
║  name, phone, status, points, remarks, partner, salesPerson, hospital,       ║
║  createdBy, createdAt                                                        ║
║                                                                              ║
║  People and hospitals are exported by display name, never by id.             ║
║  DUPLICATE and deleted rows are never exported.                              ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import csv
import io
import logging
from typing import List, Dict, Optional

from models import Actor, LeadStatus, LeadFilters
from services.lead_lifecycle import build_lead_query
from services.event_logger import log_event

logger = logging.getLogger("lead_export")

CSV_COLUMNS = [
    "name",
    "phone",
    "status",
    "points",
    "remarks",
    "partner",
    "salesPerson",
    "hospital",
    "createdBy",
    "createdAt",
]


def _person_name(user: Optional[dict]) -> str:
    if not user:
        return ""
    return f"{user.get('first_name', '')} {user.get('last_name', '')}".strip()


def generate_csv_content(leads: List[Dict], users: Dict[str, dict], hospitals: Dict[str, dict]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_COLUMNS)
    writer.writeheader()

    for lead in leads:
        hospital = hospitals.get(lead.get("hospital_id")) or {}
        writer.writerow({
            "name": lead.get("name", ""),
            "phone": lead.get("phone", ""),
            "status": lead.get("status", ""),
            "points": lead.get("points", 0),
            "remarks": lead.get("remarks", ""),
            "partner": _person_name(users.get(lead.get("partner_id"))),
            "salesPerson": _person_name(users.get(lead.get("sales_person_id"))),
            "hospital": hospital.get("name", ""),
            "createdBy": _person_name(users.get(lead.get("created_by_id"))),
            "createdAt": lead.get("created_at", ""),
        })

    return output.getvalue()


async def export_leads(store, filters: LeadFilters, actor: Actor) -> bytes:
    query = build_lead_query(filters, actor, exclude_statuses=[LeadStatus.DUPLICATE.value])
    query.include_deleted = False
    leads = await store.leads.find(query)

    user_ids = set()
    for lead in leads:
        user_ids.update((lead.get("partner_id"), lead.get("sales_person_id"), lead.get("created_by_id")))
    users = await store.users.get_many(user_ids)
    hospitals = await store.hospitals.get_many(lead.get("hospital_id") for lead in leads)

    content = generate_csv_content(leads, users, hospitals)
    logger.info(f"[EXPORT] {len(leads)} leads by={actor.role.value}:{actor.id}")
    await log_event(
        store, "leads_exported", "lead", None, actor,
        hospital_id=actor.hospital_id, details={"count": len(leads)}
    )
    return content.encode("utf-8")
