"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Bulk lead upload (CSV)                                                ║
║                                                                              ║
║  Header row required. Columns used: name, phone, remarks, specialisation.    ║
║  Rows without a name or a 10-digit phone are skipped and counted.            ║
║                                                                              ║
║  Unlike single intake, bulk rows are NOT checked for duplicates and get      ║
║  NO round-robin sales person. Status is always NEW.                          ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import csv
import io
import logging
import uuid
from typing import Dict

from config import now_iso, validate_phone
from models import Actor, Role, LeadStatus, SPECIALISATIONS
from services.errors import ValidationError
from services.permissions import require_role, LEAD_CREATORS
from services.points_policy import resolve_points
from services.event_logger import log_event

logger = logging.getLogger("lead_import")


async def bulk_upload(store, csv_bytes: bytes, actor: Actor) -> Dict[str, int]:
    require_role(actor, *LEAD_CREATORS, action="bulk_upload")
    if not csv_bytes:
        raise ValidationError("No file uploaded")
    if not actor.hospital_id:
        raise ValidationError("Hospital ID is required.")

    try:
        text = csv_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("File must be UTF-8 encoded CSV")

    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames or "name" not in reader.fieldnames or "phone" not in reader.fieldnames:
        raise ValidationError("CSV must have 'name' and 'phone' columns")

    partner_id = actor.id if actor.role == Role.PARTNER else None
    # Rate lookup uses the uploader, whatever its role
    points = await resolve_points(store, LeadStatus.NEW, actor.id)

    docs = []
    skipped = 0
    for row in reader:
        name = (row.get("name") or "").strip()
        phone = (row.get("phone") or "").strip()
        if not name or not validate_phone(phone):
            skipped += 1
            continue
        specialisation = (row.get("specialisation") or "").strip() or None
        if specialisation is not None and specialisation not in SPECIALISATIONS:
            specialisation = None

        now = now_iso()
        docs.append({
            "id": str(uuid.uuid4()),
            "name": name,
            "phone": phone,
            "remarks": (row.get("remarks") or "").strip(),
            "status": LeadStatus.NEW.value,
            "points": points,
            "points_override": None,
            "specialisation": specialisation,
            "is_deleted": False,
            "partner_id": partner_id,
            "hospital_id": actor.hospital_id,
            "created_by_id": actor.id,
            "sales_person_id": None,
            "created_at": now,
            "updated_at": now,
        })

    created = await store.leads.insert_many(docs) if docs else 0
    logger.info(f"[BULK_UPLOAD] created={created} skipped={skipped} by={actor.role.value}:{actor.id}")
    await log_event(
        store, "leads_bulk_uploaded", "lead", None, actor,
        hospital_id=actor.hospital_id, details={"created": created, "skipped": skipped}
    )
    return {"created": created, "skipped": skipped}
