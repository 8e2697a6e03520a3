"""
PMS - Lead remarks thread (append-only)
"""

import logging
import uuid
from typing import Optional, List

from config import now_iso
from models import Actor
from services.errors import ValidationError, NotFoundError
from services.permissions import ensure_lead_access

logger = logging.getLogger("remarks")


def _author_summary(user: Optional[dict]) -> Optional[dict]:
    if not user:
        return None
    return {
        "id": user["id"],
        "first_name": user.get("first_name", ""),
        "last_name": user.get("last_name", ""),
        "role": user.get("role"),
    }


async def _visible_lead(store, lead_id: str, actor: Actor) -> dict:
    lead = await store.leads.get(lead_id)
    if not lead:
        raise NotFoundError("Lead not found")
    ensure_lead_access(actor, lead)
    return lead


async def add_remark(store, storage, lead_id: str, actor: Actor, message: str = "", upload=None) -> dict:
    message = (message or "").strip()
    if not message and upload is None:
        raise ValidationError("Message or file is required")

    await _visible_lead(store, lead_id, actor)

    file_url = None
    if upload is not None:
        try:
            file_url = await storage.store(upload)
        except OSError as e:
            logger.warning(f"[REMARK] lead={lead_id} attachment not stored: {e}")
            if not message:
                raise ValidationError("Message or file is required")

    remark = {
        "id": str(uuid.uuid4()),
        "lead_id": lead_id,
        "user_id": actor.id,
        "message": message,
        "file_url": file_url,
        "created_at": now_iso(),
    }
    await store.remarks.insert(remark)
    remark["user"] = _author_summary(await store.users.get(actor.id))
    return remark


async def list_remarks(store, lead_id: str, actor: Actor) -> List[dict]:
    await _visible_lead(store, lead_id, actor)
    remarks = await store.remarks.list_for_lead(lead_id)
    authors = await store.users.get_many(r["user_id"] for r in remarks)
    for r in remarks:
        r["user"] = _author_summary(authors.get(r["user_id"]))
    return remarks
