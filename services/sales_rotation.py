"""
PMS - Round-robin sales person assignment

Rotation position is derived from history, not stored:
  roster = active SALES_PERSON users of the hospital, by (created_at, id)
  last   = sales person of the hospital's most recent assigned lead
  next   = roster[(index(last) + 1) % len(roster)], or roster[0]

Read-then-write without locking: two concurrent intakes for the same
hospital may both get the same person. Accepted.
"""

import logging
from typing import Optional

from models import Role

logger = logging.getLogger("sales_rotation")


async def next_sales_person(store, hospital_id: str) -> Optional[str]:
    roster = await store.users.list_active(Role.SALES_PERSON.value, hospital_id)
    if not roster:
        logger.info(f"[ROUND_ROBIN] hospital={hospital_id} has no active sales person")
        return None

    roster_ids = [u["id"] for u in roster]
    next_index = 0

    last_lead = await store.leads.latest_assigned(hospital_id)
    if last_lead and last_lead.get("sales_person_id") in roster_ids:
        last_index = roster_ids.index(last_lead["sales_person_id"])
        next_index = (last_index + 1) % len(roster_ids)

    return roster_ids[next_index]
