"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Admin data reassignment                                               ║
║                                                                              ║
║  Moves everything of a departing admin onto a target admin, then deletes     ║
║  the departing admin. ALL steps run in ONE transaction:                      ║
║  1. partners of the source hospital      -> target hospital                  ║
║  2. sales people of the source hospital  -> target hospital                  ║
║  3. leads of the source hospital         -> target hospital                  ║
║  4. leads created by the source admin    -> created by the target admin      ║
║  5. delete the source admin                                                  ║
║                                                                              ║
║  Any failure rolls everything back and surfaces as TransactionFailure.       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Dict

from pymongo.errors import DuplicateKeyError

from models import Actor, Role
from services.errors import ValidationError, NotFoundError, TransactionFailure
from services.permissions import require_role
from services.event_logger import log_event

logger = logging.getLogger("admin_reassignment")


async def reassign_admin_data(store, source_admin_id: str, target_admin_id: str, actor: Actor) -> Dict[str, int]:
    require_role(actor, Role.SUPERADMIN, action="reassign_admin_data")

    source = await store.users.get(source_admin_id)
    target = await store.users.get(target_admin_id) if target_admin_id else None
    if not source or not target:
        raise NotFoundError("Admin not found")
    if source_admin_id == target_admin_id:
        raise ValidationError("Source and target admin must differ")
    if target.get("role") != Role.ADMIN.value:
        raise ValidationError("Target user must be an admin")
    if not target.get("hospital_id"):
        raise ValidationError("Target admin must be assigned to a hospital")
    if not source.get("hospital_id"):
        raise ValidationError("Deleted admin is not assigned to any hospital")

    from_hospital = source["hospital_id"]
    to_hospital = target["hospital_id"]
    logger.info(
        f"[ADMIN_REASSIGN] start source={source_admin_id} ({from_hospital}) "
        f"-> target={target_admin_id} ({to_hospital})"
    )

    try:
        async with store.transaction() as session:
            counts = {
                "partners": await store.users.move_hospital(
                    Role.PARTNER.value, from_hospital, to_hospital, session=session),
                "sales_people": await store.users.move_hospital(
                    Role.SALES_PERSON.value, from_hospital, to_hospital, session=session),
                "leads": await store.leads.move_hospital(from_hospital, to_hospital, session=session),
                "leads_authored": await store.leads.move_creator(
                    source_admin_id, target_admin_id, session=session),
                "admins_deleted": await store.users.delete(source_admin_id, session=session),
            }
    except DuplicateKeyError as e:
        logger.error(f"[ADMIN_REASSIGN] rolled back (duplicate key): {e}")
        raise TransactionFailure(
            "A unique constraint would be violated on the database", reason="duplicate_key"
        ) from e
    except Exception as e:
        logger.error(f"[ADMIN_REASSIGN] rolled back: {e}")
        raise TransactionFailure(f"Failed to reassign admin data: {e}") from e

    logger.info(f"[ADMIN_REASSIGN] done {counts}")
    await log_event(
        store, "admin_data_reassigned", "user", source_admin_id, actor,
        hospital_id=to_hospital,
        details={"target_admin_id": target_admin_id, "from_hospital_id": from_hospital, **counts}
    )
    return counts
