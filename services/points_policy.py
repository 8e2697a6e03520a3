"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Points Policy                                                         ║
║                                                                              ║
║  PRECEDENCE (first match wins):                                              ║
║  1. Explicit override (superadmin only) -> verbatim                          ║
║  2. APPROVED partner rate for (partner, status)                              ║
║  3. Static default: NEW=100, OPD_DONE=200, IPD_DONE=3500, others=0           ║
║                                                                              ║
║  PENDING / REJECTED partner rates never apply.                               ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Optional

from models import LeadStatus, ApprovalStatus
from services.errors import ValidationError

logger = logging.getLogger("points_policy")

STATUS_POINTS = {
    LeadStatus.NEW.value: 100,
    LeadStatus.OPD_DONE.value: 200,
    LeadStatus.IPD_DONE.value: 3500,
}


def _status_value(status) -> str:
    return status.value if isinstance(status, LeadStatus) else str(status)


def default_points(status) -> int:
    return STATUS_POINTS.get(_status_value(status), 0)


def validate_override(value) -> int:
    """Points are non-negative integers; overrides included."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("points_override must be an integer")
    if value < 0:
        raise ValidationError("points_override cannot be negative")
    return value


async def approved_partner_rate(store, partner_id: Optional[str], status) -> Optional[int]:
    if not partner_id:
        return None
    entry = await store.partner_points.find(partner_id, _status_value(status))
    if entry and entry.get("approval_status") == ApprovalStatus.APPROVED.value:
        return entry["points"]
    return None


async def resolve_points(
    store,
    status,
    partner_id: Optional[str] = None,
    explicit_override: Optional[int] = None,
) -> int:
    if explicit_override is not None:
        return validate_override(explicit_override)

    rate = await approved_partner_rate(store, partner_id, status)
    if rate is not None:
        logger.debug(f"[POINTS] partner={partner_id} status={_status_value(status)} rate={rate}")
        return rate

    return default_points(status)
