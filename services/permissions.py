"""
PMS - Role checks

Four fixed roles. Every checkpoint handles all of them explicitly:
- SUPERADMIN: every hospital, override and approval authority
- ADMIN: one hospital
- PARTNER: own leads only
- SALES_PERSON: own hospital, cannot create or delete leads
"""

import logging
from typing import Dict, Any

from models import Actor, Role
from services.errors import AuthorizationError

logger = logging.getLogger("permissions")

MANAGERS = (Role.SUPERADMIN, Role.ADMIN)
LEAD_CREATORS = (Role.SUPERADMIN, Role.ADMIN, Role.PARTNER)


def require_role(actor: Actor, *roles: Role, action: str = "") -> None:
    """Raise AuthorizationError unless actor.role is one of roles."""
    if actor.role not in roles:
        logger.warning(
            f"[PERMISSION_DENIED] user={actor.id} role={actor.role.value} "
            f"action={action or '-'} allowed={[r.value for r in roles]}"
        )
        raise AuthorizationError("Access denied.")


def lead_scope(actor: Actor) -> Dict[str, Any]:
    """
    LeadQuery restrictions for what an actor may see.
    partner -> own leads, admin/sales person -> own hospital, superadmin -> all
    """
    if actor.role == Role.SUPERADMIN:
        return {}
    if actor.role == Role.PARTNER:
        return {"partner_id": actor.id}
    if actor.role in (Role.ADMIN, Role.SALES_PERSON):
        if not actor.hospital_id:
            raise AuthorizationError("User is not assigned to any hospital")
        return {"hospital_id": actor.hospital_id}
    raise AuthorizationError(f"Unknown role: {actor.role}")


def can_access_lead(actor: Actor, lead: dict) -> bool:
    if actor.role == Role.SUPERADMIN:
        return True
    if actor.role == Role.PARTNER:
        return lead.get("partner_id") == actor.id
    if actor.role in (Role.ADMIN, Role.SALES_PERSON):
        return bool(actor.hospital_id) and lead.get("hospital_id") == actor.hospital_id
    return False


def ensure_lead_access(actor: Actor, lead: dict) -> None:
    if not can_access_lead(actor, lead):
        logger.warning(f"[PERMISSION_DENIED] user={actor.id} lead={lead.get('id')}")
        raise AuthorizationError("Not authorized")
