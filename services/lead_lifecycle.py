"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Lead lifecycle                                                        ║
║                                                                              ║
║  INTAKE FLOW (create_lead):                                                  ║
║  1. Role constraints (partner -> own lead, status NEW)                       ║
║  2. Field validation + hospital resolution                                   ║
║  3. Duplicate detection (short-circuits with a DUPLICATE audit row)          ║
║  4. Points resolution                                                        ║
║  5. Round-robin sales person                                                 ║
║  6. Insert lead, then attach documents (best-effort)                         ║
║                                                                              ║
║  No cross-step atomicity: a crash after 6's insert leaves a lead without     ║
║  its documents. Accepted.                                                    ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import uuid
from datetime import date, timedelta
from typing import Optional, List, Dict, Any

from config import now_iso, validate_phone
from models import (
    Actor,
    Role,
    LeadStatus,
    SYSTEM_STATUSES,
    SPECIALISATIONS,
    LeadCreate,
    LeadUpdate,
    LeadFilters,
)
from services.errors import (
    ValidationError,
    DuplicatePhoneError,
    AuthorizationError,
    NotFoundError,
)
from services.permissions import (
    require_role,
    lead_scope,
    ensure_lead_access,
    MANAGERS,
    LEAD_CREATORS,
)
from services.points_policy import resolve_points, validate_override
from services.sales_rotation import next_sales_person
from services.duplicate_detector import find_active_duplicate, record_duplicate
from services.event_logger import log_event
from services.store import LeadQuery

logger = logging.getLogger("lead_lifecycle")


# ════════════════════════════════════════════════════════════════════════
# VALIDATION HELPERS
# ════════════════════════════════════════════════════════════════════════

def _check_operator_status(status: LeadStatus) -> None:
    if status in SYSTEM_STATUSES:
        raise ValidationError(f"Status {status.value} is assigned by the system only")


def _check_specialisation(specialisation: Optional[str]) -> None:
    if not specialisation:
        raise ValidationError("Specialisation is required.")
    if specialisation not in SPECIALISATIONS:
        raise ValidationError(f"Unknown specialisation: {specialisation}")


def _check_name_and_phone(name: str, phone: str) -> None:
    if not name or not validate_phone(phone):
        raise ValidationError("Name and 10-digit phone are required.")


def _check_override_allowed(actor: Actor, points_override: Optional[int]) -> None:
    if points_override is not None and not actor.is_superadmin:
        logger.warning(f"[PERMISSION_DENIED] user={actor.id} tried points_override={points_override}")
        raise AuthorizationError("Only superadmin can override points")


async def _resolve_hospital(store, data: LeadCreate, actor: Actor) -> str:
    if actor.is_superadmin:
        hospital_id = data.hospital_id or actor.hospital_id
    else:
        hospital_id = actor.hospital_id
    if not hospital_id:
        raise ValidationError("Hospital ID is required.")

    hospital = await store.hospitals.get(hospital_id)
    if not hospital or not hospital.get("is_active", True):
        raise NotFoundError("Hospital not found")
    return hospital_id


# ════════════════════════════════════════════════════════════════════════
# DOCUMENTS
# ════════════════════════════════════════════════════════════════════════

async def attach_documents(store, storage, lead_id: str, files) -> List[dict]:
    """
    Store uploaded files and link them to the lead.
    A file that cannot be stored is logged and skipped; the lead stays.
    """
    attached = []
    for upload in files or []:
        try:
            file_url = await storage.store(upload)
        except OSError as e:
            logger.warning(f"[DOCUMENT] lead={lead_id} upload failed for {getattr(upload, 'filename', '?')}: {e}")
            continue
        doc = {
            "id": str(uuid.uuid4()),
            "lead_id": lead_id,
            "file_url": file_url,
            "created_at": now_iso(),
        }
        await store.documents.insert(doc)
        attached.append(doc)
    return attached


async def with_documents(store, lead: dict) -> dict:
    lead["documents"] = await store.documents.list_for_lead(lead["id"])
    return lead


def _person(user: Optional[dict]) -> Optional[dict]:
    if not user:
        return None
    return {
        "id": user["id"],
        "first_name": user.get("first_name", ""),
        "last_name": user.get("last_name", ""),
    }


async def with_related(store, leads: List[dict]) -> List[dict]:
    """Attach documents plus partner / sales person / creator / hospital summaries."""
    user_ids = set()
    for lead in leads:
        user_ids.update((lead.get("partner_id"), lead.get("sales_person_id"), lead.get("created_by_id")))
    users = await store.users.get_many(user_ids)
    hospitals = await store.hospitals.get_many(lead.get("hospital_id") for lead in leads)

    for lead in leads:
        await with_documents(store, lead)
        lead["partner"] = _person(users.get(lead.get("partner_id")))
        lead["sales_person"] = _person(users.get(lead.get("sales_person_id")))
        lead["created_by"] = _person(users.get(lead.get("created_by_id")))
        hospital = hospitals.get(lead.get("hospital_id"))
        lead["hospital"] = {"id": hospital["id"], "name": hospital.get("name", "")} if hospital else None
    return leads


async def with_related_one(store, lead: dict) -> dict:
    return (await with_related(store, [lead]))[0]


# ════════════════════════════════════════════════════════════════════════
# CREATE
# ════════════════════════════════════════════════════════════════════════

async def create_lead(store, storage, data: LeadCreate, actor: Actor, files=None) -> dict:
    """
    Returns the created lead with its documents.
    Raises DuplicatePhoneError (carrying the DUPLICATE audit row) on a phone hit.
    """
    require_role(actor, *LEAD_CREATORS, action="create_lead")

    partner_id = data.partner_id
    status = data.status or LeadStatus.NEW
    if actor.role == Role.PARTNER:
        partner_id = actor.id
        status = LeadStatus.NEW

    _check_override_allowed(actor, data.points_override)
    if data.points_override is not None:
        validate_override(data.points_override)
    _check_name_and_phone(data.name, data.phone)
    _check_operator_status(status)
    _check_specialisation(data.specialisation)
    hospital_id = await _resolve_hospital(store, data, actor)

    existing = await find_active_duplicate(store, data.phone)
    if existing:
        duplicate = await record_duplicate(
            store,
            name=data.name,
            phone=data.phone,
            remarks=data.remarks,
            partner_id=partner_id,
            hospital_id=hospital_id,
            created_by_id=actor.id,
            specialisation=data.specialisation,
            original_lead_id=existing["id"],
        )
        await log_event(
            store, "lead_duplicate", "lead", duplicate["id"], actor,
            hospital_id=hospital_id, details={"original_lead_id": existing["id"]}
        )
        raise DuplicatePhoneError(duplicate)

    points = await resolve_points(store, status, partner_id, data.points_override)
    sales_person_id = await next_sales_person(store, hospital_id)

    now = now_iso()
    lead_doc = {
        "id": str(uuid.uuid4()),
        "name": data.name,
        "phone": data.phone,
        "remarks": data.remarks or "",
        "status": status.value,
        "points": points,
        "points_override": data.points_override,
        "specialisation": data.specialisation,
        "is_deleted": False,
        "partner_id": partner_id,
        "hospital_id": hospital_id,
        "created_by_id": actor.id,
        "sales_person_id": sales_person_id,
        "created_at": now,
        "updated_at": now,
    }
    await store.leads.insert(lead_doc)
    logger.info(
        f"[LEAD_CREATED] id={lead_doc['id']} hospital={hospital_id} status={status.value} "
        f"points={points} sales_person={sales_person_id} by={actor.role.value}:{actor.id}"
    )

    await attach_documents(store, storage, lead_doc["id"], files)
    await log_event(
        store, "lead_created", "lead", lead_doc["id"], actor,
        hospital_id=hospital_id, details={"points": points, "sales_person_id": sales_person_id}
    )
    return await with_related_one(store, lead_doc)


# ════════════════════════════════════════════════════════════════════════
# UPDATE
# ════════════════════════════════════════════════════════════════════════

async def update_lead(store, storage, lead_id: str, data: LeadUpdate, actor: Actor, files=None) -> dict:
    lead = await store.leads.get(lead_id)
    if not lead:
        raise NotFoundError("Lead not found")
    ensure_lead_access(actor, lead)
    _check_override_allowed(actor, data.points_override)

    fields: Dict[str, Any] = {}

    if data.name is not None or data.phone is not None:
        name = data.name.strip() if data.name is not None else lead["name"]
        phone = data.phone.strip() if data.phone is not None else lead["phone"]
        _check_name_and_phone(name, phone)
        fields["name"] = name
        fields["phone"] = phone

    if data.specialisation is not None:
        _check_specialisation(data.specialisation)
        fields["specialisation"] = data.specialisation

    if data.remarks is not None:
        fields["remarks"] = data.remarks

    status_changed = data.status is not None and data.status.value != lead["status"]
    if status_changed:
        if lead["status"] in (s.value for s in SYSTEM_STATUSES):
            raise ValidationError(f"A {lead['status']} lead cannot change status")
        _check_operator_status(data.status)
        fields["status"] = data.status.value

    if data.points_override is not None:
        fields["points"] = validate_override(data.points_override)
        fields["points_override"] = data.points_override
    elif status_changed:
        # New status: previous override no longer describes the points
        fields["points"] = await resolve_points(store, data.status, lead.get("partner_id"))
        fields["points_override"] = None

    fields["updated_at"] = now_iso()
    updated = await store.leads.update(lead_id, fields)
    if updated is None:
        raise NotFoundError("Lead not found")

    if status_changed:
        logger.info(
            f"[LEAD_STATUS] id={lead_id} {lead['status']} -> {fields['status']} "
            f"points {lead.get('points')} -> {updated['points']}"
        )

    await attach_documents(store, storage, lead_id, files)
    return await with_related_one(store, updated)


# ════════════════════════════════════════════════════════════════════════
# DELETE (hard delete, unlike users/hospitals)
# ════════════════════════════════════════════════════════════════════════

async def delete_lead(store, storage, lead_id: str, actor: Actor) -> None:
    require_role(actor, *LEAD_CREATORS, action="delete_lead")

    lead = await store.leads.get(lead_id)
    if not lead:
        raise NotFoundError("Lead not found")
    ensure_lead_access(actor, lead)

    documents = await store.documents.list_for_lead(lead_id)
    for doc in documents:
        if doc.get("file_url"):
            await storage.remove(doc["file_url"])
    await store.documents.delete_for_lead(lead_id)
    await store.leads.delete(lead_id)

    logger.info(f"[LEAD_DELETED] id={lead_id} documents={len(documents)} by={actor.role.value}:{actor.id}")
    await log_event(
        store, "lead_deleted", "lead", lead_id, actor,
        hospital_id=lead.get("hospital_id"),
        details={"phone": lead.get("phone"), "status": lead.get("status"), "documents": len(documents)}
    )


# ════════════════════════════════════════════════════════════════════════
# QUERIES
# ════════════════════════════════════════════════════════════════════════

async def get_lead(store, lead_id: str, actor: Actor) -> dict:
    lead = await store.leads.get(lead_id)
    if not lead or (lead.get("is_deleted") and actor.role not in MANAGERS):
        raise NotFoundError("Lead not found")
    ensure_lead_access(actor, lead)
    return await with_related_one(store, lead)


def build_lead_query(filters: LeadFilters, actor: Actor, exclude_statuses=None) -> LeadQuery:
    """
    Translate request filters into a LeadQuery. Role scope always wins over
    a conflicting filter; admin_id (leads created by an admin) is honoured
    for superadmin only.
    """
    criteria: Dict[str, Any] = {
        "partner_id": filters.partner_id,
        "sales_person_id": filters.sales_person_id,
    }
    criteria.update(lead_scope(actor))

    # A bare date includes its whole day: stop before the next midnight
    created_to = created_before = None
    if filters.date_to and "T" not in filters.date_to:
        try:
            day = date.fromisoformat(filters.date_to)
        except ValueError:
            raise ValidationError(f"Invalid date_to: {filters.date_to}")
        created_before = (day + timedelta(days=1)).isoformat()
    else:
        created_to = filters.date_to

    return LeadQuery(
        **criteria,
        created_by_id=filters.admin_id if actor.is_superadmin else None,
        status=filters.status.value if filters.status else None,
        specialisation=filters.specialisation,
        exclude_statuses=list(exclude_statuses or []),
        created_from=filters.date_from,
        created_to=created_to,
        created_before=created_before,
        include_deleted=filters.include_deleted and actor.role in MANAGERS,
    )


async def list_leads(store, filters: LeadFilters, actor: Actor) -> List[dict]:
    """Role-scoped listing, newest first. DUPLICATE rows never appear here."""
    query = build_lead_query(filters, actor, exclude_statuses=[LeadStatus.DUPLICATE.value])
    return await with_related(store, await store.leads.find(query))


async def list_duplicates(store, actor: Actor) -> List[dict]:
    require_role(actor, *MANAGERS, action="list_duplicates")
    query = LeadQuery(**lead_scope(actor), status=LeadStatus.DUPLICATE.value)
    return await with_related(store, await store.leads.find(query))
