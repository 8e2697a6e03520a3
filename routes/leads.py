"""
PMS - Routes Leads
Intake, edit, delete, listing, export, bulk upload, analytics, remarks.

Static paths (/leads/export, /leads/duplicates, ...) are declared before
/leads/{lead_id} so they are not captured as ids.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from typing import Optional, List

from models import Actor, LeadStatus, LeadCreate, LeadUpdate, LeadReassign, LeadFilters, LeadOut
from routes.auth import get_current_user
from services.errors import ValidationError
from services.store import get_store
from services.file_storage import get_file_storage
from services.lead_lifecycle import (
    create_lead,
    update_lead,
    delete_lead,
    get_lead,
    list_leads,
    list_duplicates,
)
from services.lead_reassignment import reassign_lead
from services.lead_export import export_leads
from services.lead_import import bulk_upload
from services.analytics import lead_analytics
from services.remarks import add_remark, list_remarks

router = APIRouter(prefix="/leads", tags=["Leads"])


def _parse_points_override(value: Optional[str]) -> Optional[int]:
    """Multipart sends text; "" means not supplied."""
    if value is None or value.strip() == "":
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise ValidationError("points_override must be an integer")


def _parse_status(value: Optional[str]) -> Optional[LeadStatus]:
    if value is None or value.strip() == "":
        return None
    try:
        return LeadStatus(value.strip())
    except ValueError:
        raise ValidationError(f"Unknown status: {value}")


def _filters(
    status: Optional[str] = None,
    specialisation: Optional[str] = None,
    partner_id: Optional[str] = None,
    sales_person_id: Optional[str] = None,
    admin_id: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    include_deleted: bool = False,
) -> LeadFilters:
    return LeadFilters(
        status=_parse_status(status),
        specialisation=specialisation or None,
        partner_id=partner_id or None,
        sales_person_id=sales_person_id or None,
        admin_id=admin_id or None,
        date_from=date_from or None,
        date_to=date_to or None,
        include_deleted=include_deleted,
    )


# ==================== COLLECTION ====================

@router.post("", response_model=LeadOut, status_code=201)
async def create(
    name: str = Form(""),
    phone: str = Form(""),
    specialisation: Optional[str] = Form(None),
    remarks: Optional[str] = Form(""),
    status: Optional[str] = Form(None),
    partner_id: Optional[str] = Form(None),
    hospital_id: Optional[str] = Form(None),
    points_override: Optional[str] = Form(None),
    files: List[UploadFile] = File(default=[]),
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
    storage=Depends(get_file_storage),
):
    data = LeadCreate(
        name=name,
        phone=phone,
        specialisation=specialisation or None,
        remarks=remarks,
        status=_parse_status(status),
        partner_id=partner_id or None,
        hospital_id=hospital_id or None,
        points_override=_parse_points_override(points_override),
    )
    return await create_lead(store, storage, data, user, files)


@router.get("", response_model=List[LeadOut])
async def list_all(
    filters: LeadFilters = Depends(_filters),
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
):
    return await list_leads(store, filters, user)


@router.get("/export")
async def export(
    filters: LeadFilters = Depends(_filters),
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
):
    content = await export_leads(store, filters, user)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=leads.csv"}
    )


@router.get("/duplicates", response_model=List[LeadOut])
async def duplicates(user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await list_duplicates(store, user)


@router.get("/analytics")
async def analytics(user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await lead_analytics(store, user)


@router.post("/bulk-upload")
async def upload_many(
    file: UploadFile = File(...),
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
):
    result = await bulk_upload(store, await file.read(), user)
    return {"message": f"Uploaded {result['created']} leads", **result}


# ==================== SINGLE LEAD ====================

@router.get("/{lead_id}", response_model=LeadOut)
async def get_one(lead_id: str, user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await get_lead(store, lead_id, user)


@router.put("/{lead_id}", response_model=LeadOut)
async def update(
    lead_id: str,
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    specialisation: Optional[str] = Form(None),
    remarks: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    points_override: Optional[str] = Form(None),
    files: List[UploadFile] = File(default=[]),
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
    storage=Depends(get_file_storage),
):
    data = LeadUpdate(
        name=name,
        phone=phone,
        specialisation=specialisation or None,
        remarks=remarks,
        status=_parse_status(status),
        points_override=_parse_points_override(points_override),
    )
    return await update_lead(store, storage, lead_id, data, user, files)


@router.delete("/{lead_id}")
async def delete(
    lead_id: str,
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
    storage=Depends(get_file_storage),
):
    await delete_lead(store, storage, lead_id, user)
    return {"message": "Lead deleted"}


@router.put("/{lead_id}/reassign", response_model=LeadOut)
async def reassign(
    lead_id: str,
    data: LeadReassign,
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
):
    return await reassign_lead(store, lead_id, user, data.partner_id, data.sales_person_id)


# ==================== REMARKS ====================

@router.get("/{lead_id}/remarks")
async def remarks(lead_id: str, user: Actor = Depends(get_current_user), store=Depends(get_store)):
    return await list_remarks(store, lead_id, user)


@router.post("/{lead_id}/remarks", status_code=201)
async def post_remark(
    lead_id: str,
    message: str = Form(""),
    file: Optional[UploadFile] = File(None),
    user: Actor = Depends(get_current_user),
    store=Depends(get_store),
    storage=Depends(get_file_storage),
):
    return await add_remark(store, storage, lead_id, user, message, file)
