"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Lead model                                                            ║
║                                                                              ║
║  RULES:                                                                      ║
║  1. phone is always exactly 10 digits                                        ║
║  2. points is a non-negative integer                                         ║
║  3. points_override set => points == points_override                         ║
║  4. DUPLICATE and DELETED are system-assigned, never chosen by a user        ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, validator


class LeadStatus(str, Enum):
    NEW = "NEW"
    NOT_REACHABLE = "NOT_REACHABLE"
    NOT_INTERESTED = "NOT_INTERESTED"
    OPD_DONE = "OPD_DONE"
    IPD_DONE = "IPD_DONE"
    CLOSED = "CLOSED"
    DUPLICATE = "DUPLICATE"  # System only: phone collision audit row
    DELETED = "DELETED"      # System only


SYSTEM_STATUSES = {LeadStatus.DUPLICATE, LeadStatus.DELETED}

OPERATOR_STATUSES = [s for s in LeadStatus if s not in SYSTEM_STATUSES]

# Statuses reported by the analytics endpoint
ANALYTICS_STATUSES = OPERATOR_STATUSES + [LeadStatus.DELETED]


SPECIALISATIONS = [
    "Orthopaedics",
    "Urology",
    "Cardiology",
    "Neurology",
    "Oncology",
    "Gastroenterology",
    "Nephrology",
    "ENT",
    "General Surgery",
    "Other",
]


class LeadCreate(BaseModel):
    """Lead intake (partner self-entry, admin or superadmin)"""
    name: str = ""
    phone: str = ""
    specialisation: Optional[str] = None
    remarks: Optional[str] = ""
    status: Optional[LeadStatus] = None
    partner_id: Optional[str] = None
    hospital_id: Optional[str] = None
    points_override: Optional[int] = None

    @validator("name", "phone", pre=True)
    def strip_text(cls, v):
        if v is None:
            return ""
        return str(v).strip()


class LeadUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    remarks: Optional[str] = None
    status: Optional[LeadStatus] = None
    specialisation: Optional[str] = None
    points_override: Optional[int] = None


class LeadReassign(BaseModel):
    partner_id: Optional[str] = None
    sales_person_id: Optional[str] = None


class LeadFilters(BaseModel):
    """Query filters for listing/exporting leads"""
    status: Optional[LeadStatus] = None
    specialisation: Optional[str] = None
    partner_id: Optional[str] = None
    sales_person_id: Optional[str] = None
    admin_id: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    include_deleted: bool = False


class LeadDocumentOut(BaseModel):
    id: str
    lead_id: str
    file_url: str
    created_at: str = ""


class PersonSummary(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""


class HospitalSummary(BaseModel):
    id: str
    name: str = ""


class LeadOut(BaseModel):
    """Structure of a lead as stored and returned"""
    id: str
    name: str
    phone: str
    status: LeadStatus = LeadStatus.NEW
    points: int = 0
    points_override: Optional[int] = None
    specialisation: Optional[str] = None
    remarks: str = ""
    is_deleted: bool = False

    hospital_id: str
    created_by_id: str
    partner_id: Optional[str] = None
    sales_person_id: Optional[str] = None
    duplicate_of: Optional[str] = None  # DUPLICATE rows only

    partner: Optional[PersonSummary] = None
    sales_person: Optional[PersonSummary] = None
    created_by: Optional[PersonSummary] = None
    hospital: Optional[HospitalSummary] = None

    documents: List[LeadDocumentOut] = []

    created_at: str = ""
    updated_at: str = ""
