"""
PMS - Models package

from models import Role, Actor, LeadStatus, LeadCreate, etc.
"""

from .auth import (
    Role,
    Actor,
    TransferAdminData,
)

from .lead import (
    LeadStatus,
    SYSTEM_STATUSES,
    OPERATOR_STATUSES,
    ANALYTICS_STATUSES,
    SPECIALISATIONS,
    LeadCreate,
    LeadUpdate,
    LeadReassign,
    LeadFilters,
    LeadDocumentOut,
    PersonSummary,
    HospitalSummary,
    LeadOut,
)

from .partner_points import (
    ApprovalStatus,
    RATED_STATUSES,
    PartnerPointsSet,
)

__all__ = [
    # Auth
    "Role",
    "Actor",
    "TransferAdminData",
    # Lead
    "LeadStatus",
    "SYSTEM_STATUSES",
    "OPERATOR_STATUSES",
    "ANALYTICS_STATUSES",
    "SPECIALISATIONS",
    "LeadCreate",
    "LeadUpdate",
    "LeadReassign",
    "LeadFilters",
    "LeadDocumentOut",
    "PersonSummary",
    "HospitalSummary",
    "LeadOut",
    # Partner points
    "ApprovalStatus",
    "RATED_STATUSES",
    "PartnerPointsSet",
]
