"""
PMS - Partner point rates (one row per partner per status)
"""

from enum import Enum
from pydantic import BaseModel, validator

from .lead import LeadStatus


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Only these statuses carry a partner-specific rate
RATED_STATUSES = [LeadStatus.NEW, LeadStatus.OPD_DONE, LeadStatus.IPD_DONE]


class PartnerPointsSet(BaseModel):
    partner_id: str
    status: LeadStatus
    points: int

    @validator("points", pre=True)
    def points_must_be_number(cls, v):
        # "100" from a form is not a rate; JSON numbers only
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("points must be an integer")
        return v
