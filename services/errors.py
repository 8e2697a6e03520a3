"""
PMS - Error taxonomy

Services raise these; server.py renders them as
{"detail": message, "kind": kind, ...extra} with the matching status code.
"""

from typing import Any, Dict, Optional


class PMSError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "kind": self.kind, **self.extra}


class ValidationError(PMSError):
    kind = "validation_error"
    status_code = 400


class DuplicatePhoneError(PMSError):
    """Phone already used by an active lead; carries the DUPLICATE audit row"""
    kind = "duplicate_phone"
    status_code = 400

    def __init__(self, lead: dict):
        super().__init__("Phone no already exists in the system", {"lead": lead})
        self.lead = lead


class AuthorizationError(PMSError):
    kind = "authorization_error"
    status_code = 403


class NotFoundError(PMSError):
    kind = "not_found"
    status_code = 404


class TransactionFailure(PMSError):
    """
    Multi-collection write rolled back.
    reason: duplicate_key | failed
    """
    kind = "transaction_failure"

    def __init__(self, message: str, reason: str = "failed"):
        super().__init__(message, {"reason": reason})
        self.reason = reason
        self.status_code = 500 if reason == "failed" else 400
