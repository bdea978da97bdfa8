"""
Error taxonomy for the application lifecycle.

Validation and conflict errors are the caller's to fix; StorageFault is fatal to the
current operation and never carries driver details to clients. A transition that finds
nothing eligible is not an error at all (see TransitionResult in services.applications).
"""
from __future__ import annotations

from typing import Any, Optional


class LoanApplicationError(Exception):
    code = "LOAN_APPLICATION_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


class ValidationError(LoanApplicationError):
    """Raw input failed a field rule. `section` is customer, collateral or proposed_loan."""

    code = "VALIDATION_ERROR"
    http_status = 422

    def __init__(self, section: str, message: str, issues: Optional[list[dict[str, str]]] = None):
        super().__init__(f"invalid {section}: {message}")
        self.section = section
        self.reason = message
        self.issues = issues or [{"section": section, "message": message}]

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["error"]["section"] = self.section
        body["error"]["details"] = self.issues
        return body


class ConflictError(LoanApplicationError):
    """A uniqueness constraint rejected the write (duplicate id_number)."""

    code = "CONFLICT"
    http_status = 409


class StorageFault(LoanApplicationError):
    code = "STORAGE_FAULT"
    http_status = 500

    def to_response(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": "An internal storage error occurred"}}


class ApplicationNotFound(LoanApplicationError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, application_id: str):
        super().__init__(f"Loan application '{application_id}' not found")
        self.application_id = application_id
