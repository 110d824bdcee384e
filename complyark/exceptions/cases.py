# complyark/exceptions/cases.py
from typing import List, Optional

from fastapi import HTTPException, status


class CaseWorkflowError(HTTPException):
    """Base error for case store, lifecycle and intake failures"""
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

    @property
    def error_type(self) -> str:
        return type(self).__name__


class CaseNotFoundError(CaseWorkflowError):
    """Referenced case (or user) does not exist or belongs to another tenant"""
    def __init__(self, detail: str = "Case not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidStatusError(CaseWorkflowError):
    """Target status is unknown or inactive"""
    def __init__(self, status_id: Optional[int] = None):
        detail = "Invalid status" if status_id is None else f"Invalid status: {status_id}"
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        self.status_id = status_id


class ValidationError(CaseWorkflowError):
    """Missing or invalid submitter field"""
    def __init__(self, detail: str = "Please fill in all required fields", fields: Optional[List[str]] = None):
        self.fields = list(fields or [])
        if self.fields:
            detail = f"{detail}: {', '.join(self.fields)}"
        super().__init__(status_code=422, detail=detail)


class InvalidEmailError(CaseWorkflowError):
    """Email address fails the minimal format check"""
    def __init__(self):
        super().__init__(
            status_code=422,
            detail="Please enter a valid email address"
        )


class UnknownOrganisationError(CaseWorkflowError):
    """Tenant id or token does not resolve to an organisation"""
    def __init__(self, detail: str = "Invalid organization"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
