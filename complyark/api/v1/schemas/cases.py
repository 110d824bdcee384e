# complyark/api/v1/schemas/cases.py
from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime

from complyark.core.records import Case, CaseKind, CaseSummary, HistoryEntry, RequestStatus, RequestType


class SubmissionBase(BaseModel):
    """Fields every public submission carries"""
    first_name: str = Field("", max_length=100, description="Submitter first name")
    last_name: str = Field("", max_length=100, description="Submitter last name")
    email: str = Field("", max_length=255, description="Submitter email")
    phone: str = Field("", max_length=50, description="Submitter phone")
    comments: str = Field("", description="Request or grievance text")


class DataRequestSubmission(SubmissionBase):
    """Schema for submitting a data-principal request"""
    request_type: Optional[str] = Field(
        None, description="Access, Correction, Nomination or Erasure (defaults to Access)"
    )


class GrievanceSubmission(SubmissionBase):
    """Schema for submitting a grievance"""
    pass


class StatusChangeRequest(BaseModel):
    """Schema for moving a case to another status"""
    status_id: int = Field(..., ge=1, description="Target status id")
    comment: Optional[str] = Field(None, description="History comment; closure comment when closing")


class AssignmentRequest(BaseModel):
    """Schema for assigning a case"""
    assignee_id: int = Field(..., ge=0, description="Staff user id, 0 to return the case to triage")
    comment: Optional[str] = Field(None, description="History comment")


class StatusResponse(BaseModel):
    id: int
    name: str
    sla_days: int
    is_active: bool
    is_terminal: bool

    @classmethod
    def from_record(cls, status: RequestStatus):
        return cls(**status.model_dump())


class CaseResponse(BaseModel):
    """Schema for case response"""
    id: int = Field(..., description="Case id")
    kind: CaseKind
    request_type: Optional[RequestType] = None
    first_name: str
    last_name: str
    email: str
    phone: str
    comment: str
    organisation_id: int
    assigned_to: int = Field(..., description="Assignee user id, 0 when unassigned")
    status_id: int
    status_name: Optional[str] = None
    created_at: datetime
    due_date: datetime
    completed_on_time: bool
    closure_comment: str
    closed_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, case: Case, status_name: Optional[str] = None):
        """Convert a case record to the API response"""
        return cls(**case.model_dump(), status_name=status_name)

    class Config:
        from_attributes = True


class HistoryEntryResponse(BaseModel):
    """Schema for one history entry"""
    id: int
    case_id: int
    status_id: int
    status_name: str
    assigned_to: int
    assigned_to_name: str
    updated_by: int
    updated_by_name: str
    updated_at: datetime
    comment: str
    organisation_id: int

    @classmethod
    def from_record(cls, entry: HistoryEntry):
        return cls(**entry.model_dump())

    class Config:
        from_attributes = True


class CaseSummaryResponse(BaseModel):
    """Dashboard counts for a tenant (organisation_id null for the system view)"""
    organisation_id: Optional[int]
    total: int
    open: int
    overdue: int
    by_status: Dict[str, int]

    @classmethod
    def from_record(cls, summary: CaseSummary):
        return cls(**summary.model_dump())
