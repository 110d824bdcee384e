# complyark/core/records.py
"""
Plain records exchanged between the case store, the lifecycle engine and the API.

Both store backends return copies of these models, so callers may mutate a
record freely; nothing changes in the store until it is written back.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CaseKind(str, Enum):
    DATA_PRINCIPAL_REQUEST = "DataPrincipalRequest"
    GRIEVANCE = "Grievance"


class RequestType(str, Enum):
    """Subtype of a data-principal request"""
    ACCESS = "Access"
    CORRECTION = "Correction"
    NOMINATION = "Nomination"
    ERASURE = "Erasure"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Industry(BaseModel):
    id: int = 0
    name: str


class Organisation(BaseModel):
    id: int = 0
    business_name: str
    business_address: str = ""
    industry_id: Optional[int] = None
    contact_person_name: str = ""
    contact_email_address: str = ""
    contact_phone_number: str = ""
    no_of_users: int = 0
    remarks: str = ""


class User(BaseModel):
    id: int = 0
    first_name: str
    last_name: str = ""
    email: str
    phone: str = ""
    role: UserRole = UserRole.USER
    organisation_id: int = Field(0, description="0 marks a system administrator")
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_system_admin(self) -> bool:
        return self.organisation_id == 0 and self.role == UserRole.ADMIN


class RequestStatus(BaseModel):
    """A workflow stage with its service-level agreement in days"""
    id: int
    name: str
    sla_days: int
    is_active: bool = True
    is_terminal: bool = False


class SubjectDetails(BaseModel):
    """Submitter-provided identity of a case"""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Case(BaseModel):
    """One compliance matter: a data-principal request or a grievance"""
    id: int
    kind: CaseKind
    request_type: Optional[RequestType] = None
    first_name: str
    last_name: str
    email: str
    phone: str
    comment: str = ""
    organisation_id: int
    assigned_to: int = 0
    status_id: int
    created_at: datetime
    due_date: datetime
    completed_on_time: bool = False
    closure_comment: str = ""
    closed_at: Optional[datetime] = None


class HistoryEntry(BaseModel):
    """Immutable audit record of one status change or assignment"""
    model_config = ConfigDict(frozen=True)

    id: int = 0
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


class CaseSummary(BaseModel):
    """Per-organisation dashboard counts"""
    organisation_id: Optional[int]
    total: int = 0
    open: int = 0
    overdue: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
