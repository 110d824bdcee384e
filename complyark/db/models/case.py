# complyark/db/models/case.py
"""Case and case history models"""
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, Index, Enum, DateTime
from sqlalchemy.orm import relationship

from complyark.core.records import CaseKind, RequestType
from complyark.db.models.base import Base, IntegerIdMixin


class Case(Base, IntegerIdMixin):
    """Data-principal request or grievance"""
    __tablename__ = "cases"

    kind = Column(Enum(CaseKind), nullable=False, index=True)
    request_type = Column(Enum(RequestType), nullable=True)

    # Submitter fields
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    comment = Column(Text, nullable=False, default="")

    # Workflow
    assigned_to = Column(Integer, nullable=False, default=0)
    status_id = Column(Integer, ForeignKey("request_statuses.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    completed_on_time = Column(Boolean, nullable=False, default=False)
    closure_comment = Column(Text, nullable=False, default="")
    closed_at = Column(DateTime(timezone=True), nullable=True)

    # Foreign keys
    organisation_id = Column(Integer, ForeignKey("organisations.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    organisation = relationship("Organisation", back_populates="cases")
    history = relationship("CaseHistory", back_populates="case", order_by="CaseHistory.id")

    __table_args__ = (
        Index('idx_case_org_status', 'organisation_id', 'status_id'),
        Index('idx_case_org_kind', 'organisation_id', 'kind'),
        Index('idx_case_assignee', 'assigned_to'),
    )

    def __repr__(self):
        return f"<Case id={self.id} kind={self.kind} status_id={self.status_id}>"


class CaseHistory(Base, IntegerIdMixin):
    """Append-only audit trail of case transitions"""
    __tablename__ = "case_history"

    case_id = Column(Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    status_id = Column(Integer, nullable=False)
    status_name = Column(String(50), nullable=False)
    assigned_to = Column(Integer, nullable=False, default=0)
    assigned_to_name = Column(String(255), nullable=False, default="")
    updated_by = Column(Integer, nullable=False, default=0)
    updated_by_name = Column(String(255), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    comment = Column(Text, nullable=False, default="")
    organisation_id = Column(Integer, nullable=False)

    case = relationship("Case", back_populates="history")

    __table_args__ = (
        Index('idx_history_case', 'case_id', 'id'),
    )

    def __repr__(self):
        return f"<CaseHistory case_id={self.case_id} status_name={self.status_name}>"
