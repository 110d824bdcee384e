# complyark/core/case_utils.py
"""
Utilities for case management: SLA due dates and new case construction
"""
from datetime import datetime, timedelta
from typing import Optional

from complyark.core.catalogue import DEFAULT_SLA_DAYS
from complyark.core.records import Case, CaseKind, RequestStatus, RequestType, SubjectDetails
from complyark.utils.helpers import utc_now


class SlaCalculator:
    """Due-date arithmetic for status SLAs"""

    @staticmethod
    def compute_due_date(created_at: datetime, status: Optional[RequestStatus] = None) -> datetime:
        """
        Compute the due date of a case.

        Args:
            created_at: Case creation time
            status: Status whose SLA applies (defaults to a 7 day SLA)

        Returns:
            created_at shifted by the SLA in whole days
        """
        sla_days = status.sla_days if status is not None else DEFAULT_SLA_DAYS
        return created_at + timedelta(days=sla_days)

    @staticmethod
    def is_completed_on_time(due_date: datetime, closed_at: datetime) -> bool:
        return closed_at <= due_date

    @staticmethod
    def is_overdue(case: Case, terminal: bool, now: Optional[datetime] = None) -> bool:
        """A case is overdue while it is still open past its due date"""
        if terminal:
            return False
        return (now or utc_now()) > case.due_date


class CaseFactory:
    """Build the record of a freshly submitted case"""

    @staticmethod
    def new_case(
            case_id: int,
            kind: CaseKind,
            subject: SubjectDetails,
            organisation_id: int,
            submitted_status: RequestStatus,
            request_type: Optional[RequestType] = None,
            comment: str = "",
            now: Optional[datetime] = None
    ) -> Case:
        created_at = now or utc_now()
        return Case(
            id=case_id,
            kind=kind,
            request_type=request_type if kind == CaseKind.DATA_PRINCIPAL_REQUEST else None,
            first_name=subject.first_name,
            last_name=subject.last_name,
            email=subject.email,
            phone=subject.phone,
            comment=comment,
            organisation_id=organisation_id,
            assigned_to=0,
            status_id=submitted_status.id,
            created_at=created_at,
            due_date=SlaCalculator.compute_due_date(created_at, submitted_status),
            completed_on_time=False,
            closure_comment="",
            closed_at=None,
        )
