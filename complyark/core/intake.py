# complyark/core/intake.py
"""
Public submission of data-principal requests and grievances.

The submitter is unauthenticated; an email challenge in front of the request
page is trusted once passed, so the only checks here are field presence, a
minimal email format and a resolvable organisation.
"""
from typing import Optional, Union

from complyark.core import tracing as logger
from complyark.core.catalogue import UNASSIGNED_NAME
from complyark.core.records import Case, CaseKind, HistoryEntry, RequestType, SubjectDetails
from complyark.core.tenant import MAX_ORGANISATION_ID
from complyark.db.store.base import CaseStore
from complyark.exceptions.cases import (
    InvalidEmailError, InvalidStatusError, UnknownOrganisationError, ValidationError,
)
from complyark.utils.helpers import mask_email
from complyark.utils.validators import EmailValidator, RequiredFieldValidator

CREATION_COMMENTS = {
    CaseKind.DATA_PRINCIPAL_REQUEST: "Request created by data principal",
    CaseKind.GRIEVANCE: "Grievance created by user",
}


class SubmissionIntake:
    """Validates submitter input and opens a Submitted case"""

    def __init__(self, store: CaseStore):
        self.store = store

    async def submit(
            self,
            kind: CaseKind,
            subject: SubjectDetails,
            organisation_id: int,
            request_type: Optional[Union[RequestType, str]] = None,
            comment: str = "",
    ) -> Case:
        """
        Create a case on behalf of an external submitter.

        Args:
            kind: Data-principal request or grievance
            subject: Submitter name, email and phone
            organisation_id: Tenant the case is lodged with
            request_type: DPR subtype, defaults to Access; ignored for grievances
            comment: Request text

        Returns:
            The stored case, status Submitted and unassigned

        Raises:
            ValidationError: a required field is blank or the subtype is unknown
            InvalidEmailError: email has no @
            UnknownOrganisationError: organisation does not exist
        """
        missing = RequiredFieldValidator.missing_fields({
            "first_name": subject.first_name,
            "last_name": subject.last_name,
            "email": subject.email,
            "phone": subject.phone,
            "comment": comment,
        })
        if missing:
            raise ValidationError(fields=missing)

        if not EmailValidator.has_minimal_format(subject.email):
            raise InvalidEmailError()

        resolved_type = self._resolve_request_type(kind, request_type)

        if organisation_id > MAX_ORGANISATION_ID or await self.store.get_organisation(organisation_id) is None:
            raise UnknownOrganisationError()

        subject = SubjectDetails(
            first_name=subject.first_name.strip(),
            last_name=subject.last_name.strip(),
            email=subject.email.strip(),
            phone=subject.phone.strip(),
        )

        async with self.store.atomic():
            case = await self.store.create_case(
                kind, subject, organisation_id, request_type=resolved_type, comment=comment.strip()
            )
            status = await self.store.get_status(case.status_id)
            if status is None:
                raise InvalidStatusError(case.status_id)

            await self.store.append_history(HistoryEntry(
                case_id=case.id,
                status_id=status.id,
                status_name=status.name,
                assigned_to=0,
                assigned_to_name=UNASSIGNED_NAME,
                updated_by=0,
                updated_by_name=f"{subject.first_name} {subject.last_name} (Requester)",
                updated_at=case.created_at,
                comment=CREATION_COMMENTS[kind],
                organisation_id=organisation_id,
            ))

        logger.info(
            f"{kind.value} {case.id} submitted",
            case_id=case.id,
            organisation_id=organisation_id,
            email=mask_email(subject.email)
        )
        return case

    @staticmethod
    def _resolve_request_type(
            kind: CaseKind, request_type: Optional[Union[RequestType, str]]
    ) -> Optional[RequestType]:
        if kind != CaseKind.DATA_PRINCIPAL_REQUEST:
            return None
        if request_type is None or request_type == "":
            return RequestType.ACCESS
        try:
            return RequestType(request_type)
        except ValueError:
            raise ValidationError("Unknown request type", fields=["request_type"])
