# complyark/api/v1/endpoints/public.py
"""Public request-page endpoints: no staff identity, organisation resolved from the link token"""
from fastapi import APIRouter, Depends, Request, status

from complyark.api.v1.schemas.cases import CaseResponse, DataRequestSubmission, GrievanceSubmission
from complyark.api.v1.schemas.organizations import PublicOrganisationResponse
from complyark.auth.dependencies import get_submission_intake
from complyark.core.config import settings
from complyark.core.intake import SubmissionIntake
from complyark.core.records import CaseKind, SubjectDetails
from complyark.core.tenant import decode_organisation_token
from complyark.db.store import CaseStore, get_store
from complyark.exceptions.cases import UnknownOrganisationError
from complyark.middleware.rate_limiting import limiter

router = APIRouter()


async def _case_response(intake: SubmissionIntake, case) -> CaseResponse:
    status = await intake.store.get_status(case.status_id)
    return CaseResponse.from_record(case, status_name=status.name if status else None)


def _subject(payload) -> SubjectDetails:
    return SubjectDetails(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        phone=payload.phone,
    )


@router.get("/{token}", response_model=PublicOrganisationResponse)
async def get_request_page_organisation(token: str, store: CaseStore = Depends(get_store)):
    """Resolve a request-page link to the organisation name shown on the page"""
    organisation = await store.get_organisation(decode_organisation_token(token))
    if organisation is None:
        raise UnknownOrganisationError()
    return PublicOrganisationResponse(id=organisation.id, business_name=organisation.business_name)


@router.post("/{token}/requests", response_model=CaseResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.INTAKE_RATE_LIMIT)
async def submit_data_request(
        request: Request,
        token: str,
        payload: DataRequestSubmission,
        intake: SubmissionIntake = Depends(get_submission_intake)
):
    """Submit a data-principal request"""
    case = await intake.submit(
        CaseKind.DATA_PRINCIPAL_REQUEST,
        _subject(payload),
        decode_organisation_token(token),
        request_type=payload.request_type,
        comment=payload.comments,
    )
    return await _case_response(intake, case)


@router.post("/{token}/grievances", response_model=CaseResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.INTAKE_RATE_LIMIT)
async def submit_grievance(
        request: Request,
        token: str,
        payload: GrievanceSubmission,
        intake: SubmissionIntake = Depends(get_submission_intake)
):
    """Submit a grievance"""
    case = await intake.submit(
        CaseKind.GRIEVANCE,
        _subject(payload),
        decode_organisation_token(token),
        comment=payload.comments,
    )
    return await _case_response(intake, case)
