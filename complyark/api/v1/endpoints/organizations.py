# complyark/api/v1/endpoints/organizations.py
"""
Organisation management endpoints with multi-tenant scoping
"""
from fastapi import APIRouter, Depends, status
from typing import List

from complyark.api.v1.schemas.organizations import (
    IndustryResponse,
    OrganisationCreate,
    OrganisationResponse,
    RequestLinkResponse,
)
from complyark.auth.dependencies import get_current_user, require_system_admin
from complyark.core import tracing
from complyark.core.records import Organisation, User
from complyark.core.tenant import build_request_link, encode_organisation_token
from complyark.db.store import CaseStore, get_store
from complyark.exceptions.auth import PermissionDeniedError
from complyark.exceptions.cases import UnknownOrganisationError

router = APIRouter()


async def _load_visible_organisation(store: CaseStore, organisation_id: int, user: User) -> Organisation:
    """Organisation lookup limited to the caller's own tenant unless system admin"""
    if not user.is_system_admin and user.organisation_id != organisation_id:
        raise PermissionDeniedError("Access denied to this organisation")

    organisation = await store.get_organisation(organisation_id)
    if organisation is None:
        raise UnknownOrganisationError("Organisation not found")
    return organisation


async def _industry_names(store: CaseStore) -> dict:
    return {industry.id: industry.name for industry in await store.list_industries()}


@router.get("/", response_model=List[OrganisationResponse])
async def list_organisations(
        store: CaseStore = Depends(get_store),
        current_user: User = Depends(require_system_admin)
):
    """List every organisation (system administrators only)"""
    industries = await _industry_names(store)
    items = []
    for organisation in await store.list_organisations():
        case_count = len(await store.get_cases_by_organisation(organisation.id))
        items.append(OrganisationResponse.from_record(
            organisation,
            industry_name=industries.get(organisation.industry_id),
            case_count=case_count
        ))
    return items


@router.post("/", response_model=OrganisationResponse, status_code=status.HTTP_201_CREATED)
async def create_organisation(
        organisation_data: OrganisationCreate,
        store: CaseStore = Depends(get_store),
        current_user: User = Depends(require_system_admin)
):
    """Register a new tenant"""
    industries = await _industry_names(store)
    if organisation_data.industry_id is not None and organisation_data.industry_id not in industries:
        raise UnknownOrganisationError("Industry not found")

    organisation = await store.add_organisation(Organisation(**organisation_data.model_dump()))

    tracing.info(
        "Organisation created",
        organisation_id=organisation.id,
        created_by=current_user.id
    )
    return OrganisationResponse.from_record(
        organisation,
        industry_name=industries.get(organisation.industry_id),
        case_count=0
    )


@router.get("/industries", response_model=List[IndustryResponse])
async def list_industries(
        store: CaseStore = Depends(get_store),
        current_user: User = Depends(get_current_user)
):
    return [IndustryResponse.from_record(industry) for industry in await store.list_industries()]


@router.get("/{organisation_id}", response_model=OrganisationResponse)
async def get_organisation(
        organisation_id: int,
        store: CaseStore = Depends(get_store),
        current_user: User = Depends(get_current_user)
):
    """Get organisation details"""
    organisation = await _load_visible_organisation(store, organisation_id, current_user)
    industries = await _industry_names(store)
    return OrganisationResponse.from_record(
        organisation,
        industry_name=industries.get(organisation.industry_id),
        case_count=len(await store.get_cases_by_organisation(organisation.id))
    )


@router.get("/{organisation_id}/request-link", response_model=RequestLinkResponse)
async def get_request_link(
        organisation_id: int,
        store: CaseStore = Depends(get_store),
        current_user: User = Depends(get_current_user)
):
    """Public request-page link to share with data principals"""
    organisation = await _load_visible_organisation(store, organisation_id, current_user)
    return RequestLinkResponse(
        organisation_id=organisation.id,
        token=encode_organisation_token(organisation.id),
        url=build_request_link(organisation.id)
    )
