# complyark/api/v1/endpoints/cases.py
"""Case management endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Dict, List, Optional
from loguru import logger

from complyark.api.v1.schemas.cases import (
    AssignmentRequest, CaseResponse, CaseSummaryResponse, HistoryEntryResponse,
    StatusChangeRequest, StatusResponse,
)
from complyark.auth.dependencies import get_current_user, get_lifecycle_engine, get_scope_organisation
from complyark.core.lifecycle import LifecycleEngine
from complyark.core.records import Case, CaseKind, User
from complyark.db.store import CaseStore, get_store

router = APIRouter()
status_router = APIRouter()


async def _status_names(store: CaseStore) -> Dict[int, str]:
    return {s.id: s.name for s in await store.list_statuses()}


async def _case_response(store: CaseStore, case: Case) -> CaseResponse:
    names = await _status_names(store)
    return CaseResponse.from_record(case, status_name=names.get(case.status_id))


@router.get("/", response_model=List[CaseResponse])
async def list_cases(
    kind: Optional[CaseKind] = Query(None, description="Filter by case kind"),
    status_id: Optional[int] = Query(None, description="Filter by status id"),
    store: CaseStore = Depends(get_store),
    organisation_id: Optional[int] = Depends(get_scope_organisation)
):
    """List cases of the caller's organisation (every organisation for system administrators)"""
    if organisation_id is None:
        cases = await store.list_cases(kind=kind, status_id=status_id)
    else:
        cases = await store.get_cases_by_organisation(organisation_id, kind=kind, status_id=status_id)

    names = await _status_names(store)
    return [CaseResponse.from_record(case, status_name=names.get(case.status_id)) for case in cases]


@router.get("/summary", response_model=CaseSummaryResponse)
async def get_case_summary(
    kind: Optional[CaseKind] = Query(None, description="Filter by case kind"),
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
    organisation_id: Optional[int] = Depends(get_scope_organisation)
):
    """Status counts for the dashboard cards"""
    return CaseSummaryResponse.from_record(await engine.summarise(organisation_id, kind=kind))


@router.get("/{case_id}", response_model=CaseResponse)
async def get_case(
    case_id: int,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
    organisation_id: Optional[int] = Depends(get_scope_organisation)
):
    """Get a specific case"""
    case = await engine.get_case(case_id, organisation_id)
    return await _case_response(engine.store, case)


@router.get("/{case_id}/history", response_model=List[HistoryEntryResponse])
async def get_case_history(
    case_id: int,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
    organisation_id: Optional[int] = Depends(get_scope_organisation)
):
    """History of a case, oldest first"""
    history = await engine.get_history(case_id, organisation_id)
    return [HistoryEntryResponse.from_record(entry) for entry in history]


@router.post("/{case_id}/status", response_model=CaseResponse)
async def change_case_status(
    case_id: int,
    change: StatusChangeRequest,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
    current_user: User = Depends(get_current_user),
    organisation_id: Optional[int] = Depends(get_scope_organisation)
):
    """Move a case to another status"""
    try:
        case = await engine.change_status(
            case_id,
            change.status_id,
            actor_id=current_user.id,
            actor_name=current_user.full_name,
            comment=change.comment,
            organisation_id=organisation_id
        )
        return await _case_response(engine.store, case)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to change status of case {case_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update case status"
        )


@router.post("/{case_id}/assign", response_model=CaseResponse)
async def assign_case(
    case_id: int,
    assignment: AssignmentRequest,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
    current_user: User = Depends(get_current_user),
    organisation_id: Optional[int] = Depends(get_scope_organisation)
):
    """Assign a case to a staff user"""
    try:
        case = await engine.assign_case(
            case_id,
            assignment.assignee_id,
            actor_id=current_user.id,
            actor_name=current_user.full_name,
            comment=assignment.comment,
            organisation_id=organisation_id
        )
        return await _case_response(engine.store, case)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to assign case {case_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign case"
        )


@status_router.get("/", response_model=List[StatusResponse])
async def list_statuses(store: CaseStore = Depends(get_store)):
    """Request status catalogue with SLAs"""
    return [StatusResponse.from_record(s) for s in await store.list_statuses()]
