# complyark/api/v1/endpoints/users.py
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from loguru import logger

from complyark.api.v1.schemas.users import UserCreate, UserResponse
from complyark.auth.dependencies import get_current_user, get_scope_organisation, require_admin
from complyark.core.records import User
from complyark.db.store import CaseStore, get_store
from complyark.exceptions.auth import PermissionDeniedError
from complyark.exceptions.cases import UnknownOrganisationError
from complyark.utils.validators import EmailValidator

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """Get current user profile"""
    return UserResponse.from_record(current_user)


@router.get("/", response_model=List[UserResponse])
async def list_users(
        store: CaseStore = Depends(get_store),
        organisation_id=Depends(get_scope_organisation)
):
    """Staff of the caller's organisation (everyone for system administrators)"""
    return [UserResponse.from_record(user) for user in await store.list_users(organisation_id)]


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
        user_data: UserCreate,
        store: CaseStore = Depends(get_store),
        current_user: User = Depends(require_admin)
):
    """Create a staff user; organisation admins may only add to their own organisation"""
    if current_user.is_system_admin:
        organisation_id = user_data.organisation_id if user_data.organisation_id is not None else 0
    else:
        if user_data.organisation_id not in (None, current_user.organisation_id):
            raise PermissionDeniedError("Cannot create users in another organisation")
        organisation_id = current_user.organisation_id

    if organisation_id != 0 and await store.get_organisation(organisation_id) is None:
        raise UnknownOrganisationError("Organisation not found")

    email = EmailValidator.normalize_email(user_data.email)
    if not EmailValidator.has_minimal_format(email):
        raise HTTPException(status_code=422, detail="Please enter a valid email address")

    if await store.get_user_by_email(email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )

    user = await store.add_user(User(
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=email,
        phone=user_data.phone,
        role=user_data.role,
        organisation_id=organisation_id,
    ))
    logger.info(f"User created | user_id={user.id} | organisation_id={organisation_id} | by={current_user.id}")
    return UserResponse.from_record(user)
