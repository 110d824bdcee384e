# complyark/auth/dependencies.py - Caller identity and tenant scoping
from typing import Optional

from fastapi import Depends, Header
from loguru import logger

from complyark.core.intake import SubmissionIntake
from complyark.core.lifecycle import LifecycleEngine
from complyark.core.records import User, UserRole
from complyark.db.store import CaseStore, get_store
from complyark.exceptions.auth import (
    AuthenticationError, InactiveUserError, PermissionDeniedError, UnknownUserError,
)


async def get_current_user(
        x_user_id: Optional[int] = Header(None, alias="X-User-Id"),
        store: CaseStore = Depends(get_store)
) -> User:
    """
    Resolve the calling staff user from the X-User-Id header.

    Login is handled in front of this service; the header carries the
    identity it established.
    """
    if x_user_id is None:
        raise AuthenticationError("Missing X-User-Id header")

    user = await store.get_user(x_user_id)
    if not user:
        logger.warning(f"User not found | user_id={x_user_id}")
        raise UnknownUserError()

    if not user.is_active:
        logger.warning(f"Inactive user request | user_id={user.id}")
        raise InactiveUserError()

    logger.debug(f"User resolved | user_id={user.id} | organisation_id={user.organisation_id}")
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """System or organisation administrator"""
    if current_user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Administrator role required")
    return current_user


async def require_system_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_system_admin:
        raise PermissionDeniedError("System administrator role required")
    return current_user


def get_scope_organisation(current_user: User = Depends(get_current_user)) -> Optional[int]:
    """Organisation the caller's reads and writes are limited to; None for system administrators"""
    return None if current_user.is_system_admin else current_user.organisation_id


def get_lifecycle_engine(store: CaseStore = Depends(get_store)) -> LifecycleEngine:
    return LifecycleEngine(store)


def get_submission_intake(store: CaseStore = Depends(get_store)) -> SubmissionIntake:
    return SubmissionIntake(store)
