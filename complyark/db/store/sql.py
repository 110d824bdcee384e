# complyark/db/store/sql.py
"""SQLAlchemy-backed case store"""
import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import List, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from complyark.core.case_utils import CaseFactory
from complyark.core.catalogue import SUBMITTED_STATUS_ID
from complyark.core.records import (
    Case, CaseKind, HistoryEntry, Industry, Organisation, RequestStatus,
    RequestType, SubjectDetails, User,
)
from complyark.db import models
from complyark.db.store.base import CaseStore
from complyark.exceptions.cases import InvalidStatusError
from complyark.utils.helpers import as_utc, utc_now

R = TypeVar("R", bound=BaseModel)

_DATETIME_FIELDS = ("created_at", "due_date", "closed_at", "updated_at")

# One lock per event loop
_write_locks = weakref.WeakKeyDictionary()


def _write_lock() -> asyncio.Lock:
    """Write lock shared by every SqlCaseStore on the running event loop"""
    loop = asyncio.get_running_loop()
    lock = _write_locks.get(loop)
    if lock is None:
        lock = _write_locks[loop] = asyncio.Lock()
    return lock


def _to_record(record_cls: Type[R], row) -> R:
    """Convert an ORM row to its record, restoring UTC on naive datetimes"""
    record = record_cls.model_validate(row, from_attributes=True)
    fixes = {
        name: as_utc(getattr(record, name))
        for name in _DATETIME_FIELDS
        if getattr(record, name, None) is not None
    }
    return record.model_copy(update=fixes) if fixes else record


class SqlCaseStore(CaseStore):
    """
    Case store over one AsyncSession.

    Writes are flushed immediately and committed when the outermost
    atomic() block exits; an error inside the block rolls the session back.
    Outermost blocks of all stores in the process run one at a time, and a
    case read inside a block locks its row (FOR UPDATE) on servers that
    support it. Case and history ids come from the database sequence.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._depth = 0

    @asynccontextmanager
    async def atomic(self):
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        async with _write_lock():
            self._depth = 1
            try:
                yield
                await self.session.commit()
            except BaseException:
                await self.session.rollback()
                logger.warning("Database store transaction rolled back")
                raise
            finally:
                self._depth = 0

    async def _next_id(self, model) -> int:
        current = await self.session.scalar(select(func.max(model.id)))
        return (current or 0) + 1

    # Cases

    async def create_case(
            self,
            kind: CaseKind,
            subject: SubjectDetails,
            organisation_id: int,
            request_type: Optional[RequestType] = None,
            comment: str = ""
    ) -> Case:
        async with self.atomic():
            submitted = await self.get_status(SUBMITTED_STATUS_ID)
            if submitted is None:
                raise InvalidStatusError(SUBMITTED_STATUS_ID)

            case = CaseFactory.new_case(
                case_id=0,
                kind=kind,
                subject=subject,
                organisation_id=organisation_id,
                submitted_status=submitted,
                request_type=request_type,
                comment=comment,
            )
            row = models.Case(**case.model_dump(exclude={"id"}))
            self.session.add(row)
            await self.session.flush()
            return case.model_copy(update={"id": row.id})

    async def get_case(self, case_id: int) -> Optional[Case]:
        row = await self.session.get(
            models.Case, case_id, populate_existing=True, with_for_update=bool(self._depth)
        )
        return _to_record(Case, row) if row else None

    async def get_cases_by_organisation(
            self,
            organisation_id: int,
            kind: Optional[CaseKind] = None,
            status_id: Optional[int] = None
    ) -> List[Case]:
        return await self._select_cases(organisation_id=organisation_id, kind=kind, status_id=status_id)

    async def list_cases(self, kind: Optional[CaseKind] = None, status_id: Optional[int] = None) -> List[Case]:
        return await self._select_cases(kind=kind, status_id=status_id)

    async def _select_cases(
            self,
            organisation_id: Optional[int] = None,
            kind: Optional[CaseKind] = None,
            status_id: Optional[int] = None
    ) -> List[Case]:
        query = select(models.Case)

        if organisation_id is not None:
            query = query.filter(models.Case.organisation_id == organisation_id)
        if kind is not None:
            query = query.filter(models.Case.kind == kind)
        if status_id is not None:
            query = query.filter(models.Case.status_id == status_id)

        result = await self.session.execute(query.order_by(models.Case.id))
        return [_to_record(Case, row) for row in result.scalars().all()]

    async def update_case(self, case: Case) -> Optional[Case]:
        async with self.atomic():
            row = await self.session.get(models.Case, case.id)
            if row is None:
                return None
            for field, value in case.model_dump(exclude={"id"}).items():
                setattr(row, field, value)
            await self.session.flush()
            return case.model_copy()

    async def count_cases(self) -> int:
        return await self.session.scalar(select(func.count(models.Case.id))) or 0

    # History

    async def append_history(self, entry: HistoryEntry) -> HistoryEntry:
        async with self.atomic():
            row = models.CaseHistory(**entry.model_dump(exclude={"id"}))
            self.session.add(row)
            await self.session.flush()
            return entry.model_copy(update={"id": row.id})

    async def get_history_for_case(self, case_id: int) -> List[HistoryEntry]:
        result = await self.session.execute(
            select(models.CaseHistory)
            .filter(models.CaseHistory.case_id == case_id)
            .order_by(models.CaseHistory.id)
        )
        return [_to_record(HistoryEntry, row) for row in result.scalars().all()]

    async def count_history(self) -> int:
        return await self.session.scalar(select(func.count(models.CaseHistory.id))) or 0

    # Reference data

    async def add_status(self, status: RequestStatus) -> RequestStatus:
        async with self.atomic():
            self.session.add(models.RequestStatus(**status.model_dump()))
            await self.session.flush()
            return status.model_copy()

    async def get_status(self, status_id: int) -> Optional[RequestStatus]:
        row = await self.session.get(models.RequestStatus, status_id)
        return _to_record(RequestStatus, row) if row else None

    async def list_statuses(self) -> List[RequestStatus]:
        result = await self.session.execute(select(models.RequestStatus).order_by(models.RequestStatus.id))
        return [_to_record(RequestStatus, row) for row in result.scalars().all()]

    async def add_industry(self, industry: Industry) -> Industry:
        async with self.atomic():
            stored = industry.model_copy(update={"id": industry.id or await self._next_id(models.Industry)})
            self.session.add(models.Industry(**stored.model_dump()))
            await self.session.flush()
            return stored

    async def list_industries(self) -> List[Industry]:
        result = await self.session.execute(select(models.Industry).order_by(models.Industry.id))
        return [_to_record(Industry, row) for row in result.scalars().all()]

    async def add_organisation(self, organisation: Organisation) -> Organisation:
        async with self.atomic():
            stored = organisation.model_copy(
                update={"id": organisation.id or await self._next_id(models.Organisation)}
            )
            self.session.add(models.Organisation(**stored.model_dump()))
            await self.session.flush()
            return stored

    async def get_organisation(self, organisation_id: int) -> Optional[Organisation]:
        row = await self.session.get(models.Organisation, organisation_id)
        return _to_record(Organisation, row) if row else None

    async def list_organisations(self) -> List[Organisation]:
        result = await self.session.execute(select(models.Organisation).order_by(models.Organisation.id))
        return [_to_record(Organisation, row) for row in result.scalars().all()]

    async def add_user(self, user: User) -> User:
        async with self.atomic():
            stored = user.model_copy(update={
                "id": user.id or await self._next_id(models.User),
                "created_at": user.created_at or utc_now(),
            })
            self.session.add(models.User(**stored.model_dump()))
            await self.session.flush()
            return stored

    async def get_user(self, user_id: int) -> Optional[User]:
        row = await self.session.get(models.User, user_id)
        return _to_record(User, row) if row else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(models.User).filter(models.User.email == email))
        row = result.scalars().first()
        return _to_record(User, row) if row else None

    async def list_users(self, organisation_id: Optional[int] = None) -> List[User]:
        query = select(models.User)
        if organisation_id is not None:
            query = query.filter(models.User.organisation_id == organisation_id)
        result = await self.session.execute(query.order_by(models.User.id))
        return [_to_record(User, row) for row in result.scalars().all()]
