# complyark/db/store/memory.py
"""Process-local case store"""
import asyncio
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from loguru import logger

from complyark.core.case_utils import CaseFactory
from complyark.core.catalogue import SUBMITTED_STATUS_ID, industry_catalogue, status_catalogue
from complyark.core.records import (
    Case, CaseKind, HistoryEntry, Industry, Organisation, RequestStatus,
    RequestType, SubjectDetails, User,
)
from complyark.db.store.base import CaseStore
from complyark.exceptions.cases import InvalidStatusError
from complyark.utils.helpers import utc_now


def _next_id(keys) -> int:
    return max(keys) + 1 if keys else 1


class InMemoryCaseStore(CaseStore):
    """
    Case store held in process memory.

    One global asyncio lock serialises every write group, which keeps a
    single writer per case when several requests run on the event loop.
    """

    def __init__(self, seed_catalogue: bool = True):
        self._organisations: Dict[int, Organisation] = {}
        self._industries: Dict[int, Industry] = {}
        self._users: Dict[int, User] = {}
        self._statuses: Dict[int, RequestStatus] = {}
        self._cases: Dict[int, Case] = {}
        self._history: List[HistoryEntry] = []

        self._lock = asyncio.Lock()
        self._owner: Optional[asyncio.Task] = None

        if seed_catalogue:
            for status in status_catalogue():
                self._statuses[status.id] = status
            for industry in industry_catalogue():
                self._industries[industry.id] = industry

    @asynccontextmanager
    async def atomic(self):
        # Re-entrant for the task that already holds the lock
        if self._owner is not None and self._owner is asyncio.current_task():
            yield
            return

        async with self._lock:
            self._owner = asyncio.current_task()
            snapshot = self._snapshot()
            try:
                yield
            except BaseException:
                self._restore(snapshot)
                logger.warning("In-memory store write group rolled back")
                raise
            finally:
                self._owner = None

    def _snapshot(self) -> dict:
        return {
            "organisations": dict(self._organisations),
            "industries": dict(self._industries),
            "users": dict(self._users),
            "statuses": dict(self._statuses),
            "cases": dict(self._cases),
            "history": list(self._history),
        }

    def _restore(self, snapshot: dict) -> None:
        self._organisations = snapshot["organisations"]
        self._industries = snapshot["industries"]
        self._users = snapshot["users"]
        self._statuses = snapshot["statuses"]
        self._cases = snapshot["cases"]
        self._history = snapshot["history"]

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
            submitted = self._statuses.get(SUBMITTED_STATUS_ID)
            if submitted is None:
                raise InvalidStatusError(SUBMITTED_STATUS_ID)

            case = CaseFactory.new_case(
                case_id=_next_id(self._cases.keys()),
                kind=kind,
                subject=subject,
                organisation_id=organisation_id,
                submitted_status=submitted,
                request_type=request_type,
                comment=comment,
            )
            self._cases[case.id] = case
            return case.model_copy()

    async def get_case(self, case_id: int) -> Optional[Case]:
        case = self._cases.get(case_id)
        return case.model_copy() if case else None

    async def get_cases_by_organisation(
            self,
            organisation_id: int,
            kind: Optional[CaseKind] = None,
            status_id: Optional[int] = None
    ) -> List[Case]:
        return [
            case for case in await self.list_cases(kind=kind, status_id=status_id)
            if case.organisation_id == organisation_id
        ]

    async def list_cases(self, kind: Optional[CaseKind] = None, status_id: Optional[int] = None) -> List[Case]:
        cases = sorted(self._cases.values(), key=lambda c: c.id)
        if kind is not None:
            cases = [c for c in cases if c.kind == kind]
        if status_id is not None:
            cases = [c for c in cases if c.status_id == status_id]
        return [c.model_copy() for c in cases]

    async def update_case(self, case: Case) -> Optional[Case]:
        async with self.atomic():
            if case.id not in self._cases:
                return None
            self._cases[case.id] = case.model_copy()
            return case.model_copy()

    async def count_cases(self) -> int:
        return len(self._cases)

    # History

    async def append_history(self, entry: HistoryEntry) -> HistoryEntry:
        async with self.atomic():
            stored = entry.model_copy(update={"id": _next_id([h.id for h in self._history])})
            self._history.append(stored)
            return stored

    async def get_history_for_case(self, case_id: int) -> List[HistoryEntry]:
        return [h for h in self._history if h.case_id == case_id]

    async def count_history(self) -> int:
        return len(self._history)

    # Reference data

    async def add_status(self, status: RequestStatus) -> RequestStatus:
        async with self.atomic():
            self._statuses[status.id] = status.model_copy()
            return status.model_copy()

    async def get_status(self, status_id: int) -> Optional[RequestStatus]:
        status = self._statuses.get(status_id)
        return status.model_copy() if status else None

    async def list_statuses(self) -> List[RequestStatus]:
        return [self._statuses[k].model_copy() for k in sorted(self._statuses)]

    async def add_industry(self, industry: Industry) -> Industry:
        async with self.atomic():
            industry_id = industry.id or _next_id(self._industries.keys())
            stored = industry.model_copy(update={"id": industry_id})
            self._industries[industry_id] = stored
            return stored.model_copy()

    async def list_industries(self) -> List[Industry]:
        return [self._industries[k].model_copy() for k in sorted(self._industries)]

    async def add_organisation(self, organisation: Organisation) -> Organisation:
        async with self.atomic():
            organisation_id = organisation.id or _next_id(self._organisations.keys())
            stored = organisation.model_copy(update={"id": organisation_id})
            self._organisations[organisation_id] = stored
            return stored.model_copy()

    async def get_organisation(self, organisation_id: int) -> Optional[Organisation]:
        organisation = self._organisations.get(organisation_id)
        return organisation.model_copy() if organisation else None

    async def list_organisations(self) -> List[Organisation]:
        return [self._organisations[k].model_copy() for k in sorted(self._organisations)]

    async def add_user(self, user: User) -> User:
        async with self.atomic():
            user_id = user.id or _next_id(self._users.keys())
            stored = user.model_copy(update={"id": user_id, "created_at": user.created_at or utc_now()})
            self._users[user_id] = stored
            return stored.model_copy()

    async def get_user(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user.model_copy()
        return None

    async def list_users(self, organisation_id: Optional[int] = None) -> List[User]:
        users = [self._users[k] for k in sorted(self._users)]
        if organisation_id is not None:
            users = [u for u in users if u.organisation_id == organisation_id]
        return [u.model_copy() for u in users]
