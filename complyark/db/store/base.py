# complyark/db/store/base.py
"""
Case store interface.

The lifecycle engine and submission intake depend only on this interface, so
the in-memory store and the SQLAlchemy store are interchangeable.
"""
from abc import ABC, abstractmethod
from typing import AsyncContextManager, List, Optional

from complyark.core.records import (
    Case, CaseKind, HistoryEntry, Industry, Organisation, RequestStatus,
    RequestType, SubjectDetails, User,
)


class CaseStore(ABC):
    """Authoritative collections of cases, history and reference data"""

    @abstractmethod
    def atomic(self) -> AsyncContextManager[None]:
        """
        Group writes into one all-or-nothing unit.

        Nested blocks join the outermost one; an exception anywhere inside
        discards every write made in the block.
        """

    # Cases

    @abstractmethod
    async def create_case(
            self,
            kind: CaseKind,
            subject: SubjectDetails,
            organisation_id: int,
            request_type: Optional[RequestType] = None,
            comment: str = ""
    ) -> Case:
        """Store a new Submitted, unassigned case with the next id"""

    @abstractmethod
    async def get_case(self, case_id: int) -> Optional[Case]:
        ...

    @abstractmethod
    async def get_cases_by_organisation(
            self,
            organisation_id: int,
            kind: Optional[CaseKind] = None,
            status_id: Optional[int] = None
    ) -> List[Case]:
        """Cases of one organisation in id order"""

    @abstractmethod
    async def list_cases(self, kind: Optional[CaseKind] = None, status_id: Optional[int] = None) -> List[Case]:
        """Unscoped listing for system-level views"""

    @abstractmethod
    async def update_case(self, case: Case) -> Optional[Case]:
        """Replace the stored case with the same id; None when the id is unknown"""

    @abstractmethod
    async def count_cases(self) -> int:
        ...

    # History

    @abstractmethod
    async def append_history(self, entry: HistoryEntry) -> HistoryEntry:
        """Store the entry under the next history id and return the stored copy"""

    @abstractmethod
    async def get_history_for_case(self, case_id: int) -> List[HistoryEntry]:
        ...

    @abstractmethod
    async def count_history(self) -> int:
        ...

    # Reference data

    @abstractmethod
    async def add_status(self, status: RequestStatus) -> RequestStatus:
        ...

    @abstractmethod
    async def get_status(self, status_id: int) -> Optional[RequestStatus]:
        ...

    @abstractmethod
    async def list_statuses(self) -> List[RequestStatus]:
        ...

    @abstractmethod
    async def add_industry(self, industry: Industry) -> Industry:
        ...

    @abstractmethod
    async def list_industries(self) -> List[Industry]:
        ...

    @abstractmethod
    async def add_organisation(self, organisation: Organisation) -> Organisation:
        ...

    @abstractmethod
    async def get_organisation(self, organisation_id: int) -> Optional[Organisation]:
        ...

    @abstractmethod
    async def list_organisations(self) -> List[Organisation]:
        ...

    @abstractmethod
    async def add_user(self, user: User) -> User:
        ...

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def list_users(self, organisation_id: Optional[int] = None) -> List[User]:
        ...

    # Shared helpers

    async def get_terminal_status(self) -> Optional[RequestStatus]:
        for status in await self.list_statuses():
            if status.is_terminal:
                return status
        return None
