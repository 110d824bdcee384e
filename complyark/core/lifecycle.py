# complyark/core/lifecycle.py
"""
Request lifecycle engine.

Owns every mutation of a case after submission: status transitions,
assignment and the history trail that records them. Any status may follow
any other; only the terminal status gets special handling (closure fields).
"""
from datetime import datetime
from typing import List, Optional

from complyark.core import tracing as logger
from complyark.core.case_utils import SlaCalculator
from complyark.core.catalogue import UNASSIGNED_NAME
from complyark.core.config import settings
from complyark.core.records import Case, CaseKind, CaseSummary, HistoryEntry, RequestStatus
from complyark.db.store.base import CaseStore
from complyark.exceptions.cases import CaseNotFoundError, InvalidStatusError, ValidationError
from complyark.utils.helpers import utc_now


class LifecycleEngine:
    """Status transitions and history for cases held in a CaseStore"""

    def __init__(self, store: CaseStore, require_closure_comment: Optional[bool] = None):
        self.store = store
        if require_closure_comment is None:
            require_closure_comment = settings.REQUIRE_CLOSURE_COMMENT
        self.require_closure_comment = require_closure_comment

    async def get_case(self, case_id: int, organisation_id: Optional[int] = None) -> Case:
        """
        Load a case, optionally scoped to a tenant.

        A case of another organisation is reported as missing so tenants
        cannot probe each other's ids.
        """
        case = await self.store.get_case(case_id)
        if case is None or (organisation_id is not None and case.organisation_id != organisation_id):
            raise CaseNotFoundError(f"Case {case_id} not found")
        return case

    async def get_history(self, case_id: int, organisation_id: Optional[int] = None) -> List[HistoryEntry]:
        await self.get_case(case_id, organisation_id)
        return await self.store.get_history_for_case(case_id)

    async def assigned_to_name(self, user_id: int) -> str:
        if user_id == 0:
            return UNASSIGNED_NAME
        user = await self.store.get_user(user_id)
        return user.full_name if user else f"User {user_id}"

    async def change_status(
            self,
            case_id: int,
            new_status_id: int,
            actor_id: int,
            actor_name: str,
            comment: Optional[str] = None,
            organisation_id: Optional[int] = None,
    ) -> Case:
        """
        Move a case to a new status and record the change.

        Setting the current status again is not a no-op: it still appends
        a history entry.

        Raises:
            CaseNotFoundError: case is unknown or outside organisation_id
            InvalidStatusError: status is unknown or inactive
            ValidationError: closing without a comment while comments are required
        """
        case = await self.get_case(case_id, organisation_id)

        status = await self.store.get_status(new_status_id)
        if status is None or not status.is_active:
            raise InvalidStatusError(new_status_id)

        comment = (comment or "").strip()
        if status.is_terminal and not comment and self.require_closure_comment:
            raise ValidationError("A closure comment is required", fields=["comment"])

        now = utc_now()

        async with self.store.atomic():
            # Re-read under the write lock so concurrent changes are not lost
            current = await self.store.get_case(case.id) or case
            stored = await self.store.update_case(self._apply_status(current, status, comment, now))
            if stored is None:
                raise RuntimeError(f"Case {case_id} vanished during status change")

            await self.store.append_history(HistoryEntry(
                case_id=stored.id,
                status_id=status.id,
                status_name=status.name,
                assigned_to=stored.assigned_to,
                assigned_to_name=await self.assigned_to_name(stored.assigned_to),
                updated_by=actor_id,
                updated_by_name=actor_name,
                updated_at=now,
                comment=comment or f"Status changed to {status.name}",
                organisation_id=stored.organisation_id,
            ))

        logger.info(
            f"Case {case_id} status changed to {status.name}",
            case_id=case_id,
            status_id=status.id,
            actor_id=actor_id
        )
        return stored

    def _apply_status(self, case: Case, status: RequestStatus, comment: str, now: datetime) -> Case:
        updates = {"status_id": status.id}

        if status.is_terminal:
            updates.update(
                closed_at=now,
                closure_comment=comment,
                completed_on_time=SlaCalculator.is_completed_on_time(case.due_date, now),
            )
        elif case.closed_at is not None:
            # Reopened
            updates.update(closed_at=None, closure_comment="", completed_on_time=False)

        return case.model_copy(update=updates)

    async def assign_case(
            self,
            case_id: int,
            assignee_id: int,
            actor_id: int,
            actor_name: str,
            comment: Optional[str] = None,
            organisation_id: Optional[int] = None,
    ) -> Case:
        """
        Assign a case to a staff user of its organisation (0 returns it to triage).

        The status is unchanged; a history entry records the new assignee.
        """
        case = await self.get_case(case_id, organisation_id)

        if assignee_id != 0:
            assignee = await self.store.get_user(assignee_id)
            if assignee is None:
                raise CaseNotFoundError(f"User {assignee_id} not found")
            if assignee.organisation_id != case.organisation_id or not assignee.is_active:
                raise ValidationError(
                    "Assignee must be an active user of the case's organisation",
                    fields=["assignee_id"]
                )

        assignee_name = await self.assigned_to_name(assignee_id)
        now = utc_now()

        async with self.store.atomic():
            current = await self.store.get_case(case.id) or case
            # The history entry names the status the case holds at write time
            status = await self.store.get_status(current.status_id)
            if status is None:
                raise InvalidStatusError(current.status_id)

            stored = await self.store.update_case(current.model_copy(update={"assigned_to": assignee_id}))
            if stored is None:
                raise RuntimeError(f"Case {case_id} vanished during assignment")

            await self.store.append_history(HistoryEntry(
                case_id=stored.id,
                status_id=status.id,
                status_name=status.name,
                assigned_to=assignee_id,
                assigned_to_name=assignee_name,
                updated_by=actor_id,
                updated_by_name=actor_name,
                updated_at=now,
                comment=(comment or "").strip() or f"Assigned to {assignee_name}",
                organisation_id=stored.organisation_id,
            ))

        logger.info(f"Case {case_id} assigned to {assignee_id}", case_id=case_id, actor_id=actor_id)
        return stored

    async def summarise(self, organisation_id: Optional[int] = None, kind: Optional[CaseKind] = None) -> CaseSummary:
        """Dashboard counts: per status, open and overdue"""
        if organisation_id is None:
            cases = await self.store.list_cases(kind=kind)
        else:
            cases = await self.store.get_cases_by_organisation(organisation_id, kind=kind)

        statuses = {status.id: status for status in await self.store.list_statuses()}
        summary = CaseSummary(
            organisation_id=organisation_id,
            total=len(cases),
            by_status={status.name: 0 for status in statuses.values()},
        )

        now = utc_now()
        for case in cases:
            status = statuses.get(case.status_id)
            terminal = status is not None and status.is_terminal
            if status is not None:
                summary.by_status[status.name] += 1
            if not terminal:
                summary.open += 1
            if SlaCalculator.is_overdue(case, terminal, now):
                summary.overdue += 1

        return summary
