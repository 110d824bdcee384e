"""
Lifecycle engine tests: status transitions, closure, assignment, summaries
"""
import asyncio
from datetime import timedelta

import pytest

from complyark.core.catalogue import CLOSED_STATUS_ID, SUBMITTED_STATUS_ID
from complyark.core.intake import SubmissionIntake
from complyark.core.lifecycle import LifecycleEngine
from complyark.core.records import CaseKind, RequestStatus, SubjectDetails
from complyark.exceptions.cases import CaseNotFoundError, InvalidStatusError, ValidationError
from complyark.utils.helpers import utc_now
from tests.conftest import ACME_ADMIN_ID, ACME_ID, ACME_USER_ID, GLOBEX_ADMIN_ID, GLOBEX_ID, INACTIVE_USER_ID

IN_PROGRESS = 2
AWAITING_INFO = 3
ESCALATED = 5

SUBJECT = SubjectDetails(first_name="Jo", last_name="Lee", email="jo@x.com", phone="555")


async def submit(store, organisation_id=ACME_ID, kind=CaseKind.DATA_PRINCIPAL_REQUEST):
    return await SubmissionIntake(store).submit(kind, SUBJECT, organisation_id, comment="need my data")


@pytest.fixture
def engine(store):
    return LifecycleEngine(store, require_closure_comment=False)


class TestStatusChanges:

    async def test_history_grows_by_one_per_change(self, store, engine):
        case = await submit(store)

        for status_id in (IN_PROGRESS, AWAITING_INFO, ESCALATED, IN_PROGRESS):
            await engine.change_status(case.id, status_id, ACME_ADMIN_ID, "Alice Admin")

        history = await engine.get_history(case.id)
        assert len(history) == 1 + 4
        assert [h.status_id for h in history] == [SUBMITTED_STATUS_ID, IN_PROGRESS, AWAITING_INFO, ESCALATED, IN_PROGRESS]

    async def test_same_status_still_appends_history(self, store, engine):
        case = await submit(store)

        updated = await engine.change_status(case.id, SUBMITTED_STATUS_ID, ACME_ADMIN_ID, "Alice Admin")

        assert updated.status_id == SUBMITTED_STATUS_ID
        assert len(await engine.get_history(case.id)) == 2

    async def test_history_records_actor_and_default_comment(self, store, engine):
        case = await submit(store)
        await engine.change_status(case.id, IN_PROGRESS, ACME_ADMIN_ID, "Alice Admin")

        entry = (await engine.get_history(case.id))[-1]
        assert entry.updated_by == ACME_ADMIN_ID
        assert entry.updated_by_name == "Alice Admin"
        assert entry.status_name == "InProgress"
        assert entry.assigned_to_name == "Organization Admin"
        assert entry.comment == "Status changed to InProgress"

    async def test_any_status_may_follow_any_other(self, store, engine):
        case = await submit(store)
        await engine.change_status(case.id, ESCALATED, ACME_ADMIN_ID, "Alice Admin")
        updated = await engine.change_status(case.id, SUBMITTED_STATUS_ID, ACME_ADMIN_ID, "Alice Admin")
        assert updated.status_id == SUBMITTED_STATUS_ID

    async def test_due_date_is_fixed_at_creation(self, store, engine):
        case = await submit(store)
        updated = await engine.change_status(case.id, ESCALATED, ACME_ADMIN_ID, "Alice Admin")
        assert updated.due_date == case.due_date

    async def test_unknown_status_rejected_without_side_effects(self, store, engine):
        case = await submit(store)

        with pytest.raises(InvalidStatusError):
            await engine.change_status(case.id, 99, ACME_ADMIN_ID, "Alice Admin")

        assert (await store.get_case(case.id)).status_id == SUBMITTED_STATUS_ID
        assert await store.count_history() == 1

    async def test_inactive_status_rejected(self, store, engine):
        await store.add_status(RequestStatus(id=7, name="Archived", sla_days=0, is_active=False))
        case = await submit(store)

        with pytest.raises(InvalidStatusError):
            await engine.change_status(case.id, 7, ACME_ADMIN_ID, "Alice Admin")

    async def test_unknown_case_not_found(self, engine):
        with pytest.raises(CaseNotFoundError):
            await engine.change_status(404, IN_PROGRESS, ACME_ADMIN_ID, "Alice Admin")

    async def test_other_tenant_case_reported_missing(self, store, engine):
        case = await submit(store, organisation_id=GLOBEX_ID)

        with pytest.raises(CaseNotFoundError):
            await engine.change_status(case.id, IN_PROGRESS, ACME_ADMIN_ID, "Alice Admin", organisation_id=ACME_ID)

        assert (await store.get_case(case.id)).status_id == SUBMITTED_STATUS_ID


class TestClosure:

    async def test_closing_sets_closure_fields(self, store, engine):
        case = await submit(store)

        closed = await engine.change_status(
            case.id, CLOSED_STATUS_ID, ACME_ADMIN_ID, "Alice Admin", comment="Data sent by email"
        )

        assert closed.closed_at is not None
        assert closed.closure_comment == "Data sent by email"
        assert closed.completed_on_time is True

        entry = (await engine.get_history(case.id))[-1]
        assert entry.status_name == "Closed"
        assert entry.comment == "Data sent by email"

    async def test_closing_after_due_date_is_late(self, store, engine):
        case = await submit(store)
        await store.update_case(case.model_copy(update={"due_date": utc_now() - timedelta(days=1)}))

        closed = await engine.change_status(case.id, CLOSED_STATUS_ID, ACME_ADMIN_ID, "Alice Admin")
        assert closed.completed_on_time is False

    async def test_reopening_clears_closure(self, store, engine):
        case = await submit(store)
        await engine.change_status(case.id, CLOSED_STATUS_ID, ACME_ADMIN_ID, "Alice Admin", comment="done")

        reopened = await engine.change_status(case.id, IN_PROGRESS, ACME_ADMIN_ID, "Alice Admin")

        assert reopened.closed_at is None
        assert reopened.closure_comment == ""
        assert reopened.completed_on_time is False

    async def test_closure_comment_required_when_configured(self, store):
        engine = LifecycleEngine(store, require_closure_comment=True)
        case = await submit(store)

        with pytest.raises(ValidationError) as exc_info:
            await engine.change_status(case.id, CLOSED_STATUS_ID, ACME_ADMIN_ID, "Alice Admin", comment="  ")

        assert exc_info.value.fields == ["comment"]
        assert (await store.get_case(case.id)).closed_at is None


class TestAssignment:

    async def test_assign_keeps_status_and_records_history(self, store, engine):
        case = await submit(store)
        await engine.change_status(case.id, IN_PROGRESS, ACME_ADMIN_ID, "Alice Admin")

        assigned = await engine.assign_case(case.id, ACME_USER_ID, ACME_ADMIN_ID, "Alice Admin")

        assert assigned.assigned_to == ACME_USER_ID
        assert assigned.status_id == IN_PROGRESS

        entry = (await engine.get_history(case.id))[-1]
        assert entry.assigned_to == ACME_USER_ID
        assert entry.assigned_to_name == "Bob Staff"
        assert entry.status_id == IN_PROGRESS
        assert entry.comment == "Assigned to Bob Staff"

    async def test_unassign_returns_to_triage(self, store, engine):
        case = await submit(store)
        await engine.assign_case(case.id, ACME_USER_ID, ACME_ADMIN_ID, "Alice Admin")

        unassigned = await engine.assign_case(case.id, 0, ACME_ADMIN_ID, "Alice Admin")

        assert unassigned.assigned_to == 0
        assert (await engine.get_history(case.id))[-1].assigned_to_name == "Organization Admin"

    async def test_assignee_from_other_organisation_rejected(self, store, engine):
        case = await submit(store)

        with pytest.raises(ValidationError):
            await engine.assign_case(case.id, GLOBEX_ADMIN_ID, ACME_ADMIN_ID, "Alice Admin")

    async def test_inactive_assignee_rejected(self, store, engine):
        case = await submit(store)

        with pytest.raises(ValidationError):
            await engine.assign_case(case.id, INACTIVE_USER_ID, ACME_ADMIN_ID, "Alice Admin")

    async def test_unknown_assignee_not_found(self, store, engine):
        case = await submit(store)

        with pytest.raises(CaseNotFoundError):
            await engine.assign_case(case.id, 999, ACME_ADMIN_ID, "Alice Admin")

    async def test_status_change_while_assignment_waits(self, memory_store):
        engine = LifecycleEngine(memory_store, require_closure_comment=False)
        case = await submit(memory_store)

        async with memory_store.atomic():
            assignment = asyncio.create_task(
                engine.assign_case(case.id, ACME_USER_ID, ACME_ADMIN_ID, "Alice Admin")
            )
            for _ in range(5):
                await asyncio.sleep(0)
            await engine.change_status(case.id, IN_PROGRESS, ACME_ADMIN_ID, "Alice Admin")

        assigned = await assignment
        last = (await engine.get_history(case.id))[-1]

        assert assigned.status_id == IN_PROGRESS
        assert last.status_id == IN_PROGRESS
        assert last.assigned_to == ACME_USER_ID


class TestSummary:

    async def test_counts_per_status_open_and_overdue(self, store, engine):
        first = await submit(store)
        second = await submit(store, kind=CaseKind.GRIEVANCE)
        await submit(store, organisation_id=GLOBEX_ID)

        await engine.change_status(first.id, CLOSED_STATUS_ID, ACME_ADMIN_ID, "Alice Admin")
        await store.update_case(second.model_copy(update={"due_date": utc_now() - timedelta(hours=1)}))

        summary = await engine.summarise(ACME_ID)

        assert summary.total == 2
        assert summary.open == 1
        assert summary.overdue == 1
        assert summary.by_status["Closed"] == 1
        assert summary.by_status["Submitted"] == 1
        assert summary.by_status["Escalated"] == 0

    async def test_kind_filter_and_system_view(self, store, engine):
        await submit(store)
        await submit(store, kind=CaseKind.GRIEVANCE)
        await submit(store, organisation_id=GLOBEX_ID, kind=CaseKind.GRIEVANCE)

        grievances = await engine.summarise(ACME_ID, kind=CaseKind.GRIEVANCE)
        assert grievances.total == 1

        everything = await engine.summarise()
        assert everything.organisation_id is None
        assert everything.total == 3
