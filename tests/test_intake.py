"""
Public submission tests
"""
import pytest

from complyark.core.catalogue import SUBMITTED_STATUS_ID
from complyark.core.intake import SubmissionIntake
from complyark.core.records import CaseKind, RequestType, SubjectDetails
from complyark.exceptions.cases import InvalidEmailError, UnknownOrganisationError, ValidationError
from tests.conftest import ACME_ID


def subject(**overrides):
    values = {"first_name": "Jo", "last_name": "Lee", "email": "jo@x.com", "phone": "555"}
    values.update(overrides)
    return SubjectDetails(**values)


class TestSubmission:

    async def test_data_request_opens_submitted_case(self, store):
        intake = SubmissionIntake(store)

        case = await intake.submit(
            CaseKind.DATA_PRINCIPAL_REQUEST, subject(), ACME_ID,
            request_type="Access", comment="need my data"
        )

        assert case.status_id == SUBMITTED_STATUS_ID
        assert case.assigned_to == 0
        assert case.request_type == RequestType.ACCESS
        assert case.comment == "need my data"

        stored = await store.get_case(case.id)
        assert (stored.due_date - stored.created_at).days == 7

        history = await store.get_history_for_case(case.id)
        assert len(history) == 1
        assert history[0].updated_by == 0
        assert history[0].updated_by_name == "Jo Lee (Requester)"
        assert history[0].assigned_to_name == "Organization Admin"
        assert history[0].comment == "Request created by data principal"

    async def test_request_type_defaults_to_access(self, store):
        case = await SubmissionIntake(store).submit(
            CaseKind.DATA_PRINCIPAL_REQUEST, subject(), ACME_ID, comment="hello"
        )
        assert case.request_type == RequestType.ACCESS

    async def test_grievance(self, store):
        case = await SubmissionIntake(store).submit(
            CaseKind.GRIEVANCE, subject(), ACME_ID, request_type="Erasure", comment="my data leaked"
        )

        assert case.kind == CaseKind.GRIEVANCE
        assert case.request_type is None
        history = await store.get_history_for_case(case.id)
        assert history[0].comment == "Grievance created by user"

    async def test_fields_are_trimmed(self, store):
        case = await SubmissionIntake(store).submit(
            CaseKind.GRIEVANCE, subject(first_name="  Jo "), ACME_ID, comment="  text  "
        )
        assert case.first_name == "Jo"
        assert case.comment == "text"


class TestSubmissionRejections:
    """Rejected submissions leave the store untouched"""

    @pytest.mark.parametrize("field", ["first_name", "last_name", "email", "phone"])
    async def test_blank_required_field(self, store, field):
        with pytest.raises(ValidationError) as exc_info:
            await SubmissionIntake(store).submit(
                CaseKind.DATA_PRINCIPAL_REQUEST, subject(**{field: "   "}), ACME_ID, comment="text"
            )

        assert exc_info.value.fields == [field]
        assert await store.count_cases() == 0
        assert await store.count_history() == 0

    async def test_blank_comment(self, store):
        with pytest.raises(ValidationError) as exc_info:
            await SubmissionIntake(store).submit(CaseKind.GRIEVANCE, subject(), ACME_ID, comment="")
        assert exc_info.value.fields == ["comment"]

    async def test_email_without_at(self, store):
        with pytest.raises(InvalidEmailError):
            await SubmissionIntake(store).submit(
                CaseKind.GRIEVANCE, subject(email="jo.x.com"), ACME_ID, comment="text"
            )
        assert await store.count_cases() == 0

    async def test_unknown_request_type(self, store):
        with pytest.raises(ValidationError) as exc_info:
            await SubmissionIntake(store).submit(
                CaseKind.DATA_PRINCIPAL_REQUEST, subject(), ACME_ID, request_type="Deletion", comment="text"
            )
        assert exc_info.value.fields == ["request_type"]

    async def test_unknown_organisation(self, store):
        with pytest.raises(UnknownOrganisationError):
            await SubmissionIntake(store).submit(CaseKind.GRIEVANCE, subject(), 77, comment="text")
        assert await store.count_cases() == 0

    async def test_organisation_id_beyond_64_bits(self, store):
        with pytest.raises(UnknownOrganisationError):
            await SubmissionIntake(store).submit(
                CaseKind.GRIEVANCE, subject(), 99999999999999999999999, comment="text"
            )
        assert await store.count_cases() == 0
