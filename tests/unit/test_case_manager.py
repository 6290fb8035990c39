"""Unit tests for CaseManager"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from alert_service.core.case_manager import PublicCaseFilter
from alert_service.exceptions import (
    ForbiddenError,
    InvalidStatusError,
    MalformedIdError,
    NotFoundError,
    ValidationError,
)
from alert_service.infrastructure.persistence import DuplicateCaseNumberError
from alert_service.models import CaseCreateRequest, CaseStatus, Requester, UserRole

from conftest import case_payload

MISSING_ID = "0" * 24
DISMISS_NOTE = re.compile(r"^Case dismissed by .+ at \d{4}-\d{2}-\d{2}T.+$")
ALL_TIME = (datetime(1970, 1, 1, tzinfo=timezone.utc), datetime(2100, 1, 1, tzinfo=timezone.utc))


async def create(manager, owner, **overrides):
    return await manager.create_case(owner.id, CaseCreateRequest(**case_payload(**overrides)))


@pytest.mark.unit
class TestCreateCase:
    """Test case creation"""

    async def test_new_case_defaults(self, manager, owner, create_request):
        case = await manager.create_case(owner.id, create_request)

        assert case.status == CaseStatus.ACTIVE
        assert case.is_public is True
        assert case.is_active is True
        assert case.notes == []
        assert case.reported_by == owner.id
        assert re.fullmatch(r"[0-9a-f]{24}", case.id)

    async def test_third_case_of_day_gets_sequence_003(self, manager, owner, create_request):
        await manager.create_case(owner.id, create_request)
        await manager.create_case(owner.id, create_request)
        case = await manager.create_case(owner.id, create_request)

        assert case.case_number == "MA-20250715-003"

    async def test_sequence_restarts_next_day(self, manager, owner, clock, create_request):
        await manager.create_case(owner.id, create_request)
        clock.now = clock.now + timedelta(days=1)
        case = await manager.create_case(owner.id, create_request)

        assert case.case_number == "MA-20250716-001"

    async def test_trims_required_strings(self, manager, owner):
        case = await create(
            manager,
            owner,
            missing_person={"name": "  Jane Doe  ", "age": 14, "gender": "female"},
            last_known_location={"address": " 12 Elm St", "city": "Springfield ", "state": " IL"},
        )

        assert case.missing_person.name == "Jane Doe"
        assert case.last_known_location.address == "12 Elm St"
        assert case.last_known_location.city == "Springfield"
        assert case.last_known_location.state == "IL"
        assert case.last_known_location.country == "United States"

    async def test_age_zero_is_valid(self, manager, owner):
        case = await create(
            manager, owner, missing_person={"name": "Baby Doe", "age": 0, "gender": "other"}
        )
        assert case.missing_person.age == 0

    async def test_reports_every_missing_field(self, manager, owner, repository):
        request = CaseCreateRequest(
            **case_payload(
                description="   ",
                missing_person={"name": "Jane Doe"},
                last_seen_date=None,
                contact_info={"primary_contact": {"name": "John Doe"}},
            )
        )

        with pytest.raises(ValidationError) as exc_info:
            await manager.create_case(owner.id, request)

        assert exc_info.value.fields == [
            "missing_person.age",
            "missing_person.gender",
            "description",
            "last_seen_date",
            "contact_info.primary_contact.phone",
        ]
        assert exc_info.value.message.startswith("Missing required fields: missing_person.age")
        assert await repository.count_created_between(*ALL_TIME) == 0

    async def test_empty_request_lists_all_ten_fields(self, manager, owner):
        with pytest.raises(ValidationError) as exc_info:
            await manager.create_case(owner.id, CaseCreateRequest())

        assert len(exc_info.value.fields) == 10

    async def test_duplicate_number_retries_with_fallback(self, manager, owner, repository, monkeypatch):
        original_save = repository.save
        calls = []

        async def clashing_save(case):
            calls.append(case.case_number)
            if len(calls) == 1:
                raise DuplicateCaseNumberError(case.case_number)
            return await original_save(case)

        monkeypatch.setattr(repository, "save", clashing_save)

        case = await create(manager, owner)

        assert calls[0] == "MA-20250715-001"
        assert re.fullmatch(r"MA-\d{13}-[0-9a-z]{9}", case.case_number)


@pytest.mark.unit
class TestUpdateStatus:
    """Test status transitions and authorization"""

    async def test_owner_marks_found_with_note(self, manager, owner, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        change = await manager.update_status(case.id, owner, "found", notes="seen at shelter")

        assert change.old_status == CaseStatus.ACTIVE
        assert change.new_status == CaseStatus.FOUND

        stored = await repository.find_by_id(case.id)
        assert stored.status == CaseStatus.FOUND
        assert len(stored.notes) == 1
        note = stored.notes[0]
        assert note.content == "seen at shelter"
        assert note.added_by == owner.id
        assert note.is_public is True

    async def test_default_note_names_requester(self, manager, owner, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        await manager.update_status(case.id, owner, "closed")

        stored = await repository.find_by_id(case.id)
        assert stored.notes[-1].content == "Status changed from active to closed by Olivia Owner"

    async def test_default_note_falls_back_to_user(self, manager, repository, create_request):
        anonymous = Requester(id="user_anon")
        case = await manager.create_case(anonymous.id, create_request)

        await manager.update_status(case.id, anonymous, "found")

        stored = await repository.find_by_id(case.id)
        assert stored.notes[-1].content.endswith("by User")

    async def test_same_status_without_notes_adds_nothing(self, manager, owner, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        change = await manager.update_status(case.id, owner, "active")

        assert change.old_status == change.new_status == CaseStatus.ACTIVE
        assert (await repository.find_by_id(case.id)).notes == []

    async def test_same_status_with_notes_adds_note(self, manager, owner, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        await manager.update_status(case.id, owner, "active", notes="still searching")

        assert [n.content for n in (await repository.find_by_id(case.id)).notes] == ["still searching"]

    async def test_non_owner_is_forbidden_and_state_unchanged(
        self, manager, owner, other_user, repository, create_request
    ):
        case = await manager.create_case(owner.id, create_request)

        with pytest.raises(ForbiddenError):
            await manager.update_status(case.id, other_user, "closed")

        stored = await repository.find_by_id(case.id)
        assert stored.status == CaseStatus.ACTIVE
        assert stored.notes == []

    async def test_moderator_is_not_admin(self, manager, owner, create_request):
        case = await manager.create_case(owner.id, create_request)
        moderator = Requester(id="user_mod", role=UserRole.MODERATOR)

        with pytest.raises(ForbiddenError):
            await manager.update_status(case.id, moderator, "closed")

    async def test_admin_may_update_any_case(self, manager, owner, admin, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        await manager.update_status(case.id, admin, "closed")

        stored = await repository.find_by_id(case.id)
        assert stored.status == CaseStatus.CLOSED
        assert stored.notes[-1].added_by == admin.id

    async def test_dismissed_status_hides_case(self, manager, owner, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        await manager.update_status(case.id, owner, "dismissed")

        stored = await repository.find_by_id(case.id)
        assert stored.is_public is False
        assert stored.is_active is False

    async def test_owner_cannot_reopen_dismissed_case(self, manager, owner, repository, create_request):
        case = await manager.create_case(owner.id, create_request)
        await manager.dismiss_case(case.id, owner)

        with pytest.raises(ForbiddenError):
            await manager.update_status(case.id, owner, "active")

        assert (await repository.find_by_id(case.id)).status == CaseStatus.DISMISSED

    async def test_admin_reopen_keeps_case_hidden(self, manager, owner, admin, repository, create_request):
        case = await manager.create_case(owner.id, create_request)
        await manager.dismiss_case(case.id, owner)

        await manager.update_status(case.id, admin, "active")

        stored = await repository.find_by_id(case.id)
        assert stored.status == CaseStatus.ACTIVE
        assert stored.is_public is False
        assert stored.is_active is False

    async def test_invalid_status_checked_before_id(self, manager, owner):
        with pytest.raises(InvalidStatusError) as exc_info:
            await manager.update_status("not-an-id", owner, "lost")

        assert exc_info.value.message == (
            "Invalid status. Must be one of: active, found, closed, dismissed"
        )

    async def test_missing_status_is_invalid(self, manager, owner):
        with pytest.raises(InvalidStatusError):
            await manager.update_status(MISSING_ID, owner, None)

    async def test_malformed_id(self, manager, owner):
        with pytest.raises(MalformedIdError):
            await manager.update_status("abc123", owner, "found")

    async def test_id_with_trailing_newline_is_malformed(self, manager, owner, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        with pytest.raises(MalformedIdError):
            await manager.update_status(case.id + "\n", owner, "found")

        assert (await repository.find_by_id(case.id)).status == CaseStatus.ACTIVE

    async def test_unknown_case(self, manager, owner):
        with pytest.raises(NotFoundError):
            await manager.update_status(MISSING_ID, owner, "found")


@pytest.mark.unit
class TestDismissCase:
    """Test dismissal"""

    async def test_dismiss_hides_case_and_adds_private_note(
        self, manager, owner, repository, create_request
    ):
        case = await manager.create_case(owner.id, create_request)

        result = await manager.dismiss_case(case.id, owner)

        assert result.case_number == case.case_number
        stored = await repository.find_by_id(case.id)
        assert stored.status == CaseStatus.DISMISSED
        assert stored.is_public is False
        assert stored.is_active is False
        assert len(stored.notes) == 1
        assert DISMISS_NOTE.match(stored.notes[0].content)
        assert stored.notes[0].content.startswith("Case dismissed by Olivia Owner at ")
        assert stored.notes[0].is_public is False

    async def test_dismiss_twice_adds_second_note(self, manager, owner, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        await manager.dismiss_case(case.id, owner)
        await manager.dismiss_case(case.id, owner)

        stored = await repository.find_by_id(case.id)
        assert len(stored.notes) == 2
        assert all(not note.is_public for note in stored.notes)

    async def test_dismiss_by_non_owner_forbidden(self, manager, owner, other_user, repository, create_request):
        case = await manager.create_case(owner.id, create_request)

        with pytest.raises(ForbiddenError):
            await manager.dismiss_case(case.id, other_user)

        stored = await repository.find_by_id(case.id)
        assert stored.status == CaseStatus.ACTIVE
        assert stored.is_public is True

    async def test_dismiss_by_admin(self, manager, owner, admin, create_request):
        case = await manager.create_case(owner.id, create_request)

        result = await manager.dismiss_case(case.id, admin)

        assert result.case_number == case.case_number

    async def test_dismiss_malformed_id(self, manager, owner):
        with pytest.raises(MalformedIdError):
            await manager.dismiss_case("xyz", owner)


@pytest.mark.unit
class TestQueries:
    """Test listing, lookup and statistics"""

    async def test_owned_cases_exclude_dismissed(self, manager, owner, other_user, create_request):
        kept = await manager.create_case(owner.id, create_request)
        dismissed = await manager.create_case(owner.id, create_request)
        await manager.create_case(other_user.id, create_request)
        await manager.dismiss_case(dismissed.id, owner)

        cases = await manager.list_owned_cases(owner.id)

        assert [c.id for c in cases] == [kept.id]

    async def test_owned_cases_newest_first(self, manager, owner, clock, create_request):
        first = await manager.create_case(owner.id, create_request)
        clock.now = clock.now + timedelta(minutes=5)
        second = await manager.create_case(owner.id, create_request)

        cases = await manager.list_owned_cases(owner.id)

        assert [c.id for c in cases] == [second.id, first.id]

    async def test_public_list_defaults_to_active(self, manager, owner, create_request):
        active = await manager.create_case(owner.id, create_request)
        found = await manager.create_case(owner.id, create_request)
        await manager.update_status(found.id, owner, "found")

        page = await manager.list_public_cases(PublicCaseFilter())

        assert [c.id for c in page.cases] == [active.id]
        assert page.total == 1

    async def test_public_list_all_statuses(self, manager, owner, create_request):
        await manager.create_case(owner.id, create_request)
        found = await manager.create_case(owner.id, create_request)
        await manager.update_status(found.id, owner, "found")
        dismissed = await manager.create_case(owner.id, create_request)
        await manager.dismiss_case(dismissed.id, owner)

        page = await manager.list_public_cases(PublicCaseFilter(status="all"))

        assert page.total == 2

    async def test_public_list_search_is_case_insensitive(self, manager, owner):
        await create(manager, owner, missing_person={"name": "Alice Smith", "age": 9, "gender": "female"})
        await create(
            manager,
            owner,
            missing_person={"name": "Bob Jones", "age": 40, "gender": "male"},
            last_known_location={"address": "3 Oak Ave", "city": "Shelbyville", "state": "IL"},
        )

        by_name = await manager.list_public_cases(PublicCaseFilter(search="ALICE"))
        by_city = await manager.list_public_cases(PublicCaseFilter(search="shelby"))
        by_number = await manager.list_public_cases(PublicCaseFilter(search="20250715-002"))

        assert [c.missing_person.name for c in by_name.cases] == ["Alice Smith"]
        assert [c.missing_person.name for c in by_city.cases] == ["Bob Jones"]
        assert [c.missing_person.name for c in by_number.cases] == ["Bob Jones"]

    async def test_public_list_pagination(self, manager, owner, clock, create_request):
        for _ in range(5):
            await manager.create_case(owner.id, create_request)
            clock.now = clock.now + timedelta(minutes=1)

        page = await manager.list_public_cases(PublicCaseFilter(page=2, limit=2))

        assert page.total == 5
        assert page.pages == 3
        assert [c.case_number for c in page.cases] == ["MA-20250715-003", "MA-20250715-002"]

    async def test_public_list_invalid_status(self, manager):
        with pytest.raises(InvalidStatusError):
            await manager.list_public_cases(PublicCaseFilter(status="lost"))

    async def test_get_public_case_hidden_after_dismiss(self, manager, owner, create_request):
        case = await manager.create_case(owner.id, create_request)
        await manager.dismiss_case(case.id, owner)

        with pytest.raises(ForbiddenError):
            await manager.get_public_case(case.id)

    async def test_get_public_case(self, manager, owner, create_request):
        case = await manager.create_case(owner.id, create_request)

        fetched = await manager.get_public_case(case.id)

        assert fetched.case_number == case.case_number

    async def test_case_statistics(self, manager, owner, create_request):
        await manager.create_case(owner.id, create_request)
        found = await manager.create_case(owner.id, create_request)
        await manager.update_status(found.id, owner, "found")
        closed = await manager.create_case(owner.id, create_request)
        await manager.update_status(closed.id, owner, "closed")
        dismissed = await manager.create_case(owner.id, create_request)
        await manager.dismiss_case(dismissed.id, owner)

        stats = await manager.get_case_statistics()

        assert stats == {
            "active_cases": 1,
            "found_cases": 1,
            "closed_cases": 1,
            "total_cases": 3,
            "recent_cases": 3,
            "success_rate": 33.3,
        }

    async def test_statistics_empty(self, manager):
        stats = await manager.get_case_statistics()
        assert stats["total_cases"] == 0
        assert stats["success_rate"] == 0.0

    async def test_owner_statistics(self, manager, owner, other_user, create_request):
        await manager.create_case(owner.id, create_request)
        found = await manager.create_case(owner.id, create_request)
        await manager.update_status(found.id, owner, "found")
        await manager.create_case(other_user.id, create_request)

        stats = await manager.get_owner_statistics(owner.id)

        assert stats == {
            "total_cases": 2,
            "active_cases": 1,
            "found_cases": 1,
            "closed_cases": 0,
            "success_rate": 50.0,
        }
