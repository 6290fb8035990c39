"""Unit tests for the case status transition table."""

from datetime import date

import pytest

from alert_service.core.lifecycle import TRANSITIONS, apply_transition, can_transition
from alert_service.models import (
    Case,
    CaseStatus,
    ContactInfo,
    Location,
    MissingPerson,
    PrimaryContact,
)


def make_case(status: CaseStatus = CaseStatus.ACTIVE) -> Case:
    return Case(
        description="Last seen near the park",
        missing_person=MissingPerson(name="Sam Lee", age=30, gender="male"),
        last_known_location=Location(address="1 Main St", city="Dayton", state="OH"),
        last_seen_date=date(2025, 7, 1),
        contact_info=ContactInfo(primary_contact=PrimaryContact(name="Kim Lee", phone="555-0101")),
        reported_by="user_owner",
        status=status,
    )


@pytest.mark.unit
class TestTransitionTable:
    """Test the declared transitions"""

    def test_every_status_has_a_row(self):
        assert set(TRANSITIONS) == set(CaseStatus)

    @pytest.mark.parametrize("from_status", list(CaseStatus))
    @pytest.mark.parametrize("to_status", list(CaseStatus))
    def test_flat_policy(self, from_status, to_status):
        assert can_transition(from_status, to_status)

    def test_only_dismissed_overrides_visibility(self):
        overriding = {s for s, t in TRANSITIONS.items() if t.visibility_override is not None}
        assert overriding == {CaseStatus.DISMISSED}


@pytest.mark.unit
class TestApplyTransition:
    """Test transition side effects"""

    def test_returns_old_status(self):
        case = make_case()
        assert apply_transition(case, CaseStatus.FOUND) == CaseStatus.ACTIVE
        assert case.status == CaseStatus.FOUND

    def test_found_keeps_case_visible(self):
        case = make_case()
        apply_transition(case, CaseStatus.FOUND)
        assert case.is_public is True
        assert case.is_active is True

    def test_dismissed_hides_case(self):
        case = make_case()
        apply_transition(case, CaseStatus.DISMISSED)
        assert case.status == CaseStatus.DISMISSED
        assert case.is_public is False
        assert case.is_active is False

    def test_reopen_does_not_restore_visibility(self):
        case = make_case()
        apply_transition(case, CaseStatus.DISMISSED)
        apply_transition(case, CaseStatus.ACTIVE)
        assert case.status == CaseStatus.ACTIVE
        assert case.is_public is False
        assert case.is_active is False

    def test_does_not_touch_notes(self):
        case = make_case()
        apply_transition(case, CaseStatus.CLOSED)
        assert case.notes == []
