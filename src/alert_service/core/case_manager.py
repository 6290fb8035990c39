"""Case business logic manager - Repository Pattern."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from alert_service.config import settings
from alert_service.core.case_number import CaseNumberAllocator
from alert_service.core.lifecycle import apply_transition, can_transition
from alert_service.exceptions import (
    ForbiddenError,
    InvalidStatusError,
    MalformedIdError,
    NotFoundError,
    ValidationError,
)
from alert_service.infrastructure.persistence import (
    CaseQuery,
    CaseRepository,
    CaseSort,
    DuplicateCaseNumberError,
    PageWindow,
)
from alert_service.models import (
    Case,
    CaseCreateRequest,
    CaseStatus,
    ContactInfo,
    Location,
    MissingPerson,
    PrimaryContact,
    Requester,
)
from alert_service.models.case import is_valid_case_id, utcnow

logger = logging.getLogger(__name__)

STATUS_FILTER_ALL = "all"


@dataclass
class StatusChange:
    case: Case
    old_status: CaseStatus
    new_status: CaseStatus


@dataclass
class DismissResult:
    case_number: Optional[str]
    dismissed_at: datetime


@dataclass
class PublicCaseFilter:
    status: str = CaseStatus.ACTIVE.value
    search: Optional[str] = None
    page: int = 1
    limit: int = 20


@dataclass
class CasePage:
    cases: List[Case]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _success_rate(found: int, total: int) -> float:
    return round(found / total * 100, 1) if total > 0 else 0.0


class CaseManager:
    """Business logic for the missing-person case lifecycle.

    This class implements the service layer using the Repository pattern.
    It owns case numbering, status transitions, ownership checks and the
    audit notes, while delegating persistence to CaseRepository.
    """

    def __init__(
        self,
        repository: CaseRepository,
        clock: Callable[[], datetime] = utcnow,
        case_number_prefix: Optional[str] = None,
    ):
        """Initialize case manager with repository.

        Args:
            repository: CaseRepository implementation (InMemory or SQLAlchemy)
            clock: Source of the current UTC time
            case_number_prefix: Overrides settings.case_number_prefix
        """
        self.repository = repository
        self.clock = clock
        self.case_numbers = CaseNumberAllocator(
            repository, case_number_prefix or settings.case_number_prefix
        )

    # =========================================================================
    # Creation
    # =========================================================================

    async def create_case(self, owner_id: str, request: CaseCreateRequest) -> Case:
        """Create a new case owned by ``owner_id``.

        Raises:
            ValidationError: If any required field is absent or blank
        """
        missing = self._missing_required_fields(request)
        if missing:
            raise ValidationError.missing_fields(missing)

        person = request.missing_person
        location = request.last_known_location
        contact = request.contact_info.primary_contact
        now = self.clock()

        case = Case(
            title=request.title,
            description=request.description.strip(),
            missing_person=MissingPerson(
                name=person.name.strip(),
                age=person.age,
                gender=person.gender,
                height=person.height,
                weight=person.weight,
                hair_color=person.hair_color,
                eye_color=person.eye_color,
                distinguishing_features=person.distinguishing_features,
                last_seen_clothing=person.last_seen_clothing,
                photos=person.photos,
            ),
            last_known_location=Location(
                address=location.address.strip(),
                city=location.city.strip(),
                state=location.state.strip(),
                country=location.country or "United States",
                zip_code=location.zip_code,
            ),
            last_seen_date=request.last_seen_date,
            last_seen_time=request.last_seen_time,
            circumstances=request.circumstances,
            contact_info=ContactInfo(
                primary_contact=PrimaryContact(
                    name=contact.name.strip(),
                    phone=contact.phone.strip(),
                    relationship=contact.relationship,
                    email=contact.email,
                )
            ),
            priority=request.priority,
            category=request.category,
            status=CaseStatus.ACTIVE,
            reported_by=owner_id,
            notes=[],
            is_public=True,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        case.case_number = await self.case_numbers.allocate(now)

        try:
            saved_case = await self.repository.save(case)
        except DuplicateCaseNumberError:
            logger.warning(
                f"Case number {case.case_number} already taken, retrying with fallback"
            )
            case.case_number = self.case_numbers.fallback(now)
            saved_case = await self.repository.save(case)

        logger.info(f"Created case {saved_case.case_number} for user {owner_id}")

        return saved_case

    @staticmethod
    def _missing_required_fields(request: CaseCreateRequest) -> List[str]:
        person = request.missing_person
        location = request.last_known_location
        contact = request.contact_info.primary_contact

        required = [
            ("missing_person.name", person.name),
            ("missing_person.age", person.age),
            ("missing_person.gender", person.gender),
            ("description", request.description),
            ("last_known_location.address", location.address),
            ("last_known_location.city", location.city),
            ("last_known_location.state", location.state),
            ("last_seen_date", request.last_seen_date),
            ("contact_info.primary_contact.name", contact.name),
            ("contact_info.primary_contact.phone", contact.phone),
        ]
        return [field for field, value in required if _blank(value)]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def update_status(
        self,
        case_id: str,
        requester: Requester,
        new_status: Any,
        notes: Optional[str] = None,
    ) -> StatusChange:
        """Move a case to ``new_status`` and record the change as a note.

        Raises:
            InvalidStatusError: If ``new_status`` is not a declared status
            MalformedIdError: If ``case_id`` is not a 24-character hex string
            NotFoundError: If the case does not exist
            ForbiddenError: If the requester is neither owner nor admin, or
                the case is dismissed and the requester is not an admin
        """
        target = self._parse_status(new_status)
        case = await self._load_case(case_id)

        self._ensure_can_manage(case, requester, "update status")
        if not requester.is_admin:
            if case.status == CaseStatus.DISMISSED:
                self._deny(
                    case,
                    requester,
                    "reopen",
                    "Access denied. Dismissed cases can only be changed by an administrator.",
                )
            if not can_transition(case.status, target):
                self._deny(
                    case,
                    requester,
                    "transition",
                    f"Cannot change status from {case.status.value} to {target.value}",
                )

        old_status = apply_transition(case, target)

        if notes or target != old_status:
            content = notes or (
                f"Status changed from {old_status.value} to {target.value} "
                f"by {requester.display_name}"
            )
            case.add_note(content, added_by=requester.id, is_public=True, added_at=self.clock())

        await self.repository.save(case)

        logger.info(
            f"Case {case.case_number} status updated: {old_status.value} -> {target.value} "
            f"by {requester.id}"
        )

        return StatusChange(case=case, old_status=old_status, new_status=target)

    async def dismiss_case(self, case_id: str, requester: Requester) -> DismissResult:
        """Withdraw a case from public view.

        Dismissal is a soft delete: the case keeps its history and gets a
        private note. Dismissing an already dismissed case is not rejected
        and appends another note.
        """
        case = await self._load_case(case_id)
        self._ensure_can_manage(case, requester, "dismiss")

        dismissed_at = self.clock()
        apply_transition(case, CaseStatus.DISMISSED)
        case.add_note(
            f"Case dismissed by {requester.display_name} at {dismissed_at.isoformat()}",
            added_by=requester.id,
            is_public=False,
            added_at=dismissed_at,
        )

        await self.repository.save(case)

        logger.info(f"Case {case.case_number} dismissed by {requester.id}")

        return DismissResult(case_number=case.case_number, dismissed_at=dismissed_at)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_public_case(self, case_id: str) -> Case:
        """Get a case for public display.

        Raises:
            MalformedIdError, NotFoundError
            ForbiddenError: If the case is neither public nor active
        """
        case = await self._load_case(case_id)

        if not case.is_public and not case.is_active:
            raise ForbiddenError("Case is not publicly accessible")

        return case

    async def list_owned_cases(self, owner_id: str) -> List[Case]:
        """List the active cases reported by ``owner_id``, newest first."""
        return await self.repository.find_many(
            CaseQuery(reported_by=owner_id, is_active=True),
            sort=CaseSort.NEWEST_FIRST,
        )

    async def list_public_cases(self, case_filter: PublicCaseFilter) -> CasePage:
        """List public, active cases.

        ``status`` defaults to active; ``all`` disables the status filter.
        ``search`` matches name, case number or city, ignoring case.
        """
        query = CaseQuery(is_public=True, is_active=True)

        if case_filter.status and case_filter.status != STATUS_FILTER_ALL:
            query.status = self._parse_status(case_filter.status)

        if case_filter.search and case_filter.search.strip():
            query.search = case_filter.search.strip()

        window = PageWindow(
            offset=(case_filter.page - 1) * case_filter.limit,
            limit=case_filter.limit,
        )
        cases = await self.repository.find_many(query, CaseSort.NEWEST_FIRST, window)
        total = await self.repository.count_matching(query)

        return CasePage(cases=cases, total=total, page=case_filter.page, limit=case_filter.limit)

    async def get_case_statistics(self) -> Dict[str, Any]:
        """Summary counts over publicly visible cases."""
        count = self.repository.count_matching
        since = self.clock() - timedelta(hours=24)

        active_cases = await count(CaseQuery(status=CaseStatus.ACTIVE, is_public=True, is_active=True))
        found_cases = await count(CaseQuery(status=CaseStatus.FOUND, is_public=True))
        closed_cases = await count(CaseQuery(status=CaseStatus.CLOSED, is_public=True))
        total_cases = await count(
            CaseQuery(is_public=True, is_active=True, status_not=CaseStatus.DISMISSED)
        )
        recent_cases = await count(CaseQuery(is_public=True, is_active=True, created_from=since))

        return {
            "active_cases": active_cases,
            "found_cases": found_cases,
            "closed_cases": closed_cases,
            "total_cases": total_cases,
            "recent_cases": recent_cases,
            "success_rate": _success_rate(found_cases, total_cases),
        }

    async def get_owner_statistics(self, owner_id: str) -> Dict[str, Any]:
        """Counts over the cases reported by one user."""
        count = self.repository.count_matching

        total_cases = await count(CaseQuery(reported_by=owner_id, is_active=True))
        active_cases = await count(
            CaseQuery(reported_by=owner_id, status=CaseStatus.ACTIVE, is_active=True)
        )
        found_cases = await count(CaseQuery(reported_by=owner_id, status=CaseStatus.FOUND))
        closed_cases = await count(CaseQuery(reported_by=owner_id, status=CaseStatus.CLOSED))

        return {
            "total_cases": total_cases,
            "active_cases": active_cases,
            "found_cases": found_cases,
            "closed_cases": closed_cases,
            "success_rate": _success_rate(found_cases, total_cases),
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _parse_status(value: Any) -> CaseStatus:
        try:
            return CaseStatus(value)
        except ValueError:
            raise InvalidStatusError(value, CaseStatus.values()) from None

    async def _load_case(self, case_id: str) -> Case:
        if not is_valid_case_id(case_id):
            raise MalformedIdError(case_id)

        case = await self.repository.find_by_id(case_id)
        if not case:
            raise NotFoundError()

        return case

    @staticmethod
    def _ensure_can_manage(case: Case, requester: Requester, action: str) -> None:
        """Only the reporter of a case or an admin may change it."""
        if requester.id == case.reported_by or requester.is_admin:
            return
        CaseManager._deny(case, requester, action)

    @staticmethod
    def _deny(
        case: Case, requester: Requester, action: str, message: Optional[str] = None
    ) -> None:
        logger.warning(
            f"User {requester.id} ({requester.role.value}) denied '{action}' "
            f"on case {case.id} owned by {case.reported_by}"
        )
        raise ForbiddenError(message or f"Access denied. Only the case reporter can {action}.")
