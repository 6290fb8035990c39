"""Case Repository for missing-person case persistence.

This module provides the repository pattern for Case domain model persistence.
It abstracts database operations and provides clean interfaces for the service layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from alert_service.exceptions import InternalError
from alert_service.models.case import Case, CaseStatus


# ============================================================
# Query Objects
# ============================================================

@dataclass
class CaseQuery:
    """Filter for case lookups. Unset fields do not constrain the result."""

    reported_by: Optional[str] = None
    status: Optional[CaseStatus] = None
    status_not: Optional[CaseStatus] = None
    is_public: Optional[bool] = None
    is_active: Optional[bool] = None
    search: Optional[str] = None
    created_from: Optional[datetime] = None


class CaseSort(str, Enum):
    NEWEST_FIRST = "newest_first"
    OLDEST_FIRST = "oldest_first"


@dataclass
class PageWindow:
    offset: int = 0
    limit: int = 20


# ============================================================
# Repository Interface
# ============================================================

class CaseRepository(ABC):
    """
    Abstract repository interface for Case persistence.

    Implementations:
    - SQLAlchemyCaseRepository: SQLite / PostgreSQL database
    - InMemoryCaseRepository: Testing and development
    """

    @abstractmethod
    async def save(self, case: Case) -> Case:
        """
        Save case to persistence layer.

        The scalar fields and any notes not yet stored are written together,
        so a status change and its audit note land in a single write.

        Args:
            case: Case domain object

        Returns:
            Saved case (with updated timestamp)

        Raises:
            DuplicateCaseNumberError: If another case holds the same case number
            RepositoryException: If save fails
        """
        pass

    @abstractmethod
    async def find_by_id(self, case_id: str) -> Optional[Case]:
        """
        Retrieve case by ID.

        Args:
            case_id: Case identifier

        Returns:
            Case if found, None otherwise

        Raises:
            RepositoryException: If retrieval fails
        """
        pass

    @abstractmethod
    async def count_created_between(self, start: datetime, end: datetime) -> int:
        """
        Count cases created in ``[start, end)``.

        Raises:
            RepositoryException: If query fails
        """
        pass

    @abstractmethod
    async def find_many(
        self,
        query: CaseQuery,
        sort: CaseSort = CaseSort.NEWEST_FIRST,
        window: Optional[PageWindow] = None,
    ) -> List[Case]:
        """
        List cases matching a query.

        Args:
            query: Filter; ``search`` is a case-insensitive substring matched
                against missing person name, case number and city
            sort: Creation-time ordering
            window: Offset/limit window, or None for every match

        Returns:
            Matching cases

        Raises:
            RepositoryException: If query fails
        """
        pass

    @abstractmethod
    async def count_matching(self, query: CaseQuery) -> int:
        """
        Count cases matching a query.

        Raises:
            RepositoryException: If query fails
        """
        pass


# ============================================================
# In-Memory Implementation (for Testing)
# ============================================================

class InMemoryCaseRepository(CaseRepository):
    """
    In-memory case repository for testing and development.

    Data stored in dictionary, not persistent across restarts.
    """

    def __init__(self):
        """Initialize empty in-memory store."""
        self._cases: Dict[str, Case] = {}

    async def save(self, case: Case) -> Case:
        """Save case to memory."""
        for other in self._cases.values():
            if other.id != case.id and case.case_number and other.case_number == case.case_number:
                raise DuplicateCaseNumberError(case.case_number)

        case.updated_at = datetime.now(timezone.utc)

        # Store a copy to simulate persistence
        self._cases[case.id] = case.model_copy(deep=True)

        return case

    async def find_by_id(self, case_id: str) -> Optional[Case]:
        """Get case from memory."""
        stored = self._cases.get(case_id)
        return stored.model_copy(deep=True) if stored else None

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        return sum(1 for case in self._cases.values() if start <= case.created_at < end)

    async def find_many(
        self,
        query: CaseQuery,
        sort: CaseSort = CaseSort.NEWEST_FIRST,
        window: Optional[PageWindow] = None,
    ) -> List[Case]:
        """List cases with filters."""
        filtered = [c for c in self._cases.values() if self._matches(c, query)]

        filtered.sort(key=lambda c: c.created_at, reverse=sort == CaseSort.NEWEST_FIRST)

        if window is not None:
            filtered = filtered[window.offset:window.offset + window.limit]

        return [c.model_copy(deep=True) for c in filtered]

    async def count_matching(self, query: CaseQuery) -> int:
        return sum(1 for c in self._cases.values() if self._matches(c, query))

    @staticmethod
    def _matches(case: Case, query: CaseQuery) -> bool:
        if query.reported_by is not None and case.reported_by != query.reported_by:
            return False
        if query.status is not None and case.status != query.status:
            return False
        if query.status_not is not None and case.status == query.status_not:
            return False
        if query.is_public is not None and case.is_public != query.is_public:
            return False
        if query.is_active is not None and case.is_active != query.is_active:
            return False
        if query.created_from is not None and case.created_at < query.created_from:
            return False
        if query.search:
            needle = query.search.lower()
            haystacks = (
                case.missing_person.name,
                case.case_number or "",
                case.last_known_location.city,
            )
            if not any(needle in value.lower() for value in haystacks):
                return False
        return True

    def clear(self):
        """Clear all cases (testing utility)."""
        self._cases.clear()


# ============================================================
# Repository Exception
# ============================================================

class RepositoryException(InternalError):
    """Base exception for repository errors."""
    pass


class DuplicateCaseNumberError(RepositoryException):
    """Another case already holds this case number."""

    def __init__(self, case_number: str):
        super().__init__(f"Case number {case_number} already exists")
        self.case_number = case_number
