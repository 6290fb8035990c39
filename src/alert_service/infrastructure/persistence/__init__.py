"""Case persistence layer - Repository Pattern implementation."""

from alert_service.infrastructure.persistence.case_repository import (
    CaseQuery,
    CaseRepository,
    CaseSort,
    DuplicateCaseNumberError,
    InMemoryCaseRepository,
    PageWindow,
    RepositoryException,
)
from alert_service.infrastructure.persistence.sqlalchemy_case_repository import (
    SQLAlchemyCaseRepository,
)

__all__ = [
    "CaseQuery",
    "CaseRepository",
    "CaseSort",
    "DuplicateCaseNumberError",
    "InMemoryCaseRepository",
    "PageWindow",
    "RepositoryException",
    "SQLAlchemyCaseRepository",
]
