"""Models package."""

from .case import (
    Case,
    CaseCategory,
    CaseNote,
    CasePriority,
    CaseStatus,
    ContactInfo,
    Gender,
    Location,
    MissingPerson,
    Photo,
    PrimaryContact,
)
from .identity import Requester, UserRole
from .requests import (
    ApiResponse,
    CaseCreateRequest,
    CaseListResponse,
    CaseResponse,
    CaseStatisticsResponse,
    CaseStatusUpdateRequest,
    DismissResponse,
    HealthResponse,
    OwnedCasesResponse,
    OwnerStatisticsResponse,
    PaginationMeta,
    StatusChangeResponse,
)

__all__ = [
    "Case",
    "CaseCategory",
    "CaseNote",
    "CasePriority",
    "CaseStatus",
    "ContactInfo",
    "Gender",
    "Location",
    "MissingPerson",
    "Photo",
    "PrimaryContact",
    "Requester",
    "UserRole",
    "ApiResponse",
    "CaseCreateRequest",
    "CaseListResponse",
    "CaseResponse",
    "CaseStatisticsResponse",
    "CaseStatusUpdateRequest",
    "DismissResponse",
    "HealthResponse",
    "OwnedCasesResponse",
    "OwnerStatisticsResponse",
    "PaginationMeta",
    "StatusChangeResponse",
]
