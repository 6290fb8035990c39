"""API request and response models."""

from datetime import date, datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from alert_service.models.case import (
    Case,
    CaseCategory,
    CaseNote,
    CasePriority,
    ContactInfo,
    Gender,
    Location,
    MissingPerson,
    Photo,
    utcnow,
)

T = TypeVar("T")


# =============================================================================
# Requests
# =============================================================================
#
# Required case fields are Optional here so that the case manager can report
# every missing field at once instead of failing on the first one.


class MissingPersonInput(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[Gender] = None
    height: str = ""
    weight: str = ""
    hair_color: str = ""
    eye_color: str = ""
    distinguishing_features: str = ""
    last_seen_clothing: str = ""
    photos: List[Photo] = Field(default_factory=list)


class LocationInput(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: str = ""


class PrimaryContactInput(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: str = ""
    email: str = ""


class ContactInfoInput(BaseModel):
    primary_contact: PrimaryContactInput = Field(default_factory=PrimaryContactInput)


class CaseCreateRequest(BaseModel):
    """Request to report a missing person."""

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    missing_person: MissingPersonInput = Field(default_factory=MissingPersonInput)
    last_known_location: LocationInput = Field(default_factory=LocationInput)
    last_seen_date: Optional[date] = None
    last_seen_time: str = Field("", max_length=20)
    circumstances: str = ""
    contact_info: ContactInfoInput = Field(default_factory=ContactInfoInput)
    priority: CasePriority = CasePriority.MEDIUM
    category: CaseCategory = CaseCategory.MISSING_PERSON


class CaseStatusUpdateRequest(BaseModel):
    """Request to update case status.

    ``status`` stays a plain string so that unknown values reach the case
    manager and are reported with the list of allowed statuses.
    """

    status: Optional[str] = None
    notes: Optional[str] = None


# =============================================================================
# Responses
# =============================================================================


class NoteResponse(BaseModel):
    content: str
    added_by: str
    added_at: datetime
    is_public: bool

    @classmethod
    def from_note(cls, note: CaseNote) -> "NoteResponse":
        return cls(**note.model_dump())


class CaseResponse(BaseModel):
    """Response containing a single case."""

    id: str
    case_number: Optional[str]
    title: Optional[str]
    description: str
    missing_person: MissingPerson
    last_known_location: Location
    last_seen_date: date
    last_seen_time: str
    circumstances: str
    contact_info: ContactInfo
    status: str
    priority: str
    category: str
    reported_by: str
    notes: List[NoteResponse]
    is_public: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_case(cls, case: Case, include_private_notes: bool = True) -> "CaseResponse":
        """Convert Case model to response.

        The public view drops notes marked private, such as dismissal notes.
        """
        notes = case.notes if include_private_notes else case.public_notes
        return cls(
            id=case.id,
            case_number=case.case_number,
            title=case.title,
            description=case.description,
            missing_person=case.missing_person,
            last_known_location=case.last_known_location,
            last_seen_date=case.last_seen_date,
            last_seen_time=case.last_seen_time,
            circumstances=case.circumstances,
            contact_info=case.contact_info,
            status=case.status.value,
            priority=case.priority.value,
            category=case.category.value,
            reported_by=case.reported_by,
            notes=[NoteResponse.from_note(note) for note in notes],
            is_public=case.is_public,
            is_active=case.is_active,
            created_at=case.created_at,
            updated_at=case.updated_at,
        )


class StatusChangeResponse(BaseModel):
    case_id: str
    case_number: Optional[str]
    old_status: str
    new_status: str
    updated_at: datetime


class DismissResponse(BaseModel):
    case_number: Optional[str]
    dismissed_at: datetime


class CaseStatisticsResponse(BaseModel):
    active_cases: int
    found_cases: int
    closed_cases: int
    total_cases: int
    recent_cases: int
    success_rate: float


class OwnerStatisticsResponse(BaseModel):
    total_cases: int
    active_cases: int
    found_cases: int
    closed_cases: int
    success_rate: float


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope shared by every endpoint."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    timestamp: datetime = Field(default_factory=utcnow)


class CaseListResponse(ApiResponse[List[CaseResponse]]):
    """Public case listing with pagination details."""

    pagination: PaginationMeta


class OwnedCasesResponse(ApiResponse[List[CaseResponse]]):
    count: int
    user_id: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    storage: str
