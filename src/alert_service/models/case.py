"""Case data models for the missing alert service.

The Case document mirrors what a reporter submits plus the lifecycle fields
owned by the service: case number, status, visibility flags and notes.
"""

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

CASE_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_case_id() -> str:
    """Generate a 24-character hexadecimal case identifier (12 bytes)."""
    return uuid4().hex[:24]


def is_valid_case_id(case_id: str) -> bool:
    return bool(CASE_ID_PATTERN.fullmatch(case_id or ""))


class CaseStatus(str, Enum):
    """Case lifecycle status."""

    ACTIVE = "active"
    FOUND = "found"
    CLOSED = "closed"
    DISMISSED = "dismissed"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


class CasePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CaseCategory(str, Enum):
    MISSING_PERSON = "missing-person"
    RUNAWAY = "runaway"
    OTHER = "other"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Photo(BaseModel):
    url: str
    description: str = ""
    is_primary: bool = False


class MissingPerson(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    age: int = Field(ge=0, le=150)
    gender: Gender
    height: str = ""
    weight: str = ""
    hair_color: str = ""
    eye_color: str = ""
    distinguishing_features: str = ""
    last_seen_clothing: str = ""
    photos: List[Photo] = Field(default_factory=list)


class Location(BaseModel):
    address: str
    city: str
    state: str
    country: str = "United States"
    zip_code: str = ""


class PrimaryContact(BaseModel):
    name: str
    phone: str
    relationship: str = ""
    email: str = ""


class ContactInfo(BaseModel):
    primary_contact: PrimaryContact


class CaseNote(BaseModel):
    """Audit trail entry. Notes are appended and never edited."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(min_length=1)
    added_by: str
    added_at: datetime = Field(default_factory=utcnow)
    is_public: bool = True


class Case(BaseModel):
    """Case domain model."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=new_case_id)
    case_number: Optional[str] = None

    title: Optional[str] = Field(default=None, max_length=200)
    description: str = Field(max_length=2000)

    missing_person: MissingPerson
    last_known_location: Location
    last_seen_date: date
    last_seen_time: str = Field(default="", max_length=20)
    circumstances: str = ""
    contact_info: ContactInfo

    status: CaseStatus = CaseStatus.ACTIVE
    priority: CasePriority = CasePriority.MEDIUM
    category: CaseCategory = CaseCategory.MISSING_PERSON

    reported_by: str = Field(description="Owner user ID")
    notes: List[CaseNote] = Field(default_factory=list)

    is_public: bool = True
    is_active: bool = True

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def add_note(
        self,
        content: str,
        added_by: str,
        is_public: bool = True,
        added_at: Optional[datetime] = None,
    ) -> CaseNote:
        note = CaseNote(
            content=content,
            added_by=added_by,
            is_public=is_public,
            added_at=added_at or utcnow(),
        )
        self.notes.append(note)
        return note

    @property
    def public_notes(self) -> List[CaseNote]:
        return [note for note in self.notes if note.is_public]
