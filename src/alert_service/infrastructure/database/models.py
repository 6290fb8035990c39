"""SQLAlchemy database models.

Fields the service filters on are stored as columns; nested report details
(person, location, contact) are embedded as JSON. Notes get their own
append-only table.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from alert_service.models.case import CaseCategory, CasePriority, CaseStatus

Base = declarative_base()


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class CaseDB(Base):
    """SQLAlchemy model for cases table."""

    __tablename__ = "cases"

    id = Column(String(24), primary_key=True)
    case_number = Column(String(64), nullable=False, unique=True, index=True)

    title = Column(String(200), nullable=True)
    description = Column(Text, nullable=False)

    # Denormalized for search
    missing_person_name = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)

    missing_person = Column(JSON, nullable=False)
    last_known_location = Column(JSON, nullable=False)
    contact_info = Column(JSON, nullable=False)

    last_seen_date = Column(Date, nullable=False)
    last_seen_time = Column(String(20), nullable=False, default="")
    circumstances = Column(Text, nullable=False, default="")

    status = Column(
        Enum(CaseStatus, name="casestatus", values_callable=_enum_values),
        nullable=False,
        default=CaseStatus.ACTIVE,
        index=True,
    )
    priority = Column(
        Enum(CasePriority, name="casepriority", values_callable=_enum_values),
        nullable=False,
        default=CasePriority.MEDIUM,
    )
    category = Column(
        Enum(CaseCategory, name="casecategory", values_callable=_enum_values),
        nullable=False,
        default=CaseCategory.MISSING_PERSON,
    )

    reported_by = Column(String(100), nullable=False, index=True)

    is_public = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    notes = relationship(
        "CaseNoteDB",
        order_by="CaseNoteDB.position",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class CaseNoteDB(Base):
    """Append-only audit notes, ordered by position within a case."""

    __tablename__ = "case_notes"
    __table_args__ = (UniqueConstraint("case_id", "position", name="uq_case_notes_position"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(String(24), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    content = Column(Text, nullable=False)
    added_by = Column(String(100), nullable=False)
    added_at = Column(DateTime(timezone=True), nullable=False)
    is_public = Column(Boolean, nullable=False, default=True)
