"""SQLAlchemy Case Repository - SQLite / PostgreSQL implementation.

This module implements the CaseRepository interface on top of async SQLAlchemy:
- cases table: filterable fields as columns, report details as JSON
- case_notes table: append-only audit trail (1:N)

Design Philosophy:
- Normalize what you query (status, visibility, owner, searchable names)
- Embed what you don't (person description, location, contact)
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from alert_service.infrastructure.database.models import CaseDB, CaseNoteDB
from alert_service.infrastructure.persistence.case_repository import (
    CaseQuery,
    CaseRepository,
    CaseSort,
    DuplicateCaseNumberError,
    PageWindow,
    RepositoryException,
)
from alert_service.models.case import (
    Case,
    CaseNote,
    ContactInfo,
    Location,
    MissingPerson,
)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SQLAlchemyCaseRepository(CaseRepository):
    """
    Case repository backed by an async SQLAlchemy session.

    Each save commits, so the case record and its new notes are persisted
    in one transaction.
    """

    def __init__(self, db_session: AsyncSession):
        """
        Initialize repository with SQLAlchemy async session.

        Args:
            db_session: SQLAlchemy AsyncSession for database operations
        """
        self.db = db_session

    # ========================================================================
    # Core Operations
    # ========================================================================

    async def save(self, case: Case) -> Case:
        """
        Save case and append notes that are not stored yet.

        Strategy:
        1. Upsert cases row (columns + JSON documents)
        2. Append new notes by position (append-only)
        3. Commit both together

        Raises:
            DuplicateCaseNumberError: If the case number is already taken
            RepositoryException: If save fails
        """
        is_new = False
        try:
            case.updated_at = datetime.now(timezone.utc)

            row = await self.db.get(CaseDB, case.id, populate_existing=True)
            if row is None:
                is_new = True
                row = CaseDB(id=case.id)
                self.db.add(row)

            self._apply_case(row, case)
            self._append_notes(row, case.notes)

            await self.db.commit()
            return case

        except IntegrityError as e:
            await self.db.rollback()
            if is_new and case.case_number:
                raise DuplicateCaseNumberError(case.case_number) from e
            raise RepositoryException(f"Failed to save case {case.id}: {e}") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RepositoryException(f"Failed to save case {case.id}: {e}") from e

    async def find_by_id(self, case_id: str) -> Optional[Case]:
        try:
            row = await self.db.get(CaseDB, case_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to get case {case_id}: {e}") from e

        return self._row_to_case(row) if row else None

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        try:
            result = await self.db.execute(
                select(func.count(CaseDB.id)).where(
                    CaseDB.created_at >= start,
                    CaseDB.created_at < end,
                )
            )
            return result.scalar_one()
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to count cases: {e}") from e

    async def find_many(
        self,
        query: CaseQuery,
        sort: CaseSort = CaseSort.NEWEST_FIRST,
        window: Optional[PageWindow] = None,
    ) -> List[Case]:
        order = CaseDB.created_at.desc() if sort == CaseSort.NEWEST_FIRST else CaseDB.created_at.asc()
        stmt = (
            select(CaseDB)
            .where(*self._conditions(query))
            .order_by(order)
            .execution_options(populate_existing=True)
        )

        if window is not None:
            stmt = stmt.offset(window.offset).limit(window.limit)

        try:
            result = await self.db.execute(stmt)
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to list cases: {e}") from e

        return [self._row_to_case(row) for row in rows]

    async def count_matching(self, query: CaseQuery) -> int:
        try:
            result = await self.db.execute(
                select(func.count(CaseDB.id)).where(*self._conditions(query))
            )
            return result.scalar_one()
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to count cases: {e}") from e

    # ========================================================================
    # Helper Methods
    # ========================================================================

    @staticmethod
    def _conditions(query: CaseQuery) -> list:
        conditions = []

        if query.reported_by is not None:
            conditions.append(CaseDB.reported_by == query.reported_by)
        if query.status is not None:
            conditions.append(CaseDB.status == query.status)
        if query.status_not is not None:
            conditions.append(CaseDB.status != query.status_not)
        if query.is_public is not None:
            conditions.append(CaseDB.is_public.is_(query.is_public))
        if query.is_active is not None:
            conditions.append(CaseDB.is_active.is_(query.is_active))
        if query.created_from is not None:
            conditions.append(CaseDB.created_at >= query.created_from)
        if query.search:
            pattern = _like_pattern(query.search)
            conditions.append(
                or_(
                    CaseDB.missing_person_name.ilike(pattern, escape="\\"),
                    CaseDB.case_number.ilike(pattern, escape="\\"),
                    CaseDB.city.ilike(pattern, escape="\\"),
                )
            )

        return conditions

    @staticmethod
    def _apply_case(row: CaseDB, case: Case) -> None:
        row.case_number = case.case_number
        row.title = case.title
        row.description = case.description
        row.missing_person_name = case.missing_person.name
        row.city = case.last_known_location.city
        row.missing_person = case.missing_person.model_dump(mode="json")
        row.last_known_location = case.last_known_location.model_dump(mode="json")
        row.contact_info = case.contact_info.model_dump(mode="json")
        row.last_seen_date = case.last_seen_date
        row.last_seen_time = case.last_seen_time
        row.circumstances = case.circumstances
        row.status = case.status
        row.priority = case.priority
        row.category = case.category
        row.reported_by = case.reported_by
        row.is_public = case.is_public
        row.is_active = case.is_active
        row.created_at = case.created_at
        row.updated_at = case.updated_at

    @staticmethod
    def _append_notes(row: CaseDB, notes: List[CaseNote]) -> None:
        stored = len(row.notes)
        for position, note in enumerate(notes[stored:], start=stored):
            row.notes.append(
                CaseNoteDB(
                    position=position,
                    content=note.content,
                    added_by=note.added_by,
                    added_at=note.added_at,
                    is_public=note.is_public,
                )
            )

    @staticmethod
    def _row_to_case(row: CaseDB) -> Case:
        """Reconstruct Case domain object from database row."""
        return Case(
            id=row.id,
            case_number=row.case_number,
            title=row.title,
            description=row.description,
            missing_person=MissingPerson(**row.missing_person),
            last_known_location=Location(**row.last_known_location),
            contact_info=ContactInfo(**row.contact_info),
            last_seen_date=row.last_seen_date,
            last_seen_time=row.last_seen_time or "",
            circumstances=row.circumstances or "",
            status=row.status,
            priority=row.priority,
            category=row.category,
            reported_by=row.reported_by,
            notes=[
                CaseNote(
                    content=note.content,
                    added_by=note.added_by,
                    added_at=_as_utc(note.added_at),
                    is_public=note.is_public,
                )
                for note in row.notes
            ],
            is_public=row.is_public,
            is_active=row.is_active,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
        )
