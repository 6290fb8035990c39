"""FastAPI dependencies shared by the route modules."""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, status

from alert_service.config import settings
from alert_service.core.case_manager import CaseManager
from alert_service.infrastructure.database import db_client
from alert_service.infrastructure.persistence import (
    CaseRepository,
    InMemoryCaseRepository,
    SQLAlchemyCaseRepository,
)
from alert_service.models import Requester, UserRole

# Global singleton in-memory repository (persists across requests)
_inmemory_repository: Optional[InMemoryCaseRepository] = None


async def get_case_repository() -> AsyncGenerator[CaseRepository, None]:
    """Dependency to get case repository.

    Returns the appropriate repository implementation based on the
    CASE_STORAGE_TYPE setting:
    - inmemory (default): InMemoryCaseRepository singleton for dev/testing
    - sql / sqlite / postgres: SQLAlchemyCaseRepository on a request session
    """
    if settings.uses_sql_storage:
        async for session in db_client.get_session():
            yield SQLAlchemyCaseRepository(session)
    else:
        global _inmemory_repository
        if _inmemory_repository is None:
            _inmemory_repository = InMemoryCaseRepository()
        yield _inmemory_repository


async def get_case_manager(
    repository: CaseRepository = Depends(get_case_repository),
) -> CaseManager:
    """Dependency to get case manager with repository."""
    return CaseManager(repository)


async def get_requester(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    x_user_name: Optional[str] = Header(None, alias="X-User-Name"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
) -> Requester:
    """Build the caller identity from X-User-* headers (set by API Gateway).

    The API Gateway validates credentials and adds X-User-* headers after
    stripping any client-provided ones. Services trust these headers without
    additional validation.

    Raises:
        HTTPException: 401 if X-User-ID is missing or X-User-Role is unknown
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header required (should be added by API Gateway)",
        )

    try:
        role = UserRole((x_user_role or UserRole.USER.value).lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown user role: {x_user_role}",
        ) from None

    return Requester(id=x_user_id, name=x_user_name or None, role=role)
