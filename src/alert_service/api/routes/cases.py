"""Case API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from alert_service.api.dependencies import get_case_manager, get_requester
from alert_service.config import settings
from alert_service.core.case_manager import CaseManager, PublicCaseFilter
from alert_service.models import (
    ApiResponse,
    CaseCreateRequest,
    CaseListResponse,
    CaseResponse,
    CaseStatisticsResponse,
    CaseStatusUpdateRequest,
    DismissResponse,
    OwnedCasesResponse,
    PaginationMeta,
    Requester,
    StatusChangeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cases", tags=["cases"])


# =============================================================================
# Statistics
# =============================================================================

@router.get(
    "/stats/summary",
    response_model=ApiResponse[CaseStatisticsResponse],
    summary="Get public case statistics",
    description="""
Returns summary counts over publicly visible cases.

**Counts**:
- `active_cases`: active, public and not withdrawn
- `found_cases`: public cases whose person was found
- `closed_cases`: public cases closed without a find
- `total_cases`: public, active and not dismissed
- `recent_cases`: public, active, created in the last 24 hours
- `success_rate`: found / total x 100, one decimal (0 when total is 0)

**Response Example**:
```json
{
  "success": true,
  "data": {
    "active_cases": 12,
    "found_cases": 4,
    "closed_cases": 1,
    "total_cases": 12,
    "recent_cases": 2,
    "success_rate": 33.3
  },
  "timestamp": "2025-07-15T10:30:00Z"
}
```

**Authorization**: None required (public endpoint)
    """,
    responses={
        200: {"description": "Statistics returned successfully"},
        500: {"description": "Internal server error"}
    }
)
async def get_case_statistics(
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Get summary statistics over public cases."""
    stats = await case_manager.get_case_statistics()
    return ApiResponse[CaseStatisticsResponse](data=CaseStatisticsResponse(**stats))


# =============================================================================
# Listing
# =============================================================================

@router.get(
    "/my",
    response_model=OwnedCasesResponse,
    summary="List my cases",
    description="""
Lists the cases reported by the authenticated user, newest first.

Dismissed cases are withdrawn from this list.

**Response Example**:
```json
{
  "success": true,
  "data": [{"id": "64b7f0c2a1e4d3b2c1a09f8e", "case_number": "MA-20250715-003", "status": "active"}],
  "count": 1,
  "user_id": "user_123",
  "timestamp": "2025-07-15T10:30:00Z"
}
```

**Authorization**: Requires X-User-ID header from API Gateway
    """,
    responses={
        200: {"description": "Owned cases returned successfully"},
        401: {"description": "Unauthorized - missing X-User-ID header"},
        500: {"description": "Internal server error"}
    }
)
async def list_my_cases(
    requester: Requester = Depends(get_requester),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """List cases owned by the caller."""
    cases = await case_manager.list_owned_cases(requester.id)

    return OwnedCasesResponse(
        data=[CaseResponse.from_case(case) for case in cases],
        count=len(cases),
        user_id=requester.id,
    )


@router.get(
    "",
    response_model=CaseListResponse,
    summary="List public cases",
    description="""
Lists public, active cases with pagination and optional filters.

**Query Parameters**:
- `page`: 1-based page number (default 1)
- `limit`: page size (default 20, max 100)
- `status`: case status filter (default `active`; `all` disables the filter)
- `search`: case-insensitive text matched against the missing person's name,
  the case number and the last known city

**Request Example**:
```
GET /api/cases?status=all&search=springfield&page=1&limit=10
```

**Response Example**:
```json
{
  "success": true,
  "data": [...],
  "pagination": {"page": 1, "limit": 10, "total": 3, "pages": 1},
  "timestamp": "2025-07-15T10:30:00Z"
}
```

**Authorization**: None required (public endpoint)
    """,
    responses={
        200: {"description": "Cases returned successfully"},
        400: {"description": "Invalid status filter or pagination parameters"},
        500: {"description": "Internal server error"}
    }
)
async def list_cases(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Maximum number of cases to return",
    ),
    status_filter: str = Query("active", alias="status", description="Status filter or 'all'"),
    search: Optional[str] = Query(None, description="Search name, case number or city"),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """List public cases."""
    result = await case_manager.list_public_cases(
        PublicCaseFilter(status=status_filter, search=search, page=page, limit=limit)
    )

    return CaseListResponse(
        data=[CaseResponse.from_case(case, include_private_notes=False) for case in result.cases],
        pagination=PaginationMeta(
            page=result.page,
            limit=result.limit,
            total=result.total,
            pages=result.pages,
        ),
    )


# =============================================================================
# Lifecycle
# =============================================================================

@router.post(
    "",
    response_model=ApiResponse[CaseResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Report a missing person",
    description="""
Creates a new case owned by the authenticated user.

**Workflow**:
1. Required fields are checked; every missing one is reported at once
2. A case number `MA-YYYYMMDD-NNN` is assigned from the same-day count
3. The case starts `active`, public and visible with no notes

**Required Fields**: `missing_person.name`, `missing_person.age`,
`missing_person.gender`, `description`, `last_known_location.address`,
`last_known_location.city`, `last_known_location.state`, `last_seen_date`,
`contact_info.primary_contact.name`, `contact_info.primary_contact.phone`

**Request Body Example**:
```json
{
  "description": "Left home after school and did not return",
  "missing_person": {"name": "Jane Doe", "age": 14, "gender": "female"},
  "last_known_location": {"address": "12 Elm St", "city": "Springfield", "state": "IL"},
  "last_seen_date": "2025-07-14",
  "contact_info": {"primary_contact": {"name": "John Doe", "phone": "555-0100"}}
}
```

**Authorization**: Requires X-User-ID header from API Gateway
    """,
    responses={
        201: {"description": "Case created successfully"},
        400: {"description": "Missing required fields or invalid values"},
        401: {"description": "Unauthorized - missing X-User-ID header"},
        500: {"description": "Internal server error - database operation failed"}
    }
)
async def create_case(
    request: CaseCreateRequest,
    requester: Requester = Depends(get_requester),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Create a new case.

    Requires X-User-ID header from gateway.
    """
    case = await case_manager.create_case(requester.id, request)

    return ApiResponse[CaseResponse](
        message="Case created successfully",
        data=CaseResponse.from_case(case),
    )


@router.put(
    "/{case_id}/status",
    response_model=ApiResponse[StatusChangeResponse],
    summary="Update case status",
    description="""
Moves a case to a new status and records the change in the case notes.

**Status Values**: active, found, closed, dismissed

**Behavior**:
- Only the case reporter or an admin may update the status
- Moving to `dismissed` hides the case from public listings
- A dismissed case can only be moved again by an admin
- A note is added when `notes` is given or the status changes; without
  `notes` it reads `Status changed from {old} to {new} by {name}`

**Request Example**:
```json
{"status": "found", "notes": "seen at shelter"}
```

**Response Example**:
```json
{
  "success": true,
  "message": "Case status updated from active to found",
  "data": {
    "case_id": "64b7f0c2a1e4d3b2c1a09f8e",
    "case_number": "MA-20250715-003",
    "old_status": "active",
    "new_status": "found",
    "updated_at": "2025-07-15T12:00:00Z"
  }
}
```

**Authorization**: Requires X-User-ID header; owner or admin role
    """,
    responses={
        200: {"description": "Status updated successfully"},
        400: {"description": "Invalid status or malformed case ID"},
        401: {"description": "Unauthorized - missing X-User-ID header"},
        403: {"description": "Forbidden - caller is not the reporter or an admin"},
        404: {"description": "Case not found"},
        500: {"description": "Internal server error"}
    }
)
async def update_case_status(
    case_id: str,
    request: CaseStatusUpdateRequest,
    requester: Requester = Depends(get_requester),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Update case status."""
    change = await case_manager.update_status(
        case_id, requester, request.status, notes=request.notes
    )

    return ApiResponse[StatusChangeResponse](
        message=f"Case status updated from {change.old_status.value} to {change.new_status.value}",
        data=StatusChangeResponse(
            case_id=change.case.id,
            case_number=change.case.case_number,
            old_status=change.old_status.value,
            new_status=change.new_status.value,
            updated_at=change.case.updated_at,
        ),
    )


@router.delete(
    "/{case_id}/dismiss",
    response_model=ApiResponse[DismissResponse],
    summary="Dismiss case",
    description="""
Withdraws a case from public view. This is a soft delete.

**Behavior**:
- Status becomes `dismissed`; the case is no longer public or active
- A private note `Case dismissed by {name} at {timestamp}` is appended
- The case and its history are kept; nothing is deleted
- Dismissing an already dismissed case succeeds and adds another note

**Authorization**: Requires X-User-ID header; owner or admin role
    """,
    responses={
        200: {"description": "Case dismissed successfully"},
        400: {"description": "Malformed case ID"},
        401: {"description": "Unauthorized - missing X-User-ID header"},
        403: {"description": "Forbidden - caller is not the reporter or an admin"},
        404: {"description": "Case not found"},
        500: {"description": "Internal server error"}
    }
)
async def dismiss_case(
    case_id: str,
    requester: Requester = Depends(get_requester),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Dismiss a case."""
    result = await case_manager.dismiss_case(case_id, requester)

    return ApiResponse[DismissResponse](
        message="Case dismissed successfully",
        data=DismissResponse(case_number=result.case_number, dismissed_at=result.dismissed_at),
    )


@router.get(
    "/{case_id}",
    response_model=ApiResponse[CaseResponse],
    summary="Get case by ID",
    description="""
Retrieves a single case for public display.

**Access Control**:
- Case ID must be a 24-character hexadecimal string (400 otherwise)
- Cases that are neither public nor active return 403
- Private notes (such as dismissal notes) are omitted

**Authorization**: None required (public endpoint)
    """,
    responses={
        200: {"description": "Case found and returned successfully"},
        400: {"description": "Malformed case ID"},
        403: {"description": "Case is not publicly accessible"},
        404: {"description": "Case not found"},
        500: {"description": "Internal server error"}
    }
)
async def get_case(
    case_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Get a case by ID."""
    case = await case_manager.get_public_case(case_id)

    return ApiResponse[CaseResponse](data=CaseResponse.from_case(case, include_private_notes=False))
