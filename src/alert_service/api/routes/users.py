"""User API routes."""

from fastapi import APIRouter, Depends

from alert_service.api.dependencies import get_case_manager, get_requester
from alert_service.core.case_manager import CaseManager
from alert_service.models import ApiResponse, OwnerStatisticsResponse, Requester

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get(
    "/stats",
    response_model=ApiResponse[OwnerStatisticsResponse],
    summary="Get my case statistics",
    description="""
Returns counts over the cases reported by the authenticated user.

**Response Example**:
```json
{
  "success": true,
  "data": {
    "total_cases": 3,
    "active_cases": 2,
    "found_cases": 1,
    "closed_cases": 0,
    "success_rate": 33.3
  }
}
```

**Authorization**: Requires X-User-ID header from API Gateway
    """,
    responses={
        200: {"description": "Statistics returned successfully"},
        401: {"description": "Unauthorized - missing X-User-ID header"},
        500: {"description": "Internal server error"}
    }
)
async def get_user_statistics(
    requester: Requester = Depends(get_requester),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Get statistics for the caller's cases."""
    stats = await case_manager.get_owner_statistics(requester.id)
    return ApiResponse[OwnerStatisticsResponse](data=OwnerStatisticsResponse(**stats))
