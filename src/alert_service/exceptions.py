"""Exception hierarchy for the case lifecycle.

Every error carries the HTTP status code it is surfaced with. The API layer
turns them into the ``{success: false, message, timestamp}`` envelope.
"""

from typing import List, Optional


class CaseServiceError(Exception):
    """Base class for errors raised by the case service."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CaseServiceError):
    """Required input fields are missing or malformed."""

    status_code = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []

    @classmethod
    def missing_fields(cls, fields: List[str]) -> "ValidationError":
        return cls(f"Missing required fields: {', '.join(fields)}", fields)


class MalformedIdError(CaseServiceError):
    """Identifier does not have the 24-character hexadecimal shape."""

    status_code = 400

    def __init__(self, case_id: str):
        super().__init__("Invalid case ID format")
        self.case_id = case_id


class InvalidStatusError(CaseServiceError):
    """Requested status is not one of the declared case statuses."""

    status_code = 400

    def __init__(self, status: object, allowed: List[str]):
        super().__init__(f"Invalid status. Must be one of: {', '.join(allowed)}")
        self.status = status
        self.allowed = allowed


class NotFoundError(CaseServiceError):
    status_code = 404

    def __init__(self, message: str = "Case not found"):
        super().__init__(message)


class ForbiddenError(CaseServiceError):
    """Caller is authenticated but may not act on this case."""

    status_code = 403


class InternalError(CaseServiceError):
    """Persistence or infrastructure failure."""

    status_code = 500
