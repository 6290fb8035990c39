"""Identity of the caller, as asserted by the API gateway."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    MODERATOR = "moderator"


class Requester(BaseModel):
    """Authenticated caller. Credentials are verified upstream, never here."""

    id: str
    name: Optional[str] = None
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.name or "User"
