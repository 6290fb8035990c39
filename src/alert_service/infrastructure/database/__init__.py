"""Database infrastructure package."""

from .client import db_client, DatabaseClient
from .models import Base, CaseDB, CaseNoteDB

__all__ = ["db_client", "DatabaseClient", "Base", "CaseDB", "CaseNoteDB"]
