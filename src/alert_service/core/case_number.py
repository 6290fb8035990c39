"""Human-readable case numbers: ``MA-YYYYMMDD-NNN``.

``NNN`` counts the cases created on the same UTC calendar day. The count and
the insert are not isolated, so two concurrent creations can compute the same
number; the unique constraint on ``case_number`` catches that and the caller
retries with :func:`fallback_case_number`.
"""

import logging
import random
import string
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple

from alert_service.infrastructure.persistence import CaseRepository, RepositoryException

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def format_case_number(day: date, sequence: int, prefix: str = "MA") -> str:
    return f"{prefix}-{day.strftime('%Y%m%d')}-{sequence:03d}"


def fallback_case_number(now: datetime, prefix: str = "MA") -> str:
    """Timestamp plus random suffix, used when the daily count is unavailable."""
    millis = int(now.timestamp() * 1000)
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"{prefix}-{millis}-{suffix}"


def day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Return the ``[start, end)`` UTC window of the day containing ``now``."""
    day = now.astimezone(timezone.utc).date()
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class CaseNumberAllocator:
    """Derives the next case number from the repository's same-day count."""

    def __init__(self, repository: CaseRepository, prefix: str = "MA"):
        self.repository = repository
        self.prefix = prefix

    async def allocate(self, now: datetime) -> str:
        start, end = day_bounds(now)
        try:
            todays_count = await self.repository.count_created_between(start, end)
        except RepositoryException as e:
            logger.error(f"Error generating case number, using fallback: {e}")
            return self.fallback(now)

        return format_case_number(start.date(), todays_count + 1, self.prefix)

    def fallback(self, now: datetime) -> str:
        return fallback_case_number(now, self.prefix)
