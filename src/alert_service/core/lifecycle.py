"""Case status transition table.

Each status declares the statuses it may move to and the visibility it forces
on the case when entered. Adding a status means adding a row here.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from alert_service.models.case import Case, CaseStatus

ALL_STATUSES: FrozenSet[CaseStatus] = frozenset(CaseStatus)


@dataclass(frozen=True)
class Visibility:
    is_public: bool
    is_active: bool


@dataclass(frozen=True)
class Transition:
    allowed_targets: FrozenSet[CaseStatus]
    visibility_override: Optional[Visibility] = None


# Flat state set: every status is reachable from every other one.
TRANSITIONS: Dict[CaseStatus, Transition] = {
    CaseStatus.ACTIVE: Transition(ALL_STATUSES),
    CaseStatus.FOUND: Transition(ALL_STATUSES),
    CaseStatus.CLOSED: Transition(ALL_STATUSES),
    CaseStatus.DISMISSED: Transition(
        ALL_STATUSES,
        visibility_override=Visibility(is_public=False, is_active=False),
    ),
}


def can_transition(from_status: CaseStatus, to_status: CaseStatus) -> bool:
    return to_status in TRANSITIONS[from_status].allowed_targets


def apply_transition(case: Case, to_status: CaseStatus) -> CaseStatus:
    """Move ``case`` to ``to_status`` and apply the entered status' side effects.

    Returns:
        The status the case had before the transition
    """
    old_status = case.status
    case.status = to_status

    override = TRANSITIONS[to_status].visibility_override
    if override is not None:
        case.is_public = override.is_public
        case.is_active = override.is_active

    return old_status
