"""
Appointment status lifecycle

    pending ──► approved ──► completed
       │           │
       ├──► rejected ◄─┘
       ├──► completed
       └──► cancelled ◄── approved

rejected, completed and cancelled are terminal. Writing the current status
again is accepted as a no-op without side effects.

Which transitions notify the patient is data (TRANSITION_EFFECTS), not code.
"""

from enum import Enum

from ...exceptions import InvalidStatus, InvalidStatusTransition
from ...models import AppointmentStatus


class SideEffect(str, Enum):
    NOTIFY_PATIENT = "notify_patient"


ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {
            AppointmentStatus.APPROVED,
            AppointmentStatus.REJECTED,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
        }
    ),
    AppointmentStatus.APPROVED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.REJECTED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.REJECTED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

# Effects keyed by the status being entered. completed only unlocks reviewing.
TRANSITION_EFFECTS: dict[AppointmentStatus, frozenset[SideEffect]] = {
    AppointmentStatus.APPROVED: frozenset({SideEffect.NOTIFY_PATIENT}),
    AppointmentStatus.REJECTED: frozenset({SideEffect.NOTIFY_PATIENT}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)


def parse_status(value: str) -> AppointmentStatus:
    """Map a client-supplied status string onto the closed enumeration"""
    try:
        return AppointmentStatus(str(value).strip().lower())
    except ValueError as e:
        allowed = ", ".join(s.value for s in AppointmentStatus)
        raise InvalidStatus(f"Unknown appointment status '{value}' (expected one of: {allowed})") from e


def plan_transition(current: AppointmentStatus, requested: AppointmentStatus) -> frozenset[SideEffect]:
    """
    Validate a transition and return the side effects it triggers.

    Raises:
        InvalidStatusTransition: If the lifecycle does not allow the move
    """
    if current == requested:
        return frozenset()

    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(current.value, requested.value)

    return TRANSITION_EFFECTS.get(requested, frozenset())
