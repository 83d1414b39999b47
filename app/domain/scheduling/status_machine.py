"""Appointment status transitions"""

from typing import Optional

from ...models import AppointmentStatus

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset] = {
    AppointmentStatus.PENDING: frozenset(
        {
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
        }
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.IN_PROGRESS, AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.IN_PROGRESS: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


# Targets reachable only through cancel_appointment / complete_appointment
DEDICATED_OPERATIONS = {
    AppointmentStatus.CANCELLED: "cancel",
    AppointmentStatus.COMPLETED: "complete",
}


def can_transition(current: str, target: str) -> bool:
    return AppointmentStatus(target) in ALLOWED_TRANSITIONS[AppointmentStatus(current)]


def cancel_rejection(current: str) -> Optional[str]:
    """Reason a cancel is refused from `current`, or None when allowed"""
    if current == AppointmentStatus.CANCELLED:
        return "Appointment is already cancelled"
    if current == AppointmentStatus.COMPLETED:
        return "Cannot cancel a completed appointment"
    return None


def complete_rejection(current: str) -> Optional[str]:
    if current == AppointmentStatus.COMPLETED:
        return "Appointment is already completed"
    if current == AppointmentStatus.CANCELLED:
        return "Cannot complete a cancelled appointment"
    return None


def transition_rejection(current: str, target: str) -> Optional[str]:
    """Reason a plain status change is refused, or None when allowed.

    COMPLETED and CANCELLED are only reachable through their own operations.
    """
    status = AppointmentStatus(current)
    if not ALLOWED_TRANSITIONS[status]:
        return f"Appointment is in a terminal state ({status.value})"
    operation = DEDICATED_OPERATIONS.get(AppointmentStatus(target))
    if operation:
        return f"Use the {operation} operation to set status {AppointmentStatus(target).value}"
    if not can_transition(current, target):
        return f"Cannot change status from {status.value} to {AppointmentStatus(target).value}"
    return None
