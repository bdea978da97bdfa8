"""
Loan application lifecycle: DRAFT -> SUBMITTED -> CANCELLED, DRAFT -> CANCELLED.
No path leads back to DRAFT; CANCELLED is terminal.
Pure rules only; the persistence gateway turns them into conditional updates.
"""
from __future__ import annotations

from enum import Enum


class ApplicationStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    CANCELLED = "CANCELLED"


INITIAL_STATUS = ApplicationStatus.DRAFT

# target status -> statuses it may be reached from
_SOURCES: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.DRAFT: frozenset(),
    ApplicationStatus.SUBMITTED: frozenset({ApplicationStatus.DRAFT}),
    ApplicationStatus.CANCELLED: frozenset({ApplicationStatus.DRAFT, ApplicationStatus.SUBMITTED}),
}


def source_states(target: ApplicationStatus) -> frozenset[ApplicationStatus]:
    """Statuses from which `target` is a legal transition."""
    return _SOURCES[ApplicationStatus(target)]


def is_idempotent_repeat(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    """Repeating a cancel on a cancelled application succeeds without change."""
    return ApplicationStatus(current) == ApplicationStatus(target) == ApplicationStatus.CANCELLED


def rejection_reason(
    application_id: str,
    current: ApplicationStatus | None,
    target: ApplicationStatus,
) -> str:
    """Explain why moving `application_id` from `current` to `target` was refused."""
    target = ApplicationStatus(target)
    if current is None:
        return f"Loan application '{application_id}' not found"
    current = ApplicationStatus(current)
    allowed = ", ".join(sorted(s.value for s in source_states(target))) or "none"
    return (
        f"Loan application '{application_id}' is {current.value}; "
        f"{target.value} requires status {allowed}"
    )
