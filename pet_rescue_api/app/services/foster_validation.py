"""
Date checks for foster assignments.

A pet can be fostered many times, but never by two fosters at once: the
``[start, end)`` intervals of all fosters of one pet must be pairwise
disjoint, an open-ended foster (no end date) reaching to infinity.  The
checks are pure and run before every foster insert or update.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

MIN_FOSTER_DAYS = 14


class FosterRejection(str, Enum):
    END_BEFORE_START = "End Date must be greater than Start Date."
    TOO_SHORT = f"Foster period must be at least {MIN_FOSTER_DAYS} Days."
    OPEN_ENDED_CONFLICT = "(Open-ended Foster) Conflicting Foster interval for the same Pet."
    CONFLICT = "Conflicting Foster interval for the same Pet."


@dataclass(frozen=True)
class FosterCandidate:
    """Date range of a foster, either proposed or already stored."""

    pet_id: Optional[int]
    start_date: date
    end_date: Optional[date] = None
    id: Optional[int] = None

    @property
    def open_ended(self) -> bool:
        return self.end_date is None


@dataclass(frozen=True)
class FosterValidationResult:
    rejection: Optional[FosterRejection] = None

    @property
    def valid(self) -> bool:
        return self.rejection is None

    @property
    def message(self) -> Optional[str]:
        return self.rejection.value if self.rejection else None


def validate_foster_dates(
    candidate: FosterCandidate,
    existing: Iterable[FosterCandidate],
    exclude_id: Optional[int] = None,
) -> FosterValidationResult:
    """Check ``candidate`` against the other fosters of the same pet.

    The first failing rule wins.  Records whose id equals ``exclude_id``
    are skipped, which is how an edited foster avoids clashing with its
    own stored version.

    Parameters
    ----------
    candidate : FosterCandidate
        The proposed date range.
    existing : Iterable[FosterCandidate]
        Stored fosters of the candidate's pet.
    exclude_id : Optional[int]
        Id of the foster being edited, if any.

    Returns
    -------
    FosterValidationResult
        ``valid`` is true when the candidate may be written.
    """
    start, end = candidate.start_date, candidate.end_date
    if end is not None:
        if end <= start:
            return FosterValidationResult(FosterRejection.END_BEFORE_START)
        if end < start + timedelta(days=MIN_FOSTER_DAYS):
            return FosterValidationResult(FosterRejection.TOO_SHORT)

    others = [
        record
        for record in existing
        if exclude_id is None or record.id != exclude_id
    ]

    for record in others:
        if record.open_ended and (end is None or record.start_date < end):
            return FosterValidationResult(FosterRejection.OPEN_ENDED_CONFLICT)

    if end is None:
        for record in others:
            if record.end_date > start:
                return FosterValidationResult(FosterRejection.OPEN_ENDED_CONFLICT)
        return FosterValidationResult()

    for record in others:
        if not record.open_ended and record.end_date > start and record.start_date < end:
            return FosterValidationResult(FosterRejection.CONFLICT)
    return FosterValidationResult()
