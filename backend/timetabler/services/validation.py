from __future__ import annotations

from collections import Counter
import logging
from typing import Iterable

from timetabler.core.exceptions import InvalidInputError
from timetabler.schemas.entities import SchedulingInput

logger = logging.getLogger(__name__)


def _duplicates(values: Iterable[str]) -> list[str]:
    counts = Counter(values)
    return sorted(value for value, count in counts.items() if count > 1)


def validate_scheduling_input(scheduling_input: SchedulingInput) -> None:
    """Reject inputs the engine cannot schedule against.

    Field-level bounds are already enforced by the schemas; this checks the
    cross-entity rules. Classroom names, faculty names and batch codes are the
    keys the availability tracker records, and subject codes are the key used
    for faculty eligibility, so each must be unique within a run.
    """
    problems: list[str] = []
    grid = scheduling_input.grid

    if not grid.days:
        problems.append("Scheduling grid has no days")
    if not grid.time_slots:
        problems.append("Scheduling grid has no time slots")
    for label, values in (
        ("day", grid.days),
        ("time slot", grid.time_slots),
        ("classroom name", (room.name for room in scheduling_input.classrooms)),
        ("faculty name", (member.name for member in scheduling_input.faculty)),
        ("subject code", (subject.subject_code for subject in scheduling_input.subjects)),
        ("batch code", (batch.batch_code for batch in scheduling_input.student_batches)),
    ):
        for value in _duplicates(values):
            problems.append(f"Duplicate {label}: {value}")

    for member in scheduling_input.faculty:
        if not member.subjects:
            problems.append(f"Faculty {member.name} has no teachable subjects")

    if problems:
        logger.warning("SCHEDULING INPUT REJECTED | problems=%s", len(problems))
        raise InvalidInputError("Scheduling input is invalid", problems=problems)

    known_codes = {subject.subject_code for subject in scheduling_input.subjects}
    for member in scheduling_input.faculty:
        unknown = [code for code in member.subjects if code not in known_codes]
        if unknown:
            logger.debug("Faculty %s lists undefined subject codes %s", member.name, unknown)
