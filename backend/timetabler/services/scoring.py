from __future__ import annotations

from collections import Counter
import logging
from statistics import pstdev
from typing import Sequence

from timetabler.schemas.entities import SchedulingInput
from timetabler.schemas.timetable import ScheduleEntry, Scores

logger = logging.getLogger(__name__)

RESOURCE_KINDS = ("faculty", "room", "batch")


def count_resource_clashes(entries: Sequence[ScheduleEntry]) -> int:
    """Number of (day, slot, resource) triples held by more than one entry."""
    usage: Counter[tuple[str, str, str, str]] = Counter()
    for entry in entries:
        for kind in RESOURCE_KINDS:
            usage[(entry.day, entry.time, kind, getattr(entry, kind))] += 1
    return sum(1 for count in usage.values() if count > 1)


class Scorer:
    def __init__(self, scheduling_input: SchedulingInput) -> None:
        self.input = scheduling_input
        fixed_cells = {(item.day, item.time) for item in scheduling_input.fixed_slots}
        self.open_cells = [cell for cell in scheduling_input.grid.cells if cell not in fixed_cells]

    def utilization(self, entries: Sequence[ScheduleEntry]) -> float:
        """Share of bookable room-cells that hold a class, as a percentage."""
        capacity = len(self.open_cells) * len(self.input.classrooms)
        if capacity <= 0:
            return 0.0
        used = len({(entry.day, entry.time, entry.room) for entry in entries})
        return round(min(100.0, 100.0 * used / capacity), 1)

    def balance(self, entries: Sequence[ScheduleEntry]) -> float:
        """100 minus the spread of faculty load ratios (sessions / weekly maximum)."""
        subject_codes = {subject.subject_code for subject in self.input.subjects}
        assignable = [
            member
            for member in self.input.faculty
            if any(code in subject_codes for code in member.subjects)
        ]
        if not assignable:
            return 100.0
        sessions = Counter(entry.faculty for entry in entries)
        ratios = [sessions[member.name] / member.max_classes_per_week for member in assignable]
        return round(100.0 * max(0.0, 1.0 - pstdev(ratios)), 1)

    def fulfillment(self, entries: Sequence[ScheduleEntry]) -> float:
        required = sum(subject.classes_required_per_week for subject in self.input.subjects) * len(
            self.input.student_batches
        )
        if required <= 0:
            return 100.0
        return round(min(100.0, 100.0 * len(entries) / required), 1)

    def score(self, entries: Sequence[ScheduleEntry]) -> Scores:
        scores = Scores(
            utilization=self.utilization(entries),
            balance=self.balance(entries),
            conflicts=count_resource_clashes(entries),
            fulfillment=self.fulfillment(entries),
        )
        logger.debug(
            "Scored timetable entries=%s utilization=%s balance=%s conflicts=%s fulfillment=%s",
            len(entries),
            scores.utilization,
            scores.balance,
            scores.conflicts,
            scores.fulfillment,
        )
        return scores
