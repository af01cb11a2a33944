from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
import logging
from typing import Iterable, Sequence

from timetabler.core.exceptions import SchedulerInvariantError
from timetabler.schemas.entities import FixedSlot

logger = logging.getLogger(__name__)

Cell = tuple[str, str]


@dataclass
class CellOccupancy:
    faculty: set[str] = field(default_factory=set)
    rooms: set[str] = field(default_factory=set)
    batches: set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not (self.faculty or self.rooms or self.batches)


class AvailabilityTracker:
    """Per-cell occupancy of faculty, rooms and batches for one generation run.

    A tracker is owned by exactly one placement run and never shared.
    """

    def __init__(
        self,
        days: Sequence[str],
        time_slots: Sequence[str],
        fixed_slots: Iterable[FixedSlot] = (),
    ) -> None:
        self.days = tuple(days)
        self.time_slots = tuple(time_slots)
        self._cells: dict[Cell, CellOccupancy] = {}
        self._faculty_days: dict[tuple[str, str], int] = defaultdict(int)
        self._room_days: dict[tuple[str, str], int] = defaultdict(int)
        self._batch_days: dict[tuple[str, str], int] = defaultdict(int)
        self._faculty_week: Counter[str] = Counter()
        self.blocked: set[Cell] = set()
        self.ignored_fixed_slots: list[FixedSlot] = []
        self.initialize(fixed_slots)

    def reset(self) -> None:
        """Drop every recorded placement, keeping fixed-slot blocks."""
        self._cells = {(day, slot): CellOccupancy() for day in self.days for slot in self.time_slots}
        self._faculty_days.clear()
        self._room_days.clear()
        self._batch_days.clear()
        self._faculty_week.clear()

    def initialize(self, fixed_slots: Iterable[FixedSlot]) -> None:
        """Reset occupancy and block every cell that matches a fixed slot exactly."""
        self.reset()
        self.blocked = set()
        self.ignored_fixed_slots = []
        for fixed in fixed_slots:
            cell = (fixed.day, fixed.time)
            if cell in self._cells:
                self.blocked.add(cell)
                continue
            # Only exact day/label matches block anything.
            self.ignored_fixed_slots.append(fixed)
            logger.warning(
                "FIXED SLOT IGNORED | event=%s | day=%s | time=%s | reason=no matching grid cell",
                fixed.event_name,
                fixed.day,
                fixed.time,
            )

    def is_blocked(self, day: str, slot: str) -> bool:
        return (day, slot) in self.blocked

    def _cell(self, day: str, slot: str) -> CellOccupancy:
        try:
            return self._cells[(day, slot)]
        except KeyError:
            raise SchedulerInvariantError(
                f"Unknown grid cell {day} {slot}",
                details={"day": day, "time": slot},
            ) from None

    def is_cell_empty(self, day: str, slot: str) -> bool:
        return self._cell(day, slot).is_empty

    def is_faculty_free(self, day: str, slot: str, faculty_name: str) -> bool:
        return faculty_name not in self._cell(day, slot).faculty

    def is_room_free(self, day: str, slot: str, room_name: str) -> bool:
        return room_name not in self._cell(day, slot).rooms

    def is_batch_free(self, day: str, slot: str, batch_code: str) -> bool:
        return batch_code not in self._cell(day, slot).batches

    def is_free(self, day: str, slot: str, faculty_name: str, room_name: str, batch_code: str) -> bool:
        if self.is_blocked(day, slot):
            return False
        occupancy = self._cell(day, slot)
        return (
            faculty_name not in occupancy.faculty
            and room_name not in occupancy.rooms
            and batch_code not in occupancy.batches
        )

    def faculty_used_on_day(self, day: str, faculty_name: str) -> bool:
        return self._faculty_days[(day, faculty_name)] > 0

    def room_used_on_day(self, day: str, room_name: str) -> bool:
        return self._room_days[(day, room_name)] > 0

    def batch_used_on_day(self, day: str, batch_code: str) -> bool:
        return self._batch_days[(day, batch_code)] > 0

    def faculty_day_load(self, day: str, faculty_name: str) -> int:
        return self._faculty_days[(day, faculty_name)]

    def faculty_week_load(self, faculty_name: str) -> int:
        return self._faculty_week[faculty_name]

    def occupy(self, day: str, slot: str, faculty_name: str, room_name: str, batch_code: str) -> None:
        if not self.is_free(day, slot, faculty_name, room_name, batch_code):
            raise SchedulerInvariantError(
                "Attempted to occupy an unavailable grid cell",
                details={
                    "day": day,
                    "time": slot,
                    "faculty": faculty_name,
                    "room": room_name,
                    "batch": batch_code,
                },
            )
        occupancy = self._cells[(day, slot)]
        occupancy.faculty.add(faculty_name)
        occupancy.rooms.add(room_name)
        occupancy.batches.add(batch_code)
        self._faculty_days[(day, faculty_name)] += 1
        self._room_days[(day, room_name)] += 1
        self._batch_days[(day, batch_code)] += 1
        self._faculty_week[faculty_name] += 1

    def unoccupy(self, day: str, slot: str, faculty_name: str, room_name: str, batch_code: str) -> None:
        occupancy = self._cell(day, slot)
        if (
            faculty_name not in occupancy.faculty
            or room_name not in occupancy.rooms
            or batch_code not in occupancy.batches
        ):
            raise SchedulerInvariantError(
                "Attempted to release a placement that was never recorded",
                details={
                    "day": day,
                    "time": slot,
                    "faculty": faculty_name,
                    "room": room_name,
                    "batch": batch_code,
                },
            )
        occupancy.faculty.discard(faculty_name)
        occupancy.rooms.discard(room_name)
        occupancy.batches.discard(batch_code)
        self._faculty_days[(day, faculty_name)] -= 1
        self._room_days[(day, room_name)] -= 1
        self._batch_days[(day, batch_code)] -= 1
        self._faculty_week[faculty_name] -= 1
