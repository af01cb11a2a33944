from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging
import random
from typing import Iterator

from timetabler.schemas.entities import Classroom, Faculty, SchedulingInput, StudentBatch, Subject
from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.timetable import ScheduleEntry, UnmetDemand
from timetabler.services.availability import AvailabilityTracker, Cell

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Demand:
    batch: StudentBatch
    subject: Subject

    @property
    def key(self) -> tuple[str, str]:
        return (self.batch.batch_code, self.subject.subject_code)

    @property
    def required(self) -> int:
        return self.subject.classes_required_per_week


@dataclass(frozen=True)
class Placement:
    demand_index: int
    cell_index: int
    day: str
    slot: str
    faculty: Faculty
    room: Classroom


@dataclass
class PlacementResult:
    entries: list[ScheduleEntry]
    demands: list[Demand]
    placed_counts: dict[tuple[str, str], int]
    tracker: AvailabilityTracker
    search_steps: int = 0
    search_exhausted: bool = False

    @property
    def required_sessions(self) -> int:
        return sum(demand.required for demand in self.demands)

    @property
    def placed_sessions(self) -> int:
        return len(self.entries)

    @property
    def unmet_demands(self) -> list[UnmetDemand]:
        unmet: list[UnmetDemand] = []
        for demand in self.demands:
            placed = self.placed_counts.get(demand.key, 0)
            if placed < demand.required:
                unmet.append(
                    UnmetDemand(
                        batch_code=demand.batch.batch_code,
                        subject_code=demand.subject.subject_code,
                        required=demand.required,
                        placed=placed,
                    )
                )
        return unmet


class PlacementEngine:
    """Places every (batch, subject) demand into the weekly grid for one seed.

    Under-placement is never an error: demands that cannot be fully satisfied
    keep whatever sessions fit and are reported through ``unmet_demands``.
    """

    def __init__(
        self,
        scheduling_input: SchedulingInput,
        settings: GenerationSettings,
        *,
        seed: int | None = None,
    ) -> None:
        self.input = scheduling_input
        self.settings = settings
        self.seed = seed
        self.random = random.Random(seed)

        self.days = list(scheduling_input.grid.days)
        self.time_slots = list(scheduling_input.grid.time_slots)
        self.day_index = {day: idx for idx, day in enumerate(self.days)}
        self.slot_index = {slot: idx for idx, slot in enumerate(self.time_slots)}

        self.faculty_by_code: dict[str, list[Faculty]] = defaultdict(list)
        for member in scheduling_input.faculty:
            for code in member.subjects:
                self.faculty_by_code[code].append(member)

    # ------------------------------------------------------------------ setup

    def _build_demands(self) -> list[Demand]:
        batches = list(self.input.student_batches)
        self.random.shuffle(batches)
        demands: list[Demand] = []
        for batch in batches:
            subjects = list(self.input.subjects)
            self.random.shuffle(subjects)
            demands.extend(Demand(batch=batch, subject=subject) for subject in subjects)
        return demands

    def _cell_order(self) -> list[Cell]:
        days = list(self.days)
        self.random.shuffle(days)
        slots_by_day: list[list[str]] = []
        for _ in days:
            slots = list(self.time_slots)
            self.random.shuffle(slots)
            slots_by_day.append(slots)

        if self.settings.exclusivity == "slot" and self.settings.spread_across_days:
            # Interleave days so consecutive sessions of one demand fall on different days.
            return [
                (day, slots_by_day[day_pos][slot_pos])
                for slot_pos in range(len(self.time_slots))
                for day_pos, day in enumerate(days)
            ]
        return [(day, slot) for day, slots in zip(days, slots_by_day) for slot in slots]

    def _eligible_faculty(self, subject: Subject) -> list[Faculty]:
        return self.faculty_by_code.get(subject.subject_code, [])

    def _eligible_rooms(self, subject: Subject, batch: StudentBatch) -> list[Classroom]:
        return [
            room
            for room in self.input.classrooms
            if room.type == subject.type and room.capacity >= batch.strength
        ]

    def _static_option_count(self, demand: Demand) -> int:
        return len(self._eligible_faculty(demand.subject)) * len(
            self._eligible_rooms(demand.subject, demand.batch)
        )

    # ------------------------------------------------------------ availability

    def _faculty_available(self, faculty: Faculty, day: str, slot: str, tracker: AvailabilityTracker) -> bool:
        if self.settings.exclusivity == "day":
            if tracker.faculty_used_on_day(day, faculty.name):
                return False
        elif not tracker.is_faculty_free(day, slot, faculty.name):
            return False
        if self.settings.enforce_faculty_load_limits:
            if tracker.faculty_day_load(day, faculty.name) >= faculty.max_classes_per_day:
                return False
            if tracker.faculty_week_load(faculty.name) >= faculty.max_classes_per_week:
                return False
        return True

    def _room_available(self, room: Classroom, day: str, slot: str, tracker: AvailabilityTracker) -> bool:
        if self.settings.exclusivity == "day":
            return not tracker.room_used_on_day(day, room.name)
        return tracker.is_room_free(day, slot, room.name)

    def _cell_open_for(self, batch: StudentBatch, day: str, slot: str, tracker: AvailabilityTracker) -> bool:
        if tracker.is_blocked(day, slot):
            return False
        if self.settings.exclusivity == "day":
            # Legacy mode also keeps a single entry per cell.
            return tracker.is_cell_empty(day, slot) and not tracker.batch_used_on_day(day, batch.batch_code)
        return tracker.is_batch_free(day, slot, batch.batch_code)

    def _candidate_placements(
        self,
        demand_index: int,
        demand: Demand,
        cells: list[Cell],
        tracker: AvailabilityTracker,
        *,
        start: int = 0,
    ) -> Iterator[Placement]:
        faculty_pool = self._eligible_faculty(demand.subject)
        room_pool = self._eligible_rooms(demand.subject, demand.batch)
        if not faculty_pool or not room_pool:
            return
        for cell_index in range(start, len(cells)):
            day, slot = cells[cell_index]
            if not self._cell_open_for(demand.batch, day, slot, tracker):
                continue
            faculty_options = [item for item in faculty_pool if self._faculty_available(item, day, slot, tracker)]
            if not faculty_options:
                continue
            room_options = [item for item in room_pool if self._room_available(item, day, slot, tracker)]
            for faculty in faculty_options:
                for room in room_options:
                    yield Placement(
                        demand_index=demand_index,
                        cell_index=cell_index,
                        day=day,
                        slot=slot,
                        faculty=faculty,
                        room=room,
                    )

    @staticmethod
    def _commit(placement: Placement, demand: Demand, tracker: AvailabilityTracker) -> None:
        tracker.occupy(
            placement.day,
            placement.slot,
            placement.faculty.name,
            placement.room.name,
            demand.batch.batch_code,
        )

    @staticmethod
    def _release(placement: Placement, demand: Demand, tracker: AvailabilityTracker) -> None:
        tracker.unoccupy(
            placement.day,
            placement.slot,
            placement.faculty.name,
            placement.room.name,
            demand.batch.batch_code,
        )

    # ---------------------------------------------------------------- search

    def _run_greedy(self, demands: list[Demand], tracker: AvailabilityTracker) -> list[Placement]:
        placements: list[Placement] = []
        for demand_index, demand in enumerate(demands):
            cells = self._cell_order()
            placed = 0
            start = 0
            while placed < demand.required:
                placement = next(
                    self._candidate_placements(demand_index, demand, cells, tracker, start=start),
                    None,
                )
                if placement is None:
                    break
                self._commit(placement, demand, tracker)
                placements.append(placement)
                placed += 1
                start = placement.cell_index + 1
        return placements

    def _run_backtracking(
        self,
        demands: list[Demand],
        tracker: AvailabilityTracker,
    ) -> tuple[list[Placement], int, bool]:
        cell_orders = [self._cell_order() for _ in demands]
        static_options = [self._static_option_count(demand) for demand in demands]

        # Most constrained demand first; demands nothing can host are left unmet up front.
        ordered = sorted(
            (idx for idx, count in enumerate(static_options) if count > 0),
            key=lambda idx: static_options[idx],
        )
        units: list[int] = [idx for idx in ordered for _ in range(demands[idx].required)]

        unit_count = len(units)
        chosen: list[Placement | None] = [None] * unit_count
        iterators: list[Iterator[Placement] | None] = [None] * unit_count
        best: list[Placement] = []
        steps = 0
        depth = 0
        budget = self.settings.max_search_steps

        while depth < unit_count and steps < budget:
            demand_index = units[depth]
            demand = demands[demand_index]
            iterator = iterators[depth]
            if iterator is None:
                start = 0
                if depth > 0 and units[depth - 1] == demand_index:
                    # Sessions of one demand are interchangeable; keep them in cell order.
                    start = chosen[depth - 1].cell_index + 1
                iterator = self._candidate_placements(
                    demand_index, demand, cell_orders[demand_index], tracker, start=start
                )
                iterators[depth] = iterator
            elif chosen[depth] is not None:
                self._release(chosen[depth], demand, tracker)
                chosen[depth] = None

            steps += 1
            placement = next(iterator, None)
            if placement is None:
                iterators[depth] = None
                if depth == 0:
                    break
                depth -= 1
                continue

            self._commit(placement, demand, tracker)
            chosen[depth] = placement
            depth += 1
            if depth > len(best):
                best = list(chosen[:depth])

        if depth == unit_count:
            return list(chosen), steps, False

        logger.info(
            "BACKTRACKING INCOMPLETE | seed=%s | steps=%s | best_depth=%s | units=%s",
            self.seed,
            steps,
            len(best),
            unit_count,
        )
        tracker.reset()
        placements: list[Placement] = []
        for placement in best:
            self._commit(placement, demands[placement.demand_index], tracker)
            placements.append(placement)
        for demand_index in units[len(best):]:
            demand = demands[demand_index]
            fallback = next(
                self._candidate_placements(demand_index, demand, cell_orders[demand_index], tracker),
                None,
            )
            if fallback is None:
                continue
            self._commit(fallback, demand, tracker)
            placements.append(fallback)
        return placements, steps, True

    def _keep_larger_of_greedy(
        self,
        demands: list[Demand],
        tracker: AvailabilityTracker,
        placements: list[Placement],
        random_state: tuple,
    ) -> list[Placement]:
        """Return whichever of the search result and a plain greedy pass places more sessions.

        The greedy pass replays the random stream from just after demand
        building, so it matches what the greedy strategy alone would place
        for this seed.
        """
        self.random.setstate(random_state)
        tracker.reset()
        greedy = self._run_greedy(demands, tracker)
        if len(greedy) > len(placements):
            logger.info(
                "BACKTRACKING FELL BACK TO GREEDY | seed=%s | search_placed=%s | greedy_placed=%s",
                self.seed,
                len(placements),
                len(greedy),
            )
            return greedy

        tracker.reset()
        for placement in placements:
            self._commit(placement, demands[placement.demand_index], tracker)
        return placements

    def _to_entries(self, placements: list[Placement], demands: list[Demand]) -> list[ScheduleEntry]:
        entries = [
            ScheduleEntry(
                day=placement.day,
                time=placement.slot,
                subject=demands[placement.demand_index].subject.name,
                subject_code=demands[placement.demand_index].subject.subject_code,
                faculty=placement.faculty.name,
                room=placement.room.name,
                batch=demands[placement.demand_index].batch.batch_code,
            )
            for placement in placements
        ]
        entries.sort(key=lambda entry: (self.day_index[entry.day], self.slot_index[entry.time]))
        return entries

    def run(self) -> PlacementResult:
        tracker = AvailabilityTracker(self.days, self.time_slots, self.input.fixed_slots)
        demands = self._build_demands()

        steps = 0
        exhausted = False
        if self.settings.strategy == "backtracking":
            after_demands = self.random.getstate()
            placements, steps, exhausted = self._run_backtracking(demands, tracker)
            if exhausted:
                placements = self._keep_larger_of_greedy(demands, tracker, placements, after_demands)
        else:
            placements = self._run_greedy(demands, tracker)

        placed_counts: dict[tuple[str, str], int] = defaultdict(int)
        for placement in placements:
            placed_counts[demands[placement.demand_index].key] += 1

        result = PlacementResult(
            entries=self._to_entries(placements, demands),
            demands=demands,
            placed_counts=dict(placed_counts),
            tracker=tracker,
            search_steps=steps,
            search_exhausted=exhausted,
        )
        unmet = result.unmet_demands
        if unmet:
            logger.warning(
                "UNDER-PLACEMENT | seed=%s | strategy=%s | unmet_demands=%s | missing_sessions=%s",
                self.seed,
                self.settings.strategy,
                len(unmet),
                sum(item.missing for item in unmet),
            )
        logger.info(
            "PLACEMENT COMPLETE | seed=%s | strategy=%s | exclusivity=%s | placed=%s | required=%s | steps=%s",
            self.seed,
            self.settings.strategy,
            self.settings.exclusivity,
            result.placed_sessions,
            result.required_sessions,
            steps,
        )
        return result
