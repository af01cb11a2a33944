from collections import defaultdict
from typing import List, Dict, Sequence, Tuple
from timetabler.schemas.entities import Classroom, Faculty, SchedulingInput, StudentBatch, Subject
from timetabler.schemas.timetable import ScheduleEntry
from timetabler.schemas.conflict import ConflictReport, ConflictDetail, ResolutionAction

class ConflictService:
    def __init__(self, entries: Sequence[ScheduleEntry], scheduling_input: SchedulingInput):
        self.entries: List[ScheduleEntry] = list(entries)
        self.input = scheduling_input
        self.room_map: Dict[str, Classroom] = {room.name: room for room in scheduling_input.classrooms}
        self.faculty_map: Dict[str, Faculty] = {member.name: member for member in scheduling_input.faculty}
        self.batch_map: Dict[str, StudentBatch] = {batch.batch_code: batch for batch in scheduling_input.student_batches}
        self.subject_map: Dict[str, Subject] = {subject.subject_code: subject for subject in scheduling_input.subjects}
        self.fixed_events: Dict[Tuple[str, str], str] = {
            (item.day, item.time): item.event_name for item in scheduling_input.fixed_slots
        }

    def detect_conflicts(self) -> ConflictReport:
        conflicts: List[ConflictDetail] = []

        # Bucket by cell; clashes only exist inside one (day, slot).
        entries_by_cell = defaultdict(list)
        for index, entry in enumerate(self.entries):
            entries_by_cell[(entry.day, entry.time)].append(index)
            conflicts.extend(self._entry_violations(index, entry))

        for (day, slot), indices in entries_by_cell.items():
            n = len(indices)
            for i in range(n):
                a = indices[i]
                e1 = self.entries[a]
                for j in range(i + 1, n):
                    b = indices[j]
                    e2 = self.entries[b]
                    if e1.room == e2.room:
                        conflicts.append(ConflictDetail(
                            id=f"room-{a}-{b}",
                            conflict_type="room_conflict",
                            description=f"Room {e1.room} double-booked on {day} {slot}: {e1.subject} and {e2.subject}",
                            severity="hard",
                            affected_entries=[a, b],
                        ))
                    if e1.faculty == e2.faculty:
                        conflicts.append(ConflictDetail(
                            id=f"fac-{a}-{b}",
                            conflict_type="faculty_conflict",
                            description=f"Faculty overlap for {e1.faculty} on {day} {slot}: {e1.subject} and {e2.subject}",
                            severity="hard",
                            affected_entries=[a, b],
                        ))
                    if e1.batch == e2.batch:
                        conflicts.append(ConflictDetail(
                            id=f"batch-{a}-{b}",
                            conflict_type="batch_conflict",
                            description=f"Batch {e1.batch} has two classes on {day} {slot}: {e1.subject} and {e2.subject}",
                            severity="hard",
                            affected_entries=[a, b],
                        ))

        return ConflictReport(conflicts=conflicts, suggested_resolutions=[])

    def _entry_violations(self, index: int, entry: ScheduleEntry) -> List[ConflictDetail]:
        violations: List[ConflictDetail] = []
        room = self.room_map.get(entry.room)
        faculty = self.faculty_map.get(entry.faculty)
        batch = self.batch_map.get(entry.batch)
        subject = self.subject_map.get(entry.subject_code)

        missing = [
            label
            for label, value in (("room", room), ("faculty", faculty), ("batch", batch), ("subject", subject))
            if value is None
        ]
        if missing:
            violations.append(ConflictDetail(
                id=f"unknown-{index}",
                conflict_type="unknown_resource",
                description=f"Entry references unknown {', '.join(missing)}",
                severity="hard",
                affected_entries=[index],
            ))

        if room is not None and batch is not None and room.capacity < batch.strength:
            violations.append(ConflictDetail(
                id=f"cap-{index}",
                conflict_type="room_capacity",
                description=f"Room {room.name} capacity ({room.capacity}) < Students ({batch.strength})",
                severity="hard",
                affected_entries=[index],
            ))
        if room is not None and subject is not None and room.type != subject.type:
            violations.append(ConflictDetail(
                id=f"type-{index}",
                conflict_type="room_type",
                description=f"{subject.type} session in {room.type} room {room.name}",
                severity="hard",
                affected_entries=[index],
            ))
        if faculty is not None and subject is not None and not faculty.can_teach(subject.subject_code):
            violations.append(ConflictDetail(
                id=f"elig-{index}",
                conflict_type="faculty_eligibility",
                description=f"{faculty.name} is not eligible to teach {subject.subject_code}",
                severity="hard",
                affected_entries=[index],
            ))

        event = self.fixed_events.get((entry.day, entry.time))
        if event is not None:
            violations.append(ConflictDetail(
                id=f"fixed-{index}",
                conflict_type="fixed_slot",
                description=f"{entry.day} {entry.time} is reserved for {event}",
                severity="hard",
                affected_entries=[index],
            ))
        return violations

    def _busy(self, day: str, slot: str, attribute: str, exclude: int) -> set:
        return {
            getattr(entry, attribute)
            for index, entry in enumerate(self.entries)
            if index != exclude and entry.day == day and entry.time == slot
        }

    def generate_resolutions(self, conflict: ConflictDetail) -> List[ResolutionAction]:
        resolutions = []
        target = conflict.affected_entries[-1]
        entry = self.entries[target]
        subject = self.subject_map.get(entry.subject_code)
        batch = self.batch_map.get(entry.batch)

        if conflict.conflict_type in ("room_conflict", "room_capacity", "room_type") and subject and batch:
            busy_rooms = self._busy(entry.day, entry.time, "room", target)
            candidates = [
                room.name
                for room in self.input.classrooms
                if room.type == subject.type and room.capacity >= batch.strength and room.name not in busy_rooms
            ]
            resolutions.append(ResolutionAction(
                action_type="change_room",
                description="Find a larger, compatible or free room",
                target_entry=target,
                parameters={"candidate_rooms": candidates},
            ))

        if conflict.conflict_type in ("faculty_conflict", "faculty_eligibility"):
            busy_faculty = self._busy(entry.day, entry.time, "faculty", target)
            candidates = [
                member.name
                for member in self.input.faculty
                if member.can_teach(entry.subject_code) and member.name not in busy_faculty
            ]
            resolutions.append(ResolutionAction(
                action_type="change_faculty",
                description="Assign another eligible faculty member",
                target_entry=target,
                parameters={"candidate_faculty": candidates},
            ))

        if conflict.conflict_type in ("faculty_conflict", "batch_conflict", "room_conflict", "fixed_slot"):
            free_cells = []
            for day, slot in self.input.grid.cells:
                if (day, slot) in self.fixed_events:
                    continue
                if entry.batch in self._busy(day, slot, "batch", target):
                    continue
                if entry.faculty in self._busy(day, slot, "faculty", target):
                    continue
                if entry.room in self._busy(day, slot, "room", target):
                    continue
                free_cells.append({"day": day, "time": slot})
            resolutions.append(ResolutionAction(
                action_type="move_slot",
                description="Move to a different time slot",
                target_entry=target,
                parameters={"free_cells": free_cells},
            ))

        return resolutions
