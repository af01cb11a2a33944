from __future__ import annotations

from collections import defaultdict

from timetabler.schemas.timetable import OccupancyMatrix, ScheduleEntry, TimetableOption


def cell_key(day: str, slot: str) -> str:
    return f"{day}|{slot}"


def build_occupancy_matrix(option: TimetableOption) -> OccupancyMatrix:
    batch_matrix: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    faculty_matrix: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    room_matrix: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))

    for entry in option.timetable:
        key = cell_key(entry.day, entry.time)
        batch_matrix[entry.batch][key] += 1
        faculty_matrix[entry.faculty][key] += 1
        room_matrix[entry.room][key] += 1

    return OccupancyMatrix(
        batch_matrix={batch: dict(values) for batch, values in batch_matrix.items()},
        faculty_matrix={faculty: dict(values) for faculty, values in faculty_matrix.items()},
        room_matrix={room: dict(values) for room, values in room_matrix.items()},
    )


def faculty_timetable(option: TimetableOption, faculty_name: str) -> list[ScheduleEntry]:
    return [entry for entry in option.timetable if entry.faculty == faculty_name]


def grid_cell_entries(option: TimetableOption, day: str, slot: str) -> list[ScheduleEntry]:
    return [entry for entry in option.timetable if entry.day == day and entry.time == slot]
