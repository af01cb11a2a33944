from timetabler.schemas.timetable import ScheduleEntry, Scores, TimetableOption
from timetabler.services.occupancy import build_occupancy_matrix, faculty_timetable, grid_cell_entries


def make_option():
    entries = [
        ScheduleEntry(day="Monday", time="9-10 AM", subject="Calculus II", subject_code="MAT102", faculty="Prof. Rao", room="A101", batch="CSE-2A"),
        ScheduleEntry(day="Monday", time="9-10 AM", subject="Intro to Programming", subject_code="CSE101", faculty="Dr. Sharma", room="A102", batch="CSE-2B"),
        ScheduleEntry(day="Tuesday", time="2-3 PM", subject="Calculus II", subject_code="MAT102", faculty="Prof. Rao", room="A101", batch="CSE-2B"),
    ]
    return TimetableOption(id=1, seed=7, timetable=entries, scores=Scores(utilization=10.0, balance=90.0, conflicts=0))


def test_occupancy_matrix_counts_per_resource():
    matrix = build_occupancy_matrix(make_option())

    assert matrix.faculty_matrix["Prof. Rao"] == {"Monday|9-10 AM": 1, "Tuesday|2-3 PM": 1}
    assert matrix.room_matrix["A102"] == {"Monday|9-10 AM": 1}
    assert matrix.batch_matrix["CSE-2B"] == {"Monday|9-10 AM": 1, "Tuesday|2-3 PM": 1}


def test_faculty_timetable_filters_entries():
    entries = faculty_timetable(make_option(), "Prof. Rao")
    assert [(item.day, item.time) for item in entries] == [("Monday", "9-10 AM"), ("Tuesday", "2-3 PM")]
    assert faculty_timetable(make_option(), "Nobody") == []


def test_grid_cell_entries_returns_parallel_classes():
    entries = grid_cell_entries(make_option(), "Monday", "9-10 AM")
    assert {item.batch for item in entries} == {"CSE-2A", "CSE-2B"}
