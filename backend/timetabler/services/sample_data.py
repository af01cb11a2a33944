from __future__ import annotations

from timetabler.schemas.entities import (
    Classroom,
    Faculty,
    FixedSlot,
    SchedulingInput,
    StudentBatch,
    Subject,
)


def build_sample_input() -> SchedulingInput:
    """Small department dataset used by the demo endpoint and tests."""
    return SchedulingInput(
        classrooms=[
            Classroom(id="CR001", name="A101", capacity=60, type="Lecture"),
            Classroom(id="CR002", name="A102", capacity=60, type="Lecture"),
            Classroom(id="CR003", name="B201-Lab", capacity=40, type="Lab"),
            Classroom(id="CR004", name="C301", capacity=70, type="Lecture"),
        ],
        faculty=[
            Faculty(
                id="F001",
                name="Dr. Sharma",
                department="CSE",
                subjects=["CSE101", "CSE202"],
                max_classes_per_week=10,
                max_classes_per_day=3,
                avg_leaves_per_month=1,
            ),
            Faculty(
                id="F002",
                name="Prof. Rao",
                department="MAT",
                subjects=["MAT102"],
                max_classes_per_week=8,
                max_classes_per_day=2,
                avg_leaves_per_month=0,
            ),
            Faculty(
                id="F003",
                name="Dr. Singh",
                department="CSE",
                subjects=["CSE101", "CSL101"],
                max_classes_per_week=12,
                max_classes_per_day=4,
                avg_leaves_per_month=2,
            ),
        ],
        subjects=[
            Subject(id="S001", subject_code="CSE101", name="Intro to Programming", type="Lecture", classes_required_per_week=3),
            Subject(id="S002", subject_code="MAT102", name="Calculus II", type="Lecture", classes_required_per_week=4),
            Subject(id="S003", subject_code="CSL101", name="Programming Lab", type="Lab", classes_required_per_week=2),
        ],
        student_batches=[
            StudentBatch(
                id="B001",
                program="B.Tech",
                year=2,
                department="CSE",
                batch_code="CSE-2A",
                strength=55,
                elective_combinations=["CS-E1"],
            ),
            StudentBatch(id="B002", program="B.Tech", year=2, department="CSE", batch_code="CSE-2B", strength=58),
            StudentBatch(
                id="B003",
                program="M.Tech",
                year=1,
                department="CSE",
                batch_code="CSE-M1",
                strength=25,
                elective_combinations=["CS-ML-E1", "CS-SEC-E2"],
            ),
        ],
        fixed_slots=[
            FixedSlot(id="FS001", day="Tuesday", time="11-1 PM", event_name="Lab Slot for CSE-2A"),
            FixedSlot(id="FS002", day="Friday", time="4-5 PM", event_name="Seminar"),
        ],
    )
