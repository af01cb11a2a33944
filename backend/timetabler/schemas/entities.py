from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DAY_VALUES = {
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
}

DEFAULT_DAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

DEFAULT_TIME_SLOTS: tuple[str, ...] = (
    "9-10 AM",
    "10-11 AM",
    "11-12 PM",
    "12-1 PM",
    "2-3 PM",
    "3-4 PM",
    "4-5 PM",
)

RoomKind = Literal["Lecture", "Lab"]


def validate_day_value(value: str) -> str:
    day = value.strip()
    if day not in DAY_VALUES:
        raise ValueError("Invalid day value")
    return day


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Classroom(CamelModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(gt=0, le=5000)
    type: RoomKind


class Faculty(CamelModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    department: str = Field(min_length=1, max_length=200)
    subjects: list[str] = Field(default_factory=list)
    max_classes_per_week: int = Field(gt=0, le=200)
    max_classes_per_day: int = Field(gt=0, le=50)
    # Informational only; never a placement constraint.
    avg_leaves_per_month: float = Field(default=0, ge=0, le=31)

    @field_validator("subjects")
    @classmethod
    def normalize_subjects(cls, value: list[str]) -> list[str]:
        cleaned: list[str] = []
        for code in value:
            code = code.strip()
            if code and code not in cleaned:
                cleaned.append(code)
        return cleaned

    def can_teach(self, subject_code: str) -> bool:
        return subject_code in self.subjects


class Subject(CamelModel):
    id: str = Field(min_length=1, max_length=36)
    subject_code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    type: RoomKind
    classes_required_per_week: int = Field(gt=0)


class StudentBatch(CamelModel):
    id: str = Field(min_length=1, max_length=36)
    program: str = Field(min_length=1, max_length=100)
    year: int = Field(ge=1, le=10)
    department: str = Field(min_length=1, max_length=200)
    batch_code: str = Field(min_length=1, max_length=50)
    strength: int = Field(gt=0, le=5000)
    # Informational only; never a placement constraint.
    elective_combinations: list[str] = Field(default_factory=list)


class FixedSlot(CamelModel):
    id: str | None = Field(default=None, max_length=36)
    day: str
    time: str = Field(min_length=1, max_length=50)
    event_name: str = Field(min_length=1, max_length=200)

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return validate_day_value(value)


class SchedulingGrid(CamelModel):
    days: list[str] = Field(default_factory=lambda: list(DEFAULT_DAYS))
    time_slots: list[str] = Field(default_factory=lambda: list(DEFAULT_TIME_SLOTS))

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[str]) -> list[str]:
        return [validate_day_value(day) for day in value]

    @property
    def cells(self) -> list[tuple[str, str]]:
        return [(day, slot) for day in self.days for slot in self.time_slots]


class SchedulingInput(CamelModel):
    classrooms: list[Classroom] = Field(default_factory=list)
    faculty: list[Faculty] = Field(default_factory=list)
    subjects: list[Subject] = Field(default_factory=list)
    student_batches: list[StudentBatch] = Field(default_factory=list)
    fixed_slots: list[FixedSlot] = Field(default_factory=list)
    grid: SchedulingGrid = Field(default_factory=SchedulingGrid)
