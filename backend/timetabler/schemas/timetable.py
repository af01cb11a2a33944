from __future__ import annotations

from pydantic import Field

from timetabler.schemas.entities import CamelModel


class ScheduleEntry(CamelModel):
    day: str
    time: str
    subject: str
    subject_code: str
    faculty: str
    room: str
    batch: str


class Scores(CamelModel):
    utilization: float = Field(ge=0.0, le=100.0)
    balance: float = Field(ge=0.0, le=100.0)
    conflicts: int = Field(ge=0)
    fulfillment: float = Field(default=100.0, ge=0.0, le=100.0)


class UnmetDemand(CamelModel):
    batch_code: str
    subject_code: str
    required: int = Field(ge=1)
    placed: int = Field(ge=0)

    @property
    def missing(self) -> int:
        return self.required - self.placed


class TimetableOption(CamelModel):
    id: int = Field(ge=1)
    seed: int
    timetable: list[ScheduleEntry] = Field(default_factory=list)
    scores: Scores
    unmet_demands: list[UnmetDemand] = Field(default_factory=list)


class OccupancyMatrix(CamelModel):
    batch_matrix: dict[str, dict[str, int]] = Field(default_factory=dict)
    faculty_matrix: dict[str, dict[str, int]] = Field(default_factory=dict)
    room_matrix: dict[str, dict[str, int]] = Field(default_factory=dict)
