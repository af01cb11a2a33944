from typing import Literal, List

from pydantic import Field

from timetabler.schemas.entities import CamelModel, SchedulingInput
from timetabler.schemas.timetable import ScheduleEntry


class ConflictDetail(CamelModel):
    id: str
    conflict_type: Literal[
        "room_conflict",
        "faculty_conflict",
        "batch_conflict",
        "room_capacity",
        "room_type",
        "faculty_eligibility",
        "fixed_slot",
        "unknown_resource",
    ]
    description: str
    severity: Literal["hard", "soft"]
    affected_entries: List[int]  # Positions in the checked timetable

class ResolutionAction(CamelModel):
    action_type: Literal["move_slot", "change_room", "change_faculty"]
    description: str
    target_entry: int
    parameters: dict = Field(default_factory=dict)  # e.g. {"candidate_rooms": ["A101"]}

class ConflictReport(CamelModel):
    conflicts: List[ConflictDetail] = Field(default_factory=list)
    suggested_resolutions: List[ResolutionAction] = Field(default_factory=list)

    @property
    def hard_conflicts(self) -> int:
        return sum(1 for item in self.conflicts if item.severity == "hard")

class DetectConflictsRequest(CamelModel):
    input: SchedulingInput
    timetable: List[ScheduleEntry]
