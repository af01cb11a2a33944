from __future__ import annotations

from typing import Literal

from pydantic import Field

from timetabler.core.config import Settings
from timetabler.schemas.entities import CamelModel, SchedulingInput
from timetabler.schemas.timetable import OccupancyMatrix, TimetableOption


GenerationStrategy = Literal["greedy", "backtracking"]
ExclusivityScope = Literal["slot", "day"]


class GenerationSettings(CamelModel):
    strategy: GenerationStrategy = "greedy"
    exclusivity: ExclusivityScope = "slot"
    option_count: int = Field(default=2, ge=1, le=10)
    random_seed: int | None = Field(default=None, ge=0, le=2_000_000_000)
    max_search_steps: int = Field(default=20_000, ge=1, le=5_000_000)
    max_workers: int = Field(default=1, ge=1, le=32)
    spread_across_days: bool = True
    enforce_faculty_load_limits: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationSettings":
        return cls(
            strategy=settings.generation_strategy,
            exclusivity=settings.generation_exclusivity,
            option_count=settings.generation_option_count,
            max_search_steps=settings.generation_max_search_steps,
            max_workers=settings.generation_max_workers,
            spread_across_days=settings.generation_spread_across_days,
            enforce_faculty_load_limits=settings.generation_enforce_faculty_load_limits,
        )


class GenerateTimetableRequest(CamelModel):
    input: SchedulingInput
    option_count: int | None = Field(default=None, ge=1, le=10)
    settings_override: GenerationSettings | None = None


class GenerateTimetableResponse(CamelModel):
    options: list[TimetableOption]
    settings_used: GenerationSettings
    runtime_ms: int
    occupancy_matrices: dict[int, OccupancyMatrix] = Field(default_factory=dict)
