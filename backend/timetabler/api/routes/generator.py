import logging
from time import perf_counter

from fastapi import APIRouter, Depends

from timetabler.api.deps import get_generation_defaults
from timetabler.schemas.entities import SchedulingInput
from timetabler.schemas.generator import (
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    GenerationSettings,
)
from timetabler.services.occupancy import build_occupancy_matrix
from timetabler.services.option_generator import OptionGenerator
from timetabler.services.sample_data import build_sample_input

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/sample-data", response_model=SchedulingInput)
def get_sample_data() -> SchedulingInput:
    return build_sample_input()


@router.post("/generate", response_model=GenerateTimetableResponse)
def generate_timetable(
    payload: GenerateTimetableRequest,
    defaults: GenerationSettings = Depends(get_generation_defaults),
) -> GenerateTimetableResponse:
    started = perf_counter()
    settings = defaults
    if payload.settings_override is not None:
        # Only the fields the caller sent replace the configured defaults.
        settings = defaults.model_copy(update=payload.settings_override.model_dump(exclude_unset=True))
    scheduling_input = payload.input
    logger.info(
        "TIMETABLE GENERATION START | batches=%s | subjects=%s | faculty=%s | rooms=%s | fixed_slots=%s | strategy=%s",
        len(scheduling_input.student_batches),
        len(scheduling_input.subjects),
        len(scheduling_input.faculty),
        len(scheduling_input.classrooms),
        len(scheduling_input.fixed_slots),
        settings.strategy,
    )
    try:
        options = OptionGenerator(scheduling_input, settings).generate(payload.option_count)
    except Exception:
        logger.exception(
            "TIMETABLE GENERATION FAILED | wall_ms=%s",
            int((perf_counter() - started) * 1000),
        )
        raise

    runtime_ms = int((perf_counter() - started) * 1000)
    logger.info(
        "TIMETABLE GENERATION COMPLETE | options=%s | unmet_demands=%s | runtime_ms=%s",
        len(options),
        [len(item.unmet_demands) for item in options],
        runtime_ms,
    )
    return GenerateTimetableResponse(
        options=options,
        settings_used=settings,
        runtime_ms=runtime_ms,
        occupancy_matrices={item.id: build_occupancy_matrix(item) for item in options},
    )
