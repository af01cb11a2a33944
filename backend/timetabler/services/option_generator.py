from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
import random
from time import perf_counter

from timetabler.core.exceptions import SchedulerInvariantError
from timetabler.schemas.entities import SchedulingInput
from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.timetable import TimetableOption
from timetabler.services.conflict_service import ConflictService
from timetabler.services.placement import PlacementEngine
from timetabler.services.scoring import Scorer
from timetabler.services.validation import validate_scheduling_input

logger = logging.getLogger(__name__)

MAX_SEED = 2_000_000_000


def option_seeds(settings: GenerationSettings, option_count: int) -> list[int]:
    """Distinct seeds for option ids 1..N; a fixed ``random_seed`` makes them reproducible."""
    base = settings.random_seed
    if base is None:
        base = random.SystemRandom().randrange(MAX_SEED)
    return [base + offset for offset in range(option_count)]


class OptionGenerator:
    """Runs the placement engine once per seed and scores every result.

    Each call is independent; nothing is kept between calls.
    """

    def __init__(self, scheduling_input: SchedulingInput, settings: GenerationSettings | None = None) -> None:
        validate_scheduling_input(scheduling_input)
        self.input = scheduling_input
        self.settings = settings or GenerationSettings()
        self.scorer = Scorer(scheduling_input)

    def _build_option(self, option_id: int, seed: int) -> TimetableOption:
        result = PlacementEngine(self.input, self.settings, seed=seed).run()
        scores = self.scorer.score(result.entries)
        report = ConflictService(result.entries, self.input).detect_conflicts()
        if scores.conflicts > 0 or report.hard_conflicts > 0:
            logger.error(
                "PLACEMENT INVARIANT BROKEN | option=%s | seed=%s | clashes=%s | violations=%s",
                option_id,
                seed,
                scores.conflicts,
                report.hard_conflicts,
            )
            raise SchedulerInvariantError(
                "Generated timetable violates hard constraints",
                details={
                    "option_id": option_id,
                    "seed": seed,
                    "conflicts": [item.description for item in report.conflicts],
                },
            )
        return TimetableOption(
            id=option_id,
            seed=seed,
            timetable=result.entries,
            scores=scores,
            unmet_demands=result.unmet_demands,
        )

    def generate(self, option_count: int | None = None) -> list[TimetableOption]:
        count = option_count or self.settings.option_count
        seeds = option_seeds(self.settings, count)
        started = perf_counter()
        logger.info(
            "OPTION GENERATION START | options=%s | strategy=%s | exclusivity=%s | workers=%s | seeds=%s",
            count,
            self.settings.strategy,
            self.settings.exclusivity,
            self.settings.max_workers,
            seeds,
        )

        if self.settings.max_workers > 1 and count > 1:
            # Every run owns its tracker, so runs share no mutable state.
            with ThreadPoolExecutor(max_workers=min(self.settings.max_workers, count)) as executor:
                futures = [
                    executor.submit(self._build_option, option_id, seed)
                    for option_id, seed in enumerate(seeds, start=1)
                ]
                options = [future.result() for future in futures]
        else:
            options = [self._build_option(option_id, seed) for option_id, seed in enumerate(seeds, start=1)]

        logger.info(
            "OPTION GENERATION COMPLETE | options=%s | best_utilization=%s | wall_ms=%s",
            len(options),
            max((item.scores.utilization for item in options), default=0.0),
            int((perf_counter() - started) * 1000),
        )
        return options


def generate_options(
    scheduling_input: SchedulingInput,
    settings: GenerationSettings | None = None,
    option_count: int | None = None,
) -> list[TimetableOption]:
    return OptionGenerator(scheduling_input, settings).generate(option_count)
