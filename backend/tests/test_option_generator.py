import pytest

from timetabler.core.exceptions import InvalidInputError, SchedulerInvariantError
from timetabler.schemas.entities import Faculty
from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.timetable import ScheduleEntry
from timetabler.services.option_generator import OptionGenerator, generate_options, option_seeds
from timetabler.services.placement import PlacementEngine, PlacementResult


def test_option_seeds_follow_base_seed():
    assert option_seeds(GenerationSettings(random_seed=100), 3) == [100, 101, 102]


def test_option_seeds_without_base_are_consecutive():
    seeds = option_seeds(GenerationSettings(), 4)
    assert seeds == list(range(seeds[0], seeds[0] + 4))


def test_generate_returns_numbered_scored_options(sample_input):
    options = OptionGenerator(sample_input, GenerationSettings(random_seed=7)).generate(3)

    assert [item.id for item in options] == [1, 2, 3]
    assert [item.seed for item in options] == [7, 8, 9]
    for item in options:
        assert item.scores.conflicts == 0
        assert 0.0 <= item.scores.utilization <= 100.0
        assert 0.0 <= item.scores.balance <= 100.0
        assert item.scores.fulfillment < 100.0
        assert {(unmet.batch_code, unmet.subject_code) for unmet in item.unmet_demands} >= {
            ("CSE-2A", "CSL101"),
            ("CSE-2B", "CSL101"),
        }


def test_option_count_defaults_to_settings(sample_input):
    options = generate_options(sample_input, GenerationSettings(option_count=4, random_seed=1))
    assert len(options) == 4


def test_fixed_seed_is_reproducible(sample_input):
    settings = GenerationSettings(random_seed=21, strategy="backtracking", max_search_steps=500)
    assert generate_options(sample_input, settings, 2) == generate_options(sample_input, settings, 2)


def test_threaded_generation_matches_sequential(sample_input):
    sequential = generate_options(sample_input, GenerationSettings(random_seed=11), 3)
    threaded = generate_options(sample_input, GenerationSettings(random_seed=11, max_workers=3), 3)

    assert threaded == sequential


def test_invalid_input_is_rejected_before_search(sample_input, monkeypatch):
    def fail_run(self):
        raise AssertionError("search must not start")

    monkeypatch.setattr(PlacementEngine, "run", fail_run)
    idle = Faculty(id="F9", name="Dr. Idle", department="CSE", subjects=[], max_classes_per_week=4, max_classes_per_day=1)
    bad_input = sample_input.model_copy(update={"faculty": [*sample_input.faculty, idle]})

    with pytest.raises(InvalidInputError):
        generate_options(bad_input, GenerationSettings(random_seed=1))


def test_clashing_engine_output_raises_invariant_error(sample_input, monkeypatch):
    def clashing_run(self):
        entries = [
            ScheduleEntry(
                day="Monday",
                time="9-10 AM",
                subject="Intro to Programming",
                subject_code="CSE101",
                faculty="Dr. Sharma",
                room="A101",
                batch=batch,
            )
            for batch in ("CSE-2A", "CSE-2B")
        ]
        return PlacementResult(entries=entries, demands=[], placed_counts={}, tracker=None)

    monkeypatch.setattr(PlacementEngine, "run", clashing_run)

    with pytest.raises(SchedulerInvariantError) as exc_info:
        generate_options(sample_input, GenerationSettings(random_seed=3), 1)

    assert exc_info.value.status_code == 500
    assert exc_info.value.details["seed"] == 3
    assert exc_info.value.details["conflicts"]
