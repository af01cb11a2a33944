import pytest
from pydantic import ValidationError

from timetabler.core.config import Settings
from timetabler.schemas.generator import GenerationSettings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.api_prefix == "/api"
    assert settings.generation_strategy == "greedy"
    assert settings.generation_exclusivity == "slot"
    assert settings.generation_option_count == 2


def test_cors_origins_accept_comma_and_json_lists():
    assert Settings(_env_file=None, cors_origins="http://a.test, http://b.test").cors_origins == [
        "http://a.test",
        "http://b.test",
    ]
    assert Settings(_env_file=None, cors_origins='["http://c.test"]').cors_origins == ["http://c.test"]


def test_log_level_is_normalized():
    assert Settings(_env_file=None, log_level=" debug ").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="chatty")


def test_generation_defaults_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("TIMETABLER_GENERATION_STRATEGY", "backtracking")
    monkeypatch.setenv("TIMETABLER_GENERATION_OPTION_COUNT", "5")
    monkeypatch.setenv("TIMETABLER_GENERATION_SPREAD_ACROSS_DAYS", "false")

    generation = GenerationSettings.from_settings(Settings(_env_file=None))

    assert generation.strategy == "backtracking"
    assert generation.option_count == 5
    assert generation.spread_across_days is False
    assert generation.random_seed is None


def test_out_of_range_option_count_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, generation_option_count=0)
    with pytest.raises(ValidationError):
        GenerationSettings(option_count=11)
