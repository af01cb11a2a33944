from fastapi import Depends

from timetabler.core.config import Settings, get_settings
from timetabler.schemas.generator import GenerationSettings


def get_generation_defaults(settings: Settings = Depends(get_settings)) -> GenerationSettings:
    return GenerationSettings.from_settings(settings)
