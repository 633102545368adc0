from .scoring import get_scoring_config, get_scoring_value, load_ats_scoring_config, reset_scoring_cache
from .settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
    "get_scoring_config",
    "get_scoring_value",
    "load_ats_scoring_config",
    "reset_scoring_cache",
]
