"""Settings and defaults for CashPulse, read from the environment."""

from .settings import DEFAULT_DATA_DIR, DEFAULT_OPENAI_MODEL, Settings, get_settings

__all__ = [
    "DEFAULT_DATA_DIR",
    "DEFAULT_OPENAI_MODEL",
    "Settings",
    "get_settings",
]
