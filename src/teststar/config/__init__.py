from .loader import load_settings
from .schema import GradingConfig, LoggingConfig, ModelConfig, PathsConfig, Settings

__all__ = [
    "GradingConfig",
    "LoggingConfig",
    "ModelConfig",
    "PathsConfig",
    "Settings",
    "load_settings",
]
