"""Configuration models."""

from ._common import LogFormat, LogLevel
from ._config import Config
from ._logging import LoggingConfig
from ._storage import StorageConfiguration
from ._validation import ValidationSettings

__all__ = [
    "Config",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "StorageConfiguration",
    "ValidationSettings",
]
