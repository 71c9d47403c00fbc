"""PromptStash configuration.

This module provides the public API for configuration management,
including loading, validation, and typed access to configuration values.

Example:
    >>> from promptstash.config import Config
    >>> config = Config.load()
    >>> config.validation.skill_entry_file
    'SKILL.md'
"""

from promptstash.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._load import safe_load_config
from ._loader import (
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    Config,
    LogFormat,
    LoggingConfig,
    LogLevel,
    StorageConfiguration,
    ValidationSettings,
)
from ._models._config import CONFIG_FILE_NAME, ENV_PREFIX

__all__ = [
    "CONFIG_FILE_NAME",
    "ENV_PREFIX",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "StorageConfiguration",
    "ValidationSettings",
    "deep_merge",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
