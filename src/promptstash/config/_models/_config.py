# pyright: reportExplicitAny=false, reportAny=false
"""Configuration container with typed access."""

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from promptstash.config._loader import deep_merge, parse_env_vars, read_toml_file
from promptstash.config._models._logging import LoggingConfig
from promptstash.config._models._storage import StorageConfiguration
from promptstash.config._models._validation import ValidationSettings
from promptstash.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from typing import Self

CONFIG_FILE_NAME = "promptstash.toml"
"""Name of the project configuration file."""

ENV_PREFIX = "PROMPTSTASH_"
"""Prefix of environment variables that override configuration values."""


class Config(BaseModel):
    """Configuration container with typed access.

    Use the factory methods rather than the constructor so that sources are
    merged and validation failures are reported uniformly.

    Attributes:
        validation: Settings consulted by the validators.
        storage: Version store settings.
        logging: Logging settings.
        sources: Files that contributed to this configuration.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    storage: StorageConfiguration = Field(default_factory=StorageConfiguration)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sources: tuple[Path, ...] = ()

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        sources: tuple[Path, ...] = (),
        source: str | None = None,
    ) -> Self:
        """Create configuration from a dictionary.

        Args:
            data: Dictionary of configuration values.
            sources: Files the values were read from.
            source: Name of the source, used in error messages.

        Returns:
            Validated configuration object.

        Raises:
            ConfigValidationError: If a value has the wrong type or range.
        """
        try:
            return cls.model_validate({**data, "sources": sources})
        except ValidationError as e:
            error = e.errors()[0]
            key = ".".join(str(part) for part in error["loc"])
            msg = f"Invalid configuration value for {key!r}: {error['msg']}"
            raise ConfigValidationError(
                msg,
                key=key,
                value=error.get("input"),
                expected=error["type"],
                source=source,
            ) from e

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a specific TOML file.

        Args:
            path: Path to the TOML config file.

        Returns:
            Configuration object from the specified file only.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        data = read_toml_file(path)
        return cls.from_dict(data, sources=(path,), source=str(path))

    @classmethod
    def load(
        cls,
        *,
        project_root: Path | None = None,
        include_env: bool = True,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources are merged lowest to highest precedence: built-in defaults,
        ``promptstash.toml`` in the project root, then environment variables.

        Args:
            project_root: Directory holding ``promptstash.toml``. Defaults to
                the current working directory.
            include_env: Include ``PROMPTSTASH_*`` environment variables.

        Returns:
            Merged configuration object.

        Raises:
            ConfigLoadError: If the config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        root = project_root if project_root is not None else Path.cwd()
        config_file = root / CONFIG_FILE_NAME

        merged: dict[str, Any] = {}
        sources: tuple[Path, ...] = ()
        if config_file.is_file():
            merged = read_toml_file(config_file)
            sources = (config_file,)

        if include_env:
            env_values = parse_env_vars(ENV_PREFIX)
            # Logger knobs share the prefix but are not configuration keys
            _ = env_values.pop("debug", None)
            _ = env_values.pop("log_level", None)
            merged = deep_merge(merged, env_values)

        return cls.from_dict(merged, sources=sources, source=str(config_file))
