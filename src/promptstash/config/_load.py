import sys
from typing import TYPE_CHECKING

from promptstash.exceptions import ConfigError

from ._models import Config

if TYPE_CHECKING:
    from pathlib import Path


def safe_load_config(
    *,
    config_path: Path | None = None,
    project_root: Path | None = None,
) -> tuple[Config, str | None]:
    """Load configuration, falling back to defaults on failure.

    When config_path is provided, the file must exist (explicit user request).

    Args:
        config_path: Explicit path to config file (--config flag).
        project_root: Directory to look for ``promptstash.toml`` in.

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
        On failure, returns the default Config with the error message.
    """
    try:
        if config_path is not None:
            if not config_path.exists():
                print(f"Error: Config file not found: {config_path}", file=sys.stderr)  # noqa: T201
                sys.exit(1)
            return Config.from_file(config_path), None

        config = Config.load(project_root=project_root)
    except ConfigError as e:
        error_msg = str(e)
        print(f"Warning: Failed to load config: {error_msg}", file=sys.stderr)  # noqa: T201
        return Config(), error_msg
    except OSError as e:
        error_msg = f"Failed to load config: {e}"
        print(f"Warning: {error_msg}", file=sys.stderr)  # noqa: T201
        return Config(), error_msg
    else:
        return config, None
