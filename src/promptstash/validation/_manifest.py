"""Tool manifest (MCP server configuration) rules."""

from typing import TYPE_CHECKING, ClassVar, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ._types import IssueCollector, ValidationStage

if TYPE_CHECKING:
    from ._types import ValidationIssue

_SENSITIVE_MARKERS = ("KEY", "SECRET", "TOKEN", "PASSWORD")


class StdioServer(BaseModel):
    """A tool server launched as a local process."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    command: str = Field(min_length=1)
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)


class RemoteServer(BaseModel):
    """A tool server reached over HTTP."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    url: str
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = "URL must use http:// or https://"
            raise ValueError(msg)
        return value


type ServerConfig = StdioServer | RemoteServer


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


def _is_env_reference(value: str) -> bool:
    return value.startswith("${") and value.endswith("}")


def parse_server(
    name: str, raw: object, collector: IssueCollector
) -> ServerConfig | None:
    """Parse one server entry, reporting ``INVALID_SERVER_CONFIG`` on failure."""
    path = f"mcpServers.{name}"
    if not isinstance(raw, dict):
        collector.add_error(
            "INVALID_SERVER_CONFIG",
            f"Server {name!r} must be an object",
            path=path,
        )
        return None
    data = cast("dict[str, object]", raw)

    model: type[StdioServer] | type[RemoteServer]
    if "command" in data:
        model = StdioServer
    elif "url" in data:
        model = RemoteServer
    else:
        collector.add_error(
            "INVALID_SERVER_CONFIG",
            f"Server {name!r} needs either 'command' (stdio) or 'url' (remote)",
            path=path,
        )
        return None

    try:
        return model.model_validate(data)
    except ValidationError as e:
        collector.add_error(
            "INVALID_SERVER_CONFIG",
            f"Server {name!r} is invalid: {_describe(e)}",
            path=path,
        )
        return None


def _check_stdio(name: str, server: StdioServer, collector: IssueCollector) -> None:
    path = f"mcpServers.{name}"
    if not server.command.startswith(("/", "./", "../")):
        collector.add_warning(
            "COMMAND_NOT_QUALIFIED",
            f"Server {name!r} runs {server.command!r} from PATH",
            path=f"{path}.command",
            suggestion="Use an absolute or ./-relative command path",
        )
    for key, value in server.env.items():
        if any(marker in key.upper() for marker in _SENSITIVE_MARKERS):
            if _is_env_reference(value):
                continue
            collector.add_warning(
                "SENSITIVE_ENV_VARIABLE",
                f"Server {name!r} sets {key} inline",
                path=f"{path}.env.{key}",
                suggestion=f"Reference the variable instead: ${{{key}}}",
            )


def _check_remote(name: str, server: RemoteServer, collector: IssueCollector) -> None:
    path = f"mcpServers.{name}"
    if server.url.startswith("http://"):
        collector.add_warning(
            "INSECURE_TRANSPORT",
            f"Server {name!r} uses unencrypted HTTP",
            path=f"{path}.url",
            suggestion="Use https://",
        )
    if not any(header.lower() == "authorization" for header in server.headers):
        collector.add_warning(
            "MISSING_AUTH_HEADER",
            f"Server {name!r} sends no Authorization header",
            path=f"{path}.headers",
        )


def validate_manifest(document: object) -> list[ValidationIssue]:
    """Validate a parsed tool manifest.

    Args:
        document: The decoded JSON document.

    Returns:
        Manifest-stage issues.
    """
    collector = IssueCollector(ValidationStage.MANIFEST)
    if not isinstance(document, dict):
        collector.add_error(
            "INVALID_FIELD_TYPE",
            f"Tool manifest must be a JSON object, got {type(document).__name__}",
        )
        return collector.issues

    servers = cast("dict[str, object]", document).get("mcpServers")
    if servers is None:
        collector.add_error(
            "MISSING_REQUIRED_FIELD",
            "Missing required field 'mcpServers'",
            path="mcpServers",
            suggestion='Add an "mcpServers" object mapping names to servers',
        )
        return collector.issues
    if not isinstance(servers, dict):
        collector.add_error(
            "INVALID_FIELD_TYPE", "'mcpServers' must be an object", path="mcpServers"
        )
        return collector.issues

    for name, raw in cast("dict[str, object]", servers).items():
        server = parse_server(name, raw, collector)
        if isinstance(server, StdioServer):
            _check_stdio(name, server, collector)
        elif isinstance(server, RemoteServer):
            _check_remote(name, server, collector)

    return collector.issues
