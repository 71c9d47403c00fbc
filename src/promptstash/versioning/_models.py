"""Version ledger models."""

from pathlib import PurePosixPath
from typing import ClassVar

import pendulum
from pydantic import BaseModel, ConfigDict, Field

from promptstash.enums import ArtifactKind
from promptstash.exceptions import FrontmatterParseError
from promptstash.validation import MARKDOWN_KINDS, normalize_path, parse_frontmatter


def utc_now() -> str:
    """Return the current time as an ISO 8601 UTC string."""
    return pendulum.now("UTC").to_iso8601_string()


class Version(BaseModel):
    """An immutable snapshot of an artifact's committed content.

    Attributes:
        artifact_id: The artifact this version belongs to.
        number: Position in the artifact's history, starting at 1.
        content: Full committed content (header and body).
        created_at: When the version was committed (ISO 8601 string).
        created_by: Who committed the version.
        reverted_from: Source version number if this version is a revert.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    artifact_id: str
    number: int = Field(ge=1)
    content: str
    created_at: str
    created_by: str
    reverted_from: int | None = None


class ArtifactRecord(BaseModel):
    """Ledger pointer for an artifact.

    Attributes:
        id: Artifact identifier.
        kind: Artifact kind.
        path: Artifact path.
        current_version: Highest committed version number.
        created_at: When version 1 was committed.
        updated_at: When the latest version was committed.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    id: str
    kind: ArtifactKind
    path: str
    current_version: int = Field(ge=1)
    created_at: str
    updated_at: str


class Artifact(BaseModel):
    """A named configuration unit at its current version.

    The name, description, header and body are derived from the current
    version's content.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    id: str
    kind: ArtifactKind
    path: str
    name: str
    description: str
    header: dict[str, object] = Field(default_factory=dict)
    body: str
    current_version: int = Field(ge=1)
    created_at: str
    updated_at: str

    @classmethod
    def from_record(cls, record: ArtifactRecord, content: str) -> Artifact:
        """Build the artifact view from its ledger pointer and current content.

        Markdown kinds are split into header and body; content that has no
        readable header is kept whole as the body. Other kinds use the file
        name as their name and the raw content as their body.
        """
        basename = PurePosixPath(normalize_path(record.path)).name
        header: dict[str, object] = {}
        body = content

        if record.kind in MARKDOWN_KINDS:
            try:
                document = parse_frontmatter(content)
            except FrontmatterParseError:
                pass
            else:
                header = dict(document.header)
                body = document.body
            if record.kind is not ArtifactKind.SKILL:
                basename = PurePosixPath(basename).stem

        name = header.get("name")
        description = header.get("description")
        return cls(
            id=record.id,
            kind=record.kind,
            path=record.path,
            name=name if isinstance(name, str) else basename,
            description=description if isinstance(description, str) else "",
            header=header,
            body=body,
            current_version=record.current_version,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
