"""Frontmatter parsing for markdown artifacts."""

import hashlib
import threading
from dataclasses import dataclass, field
from typing import cast

import yaml

from promptstash.exceptions import FrontmatterParseError

# Type aliases for YAML frontmatter data
type YAMLPrimitive = str | int | float | bool | None
type YAMLValue = YAMLPrimitive | list[YAMLValue] | dict[str, YAMLValue]
type YAMLFrontmatter = dict[str, YAMLValue]

_OPEN_DELIMITER = "---"
_CLOSE_DELIMITERS = ("---", "...")


@dataclass(slots=True, frozen=True)
class Frontmatter:
    """A document split into its metadata header and body.

    Attributes:
        header: Header fields in document order. Unknown fields are kept.
        body: Text following the closing delimiter.
    """

    header: YAMLFrontmatter
    body: str


def parse_frontmatter(content: str) -> Frontmatter:
    """Split markdown content into a YAML header and a body.

    The header must start on the first line with ``---`` and end with a
    line holding ``---`` or ``...``. An empty header yields an empty mapping.

    Args:
        content: The full markdown content including frontmatter.

    Returns:
        The parsed header and body.

    Raises:
        FrontmatterParseError: With code ``NO_FRONTMATTER`` if the content
            does not open with a header block, or ``INVALID_SYNTAX`` if the
            block is unterminated or is not a YAML mapping.
    """
    lines = content.removeprefix("\ufeff").splitlines(keepends=True)
    if not lines or lines[0].strip() != _OPEN_DELIMITER:
        msg = "Content does not start with a '---' frontmatter block"
        raise FrontmatterParseError(msg, code="NO_FRONTMATTER")

    end = next(
        (i for i in range(1, len(lines)) if lines[i].strip() in _CLOSE_DELIMITERS),
        None,
    )
    if end is None:
        msg = "Frontmatter block is not closed with '---'"
        raise FrontmatterParseError(msg, code="INVALID_SYNTAX")

    header_text = "".join(lines[1:end])
    body = "".join(lines[end + 1 :])

    try:
        data = cast("object", yaml.safe_load(header_text))
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 2 if mark is not None else None
        msg = f"Frontmatter is not valid YAML: {e}"
        raise FrontmatterParseError(
            msg, code="INVALID_SYNTAX", body=body, line=line
        ) from e

    if data is None:
        return Frontmatter(header={}, body=body)
    if not isinstance(data, dict):
        msg = f"Frontmatter must be a mapping, got {type(data).__name__}"
        raise FrontmatterParseError(msg, code="INVALID_SYNTAX", body=body)

    header = cast("YAMLFrontmatter", {str(k): v for k, v in data.items()})
    return Frontmatter(header=header, body=body)


def content_hash(content: str) -> str:
    """Return the SHA-256 hex digest of a text."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class FrontmatterCache:
    """Memoizes :func:`parse_frontmatter` by content hash.

    A cache is meant to live for one validation call graph or one batch,
    never for the lifetime of the process. Parse failures are memoized too.

    Attributes:
        hits: Number of lookups answered from the cache.
        misses: Number of lookups that required parsing.
    """

    hits: int = 0
    misses: int = 0
    _entries: dict[str, Frontmatter | FrontmatterParseError] = field(
        default_factory=dict
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def parse(self, content: str) -> Frontmatter:
        """Parse content, reusing an earlier result for identical text.

        Raises:
            FrontmatterParseError: If the content cannot be parsed.
        """
        key = content_hash(content)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
            else:
                self.misses += 1
        if cached is None:
            try:
                cached = parse_frontmatter(content)
            except FrontmatterParseError as e:
                cached = e
            with self._lock:
                cached = self._entries.setdefault(key, cached)

        if isinstance(cached, FrontmatterParseError):
            raise cached
        return cached

    def __len__(self) -> int:
        return len(self._entries)
