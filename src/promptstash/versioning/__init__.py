"""Append-only artifact versioning.

Every accepted edit becomes a numbered, immutable :class:`Version`. Stores
guarantee contiguous numbering under concurrent writers through optimistic
concurrency: writes name the version they build on and are rejected when it
is no longer current.
"""

from ._integrity import (
    IntegrityProblem,
    ProblemKind,
    check_history,
    find_duplicate_versions,
    find_version_gaps,
)
from ._memory import InMemoryVersionStore
from ._models import Artifact, ArtifactRecord, Version, utc_now
from ._protocol import VersionStore
from ._sqlite import SQLiteVersionStore

__all__ = [
    "Artifact",
    "ArtifactRecord",
    "InMemoryVersionStore",
    "IntegrityProblem",
    "ProblemKind",
    "SQLiteVersionStore",
    "Version",
    "VersionStore",
    "check_history",
    "find_duplicate_versions",
    "find_version_gaps",
    "utc_now",
]
