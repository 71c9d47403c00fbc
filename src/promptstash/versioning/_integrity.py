"""Ledger integrity checks."""

from collections import Counter
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ProblemKind(StrEnum):
    """Kinds of ledger integrity problems."""

    GAP = "gap"
    DUPLICATE = "duplicate"
    STALE_POINTER = "stale_pointer"


@dataclass(slots=True, frozen=True)
class IntegrityProblem:
    """A contiguity violation in an artifact's history.

    Attributes:
        artifact_id: The affected artifact.
        kind: What is wrong.
        number: The version number involved.
        message: Human-readable description.
    """

    artifact_id: str
    kind: ProblemKind
    number: int
    message: str


def find_version_gaps(numbers: Iterable[int]) -> list[int]:
    """Return version numbers missing from the range 1..max, ascending."""
    present = set(numbers)
    if not present:
        return []
    return [n for n in range(1, max(present) + 1) if n not in present]


def find_duplicate_versions(numbers: Iterable[int]) -> list[int]:
    """Return version numbers that occur more than once, ascending."""
    counts = Counter(numbers)
    return sorted(n for n, count in counts.items() if count > 1)


def check_history(
    artifact_id: str, numbers: Iterable[int], current_version: int
) -> list[IntegrityProblem]:
    """Check one artifact's version numbers against its pointer.

    Args:
        artifact_id: The artifact checked.
        numbers: All committed version numbers, in any order.
        current_version: The artifact's current version pointer.

    Returns:
        Problems found, gaps first, then duplicates, then a stale pointer.
    """
    numbers = list(numbers)
    problems = [
        IntegrityProblem(
            artifact_id, ProblemKind.GAP, n, f"Version {n} of {artifact_id} is missing"
        )
        for n in find_version_gaps(numbers)
    ]
    problems.extend(
        IntegrityProblem(
            artifact_id,
            ProblemKind.DUPLICATE,
            n,
            f"Version {n} of {artifact_id} is recorded more than once",
        )
        for n in find_duplicate_versions(numbers)
    )
    latest = max(numbers, default=0)
    if latest != current_version:
        problems.append(
            IntegrityProblem(
                artifact_id,
                ProblemKind.STALE_POINTER,
                current_version,
                f"{artifact_id} points at version {current_version} "
                f"but the latest version is {latest}",
            )
        )
    return problems
