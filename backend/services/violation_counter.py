"""Boundary to the linter that produces violation counts.

Running a linter is outside this package. Callers hand in a ViolationCounter;
a count that cannot be produced comes back as a ViolationCountFailure value.
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ViolationCountFailure:
    """The linter could not produce a count for a scope."""

    scope: str
    reason: str


class ViolationCounter(Protocol):
    def count_violations(self, scope: str) -> int | ViolationCountFailure:
        ...


class StaticViolationCounter:
    """Counter backed by counts the caller already has (e.g. from a CI step)."""

    def __init__(self, counts: dict[str, int]):
        for scope, count in counts.items():
            if count < 0:
                raise ValueError(f"Violation count for '{scope}' must be >= 0, got {count}")
        self._counts = dict(counts)

    def count_violations(self, scope: str) -> int | ViolationCountFailure:
        if scope not in self._counts:
            return ViolationCountFailure(scope=scope, reason=f"No violation count recorded for '{scope}'")
        return self._counts[scope]
