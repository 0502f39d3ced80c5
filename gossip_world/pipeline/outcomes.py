"""Per-unit results for best-effort pipeline steps.

A round, a mining pass or a publish batch is made of independent units
(one speaker, one candidate). Each unit ends as Success or Skipped; the
caller aggregates them instead of failing the whole batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Skipped:
    reason: str


Outcome = Union[Success[T], Skipped]


@dataclass
class RoundReport:
    """What one chat round actually produced."""

    room_id: str
    speakers: list[str] = field(default_factory=list)
    outcomes: list[Outcome] = field(default_factory=list)

    @property
    def messages(self) -> list:
        return [o.value for o in self.outcomes if isinstance(o, Success)]

    @property
    def skipped(self) -> list[str]:
        return [o.reason for o in self.outcomes if isinstance(o, Skipped)]
