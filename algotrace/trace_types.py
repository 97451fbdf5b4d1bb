"""Trace data types for step-by-step algorithm replay."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from . import constants


class BuilderInvariantViolation(Exception):
    """A trace builder produced a structurally invalid trace.

    Never expected for valid input; signals a defect in a builder.
    """


@dataclass(frozen=True)
class Step:
    """A single step in an algorithm trace.

    Captures what happened (kind + description) and a deep-copied
    snapshot of the working state after the transition was applied.
    """

    index: int
    kind: str
    description: str
    snapshot: dict[str, Any] = field(default_factory=dict)
    pointers: dict[str, int | None] = field(default_factory=dict)
    highlights: tuple[str, ...] = ()
    results: list[Any] | None = None
    frames: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "index": self.index,
            "kind": self.kind,
            "description": self.description,
            "snapshot": self.snapshot,
            "pointers": self.pointers,
        }
        if self.highlights:
            d["highlights"] = list(self.highlights)
        if self.results is not None:
            d["results"] = self.results
        if self.frames:
            d["frames"] = list(self.frames)
        return d


@dataclass(frozen=True)
class Trace:
    """Complete, ordered record of one builder run.

    Holds at least an opening and a terminal step; ``answer`` mirrors the
    answer recorded in the terminal step's snapshot.
    """

    algorithm: str
    steps: tuple[Step, ...]
    answer: Any = None

    def __post_init__(self):
        if len(self.steps) < 2:
            raise BuilderInvariantViolation(
                f"{self.algorithm}: trace needs at least 2 steps, got {len(self.steps)}"
            )
        expected = list(range(1, len(self.steps) + 1))
        actual = [s.index for s in self.steps]
        if actual != expected:
            raise BuilderInvariantViolation(
                f"{self.algorithm}: step indices must run 1..{len(self.steps)}"
            )

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, position: int) -> Step:
        return self.steps[position]

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    @property
    def final_step(self) -> Step:
        return self.steps[-1]

    def descriptions(self) -> list[str]:
        return [s.description for s in self.steps]

    def kinds(self) -> list[str]:
        return [s.kind for s in self.steps]

    def to_dict(self) -> dict:
        return {
            "algorithm": self.algorithm,
            constants.ANSWER_KEY: self.answer,
            "steps": [s.to_dict() for s in self.steps],
        }
