"""TraceBuilder: shared step-recording infrastructure for every algorithm."""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable, Mapping

from .. import constants
from ..input_types import InputParseError, ParseErrorKind, ParseResult
from ..trace_types import BuilderInvariantViolation, Step, Trace

logger = logging.getLogger(__name__)


class TraceBuilder(ABC):
    """Base class for instrumented algorithm builders.

    Subclasses implement ``_params_from_fields`` (raw text fields → params)
    and ``_run`` (the algorithm itself, emitting steps through ``_emit``
    and returning the final answer).  ``build`` resets all recording state
    first, so one instance may be reused for any number of builds.
    """

    # ── overridable metadata ─────────────────────────────────────

    SLUG: str = ""
    FAMILY: str = ""
    TITLE: str = ""
    DEFAULT_FIELDS: dict[str, str] = {}
    DELAY_MS: int = constants.DEFAULT_DELAY_MS
    LOG_CAPACITY: int = constants.DEFAULT_LOG_CAPACITY

    # ── init ─────────────────────────────────────────────────────

    def __init__(self):
        self._steps: list[Step] = []
        self._frames: list[str] = []

    # ── public API ───────────────────────────────────────────────

    def parse(self, fields: Mapping[str, str] | None = None) -> ParseResult:
        """Turn raw form fields into params; never raises."""
        merged = {**self.DEFAULT_FIELDS, **(fields or {})}
        unknown = sorted(set(merged) - set(self.DEFAULT_FIELDS))
        if unknown:
            return ParseResult.failure(
                InputParseError(
                    ParseErrorKind.MALFORMED,
                    f"unknown field(s) for {self.SLUG}: {', '.join(unknown)}",
                )
            )
        try:
            return ParseResult.success(self._params_from_fields(merged))
        except InputParseError as exc:
            logger.warning("%s: input rejected (%s)", self.SLUG, exc.message)
            return ParseResult.failure(exc)

    def default_params(self) -> Any:
        return self.parse().unwrap()

    def build(self, params: Any) -> Trace:
        """Run the algorithm on *params* and return its immutable trace."""
        self._steps = []
        self._frames = []
        answer = self._run(params)
        if self._frames:
            raise BuilderInvariantViolation(
                f"{self.SLUG}: unbalanced frames left on stack: {self._frames}"
            )
        if not self._steps or constants.ANSWER_KEY not in self._steps[-1].snapshot:
            raise BuilderInvariantViolation(
                f"{self.SLUG}: terminal step must record the answer"
            )
        trace = Trace(
            algorithm=self.SLUG,
            steps=tuple(self._steps),
            answer=copy.deepcopy(answer),
        )
        self._steps = []
        logger.info("Built %s trace with %d steps", self.SLUG, len(trace))
        return trace

    # ── subclass hooks ───────────────────────────────────────────

    @abstractmethod
    def _params_from_fields(self, fields: Mapping[str, str]) -> Any:
        """Raise InputParseError on invalid input."""
        ...

    @abstractmethod
    def _run(self, params: Any) -> Any: ...

    # ── recording helpers ────────────────────────────────────────

    def _emit(
        self,
        kind: str | Enum,
        description: str,
        *,
        snapshot: Mapping[str, Any] | None = None,
        pointers: Mapping[str, int | None] | None = None,
        highlights: Iterable[str] = (),
        results: list[Any] | None = None,
    ) -> Step:
        # Deep copies keep earlier steps immune to later in-place mutation.
        step = Step(
            index=len(self._steps) + 1,
            kind=kind.value if isinstance(kind, Enum) else kind,
            description=description,
            snapshot=copy.deepcopy(dict(snapshot or {})),
            pointers=dict(pointers or {}),
            highlights=tuple(highlights),
            results=copy.deepcopy(results),
            frames=tuple(self._frames),
        )
        self._steps.append(step)
        return step

    def _push_frame(self, label: str) -> None:
        self._frames.append(label)

    def _pop_frame(self) -> str:
        return self._frames.pop()

    @property
    def _step_count(self) -> int:
        return len(self._steps)
