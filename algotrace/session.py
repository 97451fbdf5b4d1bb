"""Animation session: one algorithm's input, trace and playback together."""

from __future__ import annotations

import logging
from typing import Any

from .builders import get_builder
from .input_types import InputParseError, ParseResult
from .playback import PlaybackController
from .playback_types import PlaybackConfig
from .scheduler import Scheduler
from .trace_types import Trace

logger = logging.getLogger(__name__)


class AnimationSession:
    """Couples a builder, its committed input and a playback controller.

    Input changes are atomic: ``apply`` either commits new fields, params,
    trace and a reset controller together, or changes nothing at all.
    """

    def __init__(
        self,
        algorithm: str,
        scheduler: Scheduler,
        config: PlaybackConfig | None = None,
    ):
        self._builder = get_builder(algorithm)
        self._fields: dict[str, str] = dict(self._builder.DEFAULT_FIELDS)
        self._params = self._builder.default_params()
        self._trace = self._builder.build(self._params)
        self._controller = PlaybackController(
            self._trace, scheduler, config or PlaybackConfig.for_builder(self._builder)
        )
        self._last_error: InputParseError | None = None

    @property
    def algorithm(self) -> str:
        return self._builder.SLUG

    @property
    def title(self) -> str:
        return self._builder.TITLE

    @property
    def fields(self) -> dict[str, str]:
        return dict(self._fields)

    @property
    def params(self) -> Any:
        return self._params

    @property
    def trace(self) -> Trace:
        return self._trace

    @property
    def controller(self) -> PlaybackController:
        return self._controller

    @property
    def last_error(self) -> InputParseError | None:
        return self._last_error

    def apply(self, **fields: str) -> ParseResult:
        """Parse *fields* over the committed ones and rebuild on success."""
        merged = {**self._fields, **fields}
        result = self._builder.parse(merged)
        if not result.ok:
            self._last_error = result.error
            return result

        self._controller.cancel_timer()
        trace = self._builder.build(result.value)
        self._fields = merged
        self._params = result.value
        self._trace = trace
        self._controller.load(trace)
        self._last_error = None
        logger.info(
            "Applied new input to %s (%d steps)", self._builder.SLUG, len(trace)
        )
        return result
