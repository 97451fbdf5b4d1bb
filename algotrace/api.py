"""Composable API functions for building and inspecting algorithm traces.

Each function is callable programmatically; ``scripts/replay_demo.py``
wraps them for the command line.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .builders import SUPPORTED_ALGORITHMS, get_builder, get_builder_class
from .input_types import ParseResult
from .trace_types import Trace

logger = logging.getLogger(__name__)


def list_algorithms() -> list[dict[str, Any]]:
    """Describe every registered algorithm.

    Returns:
        One dict per slug with its title, family, default input fields and
        playback defaults, in registration order.
    """
    catalogue = []
    for slug in SUPPORTED_ALGORITHMS:
        cls = get_builder_class(slug)
        catalogue.append(
            {
                "slug": slug,
                "title": cls.TITLE,
                "family": cls.FAMILY,
                "fields": dict(cls.DEFAULT_FIELDS),
                "delay_ms": cls.DELAY_MS,
                "log_capacity": cls.LOG_CAPACITY,
            }
        )
    return catalogue


def parse_input(algorithm: str, **fields: str) -> ParseResult:
    """Normalise raw text fields for *algorithm*.

    Fields that are not given fall back to the algorithm's defaults.

    Returns:
        A ParseResult holding either the params or an InputParseError.
    """
    return get_builder(algorithm).parse(fields)


def build_trace(algorithm: str, params: Any = None) -> Trace:
    """Build the trace for *algorithm*.

    Args:
        algorithm: Registered slug, e.g. "three-sum".
        params: Params from ``parse_input``; None uses the default input.

    Returns:
        The complete, immutable Trace.
    """
    builder = get_builder(algorithm)
    if params is None:
        params = builder.default_params()
    logger.info("Building trace for %s", algorithm)
    return builder.build(params)


def dump_trace(trace: Trace) -> str:
    """Return a human-readable text dump with one line per step."""
    width = len(str(len(trace)))
    lines = [f"{trace.algorithm}: {len(trace)} steps, answer = {trace.answer}"]
    for step in trace:
        frames = f"  [{' > '.join(step.frames)}]" if step.frames else ""
        lines.append(
            f"  {step.index:>{width}}  {step.kind:<16} {step.description}{frames}"
        )
    return "\n".join(lines)


def trace_to_json(trace: Trace, indent: int | None = 2) -> str:
    return json.dumps(trace.to_dict(), indent=indent, ensure_ascii=False)
