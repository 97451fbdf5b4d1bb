"""Step-by-step algorithm animation traces and playback."""

from .api import (  # noqa: F401
    list_algorithms,
    parse_input,
    build_trace,
    dump_trace,
    trace_to_json,
)
from .session import AnimationSession  # noqa: F401
