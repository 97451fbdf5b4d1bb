"""Instrumented trace builders for every supported algorithm."""

from __future__ import annotations

import importlib

from ._base import TraceBuilder


class UnknownAlgorithmError(ValueError):
    """No builder is registered under the requested slug."""


# Lazy imports so only the requested family is loaded
_BUILDER_CLASSES: dict[str, str] = {
    "longest-substring": "two_pointer.LongestSubstringBuilder",
    "sliding-window-max": "two_pointer.SlidingWindowMaxBuilder",
    "trap-rain-water": "two_pointer.TrappingRainWaterBuilder",
    "three-sum": "two_pointer.ThreeSumBuilder",
    "product-except-self": "two_pointer.ProductExceptSelfBuilder",
    "combination-sum": "backtracking.CombinationSumBuilder",
    "permutations": "backtracking.PermutationsBuilder",
    "subsets": "backtracking.SubsetsBuilder",
    "course-schedule": "graph.CourseScheduleBuilder",
    "lowest-common-ancestor": "tree.LowestCommonAncestorBuilder",
    "max-path-sum": "tree.MaxPathSumBuilder",
    "sort-list": "merge_sort.SortListBuilder",
    "spiral-order": "matrix.SpiralOrderBuilder",
    "rotate-image": "matrix.RotateImageBuilder",
}


def get_builder_class(algorithm: str) -> type[TraceBuilder]:
    location = _BUILDER_CLASSES.get(algorithm)
    if location is None:
        raise UnknownAlgorithmError(f"Unsupported algorithm: {algorithm}")
    module_name, class_name = location.split(".")
    mod = importlib.import_module(f".{module_name}", package=__package__)
    return getattr(mod, class_name)


def get_builder(algorithm: str) -> TraceBuilder:
    """Instantiate the trace builder registered under *algorithm*.

    Raises ``UnknownAlgorithmError`` (a ``ValueError``) for unknown slugs.
    """
    return get_builder_class(algorithm)()


SUPPORTED_ALGORITHMS: tuple[str, ...] = tuple(_BUILDER_CLASSES.keys())

__all__ = [
    "TraceBuilder",
    "UnknownAlgorithmError",
    "get_builder",
    "get_builder_class",
    "SUPPORTED_ALGORITHMS",
]
