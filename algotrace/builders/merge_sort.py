"""Bottom-up merge sort of a linked list's values (Sort List)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from .. import constants
from ..input_types import NumbersParams, make_params
from ..normalizer import parse_number_list
from ._base import TraceBuilder

logger = logging.getLogger(__name__)


class MergeSortStep(str, Enum):
    INIT = "init"
    PASS = "pass"
    MERGE = "merge"
    DONE = "done"


def _fmt(values: list) -> str:
    return " -> ".join(str(v) for v in values) if values else "(empty)"


def _merge(left: list, right: list) -> list:
    merged = []
    i = j = 0
    while i < len(left) and j < len(right):
        # <= keeps equal values in their original order
        if left[i] <= right[j]:
            merged.append(left[i])
            i += 1
        else:
            merged.append(right[j])
            j += 1
    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged


class SortListBuilder(TraceBuilder):
    """Sort by merging runs of width 1, 2, 4, ... until one run remains.

    Segment boundaries depend only on the pass width and the list length,
    so there are exactly ceil(log2 n) passes.
    """

    SLUG = "sort-list"
    FAMILY = "merge-sort"
    TITLE = "Sort List"
    DEFAULT_FIELDS = {"values": "4, 2, 1, 3"}
    DELAY_MS = 1400

    def _params_from_fields(self, fields: Mapping[str, str]) -> NumbersParams:
        values = parse_number_list(fields["values"], constants.MAX_SORT_LENGTH).unwrap()
        return make_params(NumbersParams, numbers=values)

    def _run(self, params: NumbersParams) -> list:
        values = list(params.numbers)
        n = len(values)

        def snapshot(width: int, **extra: Any) -> dict[str, Any]:
            return {"values": values, "width": width, **extra}

        self._emit(
            MergeSortStep.INIT,
            f"Start with the list {_fmt(values)}; every node is a sorted run of 1.",
            snapshot=snapshot(1),
            pointers={"start": None, "mid": None, "end": None},
        )

        width = 1
        pass_number = 0
        while width < n:
            pass_number += 1
            self._emit(
                MergeSortStep.PASS,
                f"Pass {pass_number}: merge neighbouring runs of length {width}.",
                snapshot=snapshot(width, pass_number=pass_number),
                pointers={"start": None, "mid": None, "end": None},
            )
            for start in range(0, n, 2 * width):
                mid = min(start + width, n)
                end = min(start + 2 * width, n)
                left = values[start:mid]
                right = values[mid:end]
                merged = _merge(left, right)
                values[start:end] = merged
                if right:
                    description = (
                        f"Merge [{_fmt(left)}] with [{_fmt(right)}] into "
                        f"[{_fmt(merged)}]."
                    )
                else:
                    description = f"Run [{_fmt(left)}] has no partner; carry it over."
                self._emit(
                    MergeSortStep.MERGE,
                    description,
                    snapshot=snapshot(
                        width,
                        pass_number=pass_number,
                        left=left,
                        right=right,
                        merged=merged,
                    ),
                    pointers={"start": start, "mid": mid, "end": end},
                    highlights=[f"cell:{i}" for i in range(start, end)],
                )
            width *= 2

        self._emit(
            MergeSortStep.DONE,
            f"Done: sorted list is {_fmt(values)}.",
            snapshot=snapshot(width, answer=values),
            pointers={"start": None, "mid": None, "end": None},
        )
        return values
