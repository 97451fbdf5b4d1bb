"""Backtracking builders: combination sum, permutations, subsets.

Each builder logs the implicit recursion explicitly: ``choose`` before
descending into a branch, the branch's own steps, then ``backtrack`` after
returning.  Every recursive call pushes a frame, so each step carries the
call stack that was live when it was recorded.  Inputs are sorted first and
a repeated sibling value is reported as a ``skip`` step, which keeps the
collected results unique.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from .. import constants
from ..input_types import CombinationParams, NumbersParams, make_params
from ..normalizer import parse_int, parse_number_list
from ._base import TraceBuilder

logger = logging.getLogger(__name__)


class BacktrackStep(str, Enum):
    START = "start"
    CHOOSE = "choose"
    FOUND = "found"
    PRUNE = "prune"
    SKIP = "skip"
    BACKTRACK = "backtrack"
    DONE = "done"


def _node_id(path: list) -> str:
    if not path:
        return "node:root"
    return "node:" + "-".join(str(v) for v in path)


def _fmt(values: list) -> str:
    return "[" + ", ".join(str(v) for v in values) + "]"


class _BacktrackingBuilder(TraceBuilder):
    FAMILY = "backtracking"
    DELAY_MS = 800

    def __init__(self):
        super().__init__()
        self._path: list = []
        self._results: list[list] = []

    def _reset_search(self) -> None:
        self._path = []
        self._results = []

    def _snapshot(self, **extra: Any) -> dict[str, Any]:
        return {"path": self._path, "depth": len(self._path), **extra}

    def _record(self, kind: BacktrackStep, description: str, **extra: Any) -> None:
        self._emit(
            kind,
            description,
            snapshot=self._snapshot(**extra),
            pointers={"depth": len(self._path)},
            highlights=[_node_id(self._path)],
            results=self._results,
        )

    def _finish(self, summary: str) -> list[list]:
        self._emit(
            BacktrackStep.DONE,
            summary,
            snapshot=self._snapshot(answer=self._results),
            pointers={"depth": 0},
            results=self._results,
        )
        return list(self._results)


# ── Combination sum ─────────────────────────────────────────────


class CombinationSumBuilder(_BacktrackingBuilder):
    SLUG = "combination-sum"
    TITLE = "Combination Sum"
    DEFAULT_FIELDS = {"candidates": "2, 3, 6, 7", "target": "7"}

    def _params_from_fields(self, fields: Mapping[str, str]) -> CombinationParams:
        candidates = parse_number_list(
            fields["candidates"], constants.MAX_COMBINATION_CANDIDATES
        ).unwrap()
        target = parse_int(
            fields["target"], 1, constants.MAX_COMBINATION_TARGET
        ).unwrap()
        return make_params(CombinationParams, candidates=candidates, target=target)

    def _run(self, params: CombinationParams) -> list[list]:
        self._reset_search()
        self._candidates = sorted(params.candidates)
        self._target = params.target

        self._record(
            BacktrackStep.START,
            f"Search combinations of {_fmt(self._candidates)} summing to "
            f"{self._target}; each candidate may repeat.",
            candidates=self._candidates,
            target=self._target,
            total=0,
        )
        self._search(0, 0)
        return self._finish(
            f"Done: {len(self._results)} combination(s) sum to {self._target}."
        )

    def _search(self, start: int, total: int) -> None:
        self._push_frame(f"combine(path={_fmt(self._path)}, start={start})")
        extra = {"candidates": self._candidates, "target": self._target}

        if total == self._target:
            self._results.append(list(self._path))
            self._record(
                BacktrackStep.FOUND,
                f"Sum hits {self._target}: record {_fmt(self._path)}.",
                total=total,
                **extra,
            )
            self._pop_frame()
            return
        if total > self._target:
            self._record(
                BacktrackStep.PRUNE,
                f"Sum {total} overshoots {self._target}; prune this branch.",
                total=total,
                **extra,
            )
            self._pop_frame()
            return

        for i in range(start, len(self._candidates)):
            value = self._candidates[i]
            if i > start and value == self._candidates[i - 1]:
                self._record(
                    BacktrackStep.SKIP,
                    f"Candidate {value} at index {i} repeats its sibling; skip it.",
                    total=total,
                    index=i,
                    **extra,
                )
                continue

            self._path.append(value)
            self._record(
                BacktrackStep.CHOOSE,
                f"Choose {value}; path {_fmt(self._path)}, sum {total + value}.",
                total=total + value,
                index=i,
                **extra,
            )
            # candidates may repeat, so the child starts at i again
            self._search(i, total + value)
            self._path.pop()
            self._record(
                BacktrackStep.BACKTRACK,
                f"Backtrack: remove {value}; path {_fmt(self._path)}.",
                total=total,
                index=i,
                **extra,
            )

        self._pop_frame()


# ── Permutations ────────────────────────────────────────────────


class PermutationsBuilder(_BacktrackingBuilder):
    SLUG = "permutations"
    TITLE = "Permutations"
    DEFAULT_FIELDS = {"numbers": "1, 2, 3"}

    def _params_from_fields(self, fields: Mapping[str, str]) -> NumbersParams:
        numbers = parse_number_list(
            fields["numbers"], constants.MAX_PERMUTATION_NUMBERS
        ).unwrap()
        return make_params(NumbersParams, numbers=numbers)

    def _run(self, params: NumbersParams) -> list[list]:
        self._reset_search()
        self._numbers = sorted(params.numbers)
        self._used = [False] * len(self._numbers)

        self._record(
            BacktrackStep.START,
            f"Build every ordering of {_fmt(self._numbers)}.",
            numbers=self._numbers,
            used=self._used,
        )
        self._search()
        return self._finish(f"Done: {len(self._results)} unique permutation(s).")

    def _search(self) -> None:
        self._push_frame(f"permute(path={_fmt(self._path)})")
        extra = {"numbers": self._numbers, "used": self._used}

        if len(self._path) == len(self._numbers):
            self._results.append(list(self._path))
            self._record(
                BacktrackStep.FOUND,
                f"All numbers placed: record {_fmt(self._path)}.",
                **extra,
            )
            self._pop_frame()
            return

        for i, value in enumerate(self._numbers):
            if self._used[i]:
                continue
            # an equal value whose earlier copy is free would repeat a sibling
            if i > 0 and value == self._numbers[i - 1] and not self._used[i - 1]:
                self._record(
                    BacktrackStep.SKIP,
                    f"{value} at index {i} repeats an unused sibling; skip it.",
                    index=i,
                    **extra,
                )
                continue

            self._used[i] = True
            self._path.append(value)
            self._record(
                BacktrackStep.CHOOSE,
                f"Place {value} (index {i}); path {_fmt(self._path)}.",
                index=i,
                **extra,
            )
            self._search()
            self._path.pop()
            self._used[i] = False
            self._record(
                BacktrackStep.BACKTRACK,
                f"Backtrack: release {value}; path {_fmt(self._path)}.",
                index=i,
                **extra,
            )

        self._pop_frame()


# ── Subsets ─────────────────────────────────────────────────────


class SubsetsBuilder(_BacktrackingBuilder):
    SLUG = "subsets"
    TITLE = "Subsets"
    DEFAULT_FIELDS = {"numbers": "1, 2, 3"}

    def _params_from_fields(self, fields: Mapping[str, str]) -> NumbersParams:
        numbers = parse_number_list(
            fields["numbers"], constants.MAX_SUBSET_NUMBERS, allow_empty=True
        ).unwrap()
        return make_params(NumbersParams, numbers=numbers)

    def _run(self, params: NumbersParams) -> list[list]:
        self._reset_search()
        self._numbers = sorted(params.numbers)

        self._record(
            BacktrackStep.START,
            f"Enumerate every subset of {_fmt(self._numbers)}.",
            numbers=self._numbers,
            start=0,
        )
        self._search(0)
        return self._finish(f"Done: {len(self._results)} subset(s).")

    def _search(self, start: int) -> None:
        self._push_frame(f"subsets(path={_fmt(self._path)}, start={start})")
        extra = {"numbers": self._numbers, "start": start}

        # every node of the subset tree is itself an answer
        self._results.append(list(self._path))
        self._record(
            BacktrackStep.FOUND,
            f"Collect subset {_fmt(self._path)}.",
            **extra,
        )

        for i in range(start, len(self._numbers)):
            value = self._numbers[i]
            if i > start and value == self._numbers[i - 1]:
                self._record(
                    BacktrackStep.SKIP,
                    f"{value} at index {i} repeats its sibling; skip it.",
                    index=i,
                    **extra,
                )
                continue

            self._path.append(value)
            self._record(
                BacktrackStep.CHOOSE,
                f"Add {value}; path {_fmt(self._path)}.",
                index=i,
                **extra,
            )
            self._search(i + 1)
            self._path.pop()
            self._record(
                BacktrackStep.BACKTRACK,
                f"Backtrack: remove {value}; path {_fmt(self._path)}.",
                index=i,
                **extra,
            )

        self._pop_frame()
