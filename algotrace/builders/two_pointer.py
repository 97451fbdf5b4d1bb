"""Two-pointer and sliding-window builders."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from .. import constants
from ..input_types import NumbersParams, TextParams, WindowParams, make_params
from ..normalizer import parse_int, parse_number_list, parse_text
from ._base import TraceBuilder

logger = logging.getLogger(__name__)


def _cell(index: int) -> str:
    return f"cell:{index}"


def _fmt(values: list[Any]) -> str:
    return "[" + ", ".join(str(v) for v in values) + "]"


# ── Longest substring without repeating characters ──────────────


class SubstringStep(str, Enum):
    INIT = "init"
    SHRINK = "shrink"
    EXPAND = "expand"
    UPDATE_MAX = "update-max"
    DONE = "done"


class LongestSubstringBuilder(TraceBuilder):
    SLUG = "longest-substring"
    FAMILY = "sliding-window"
    TITLE = "Longest Substring Without Repeating Characters"
    DEFAULT_FIELDS = {"text": "abcabcbb"}
    DELAY_MS = 1400
    LOG_CAPACITY = 14

    def _params_from_fields(self, fields: Mapping[str, str]) -> TextParams:
        text = parse_text(fields["text"], constants.MAX_SUBSTRING_LENGTH).unwrap()
        return make_params(TextParams, text=text)

    def _run(self, params: TextParams) -> int:
        text = params.text
        # dict as an insertion-ordered set; str hashing would make set order vary
        window: dict[str, None] = {}
        left = 0
        best_start = 0
        best_length = 0

        def snapshot(window_end: int, length: int) -> dict[str, Any]:
            return {
                "text": text,
                "window": list(window),
                "window_start": left,
                "window_end": window_end,
                "length": length,
                "best": text[best_start : best_start + best_length],
                "best_length": best_length,
            }

        self._emit(
            SubstringStep.INIT,
            f'Scan "{text}" with an empty window; left = 0.'
            if text
            else "The string is empty; the window stays empty.",
            snapshot=snapshot(-1, 0),
            pointers={"left": 0 if text else None, "right": None},
        )

        for right, ch in enumerate(text):
            while ch in window:
                removed = text[left]
                del window[removed]
                left += 1
                self._emit(
                    SubstringStep.SHRINK,
                    f"'{ch}' is already in the window; drop '{removed}' at index "
                    f"{left - 1}, left -> {left}.",
                    snapshot=snapshot(right - 1, max(0, right - left)),
                    pointers={"left": left, "right": right},
                    highlights=[_cell(left - 1)],
                )

            window[ch] = None
            length = right - left + 1
            self._emit(
                SubstringStep.EXPAND,
                f"Add '{ch}'; window is [{left}, {right}] with length {length}.",
                snapshot=snapshot(right, length),
                pointers={"left": left, "right": right},
                highlights=[_cell(right)],
            )

            if length > best_length:
                best_start, best_length = left, length
                self._emit(
                    SubstringStep.UPDATE_MAX,
                    f'Longest substring is now "{text[left : right + 1]}" '
                    f"with length {length}.",
                    snapshot=snapshot(right, length),
                    pointers={"left": left, "right": right},
                    highlights=[_cell(i) for i in range(left, right + 1)],
                )

        final = snapshot(len(text) - 1, len(window))
        final[constants.ANSWER_KEY] = best_length
        self._emit(
            SubstringStep.DONE,
            f'Done: longest substring without repeats is "{final["best"]}" '
            f"(length {best_length}).",
            snapshot=final,
            pointers={"left": left if text else None, "right": None},
        )
        return best_length


# ── Sliding window maximum (monotonic deque) ────────────────────


class WindowMaxStep(str, Enum):
    INIT = "init"
    REMOVE_OUTDATED = "remove-outdated"
    REMOVE_TAIL = "remove-tail"
    PUSH = "push"
    RECORD = "record"
    DONE = "done"


class SlidingWindowMaxBuilder(TraceBuilder):
    SLUG = "sliding-window-max"
    FAMILY = "sliding-window"
    TITLE = "Sliding Window Maximum"
    DEFAULT_FIELDS = {"numbers": "1, 3, -1, -3, 5, 3, 6, 7", "k": "3"}
    DELAY_MS = 1500
    LOG_CAPACITY = 14

    def _params_from_fields(self, fields: Mapping[str, str]) -> WindowParams:
        numbers = parse_number_list(
            fields["numbers"], constants.MAX_WINDOW_NUMBERS, allow_empty=True
        ).unwrap()
        k = parse_int(fields["k"], 1, constants.MAX_WINDOW_NUMBERS).unwrap()
        return make_params(WindowParams, numbers=numbers, k=k)

    def _run(self, params: WindowParams) -> list:
        numbers = list(params.numbers)
        k = params.k
        deque: list[int] = []
        results: list = []

        def snapshot(start: int, end: int) -> dict[str, Any]:
            return {
                "numbers": numbers,
                "k": k,
                "deque": deque,
                "window_start": start,
                "window_end": end,
                "window_length": max(0, end - start + 1),
            }

        if not numbers or k <= 0 or k > len(numbers):
            reason = (
                "The array is empty"
                if not numbers
                else f"Window size {k} exceeds the array length {len(numbers)}"
            )
            self._emit(
                WindowMaxStep.INIT,
                f"{reason}; no window can be formed.",
                snapshot=snapshot(0, -1),
                pointers={"left": None, "right": None},
                results=results,
            )
            final = snapshot(0, -1)
            final[constants.ANSWER_KEY] = []
            self._emit(
                WindowMaxStep.DONE,
                "Done: no window maxima.",
                snapshot=final,
                pointers={"left": None, "right": None},
                results=results,
            )
            return []

        self._emit(
            WindowMaxStep.INIT,
            f"Slide a window of size {k} over {_fmt(numbers)} with an empty deque.",
            snapshot=snapshot(0, -1),
            pointers={"left": 0, "right": None},
            results=results,
        )

        for i, value in enumerate(numbers):
            start = max(0, i - k + 1)
            pointers = {"left": start, "right": i}

            while deque and deque[0] < i - k + 1:
                removed = deque.pop(0)
                self._emit(
                    WindowMaxStep.REMOVE_OUTDATED,
                    f"Index {removed} fell out of window [{start}, {i}]; "
                    "pop it from the front.",
                    snapshot=snapshot(start, i),
                    pointers=pointers,
                    highlights=[_cell(removed)],
                    results=results,
                )

            while deque and numbers[deque[-1]] <= value:
                removed = deque.pop()
                self._emit(
                    WindowMaxStep.REMOVE_TAIL,
                    f"{value} >= {numbers[removed]} at index {removed}; pop the tail "
                    "to keep the deque decreasing.",
                    snapshot=snapshot(start, i),
                    pointers=pointers,
                    highlights=[_cell(removed)],
                    results=results,
                )

            deque.append(i)
            self._emit(
                WindowMaxStep.PUSH,
                f"Push index {i} (value {value}) onto the tail.",
                snapshot=snapshot(start, i),
                pointers=pointers,
                highlights=[_cell(i)],
                results=results,
            )

            if i >= k - 1:
                max_index = deque[0]
                results.append(numbers[max_index])
                self._emit(
                    WindowMaxStep.RECORD,
                    f"Window [{start}, {i}] max is {numbers[max_index]} "
                    f"(index {max_index}).",
                    snapshot=snapshot(start, i),
                    pointers=pointers,
                    highlights=[_cell(max_index)],
                    results=results,
                )

        final = snapshot(len(numbers) - k, len(numbers) - 1)
        final[constants.ANSWER_KEY] = results
        self._emit(
            WindowMaxStep.DONE,
            f"Done: window maxima are {_fmt(results)}.",
            snapshot=final,
            pointers={"left": None, "right": None},
            results=results,
        )
        return results


# ── Trapping rain water ─────────────────────────────────────────


class RainWaterStep(str, Enum):
    INIT = "init"
    INSUFFICIENT = "insufficient"
    RAISE_LEFT_MAX = "raise-left-max"
    COLLECT_LEFT = "collect-left"
    RAISE_RIGHT_MAX = "raise-right-max"
    COLLECT_RIGHT = "collect-right"
    DONE = "done"


class TrappingRainWaterBuilder(TraceBuilder):
    SLUG = "trap-rain-water"
    FAMILY = "two-pointer"
    TITLE = "Trapping Rain Water"
    DEFAULT_FIELDS = {"heights": "0, 1, 0, 2, 1, 0, 1, 3, 2, 1, 2, 1"}
    DELAY_MS = 1600

    def _params_from_fields(self, fields: Mapping[str, str]) -> NumbersParams:
        heights = parse_number_list(
            fields["heights"],
            constants.MAX_RAIN_BARS,
            allow_empty=True,
            non_negative=True,
        ).unwrap()
        return make_params(NumbersParams, numbers=heights)

    def _run(self, params: NumbersParams) -> int | float:
        heights = list(params.numbers)
        n = len(heights)
        water = [0] * n
        left, right = 0, n - 1
        left_max = right_max = 0
        total = 0

        def snapshot(**extra: Any) -> dict[str, Any]:
            return {
                "heights": heights,
                "water": water,
                "left_max": left_max,
                "right_max": right_max,
                "total": total,
                **extra,
            }

        if n < 3:
            self._emit(
                RainWaterStep.INIT,
                f"Heights {_fmt(heights)}.",
                snapshot=snapshot(),
                pointers={"left": None, "right": None},
            )
            self._emit(
                RainWaterStep.INSUFFICIENT,
                "Fewer than 3 bars cannot hold any water.",
                snapshot=snapshot(answer=0),
                pointers={"left": None, "right": None},
            )
            return 0

        self._emit(
            RainWaterStep.INIT,
            f"left = {left}, right = {right}; both running maxima start at 0.",
            snapshot=snapshot(),
            pointers={"left": left, "right": right},
        )

        while left <= right:
            pointers = {"left": left, "right": right}
            # ties advance the left pointer
            if heights[left] <= heights[right]:
                index, height = left, heights[left]
                if height >= left_max:
                    left_max = height
                    self._emit(
                        RainWaterStep.RAISE_LEFT_MAX,
                        f"left_max rises to {left_max}; bar {index} holds no water.",
                        snapshot=snapshot(added=0),
                        pointers=pointers,
                        highlights=[_cell(index)],
                    )
                else:
                    collected = left_max - height
                    water[index] += collected
                    total += collected
                    self._emit(
                        RainWaterStep.COLLECT_LEFT,
                        f"left_max {left_max} > height {height}; bar {index} "
                        f"holds {collected}.",
                        snapshot=snapshot(added=collected),
                        pointers=pointers,
                        highlights=[_cell(index)],
                    )
                left += 1
            else:
                index, height = right, heights[right]
                if height >= right_max:
                    right_max = height
                    self._emit(
                        RainWaterStep.RAISE_RIGHT_MAX,
                        f"right_max rises to {right_max}; bar {index} holds no water.",
                        snapshot=snapshot(added=0),
                        pointers=pointers,
                        highlights=[_cell(index)],
                    )
                else:
                    collected = right_max - height
                    water[index] += collected
                    total += collected
                    self._emit(
                        RainWaterStep.COLLECT_RIGHT,
                        f"right_max {right_max} > height {height}; bar {index} "
                        f"holds {collected}.",
                        snapshot=snapshot(added=collected),
                        pointers=pointers,
                        highlights=[_cell(index)],
                    )
                right -= 1

        self._emit(
            RainWaterStep.DONE,
            f"Pointers crossed. Total trapped water: {total}.",
            snapshot=snapshot(answer=total),
            pointers={"left": None, "right": None},
        )
        return total


# ── 3Sum ────────────────────────────────────────────────────────


class ThreeSumStep(str, Enum):
    INIT = "init"
    INSUFFICIENT = "insufficient"
    SKIP_BASE = "skip-base"
    TERMINATE = "terminate"
    INIT_BASE = "init-base"
    FOUND = "found"
    CONTRACT = "contract"
    POINTER_MEET = "pointer-meet"
    MOVE_LEFT = "move-left"
    MOVE_RIGHT = "move-right"
    ADVANCE_BASE = "advance-base"
    DONE = "done"


class ThreeSumBuilder(TraceBuilder):
    SLUG = "three-sum"
    FAMILY = "two-pointer"
    TITLE = "3Sum"
    DEFAULT_FIELDS = {"numbers": "-1, 0, 1, 2, -1, -4"}
    DELAY_MS = 1700

    def _params_from_fields(self, fields: Mapping[str, str]) -> NumbersParams:
        numbers = parse_number_list(
            fields["numbers"], constants.MAX_THREE_SUM_NUMBERS
        ).unwrap()
        return make_params(NumbersParams, numbers=numbers)

    def _run(self, params: NumbersParams) -> list[list]:
        nums = sorted(params.numbers)
        n = len(nums)
        triplets: list[list] = []

        def snapshot(total: Any = None, **extra: Any) -> dict[str, Any]:
            return {"sorted": nums, "triplets": triplets, "sum": total, **extra}

        def pointers(base: int | None, left: int | None, right: int | None) -> dict:
            return {"base": base, "left": left, "right": right}

        self._emit(
            ThreeSumStep.INIT,
            f"Sort the input: {_fmt(nums)}.",
            snapshot=snapshot(),
            pointers=pointers(None, None, None),
            results=triplets,
        )

        if n < 3:
            self._emit(
                ThreeSumStep.INSUFFICIENT,
                "Fewer than 3 numbers; no triplet can be formed.",
                snapshot=snapshot(answer=[]),
                pointers=pointers(None, None, None),
                results=triplets,
            )
            return []

        for i in range(n - 2):
            base = nums[i]
            if i > 0 and base == nums[i - 1]:
                self._emit(
                    ThreeSumStep.SKIP_BASE,
                    f"Index {i} repeats base {base}; skip to avoid duplicate triplets.",
                    snapshot=snapshot(),
                    pointers=pointers(i, None, None),
                    highlights=[_cell(i)],
                    results=triplets,
                )
                continue

            if base > 0:
                self._emit(
                    ThreeSumStep.TERMINATE,
                    f"Base {base} > 0 and everything after it is larger; stop.",
                    snapshot=snapshot(),
                    pointers=pointers(i, None, None),
                    highlights=[_cell(i)],
                    results=triplets,
                )
                break

            left, right = i + 1, n - 1
            self._emit(
                ThreeSumStep.INIT_BASE,
                f"Fix index {i} (value {base}); left = {left}, right = {right}.",
                snapshot=snapshot(),
                pointers=pointers(i, left, right),
                highlights=[_cell(i)],
                results=triplets,
            )

            while left < right:
                total = base + nums[left] + nums[right]
                if total == 0:
                    triplet = [base, nums[left], nums[right]]
                    triplets.append(triplet)
                    self._emit(
                        ThreeSumStep.FOUND,
                        f"Found ({base}, {nums[left]}, {nums[right]}) summing to 0.",
                        snapshot=snapshot(total),
                        pointers=pointers(i, left, right),
                        highlights=[_cell(i), _cell(left), _cell(right)],
                        results=triplets,
                    )
                    left += 1
                    right -= 1
                    skipped_left = skipped_right = 0
                    while left < right and nums[left] == nums[left - 1]:
                        left += 1
                        skipped_left += 1
                    while left < right and nums[right] == nums[right + 1]:
                        right -= 1
                        skipped_right += 1

                    parts = []
                    if skipped_left:
                        parts.append(f"left skipped {skipped_left} duplicate(s)")
                    if skipped_right:
                        parts.append(f"right skipped {skipped_right} duplicate(s)")
                    meeting = left >= right
                    parts.append(
                        "pointers met; this base is finished"
                        if meeting
                        else f"continue with ({left}, {right})"
                    )
                    self._emit(
                        ThreeSumStep.POINTER_MEET if meeting else ThreeSumStep.CONTRACT,
                        "; ".join(parts).capitalize() + ".",
                        snapshot=snapshot(),
                        pointers=pointers(
                            i, None if meeting else left, None if meeting else right
                        ),
                        results=triplets,
                    )
                elif total < 0:
                    self._emit(
                        ThreeSumStep.MOVE_LEFT,
                        f"Sum {total} < 0; move left rightwards to grow it.",
                        snapshot=snapshot(total),
                        pointers=pointers(i, left, right),
                        highlights=[_cell(left)],
                        results=triplets,
                    )
                    left += 1
                else:
                    self._emit(
                        ThreeSumStep.MOVE_RIGHT,
                        f"Sum {total} > 0; move right leftwards to shrink it.",
                        snapshot=snapshot(total),
                        pointers=pointers(i, left, right),
                        highlights=[_cell(right)],
                        results=triplets,
                    )
                    right -= 1

            self._emit(
                ThreeSumStep.ADVANCE_BASE,
                f"Finished base index {i}; move on to {i + 1}.",
                snapshot=snapshot(),
                pointers=pointers(i, None, None),
                results=triplets,
            )

        self._emit(
            ThreeSumStep.DONE,
            f"Done: {len(triplets)} unique triplet(s) found.",
            snapshot=snapshot(answer=triplets),
            pointers=pointers(None, None, None),
            results=triplets,
        )
        return triplets


# ── Product of array except self ────────────────────────────────


class ProductStep(str, Enum):
    INIT = "init"
    LEFT_UPDATE = "left-update"
    RIGHT_UPDATE = "right-update"
    DONE = "done"


class ProductExceptSelfBuilder(TraceBuilder):
    SLUG = "product-except-self"
    FAMILY = "two-pointer"
    TITLE = "Product of Array Except Self"
    DEFAULT_FIELDS = {"numbers": "1, 2, 3, 4"}
    DELAY_MS = 1400

    def _params_from_fields(self, fields: Mapping[str, str]) -> NumbersParams:
        numbers = parse_number_list(
            fields["numbers"], constants.MAX_PRODUCT_NUMBERS
        ).unwrap()
        return make_params(NumbersParams, numbers=numbers)

    def _run(self, params: NumbersParams) -> list:
        nums = list(params.numbers)
        n = len(nums)
        left_acc = right_acc = 1
        prefix = [1] * n
        result = [1] * n

        def snapshot(**extra: Any) -> dict[str, Any]:
            return {
                "numbers": nums,
                "left_accumulator": left_acc,
                "right_accumulator": right_acc,
                "prefix": prefix,
                "result": result,
                **extra,
            }

        self._emit(
            ProductStep.INIT,
            "Fill the result with 1s; run a prefix pass then a suffix pass.",
            snapshot=snapshot(phase="init"),
            pointers={"index": None},
        )

        for index in range(n):
            prefix[index] = left_acc
            result[index] = left_acc
            self._emit(
                ProductStep.LEFT_UPDATE,
                f"Prefix pass: product left of index {index} is {left_acc}.",
                snapshot=snapshot(phase="left"),
                pointers={"index": index},
                highlights=[_cell(index)],
            )
            left_acc *= nums[index]

        for index in range(n - 1, -1, -1):
            previous = result[index]
            result[index] = previous * right_acc
            self._emit(
                ProductStep.RIGHT_UPDATE,
                f"Suffix pass: result[{index}] = {previous} x {right_acc} "
                f"= {result[index]}.",
                snapshot=snapshot(phase="right"),
                pointers={"index": index},
                highlights=[_cell(index)],
            )
            right_acc *= nums[index]

        self._emit(
            ProductStep.DONE,
            f"Done: output is {_fmt(result)}.",
            snapshot=snapshot(phase="final", answer=result),
            pointers={"index": None},
        )
        return result
