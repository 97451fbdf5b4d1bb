"""Matrix builders: spiral traversal and in-place 90 degree rotation."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from .. import constants
from ..input_types import MatrixParams, make_params
from ..normalizer import parse_matrix
from ._base import TraceBuilder

logger = logging.getLogger(__name__)


def _cell(row: int, col: int) -> str:
    return f"cell:{row},{col}"


# ── Spiral order ────────────────────────────────────────────────


class SpiralStep(str, Enum):
    INIT = "init"
    VISIT = "visit"
    SHRINK = "shrink"
    DONE = "done"


class SpiralOrderBuilder(TraceBuilder):
    SLUG = "spiral-order"
    FAMILY = "matrix"
    TITLE = "Spiral Matrix"
    DEFAULT_FIELDS = {"matrix": "1,2,3\n4,5,6\n7,8,9"}
    DELAY_MS = 1200

    def _params_from_fields(self, fields: Mapping[str, str]) -> MatrixParams:
        matrix = parse_matrix(
            fields["matrix"], constants.MAX_SPIRAL_ROWS, constants.MAX_SPIRAL_COLS
        ).unwrap()
        return make_params(MatrixParams, matrix=matrix)

    def _run(self, params: MatrixParams) -> list:
        matrix = [list(row) for row in params.matrix]
        rows = len(matrix)
        cols = len(matrix[0]) if rows else 0
        top, bottom, left, right = 0, rows - 1, 0, cols - 1
        visited: list[list[int]] = []
        output: list = []

        def bounds(**position: int | None) -> dict[str, int | None]:
            return {"top": top, "bottom": bottom, "left": left, "right": right, **position}

        def snapshot(**extra: Any) -> dict[str, Any]:
            return {"matrix": matrix, "visited": visited, "output": output, **extra}

        def visit(row: int, col: int, direction: str) -> None:
            visited.append([row, col])
            output.append(matrix[row][col])
            self._emit(
                SpiralStep.VISIT,
                f"Moving {direction}: take {matrix[row][col]} at ({row}, {col}).",
                snapshot=snapshot(direction=direction),
                pointers=bounds(row=row, col=col),
                highlights=[_cell(row, col)],
            )

        def shrink(edge: str, description: str) -> None:
            self._emit(
                SpiralStep.SHRINK,
                description,
                snapshot=snapshot(edge=edge),
                pointers=bounds(row=None, col=None),
            )

        self._emit(
            SpiralStep.INIT,
            f"Walk the {rows}x{cols} matrix clockwise from the top-left corner.",
            snapshot=snapshot(),
            pointers=bounds(row=None, col=None),
        )

        while top <= bottom and left <= right:
            for col in range(left, right + 1):
                visit(top, col, "right")
            top += 1
            shrink("top", f"Top row done; top -> {top}.")

            for row in range(top, bottom + 1):
                visit(row, right, "down")
            right -= 1
            shrink("right", f"Right column done; right -> {right}.")

            if top <= bottom:
                for col in range(right, left - 1, -1):
                    visit(bottom, col, "left")
                bottom -= 1
                shrink("bottom", f"Bottom row done; bottom -> {bottom}.")

            if left <= right:
                for row in range(bottom, top - 1, -1):
                    visit(row, left, "up")
                left += 1
                shrink("left", f"Left column done; left -> {left}.")

        self._emit(
            SpiralStep.DONE,
            f"Done: spiral order is {output}.",
            snapshot=snapshot(answer=output),
            pointers=bounds(row=None, col=None),
        )
        return output


# ── Rotate image ────────────────────────────────────────────────


class RotateStep(str, Enum):
    INIT = "init"
    PHASE = "phase"
    SWAP = "swap"
    DONE = "done"


class RotateImageBuilder(TraceBuilder):
    """Rotate clockwise in place: transpose, then reverse every row."""

    SLUG = "rotate-image"
    FAMILY = "matrix"
    TITLE = "Rotate Image"
    DEFAULT_FIELDS = {"matrix": "1,2,3\n4,5,6\n7,8,9"}
    DELAY_MS = 1200

    def _params_from_fields(self, fields: Mapping[str, str]) -> MatrixParams:
        matrix = parse_matrix(
            fields["matrix"],
            constants.MAX_ROTATE_SIZE,
            constants.MAX_ROTATE_SIZE,
            square=True,
        ).unwrap()
        return make_params(MatrixParams, matrix=matrix)

    def _run(self, params: MatrixParams) -> list[list]:
        matrix = [list(row) for row in params.matrix]
        n = len(matrix)

        def swap(a: tuple[int, int], b: tuple[int, int], phase: str) -> None:
            (r1, c1), (r2, c2) = a, b
            first, second = matrix[r1][c1], matrix[r2][c2]
            matrix[r1][c1], matrix[r2][c2] = second, first
            self._emit(
                RotateStep.SWAP,
                f"Swap {first} at ({r1}, {c1}) with {second} at ({r2}, {c2}).",
                snapshot={"matrix": matrix, "phase": phase},
                pointers={"row": r1, "col": c1},
                highlights=[_cell(r1, c1), _cell(r2, c2)],
            )

        self._emit(
            RotateStep.INIT,
            f"Rotate the {n}x{n} matrix 90 degrees clockwise in place.",
            snapshot={"matrix": matrix, "phase": None},
            pointers={"row": None, "col": None},
        )

        self._emit(
            RotateStep.PHASE,
            "Phase 1: transpose across the main diagonal.",
            snapshot={"matrix": matrix, "phase": "transpose"},
            pointers={"row": None, "col": None},
        )
        for i in range(n):
            for j in range(i + 1, n):
                swap((i, j), (j, i), "transpose")

        self._emit(
            RotateStep.PHASE,
            "Phase 2: reverse every row.",
            snapshot={"matrix": matrix, "phase": "reverse"},
            pointers={"row": None, "col": None},
        )
        for i in range(n):
            for j in range(n // 2):
                swap((i, j), (i, n - 1 - j), "reverse")

        self._emit(
            RotateStep.DONE,
            "Done: the matrix is rotated.",
            snapshot={"matrix": matrix, "phase": None, "answer": matrix},
            pointers={"row": None, "col": None},
        )
        return matrix
