"""Input Normalizer: free text to validated, size-bounded structures.

Every public ``parse_*`` function is total: failures come back as a
``ParseResult`` carrying an ``InputParseError`` rather than an exception.
"""

from __future__ import annotations

import json
import logging
import math
import re
from functools import wraps
from typing import Callable

from . import constants
from .input_types import (
    InputParseError,
    Number,
    ParseErrorKind,
    ParseResult,
    TreeNode,
)

logger = logging.getLogger(__name__)

_CELL_SEPARATORS = re.compile(r"[\s,，、]+")
_ROW_SEPARATORS = re.compile(r"[\n;]+")
_LINE_BREAKS = re.compile(r"\r?\n")


def _total(parser: Callable[..., object]) -> Callable[..., ParseResult]:
    """Wrap a raising parser so it returns a ParseResult instead."""

    @wraps(parser)
    def wrapper(*args, **kwargs) -> ParseResult:
        try:
            return ParseResult.success(parser(*args, **kwargs))
        except InputParseError as exc:
            logger.warning("%s rejected input: %s", parser.__name__, exc.message)
            return ParseResult.failure(exc)

    return wrapper


def _strip_brackets(text: str) -> str:
    return text.strip().strip("[]").strip()


def _split_cells(text: str) -> list[str]:
    return [seg for seg in _CELL_SEPARATORS.split(text) if seg]


def _to_number(token: str) -> Number:
    try:
        return int(token)
    except ValueError:
        pass
    try:
        value = float(token)
    except ValueError:
        raise InputParseError(
            ParseErrorKind.NON_NUMERIC, f"'{token}' is not a number"
        ) from None
    if not math.isfinite(value):
        raise InputParseError(ParseErrorKind.NON_NUMERIC, f"'{token}' is not finite")
    return int(value) if value.is_integer() and "." not in token else value


def _to_bounded_number(token: str) -> Number:
    value = _to_number(token)
    if abs(value) > constants.MAX_ABS_VALUE:
        raise InputParseError(
            ParseErrorKind.OUT_OF_RANGE,
            f"values must lie between -{constants.MAX_ABS_VALUE} and {constants.MAX_ABS_VALUE}",
        )
    return value


# ── Number lists ────────────────────────────────────────────────


@_total
def parse_number_list(
    text: str,
    max_len: int,
    allow_empty: bool = False,
    non_negative: bool = False,
) -> list[Number]:
    """Parse comma/space separated numbers, e.g. ``"1, 2, -3"``."""
    tokens = _split_cells(_strip_brackets(text))
    if not tokens:
        if allow_empty:
            return []
        raise InputParseError(ParseErrorKind.EMPTY, "enter at least one number")
    if len(tokens) > max_len:
        raise InputParseError(
            ParseErrorKind.TOO_LONG, f"at most {max_len} numbers are supported"
        )
    values = [_to_bounded_number(tok) for tok in tokens]
    if non_negative and any(v < 0 for v in values):
        raise InputParseError(
            ParseErrorKind.OUT_OF_RANGE, "values must be non-negative"
        )
    return values


# ── Matrices ────────────────────────────────────────────────────


@_total
def parse_matrix(
    text: str,
    max_rows: int,
    max_cols: int,
    square: bool = False,
) -> list[list[Number]]:
    """Parse a matrix: rows split by newlines or ``;``, cells like number lists."""
    rows = [r.strip().strip("[],").strip() for r in _ROW_SEPARATORS.split(text.strip())]
    rows = [r for r in rows if r]
    if not rows:
        raise InputParseError(ParseErrorKind.EMPTY, "the matrix is empty")
    too_large = InputParseError(
        ParseErrorKind.TOO_LARGE, f"matrix may be at most {max_rows}x{max_cols}"
    )
    if len(rows) > max_rows:
        raise too_large

    matrix: list[list[Number]] = []
    for row in rows:
        cells = _split_cells(row)
        if matrix and len(cells) != len(matrix[0]):
            raise InputParseError(
                ParseErrorKind.RAGGED, "every row must have the same number of columns"
            )
        if len(cells) > max_cols:
            raise too_large
        matrix.append([_to_bounded_number(cell) for cell in cells])

    if square and len(matrix) != len(matrix[0]):
        raise InputParseError(ParseErrorKind.NOT_SQUARE, "the matrix must be square")
    return matrix


# ── Trees ───────────────────────────────────────────────────────


def _tree_value(token: str) -> Number:
    try:
        return _to_bounded_number(token)
    except InputParseError as exc:
        if exc.kind != ParseErrorKind.NON_NUMERIC:
            raise
        raise InputParseError(
            ParseErrorKind.INVALID_TOKEN, f"'{token}' is neither a number nor null"
        ) from None


@_total
def parse_level_order_tree(
    text: str, max_nodes: int = constants.MAX_TREE_NODES
) -> TreeNode | None:
    """Parse LeetCode level order, e.g. ``"3,5,1,null,null,0,8"``.

    Nodes are built bottom-up because TreeNode is immutable: the level-order
    walk first assigns each token its path id and parent slot.
    """
    tokens = [t.lower() for t in _split_cells(_strip_brackets(text))]
    if not tokens or tokens[0] in constants.NULL_TOKENS:
        return None

    values = [None if t in constants.NULL_TOKENS else _tree_value(t) for t in tokens]
    present = sum(1 for v in values if v is not None)
    if present > max_nodes:
        raise InputParseError(
            ParseErrorKind.TOO_LONG, f"at most {max_nodes} tree nodes are supported"
        )

    # (id, value) for every real node, plus child id links
    ids: list[str] = [constants.ROOT_NODE_ID]
    node_values: dict[str, Number] = {constants.ROOT_NODE_ID: values[0]}
    children: dict[str, dict[str, str]] = {constants.ROOT_NODE_ID: {}}
    queue = [constants.ROOT_NODE_ID]
    i = 1
    while queue and i < len(values):
        parent = queue.pop(0)
        for side, suffix in (("left", constants.LEFT_SUFFIX), ("right", constants.RIGHT_SUFFIX)):
            if i >= len(values):
                break
            value = values[i]
            i += 1
            if value is None:
                continue
            child_id = parent + suffix
            ids.append(child_id)
            node_values[child_id] = value
            children[child_id] = {}
            children[parent][side] = child_id
            queue.append(child_id)

    if i < len(values) and any(v is not None for v in values[i:]):
        raise InputParseError(
            ParseErrorKind.INVALID_TOKEN, "values follow a level with no parent nodes"
        )

    built: dict[str, TreeNode] = {}
    for node_id in reversed(ids):
        links = children[node_id]
        built[node_id] = TreeNode(
            id=node_id,
            value=node_values[node_id],
            left=built.get(links.get("left", "")),
            right=built.get(links.get("right", "")),
        )
    return built[constants.ROOT_NODE_ID]


# ── Edge lists ──────────────────────────────────────────────────


@_total
def parse_edge_list(
    text: str,
    node_count: int,
    max_edges: int = constants.MAX_PREREQUISITES,
) -> list[tuple[int, int]]:
    """Parse a JSON array of ``[course, prereq]`` pairs."""
    if not text.strip():
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputParseError(
            ParseErrorKind.MALFORMED, f"not a valid JSON array: {exc.msg}"
        ) from exc
    except (ValueError, RecursionError) as exc:
        # oversized integer literals and runaway nesting
        raise InputParseError(
            ParseErrorKind.MALFORMED, "not a valid JSON array of small integers"
        ) from exc
    if not isinstance(data, list):
        raise InputParseError(ParseErrorKind.MALFORMED, "expected a JSON array of pairs")
    if len(data) > max_edges:
        raise InputParseError(
            ParseErrorKind.TOO_LONG, f"at most {max_edges} pairs are supported"
        )

    edges: list[tuple[int, int]] = []
    for position, pair in enumerate(data, start=1):
        if not isinstance(pair, list) or len(pair) != 2:
            raise InputParseError(
                ParseErrorKind.MALFORMED, f"item {position} must be a [course, prereq] pair"
            )
        if not all(isinstance(v, int) and not isinstance(v, bool) for v in pair):
            raise InputParseError(
                ParseErrorKind.MALFORMED, f"item {position} must hold two integers"
            )
        course, prereq = pair
        if not (0 <= course < node_count and 0 <= prereq < node_count):
            raise InputParseError(
                ParseErrorKind.OUT_OF_RANGE,
                f"course ids must lie between 0 and {node_count - 1}",
            )
        edges.append((course, prereq))
    return edges


# ── Scalars and text ────────────────────────────────────────────


@_total
def parse_int(text: str, minimum: int, maximum: int) -> int:
    token = text.strip()
    if not token:
        raise InputParseError(ParseErrorKind.EMPTY, "enter a whole number")
    try:
        value = int(token)
    except ValueError:
        raise InputParseError(
            ParseErrorKind.NON_NUMERIC, f"'{token}' is not a whole number"
        ) from None
    if not minimum <= value <= maximum:
        raise InputParseError(
            ParseErrorKind.OUT_OF_RANGE, f"value must lie between {minimum} and {maximum}"
        )
    return value


@_total
def parse_number(text: str) -> Number:
    token = text.strip()
    if not token:
        raise InputParseError(ParseErrorKind.EMPTY, "enter a number")
    return _to_bounded_number(token)


@_total
def parse_text(text: str, max_len: int) -> str:
    normalized = _LINE_BREAKS.sub("", text)
    if len(normalized) > max_len:
        raise InputParseError(
            ParseErrorKind.TOO_LONG, f"at most {max_len} characters are supported"
        )
    return normalized
