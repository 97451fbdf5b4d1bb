"""Input data types: parse errors, parse results and per-algorithm params."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_core import PydanticCustomError

from . import constants

Number = int | float


class ParseErrorKind(str, Enum):
    EMPTY = "empty"
    NON_NUMERIC = "non_numeric"
    TOO_LONG = "too_long"
    RAGGED = "ragged"
    NOT_SQUARE = "not_square"
    TOO_LARGE = "too_large"
    OUT_OF_RANGE = "out_of_range"
    MALFORMED = "malformed"
    INVALID_TOKEN = "invalid_token"


class InputParseError(Exception):
    """Raw input text could not be turned into valid params."""

    def __init__(self, kind: ParseErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"InputParseError({self.kind.value!r}, {self.message!r})"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of a parse: either a value or an InputParseError, never both."""

    ok: bool
    value: Any = None
    error: InputParseError | None = None

    @classmethod
    def success(cls, value: Any) -> ParseResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: InputParseError) -> ParseResult:
        return cls(ok=False, error=error)

    def unwrap(self) -> Any:
        if not self.ok:
            raise self.error
        return self.value


# ── Tree structure ──────────────────────────────────────────────


class TreeNode(BaseModel):
    """Binary tree node with a stable, path-based identifier."""

    model_config = ConfigDict(frozen=True)

    id: str
    value: Number
    left: TreeNode | None = None
    right: TreeNode | None = None

    def iter_level_order(self) -> Iterator[TreeNode]:
        queue = [self]
        while queue:
            node = queue.pop(0)
            yield node
            if node.left is not None:
                queue.append(node.left)
            if node.right is not None:
                queue.append(node.right)

    def values(self) -> list[Number]:
        return [n.value for n in self.iter_level_order()]


TreeNode.model_rebuild()


# ── Params (one value object per algorithm) ─────────────────────


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextParams(_Params):
    text: str = Field(default="", max_length=constants.MAX_SUBSTRING_LENGTH)


class NumbersParams(_Params):
    numbers: list[Number] = []


class WindowParams(_Params):
    numbers: list[Number] = []
    k: int = 1


class MatrixParams(_Params):
    matrix: list[list[Number]] = []


class CombinationParams(_Params):
    candidates: list[int] = Field(
        default=[], max_length=constants.MAX_COMBINATION_CANDIDATES
    )
    target: int = Field(default=1, ge=1, le=constants.MAX_COMBINATION_TARGET)

    @model_validator(mode="after")
    def _candidates_positive(self) -> CombinationParams:
        if any(c <= 0 for c in self.candidates):
            raise PydanticCustomError(
                "out_of_range", "candidates must be positive integers"
            )
        return self


class TreeParams(_Params):
    root: TreeNode | None = None


class LcaParams(_Params):
    root: TreeNode
    p: Number
    q: Number

    @model_validator(mode="after")
    def _targets_in_tree(self) -> LcaParams:
        present = set(self.root.values())
        for name, target in (("p", self.p), ("q", self.q)):
            if target not in present:
                raise PydanticCustomError(
                    "out_of_range",
                    "node {name} ({target}) is not in the tree",
                    {"name": name, "target": target},
                )
        return self


class CourseParams(_Params):
    num_courses: int = Field(ge=1, le=constants.MAX_COURSES)
    prerequisites: list[tuple[int, int]] = Field(
        default=[], max_length=constants.MAX_PREREQUISITES
    )

    @model_validator(mode="after")
    def _courses_in_range(self) -> CourseParams:
        for course, prereq in self.prerequisites:
            if not (0 <= course < self.num_courses and 0 <= prereq < self.num_courses):
                raise PydanticCustomError(
                    "out_of_range",
                    "course ids must lie in 0..{last}",
                    {"last": self.num_courses - 1},
                )
        return self


_RANGE_ERROR_TYPES: frozenset[str] = frozenset(
    {"out_of_range", "greater_than_equal", "less_than_equal", "greater_than", "less_than"}
)
_LENGTH_ERROR_TYPES: frozenset[str] = frozenset({"too_long", "string_too_long"})


def make_params(model: type[_Params], **data: Any) -> _Params:
    """Construct *model*, translating pydantic failures into InputParseError."""
    try:
        return model(**data)
    except ValidationError as exc:
        first = exc.errors()[0]
        error_type = first["type"]
        if error_type in _RANGE_ERROR_TYPES:
            kind = ParseErrorKind.OUT_OF_RANGE
        elif error_type in _LENGTH_ERROR_TYPES:
            kind = ParseErrorKind.TOO_LONG
        else:
            kind = ParseErrorKind.MALFORMED
        raise InputParseError(kind, first["msg"]) from exc
