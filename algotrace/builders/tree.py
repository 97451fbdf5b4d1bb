"""Binary-tree post-order builders: lowest common ancestor, max path sum."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from .. import constants
from ..input_types import (
    InputParseError,
    LcaParams,
    ParseErrorKind,
    TreeNode,
    TreeParams,
    make_params,
)
from ..normalizer import parse_level_order_tree, parse_number
from ._base import TraceBuilder

logger = logging.getLogger(__name__)


class TreeStep(str, Enum):
    INIT = "init"
    DESCEND = "descend"
    FOUND = "found"
    COMBINE = "combine"
    RETURN = "return"
    DONE = "done"


def _node_ref(node: TreeNode) -> str:
    return f"node:{node.id}"


def _parse_root(text: str) -> TreeNode:
    root = parse_level_order_tree(text, constants.MAX_TREE_NODES).unwrap()
    if root is None:
        raise InputParseError(ParseErrorKind.EMPTY, "the tree needs at least one node")
    return root


class _PostOrderBuilder(TraceBuilder):
    FAMILY = "tree"

    def __init__(self):
        super().__init__()
        self._visiting: list[str] = []
        self._returned: dict[str, Any] = {}

    def _reset_walk(self) -> None:
        self._visiting = []
        self._returned = {}

    def _snapshot(self, node: TreeNode | None, **extra: Any) -> dict[str, Any]:
        return {
            "current": node.id if node is not None else None,
            "visiting": self._visiting,
            "returned": self._returned,
            **extra,
        }

    def _record(self, kind: TreeStep, node: TreeNode | None, description: str, **extra: Any) -> None:
        self._emit(
            kind,
            description,
            snapshot=self._snapshot(node, **extra),
            pointers={"depth": len(self._visiting)},
            highlights=[_node_ref(node)] if node is not None else [],
        )

    def _enter(self, node: TreeNode, label: str) -> None:
        self._push_frame(label)
        self._visiting.append(node.id)

    def _leave(self, node: TreeNode, value: Any) -> None:
        self._visiting.pop()
        self._returned[node.id] = value
        self._pop_frame()


# ── Lowest common ancestor ──────────────────────────────────────


class LowestCommonAncestorBuilder(_PostOrderBuilder):
    SLUG = "lowest-common-ancestor"
    TITLE = "Lowest Common Ancestor of a Binary Tree"
    DEFAULT_FIELDS = {"tree": "3,5,1,6,2,0,8,null,null,7,4", "p": "5", "q": "1"}
    DELAY_MS = 1500

    def _params_from_fields(self, fields: Mapping[str, str]) -> LcaParams:
        root = _parse_root(fields["tree"])
        p = parse_number(fields["p"]).unwrap()
        q = parse_number(fields["q"]).unwrap()
        return make_params(LcaParams, root=root, p=p, q=q)

    def _run(self, params: LcaParams) -> Any:
        self._reset_walk()
        self._targets = (params.p, params.q)

        self._record(
            TreeStep.INIT,
            None,
            f"Search the tree for the lowest common ancestor of {params.p} "
            f"and {params.q}.",
            p=params.p,
            q=params.q,
        )
        found = self._search(params.root)

        answer = found.value if found is not None else None
        self._emit(
            TreeStep.DONE,
            f"Done: the lowest common ancestor is {answer}.",
            snapshot=self._snapshot(
                None,
                p=params.p,
                q=params.q,
                lca=found.id if found is not None else None,
                answer=answer,
            ),
            pointers={"depth": 0},
            highlights=[_node_ref(found)] if found is not None else [],
        )
        return answer

    def _search(self, node: TreeNode) -> TreeNode | None:
        self._enter(node, f"lca({node.value})")
        p, q = self._targets
        self._record(TreeStep.DESCEND, node, f"Visit node {node.value}.", p=p, q=q)

        if node.value in self._targets:
            self._record(
                TreeStep.FOUND,
                node,
                f"Node {node.value} is a target; no need to search below it.",
                p=p,
                q=q,
            )
            self._record(
                TreeStep.RETURN, node, f"Return {node.value} to the parent.", p=p, q=q
            )
            self._leave(node, node.value)
            return node

        left = self._search(node.left) if node.left is not None else None
        right = self._search(node.right) if node.right is not None else None
        left_value = left.value if left is not None else None
        right_value = right.value if right is not None else None

        if left is not None and right is not None:
            result = node
            verdict = f"targets found on both sides; {node.value} is the ancestor"
        else:
            result = left if left is not None else right
            verdict = (
                f"pass up {result.value}" if result is not None else "nothing found below"
            )
        self._record(
            TreeStep.COMBINE,
            node,
            f"Node {node.value}: left gave {left_value}, right gave {right_value}; "
            f"{verdict}.",
            p=p,
            q=q,
            left=left_value,
            right=right_value,
        )

        value = result.value if result is not None else None
        self._record(TreeStep.RETURN, node, f"Return {value} to the parent.", p=p, q=q)
        self._leave(node, value)
        return result


# ── Binary tree maximum path sum ────────────────────────────────


class MaxPathSumBuilder(_PostOrderBuilder):
    SLUG = "max-path-sum"
    TITLE = "Binary Tree Maximum Path Sum"
    DEFAULT_FIELDS = {"tree": "-10,9,20,null,null,15,7"}
    DELAY_MS = 2000

    def _params_from_fields(self, fields: Mapping[str, str]) -> TreeParams:
        return make_params(TreeParams, root=_parse_root(fields["tree"]))

    def _run(self, params: TreeParams) -> Any:
        self._reset_walk()
        self._best: Any = None

        self._record(
            TreeStep.INIT,
            None,
            "Post-order walk: each node reports its best downward gain.",
            best=None,
        )
        self._gain(params.root)

        self._emit(
            TreeStep.DONE,
            f"Done: the maximum path sum is {self._best}.",
            snapshot=self._snapshot(None, best=self._best, answer=self._best),
            pointers={"depth": 0},
        )
        return self._best

    def _gain(self, node: TreeNode) -> Any:
        self._enter(node, f"gain({node.value})")
        self._record(
            TreeStep.DESCEND, node, f"Visit node {node.value}.", best=self._best
        )

        left = self._gain(node.left) if node.left is not None else 0
        right = self._gain(node.right) if node.right is not None else 0
        left_gain = max(left, 0)
        right_gain = max(right, 0)
        path_sum = node.value + left_gain + right_gain
        improved = self._best is None or path_sum > self._best
        if improved:
            self._best = path_sum

        self._record(
            TreeStep.COMBINE,
            node,
            f"Node {node.value}: path through it is {node.value} + {left_gain} + "
            f"{right_gain} = {path_sum}"
            + (f"; new best {path_sum}." if improved else f"; best stays {self._best}."),
            best=self._best,
            left_gain=left_gain,
            right_gain=right_gain,
            path_sum=path_sum,
        )

        value = node.value + max(left_gain, right_gain)
        self._record(
            TreeStep.RETURN,
            node,
            f"Return gain {value} to the parent.",
            best=self._best,
        )
        self._leave(node, value)
        return value
