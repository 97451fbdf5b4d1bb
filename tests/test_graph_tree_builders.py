"""Tests for the course-schedule (Kahn) and binary-tree builders."""

from __future__ import annotations

import pytest

from algotrace.builders import get_builder
from algotrace.input_types import CourseParams, LcaParams, ParseErrorKind, TreeParams
from algotrace.normalizer import parse_level_order_tree


def _tree(text: str):
    return parse_level_order_tree(text).unwrap()


def _max_path_reference(node) -> int:
    best = float("-inf")

    def gain(n) -> int:
        nonlocal best
        if n is None:
            return 0
        left = max(gain(n.left), 0)
        right = max(gain(n.right), 0)
        best = max(best, n.value + left + right)
        return n.value + max(left, right)

    gain(node)
    return best


class TestCourseSchedule:
    def _build(self, n, prerequisites):
        return get_builder("course-schedule").build(
            CourseParams(num_courses=n, prerequisites=prerequisites)
        )

    def test_simple_chain_succeeds(self):
        trace = self._build(2, [(1, 0)])
        assert trace.answer is True
        assert trace.final_step.kind == "success"
        assert trace.final_step.snapshot["order"] == [0, 1]

    def test_cycle_fails(self):
        trace = self._build(2, [(1, 0), (0, 1)])
        assert trace.answer is False
        assert trace.final_step.kind == "failure"
        assert trace.final_step.snapshot["learned"] == 0

    def test_default_input(self):
        builder = get_builder("course-schedule")
        trace = builder.build(builder.default_params())
        assert trace.answer is True
        assert trace.final_step.snapshot["order"] == [0, 1, 2, 3]

    def test_opening_steps(self):
        kinds = self._build(3, [(1, 0), (2, 0)]).kinds()
        assert kinds[:3] == ["init", "enqueue-sources", "dequeue"]

    def test_every_snapshot_has_graph_state(self):
        trace = self._build(3, [(1, 0), (2, 1)])
        for step in trace:
            snap = step.snapshot
            assert len(snap["nodes"]) == 3
            assert {n["state"] for n in snap["nodes"]} <= {
                "idle",
                "ready",
                "processing",
                "completed",
            }
            assert len(snap["edges"]) == 2
            assert isinstance(snap["queue"], list)

    def test_edges_deactivate_when_source_completes(self):
        trace = self._build(2, [(1, 0)])
        complete = next(s for s in trace if s.kind == "complete")
        assert complete.snapshot["edges"][0]["active"] is False
        assert trace[0].snapshot["edges"][0]["active"] is True

    def test_relax_enqueues_at_zero(self):
        trace = self._build(3, [(2, 0), (2, 1)])
        relaxes = [s for s in trace if s.kind == "relax"]
        assert [s.snapshot["queue"] for s in relaxes] == [[1], [2]]

    def test_partial_cycle(self):
        trace = self._build(4, [(1, 0), (2, 1), (3, 2), (1, 3)])
        assert trace.answer is False
        assert trace.final_step.snapshot["order"] == [0]

    def test_out_of_range_course_rejected(self):
        result = get_builder("course-schedule").parse(
            {"num_courses": "2", "prerequisites": "[[2,0]]"}
        )
        assert result.error.kind == ParseErrorKind.OUT_OF_RANGE


class TestLowestCommonAncestor:
    TREE = "3,5,1,6,2,0,8,null,null,7,4"

    def _build(self, p, q, text=TREE):
        return get_builder("lowest-common-ancestor").build(
            LcaParams(root=_tree(text), p=p, q=q)
        )

    @pytest.mark.parametrize(
        "p, q, expected", [(5, 1, 3), (5, 4, 5), (7, 4, 2), (6, 4, 5), (0, 8, 1)]
    )
    def test_answers(self, p, q, expected):
        trace = self._build(p, q)
        assert trace.answer == expected
        assert trace.final_step.snapshot["answer"] == expected

    def test_found_returns_early(self):
        trace = self._build(5, 1)
        visited = [s.snapshot["current"] for s in trace if s.kind == "descend"]
        # nothing below the targets 5 and 1 is visited
        assert visited == ["0", "0-L", "0-R"]

    def test_three_steps_per_visited_node(self):
        trace = self._build(7, 4)
        for node_id in {s.snapshot["current"] for s in trace if s.kind == "descend"}:
            kinds = [s.kind for s in trace if s.snapshot["current"] == node_id]
            assert kinds[0] == "descend"
            assert kinds[-1] == "return"
            assert len(kinds) >= 3

    def test_frames_follow_recursion(self):
        trace = self._build(7, 4)
        for step in trace:
            if step.kind in ("descend", "combine", "return", "found"):
                assert len(step.frames) == len(step.snapshot["visiting"])
        assert trace.final_step.frames == ()

    def test_missing_target_rejected(self):
        result = get_builder("lowest-common-ancestor").parse({"p": "42"})
        assert result.error.kind == ParseErrorKind.OUT_OF_RANGE

    def test_empty_tree_rejected(self):
        result = get_builder("lowest-common-ancestor").parse({"tree": "null"})
        assert result.error.kind == ParseErrorKind.EMPTY


class TestMaxPathSum:
    def _build(self, text):
        return get_builder("max-path-sum").build(TreeParams(root=_tree(text)))

    @pytest.mark.parametrize(
        "text",
        ["-10,9,20,null,null,15,7", "1,2,3", "-3", "2,-1", "5,4,8,11,null,13,4,7,2"],
    )
    def test_matches_reference(self, text):
        assert self._build(text).answer == _max_path_reference(_tree(text))

    def test_default_example(self):
        trace = self._build("-10,9,20,null,null,15,7")
        assert trace.answer == 42

    def test_combine_snapshot_has_contributions(self):
        trace = self._build("1,2,3")
        root_combine = [
            s for s in trace if s.kind == "combine" and s.snapshot["current"] == "0"
        ][0]
        assert root_combine.snapshot["left_gain"] == 2
        assert root_combine.snapshot["right_gain"] == 3
        assert root_combine.snapshot["path_sum"] == 6

    def test_returned_gains_recorded(self):
        trace = self._build("-10,9,20,null,null,15,7")
        returned = trace.final_step.snapshot["returned"]
        assert returned == {"0-L": 9, "0-R-L": 15, "0-R-R": 7, "0-R": 35, "0": 25}
