"""Course schedule via Kahn's topological sort."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Any, Mapping

from .. import constants
from ..input_types import CourseParams, make_params
from ..normalizer import parse_edge_list, parse_int
from ._base import TraceBuilder

logger = logging.getLogger(__name__)


class KahnStep(str, Enum):
    INIT = "init"
    ENQUEUE_SOURCES = "enqueue-sources"
    DEQUEUE = "dequeue"
    COMPLETE = "complete"
    RELAX = "relax"
    SUCCESS = "success"
    FAILURE = "failure"


def _edge_id(prereq: int, course: int, position: int) -> str:
    return f"edge:{prereq}->{course}#{position}"


class CourseScheduleBuilder(TraceBuilder):
    """Decide whether every course can be taken, BFS-ing the dependency graph.

    An edge runs from a prerequisite to the course that needs it.  Snapshots
    carry every node's in-degree and state, an active flag per edge, the
    queue in order, and the topological order learned so far.
    """

    SLUG = "course-schedule"
    FAMILY = "graph"
    TITLE = "Course Schedule"
    DEFAULT_FIELDS = {"num_courses": "4", "prerequisites": "[[1,0],[2,1],[3,1]]"}
    DELAY_MS = 1000

    def _params_from_fields(self, fields: Mapping[str, str]) -> CourseParams:
        num_courses = parse_int(fields["num_courses"], 1, constants.MAX_COURSES).unwrap()
        edges = parse_edge_list(
            fields["prerequisites"], num_courses, constants.MAX_PREREQUISITES
        ).unwrap()
        return make_params(CourseParams, num_courses=num_courses, prerequisites=edges)

    def _run(self, params: CourseParams) -> bool:
        n = params.num_courses
        adjacency: list[list[tuple[int, str]]] = [[] for _ in range(n)]
        in_degree = [0] * n
        edges: list[dict[str, Any]] = []
        for position, (course, prereq) in enumerate(params.prerequisites):
            edge_id = _edge_id(prereq, course, position)
            adjacency[prereq].append((course, edge_id))
            in_degree[course] += 1
            edges.append({"id": edge_id, "from": prereq, "to": course, "active": True})

        states = [constants.NODE_IDLE] * n
        queue: deque[int] = deque()
        order: list[int] = []

        def snapshot(current: int | None, **extra: Any) -> dict[str, Any]:
            return {
                "nodes": [
                    {"id": i, "in_degree": in_degree[i], "state": states[i]}
                    for i in range(n)
                ],
                "edges": edges,
                "queue": list(queue),
                "learned": len(order),
                "order": order,
                "current": current,
                **extra,
            }

        self._emit(
            KahnStep.INIT,
            f"Build the graph and count in-degrees: {n} course(s), "
            f"{len(edges)} prerequisite pair(s).",
            snapshot=snapshot(None),
            pointers={"current": None},
        )

        for course in range(n):
            if in_degree[course] == 0:
                queue.append(course)
                states[course] = constants.NODE_READY
        self._emit(
            KahnStep.ENQUEUE_SOURCES,
            f"Queue every course with in-degree 0: {list(queue)}.",
            snapshot=snapshot(None),
            pointers={"current": None},
            highlights=[f"node:{c}" for c in queue],
        )

        while queue:
            course = queue.popleft()
            states[course] = constants.NODE_PROCESSING
            self._emit(
                KahnStep.DEQUEUE,
                f"Take course {course} from the queue.",
                snapshot=snapshot(course),
                pointers={"current": course},
                highlights=[f"node:{course}"],
            )

            order.append(course)
            states[course] = constants.NODE_COMPLETED
            outgoing = {edge_id for _, edge_id in adjacency[course]}
            for edge in edges:
                if edge["id"] in outgoing:
                    edge["active"] = False
            self._emit(
                KahnStep.COMPLETE,
                f"Course {course} is done; remove its outgoing edges.",
                snapshot=snapshot(course),
                pointers={"current": course},
                highlights=[f"node:{course}"],
            )

            for neighbor, edge_id in adjacency[course]:
                in_degree[neighbor] -= 1
                description = (
                    f"Course {neighbor} loses a prerequisite; in-degree is now "
                    f"{in_degree[neighbor]}."
                )
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)
                    states[neighbor] = constants.NODE_READY
                    description += " It joins the queue."
                self._emit(
                    KahnStep.RELAX,
                    description,
                    snapshot=snapshot(course),
                    pointers={"current": course},
                    highlights=[f"node:{neighbor}", edge_id],
                )

        possible = len(order) == n
        if possible:
            self._emit(
                KahnStep.SUCCESS,
                f"All {n} course(s) completed in order {order}.",
                snapshot=snapshot(None, answer=True),
                pointers={"current": None},
            )
        else:
            self._emit(
                KahnStep.FAILURE,
                f"Queue is empty after {len(order)}/{n} course(s); "
                "the prerequisites contain a cycle.",
                snapshot=snapshot(None, answer=False),
                pointers={"current": None},
                highlights=[
                    f"node:{i}" for i in range(n) if states[i] != constants.NODE_COMPLETED
                ],
            )
        return possible
