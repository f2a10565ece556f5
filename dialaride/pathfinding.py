"""
A* shortest-time search over the road graph and its memoizing path cache.
"""

import heapq
import logging
from dataclasses import dataclass
from itertools import count
from math import hypot
from typing import Generic, TypeVar
import numpy as np

from dialaride.models import NodeId, RoadGraph


logger = logging.getLogger(__name__)

# Straight-line distance multiplier for the heuristic. Must stay admissible.
HEURISTIC_SCALE = 0.5

T = TypeVar("T")


class PriorityQueue(Generic[T]):
    """
    Min-heap keyed by priority. Entries with equal priority pop in insertion
    order, which keeps the search reproducible.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, T]] = []
        self._counter = count()

    def __len__(self) -> int:
        return len(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    def push(self, value: T, priority: float) -> None:
        heapq.heappush(self._heap, (priority, next(self._counter), value))

    def pop(self) -> T:
        return heapq.heappop(self._heap)[2]


@dataclass(frozen=True)
class PathResult:
    """
    A path as a node sequence from start to end and its total travel time.
    """
    path: list[NodeId]
    cost: float


def find_path(graph: RoadGraph, start: NodeId, end: NodeId) -> PathResult | None:
    """
    Find the shortest-time path between two nodes with A*. Returns None when
    either node is not in the graph or when the end is unreachable.
    """
    if start == end:
        return PathResult(path=[start], cost=0.0)
    if start not in graph.nodes or end not in graph.nodes:
        return None

    goal = graph.nodes[end]

    def heuristic(node_id: NodeId) -> float:
        n = graph.nodes[node_id]
        return hypot(n.x - goal.x, n.y - goal.y) * HEURISTIC_SCALE

    frontier: PriorityQueue[NodeId] = PriorityQueue()
    came_from: dict[NodeId, NodeId] = {}
    g_score: dict[NodeId, float] = {start: 0.0}
    visited: set[NodeId] = set()
    frontier.push(start, heuristic(start))

    while not frontier.is_empty():
        current = frontier.pop()
        if current == end:
            return PathResult(
                path=_reconstruct(came_from, current),
                cost=g_score[current],
            )
        if current in visited:
            continue
        visited.add(current)

        for edge_id in graph.adjacency.get(current, []):
            edge = graph.edges[edge_id]
            neighbor = edge.other_end(current)
            if neighbor in visited:
                continue
            tentative = g_score[current] + edge.cost
            known = g_score.get(neighbor)
            if known is None or tentative < known:
                came_from[neighbor] = current
                g_score[neighbor] = tentative
                frontier.push(neighbor, tentative + heuristic(neighbor))

    return None


def _reconstruct(came_from: dict[NodeId, NodeId], current: NodeId) -> list[NodeId]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


class PathCache:
    """
    Memoizes `find_path` per ordered (from, to) pair for one road graph. There
    is no eviction; call `clear` when the graph is replaced.
    """

    def __init__(self, graph: RoadGraph) -> None:
        self.graph = graph
        self._cache: dict[tuple[NodeId, NodeId], PathResult | None] = {}
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    def get_path(self, a: NodeId, b: NodeId) -> PathResult | None:
        key = (a, b)
        if key in self._cache:
            return self._cache[key]
        self.misses += 1
        result = find_path(self.graph, a, b)
        if result is None:
            logger.debug("no path from %s to %s", a, b)
        self._cache[key] = result
        return result

    def get_travel_time(self, a: NodeId, b: NodeId) -> float:
        """
        Travel time in minutes, or infinity when there is no path.
        """
        result = self.get_path(a, b)
        return result.cost if result is not None else np.inf

    def clear(self) -> None:
        self._cache.clear()
        self.misses = 0
