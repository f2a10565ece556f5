"""
Compute and save an instance's OD matrix, a compact matrix of travel times and
distances between the nodes the instance actually uses (depots, pickups and
dropoffs).
"""

from pathlib import Path
import numpy as np

from dialaride.graph import path_distance
from dialaride.io import save_npz
from dialaride.models import NodeId, Problem
from dialaride.pathfinding import PathCache


def relevant_nodes(problem: Problem) -> list[NodeId]:
    """
    Depot, pickup and dropoff nodes of a problem, in first-seen order.
    """
    out: list[NodeId] = []
    seen: set[NodeId] = set()
    candidates: list[NodeId] = []
    for v in problem.vehicles:
        candidates += [v.start_node, v.end_node]
    for r in problem.riders:
        candidates += [r.pickup_node, r.dropoff_node]
    for nid in candidates:
        if nid not in seen:
            out.append(nid)
            seen.add(nid)
    return out


def compute_od_matrix(
    path_cache: PathCache,
    node_ids: list[NodeId],
) -> tuple[np.ndarray, np.ndarray]:
    """
    Travel time (minutes) and distance matrices between the given nodes,
    filled through the path cache. Unreachable pairs are infinite.
    """
    n = len(node_ids)
    T_min = np.zeros((n, n), dtype=np.float64)
    D = np.zeros((n, n), dtype=np.float64)
    for si, s in enumerate(node_ids):
        for tj, t in enumerate(node_ids):
            result = path_cache.get_path(s, t)
            if result is None:
                T_min[si, tj] = np.inf
                D[si, tj] = np.inf
                continue
            T_min[si, tj] = result.cost
            D[si, tj] = path_distance(path_cache.graph, result.path)
    return T_min, D


def save_od(
    problem: Problem,
    path_cache: PathCache,
    out_path: str | Path,
) -> Path:
    """
    Compute the OD matrix of a problem and save it into a .npz file with the
    node ids it is indexed by.
    """
    node_ids = relevant_nodes(problem)
    T_min, D = compute_od_matrix(path_cache, node_ids)
    out_path = Path(out_path)
    save_npz(
        out_path,
        {
            "T_min": T_min,
            "D": D,
            "node_ids": np.array(node_ids, dtype=str),
        },
    )
    return out_path
