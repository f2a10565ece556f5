"""
Road graph construction utilities.
"""

from math import hypot
from typing import Any, Iterable
import networkx as nx

from dialaride.models import Edge, EdgeId, Node, NodeId, RoadGraph, RoadType


def build_road_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> RoadGraph:
    """
    Build a road graph from its nodes and edges, deriving the adjacency. Every
    edge is listed under both of its endpoints. Raises ValueError for edges
    with a missing endpoint, a negative cost or a duplicated id.
    """
    node_map: dict[NodeId, Node] = {}
    for n in nodes:
        if n.id in node_map:
            raise ValueError(f"duplicated node id: {n.id}")
        node_map[n.id] = n
    adjacency: dict[NodeId, list[EdgeId]] = {nid: [] for nid in node_map}
    edge_map: dict[EdgeId, Edge] = {}
    for e in edges:
        if e.id in edge_map:
            raise ValueError(f"duplicated edge id: {e.id}")
        for endpoint in (e.from_node, e.to_node):
            if endpoint not in node_map:
                raise ValueError(f"edge {e.id} references unknown node {endpoint}")
        if e.cost < 0:
            raise ValueError(f"edge {e.id} has negative cost {e.cost}")
        edge_map[e.id] = e
        adjacency[e.from_node].append(e.id)
        if e.to_node != e.from_node:
            adjacency[e.to_node].append(e.id)
    return RoadGraph(nodes=node_map, edges=edge_map, adjacency=adjacency)


def grid_node_id(i: int, j: int) -> NodeId:
    """
    Id of the grid node at column `i` and row `j`.
    """
    return NodeId(f"node_{i}_{j}")


def build_grid_graph(
    size: int,
    spacing: float = 1.0,
    edge_cost: float = 2.0,
    road_type: RoadType = RoadType.LOCAL,
) -> RoadGraph:
    """
    Build a square grid city with `size` times `size` nodes, `spacing` apart,
    where every street segment takes `edge_cost` minutes. The heuristic of the
    pathfinder stays admissible as long as `0.5 * spacing <= edge_cost`.
    """
    if size <= 0:
        raise ValueError("grid size must be a positive int")
    G = nx.grid_2d_graph(size, size)
    for i, j in G.nodes:
        G.nodes[(i, j)]["x"] = i * spacing
        G.nodes[(i, j)]["y"] = j * spacing
        G.nodes[(i, j)]["name"] = f"({i},{j})"
    for u, v in G.edges:
        G.edges[u, v]["cost"] = float(edge_cost)
        G.edges[u, v]["distance"] = float(spacing)
        G.edges[u, v]["road_type"] = road_type.value
    G = nx.relabel_nodes(G, {(i, j): grid_node_id(i, j) for i, j in G.nodes})
    return road_graph_from_networkx(G)


def road_graph_from_networkx(G: nx.Graph) -> RoadGraph:
    """
    Convert a networkx graph into a road graph. Nodes need `x` and `y`
    attributes, edges need a `cost` attribute; `distance`, `road_type` and
    `id` are optional. Edges without an id are numbered in iteration order.
    """
    nodes = [
        Node(
            id=NodeId(str(n)),
            x=float(data["x"]),
            y=float(data["y"]),
            name=data.get("name"),
        )
        for n, data in G.nodes(data=True)
    ]
    edges = []
    for idx, (u, v, data) in enumerate(G.edges(data=True)):
        edges.append(
            Edge(
                id=EdgeId(str(data.get("id", f"edge_{idx}"))),
                from_node=NodeId(str(u)),
                to_node=NodeId(str(v)),
                cost=float(data["cost"]),
                distance=float(data.get("distance", 0.0)),
                road_type=RoadType(data.get("road_type", RoadType.LOCAL.value)),
            )
        )
    return build_road_graph(nodes, edges)


def road_graph_to_networkx(graph: RoadGraph) -> nx.Graph:
    """
    Convert a road graph into an undirected networkx graph. Parallel edges
    collapse to the cheapest one.
    """
    G = nx.Graph()
    for n in graph.nodes.values():
        G.add_node(n.id, x=n.x, y=n.y, name=n.name)
    for e in graph.edges.values():
        if G.has_edge(e.from_node, e.to_node):
            if G.edges[e.from_node, e.to_node]["cost"] <= e.cost:
                continue
        G.add_edge(
            e.from_node,
            e.to_node,
            id=e.id,
            cost=e.cost,
            distance=e.distance,
            road_type=e.road_type.value,
        )
    return G


def node_distance(graph: RoadGraph, a: NodeId, b: NodeId) -> float:
    """
    Straight-line distance between two nodes.
    """
    na = graph.nodes[a]
    nb = graph.nodes[b]
    return hypot(na.x - nb.x, na.y - nb.y)


def path_cost(graph: RoadGraph, path: list[NodeId]) -> float:
    """
    Sum of the cheapest edge costs along a node sequence. Raises ValueError if
    two consecutive nodes are not adjacent.
    """
    acc = 0.0
    for a, b in zip(path[:-1], path[1:]):
        acc += _cheapest_edge(graph, a, b).cost
    return acc


def path_distance(graph: RoadGraph, path: list[NodeId]) -> float:
    """
    Sum of the distances of the cheapest edges along a node sequence.
    """
    acc = 0.0
    for a, b in zip(path[:-1], path[1:]):
        acc += _cheapest_edge(graph, a, b).distance
    return acc


def graph_summary(graph: RoadGraph) -> dict[str, Any]:
    return {
        "n_nodes": len(graph.nodes),
        "n_edges": len(graph.edges),
    }


def _cheapest_edge(graph: RoadGraph, a: NodeId, b: NodeId) -> Edge:
    best: Edge | None = None
    for eid in graph.adjacency.get(a, []):
        e = graph.edges[eid]
        if e.other_end(a) != b:
            continue
        if best is None or e.cost < best.cost:
            best = e
    if best is None:
        raise ValueError(f"nodes {a} and {b} are not adjacent")
    return best
