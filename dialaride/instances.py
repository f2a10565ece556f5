"""
Functions to build problem instances from their YAML description.

An instance file looks like:

    name: small_city
    service_window: {earliest: "08:00", latest: "18:00"}
    grid: {size: 4, spacing: 1.0, edge_cost: 2.0}
    vehicles:
      - {id: v0, seat_count: 4, wheelchair_capacity: 1,
         start_time: "08:00", end_time: "18:00",
         start_node: node_0_0, end_node: node_0_0}
    riders:
      - id: r0
        pickup_node: node_1_0
        dropoff_node: node_3_2
        pickup_window: {earliest: "08:30", latest: "08:45"}
        max_time_in_vehicle: 30
        accessibility: {needs_wheelchair: false, boarding_time: 1}

Instead of `grid`, an explicit graph can be given with `nodes` (id, x, y,
name) and `edges` (id, from, to, cost, distance, road_type). Times are
minutes from midnight or "HH:MM" strings.
"""

from pathlib import Path
from typing import Any

from dialaride.config import load_instance_config, validate_instance
from dialaride.graph import build_grid_graph, build_road_graph
from dialaride.models import (
    Accessibility,
    Edge,
    EdgeId,
    Node,
    NodeId,
    Problem,
    RiderId,
    Rider,
    RoadGraph,
    RoadType,
    TimePreference,
    TimeWindow,
    Vehicle,
    VehicleId,
)
from dialaride.timefmt import to_minutes


DEFAULT_SERVICE_WINDOW = TimeWindow(earliest=8 * 60, latest=18 * 60)


def load_problem(name_or_path: str | Path) -> Problem:
    """
    Load and validate a problem instance YAML file.
    """
    return problem_from_dict(load_instance_config(name_or_path))


def problem_from_dict(data: dict[str, Any]) -> Problem:
    """
    Build a problem from a YAML extracted instance. Raises ValueError when the
    instance is malformed or references nodes missing from the graph.
    """
    validate_instance(data)
    graph = _graph_from_dict(data)
    service_window = _window(data.get("service_window")) or DEFAULT_SERVICE_WINDOW

    vehicles = tuple(
        _vehicle_from_dict(v, service_window) for v in data["vehicles"]
    )
    riders = tuple(_rider_from_dict(r) for r in data.get("riders", []))

    for v in vehicles:
        for nid in (v.start_node, v.end_node):
            if nid not in graph.nodes:
                raise ValueError(f"vehicle {v.id} references unknown node {nid}")
    for r in riders:
        for nid in (r.pickup_node, r.dropoff_node):
            if nid not in graph.nodes:
                raise ValueError(f"rider {r.id} references unknown node {nid}")
    _check_unique([v.id for v in vehicles], "vehicle")
    _check_unique([r.id for r in riders], "rider")

    return Problem(
        graph=graph,
        vehicles=vehicles,
        riders=riders,
        service_window=service_window,
    )


def problem_to_dict(problem: Problem) -> dict[str, Any]:
    """
    Inverse of `problem_from_dict`, always with an explicit node/edge list.
    """
    def window(w: TimeWindow | None) -> dict[str, float] | None:
        return None if w is None else {"earliest": w.earliest, "latest": w.latest}

    return {
        "service_window": window(problem.service_window),
        "nodes": [
            {"id": n.id, "x": n.x, "y": n.y, "name": n.name}
            for n in problem.graph.nodes.values()
        ],
        "edges": [
            {
                "id": e.id,
                "from": e.from_node,
                "to": e.to_node,
                "cost": e.cost,
                "distance": e.distance,
                "road_type": e.road_type.value,
            }
            for e in problem.graph.edges.values()
        ],
        "vehicles": [
            {
                "id": v.id,
                "driver_name": v.driver_name,
                "seat_count": v.seat_count,
                "wheelchair_capacity": v.wheelchair_capacity,
                "start_time": v.start_time,
                "end_time": v.end_time,
                "start_node": v.start_node,
                "end_node": v.end_node,
            }
            for v in problem.vehicles
        ],
        "riders": [
            {
                "id": r.id,
                "name": r.name,
                "pickup_node": r.pickup_node,
                "dropoff_node": r.dropoff_node,
                "pickup_window": window(r.pickup_window),
                "dropoff_window": window(r.dropoff_window),
                "max_time_in_vehicle": r.max_time_in_vehicle,
                "time_preference": r.time_preference.value,
                "accessibility": {
                    "needs_wheelchair": r.accessibility.needs_wheelchair,
                    "seat_equivalent": r.accessibility.seat_equivalent,
                    "boarding_time": r.accessibility.boarding_time,
                },
            }
            for r in problem.riders
        ],
    }


def _graph_from_dict(data: dict[str, Any]) -> RoadGraph:
    if "grid" in data:
        g = data["grid"]
        return build_grid_graph(
            size=int(g["size"]),
            spacing=float(g.get("spacing", 1.0)),
            edge_cost=float(g.get("edge_cost", 2.0)),
        )
    nodes = [
        Node(
            id=NodeId(str(n["id"])),
            x=float(n["x"]),
            y=float(n["y"]),
            name=n.get("name"),
        )
        for n in data["nodes"]
    ]
    edges = [
        Edge(
            id=EdgeId(str(e.get("id", f"edge_{idx}"))),
            from_node=NodeId(str(e["from"])),
            to_node=NodeId(str(e["to"])),
            cost=float(e["cost"]),
            distance=float(e.get("distance", 0.0)),
            road_type=RoadType(e.get("road_type", RoadType.LOCAL.value)),
        )
        for idx, e in enumerate(data.get("edges", []))
    ]
    return build_road_graph(nodes, edges)


def _vehicle_from_dict(v: dict[str, Any], service_window: TimeWindow) -> Vehicle:
    return Vehicle(
        id=VehicleId(str(v["id"])),
        seat_count=int(v["seat_count"]),
        wheelchair_capacity=int(v.get("wheelchair_capacity", 0)),
        start_time=to_minutes(v.get("start_time", service_window.earliest)),
        end_time=to_minutes(v.get("end_time", service_window.latest)),
        start_node=NodeId(str(v["start_node"])),
        end_node=NodeId(str(v["end_node"])),
        driver_name=v.get("driver_name"),
    )


def _rider_from_dict(r: dict[str, Any]) -> Rider:
    acc = r.get("accessibility", {}) or {}
    needs_wheelchair = bool(acc.get("needs_wheelchair", False))
    max_time = r.get("max_time_in_vehicle")
    return Rider(
        id=RiderId(str(r["id"])),
        pickup_node=NodeId(str(r["pickup_node"])),
        dropoff_node=NodeId(str(r["dropoff_node"])),
        pickup_window=_window(r.get("pickup_window")),
        dropoff_window=_window(r.get("dropoff_window")),
        max_time_in_vehicle=None if max_time is None else float(max_time),
        accessibility=Accessibility(
            needs_wheelchair=needs_wheelchair,
            seat_equivalent=float(
                acc.get("seat_equivalent", 1.5 if needs_wheelchair else 1.0)
            ),
            boarding_time=float(acc.get("boarding_time", 0.0)),
        ),
        name=r.get("name"),
        time_preference=TimePreference(r.get("time_preference", "asap")),
    )


def _window(w: dict[str, Any] | None) -> TimeWindow | None:
    if w is None:
        return None
    return TimeWindow(
        earliest=to_minutes(w["earliest"]),
        latest=to_minutes(w["latest"]),
    )


def _check_unique(ids: list[str], kind: str) -> None:
    seen: set[str] = set()
    for i in ids:
        if i in seen:
            raise ValueError(f"duplicated {kind} id: {i}")
        seen.add(i)
