"""
Data models for the problem entities.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NewType


# Opaque identifiers, one per entity kind.
NodeId = NewType("NodeId", str)
EdgeId = NewType("EdgeId", str)
VehicleId = NewType("VehicleId", str)
RiderId = NewType("RiderId", str)


class RoadType(str, Enum):
    HIGHWAY = "highway"
    ARTERIAL = "arterial"
    LOCAL = "local"


class StopKind(str, Enum):
    PICKUP = "pickup"
    DROPOFF = "dropoff"


class TimePreference(str, Enum):
    ASAP = "asap"
    ARRIVE_BY = "arrive-by"


@dataclass(frozen=True)
class Node:
    """
    A node of the road graph. The coordinates are only used by the A*
    heuristic and for display.
    """
    id: NodeId
    x: float
    y: float
    name: str | None = None


@dataclass(frozen=True)
class Edge:
    """
    A road segment. Edges are traversed in both directions with the same cost
    (travel time in minutes).
    """
    id: EdgeId
    from_node: NodeId
    to_node: NodeId
    cost: float
    distance: float = 0.0
    road_type: RoadType = RoadType.LOCAL

    def other_end(self, node_id: NodeId) -> NodeId:
        return self.to_node if self.from_node == node_id else self.from_node


@dataclass(frozen=True)
class RoadGraph:
    """
    The road network: nodes, edges and the adjacency mapping of each node to
    its incident edge ids. Use `dialaride.graph.build_road_graph` to build one
    with a consistent adjacency.
    """
    nodes: dict[NodeId, Node]
    edges: dict[EdgeId, Edge]
    adjacency: dict[NodeId, list[EdgeId]]


@dataclass(frozen=True)
class TimeWindow:
    """
    Earliest and latest acceptable service time, in minutes from midnight.
    """
    earliest: float
    latest: float


@dataclass(frozen=True)
class Vehicle:
    """
    A vehicle with a seat count, a number of wheelchair slots, a service
    period and start/end depots.
    """
    id: VehicleId
    seat_count: int
    wheelchair_capacity: int
    start_time: float
    end_time: float
    start_node: NodeId
    end_node: NodeId
    driver_name: str | None = None


@dataclass(frozen=True)
class Accessibility:
    needs_wheelchair: bool = False
    seat_equivalent: float = 1.0
    boarding_time: float = 0.0


@dataclass(frozen=True)
class Rider:
    """
    A rider to be carried from a pickup node to a dropoff node, with optional
    time windows on both ends and an optional maximum time in the vehicle.
    """
    id: RiderId
    pickup_node: NodeId
    dropoff_node: NodeId
    pickup_window: TimeWindow | None = None
    dropoff_window: TimeWindow | None = None
    max_time_in_vehicle: float | None = None
    accessibility: Accessibility = field(default_factory=Accessibility)
    name: str | None = None
    time_preference: TimePreference = TimePreference.ASAP

    def node_for(self, kind: StopKind) -> NodeId:
        return self.pickup_node if kind is StopKind.PICKUP else self.dropoff_node

    def window_for(self, kind: StopKind) -> TimeWindow | None:
        if kind is StopKind.PICKUP:
            return self.pickup_window
        return self.dropoff_window


@dataclass(frozen=True)
class Problem:
    """
    A complete puzzle: the road graph, the fleet, the riders and the overall
    service window. Never mutated once built.
    """
    graph: RoadGraph
    vehicles: tuple[Vehicle, ...]
    riders: tuple[Rider, ...]
    service_window: TimeWindow

    def riders_by_id(self) -> dict[RiderId, Rider]:
        return {r.id: r for r in self.riders}

    def vehicles_by_id(self) -> dict[VehicleId, Vehicle]:
        return {v.id: v for v in self.vehicles}


@dataclass(frozen=True)
class ItineraryStop:
    rider_id: RiderId
    kind: StopKind


# Ordered stops of one vehicle.
Itinerary = tuple[ItineraryStop, ...]

# Every vehicle of the problem mapped to its itinerary (possibly empty).
Solution = dict[VehicleId, Itinerary]
