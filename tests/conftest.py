import pytest

from dialaride.config import DEFAULT_CONFIG_DIR
from dialaride.graph import build_road_graph
from dialaride.instances import load_problem
from dialaride.models import (
    Accessibility,
    Edge,
    EdgeId,
    Node,
    NodeId,
    Problem,
    Rider,
    RiderId,
    TimeWindow,
    Vehicle,
    VehicleId,
)


@pytest.fixture
def line_graph():
    """n0 - n1 - n2 - n3 - n4 on the x axis, 5 minutes per segment."""
    nodes = [Node(NodeId(f"n{i}"), float(i), 0.0) for i in range(5)]
    edges = [
        Edge(EdgeId(f"e{i}"), NodeId(f"n{i}"), NodeId(f"n{i + 1}"), 5.0, 1.0)
        for i in range(4)
    ]
    return build_road_graph(nodes, edges)


@pytest.fixture
def make_vehicle():
    def _make(
        vid="v0",
        start="n0",
        end=None,
        start_time=0.0,
        end_time=1000.0,
        seats=4,
        wheelchairs=0,
    ):
        return Vehicle(
            id=VehicleId(vid),
            seat_count=seats,
            wheelchair_capacity=wheelchairs,
            start_time=start_time,
            end_time=end_time,
            start_node=NodeId(start),
            end_node=NodeId(end or start),
        )
    return _make


@pytest.fixture
def make_rider():
    def _make(
        rid,
        pickup,
        dropoff,
        pickup_window=None,
        dropoff_window=None,
        max_time=None,
        wheelchair=False,
        boarding=0.0,
    ):
        return Rider(
            id=RiderId(rid),
            pickup_node=NodeId(pickup),
            dropoff_node=NodeId(dropoff),
            pickup_window=TimeWindow(*pickup_window) if pickup_window else None,
            dropoff_window=TimeWindow(*dropoff_window) if dropoff_window else None,
            max_time_in_vehicle=max_time,
            accessibility=Accessibility(
                needs_wheelchair=wheelchair,
                seat_equivalent=1.5 if wheelchair else 1.0,
                boarding_time=boarding,
            ),
        )
    return _make


@pytest.fixture
def make_problem(line_graph):
    def _make(vehicles, riders, graph=None):
        return Problem(
            graph=graph or line_graph,
            vehicles=tuple(vehicles),
            riders=tuple(riders),
            service_window=TimeWindow(0.0, 24 * 60.0),
        )
    return _make


@pytest.fixture(scope="session")
def small_city():
    return load_problem(DEFAULT_CONFIG_DIR / "instances" / "small_city.yaml")


@pytest.fixture(scope="session")
def crosstown():
    return load_problem(DEFAULT_CONFIG_DIR / "instances" / "crosstown.yaml")
