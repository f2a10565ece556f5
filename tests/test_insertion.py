import hypothesis.strategies as st
from hypothesis import given, settings

from dialaride.graph import build_grid_graph
from dialaride.insertion import (
    best_insertion,
    earliest_constraint_time,
    generate_solution,
    order_riders,
    respects_capacity,
)
from dialaride.models import (
    Accessibility,
    ItineraryStop,
    Problem,
    Rider,
    RiderId,
    StopKind,
    TimeWindow,
    Vehicle,
    VehicleId,
)
from dialaride.objective import InsertionWeights
from dialaride.pathfinding import PathCache
from dialaride.simulate import simulate
from dialaride.solution import assigned_riders, validate_solution


def P(rid):
    return ItineraryStop(RiderId(rid), StopKind.PICKUP)


def D(rid):
    return ItineraryStop(RiderId(rid), StopKind.DROPOFF)


def test_riders_ordered_by_earliest_constraint(make_rider):
    late = make_rider("late", "n1", "n2", pickup_window=(30, 40))
    arrive_by = make_rider("arrive_by", "n1", "n2", dropoff_window=(10, 20))
    free = make_rider("free", "n1", "n2")
    also_free = make_rider("also_free", "n2", "n3")

    assert earliest_constraint_time(late) == 30
    assert earliest_constraint_time(arrive_by) == 10
    assert earliest_constraint_time(free) == 0.0
    ordered = order_riders([late, free, arrive_by, also_free])
    assert [r.id for r in ordered] == ["free", "also_free", "arrive_by", "late"]


def test_greedy_shares_the_ride(make_vehicle, make_rider, make_problem, line_graph):
    riders = [make_rider("a", "n1", "n3"), make_rider("b", "n2", "n4")]
    problem = make_problem([make_vehicle()], riders)

    solution = generate_solution(problem, PathCache(line_graph))

    assert solution[VehicleId("v0")] == (P("a"), P("b"), D("b"), D("a"))
    assert simulate(problem, solution).total_score == 0.0


def test_greedy_picks_the_cheapest_vehicle(make_vehicle, make_rider, make_problem, line_graph):
    far = make_vehicle("far", start="n4")
    near = make_vehicle("near", start="n0")
    rider = make_rider("r", "n1", "n2", pickup_window=(0, 5))
    problem = make_problem([far, near], [rider])

    solution = generate_solution(problem, PathCache(line_graph))

    assert solution[VehicleId("far")] == ()
    assert solution[VehicleId("near")] == (P("r"), D("r"))


def test_wheelchair_rider_skips_vehicles_without_slots(
    make_vehicle, make_rider, make_problem, line_graph
):
    rider = make_rider("w", "n1", "n2", wheelchair=True)
    problem = make_problem([make_vehicle(wheelchairs=0)], [rider])

    solution = generate_solution(problem, PathCache(line_graph))

    assert solution == {VehicleId("v0"): ()}
    assert simulate(problem, solution).unassigned_riders == ["w"]


def test_wheelchair_rider_needs_more_than_one_seat(
    make_vehicle, make_rider, make_problem, line_graph
):
    rider = make_rider("w", "n1", "n2", wheelchair=True)
    vehicle = make_vehicle(seats=1, wheelchairs=1)
    problem = make_problem([vehicle], [rider])

    assert best_insertion(
        vehicle, (), rider, problem.riders_by_id(), PathCache(line_graph)
    ) is None


def test_best_insertion_reports_positions_and_cost(make_vehicle, make_rider, line_graph):
    rider = make_rider("a", "n1", "n3")
    vehicle = make_vehicle()
    found = best_insertion(vehicle, (), rider, {rider.id: rider}, PathCache(line_graph))
    assert (found.vehicle_id, found.pickup_idx, found.dropoff_idx) == ("v0", 0, 1)
    assert found.cost == 30.0 * 0.1

    zero_elapsed = InsertionWeights(elapsed_time=0.0)
    found = best_insertion(
        vehicle, (), rider, {rider.id: rider}, PathCache(line_graph), zero_elapsed
    )
    assert found.cost == 0.0


def test_respects_capacity(make_vehicle, make_rider):
    riders = {
        r.id: r
        for r in [
            make_rider("a", "n1", "n2"),
            make_rider("b", "n1", "n2"),
            make_rider("w", "n1", "n2", wheelchair=True),
        ]
    }
    single = make_vehicle(seats=1)
    assert not respects_capacity(single, (P("a"), P("b"), D("a"), D("b")), riders)
    assert respects_capacity(single, (P("a"), D("a"), P("b"), D("b")), riders)

    two_seats = make_vehicle(seats=2, wheelchairs=1)
    assert not respects_capacity(two_seats, (P("w"), P("a"), D("a"), D("w")), riders)
    assert respects_capacity(two_seats, (P("w"), D("w"), P("a"), D("a")), riders)
    assert not respects_capacity(make_vehicle(seats=2), (P("w"), D("w")), riders)


@st.composite
def grid_problems(draw):
    graph = build_grid_graph(3)
    node_ids = sorted(graph.nodes)
    vehicles = tuple(
        Vehicle(
            id=VehicleId(f"v{i}"),
            seat_count=draw(st.integers(1, 3)),
            wheelchair_capacity=draw(st.integers(0, 1)),
            start_time=0.0,
            end_time=draw(st.sampled_from([30.0, 120.0])),
            start_node=draw(st.sampled_from(node_ids)),
            end_node=draw(st.sampled_from(node_ids)),
        )
        for i in range(draw(st.integers(1, 2)))
    )
    riders = []
    for i in range(draw(st.integers(0, 6))):
        wheelchair = draw(st.booleans())
        opens = draw(st.one_of(st.none(), st.integers(0, 40)))
        riders.append(
            Rider(
                id=RiderId(f"r{i}"),
                pickup_node=draw(st.sampled_from(node_ids)),
                dropoff_node=draw(st.sampled_from(node_ids)),
                pickup_window=None if opens is None else TimeWindow(opens, opens + 10),
                max_time_in_vehicle=draw(st.one_of(st.none(), st.just(8.0))),
                accessibility=Accessibility(
                    needs_wheelchair=wheelchair,
                    seat_equivalent=1.5 if wheelchair else 1.0,
                    boarding_time=draw(st.sampled_from([0.0, 1.0])),
                ),
            )
        )
    return Problem(
        graph=graph,
        vehicles=vehicles,
        riders=tuple(riders),
        service_window=TimeWindow(0.0, 1440.0),
    )


@settings(max_examples=30, deadline=None)
@given(problem=grid_problems())
def test_generated_solutions_are_valid_and_within_capacity(problem):
    solution = generate_solution(problem, PathCache(problem.graph))

    validate_solution(problem, solution)
    riders_by_id = problem.riders_by_id()
    vehicles_by_id = problem.vehicles_by_id()
    for vid, itinerary in solution.items():
        vehicle = vehicles_by_id[vid]
        on_board: set[RiderId] = set()
        for stop in itinerary:
            if stop.kind is StopKind.PICKUP:
                on_board.add(stop.rider_id)
            else:
                on_board.discard(stop.rider_id)
            seats = sum(
                1.5 if riders_by_id[rid].accessibility.needs_wheelchair else 1.0
                for rid in on_board
            )
            wheelchairs = sum(
                1 for rid in on_board if riders_by_id[rid].accessibility.needs_wheelchair
            )
            assert seats <= vehicle.seat_count
            assert wheelchairs <= vehicle.wheelchair_capacity
    for rid, vid in assigned_riders(solution).items():
        if riders_by_id[rid].accessibility.needs_wheelchair:
            assert vehicles_by_id[vid].wheelchair_capacity > 0


def test_generation_is_deterministic(small_city):
    first = generate_solution(small_city, PathCache(small_city.graph))
    second = generate_solution(small_city, PathCache(small_city.graph))
    assert first == second


def test_bundled_instances_are_solved(small_city, crosstown):
    for problem in (small_city, crosstown):
        solution = generate_solution(problem, PathCache(problem.graph))
        validate_solution(problem, solution)
        owners = assigned_riders(solution)
        for rider in problem.riders:
            if rider.accessibility.needs_wheelchair and rider.id in owners:
                assert problem.vehicles_by_id()[owners[rider.id]].wheelchair_capacity > 0
        assert set(owners) | set(simulate(problem, solution).unassigned_riders) == {
            r.id for r in problem.riders
        }


def test_wheelchair_rider_in_small_city_rides_the_accessible_van(small_city):
    solution = generate_solution(small_city, PathCache(small_city.graph))
    assert assigned_riders(solution).get(RiderId("r2")) == VehicleId("v0")
