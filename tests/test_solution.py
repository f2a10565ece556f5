import pytest

from dialaride.models import ItineraryStop, RiderId, StopKind, VehicleId
from dialaride.simulate import ItineraryError
from dialaride.solution import (
    assign_rider,
    assigned_riders,
    empty_solution,
    insert_rider,
    itinerary_hash,
    remove_rider,
    solution_from_dict,
    solution_to_dict,
    validate_solution,
)


def P(rid):
    return ItineraryStop(RiderId(rid), StopKind.PICKUP)


def D(rid):
    return ItineraryStop(RiderId(rid), StopKind.DROPOFF)


@pytest.fixture
def problem(make_vehicle, make_rider, make_problem):
    return make_problem(
        [make_vehicle("v0"), make_vehicle("v1", start="n4")],
        [make_rider("a", "n1", "n2"), make_rider("b", "n2", "n3")],
    )


def test_empty_solution_lists_every_vehicle(problem):
    assert empty_solution(problem) == {VehicleId("v0"): (), VehicleId("v1"): ()}


@pytest.mark.parametrize(
    "pickup, dropoff, expected",
    [
        (0, 1, (P("b"), D("b"), P("a"), D("a"))),
        (0, 2, (P("b"), P("a"), D("b"), D("a"))),
        (1, 3, (P("a"), P("b"), D("a"), D("b"))),
        (2, 3, (P("a"), D("a"), P("b"), D("b"))),
    ],
)
def test_insert_rider_positions(pickup, dropoff, expected):
    assert insert_rider((P("a"), D("a")), RiderId("b"), pickup, dropoff) == expected


@pytest.mark.parametrize("pickup, dropoff", [(1, 1), (2, 1), (-1, 1), (0, 4)])
def test_insert_rider_rejects_bad_positions(pickup, dropoff):
    with pytest.raises(ItineraryError):
        insert_rider((P("a"), D("a")), RiderId("b"), pickup, dropoff)


def test_assign_moves_rider_between_vehicles(problem):
    solution = assign_rider(empty_solution(problem), VehicleId("v0"), RiderId("a"), 0, 1)
    moved = assign_rider(solution, VehicleId("v1"), RiderId("a"), 0, 1)

    assert solution[VehicleId("v0")] == (P("a"), D("a"))
    assert moved == {VehicleId("v0"): (), VehicleId("v1"): (P("a"), D("a"))}
    assert assigned_riders(moved) == {"a": "v1"}


def test_remove_rider_leaves_input_untouched():
    solution = {VehicleId("v0"): (P("a"), P("b"), D("a"), D("b"))}
    assert remove_rider(solution, RiderId("a")) == {VehicleId("v0"): (P("b"), D("b"))}
    assert len(solution[VehicleId("v0")]) == 4


def test_itinerary_hash_depends_on_order_only():
    assert itinerary_hash(()) == ""
    assert itinerary_hash((P("a"), D("a"))) == "a:pickup|a:dropoff"
    assert itinerary_hash((P("a"), D("a"))) == itinerary_hash([P("a"), D("a")])
    assert itinerary_hash((P("a"), P("b"), D("a"), D("b"))) != itinerary_hash(
        (P("a"), P("b"), D("b"), D("a"))
    )


def test_valid_solution_passes(problem):
    validate_solution(problem, {VehicleId("v0"): (P("a"), P("b"), D("b"), D("a"))})
    validate_solution(problem, {})


@pytest.mark.parametrize(
    "solution, message",
    [
        ({VehicleId("ghost"): ()}, "unknown vehicle"),
        ({VehicleId("v0"): (P("zed"), D("zed"))}, "unknown rider"),
        ({VehicleId("v0"): (P("a"),)}, "one pickup then one dropoff"),
        ({VehicleId("v0"): (D("a"), P("a"))}, "one pickup then one dropoff"),
        (
            {VehicleId("v0"): (P("a"), D("a")), VehicleId("v1"): (P("a"), D("a"))},
            "on vehicles",
        ),
    ],
)
def test_invalid_solutions_raise(problem, solution, message):
    with pytest.raises(ItineraryError, match=message):
        validate_solution(problem, solution)


def test_solution_dict_format():
    solution = {VehicleId("v0"): (P("a"), D("a")), VehicleId("v1"): ()}
    data = solution_to_dict(solution)
    assert data == {
        "v0": [
            {"rider_id": "a", "kind": "pickup"},
            {"rider_id": "a", "kind": "dropoff"},
        ],
        "v1": [],
    }
    assert solution_from_dict(data) == solution
