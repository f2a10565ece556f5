"""
Helpers to build, edit and (de)serialize solutions. Every editing function
returns a new solution and leaves its input untouched.
"""

from typing import Any

from dialaride.models import (
    Itinerary,
    ItineraryStop,
    Problem,
    RiderId,
    Solution,
    StopKind,
    VehicleId,
)
from dialaride.simulate import ItineraryError


def empty_solution(problem: Problem) -> Solution:
    """
    A solution where every vehicle has an empty itinerary.
    """
    return {v.id: () for v in problem.vehicles}


def insert_rider(
    itinerary: Itinerary,
    rider_id: RiderId,
    pickup_idx: int,
    dropoff_idx: int,
) -> Itinerary:
    """
    Insert a rider's pickup at `pickup_idx` and then its dropoff at
    `dropoff_idx` of the resulting sequence, so `dropoff_idx > pickup_idx`.
    Existing stops are shifted, never removed.
    """
    if not 0 <= pickup_idx < dropoff_idx <= len(itinerary) + 1:
        raise ItineraryError(
            f"invalid insertion positions ({pickup_idx}, {dropoff_idx}) "
            f"for an itinerary of {len(itinerary)} stops"
        )
    stops = list(itinerary)
    stops.insert(pickup_idx, ItineraryStop(rider_id, StopKind.PICKUP))
    stops.insert(dropoff_idx, ItineraryStop(rider_id, StopKind.DROPOFF))
    return tuple(stops)


def assign_rider(
    solution: Solution,
    vehicle_id: VehicleId,
    rider_id: RiderId,
    pickup_idx: int,
    dropoff_idx: int,
) -> Solution:
    """
    Move a rider onto a vehicle at the given positions, removing it first
    from wherever it currently is.
    """
    out = remove_rider(solution, rider_id)
    out[vehicle_id] = insert_rider(
        out.get(vehicle_id, ()),
        rider_id,
        pickup_idx,
        dropoff_idx,
    )
    return out


def remove_rider(solution: Solution, rider_id: RiderId) -> Solution:
    """
    Drop both stops of a rider from the solution.
    """
    return {
        vid: tuple(s for s in itinerary if s.rider_id != rider_id)
        for vid, itinerary in solution.items()
    }


def itinerary_hash(itinerary: Itinerary) -> str:
    """
    Deterministic content key of an itinerary: `rider:kind` pairs joined by
    `|`.
    """
    return "|".join(f"{s.rider_id}:{s.kind.value}" for s in itinerary)


def assigned_riders(solution: Solution) -> dict[RiderId, VehicleId]:
    """
    Map each rider with a pickup stop to its vehicle.
    """
    out: dict[RiderId, VehicleId] = {}
    for vid, itinerary in solution.items():
        for s in itinerary:
            if s.kind is StopKind.PICKUP:
                out[s.rider_id] = vid
    return out


def validate_solution(problem: Problem, solution: Solution) -> None:
    """
    Check a solution against the problem: known vehicles and riders, each
    rider on at most one vehicle with exactly one pickup followed by exactly
    one dropoff. Raises ItineraryError on the first violation.
    """
    vehicle_ids = {v.id for v in problem.vehicles}
    rider_ids = {r.id for r in problem.riders}
    owner: dict[RiderId, VehicleId] = {}
    for vid, itinerary in solution.items():
        if vid not in vehicle_ids:
            raise ItineraryError(f"unknown vehicle {vid}")
        positions: dict[RiderId, list[StopKind]] = {}
        for s in itinerary:
            if s.rider_id not in rider_ids:
                raise ItineraryError(f"unknown rider {s.rider_id} on {vid}")
            if owner.setdefault(s.rider_id, vid) != vid:
                raise ItineraryError(
                    f"rider {s.rider_id} is on vehicles {owner[s.rider_id]} and {vid}"
                )
            positions.setdefault(s.rider_id, []).append(s.kind)
        for rid, kinds in positions.items():
            if kinds != [StopKind.PICKUP, StopKind.DROPOFF]:
                raise ItineraryError(
                    f"rider {rid} on {vid} must have one pickup then one "
                    f"dropoff, got {[k.value for k in kinds]}"
                )


def solution_to_dict(solution: Solution) -> dict[str, list[dict[str, str]]]:
    """
    JSON friendly representation of a solution.
    """
    return {
        str(vid): [
            {"rider_id": str(s.rider_id), "kind": s.kind.value}
            for s in itinerary
        ]
        for vid, itinerary in solution.items()
    }


def solution_from_dict(data: dict[str, Any]) -> Solution:
    """
    Inverse of `solution_to_dict`.
    """
    return {
        VehicleId(str(vid)): tuple(
            ItineraryStop(RiderId(str(s["rider_id"])), StopKind(s["kind"]))
            for s in stops
        )
        for vid, stops in data.items()
    }
