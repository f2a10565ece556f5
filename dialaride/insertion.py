"""
Greedy insertion constructive heuristic.
"""

import logging
from dataclasses import dataclass
from typing import Mapping
import numpy as np

from dialaride.models import (
    Itinerary,
    Problem,
    Rider,
    RiderId,
    Solution,
    StopKind,
    Vehicle,
    VehicleId,
)
from dialaride.objective import InsertionWeights, insertion_cost
from dialaride.pathfinding import PathCache
from dialaride.simulate import simulate_vehicle
from dialaride.solution import empty_solution, insert_rider


logger = logging.getLogger(__name__)

# Seats taken by a wheelchair passenger.
WHEELCHAIR_SEAT_EQUIVALENT = 1.5


@dataclass(frozen=True)
class Insertion:
    """
    The best place found for a rider: vehicle, positions and cost.
    """
    vehicle_id: VehicleId
    pickup_idx: int
    dropoff_idx: int
    cost: float


def generate_solution(
    problem: Problem,
    path_cache: PathCache,
    weights: InsertionWeights = InsertionWeights(),
) -> Solution:
    """
    Build a solution by inserting riders one at a time, ordered by their
    earliest constraint time, at the cheapest feasible (vehicle, pickup
    position, dropoff position). Placements are never revisited and riders
    without a feasible insertion stay unassigned.
    """
    solution = empty_solution(problem)
    riders_by_id = problem.riders_by_id()
    unassigned: list[RiderId] = []

    for rider in order_riders(problem.riders):
        best: Insertion | None = None
        for vehicle in problem.vehicles:
            if rider.accessibility.needs_wheelchair and vehicle.wheelchair_capacity == 0:
                continue
            cand = best_insertion(
                vehicle,
                solution[vehicle.id],
                rider,
                riders_by_id,
                path_cache,
                weights,
            )
            if cand is not None and (best is None or cand.cost < best.cost):
                best = cand

        if best is None:
            logger.debug("rider %s left unassigned", rider.id)
            unassigned.append(rider.id)
            continue
        logger.debug(
            "rider %s -> %s at (%d, %d), cost %.2f",
            rider.id,
            best.vehicle_id,
            best.pickup_idx,
            best.dropoff_idx,
            best.cost,
        )
        solution[best.vehicle_id] = insert_rider(
            solution[best.vehicle_id],
            rider.id,
            best.pickup_idx,
            best.dropoff_idx,
        )

    logger.info(
        "greedy insertion placed %d of %d riders",
        len(problem.riders) - len(unassigned),
        len(problem.riders),
    )
    return solution


def order_riders(riders: tuple[Rider, ...] | list[Rider]) -> list[Rider]:
    """
    Order riders by earliest constraint time. The sort is stable so ties keep
    the input order.
    """
    return sorted(riders, key=earliest_constraint_time)


def earliest_constraint_time(rider: Rider) -> float:
    """
    The pickup window opening, else the dropoff window opening, else 0.
    """
    if rider.pickup_window is not None:
        return rider.pickup_window.earliest
    if rider.dropoff_window is not None:
        return rider.dropoff_window.earliest
    return 0.0


def best_insertion(
    vehicle: Vehicle,
    itinerary: Itinerary,
    rider: Rider,
    riders_by_id: Mapping[RiderId, Rider],
    path_cache: PathCache,
    weights: InsertionWeights = InsertionWeights(),
) -> Insertion | None:
    """
    Try every pickup/dropoff position pair of the rider in the itinerary and
    return the cheapest one that respects the vehicle capacities.
    """
    best: Insertion | None = None
    best_cost = np.inf
    n = len(itinerary)
    for pickup_idx in range(n + 1):
        for dropoff_idx in range(pickup_idx + 1, n + 2):
            candidate = insert_rider(itinerary, rider.id, pickup_idx, dropoff_idx)
            if not respects_capacity(vehicle, candidate, riders_by_id):
                continue
            result = simulate_vehicle(vehicle, candidate, riders_by_id, path_cache)
            cost = insertion_cost(vehicle, result, weights)
            if cost < best_cost:
                best_cost = cost
                best = Insertion(vehicle.id, pickup_idx, dropoff_idx, cost)
    return best


def respects_capacity(
    vehicle: Vehicle,
    itinerary: Itinerary,
    riders_by_id: Mapping[RiderId, Rider],
) -> bool:
    """
    Check seat-equivalents and wheelchair occupancy after every pickup.
    """
    passengers = 0
    wheelchairs = 0
    for stop in itinerary:
        needs_wheelchair = riders_by_id[stop.rider_id].accessibility.needs_wheelchair
        if stop.kind is StopKind.PICKUP:
            passengers += 1
            if needs_wheelchair:
                wheelchairs += 1
            seats = passengers - wheelchairs + wheelchairs * WHEELCHAIR_SEAT_EQUIVALENT
            if seats > vehicle.seat_count:
                return False
            if wheelchairs > vehicle.wheelchair_capacity:
                return False
        else:
            passengers -= 1
            if needs_wheelchair:
                wheelchairs -= 1
    return True
