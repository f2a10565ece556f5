"""
Functions and data models to replay itineraries into a timed schedule and
score a solution.
"""

from dataclasses import dataclass, field
from typing import Mapping
import numpy as np

from dialaride.models import (
    Itinerary,
    NodeId,
    Problem,
    Rider,
    RiderId,
    Solution,
    StopKind,
    Vehicle,
    VehicleId,
)
from dialaride.pathfinding import PathCache


# Score charged per rider left out of every itinerary. Far above any lateness.
UNASSIGNED_RIDER_PENALTY = 1_000_000


class ItineraryError(ValueError):
    """
    Raised when an itinerary breaks the solution contract: unknown rider,
    dropoff before pickup, repeated stop or a rider on two vehicles.
    """


@dataclass(frozen=True)
class SimulatedStop:
    """
    An itinerary stop with its computed times, in minutes from midnight, and
    its indicators. `minutes_early` is the driver wait before the window opens
    and never counts towards the score.
    """
    rider_id: RiderId
    kind: StopKind
    node_id: NodeId
    arrival_time: float
    service_start_time: float
    service_end_time: float
    departure_time: float
    minutes_early: float | None = None
    minutes_late: float | None = None
    minutes_over_max_time: float | None = None

    @property
    def penalty_minutes(self) -> float:
        return (self.minutes_late or 0.0) + (self.minutes_over_max_time or 0.0)


@dataclass(frozen=True)
class VehicleEndResult:
    node_id: NodeId
    arrival_time: float
    minutes_late: float | None = None


@dataclass(frozen=True)
class VehicleSimResult:
    """
    The simulated stops of one vehicle, one per itinerary stop, and its return
    to the end depot.
    """
    stops: tuple[SimulatedStop, ...]
    vehicle_end: VehicleEndResult

    @property
    def lateness(self) -> float:
        total = 0.0
        for s in self.stops:
            if s.minutes_late:
                total += s.minutes_late
            if s.minutes_over_max_time:
                total += s.minutes_over_max_time
        if self.vehicle_end.minutes_late:
            total += self.vehicle_end.minutes_late
        return total


@dataclass(frozen=True)
class SimulationResult:
    """
    The simulation of a whole solution. `total_lateness` sums every late and
    over-max-time minute, `total_score` adds the unassigned penalty. Lower is
    better and zero is perfect.
    """
    vehicle_results: dict[VehicleId, VehicleSimResult]
    unassigned_riders: list[RiderId]
    total_lateness: float
    unassigned_penalty: float
    total_score: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "total_score", self.total_lateness + self.unassigned_penalty
        )


def simulate(
    problem: Problem,
    solution: Solution,
    path_cache: PathCache | None = None,
) -> SimulationResult:
    """
    Simulate every vehicle of the problem with its itinerary from the
    solution (vehicles without an entry run empty) and aggregate the score.
    """
    if path_cache is None:
        path_cache = PathCache(problem.graph)
    vehicles_by_id = problem.vehicles_by_id()
    for vid in solution:
        if vid not in vehicles_by_id:
            raise ItineraryError(f"solution references unknown vehicle {vid}")

    riders_by_id = problem.riders_by_id()
    vehicle_results: dict[VehicleId, VehicleSimResult] = {}
    for vehicle in problem.vehicles:
        itinerary = solution.get(vehicle.id, ())
        vehicle_results[vehicle.id] = simulate_vehicle(
            vehicle,
            itinerary,
            riders_by_id,
            path_cache,
        )
    return aggregate_results(problem, vehicle_results)


def aggregate_results(
    problem: Problem,
    vehicle_results: Mapping[VehicleId, VehicleSimResult],
) -> SimulationResult:
    """
    Build the fleet-wide result from per-vehicle results: a rider without a
    pickup stop anywhere is unassigned.
    """
    assigned: dict[RiderId, VehicleId] = {}
    total_lateness = 0.0
    results: dict[VehicleId, VehicleSimResult] = {}
    for vehicle in problem.vehicles:
        vr = vehicle_results.get(vehicle.id)
        if vr is None:
            continue
        results[vehicle.id] = vr
        for stop in vr.stops:
            if stop.kind is StopKind.PICKUP:
                if stop.rider_id in assigned:
                    raise ItineraryError(
                        f"rider {stop.rider_id} is on vehicles "
                        f"{assigned[stop.rider_id]} and {vehicle.id}"
                    )
                assigned[stop.rider_id] = vehicle.id
        total_lateness += vr.lateness

    unassigned = [r.id for r in problem.riders if r.id not in assigned]
    return SimulationResult(
        vehicle_results=results,
        unassigned_riders=unassigned,
        total_lateness=total_lateness,
        unassigned_penalty=len(unassigned) * UNASSIGNED_RIDER_PENALTY,
    )


def simulate_vehicle(
    vehicle: Vehicle,
    itinerary: Itinerary,
    riders_by_id: Mapping[RiderId, Rider],
    path_cache: PathCache,
) -> VehicleSimResult:
    """
    Replay one vehicle's itinerary from its start depot and start time. Seat
    and wheelchair capacities are not checked here.
    """
    stops: list[SimulatedStop] = []
    pickup_departure: dict[RiderId, float] = {}
    dropped: set[RiderId] = set()

    current_node = vehicle.start_node
    current_time = float(vehicle.start_time)

    for stop in itinerary:
        rider = riders_by_id.get(stop.rider_id)
        if rider is None:
            raise ItineraryError(f"unknown rider {stop.rider_id} on {vehicle.id}")
        _check_order(vehicle, stop.rider_id, stop.kind, pickup_departure, dropped)

        target = rider.node_for(stop.kind)
        window = rider.window_for(stop.kind)

        arrival = current_time + path_cache.get_travel_time(current_node, target)
        service_start = arrival
        minutes_early = None
        if window is not None and arrival < window.earliest:
            minutes_early = window.earliest - arrival
            service_start = window.earliest

        minutes_late = None
        if window is not None and service_start > window.latest:
            minutes_late = service_start - window.latest

        service_end = service_start + rider.accessibility.boarding_time

        minutes_over = None
        if stop.kind is StopKind.PICKUP:
            pickup_departure[rider.id] = service_end
        else:
            dropped.add(rider.id)
            picked_at = pickup_departure[rider.id]
            # An unreachable pickup is already an infinite score.
            if rider.max_time_in_vehicle is not None and np.isfinite(picked_at):
                # Raw arrival, before any dropoff window wait.
                in_vehicle = arrival - picked_at
                if in_vehicle > rider.max_time_in_vehicle:
                    minutes_over = in_vehicle - rider.max_time_in_vehicle

        stops.append(
            SimulatedStop(
                rider_id=rider.id,
                kind=stop.kind,
                node_id=target,
                arrival_time=arrival,
                service_start_time=service_start,
                service_end_time=service_end,
                departure_time=service_end,
                minutes_early=minutes_early,
                minutes_late=minutes_late,
                minutes_over_max_time=minutes_over,
            )
        )
        current_node = target
        current_time = service_end

    end_arrival = current_time + path_cache.get_travel_time(
        current_node, vehicle.end_node
    )
    end_late = None
    if end_arrival > vehicle.end_time:
        end_late = end_arrival - vehicle.end_time
    return VehicleSimResult(
        stops=tuple(stops),
        vehicle_end=VehicleEndResult(
            node_id=vehicle.end_node,
            arrival_time=end_arrival,
            minutes_late=end_late,
        ),
    )


def _check_order(
    vehicle: Vehicle,
    rider_id: RiderId,
    kind: StopKind,
    picked: Mapping[RiderId, float],
    dropped: set[RiderId],
) -> None:
    if kind is StopKind.PICKUP:
        if rider_id in picked:
            raise ItineraryError(f"rider {rider_id} picked up twice on {vehicle.id}")
        return
    if rider_id not in picked:
        raise ItineraryError(
            f"rider {rider_id} dropped off before pickup on {vehicle.id}"
        )
    if rider_id in dropped:
        raise ItineraryError(f"rider {rider_id} dropped off twice on {vehicle.id}")
