"""
Functions to compute the insertion cost of a simulated itinerary.
"""

from dataclasses import dataclass
from typing import Any

from dialaride.models import Vehicle
from dialaride.simulate import VehicleSimResult


@dataclass(frozen=True)
class InsertionWeights:
    """
    Weights of the greedy insertion cost. Lateness dominates, the elapsed
    vehicle time only separates otherwise equal candidates.
    """
    lateness: float = 10.0
    over_max_time: float = 10.0
    depot_lateness: float = 5.0
    elapsed_time: float = 0.1

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "InsertionWeights":
        if not data:
            return cls()
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"unknown insertion weights: {sorted(unknown)}")
        return cls(**{k: float(v) for k, v in data.items()})


def insertion_cost(
    vehicle: Vehicle,
    result: VehicleSimResult,
    weights: InsertionWeights = InsertionWeights(),
) -> float:
    """
    Compute the cost of a vehicle's simulated itinerary.
    """
    cost = 0.0
    for stop in result.stops:
        if stop.minutes_late:
            cost += stop.minutes_late * weights.lateness
        if stop.minutes_over_max_time:
            cost += stop.minutes_over_max_time * weights.over_max_time
    end = result.vehicle_end
    if end.minutes_late:
        cost += end.minutes_late * weights.depot_lateness
    cost += (end.arrival_time - vehicle.start_time) * weights.elapsed_time
    return cost
