"""
Functions to compute the metrics of a simulated solution.
"""

import numpy as np

from dialaride.models import Problem, RiderId, StopKind
from dialaride.simulate import SimulationResult


def ride_times(result: SimulationResult) -> dict[RiderId, float]:
    """
    Time in vehicle of each delivered rider, from pickup departure to dropoff
    arrival.
    """
    out: dict[RiderId, float] = {}
    for vr in result.vehicle_results.values():
        picked: dict[RiderId, float] = {}
        for s in vr.stops:
            if s.kind is StopKind.PICKUP:
                picked[s.rider_id] = s.departure_time
            elif s.rider_id in picked:
                out[s.rider_id] = s.arrival_time - picked[s.rider_id]
    return out


def summarize_result(problem: Problem, result: SimulationResult) -> dict[str, float]:
    """
    Summarize the global metrics of a simulated solution.
    """
    waits: list[float] = []
    n_late_stops = 0
    n_over_max = 0
    n_late_vehicles = 0
    for vr in result.vehicle_results.values():
        for s in vr.stops:
            if s.kind is StopKind.PICKUP:
                waits.append(s.minutes_early or 0.0)
            if s.minutes_late:
                n_late_stops += 1
            if s.minutes_over_max_time:
                n_over_max += 1
        if vr.vehicle_end.minutes_late:
            n_late_vehicles += 1

    rides = list(ride_times(result).values())
    served = len(problem.riders) - len(result.unassigned_riders)
    return {
        "served": float(served),
        "unserved": float(len(result.unassigned_riders)),
        "wait_mean_min": float(np.mean(waits)) if waits else 0.0,
        "ride_time_mean_min": float(np.mean(rides)) if rides else 0.0,
        "ride_time_max_min": float(np.max(rides)) if rides else 0.0,
        "late_stops": float(n_late_stops),
        "over_max_time_stops": float(n_over_max),
        "late_vehicles": float(n_late_vehicles),
        "total_lateness": float(result.total_lateness),
        "unassigned_penalty": float(result.unassigned_penalty),
        "total_score": float(result.total_score),
    }
