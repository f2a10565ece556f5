"""
Tabular export of a simulated schedule.
"""

import numpy as np
import pandas as pd

from dialaride.simulate import SimulationResult
from dialaride.timefmt import format_time


SCHEDULE_COLUMNS = [
    "vehicle_id",
    "seq",
    "kind",
    "rider_id",
    "node_id",
    "arrival_time",
    "service_start_time",
    "departure_time",
    "arrival_clock",
    "departure_clock",
    "minutes_early",
    "minutes_late",
    "minutes_over_max_time",
]


def schedule_frame(result: SimulationResult) -> pd.DataFrame:
    """
    One row per simulated stop, followed by a `depot` row per vehicle with
    its return to the end depot.
    """
    rows = []
    for vid, vr in result.vehicle_results.items():
        for seq, s in enumerate(vr.stops):
            rows.append(
                {
                    "vehicle_id": vid,
                    "seq": seq,
                    "kind": s.kind.value,
                    "rider_id": s.rider_id,
                    "node_id": s.node_id,
                    "arrival_time": s.arrival_time,
                    "service_start_time": s.service_start_time,
                    "departure_time": s.departure_time,
                    "arrival_clock": _clock(s.arrival_time),
                    "departure_clock": _clock(s.departure_time),
                    "minutes_early": s.minutes_early,
                    "minutes_late": s.minutes_late,
                    "minutes_over_max_time": s.minutes_over_max_time,
                }
            )
        end = vr.vehicle_end
        rows.append(
            {
                "vehicle_id": vid,
                "seq": len(vr.stops),
                "kind": "depot",
                "rider_id": None,
                "node_id": end.node_id,
                "arrival_time": end.arrival_time,
                "service_start_time": end.arrival_time,
                "departure_time": end.arrival_time,
                "arrival_clock": _clock(end.arrival_time),
                "departure_clock": _clock(end.arrival_time),
                "minutes_early": None,
                "minutes_late": end.minutes_late,
                "minutes_over_max_time": None,
            }
        )
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def lateness_by_vehicle(result: SimulationResult) -> pd.Series:
    """
    Total penalized minutes per vehicle, including the depot return.
    """
    frame = schedule_frame(result)
    penalties = frame[["minutes_late", "minutes_over_max_time"]].astype(float).fillna(0.0)
    return penalties.sum(axis=1).groupby(frame["vehicle_id"]).sum()


def _clock(minutes: float) -> str | None:
    if not np.isfinite(minutes):
        return None
    return format_time(minutes)
