"""
Incremental simulation for interactive editing.
"""

import logging

from dialaride.models import Problem, Solution, VehicleId
from dialaride.pathfinding import PathCache
from dialaride.simulate import (
    SimulationResult,
    VehicleSimResult,
    aggregate_results,
    simulate,
)
from dialaride.solution import itinerary_hash


logger = logging.getLogger(__name__)


class SimulationCache:
    """
    Remembers, per vehicle, the hash of the last simulated itinerary and its
    result. When any vehicle changed the whole problem is simulated again;
    otherwise the result is rebuilt from the stored per-vehicle results.

    Scoped to one problem: build a new cache, or call `clear`, when the
    problem changes.
    """

    def __init__(self, problem: Problem, path_cache: PathCache | None = None) -> None:
        self.problem = problem
        if path_cache is None:
            path_cache = PathCache(problem.graph)
        self.path_cache = path_cache
        self._results: dict[VehicleId, tuple[str, VehicleSimResult]] = {}

    def simulate(self, solution: Solution) -> SimulationResult:
        hashes = {
            v.id: itinerary_hash(solution.get(v.id, ()))
            for v in self.problem.vehicles
        }
        dirty = [
            vid
            for vid, h in hashes.items()
            if vid not in self._results or self._results[vid][0] != h
        ]
        # Unknown vehicles go through simulate so they are reported the same way.
        dirty += [vid for vid in solution if vid not in hashes]

        if dirty:
            logger.debug("resimulating, dirty vehicles: %s", dirty)
            result = simulate(self.problem, solution, self.path_cache)
            for vid, h in hashes.items():
                vr = result.vehicle_results.get(vid)
                if vr is not None:
                    self._results[vid] = (h, vr)
            return result

        return aggregate_results(
            self.problem,
            {vid: vr for vid, (_, vr) in self._results.items()},
        )

    def clear(self) -> None:
        self._results.clear()
