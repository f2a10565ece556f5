"""
Simulate stored solutions of an instance and report their scores.

Several solution files can be given: they are simulated in order through one
simulation cache, the way successive edits of a solution are.
"""

import logging
from argparse import ArgumentParser
from pathlib import Path

from dialaride.cache import SimulationCache
from dialaride.instances import load_problem
from dialaride.io import read_solution_json, result_to_dict, write_json
from dialaride.log import setup_logging
from dialaride.metrics import summarize_result
from dialaride.report import schedule_frame
from dialaride.simulate import SimulationResult
from dialaride.solution import validate_solution


logger = logging.getLogger(__name__)


def evaluate_solutions(
    instance: str | Path,
    solution_paths: list[Path],
    out_dir: Path | None = None,
) -> list[SimulationResult]:
    problem = load_problem(instance)
    cache = SimulationCache(problem)
    results = []
    for path in solution_paths:
        solution = read_solution_json(path)
        validate_solution(problem, solution)
        result = cache.simulate(solution)
        metrics = summarize_result(problem, result)
        logger.info(
            "%s: score %.1f, lateness %.1f, %d unassigned",
            path.name,
            result.total_score,
            result.total_lateness,
            len(result.unassigned_riders),
        )
        if out_dir is not None:
            stem = path.stem
            write_json(out_dir / f"{stem}.result.json", result_to_dict(result))
            write_json(out_dir / f"{stem}.metrics.json", metrics)
            schedule_frame(result).to_csv(out_dir / f"{stem}.schedule.csv", index=False)
        results.append(result)
    return results


def main() -> None:
    parser = ArgumentParser(description=__doc__)
    parser.add_argument("instance", help="instance YAML name or path")
    parser.add_argument("solutions", nargs="+", type=Path, help="solution JSON files")
    parser.add_argument("--out-dir", type=Path, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    evaluate_solutions(args.instance, args.solutions, args.out_dir)


if __name__ == "__main__":
    main()
