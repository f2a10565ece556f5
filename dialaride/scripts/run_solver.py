"""
Run the greedy insertion solver for all experiment instances.
"""

import logging
import time
from pathlib import Path

from dialaride.config import (
    PROJECT_ROOT,
    insertion_weights_from_config,
    load_experiment,
    resolve_config_path,
)
from dialaride.insertion import generate_solution
from dialaride.instances import load_problem
from dialaride.io import (
    ensure_dir,
    file_sha256,
    make_run_id,
    result_to_dict,
    write_csv_rows,
    write_json,
    write_manifest,
    write_solution_json,
)
from dialaride.log import setup_logging
from dialaride.metrics import summarize_result
from dialaride.od import save_od
from dialaride.pathfinding import PathCache
from dialaride.report import schedule_frame
from dialaride.simulate import simulate


logger = logging.getLogger(__name__)

RUN_FIELDS = [
    "run_id",
    "instance",
    "served",
    "unserved",
    "wait_mean_min",
    "ride_time_mean_min",
    "total_lateness",
    "total_score",
    "cpu_time_sec",
]


def run_solver(experiment: str | Path = "experiment_main.yaml") -> list[dict[str, object]]:
    exp = load_experiment(experiment)
    data_dir = Path(exp.get("output", {}).get("data_dir", "data"))
    if not data_dir.is_absolute():
        data_dir = PROJECT_ROOT / data_dir
    weights = insertion_weights_from_config(exp)
    save_od_matrix = bool(exp.get("output", {}).get("save_od", False))

    rows: list[dict[str, object]] = []
    for instance in exp["instances"]:
        instance_path = resolve_config_path(instance)
        problem = load_problem(instance_path)
        name = instance_path.stem
        logger.info(
            "- instance %s: %d vehicles, %d riders",
            name,
            len(problem.vehicles),
            len(problem.riders),
        )

        run_id = make_run_id(name, {"algo": "greedy"})
        out_dir = ensure_dir(data_dir / "solutions" / run_id)

        path_cache = PathCache(problem.graph)
        start_time = time.time()
        solution = generate_solution(problem, path_cache, weights)
        elapsed = time.time() - start_time
        result = simulate(problem, solution, path_cache)
        metrics = summarize_result(problem, result)
        metrics["cpu_time_sec"] = float(elapsed)

        write_solution_json(
            out_dir / "solution.json",
            solution,
            {"instance": name, "run_id": run_id},
        )
        write_json(out_dir / "result.json", result_to_dict(result))
        write_json(out_dir / "metrics.json", {"run_id": run_id, **metrics})
        schedule_frame(result).to_csv(out_dir / "schedule.csv", index=False)
        if save_od_matrix:
            save_od(problem, path_cache, out_dir / "od.npz")
        write_manifest(
            out_dir / "manifest.json",
            {
                "instance": str(instance_path),
                "instance_sha256": file_sha256(instance_path),
                "cached_paths": len(path_cache),
            },
        )

        logger.info(
            "  score %.1f (%d unassigned) in %.2fs",
            result.total_score,
            len(result.unassigned_riders),
            elapsed,
        )
        rows.append({"run_id": run_id, "instance": name, **metrics})

    write_csv_rows(data_dir / "metrics" / "solver_runs.csv", rows, RUN_FIELDS)
    return rows


def main() -> None:
    setup_logging()
    run_solver()


if __name__ == "__main__":
    main()
