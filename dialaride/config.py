"""
Experiment and instance configuration loading and validation utilities.
"""

from pathlib import Path
from typing import Any

from dialaride.io import read_yaml
from dialaride.objective import InsertionWeights


PROJECT_ROOT = Path(__file__).resolve().parents[1]  # Project root directory.
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "configs"       # Default configuration directory.


def resolve_config_path(name_or_path: str | Path) -> Path:
    """
    Resolve a YAML config file path, looking into the default config
    directory when the path does not exist as given.
    """
    p = Path(name_or_path)
    if p.exists():
        return p
    if not p.suffix:
        candidate = DEFAULT_CONFIG_DIR / f"{p}.yaml"
        if candidate.exists():
            return candidate
    candidate = DEFAULT_CONFIG_DIR / p
    if candidate.exists():
        return candidate
    raise FileNotFoundError(f"Config not found: {name_or_path}")


def load_yaml_config(name_or_path: str | Path) -> dict:
    """
    Load a YAML config file content.
    """
    path = resolve_config_path(name_or_path)
    cfg = read_yaml(path)
    if not isinstance(cfg, dict):
        raise ValueError(f"Invalid YAML at {path}")
    return cfg


def load_experiment(name_or_path: str | Path = "experiment_main.yaml") -> dict:
    """
    Load an experiment YAML config file content.
    """
    cfg = load_yaml_config(name_or_path)
    validate_experiment(cfg)
    return cfg


def load_instance_config(name_or_path: str | Path) -> dict:
    """
    Load a problem instance YAML file content.
    """
    cfg = load_yaml_config(name_or_path)
    validate_instance(cfg)
    return cfg


def insertion_weights_from_config(cfg: dict[str, Any]) -> InsertionWeights:
    """
    Read the greedy insertion weights of an experiment config, falling back
    to the defaults.
    """
    return InsertionWeights.from_dict(cfg.get("solver", {}).get("weights"))


def validate_experiment(cfg: dict[str, Any]) -> None:
    """
    Validate an experiment YAML config file content. Requires:
        - instances: non-empty list of instance paths.
        - output.data_dir (optional): a string.
        - solver.weights (optional): numeric values for known weights.
    """
    instances = cfg.get("instances")
    if not isinstance(instances, list) or not instances:
        raise ValueError("experiment.instances must be a non-empty list")
    out = cfg.get("output", {}) or {}
    if "data_dir" in out and not isinstance(out["data_dir"], str):
        raise ValueError("experiment.output.data_dir must be a string")
    weights = (cfg.get("solver", {}) or {}).get("weights", {}) or {}
    for k, v in weights.items():
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"experiment.solver.weights.{k} must be a number")
    InsertionWeights.from_dict(weights)


def validate_instance(cfg: dict[str, Any]) -> None:
    """
    Validate a problem instance YAML content. Requires:
        - one of nodes (with edges) or grid.
        - vehicles: non-empty list.
        - riders: list.
    """
    if "nodes" not in cfg and "grid" not in cfg:
        raise ValueError("instance must define either nodes or grid")
    if "nodes" in cfg and "grid" in cfg:
        raise ValueError("instance cannot define both nodes and grid")
    if "grid" in cfg:
        g = cfg["grid"]
        if not isinstance(g.get("size"), int) or g["size"] <= 0:
            raise ValueError("grid.size must be a positive int")
    vehicles = cfg.get("vehicles")
    if not isinstance(vehicles, list) or not vehicles:
        raise ValueError("instance.vehicles must be a non-empty list")
    if not isinstance(cfg.get("riders", []), list):
        raise ValueError("instance.riders must be a list")
    for key in ("id", "start_node", "end_node", "seat_count"):
        for v in vehicles:
            if key not in v:
                raise ValueError(f"vehicle missing key: {key}")
    for r in cfg.get("riders", []):
        for key in ("id", "pickup_node", "dropoff_node"):
            if key not in r:
                raise ValueError(f"rider missing key: {key}")
