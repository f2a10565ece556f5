"""
File system and serialization utilities for instances, solutions and run
outputs. Every writer builds its content in memory and swaps it into place,
so a crashed run never leaves a half written file behind.
"""

import csv
import json
import re
import tempfile
from dataclasses import asdict
from datetime import datetime, timezone
from hashlib import sha256
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any
import numpy as np
import yaml

from dialaride.models import Solution
from dialaride.simulate import SimulationResult
from dialaride.solution import solution_from_dict, solution_to_dict


def ensure_dir(directory: str | Path) -> Path:
    out = Path(directory)
    out.mkdir(parents=True, exist_ok=True)
    return out


def read_yaml(path: str | Path) -> dict:
    """
    Read a YAML file; an empty file reads as an empty dict.
    """
    return yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}


def read_json(path: str | Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def write_json(path: str | Path, data: Any, *, indent: int = 2) -> None:
    """
    Write JSON atomically. Infinite times are written as null.
    """
    text = json.dumps(_finite(data), ensure_ascii=False, indent=indent)
    _replace_file(Path(path), text.encode("utf-8"))


def write_csv_rows(
    path: str | Path,
    rows: list[dict[str, Any]],
    fieldnames: list[str] | None = None,
) -> None:
    """
    Write dict rows as CSV. Only `fieldnames` columns are kept, in that
    order; without them the keys of the first row are used.
    """
    if fieldnames is None:
        if not rows:
            raise ValueError("cannot infer CSV columns from zero rows")
        fieldnames = list(rows[0])
    buffer = StringIO(newline="")
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)
    _replace_file(Path(path), buffer.getvalue().encode("utf-8"))


def save_npz(path: str | Path, arrays: dict[str, np.ndarray]) -> None:
    buffer = BytesIO()
    np.savez_compressed(buffer, **arrays)
    _replace_file(Path(path), buffer.getvalue())


def load_npz(path: str | Path) -> dict[str, np.ndarray]:
    with np.load(Path(path)) as data:
        return {k: data[k] for k in data.files}


def file_sha256(path: str | Path, chunk_size: int = 1 << 20) -> str:
    digest = sha256()
    with Path(path).open("rb") as file:
        while chunk := file.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()

def write_solution_json(
    path: str | Path,
    solution: Solution,
    meta: dict[str, Any] | None = None,
) -> None:
    """
    Write a solution with optional run metadata next to it.
    """
    write_json(path, {"itineraries": solution_to_dict(solution), **(meta or {})})


def read_solution_json(path: str | Path) -> Solution:
    return solution_from_dict(read_json(path)["itineraries"])


def result_to_dict(result: SimulationResult) -> dict[str, Any]:
    """
    JSON friendly representation of a simulation result.
    """
    return {
        "vehicle_results": {
            str(vid): asdict(vr) for vid, vr in result.vehicle_results.items()
        },
        "unassigned_riders": [str(r) for r in result.unassigned_riders],
        "total_lateness": result.total_lateness,
        "unassigned_penalty": result.unassigned_penalty,
        "total_score": result.total_score,
    }


def make_run_id(instance: str, params: dict[str, Any] | None = None) -> str:
    """
    Folder name of a run: the slugged instance name followed by one
    `__<key><value>` part per parameter, keys sorted.
    """
    parts = [_slug(instance)]
    for key in sorted(params or {}):
        value = params[key]
        if isinstance(value, bool):
            value = int(value)
        elif isinstance(value, float):
            value = f"{value:g}"
        parts.append(f"{_slug(key)}{value}")
    return "__".join(parts)


def write_manifest(path: str | Path, meta: dict[str, Any]) -> None:
    """
    Write a run manifest stamped with the current UTC time.
    """
    created = datetime.now(timezone.utc).isoformat(timespec="seconds")
    write_json(path, {"created_at_utc": created, **meta})


def _finite(data: Any) -> Any:
    if isinstance(data, float) and not np.isfinite(data):
        return None
    if isinstance(data, dict):
        return {k: _finite(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_finite(v) for v in data]
    return data


def _replace_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "wb", delete=False, dir=path.parent, prefix=f".{path.name}."
    ) as tmp:
        tmp.write(content)
    Path(tmp.name).replace(path)


def _slug(text: Any) -> str:
    slug = re.sub(r"\s+", "_", str(text).strip().lower())
    return re.sub(r"[^a-z0-9_-]", "", slug).strip("_") or "x"
