"""Baseline payload validation utilities."""

from __future__ import annotations

from functools import lru_cache
import json
from pathlib import Path
from typing import Any

import jsonschema


DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "baseline.schema.json"


@lru_cache(maxsize=8)
def _validator(schema_path: str) -> jsonschema.Draft202012Validator:
    with Path(schema_path).open("r", encoding="utf-8") as handle:
        schema = json.load(handle)
    return jsonschema.Draft202012Validator(schema)


def validate_baseline_payload(
    payload: dict[str, Any],
    schema_path: Path = DEFAULT_SCHEMA_PATH,
) -> tuple[bool, list[str]]:
    errors: list[str] = []
    validator = _validator(str(schema_path))
    for err in sorted(validator.iter_errors(payload), key=lambda e: [str(part) for part in e.path]):
        path = ".".join(str(part) for part in err.path)
        if path:
            errors.append(f"{path}: {err.message}")
        else:
            errors.append(err.message)

    execution = payload.get("execution")
    statistics = payload.get("statistics")
    if isinstance(execution, dict) and isinstance(statistics, dict):
        executed = execution.get("samplesExecuted")
        successes = statistics.get("successes")
        if isinstance(executed, int) and isinstance(successes, int) and successes > executed:
            errors.append("statistics.successes: must not exceed execution.samplesExecuted")
    return len(errors) == 0, errors
