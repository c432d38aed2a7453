"""YAML-backed baseline storage: discovery, parsing, and writing."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from .covariates import TIME_WINDOW_KEYS
from .factors import normalize_factors
from .filenames import BASELINE_EXTENSIONS, baseline_filename, sanitize_use_case_id
from .types import (
    BaselineCandidate,
    CovariateDeclaration,
    CovariateProfile,
    ExecutionSpecification,
    parse_covariate_value,
)
from .validation import DEFAULT_SCHEMA_PATH, validate_baseline_payload


logger = logging.getLogger(__name__)

SCHEMA_VERSION = "probcheck-baseline-1"


class BaselineLoadError(Exception):
    """Raised when a baseline file cannot be read, parsed, or validated."""


def _parse_timestamp(raw: Any) -> datetime | None:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        moment = raw
    else:
        text = str(raw).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _normalize_payload(payload: dict[str, Any]) -> dict[str, Any]:
    # YAML loads unquoted ISO timestamps as datetime objects.
    normalized = dict(payload)
    generated_at = normalized.get("generatedAt")
    if isinstance(generated_at, datetime):
        normalized["generatedAt"] = generated_at.isoformat()
    return normalized


class BaselineRepository:
    """Baselines stored as one YAML file each under ``root``."""

    def __init__(
        self,
        root: Path,
        schema_path: Path = DEFAULT_SCHEMA_PATH,
        time_window_keys: Iterable[str] = TIME_WINDOW_KEYS,
    ) -> None:
        self.root = Path(root)
        self.schema_path = schema_path
        self.time_window_keys = frozenset(time_window_keys)

    def baseline_files(self, use_case_id: str) -> list[Path]:
        if not self.root.is_dir():
            return []
        name = sanitize_use_case_id(use_case_id)
        files: list[Path] = []
        for path in sorted(self.root.iterdir()):
            if not path.is_file() or path.suffix not in BASELINE_EXTENSIONS:
                continue
            if path.name.startswith(name + "-") or path.name.startswith(name + "."):
                files.append(path)
        return files

    def load(self, path: Path) -> BaselineCandidate:
        try:
            with path.open("r", encoding="utf-8") as handle:
                raw = yaml.safe_load(handle)
        except OSError as exc:
            raise BaselineLoadError(f"Cannot read baseline file: {path}") from exc
        except yaml.YAMLError as exc:
            raise BaselineLoadError(f"Error parsing YAML file: {path}") from exc

        if not isinstance(raw, dict):
            raise BaselineLoadError(f"Malformed baseline file: expected a mapping in {path}")
        payload = _normalize_payload(raw)
        ok, errors = validate_baseline_payload(payload, self.schema_path)
        if not ok:
            raise BaselineLoadError(f"Invalid baseline file {path}: {'; '.join(errors)}")

        try:
            return self._candidate(path.name, payload)
        except ValueError as exc:
            raise BaselineLoadError(f"Invalid baseline file {path}: {exc}") from exc

    def _candidate(self, filename: str, payload: dict[str, Any]) -> BaselineCandidate:
        covariates = payload.get("covariates") or {}
        profile = CovariateProfile.from_pairs(
            (str(key), parse_covariate_value(str(key), value, self.time_window_keys))
            for key, value in covariates.items()
        )
        execution = payload["execution"]
        statistics = payload["statistics"]
        spec = ExecutionSpecification(
            use_case_id=payload["useCaseId"],
            samples_executed=int(execution["samplesExecuted"]),
            successes=int(statistics["successes"]),
            samples_planned=execution.get("samplesPlanned"),
        )
        return BaselineCandidate(
            filename=filename,
            footprint=payload["footprint"],
            covariate_profile=profile,
            generated_at=_parse_timestamp(payload.get("generatedAt")),
            execution_specification=spec,
        )

    def find_all(self, use_case_id: str) -> list[BaselineCandidate]:
        candidates: list[BaselineCandidate] = []
        for path in self.baseline_files(use_case_id):
            try:
                candidate = self.load(path)
            except BaselineLoadError as exc:
                logger.warning("Skipping unreadable baseline %s: %s", path.name, exc)
                continue
            if candidate.execution_specification.use_case_id != use_case_id:
                logger.debug(
                    "Skipping %s: belongs to use case %s",
                    path.name,
                    candidate.execution_specification.use_case_id,
                )
                continue
            candidates.append(candidate)
        return candidates

    def find_candidates(self, use_case_id: str, footprint: str) -> list[BaselineCandidate]:
        candidates = [c for c in self.find_all(use_case_id) if c.footprint == footprint]
        logger.debug("Found %d baseline candidate(s) for %s/%s", len(candidates), use_case_id, footprint)
        return candidates

    def available_footprints(self, use_case_id: str) -> list[str]:
        return sorted({c.footprint for c in self.find_all(use_case_id)})

    def write_baseline(
        self,
        execution: ExecutionSpecification,
        footprint: str,
        profile: CovariateProfile,
        declaration: CovariateDeclaration | None = None,
        generated_at: datetime | None = None,
        factors: Mapping[str, Any] | None = None,
    ) -> Path:
        moment = generated_at or datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "schemaVersion": SCHEMA_VERSION,
            "useCaseId": execution.use_case_id,
            "generatedAt": moment.isoformat(),
            "footprint": footprint,
        }
        normalized = normalize_factors(factors)
        if normalized:
            payload["factors"] = normalized
        payload["covariates"] = profile.to_dict()
        if declaration is not None and not declaration.is_empty:
            payload["covariateCategories"] = {entry.key: entry.category.value for entry in declaration}
        execution_block: dict[str, Any] = {"samplesExecuted": execution.samples_executed}
        if execution.samples_planned is not None:
            execution_block["samplesPlanned"] = execution.samples_planned
        payload["execution"] = execution_block
        payload["statistics"] = {
            "successes": execution.successes,
            "failures": execution.failures,
            "observed": execution.observed_rate,
        }

        ok, errors = validate_baseline_payload(payload, self.schema_path)
        if not ok:
            raise ValueError(f"Refusing to write invalid baseline: {'; '.join(errors)}")

        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / baseline_filename(execution.use_case_id, footprint, profile, declaration)
        with path.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(payload, handle, sort_keys=False, allow_unicode=True)
        logger.info("Wrote baseline %s", path.name)
        return path
