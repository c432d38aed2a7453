"""Runtime settings for the Baseline Studio backend."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from baseline_selection.config import SelectionConfig
from baseline_selection.covariates import DEFAULT_TIME_LENIENCY_MINUTES
from baseline_selection.validation import DEFAULT_SCHEMA_PATH


@dataclass(frozen=True)
class AppSettings:
    workspace_root: Path
    data_dir: Path
    baselines_dir: Path
    schema_path: Path
    timezone_id: str = "UTC"
    confidence: float = 0.95
    time_leniency_minutes: int = DEFAULT_TIME_LENIENCY_MINUTES
    log_level: str = "INFO"

    @classmethod
    def load(cls) -> "AppSettings":
        workspace_root = Path(__file__).resolve().parents[2]
        data_dir = Path(os.environ.get("PROBCHECK_DATA_DIR", str(workspace_root / "data"))).resolve()
        baselines_dir = Path(os.environ.get("PROBCHECK_BASELINE_DIR", str(data_dir / "baselines"))).resolve()
        schema_path = Path(os.environ.get("PROBCHECK_SCHEMA_PATH", str(DEFAULT_SCHEMA_PATH))).resolve()
        timezone_id = os.environ.get("PROBCHECK_TIMEZONE", "UTC").strip() or "UTC"
        confidence = float(os.environ.get("PROBCHECK_CONFIDENCE", "0.95"))
        leniency = int(os.environ.get("PROBCHECK_TIME_LENIENCY_MINUTES", str(DEFAULT_TIME_LENIENCY_MINUTES)))
        log_level = os.environ.get("PROBCHECK_LOG_LEVEL", "INFO").strip().upper() or "INFO"
        return cls(
            workspace_root=workspace_root,
            data_dir=data_dir,
            baselines_dir=baselines_dir,
            schema_path=schema_path,
            timezone_id=timezone_id,
            confidence=confidence,
            time_leniency_minutes=max(0, leniency),
            log_level=log_level,
        )

    def selection_config(self) -> SelectionConfig:
        return SelectionConfig(
            confidence=self.confidence,
            timezone=self.timezone_id,
            time_leniency_minutes=self.time_leniency_minutes,
        )

    def ensure_paths(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.baselines_dir.mkdir(parents=True, exist_ok=True)
