# src/inputs/inputs.py
"""
Configuration loader for the Folio note liquidator.

Goals
-----
- File-first configuration validated via Pydantic.
- Pricing policy and the cohort offset schedule are data, not code.
- Minimal environment-variable overrides for secrets and CI/CLI convenience.

JSON shape
----------
    {
      "investor": {"investor_id": 1234, "api_key": "..."},
      "pricing":  {"acceptable_ytm": 0.0595, "acceptable_markup": 0.04, "initial_markup": 0.011},
      "cohorts":  {"month_thresholds": [8, 4, 1], "ytm_step": 0.008, "markup_step": 0.003},
      "filters":  {"purpose": "Credit card refinancing"},
      "run":      {"dry_run": true, "expiration_days": 7, "report": "liquidation.md"}
    }

Only "investor" is required; everything else has defaults.

Environment overrides (optional)
--------------------------------
- FOLIO_INVESTOR_ID -> investor.investor_id (int)
- FOLIO_API_KEY     -> investor.api_key
- FOLIO_DRY_RUN     -> run.dry_run ("1"/"true"/"yes" or "0"/"false"/"no")
- FOLIO_REPORT      -> run.report

Public API
----------
- class ConfigLoader:
    - load(path: str | Path | None) -> AppConfig
    - load_json(text: str) -> AppConfig
    - with_overrides(cfg, **kwargs) -> AppConfig (non-destructive copies)
- function load_config(path: str | Path | None) -> AppConfig  (convenience)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.client.folio import DEFAULT_BASE_URL, DEFAULT_EXPIRATION_DAYS, DEFAULT_TIMEOUT_S
from src.notes.collection import DEFAULT_MONTH_THRESHOLDS
from src.schemas.models import CohortTarget

_TRUE = ("1", "true", "yes")
_FALSE = ("0", "false", "no")

# ----------------------------
# Pydantic models
# ----------------------------


class InvestorSettings(BaseModel):
    """Platform account and connection settings."""

    investor_id: int = Field(..., description="Platform investor (account) id.")
    api_key: str = Field("", description="API key sent as the Authorization header.")
    base_url: str = Field(DEFAULT_BASE_URL, description="Investor API root.")
    timeout_s: float = Field(DEFAULT_TIMEOUT_S, gt=0, description="Per-request timeout in seconds.")


class PricingPolicy(BaseModel):
    """Yield/markup targets for the oldest cohort and solver seeding."""

    acceptable_ytm: float = Field(0.0595, description="Minimum YTM left to the buyer (0.0595 = 5.95%).")
    acceptable_markup: float = Field(0.04, description="Notes whose optimal markup is at or below this are kept.")
    initial_markup: float = Field(0.011, description="Newton seed for the markup search.")
    max_markup: float = Field(0.7, gt=0, le=1, description="Platform ceiling; markups at or above are rejected.")


class CohortSchedule(BaseModel):
    """
    Age thresholds and the per-cohort relaxation of the pricing policy.
    Cohort i is priced at (acceptable_ytm - i * ytm_step, acceptable_markup - i * markup_step).
    """

    month_thresholds: list[int] = Field(
        default_factory=lambda: list(DEFAULT_MONTH_THRESHOLDS),
        description="Months since issuance, oldest cohort first.",
    )
    ytm_step: float = Field(0.008, ge=0, description="YTM target decrease per cohort index.")
    markup_step: float = Field(0.003, ge=0, description="Markup floor decrease per cohort index.")

    @field_validator("month_thresholds")
    @classmethod
    def _strictly_decreasing(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("month_thresholds must not be empty")
        if any(t <= 0 for t in v):
            raise ValueError("month_thresholds must be positive")
        if any(a <= b for a, b in zip(v, v[1:], strict=False)):
            raise ValueError("month_thresholds must be strictly decreasing (oldest first)")
        return v

    def targets(self, policy: PricingPolicy) -> list[CohortTarget]:
        return [
            CohortTarget(
                acceptable_ytm=policy.acceptable_ytm - i * self.ytm_step,
                acceptable_markup=policy.acceptable_markup - i * self.markup_step,
            )
            for i in range(len(self.month_thresholds))
        ]


class NoteFilters(BaseModel):
    """Exact-match classification filters applied before partitioning."""

    purpose: str | None = Field(None, description="Only sell notes with this purpose.")
    loan_status: str | None = Field(None, description="Only sell notes with this loan status.")


class RunOptions(BaseModel):
    """Runtime options for one liquidation run."""

    dry_run: bool = Field(False, description="Price and validate, but do not submit sales.")
    expiration_days: int = Field(DEFAULT_EXPIRATION_DAYS, ge=1, le=7, description="Listing lifetime in days.")
    report: str | None = Field(None, description="Optional Markdown report path.")


class AppConfig(BaseModel):
    """Full configuration payload."""

    investor: InvestorSettings
    pricing: PricingPolicy = PricingPolicy()
    cohorts: CohortSchedule = CohortSchedule()
    filters: NoteFilters = NoteFilters()
    run: RunOptions = RunOptions()


# ----------------------------
# Loader
# ----------------------------


@dataclass(frozen=True)
class ConfigLoader:
    """
    File-first config loader with light env overrides.

    Default search (when path=None):
        1) ./config.json
        2) ./config/folio.json
    """

    env_prefix: str = "FOLIO_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> AppConfig:
        p = self._resolve_path(path)
        raw = self._read_json_file(p)
        raw = self._apply_env_overrides(raw)
        return self._parse_root(raw)

    def load_json(self, text: str) -> AppConfig:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError("Config root must be a JSON object")
        raw = self._apply_env_overrides(raw)
        return self._parse_root(raw)

    def with_overrides(
        self,
        cfg: AppConfig,
        *,
        dry_run: bool | None = None,
        report: str | None = None,
    ) -> AppConfig:
        """Return a *new* AppConfig with non-null run overrides applied."""
        updates: dict[str, Any] = {}
        if dry_run is not None:
            updates["dry_run"] = dry_run
        if report is not None:
            updates["report"] = report

        if not updates:
            return cfg

        run_new = cfg.run.model_copy(update=updates)
        return cfg.model_copy(update={"run": run_new})

    # ---------- Internals ----------

    def _resolve_path(self, path: str | Path | None) -> Path:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise FileNotFoundError(f"Config file not found: {p}")
            return p

        for candidate in (Path("config.json"), Path("config/folio.json")):
            if candidate.exists():
                return candidate
        raise FileNotFoundError("No config path provided and no default config found. Looked for ./config.json and ./config/folio.json.")

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported config format for {p.name}; only .json is supported.")
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config root in {p} must be a JSON object")
        return cast(dict[str, Any], data)

    def _parse_root(self, data: dict[str, Any]) -> AppConfig:
        try:
            return AppConfig.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Config validation failed:\n{e}") from e

    def _apply_env_overrides(self, raw: dict[str, Any]) -> dict[str, Any]:
        """
        Overlay environment variables onto the raw payload before validation,
        so secrets may live only in the environment.
        """
        prefix = self.env_prefix
        data = dict(raw)
        investor = dict(data.get("investor") or {})
        run = dict(data.get("run") or {})

        investor_id = os.getenv(f"{prefix}INVESTOR_ID")
        if investor_id:
            try:
                investor["investor_id"] = int(investor_id)
            except ValueError:
                # Ignore bad value; keep the file's id
                pass

        api_key = os.getenv(f"{prefix}API_KEY")
        if api_key:
            investor["api_key"] = api_key

        dry_run = os.getenv(f"{prefix}DRY_RUN")
        if dry_run:
            normalized = dry_run.strip().lower()
            if normalized in _TRUE:
                run["dry_run"] = True
            elif normalized in _FALSE:
                run["dry_run"] = False

        report = os.getenv(f"{prefix}REPORT")
        if report:
            run["report"] = report

        if investor:
            data["investor"] = investor
        if run:
            data["run"] = run
        return data


# ----------------------------
# Convenience function
# ----------------------------


def load_config(path: str | Path | None = None) -> AppConfig:
    """Convenience wrapper for one-shot callers."""
    return ConfigLoader().load(path)
