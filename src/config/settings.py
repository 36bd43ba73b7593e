from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

import structlog

from src.config.loaders import load_config
from src.weather.assessment import AssessmentThresholds

logger = structlog.get_logger(__name__)

DEFAULT_RUNWAY_HEADING = 40
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CONFIG_PATH = "config/metar.yaml"


@dataclass(frozen=True)
class Settings:
    runway_heading: int = DEFAULT_RUNWAY_HEADING
    log_level: str = DEFAULT_LOG_LEVEL
    thresholds: AssessmentThresholds = field(default_factory=AssessmentThresholds)


def _coerce_int(value: Any, default: int, *, key: str) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer in config; using default", key=key, value=value, default=default)
        return default


def normalize_heading(value: int) -> int:
    """Fold any integer heading into 1..360; 0 and 360 both read as 360."""
    heading = value % 360
    return heading if heading else 360


def _load_thresholds(raw: Dict[str, Any]) -> AssessmentThresholds:
    defaults = AssessmentThresholds()
    values = {
        f.name: _coerce_int(raw.get(f.name), getattr(defaults, f.name), key=f"thresholds.{f.name}")
        for f in fields(AssessmentThresholds)
    }
    return AssessmentThresholds(**values)


def load_settings(path: Optional[str] = None) -> Settings:
    """Build Settings from an optional YAML file plus METAR_* environment overrides.

    Raises FileNotFoundError and yaml.YAMLError from the loader, and ValueError
    when the file's top level is not a mapping.
    """
    raw: Dict[str, Any] = {}
    if path:
        raw = load_config(path)
        if not isinstance(raw, dict):
            raise ValueError(f"Configuration at {path} must be a mapping, got {type(raw).__name__}")

    runway = raw.get("runway") if isinstance(raw.get("runway"), dict) else {}
    thresholds = raw.get("thresholds") if isinstance(raw.get("thresholds"), dict) else {}
    logging_cfg = raw.get("logging") if isinstance(raw.get("logging"), dict) else {}

    heading = os.getenv("METAR_RUNWAY_HEADING") or runway.get("heading")
    level = os.getenv("METAR_LOG_LEVEL") or logging_cfg.get("level") or DEFAULT_LOG_LEVEL

    return Settings(
        runway_heading=normalize_heading(_coerce_int(heading, DEFAULT_RUNWAY_HEADING, key="runway.heading")),
        log_level=str(level).strip().upper(),
        thresholds=_load_thresholds(thresholds),
    )
