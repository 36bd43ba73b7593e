from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Iterable, List, Optional

import structlog
import yaml

from src.config.loaders import resolve_config_path
from src.config.settings import DEFAULT_CONFIG_PATH, Settings, load_settings, normalize_heading
from src.weather.assessment import Assessment, assess
from src.weather.metar import DecodedReport, decode_metar

logger = structlog.get_logger(__name__)


def configure_logging(level_name: str) -> None:
    # getLevelName maps known names to ints and anything else to a "Level X" string.
    level = logging.getLevelName((level_name or "INFO").strip().upper())
    known = isinstance(level, int)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level if known else logging.INFO),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
    if not known:
        logger.warning("Unknown log level; using INFO", level=level_name)


def _default_config_path() -> Optional[str]:
    path = resolve_config_path(DEFAULT_CONFIG_PATH)
    return path if os.path.isfile(path) else None


def _wind_line(report: DecodedReport) -> str:
    wind = report.wind
    direction = "VRB" if wind.is_variable_direction else f"{wind.direction:03d}°"
    line = f"{direction} {wind.speed}{wind.unit}"
    if wind.gust > 0:
        line += f" gusting {wind.gust}{wind.unit}"
    if wind.variable_from is not None:
        line += f" (variable {wind.variable_from}°-{wind.variable_to}°)"
    return line


def format_summary(report: DecodedReport, assessment: Assessment) -> str:
    clouds = ", ".join(
        layer.cover
        + (f" {layer.base_feet}ft" if layer.base_feet is not None else "")
        + (f" {layer.cloud_type}" if layer.cloud_type else "")
        for layer in report.cloud_layers
    )
    lines = [
        f"Station: {report.station or 'N/A'}",
        f"Observed: {assessment.observation_time}",
        f"Wind: {_wind_line(report)} [{assessment.wind_severity}]",
        f"Visibility: {assessment.visibility_label} [{assessment.visibility_category}]",
        f"Clouds: {clouds or 'none reported'}",
        f"Weather: {', '.join(report.weather_conditions) or 'none reported'}",
        f"Temperature: {report.temperature_c}°C / DP {report.dewpoint_c}°C",
        f"QNH: {report.altimeter_hpa} hPa",
    ]
    components = assessment.wind_components
    if components is not None and report.wind.speed > 0:
        kind = "Headwind" if components.headwind >= 0 else "Tailwind"
        lines.append(
            f"Runway {assessment.runway_designator}: {kind} {abs(components.headwind)}kt, "
            f"crosswind {components.crosswind}kt {components.crosswind_side} [{assessment.crosswind_severity}]"
        )
    if assessment.lvp_advisory:
        lines.append("Visibility below LVP threshold - consider LVP activation")
    return "\n".join(lines)


def _reports_from_input(words: List[str], stream: Iterable[str]) -> List[str]:
    if words:
        return [" ".join(words)]
    return [line.strip() for line in stream if line.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Decode METAR reports and assess runway conditions.")
    parser.add_argument("report", nargs="*", help="Raw METAR text; reads one report per stdin line when omitted")
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to YAML settings (runway heading, thresholds); defaults to {DEFAULT_CONFIG_PATH} when present",
    )
    parser.add_argument("--runway-heading", type=int, default=None, help="Runway heading in degrees (e.g. 40 for RWY 04)")
    parser.add_argument("--json", action="store_true", help="Emit one JSON object per report")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    args = parser.parse_args(argv)

    configure_logging(args.log_level or os.getenv("METAR_LOG_LEVEL") or "INFO")

    # An explicit --config must exist; the shipped default is optional.
    config_path = args.config or _default_config_path()
    try:
        settings: Settings = load_settings(config_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("Failed to load configuration", config=config_path, error=str(exc))
        return 2

    if not args.log_level and not os.getenv("METAR_LOG_LEVEL"):
        configure_logging(settings.log_level)

    runway_heading = settings.runway_heading
    if args.runway_heading is not None:
        runway_heading = normalize_heading(args.runway_heading)

    reports = _reports_from_input(args.report, sys.stdin if not args.report else [])
    if not reports:
        logger.error("No METAR report provided")
        return 1

    outputs = []
    for raw in reports:
        report = decode_metar(raw)
        assessment = assess(report, runway_heading=runway_heading, thresholds=settings.thresholds)
        if args.json:
            outputs.append(json.dumps({"decoded": report.to_dict(), "assessment": assessment.to_dict()}))
        else:
            outputs.append(format_summary(report, assessment))

    sys.stdout.write(("\n" if args.json else "\n\n").join(outputs) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
