"""Operational assessment derived from a decoded METAR.

Runway wind components, visibility and wind bands, and the low-visibility
procedures (LVP) advisory shown next to a report. All functions are pure and
take their thresholds from AssessmentThresholds.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from .metar import DecodedReport

_COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


@dataclass(frozen=True)
class AssessmentThresholds:
    visibility_critical_m: int = 550
    visibility_lvp_m: int = 1500
    visibility_reduced_m: int = 5000
    wind_elevated_kt: int = 20
    wind_high_kt: int = 30
    crosswind_caution_kt: int = 15
    crosswind_limit_kt: int = 20


@dataclass(frozen=True)
class WindComponents:
    headwind: int  # negative = tailwind
    crosswind: int
    crosswind_side: str  # R/L


@dataclass(frozen=True)
class Assessment:
    runway_heading: int
    runway_designator: str
    wind_components: Optional[WindComponents]
    wind_compass: str
    wind_severity: str
    crosswind_severity: str
    visibility_category: str
    visibility_label: str
    lvp_advisory: bool
    observation_time: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def wind_components(direction: int, speed: int, runway_heading: int) -> Optional[WindComponents]:
    if direction < 0:
        return None
    angle = math.radians((direction - runway_heading + 360) % 360)
    return WindComponents(
        headwind=_round_half_up(speed * math.cos(angle)),
        crosswind=_round_half_up(abs(speed * math.sin(angle))),
        crosswind_side="R" if math.sin(angle) > 0 else "L",
    )


def compass_point(degrees: int) -> str:
    if degrees < 0:
        return "VRB"
    return _COMPASS_POINTS[_round_half_up(degrees / 22.5) % 16]


def visibility_category(report: DecodedReport, thresholds: AssessmentThresholds) -> Tuple[str, str]:
    vis = report.visibility
    if vis.cavok:
        return "cavok", "CAVOK"
    if vis.meters is not None:
        label = f"{vis.meters}m"
        if vis.meters < thresholds.visibility_critical_m:
            return "critical", label
        if vis.meters < thresholds.visibility_lvp_m:
            return "low", label
        if vis.meters < thresholds.visibility_reduced_m:
            return "reduced", label
        return "good", label
    return "good", vis.text or "N/A"


def wind_severity(report: DecodedReport, thresholds: AssessmentThresholds) -> str:
    speed = report.wind.gust or report.wind.speed
    if speed >= thresholds.wind_high_kt:
        return "high"
    if speed >= thresholds.wind_elevated_kt:
        return "elevated"
    return "normal"


def crosswind_severity(components: Optional[WindComponents], thresholds: AssessmentThresholds) -> str:
    if components is None:
        return "unknown"
    if components.crosswind >= thresholds.crosswind_limit_kt:
        return "limit"
    if components.crosswind >= thresholds.crosswind_caution_kt:
        return "caution"
    return "normal"


def lvp_advisory(report: DecodedReport, thresholds: AssessmentThresholds) -> bool:
    meters = report.visibility.meters
    return meters is not None and meters < thresholds.visibility_lvp_m


def format_observation_time(time: str) -> str:
    """DDHHMMZ -> "DD/HH:MMZ"."""
    if not time:
        return "Unknown"
    return f"{time[0:2]}/{time[2:4]}:{time[4:6]}Z"


def runway_designator(heading: int) -> str:
    number = _round_half_up(heading / 10) % 36 or 36
    return f"{number:02d}"


def assess(
    report: DecodedReport,
    *,
    runway_heading: int,
    thresholds: Optional[AssessmentThresholds] = None,
) -> Assessment:
    thresholds = thresholds or AssessmentThresholds()
    components = wind_components(report.wind.direction, report.wind.speed, runway_heading)
    category, label = visibility_category(report, thresholds)
    return Assessment(
        runway_heading=runway_heading,
        runway_designator=runway_designator(runway_heading),
        wind_components=components,
        wind_compass=compass_point(report.wind.direction),
        wind_severity=wind_severity(report, thresholds),
        crosswind_severity=crosswind_severity(components, thresholds),
        visibility_category=category,
        visibility_label=label,
        lvp_advisory=lvp_advisory(report, thresholds),
        observation_time=format_observation_time(report.observation_time),
    )
