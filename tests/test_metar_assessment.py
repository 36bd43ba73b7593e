from __future__ import annotations

import pytest

from src.weather.assessment import (
    AssessmentThresholds,
    WindComponents,
    assess,
    compass_point,
    crosswind_severity,
    format_observation_time,
    lvp_advisory,
    runway_designator,
    visibility_category,
    wind_components,
    wind_severity,
)
from src.weather.metar import decode_metar

THRESHOLDS = AssessmentThresholds()


@pytest.mark.unit
def test_wind_components_straight_down_the_runway() -> None:
    assert wind_components(40, 10, 40) == WindComponents(headwind=10, crosswind=0, crosswind_side="L")


def test_wind_components_pure_crosswind_from_the_right() -> None:
    assert wind_components(130, 20, 40) == WindComponents(headwind=0, crosswind=20, crosswind_side="R")


def test_wind_components_pure_crosswind_from_the_left() -> None:
    assert wind_components(310, 20, 40) == WindComponents(headwind=0, crosswind=20, crosswind_side="L")


def test_wind_components_tailwind_is_negative() -> None:
    components = wind_components(250, 12, 40)
    assert components == WindComponents(headwind=-10, crosswind=6, crosswind_side="L")


@pytest.mark.unit
def test_wind_components_none_for_variable_direction() -> None:
    assert wind_components(-1, 5, 40) is None


@pytest.mark.parametrize(
    "degrees,point",
    [(0, "N"), (90, "E"), (180, "S"), (250, "WSW"), (350, "N"), (360, "N"), (-1, "VRB")],
)
def test_compass_point(degrees: int, point: str) -> None:
    assert compass_point(degrees) == point


@pytest.mark.parametrize(
    "visibility,category,label",
    [
        ("CAVOK", "cavok", "CAVOK"),
        ("0500", "critical", "500m"),
        ("1200", "low", "1200m"),
        ("3000", "reduced", "3000m"),
        ("9999", "good", "9999m"),
        ("3SM", "good", "3SM"),
    ],
)
def test_visibility_category(visibility: str, category: str, label: str) -> None:
    report = decode_metar(f"EGNR 091150Z 25010KT {visibility}")
    assert visibility_category(report, THRESHOLDS) == (category, label)


def test_visibility_category_without_visibility() -> None:
    assert visibility_category(decode_metar("EGNR 091150Z"), THRESHOLDS) == ("good", "N/A")


@pytest.mark.parametrize(
    "wind,severity",
    [("25010KT", "normal"), ("25020KT", "elevated"), ("25015G30KT", "high"), ("VRB35KT", "high")],
)
def test_wind_severity_uses_gust_when_present(wind: str, severity: str) -> None:
    assert wind_severity(decode_metar(f"EGNR 091150Z {wind}"), THRESHOLDS) == severity


@pytest.mark.parametrize(
    "crosswind,severity",
    [(5, "normal"), (15, "caution"), (20, "limit"), (25, "limit")],
)
def test_crosswind_severity(crosswind: int, severity: str) -> None:
    components = WindComponents(headwind=0, crosswind=crosswind, crosswind_side="R")
    assert crosswind_severity(components, THRESHOLDS) == severity


def test_crosswind_severity_unknown_without_components() -> None:
    assert crosswind_severity(None, THRESHOLDS) == "unknown"


@pytest.mark.parametrize(
    "visibility,expected",
    [("1499", True), ("1500", False), ("0200", True), ("CAVOK", False), ("1/4SM", False)],
)
def test_lvp_advisory(visibility: str, expected: bool) -> None:
    report = decode_metar(f"EGNR 091150Z 25010KT {visibility}")
    assert lvp_advisory(report, THRESHOLDS) is expected


def test_lvp_threshold_is_configurable() -> None:
    report = decode_metar("EGNR 091150Z 25010KT 1800")
    assert lvp_advisory(report, AssessmentThresholds(visibility_lvp_m=2000)) is True


@pytest.mark.unit
def test_format_observation_time() -> None:
    assert format_observation_time("091150Z") == "09/11:50Z"
    assert format_observation_time("") == "Unknown"


@pytest.mark.parametrize("heading,designator", [(40, "04"), (220, "22"), (360, "36"), (0, "36"), (95, "10")])
def test_runway_designator(heading: int, designator: str) -> None:
    assert runway_designator(heading) == designator


def test_assess_bundles_everything() -> None:
    report = decode_metar("METAR EGNR 091150Z AUTO 25012G20KT 1200 FEW025 BKN040 18/12 Q1015")
    result = assess(report, runway_heading=40)
    assert result.runway_designator == "04"
    assert result.wind_components == WindComponents(headwind=-10, crosswind=6, crosswind_side="L")
    assert result.wind_compass == "WSW"
    assert result.wind_severity == "elevated"
    assert result.crosswind_severity == "normal"
    assert result.visibility_category == "low"
    assert result.visibility_label == "1200m"
    assert result.lvp_advisory is True
    assert result.observation_time == "09/11:50Z"
    assert result.to_dict()["wind_components"] == {"headwind": -10, "crosswind": 6, "crosswind_side": "L"}


def test_assess_variable_wind_has_no_components() -> None:
    result = assess(decode_metar("EGLL 010000Z VRB02KT CAVOK 15/09 Q1020"), runway_heading=270)
    assert result.wind_components is None
    assert result.wind_compass == "VRB"
    assert result.crosswind_severity == "unknown"
    assert result.visibility_category == "cavok"
    assert result.lvp_advisory is False
