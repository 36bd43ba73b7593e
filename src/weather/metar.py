from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Wind:
    direction: int = 0  # degrees; -1 when VRB
    speed: int = 0
    gust: int = 0  # 0 when no gust group
    unit: str = "KT"  # KT/MPS
    is_variable_direction: bool = False
    variable_from: Optional[int] = None
    variable_to: Optional[int] = None


@dataclass(frozen=True)
class Visibility:
    cavok: bool = False
    meters: Optional[int] = None
    statute_miles: Optional[str] = None  # raw token, e.g. "3SM" or "1/2SM"

    @property
    def is_set(self) -> bool:
        return self.cavok or self.meters is not None or self.statute_miles is not None

    @property
    def text(self) -> str:
        if self.cavok:
            return "CAVOK"
        if self.meters is not None:
            return f"{self.meters}m"
        return self.statute_miles or ""


@dataclass(frozen=True)
class CloudLayer:
    cover: str  # Few/Scattered/Broken/Overcast/Vertical Visibility/Clear
    base_feet: Optional[int] = None
    cloud_type: Optional[str] = None  # CB/TCU


@dataclass(frozen=True)
class DecodedReport:
    raw: str
    station: str = ""
    observation_time: str = ""
    is_auto: bool = False
    is_corrected: bool = False
    wind: Wind = field(default_factory=Wind)
    visibility: Visibility = field(default_factory=Visibility)
    cloud_layers: Tuple[CloudLayer, ...] = ()
    weather_conditions: Tuple[str, ...] = ()
    weather_tokens: Tuple[str, ...] = ()  # raw tokens behind weather_conditions
    temperature_c: int = 0
    dewpoint_c: int = 0
    altimeter_hpa: int = 0
    skipped_tokens: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["visibility"]["text"] = self.visibility.text
        data["cloud_layers"] = [asdict(c) for c in self.cloud_layers]
        data["weather_conditions"] = list(self.weather_conditions)
        data["weather_tokens"] = list(self.weather_tokens)
        data["skipped_tokens"] = list(self.skipped_tokens)
        return data


# re.ASCII keeps \d to 0-9; fullwidth or other Unicode digits are skipped.
_RE_WIND = re.compile(r"^(?P<dir>\d{3}|VRB)(?P<spd>\d{2,3})(G(?P<gst>\d{2,3}))?(?P<unit>KT|MPS)$", re.ASCII)
_RE_VAR_WIND = re.compile(r"^(?P<from>\d{3})V(?P<to>\d{3})$", re.ASCII)
_RE_VIS_M = re.compile(r"^\d{4}$", re.ASCII)
_RE_VIS_SM = re.compile(r"^\d+SM$|^\d+/\d+SM$", re.ASCII)
_RE_CLOUD = re.compile(r"^(?P<cover>FEW|SCT|BKN|OVC|VV)(?P<hgt>\d{3})(?P<type>CB|TCU)?$", re.ASCII)
_RE_TEMP_DEW = re.compile(r"^(?P<t>M?\d{2})/(?P<d>M?\d{2})$", re.ASCII)
_RE_QNH = re.compile(r"^Q(?P<qnh>\d{4})$", re.ASCII)
_RE_ALTIMETER = re.compile(r"^A(?P<inhg>\d{4})$", re.ASCII)
_RE_WEATHER = re.compile(
    r"^([+-]|VC)?(MI|BC|PR|DR|BL|SH|TS|FZ)?"
    r"(RA|SN|DZ|FG|BR|HZ|GR|GS|PE|IC|SG|UP|FU|VA|DU|SA|PO|SQ|FC|SS|DS)+$"
)
_RE_WEATHER_PREFIX = re.compile(r"^(?:[+-]|VC)")

_CLEAR_TOKENS = frozenset({"NSC", "NCD", "SKC", "CLR"})

# hPa per hundredth of an inch of mercury
_INHG_HUNDREDTHS_TO_HPA = 0.338639

_COVER_NAMES = {
    "FEW": "Few",
    "SCT": "Scattered",
    "BKN": "Broken",
    "OVC": "Overcast",
    "VV": "Vertical Visibility",
}

_INTENSITY_PREFIX = {
    "-": "Light ",
    "+": "Heavy ",
    "VC": "Vicinity ",
}

_WEATHER_NAMES = {
    "RA": "Rain",
    "SN": "Snow",
    "DZ": "Drizzle",
    "FG": "Fog",
    "BR": "Mist",
    "HZ": "Haze",
    "TS": "Thunderstorm",
    "SH": "Showers",
    "FZ": "Freezing",
    "GR": "Hail",
    "GS": "Small Hail",
    "PE": "Ice Pellets",
    "IC": "Ice Crystals",
    "SG": "Snow Grains",
    "UP": "Unknown Precipitation",
    "FU": "Smoke",
    "VA": "Volcanic Ash",
    "DU": "Dust",
    "SA": "Sand",
    "PO": "Dust Devils",
    "SQ": "Squalls",
    "FC": "Funnel Cloud",
    "SS": "Sandstorm",
    "DS": "Duststorm",
}


def tokenize(raw: str) -> Tuple[str, ...]:
    return tuple((raw or "").split())


def decode_metar(raw: str) -> DecodedReport:
    """Decode a raw METAR/SPECI string into a DecodedReport.

    Best effort: groups that do not match are skipped and their fields keep
    the default value. Never raises on report content.
    """
    raw = raw or ""
    tokens = tokenize(raw)
    report, idx = _decode_header(DecodedReport(raw=raw), tokens)
    report = _scan_body(report, tokens[idx:])

    logger.debug(
        "Decoded METAR",
        station=report.station,
        clouds=len(report.cloud_layers),
        weather=len(report.weather_conditions),
        skipped=list(report.skipped_tokens),
    )
    return report


def _decode_header(report: DecodedReport, tokens: Tuple[str, ...]) -> Tuple[DecodedReport, int]:
    idx = 0

    def peek() -> str:
        return tokens[idx] if idx < len(tokens) else ""

    if peek() in ("METAR", "SPECI"):
        idx += 1

    # Station is taken unconditionally, even when it is not a valid ICAO code.
    report = replace(report, station=peek())
    idx += 1

    if peek().endswith("Z"):
        report = replace(report, observation_time=peek())
        idx += 1

    if peek() in ("AUTO", "COR"):
        is_auto = peek() == "AUTO"
        report = replace(report, is_auto=is_auto, is_corrected=not is_auto)
        idx += 1

    m = _RE_WIND.match(peek())
    if m:
        variable = m.group("dir") == "VRB"
        wind = Wind(
            direction=-1 if variable else int(m.group("dir")),
            speed=int(m.group("spd")),
            gust=int(m.group("gst")) if m.group("gst") else 0,
            unit=m.group("unit"),
            is_variable_direction=variable,
        )
        report = replace(report, wind=wind)
        idx += 1

    m = _RE_VAR_WIND.match(peek())
    if m:
        wind = replace(report.wind, variable_from=int(m.group("from")), variable_to=int(m.group("to")))
        report = replace(report, wind=wind)
        idx += 1

    token = peek()
    if token == "CAVOK":
        report = replace(report, visibility=Visibility(cavok=True))
        idx += 1
    elif _RE_VIS_M.match(token):
        report = replace(report, visibility=Visibility(meters=int(token)))
        idx += 1
    elif _RE_VIS_SM.match(token):
        report = replace(report, visibility=Visibility(statute_miles=token))
        idx += 1

    return report, min(idx, len(tokens))


def _on_cloud(report: DecodedReport, m: "re.Match[str]") -> DecodedReport:
    layer = CloudLayer(
        cover=_COVER_NAMES[m.group("cover")],
        base_feet=int(m.group("hgt")) * 100,
        cloud_type=m.group("type"),
    )
    return replace(report, cloud_layers=report.cloud_layers + (layer,))


def _on_clear(report: DecodedReport, m: "re.Match[str]") -> DecodedReport:
    return replace(report, cloud_layers=report.cloud_layers + (CloudLayer(cover="Clear"),))


def _on_temperature(report: DecodedReport, m: "re.Match[str]") -> DecodedReport:
    return replace(
        report,
        temperature_c=int(m.group("t").replace("M", "-")),
        dewpoint_c=int(m.group("d").replace("M", "-")),
    )


# Q and A groups both write altimeter_hpa, so the later group in the report
# wins. Real reports carry one or the other; concatenated feeds may carry both.
def _on_qnh(report: DecodedReport, m: "re.Match[str]") -> DecodedReport:
    return replace(report, altimeter_hpa=int(m.group("qnh")))


def _on_altimeter(report: DecodedReport, m: "re.Match[str]") -> DecodedReport:
    return replace(report, altimeter_hpa=inhg_hundredths_to_hpa(int(m.group("inhg"))))


def _on_weather(report: DecodedReport, m: "re.Match[str]") -> DecodedReport:
    return replace(
        report,
        weather_conditions=report.weather_conditions + (describe_weather(m.group(0)),),
        weather_tokens=report.weather_tokens + (m.group(0),),
    )


def _match_clear(token: str) -> Optional[str]:
    return token if token in _CLEAR_TOKENS else None


_Matcher = Callable[[str], Any]
_Handler = Callable[[DecodedReport, Any], DecodedReport]

# Evaluated top to bottom per token; first match wins.
_BODY_RECOGNIZERS: Tuple[Tuple[_Matcher, _Handler], ...] = (
    (_RE_CLOUD.match, _on_cloud),
    (_match_clear, _on_clear),
    (_RE_TEMP_DEW.match, _on_temperature),
    (_RE_QNH.match, _on_qnh),
    (_RE_ALTIMETER.match, _on_altimeter),
    (_RE_WEATHER.match, _on_weather),
)


def _scan_body(report: DecodedReport, tokens: Tuple[str, ...]) -> DecodedReport:
    skipped = []
    for token in tokens:
        for matcher, handler in _BODY_RECOGNIZERS:
            m = matcher(token)
            if m:
                report = handler(report, m)
                break
        else:
            skipped.append(token)
    return replace(report, skipped_tokens=tuple(skipped))


def describe_weather(token: str) -> str:
    """Phrase for a present-weather group, e.g. "+TSRA" -> "Heavy Thunderstorm Rain".

    Codes outside the phenomenon table (MI, BC, PR, DR, BL) are dropped, so
    "BLSN" reads as "Snow".
    """
    prefix = ""
    m = _RE_WEATHER_PREFIX.match(token)
    if m:
        prefix = _INTENSITY_PREFIX[m.group(0)]
    body = _RE_WEATHER_PREFIX.sub("", token, count=1)
    names = []
    for j in range(0, len(body), 2):
        name = _WEATHER_NAMES.get(body[j:j + 2])
        if name:
            names.append(name)
    return (prefix + " ".join(names)).strip()


def inhg_hundredths_to_hpa(value: int) -> int:
    # Half-up rounding; A2992 -> 1013.
    return int(math.floor(value * _INHG_HUNDREDTHS_TO_HPA + 0.5))
