"""Airfield weather utilities (deterministic METAR decoding + runway assessment)."""

from .assessment import Assessment, AssessmentThresholds, WindComponents, assess
from .metar import CloudLayer, DecodedReport, Visibility, Wind, decode_metar

__all__ = [
    "Assessment",
    "AssessmentThresholds",
    "CloudLayer",
    "DecodedReport",
    "Visibility",
    "Wind",
    "WindComponents",
    "assess",
    "decode_metar",
]
