"""
Safety level labels and advisory messages.

A literal threshold ladder: every factor has two or three severity tiers,
checked from most to least severe, and at most one tier per factor fires.
"""

from typing import List

from common.constants import (
    EXCELLENT_MIN_SCORE,
    GOOD_MIN_SCORE,
    MODERATE_MIN_SCORE,
    POOR_MIN_SCORE,
)
from services.safety_scoring.schemas import SafetyScoreResult
from services.safety_scoring.types import SafetyLevel

RECONSIDER_TRIP = "DANGEROUS CONDITIONS - reconsider this trip; strongly consider delaying or canceling it"

EXCELLENT_CONDITIONS = "Excellent conditions - safe to proceed"
GOOD_CONDITIONS = "Good conditions - generally safe with standard precautions"
NORMAL_PRECAUTIONS = "Exercise normal safety precautions"

# (threshold, message) pairs, most severe first; a tier fires when risk > threshold
CRIME_TIERS = [
    (0.7, "Very high crime area - avoid this route or travel during daylight with others"),
    (0.5, "High crime area - consider alternative route or travel in groups"),
    (0.3, "Stay alert - moderate crime risk in this area"),
]
LOCATION_TIERS = [
    (0.7, "Very isolated or risky area - choose well-populated, well-lit routes"),
    (0.5, "Isolated area detected - stay in well-lit, populated spaces when possible"),
]
TIME_TIERS = [
    (0.7, "Very late hours - travel during daylight if possible"),
    (0.4, "Late hours - be extra cautious and stay in well-lit areas"),
    (0.0, "Evening/night travel - use well-lit routes"),
]
WEATHER_TIERS = [
    (0.8, "SEVERE WEATHER ALERT - delay trip until conditions improve"),
    (0.5, "Poor weather conditions - take extra precautions"),
    (0.3, "Weather may affect visibility - travel carefully"),
]
BATTERY_TIERS = [
    (0.7, "CRITICAL: Very low battery - charge device immediately before traveling"),
    (0.4, "Low battery - charge device before departure"),
    (0.2, "Consider charging device for longer trips"),
]

DESCRIPTIONS = {
    SafetyLevel.EXCELLENT: "Excellent safety conditions - daytime, good weather, populated area, charged device",
    SafetyLevel.GOOD: "Good safety with minor risk factors - generally safe to proceed",
    SafetyLevel.MODERATE: "Moderate safety with some significant risks - exercise caution",
    SafetyLevel.POOR: "Poor safety with multiple risk factors - consider alternative route or time",
    SafetyLevel.DANGEROUS: (
        "Dangerous conditions - severe weather, night, isolated area, or high crime. Avoid if possible"
    ),
}


def level_of(score: float) -> SafetyLevel:
    if score >= EXCELLENT_MIN_SCORE:
        return SafetyLevel.EXCELLENT
    if score >= GOOD_MIN_SCORE:
        return SafetyLevel.GOOD
    if score >= MODERATE_MIN_SCORE:
        return SafetyLevel.MODERATE
    if score >= POOR_MIN_SCORE:
        return SafetyLevel.POOR
    return SafetyLevel.DANGEROUS


def description_for(score: float) -> str:
    """Longer human-readable text for the score's safety level."""
    return DESCRIPTIONS[level_of(score)]


def _first_tier(risk: float, tiers) -> str:
    for threshold, message in tiers:
        if risk > threshold:
            return message
    return ""


def recommendations_for(result: SafetyScoreResult) -> List[str]:
    """Ordered advisory strings for a computed score."""
    score = result.total_score
    b = result.breakdown

    advisories = [
        _first_tier(b.crime_risk, CRIME_TIERS),
        _first_tier(b.location_risk, LOCATION_TIERS),
        _first_tier(b.time_risk, TIME_TIERS),
        _first_tier(b.weather_risk, WEATHER_TIERS),
        _first_tier(b.battery_risk, BATTERY_TIERS),
    ]
    recommendations = [a for a in advisories if a]

    if score < POOR_MIN_SCORE:
        recommendations.insert(0, RECONSIDER_TRIP)

    if not recommendations:
        if score >= EXCELLENT_MIN_SCORE:
            recommendations.append(EXCELLENT_CONDITIONS)
        elif score >= GOOD_MIN_SCORE:
            recommendations.append(GOOD_CONDITIONS)
        elif score >= MODERATE_MIN_SCORE:
            recommendations.append(NORMAL_PRECAUTIONS)

    return recommendations
