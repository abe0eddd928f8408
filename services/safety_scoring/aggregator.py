from dataclasses import dataclass
from typing import Mapping, Optional

from services.safety_scoring.risk_factors import clamp
from services.safety_scoring.schemas import RiskBreakdown, SafetyScoreResult
from services.safety_scoring.transport_profiles import (
    TRANSPORT_PROFILES,
    TransportModeProfile,
    get_transport_profile,
)
from services.safety_scoring.types import TransportMode


@dataclass(frozen=True)
class RawRisks:
    """Per-factor risks before the mode multiplier."""

    crime: float
    location: float
    time: float
    weather: float
    battery: float
    severe_weather: bool = False


class SafetyScoreAggregator:
    """Weighted combination of the five factor risks into a 0-100 score."""

    def __init__(self, profiles: Mapping[TransportMode, TransportModeProfile] = TRANSPORT_PROFILES):
        self.profiles = profiles

    def profile_for(self, mode: Optional[TransportMode]) -> TransportModeProfile:
        return get_transport_profile(mode, self.profiles)

    def aggregate(self, raw: RawRisks, mode: Optional[TransportMode]) -> SafetyScoreResult:
        """
        adjusted = clamp(raw * multiplier); risk = Σ weight * adjusted;
        score = round(100 * (1 - risk)).

        A severe weather alert pins the weather component at 1.0 whatever
        the mode's weather multiplier.
        """
        profile = self.profile_for(mode)
        m = profile.multipliers

        breakdown = RiskBreakdown(
            crime_risk=clamp(raw.crime * m.crime),
            location_risk=clamp(raw.location * m.location),
            time_risk=clamp(raw.time * m.time),
            weather_risk=1.0 if raw.severe_weather else clamp(raw.weather * m.weather),
            battery_risk=clamp(raw.battery * m.battery),
        )

        w = profile.weights
        total_risk = clamp(
            w.crime * breakdown.crime_risk
            + w.location * breakdown.location_risk
            + w.time * breakdown.time_risk
            + w.weather * breakdown.weather_risk
            + w.battery * breakdown.battery_risk
        )

        return SafetyScoreResult(
            total_score=round(100 * (1 - total_risk)),
            risk=total_risk,
            breakdown=breakdown,
            weights=w.as_dict(),
        )
