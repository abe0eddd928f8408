"""
Transport mode profiles.

A profile holds five weights (summing to 1) that decide how much each risk
dimension matters for a mode of travel, and five multipliers applied to the
raw risk before weighting to model mode-specific exposure. Both are domain
policy constants.
"""

import math
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from services.safety_scoring.types import TransportMode

FACTORS = ("crime", "location", "time", "weather", "battery")


@dataclass(frozen=True)
class FactorValues:
    crime: float
    location: float
    time: float
    weather: float
    battery: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class TransportModeProfile:
    weights: FactorValues
    multipliers: FactorValues

    def __post_init__(self):
        total = sum(self.weights.as_dict().values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Profile weights must sum to 1.0, got {total}")


BASE_WEIGHTS = FactorValues(crime=0.35, location=0.25, time=0.15, weather=0.15, battery=0.10)
NEUTRAL_MULTIPLIERS = FactorValues(crime=1.0, location=1.0, time=1.0, weather=1.0, battery=1.0)

DEFAULT_PROFILE = TransportModeProfile(weights=BASE_WEIGHTS, multipliers=NEUTRAL_MULTIPLIERS)

TRANSPORT_PROFILES: Mapping[TransportMode, TransportModeProfile] = MappingProxyType(
    {
        # Most exposed to crime and darkness; easiest to ask for help without a phone
        TransportMode.WALKING: TransportModeProfile(
            weights=FactorValues(crime=0.40, location=0.28, time=0.18, weather=0.10, battery=0.04),
            multipliers=FactorValues(crime=1.2, location=1.15, time=1.25, weather=0.8, battery=0.7),
        ),
        # Faster escape than walking but weather-critical
        TransportMode.BICYCLING: TransportModeProfile(
            weights=FactorValues(crime=0.32, location=0.23, time=0.15, weather=0.22, battery=0.08),
            multipliers=FactorValues(crime=1.1, location=1.05, time=1.15, weather=1.4, battery=0.9),
        ),
        # Monitored fixed routes; phone needed for schedules and tickets
        TransportMode.TRANSIT: TransportModeProfile(
            weights=FactorValues(crime=0.25, location=0.15, time=0.20, weather=0.12, battery=0.28),
            multipliers=FactorValues(crime=0.7, location=0.6, time=1.1, weather=0.6, battery=1.5),
        ),
        # Protected in the vehicle; navigation depends on the phone
        TransportMode.DRIVING: TransportModeProfile(
            weights=FactorValues(crime=0.20, location=0.18, time=0.10, weather=0.18, battery=0.34),
            multipliers=FactorValues(crime=0.5, location=0.7, time=0.7, weather=1.2, battery=2.0),
        ),
    }
)


def get_transport_profile(
    mode: Optional[Union[TransportMode, str]],
    profiles: Mapping[TransportMode, TransportModeProfile] = TRANSPORT_PROFILES,
) -> TransportModeProfile:
    """Profile for `mode`; the base profile for None or an unknown mode."""
    if mode is None:
        return DEFAULT_PROFILE
    try:
        mode = TransportMode(mode)
    except ValueError:
        return DEFAULT_PROFILE
    return profiles.get(mode, DEFAULT_PROFILE)
