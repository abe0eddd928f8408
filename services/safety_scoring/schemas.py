import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from common.constants import (
    DEFAULT_CRIME_BASELINE,
    DEFAULT_CRIME_SCALE,
    DEFAULT_SUNRISE_HOUR,
    DEFAULT_SUNSET_HOUR,
)
from services.safety_scoring.types import RiskLevel, TransportMode

logger = logging.getLogger(__name__)


class Snapshot(BaseModel):
    """Read-only request snapshot."""

    model_config = ConfigDict(frozen=True)


class CrimeData(Snapshot):
    incidents_per_1000: float
    baseline: Optional[float] = DEFAULT_CRIME_BASELINE
    scale: Optional[float] = DEFAULT_CRIME_SCALE


class LocationData(Snapshot):
    latitude: float
    longitude: float
    population_density: Optional[float] = None
    recent_incidents: Optional[float] = None
    safe_spaces_count: Optional[float] = None
    public_transport_stops: Optional[float] = None
    is_isolated: Optional[bool] = None


class TimeData(Snapshot):
    hour: int
    sunrise_hour: Optional[int] = DEFAULT_SUNRISE_HOUR
    sunset_hour: Optional[int] = DEFAULT_SUNSET_HOUR


class WeatherData(Snapshot):
    severe_alert: bool = False
    precipitation_probability: Optional[float] = None
    wind_speed: Optional[float] = None
    visibility_loss: Optional[float] = None


class BatteryData(Snapshot):
    battery_percent: float
    is_charging: bool = False


class SafetyScoreInput(Snapshot):
    crime: CrimeData
    location: LocationData
    time: TimeData
    weather: WeatherData
    battery: BatteryData
    route_waypoints: Optional[List[LocationData]] = None
    # Missing means walking; None only for an unrecognized mode (base profile)
    transport_mode: Optional[TransportMode] = TransportMode.WALKING

    @field_validator("transport_mode", mode="before")
    @classmethod
    def _unknown_mode_to_default(cls, value):
        if value is None:
            return TransportMode.WALKING
        if isinstance(value, TransportMode):
            return value
        try:
            return TransportMode(str(value).strip().lower())
        except ValueError:
            logger.warning(
                "Unknown transport_mode '%s', using base weights.", value
            )
            return None


class RiskBreakdown(Snapshot):
    """Per-factor risks after multiplier and clamp."""

    crime_risk: float
    location_risk: float
    time_risk: float
    weather_risk: float
    battery_risk: float


class SafetyScoreResult(Snapshot):
    total_score: int = Field(ge=0, le=100)
    risk: float
    breakdown: RiskBreakdown
    weights: Dict[str, float]


class RoutePrediction(Snapshot):
    """Validated predictive oracle response for one segment."""

    safety_score: float
    risk_level: RiskLevel
    factors: List[str] = []
    confidence: float
