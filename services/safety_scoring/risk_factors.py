"""
Risk factor calculators.

Each calculator turns one raw input snapshot into a normalized risk value in
[0, 1] (0 = no contribution to danger, 1 = maximal). All of them are total:
unusual but well-typed numbers are clamped rather than rejected.
"""

import math

from common.constants import (
    DEFAULT_CRIME_BASELINE,
    DEFAULT_CRIME_SCALE,
    DEFAULT_SUNRISE_HOUR,
    DEFAULT_SUNSET_HOUR,
    LOCATION_BASELINE_RISK,
    LOW_BATTERY_THRESHOLD,
)
from services.safety_scoring.schemas import (
    BatteryData,
    CrimeData,
    LocationData,
    TimeData,
    WeatherData,
)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def logistic(x: float) -> float:
    """1 / (1 + e^-x), arranged so large |x| never overflows."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def crime_risk(crime: CrimeData) -> float:
    """
    Rc = logistic((incidents_per_1000 - baseline) / scale)

    Crime counts are unbounded and noisy, so the logistic gives a smooth
    saturation instead of a hard cutoff.
    """
    baseline = crime.baseline if crime.baseline is not None else DEFAULT_CRIME_BASELINE
    scale = crime.scale or DEFAULT_CRIME_SCALE
    return clamp(logistic((crime.incidents_per_1000 - baseline) / scale))


def location_risk(location: LocationData) -> float:
    """
    Rule-based risk for a single point.

    Starts at a 0.3 baseline; recent incidents, sparse population and
    isolation push it up, safe spaces and transit stops pull it down.
    """
    risk = LOCATION_BASELINE_RISK

    if location.recent_incidents is not None:
        risk += min(0.3, location.recent_incidents * 0.05)

    if location.population_density is not None:
        if location.population_density < 100:
            risk += 0.2
        elif location.population_density > 1000:
            risk -= 0.1

    if location.safe_spaces_count is not None:
        risk -= min(0.2, location.safe_spaces_count * 0.03)

    if location.public_transport_stops is not None:
        risk -= min(0.15, location.public_transport_stops * 0.05)

    if location.is_isolated:
        risk += 0.25

    return clamp(risk)


def hour_penalty(hour: int) -> float:
    if 0 <= hour < 4:
        return 1.0
    if 22 <= hour < 24 or 4 <= hour < 6:
        return 0.5
    return 0.2


def time_risk(time: TimeData) -> float:
    """Zero during daylight, otherwise 0.2 + 0.8 * hour_penalty."""
    sunrise = time.sunrise_hour if time.sunrise_hour is not None else DEFAULT_SUNRISE_HOUR
    sunset = time.sunset_hour if time.sunset_hour is not None else DEFAULT_SUNSET_HOUR

    if sunrise <= time.hour < sunset:
        return 0.0

    return clamp(0.2 + 0.8 * hour_penalty(time.hour))


def weather_risk(weather: WeatherData) -> float:
    if weather.severe_alert:
        return 1.0

    precipitation = (weather.precipitation_probability or 0) / 100
    wind = weather.wind_speed or 0
    visibility_loss = weather.visibility_loss or 0

    return clamp(0.2 * precipitation + 0.1 * (wind / 25) + 0.05 * visibility_loss)


def battery_risk(battery: BatteryData) -> float:
    """Risk ramps linearly from 0 at 20% charge to 1 at 0%; none while charging."""
    if battery.is_charging:
        return 0.0
    return clamp((LOW_BATTERY_THRESHOLD - battery.battery_percent) / LOW_BATTERY_THRESHOLD)
