"""
Shared test fixtures for safety scoring tests.

This module provides reusable fixtures for:
- Literal trip scenarios (safe daytime, risky night, severe weather)
- A scripted fake route predictor standing in for the model endpoint
- A scoring engine wired to a private metrics registry
"""

import asyncio
from typing import Dict, List, Optional, Union

import pytest

from libs.metrics import ScoringMetrics
from services.safety_scoring.engine import SafetyScoringEngine
from services.safety_scoring.schemas import RoutePrediction, SafetyScoreInput
from services.safety_scoring.types import OracleFailurePolicy, RiskLevel


class FakePredictor:
    """
    Route predictor returning scripted outcomes per call.

    Each outcome is either a safety score (float), an Exception instance to
    raise, or a RoutePrediction to return as-is. Outcomes are consumed in the
    order calls start; the last one repeats.
    """

    def __init__(self, outcomes: List[Union[float, Exception, RoutePrediction]], delay: float = 0.0):
        self.outcomes = list(outcomes)
        self.delay = delay
        self.calls: List[Dict] = []
        self.cancelled = 0

    async def predict_route_safety(
        self, start_lat, start_lon, end_lat, end_lon, time_of_day, transport_mode
    ) -> RoutePrediction:
        index = len(self.calls)
        self.calls.append(
            {
                "start": (start_lat, start_lon),
                "end": (end_lat, end_lon),
                "time_of_day": time_of_day,
                "transport_mode": transport_mode,
            }
        )
        outcome = self.outcomes[min(index, len(self.outcomes) - 1)]
        try:
            if isinstance(outcome, Exception):
                # Failures land immediately so slower segments are still in flight
                raise outcome
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        if isinstance(outcome, RoutePrediction):
            return outcome
        return RoutePrediction(
            safety_score=outcome,
            risk_level=RiskLevel.LOW if outcome >= 70 else RiskLevel.HIGH,
            factors=["scripted"],
            confidence=0.9,
        )


@pytest.fixture
def fake_predictor_factory():
    """Factory fixture to create FakePredictor instances."""

    def _create(outcomes, delay: float = 0.0) -> FakePredictor:
        return FakePredictor(outcomes, delay=delay)

    return _create


@pytest.fixture
def metrics():
    """ScoringMetrics bound to its own registry."""
    return ScoringMetrics()


@pytest.fixture
def engine_factory(metrics):
    """
    Factory fixture to create engines.

    Returns:
        Function taking an optional predictor and failure policy
    """

    def _create(
        predictor: Optional[FakePredictor] = None,
        failure_policy: OracleFailurePolicy = OracleFailurePolicy.FAIL_FAST,
        timeout: float = 10.0,
    ) -> SafetyScoringEngine:
        return SafetyScoringEngine(
            predictor=predictor,
            failure_policy=failure_policy,
            timeout=timeout,
            metrics=metrics,
        )

    return _create


@pytest.fixture
def safe_daytime_data() -> Dict:
    """Below-baseline crime, populated area, 2 PM, light weather, charged phone."""
    return {
        "crime": {"incidents_per_1000": 8, "baseline": 10, "scale": 15},
        "location": {
            "latitude": 30.6280,
            "longitude": -96.3344,
            "population_density": 800,
            "recent_incidents": 0,
            "safe_spaces_count": 10,
            "public_transport_stops": 5,
            "is_isolated": False,
        },
        "time": {"hour": 14, "sunrise_hour": 6, "sunset_hour": 19},
        "weather": {
            "severe_alert": False,
            "precipitation_probability": 10,
            "wind_speed": 5,
            "visibility_loss": 0,
        },
        "battery": {"battery_percent": 85, "is_charging": False},
        "transport_mode": "driving",
    }


@pytest.fixture
def risky_night_data() -> Dict:
    """High crime, isolated, 2 AM, rain and wind, 15% battery, walking."""
    return {
        "crime": {"incidents_per_1000": 35, "baseline": 10, "scale": 15},
        "location": {
            "latitude": 30.6280,
            "longitude": -96.3344,
            "population_density": 50,
            "recent_incidents": 5,
            "safe_spaces_count": 1,
            "public_transport_stops": 0,
            "is_isolated": True,
        },
        "time": {"hour": 2, "sunrise_hour": 6, "sunset_hour": 19},
        "weather": {
            "severe_alert": False,
            "precipitation_probability": 60,
            "wind_speed": 20,
            "visibility_loss": 0.4,
        },
        "battery": {"battery_percent": 15, "is_charging": False},
        "transport_mode": "walking",
    }


@pytest.fixture
def severe_weather_data(safe_daytime_data) -> Dict:
    """Favorable trip except for a severe weather alert."""
    data = dict(safe_daytime_data)
    data["weather"] = {"severe_alert": True, "precipitation_probability": 0, "wind_speed": 0}
    data["transport_mode"] = "walking"
    return data


@pytest.fixture
def safe_daytime_input(safe_daytime_data) -> SafetyScoreInput:
    return SafetyScoreInput.model_validate(safe_daytime_data)
