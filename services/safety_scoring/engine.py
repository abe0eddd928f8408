"""
Safety Scoring Engine - public entry point.

compute_safety_score() validates the input, resolves the location risk (route
analysis when waypoints are given), combines the five factor risks with the
transport mode profile and returns a SafetyScoreResult. level_of() and
recommendations_for() are pure derivations of that result.

The engine holds no mutable state between calls; concurrent invocations are
independent.
"""

import logging
import time
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from libs.config import config
from libs.metrics import ScoringMetrics
from services.safety_scoring.prediction_client import get_prediction_client
from services.safety_scoring.aggregator import RawRisks, SafetyScoreAggregator
from services.safety_scoring.errors import InputValidationError, OracleFailureError
from services.safety_scoring.recommendations import (  # noqa: F401 - re-exported API
    description_for,
    level_of,
    recommendations_for,
)
from services.safety_scoring.risk_factors import (
    battery_risk,
    crime_risk,
    time_risk,
    weather_risk,
)
from services.safety_scoring.route_analyzer import RouteSegmentAnalyzer, SegmentPredictor
from services.safety_scoring.schemas import SafetyScoreInput, SafetyScoreResult
from services.safety_scoring.types import OracleFailurePolicy

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ("crime", "location", "time", "weather", "battery")


def validate_input(data: Union[SafetyScoreInput, Mapping[str, Any]]) -> SafetyScoreInput:
    """
    Coerce caller input into a SafetyScoreInput.

    Raises:
        InputValidationError: required sub-structure missing or malformed
    """
    if isinstance(data, SafetyScoreInput):
        score_input = data
    elif isinstance(data, Mapping):
        try:
            score_input = SafetyScoreInput.model_validate(data)
        except ValidationError as e:
            raise InputValidationError(
                f"Invalid safety score input: {e.error_count()} error(s)", errors=e.errors()
            ) from e
    else:
        raise InputValidationError(
            f"Safety score input must be a SafetyScoreInput or mapping, got {type(data).__name__}"
        )

    missing = [name for name in REQUIRED_SECTIONS if getattr(score_input, name, None) is None]
    if missing:
        raise InputValidationError(f"Missing required input sections: {', '.join(missing)}")
    return score_input


class SafetyScoringEngine:
    """Computes trip safety scores."""

    def __init__(
        self,
        predictor: Optional[SegmentPredictor] = None,
        failure_policy: OracleFailurePolicy = OracleFailurePolicy.FAIL_FAST,
        timeout: Optional[float] = None,
        aggregator: Optional[SafetyScoreAggregator] = None,
        metrics: Optional[ScoringMetrics] = None,
    ):
        """
        Args:
            predictor: Route segment oracle; required only for routes with waypoints
            failure_policy: FAIL_FAST (default) or RULE_BASED_FALLBACK
            timeout: Per oracle call timeout in seconds
            aggregator: Weighted aggregation with its profile table
            metrics: Prometheus metrics sink
        """
        self.metrics = metrics or ScoringMetrics()
        self.aggregator = aggregator or SafetyScoreAggregator()
        self.route_analyzer = RouteSegmentAnalyzer(
            predictor=predictor,
            failure_policy=failure_policy,
            timeout=timeout if timeout is not None else config.PREDICTION_TIMEOUT_SECONDS,
            metrics=self.metrics,
        )

    async def compute_safety_score(
        self, data: Union[SafetyScoreInput, Mapping[str, Any]]
    ) -> SafetyScoreResult:
        """
        Compute the safety score for one trip.

        Raises:
            InputValidationError: before any computation or oracle call
            OracleFailureError: a route segment prediction failed under FAIL_FAST
        """
        start = time.time()
        try:
            score_input = validate_input(data)
        except InputValidationError:
            self.metrics.record_computation("unknown", "invalid_input", time.time() - start)
            raise

        mode = score_input.transport_mode
        mode_label = mode.value if mode else "default"

        try:
            location = await self.route_analyzer.analyze(
                score_input.location,
                score_input.route_waypoints,
                score_input.time,
                mode,
            )
        except OracleFailureError:
            self.metrics.record_computation(mode_label, "oracle_failure", time.time() - start)
            raise

        raw = RawRisks(
            crime=crime_risk(score_input.crime),
            location=location,
            time=time_risk(score_input.time),
            weather=weather_risk(score_input.weather),
            battery=battery_risk(score_input.battery),
            severe_weather=score_input.weather.severe_alert,
        )
        result = self.aggregator.aggregate(raw, mode)

        self.metrics.record_computation(mode_label, "success", time.time() - start)
        logger.info(
            f"Safety score computed: score={result.total_score}, risk={result.risk:.3f}, "
            f"mode={mode_label}, waypoints={len(score_input.route_waypoints or [])}"
        )
        return result


def _configured_failure_policy() -> OracleFailurePolicy:
    try:
        return OracleFailurePolicy(config.ORACLE_FAILURE_POLICY)
    except ValueError:
        logger.warning(
            "Unknown ORACLE_FAILURE_POLICY '%s', using fail_fast.", config.ORACLE_FAILURE_POLICY
        )
        return OracleFailurePolicy.FAIL_FAST


# Global engine instance
_scoring_engine: Optional[SafetyScoringEngine] = None


def get_scoring_engine() -> SafetyScoringEngine:
    """Get the configured scoring engine instance (singleton)."""
    global _scoring_engine
    if _scoring_engine is None:
        _scoring_engine = SafetyScoringEngine(
            predictor=get_prediction_client(),
            failure_policy=_configured_failure_policy(),
        )
    return _scoring_engine


async def compute_safety_score(
    data: Union[SafetyScoreInput, Mapping[str, Any]]
) -> SafetyScoreResult:
    """Compute a safety score with the environment-configured engine."""
    return await get_scoring_engine().compute_safety_score(data)
