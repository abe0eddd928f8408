"""
Route segment analysis.

Turns a base location plus an ordered list of waypoints into one location
risk for the whole route. Each segment (base -> wp0, wp0 -> wp1, ...) is
scored by the predictive oracle concurrently and blended with the rule-based
risk of the segment endpoint; the segment average is then blended with the
base location's own risk.
"""

import asyncio
import logging
from typing import List, Optional, Protocol, Sequence

from common.constants import (
    DEFAULT_ORACLE_TRANSPORT_MODE,
    PREDICTION_TIMEOUT_SECONDS,
    ROUTE_BASE_WEIGHT,
    ROUTE_SEGMENT_WEIGHT,
    SEGMENT_ORACLE_WEIGHT,
    SEGMENT_RULE_WEIGHT,
)
from libs.metrics import ScoringMetrics
from services.safety_scoring.errors import OracleFailureError
from services.safety_scoring.risk_factors import clamp, location_risk
from services.safety_scoring.schemas import LocationData, RoutePrediction, TimeData
from services.safety_scoring.types import OracleFailurePolicy, TransportMode

logger = logging.getLogger(__name__)


class SegmentPredictor(Protocol):
    """Anything that can score a point-to-point segment."""

    async def predict_route_safety(
        self,
        start_lat: float,
        start_lon: float,
        end_lat: float,
        end_lon: float,
        time_of_day: str,
        transport_mode: str,
    ) -> RoutePrediction: ...


def time_of_day_label(time: TimeData) -> str:
    return f"{time.hour}:00"


def prediction_to_risk(prediction: RoutePrediction) -> float:
    score = min(100.0, max(0.0, float(prediction.safety_score)))
    return 1.0 - score / 100.0


class RouteSegmentAnalyzer:
    """Location risk for a point or a multi-segment route."""

    def __init__(
        self,
        predictor: Optional[SegmentPredictor] = None,
        failure_policy: OracleFailurePolicy = OracleFailurePolicy.FAIL_FAST,
        timeout: float = PREDICTION_TIMEOUT_SECONDS,
        metrics: Optional[ScoringMetrics] = None,
    ):
        self.predictor = predictor
        self.failure_policy = OracleFailurePolicy(failure_policy)
        self.timeout = timeout
        self.metrics = metrics

    async def analyze(
        self,
        base: LocationData,
        waypoints: Optional[Sequence[LocationData]],
        time: TimeData,
        transport_mode: Optional[TransportMode] = None,
    ) -> float:
        """
        Location risk in [0, 1] for the route starting at `base`.

        Args:
            base: Current location (implicit start of the first segment)
            waypoints: Ordered route points; None or empty means point analysis
            time: Time context, sent to the oracle as "H:00"
            transport_mode: Sent to the oracle; walking when None

        Raises:
            OracleFailureError: a segment prediction failed under FAIL_FAST
        """
        base_risk = location_risk(base)
        if not waypoints:
            return base_risk

        mode = transport_mode.value if transport_mode else DEFAULT_ORACLE_TRANSPORT_MODE
        time_of_day = time_of_day_label(time)
        starts = [base, *waypoints[:-1]]

        segment_risks = await self._gather_segments(
            [
                self._segment_risk(index, start, end, time_of_day, mode)
                for index, (start, end) in enumerate(zip(starts, waypoints))
            ]
        )

        avg_route_risk = sum(segment_risks) / len(segment_risks)
        risk = ROUTE_BASE_WEIGHT * base_risk + ROUTE_SEGMENT_WEIGHT * avg_route_risk

        logger.info(
            f"Route analysis: {len(segment_risks)} segments analyzed, "
            f"avg_route_risk={avg_route_risk:.3f}, location_risk={clamp(risk):.3f}"
        )
        return clamp(risk)

    async def _gather_segments(self, coroutines) -> List[float]:
        """
        Run all segment coroutines concurrently and wait for every one.

        The first failure cancels the segments still in flight and is raised;
        no partial result is ever returned.
        """
        tasks = [asyncio.create_task(c) for c in coroutines]
        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        failures = [task.exception() for task in tasks if task in done and task.exception()]
        if failures:
            raise failures[0]

        return [task.result() for task in tasks]

    async def _segment_risk(
        self,
        index: int,
        start: LocationData,
        end: LocationData,
        time_of_day: str,
        transport_mode: str,
    ) -> float:
        rule_risk = location_risk(end)
        try:
            if self.predictor is None:
                raise RuntimeError("No route predictor configured")
            prediction = await asyncio.wait_for(
                self.predictor.predict_route_safety(
                    start.latitude,
                    start.longitude,
                    end.latitude,
                    end.longitude,
                    time_of_day,
                    transport_mode,
                ),
                timeout=self.timeout,
            )
            oracle_risk = prediction_to_risk(prediction)
        except Exception as e:
            self._record_oracle_call("failure")
            if self.failure_policy is OracleFailurePolicy.RULE_BASED_FALLBACK:
                logger.warning(
                    f"Route prediction failed for segment {index} "
                    f"({type(e).__name__}: {e}); using rule-based risk {rule_risk:.3f}"
                )
                if self.metrics:
                    self.metrics.record_fallback()
                return rule_risk
            logger.error(f"Route prediction failed for segment {index}: {type(e).__name__}: {e}")
            raise OracleFailureError(index, e) from e

        self._record_oracle_call("success")
        return SEGMENT_ORACLE_WEIGHT * oracle_risk + SEGMENT_RULE_WEIGHT * rule_risk

    def _record_oracle_call(self, outcome: str):
        if self.metrics:
            self.metrics.record_oracle_call(outcome)
