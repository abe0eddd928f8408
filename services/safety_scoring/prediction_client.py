"""
Route safety prediction client for SafeRoute backend.
Handles communication with the model serving endpoint that scores a single
route segment and validates its response.
"""

import json
import logging
import re
from numbers import Real
from typing import Any, Dict, Optional

import httpx
from httpx import AsyncClient, Timeout

from common.constants import (
    ORACLE_LOW_RISK_MIN_SCORE,
    ORACLE_MEDIUM_RISK_MIN_SCORE,
    PREDICTION_DEFAULT_CONFIDENCE,
    PREDICTION_DEFAULT_FACTOR,
    PREDICTION_MAX_FACTORS,
)
from libs.config import config
from services.safety_scoring.schemas import RoutePrediction
from services.safety_scoring.types import RiskLevel

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a safety prediction AI. Always respond with valid JSON only."

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


class PredictionError(Exception):
    """Base class for predictive oracle failures."""


class PredictionConfigError(PredictionError):
    """Model URL or API token missing."""


class PredictionTimeoutError(PredictionError):
    """The oracle did not answer within the timeout."""


class PredictionTransportError(PredictionError):
    """Network error or non-2xx response from the oracle."""


class PredictionResponseError(PredictionError):
    """The oracle answered but the payload is unusable."""


def build_prompt(
    start_lat: float,
    start_lon: float,
    end_lat: float,
    end_lon: float,
    time_of_day: str,
    transport_mode: str,
) -> str:
    return (
        "You are a safety analysis expert. Analyze the following route and "
        "provide a safety assessment.\n\n"
        "Route Details:\n"
        f"- Start: ({start_lat:.4f}, {start_lon:.4f})\n"
        f"- End: ({end_lat:.4f}, {end_lon:.4f})\n"
        f"- Time: {time_of_day}\n"
        f"- Transport: {transport_mode}\n\n"
        "Respond ONLY with valid JSON in this exact format (no markdown, no extra text):\n"
        "{\n"
        '  "safetyScore": <number 0-100>,\n'
        '  "riskLevel": "<low|medium|high>",\n'
        '  "factors": ["<factor1>", "<factor2>", "<factor3>"],\n'
        '  "confidence": <number 0.0-1.0>\n'
        "}\n\n"
        "Consider: time of day, transport mode, population density, lighting, "
        "typical safety patterns."
    )


def risk_level_for(score: float) -> RiskLevel:
    if score >= ORACLE_LOW_RISK_MIN_SCORE:
        return RiskLevel.LOW
    if score >= ORACLE_MEDIUM_RISK_MIN_SCORE:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _extract_prediction_payload(data: Any) -> Dict[str, Any]:
    """
    Pull the prediction object out of a serving endpoint response.

    Accepts either a bare prediction object or a chat-completions body whose
    message content contains one (possibly wrapped in markdown or prose).
    """
    if isinstance(data, dict) and "safetyScore" in data:
        return data

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise PredictionResponseError("Prediction response has no message content")

    if not content:
        raise PredictionResponseError("Prediction model returned empty response")
    if not isinstance(content, str):
        raise PredictionResponseError(
            f"Prediction message content is not text: {type(content).__name__}"
        )

    match = JSON_OBJECT_PATTERN.search(content)
    if not match:
        raise PredictionResponseError(
            f"No JSON found in prediction response. Content: {content[:200]}"
        )

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise PredictionResponseError(
            f"Failed to parse prediction JSON: {e}. Content: {match.group(0)[:200]}"
        )

    if not isinstance(payload, dict):
        raise PredictionResponseError("Prediction JSON is not an object")
    return payload


def parse_prediction(data: Any) -> RoutePrediction:
    """
    Validate and normalize a raw oracle response.

    Raises:
        PredictionResponseError: if the payload is malformed or safetyScore is
            not numeric
    """
    payload = _extract_prediction_payload(data)

    raw_score = payload.get("safetyScore")
    if not _is_number(raw_score) or raw_score != raw_score:
        raise PredictionResponseError(f"Invalid safetyScore from prediction model: {raw_score!r}")
    score = min(100.0, max(0.0, float(raw_score)))

    try:
        risk_level = RiskLevel(payload.get("riskLevel"))
    except ValueError:
        risk_level = risk_level_for(score)

    factors = payload.get("factors")
    if isinstance(factors, list):
        factors = [str(f) for f in factors[:PREDICTION_MAX_FACTORS]]
    else:
        factors = [PREDICTION_DEFAULT_FACTOR]

    confidence = payload.get("confidence")
    if not _is_number(confidence):
        confidence = PREDICTION_DEFAULT_CONFIDENCE
    confidence = min(1.0, max(0.0, float(confidence)))

    return RoutePrediction(
        safety_score=score,
        risk_level=risk_level,
        factors=factors,
        confidence=confidence,
    )


class RoutePredictionClient:
    """Client for the route safety prediction serving endpoint."""

    def __init__(
        self,
        model_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the prediction client.

        Args:
            model_url: Serving endpoint URL. If None, reads PREDICTION_MODEL_URL.
            api_token: Bearer token. If None, reads PREDICTION_API_TOKEN.
            timeout: Per-request timeout in seconds (default 10).
            transport: Optional httpx transport, used by tests.
        """
        self.model_url = model_url or config.PREDICTION_MODEL_URL
        self.api_token = api_token or config.PREDICTION_API_TOKEN
        self.timeout = timeout if timeout is not None else config.PREDICTION_TIMEOUT_SECONDS
        self._transport = transport
        if not self._is_enabled():
            logger.warning(
                "PREDICTION_MODEL_URL/PREDICTION_API_TOKEN not set. Route predictions will fail."
            )

    def _is_enabled(self) -> bool:
        """Check if the oracle is configured (has URL and token)."""
        return bool(self.model_url and self.api_token)

    async def predict_route_safety(
        self,
        start_lat: float,
        start_lon: float,
        end_lat: float,
        end_lon: float,
        time_of_day: str,
        transport_mode: str,
    ) -> RoutePrediction:
        """
        Score one route segment.

        Args:
            start_lat, start_lon: Segment start
            end_lat, end_lon: Segment end
            time_of_day: e.g. "14:00"
            transport_mode: walking, bicycling, transit or driving

        Returns:
            Validated RoutePrediction

        Raises:
            PredictionError: on missing config, timeout, transport error or
                malformed response
        """
        if not self._is_enabled():
            raise PredictionConfigError(
                "Prediction model not configured. Set PREDICTION_MODEL_URL and PREDICTION_API_TOKEN."
            )

        body = {
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": build_prompt(
                        start_lat, start_lon, end_lat, end_lon, time_of_day, transport_mode
                    ),
                },
            ],
            "max_tokens": 300,
            "temperature": 0.3,
        }
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

        logger.info(
            f"Requesting route prediction: start=({start_lat}, {start_lon}), "
            f"end=({end_lat}, {end_lon}), time={time_of_day}, mode={transport_mode}"
        )

        try:
            async with AsyncClient(timeout=Timeout(self.timeout), transport=self._transport) as client:
                response = await client.post(self.model_url, json=body, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Route prediction timed out after {self.timeout}s: {e}")
            raise PredictionTimeoutError(f"Route prediction timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Route prediction API error: {e.response.status_code} - {e.response.text[:200]}"
            )
            raise PredictionTransportError(
                f"Route prediction API returned {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Route prediction request error: {e}")
            raise PredictionTransportError(f"Route prediction request failed: {e}") from e
        except ValueError as e:
            raise PredictionResponseError(f"Route prediction response is not JSON: {e}") from e

        prediction = parse_prediction(data)
        logger.info(
            f"Route prediction received: score={prediction.safety_score}, "
            f"risk={prediction.risk_level.value}, confidence={prediction.confidence}"
        )
        return prediction

    async def score_point_risk(
        self, lat: float, lon: float, time_of_day: str, transport_mode: str
    ) -> RoutePrediction:
        """Point assessment: a segment whose start and end coincide."""
        return await self.predict_route_safety(lat, lon, lat, lon, time_of_day, transport_mode)


# Global client instance
_prediction_client: Optional[RoutePredictionClient] = None


def get_prediction_client() -> RoutePredictionClient:
    """Get route prediction client instance (singleton)."""
    global _prediction_client
    if _prediction_client is None:
        _prediction_client = RoutePredictionClient()
    return _prediction_client
