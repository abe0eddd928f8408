"""
Type definitions for the safety scoring service.

This module contains all enum types used in the safety scoring service.
"""

from enum import Enum


class TransportMode(str, Enum):
    """Mode of travel; selects the weight/multiplier profile."""

    WALKING = "walking"
    BICYCLING = "bicycling"
    TRANSIT = "transit"
    DRIVING = "driving"


class SafetyLevel(str, Enum):
    """Coarse safety label derived from a 0-100 score."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    MODERATE = "Moderate"
    POOR = "Poor"
    DANGEROUS = "Dangerous"


class RiskLevel(str, Enum):
    """Risk level reported by the predictive oracle."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OracleFailurePolicy(str, Enum):
    """What route analysis does when an oracle call fails."""

    FAIL_FAST = "fail_fast"
    RULE_BASED_FALLBACK = "rule_based_fallback"
