"""
Configuration module for loading environment variables
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from common.constants import PREDICTION_TIMEOUT_SECONDS as DEFAULT_PREDICTION_TIMEOUT_SECONDS

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Config:
    """Application configuration"""

    # Predictive oracle (model serving endpoint)
    PREDICTION_MODEL_URL: Optional[str] = os.getenv("PREDICTION_MODEL_URL")
    PREDICTION_API_TOKEN: Optional[str] = os.getenv("PREDICTION_API_TOKEN")
    PREDICTION_TIMEOUT_SECONDS: float = float(
        os.getenv("PREDICTION_TIMEOUT_SECONDS", str(DEFAULT_PREDICTION_TIMEOUT_SECONDS))
    )

    # "fail_fast" or "rule_based_fallback"
    ORACLE_FAILURE_POLICY: str = os.getenv("ORACLE_FAILURE_POLICY", "fail_fast")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate_prediction_config(cls) -> bool:
        """Check if predictive oracle configuration is complete"""
        return all([cls.PREDICTION_MODEL_URL, cls.PREDICTION_API_TOKEN])


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging the same way for every entry point."""
    logging.basicConfig(
        level=(level or Config.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )


config = Config()
