import importlib
import logging

import pytest

import libs.config as config_module
from common.constants import PREDICTION_TIMEOUT_SECONDS

pytestmark = pytest.mark.unit


@pytest.fixture
def reload_config(mocker, monkeypatch):
    """Re-import libs.config under the current environment, restoring it afterwards."""
    yield lambda: importlib.reload(config_module)
    mocker.stopall()
    monkeypatch.undo()
    importlib.reload(config_module)


class TestConfig:
    def test_prediction_config_complete(self, mocker):
        mocker.patch.object(
            config_module.Config, "PREDICTION_MODEL_URL", "https://models.example.com/invocations"
        )
        mocker.patch.object(config_module.Config, "PREDICTION_API_TOKEN", "token")
        assert config_module.Config.validate_prediction_config() is True

    @pytest.mark.parametrize("url, token", [(None, "token"), ("https://x", None), ("", "")])
    def test_prediction_config_incomplete(self, mocker, url, token):
        mocker.patch.object(config_module.Config, "PREDICTION_MODEL_URL", url)
        mocker.patch.object(config_module.Config, "PREDICTION_API_TOKEN", token)
        assert config_module.Config.validate_prediction_config() is False


class TestPredictionTimeout:
    def test_default_timeout(self, mocker, monkeypatch, reload_config):
        monkeypatch.delenv("PREDICTION_TIMEOUT_SECONDS", raising=False)
        mocker.patch("dotenv.load_dotenv")
        assert reload_config().config.PREDICTION_TIMEOUT_SECONDS == PREDICTION_TIMEOUT_SECONDS

    def test_timeout_from_environment(self, monkeypatch, reload_config):
        monkeypatch.setenv("PREDICTION_TIMEOUT_SECONDS", "4.5")
        assert reload_config().config.PREDICTION_TIMEOUT_SECONDS == 4.5

    def test_timeout_from_dotenv_file(self, mocker, monkeypatch, reload_config):
        monkeypatch.delenv("PREDICTION_TIMEOUT_SECONDS", raising=False)
        mocker.patch(
            "dotenv.load_dotenv",
            side_effect=lambda *args, **kwargs: monkeypatch.setenv("PREDICTION_TIMEOUT_SECONDS", "3"),
        )

        assert reload_config().config.PREDICTION_TIMEOUT_SECONDS == 3.0


class TestConfigureLogging:
    def test_uses_configured_level(self, mocker):
        basic_config = mocker.patch("libs.config.logging.basicConfig")
        mocker.patch.object(config_module.Config, "LOG_LEVEL", "debug")

        config_module.configure_logging()

        basic_config.assert_called_once_with(level="DEBUG", format=config_module.LOG_FORMAT)

    def test_explicit_level_wins(self, mocker):
        basic_config = mocker.patch("libs.config.logging.basicConfig")

        config_module.configure_logging("warning")

        assert basic_config.call_args.kwargs["level"] == logging.getLevelName(logging.WARNING)
