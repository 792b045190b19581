import pytest

from playground.core.errors import ConfigurationError
from playground.llm.provider_config import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_POLL_TIMEOUT_MS,
    Settings,
)


def test_defaults_from_empty_environment():
    settings = Settings.from_env({})

    assert settings.api_token is None
    assert settings.default_model_key == "seedream"
    assert settings.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS == 2000
    assert settings.poll_timeout_ms == DEFAULT_POLL_TIMEOUT_MS == 120000
    assert settings.api_base_url == "https://api.replicate.com/v1"
    assert settings.port == 3000
    assert not settings.models["seedream"].configured
    assert not settings.debug


def test_values_from_environment(environ):
    environ.update(
        {
            "REPLICATE_DEFAULT_MODEL_KEY": "Nano-Banana",
            "REPLICATE_POLL_INTERVAL_MS": "500",
            "REPLICATE_TIMEOUT_MS": " 60000 ",
            "REPLICATE_API_BASE_URL": "https://proxy.test/v1/",
            "DEBUG": "true",
        }
    )

    settings = Settings.from_env(environ).validate()

    assert settings.api_token == "r8_test"
    assert settings.default_model_key == "nano-banana"
    assert settings.models["nano-banana"].version == "nano-v1"
    assert settings.refine_version == "refine-v1"
    assert settings.poll_interval_ms == 500
    assert settings.poll_timeout_ms == 60000
    assert settings.api_base_url == "https://proxy.test/v1"
    assert settings.debug


def test_malformed_number_rejected():
    with pytest.raises(ConfigurationError, match="REPLICATE_TIMEOUT_MS"):
        Settings.from_env({"REPLICATE_TIMEOUT_MS": "two minutes"})


def test_validate_requires_token():
    with pytest.raises(ConfigurationError, match="REPLICATE_API_TOKEN"):
        Settings.from_env({}).validate()


def test_validate_rejects_non_positive_interval(environ):
    environ["REPLICATE_POLL_INTERVAL_MS"] = "0"
    with pytest.raises(ConfigurationError):
        Settings.from_env(environ).validate()


def test_worker_threads_from_environment(environ):
    assert Settings.from_env({}).worker_threads == 100
    environ["WORKER_THREADS"] = "250"
    assert Settings.from_env(environ).validate().worker_threads == 250


def test_validate_rejects_non_positive_worker_threads(environ):
    environ["WORKER_THREADS"] = "0"
    with pytest.raises(ConfigurationError, match="WORKER_THREADS"):
        Settings.from_env(environ).validate()
