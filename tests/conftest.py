import pytest

from playground.llm.provider_config import Settings, build_model_selectors
from tests.helpers import FakeClock, FakeSession


@pytest.fixture
def environ():
    return {
        "REPLICATE_API_TOKEN": "r8_test",
        "REPLICATE_SEEDREAM_VERSION": "seedream-v1",
        "REPLICATE_NANO_BANANA_VERSION": "nano-v1",
        "REPLICATE_REFINE_MODEL_VERSION": "refine-v1",
    }


@pytest.fixture
def settings(environ):
    return Settings(
        api_token=environ["REPLICATE_API_TOKEN"],
        models=build_model_selectors(environ),
        refine_version=environ["REPLICATE_REFINE_MODEL_VERSION"],
        poll_interval_ms=10,
        poll_timeout_ms=1000,
        public_dir="",
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def clock():
    return FakeClock()
