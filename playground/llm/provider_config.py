"""Provider/runtime configuration for the playground.

Architectural role:
    Centralizes the provider token, per-model version identifiers, and polling
    budgets consumed by the API adapter (`playground.api.http_api`), the
    payload normalizer (`playground.image.payload`), and the poller
    (`playground.image.poller`).

Resolution:
    `.env` is loaded at import time via `load_dotenv()`. `Settings.from_env`
    snapshots the environment into an immutable value which is then passed
    explicitly to every collaborator; nothing reads `os.environ` afterwards.

Validation:
    `Settings.validate` runs once when the app is created. Per-model versions
    are only required for models that are actually requested, so a missing
    version surfaces as `MissingProviderVersion` at request time.
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv

from playground.core.errors import ConfigurationError

load_dotenv()


DEFAULT_API_BASE_URL = "https://api.replicate.com/v1"
DEFAULT_MODEL_KEY = "seedream"
DEFAULT_POLL_INTERVAL_MS = 2000
DEFAULT_POLL_TIMEOUT_MS = 120000
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_WORKER_THREADS = 100

SEEDREAM = "seedream"
NANO_BANANA = "nano-banana"


@dataclass(frozen=True)
class ModelSelector:
    """One supported image model and the provider version it maps to.

    Attributes:
        key: Lower-case model key sent by the browser (`model_key`).
        env_key: Environment variable holding the version identifier.
        version: Provider version identifier, or `None` when unconfigured.
        default_output_format: Image subtype assumed for raw base64 output.
        env_hint: Variable name(s) quoted in configuration error messages.
    """

    key: str
    env_key: str
    version: str | None
    default_output_format: str
    env_hint: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.version)


def _env_int(environ, name, default):
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer (got {raw!r}).") from None


def build_model_selectors(environ) -> Mapping[str, ModelSelector]:
    """Build the supported model map from an environment mapping.

    Seedream also honours the legacy `REPLICATE_MODEL_VERSION` variable.
    """
    selectors = {
        SEEDREAM: ModelSelector(
            key=SEEDREAM,
            env_key="REPLICATE_SEEDREAM_VERSION",
            version=environ.get("REPLICATE_SEEDREAM_VERSION")
            or environ.get("REPLICATE_MODEL_VERSION"),
            default_output_format="png",
            env_hint="REPLICATE_SEEDREAM_VERSION (or legacy REPLICATE_MODEL_VERSION)",
        ),
        NANO_BANANA: ModelSelector(
            key=NANO_BANANA,
            env_key="REPLICATE_NANO_BANANA_VERSION",
            version=environ.get("REPLICATE_NANO_BANANA_VERSION"),
            default_output_format="jpg",
            env_hint="REPLICATE_NANO_BANANA_VERSION",
        ),
    }
    return MappingProxyType(selectors)


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration.

    Attributes:
        api_token: Provider token sent as a bearer credential.
        models: Supported model selectors keyed by lower-case model key.
        default_model_key: Used when the request carries no `model_key`.
        refine_version: Text-model version used by `/api/refine`.
        poll_interval_ms: Sleep between status polls.
        poll_timeout_ms: Wall-clock budget measured from prediction creation.
        api_base_url: Provider API root (no trailing slash).
        request_timeout: Socket timeout in seconds for each provider call.
        worker_threads: Threadpool size; bounds how many predictions poll at once.
        host/port: Bind address for `playground serve`.
        public_dir: Static directory served at `/` when it exists.
        debug: Enables DEBUG-level logging.
    """

    api_token: str | None = None
    models: Mapping[str, ModelSelector] = field(
        default_factory=lambda: build_model_selectors({})
    )
    default_model_key: str = DEFAULT_MODEL_KEY
    refine_version: str | None = None
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    poll_timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 30.0
    worker_threads: int = DEFAULT_WORKER_THREADS
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    public_dir: str = "public"
    debug: bool = False

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Snapshot configuration from `environ` (defaults to `os.environ`).

        Raises:
            ConfigurationError: A numeric variable is not an integer.
        """
        if environ is None:
            environ = os.environ

        default_model_key = environ.get("REPLICATE_DEFAULT_MODEL_KEY") or DEFAULT_MODEL_KEY

        return cls(
            api_token=environ.get("REPLICATE_API_TOKEN") or None,
            models=build_model_selectors(environ),
            default_model_key=default_model_key.lower(),
            refine_version=environ.get("REPLICATE_REFINE_MODEL_VERSION") or None,
            poll_interval_ms=_env_int(
                environ, "REPLICATE_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS
            ),
            poll_timeout_ms=_env_int(environ, "REPLICATE_TIMEOUT_MS", DEFAULT_POLL_TIMEOUT_MS),
            api_base_url=(environ.get("REPLICATE_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/"),
            host=environ.get("HOST") or DEFAULT_HOST,
            port=_env_int(environ, "PORT", DEFAULT_PORT),
            worker_threads=_env_int(environ, "WORKER_THREADS", DEFAULT_WORKER_THREADS),
            public_dir=environ.get("PUBLIC_DIR") or "public",
            debug=environ.get("DEBUG") == "true",
        )

    def validate(self) -> "Settings":
        """Check startup-required fields once; returns `self` for chaining.

        Raises:
            ConfigurationError: Missing token or non-positive poll timings.
        """
        if not self.api_token:
            raise ConfigurationError("Missing REPLICATE_API_TOKEN in environment.")
        if self.poll_interval_ms <= 0:
            raise ConfigurationError("REPLICATE_POLL_INTERVAL_MS must be positive.")
        if self.poll_timeout_ms <= 0:
            raise ConfigurationError("REPLICATE_TIMEOUT_MS must be positive.")
        if self.worker_threads <= 0:
            raise ConfigurationError("WORKER_THREADS must be positive.")
        return self
