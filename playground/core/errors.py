"""Error taxonomy shared by the normalizer, poller, and HTTP adapter.

Architectural role:
    Every failure the playground reports to a caller is one of these exception
    types. Each carries the HTTP status the API adapter should answer with and
    optional `details` forwarded verbatim in the error body.

Propagation:
    - Validation/configuration errors are raised before any network call.
    - Provider/transport/timeout errors abort the in-flight request.
    - None of them are retried inside this package.
"""


class PlaygroundError(Exception):
    """Base class for errors surfaced to API callers.

    Attributes:
        message: Human-readable error string (`error` field of the response).
        status_code: HTTP status the adapter answers with.
        details: Optional JSON-serializable diagnostics.
    """

    status_code = 500

    def __init__(self, message, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(PlaygroundError):
    """Bad or missing caller input."""

    status_code = 400


class UnknownModel(ValidationError):
    def __init__(self, model_key):
        super().__init__(f'Unsupported model key "{model_key}".')
        self.model_key = model_key


class MissingPrompt(ValidationError):
    def __init__(self):
        super().__init__('Field "prompt" is required.')


class ConfigurationError(PlaygroundError):
    """Required server-side configuration is missing or malformed."""

    status_code = 500


class MissingProviderVersion(ConfigurationError):
    def __init__(self, model_key, env_hint):
        super().__init__(f'Missing {env_hint} for model "{model_key}".')
        self.model_key = model_key


class ProviderError(PlaygroundError):
    """The provider answered with a non-success response."""

    status_code = 502


class TransportError(PlaygroundError):
    """The provider could not be reached (DNS, refused connection, socket timeout)."""

    status_code = 502


class PredictionTimeout(PlaygroundError):
    """Polling budget exceeded; `details` holds the last-known prediction."""

    status_code = 504
