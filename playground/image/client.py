"""Prediction-API HTTP client.

Processing flow:
    1. Attach the provider token as a bearer credential.
    2. Issue one JSON request (create or read a prediction).
    3. Return the parsed prediction document, or raise on non-2xx status.

Error handling strategy:
    - Network-level failures -> `TransportError` (502).
    - Non-2xx responses -> `ProviderError` carrying the provider's status code
      and response body verbatim.
    - 2xx responses that are not a JSON object -> `ProviderError` (502).
    No call is retried here.

Security considerations:
    The token is never logged. Error `details` may include provider bodies.
"""

import logging

import requests

from playground.core.errors import ProviderError, TransportError
from playground.llm.provider_config import DEFAULT_API_BASE_URL


logger = logging.getLogger(__name__)


class PredictionClient:
    """Thin wrapper over `requests` for `/predictions` endpoints.

    Args:
        token: Provider API token.
        base_url: API root, for example `https://api.replicate.com/v1`.
        session: Optional `requests.Session`-compatible object. When omitted,
            each call goes through `requests.request`, so no cookies or
            pooled connections are shared between concurrent predictions.
        timeout: Socket timeout in seconds per HTTP call.
    """

    def __init__(self, token, base_url=DEFAULT_API_BASE_URL, session=None, timeout=30.0):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout

    def _headers(self, with_body=False):
        headers = {"Authorization": f"Bearer {self.token}"}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def create(self, body: dict) -> dict:
        """Create a prediction from a `{version, input}` body."""
        return self._request(
            "POST",
            f"{self.base_url}/predictions",
            failure_message="Failed to create prediction.",
            json=body,
            headers=self._headers(with_body=True),
        )

    def get(self, prediction_id: str) -> dict:
        """Fetch the current snapshot of one prediction."""
        return self._request(
            "GET",
            f"{self.base_url}/predictions/{prediction_id}",
            failure_message="Failed while polling prediction status.",
            headers=self._headers(),
        )

    def _request(self, method, url, failure_message, **kwargs) -> dict:
        try:
            send = self.session.request if self.session is not None else requests.request
            response = send(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as err:
            logger.warning("Provider request %s %s failed: %s", method, url, err)
            raise TransportError(f"Could not reach prediction API: {err}") from err

        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        if not response.ok:
            message = failure_message
            if isinstance(payload, dict):
                message = payload.get("error") or payload.get("detail") or failure_message
            logger.warning(
                "Provider %s %s returned HTTP %s", method, url, response.status_code
            )
            raise ProviderError(str(message), status_code=response.status_code, details=payload)

        if not isinstance(payload, dict):
            raise ProviderError(
                "Prediction API returned an unexpected response.", details=payload
            )

        return payload
