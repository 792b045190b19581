"""Create-then-poll runner for remote predictions.

Processing flow:
    1. Submit the create request (`PredictionClient.create`).
    2. While the snapshot is not terminal: check the time budget, sleep one
       poll interval, fetch the prediction again.
    3. Return the terminal snapshot plus elapsed seconds.

State machine:
    CREATED -> POLLING -> TERMINAL | TIMED_OUT | ERRORED. The timed sleep is
    the only suspension point.

Timeout policy:
    The budget is measured from the moment the create call returns and is
    checked before each sleep, so no poll is issued past the budget.

Terminal detection:
    A status is terminal iff it is exactly one of "succeeded", "failed",
    "canceled". Failed and canceled predictions are returned normally; the
    caller decides what they mean.

Error handling strategy:
    Provider and transport errors from the client propagate unchanged and are
    never retried. A budget overrun raises `PredictionTimeout` carrying the
    last-known snapshot.

Concurrency:
    Blocking (`time.sleep`). The API adapter runs each call in the threadpool,
    so one slow poll never stalls another request.
"""

import enum
import logging
import time
from dataclasses import dataclass

from playground.core.errors import PlaygroundError, PredictionTimeout, ProviderError
from playground.image.client import PredictionClient
from playground.llm.provider_config import Settings


logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"succeeded", "failed", "canceled"})


def is_terminal(status) -> bool:
    return status in TERMINAL_STATUSES


class RunState(enum.Enum):
    CREATED = "created"
    POLLING = "polling"
    TERMINAL = "terminal"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


@dataclass
class PredictionRun:
    """Outcome of one create-then-poll cycle."""

    prediction: dict
    elapsed_seconds: float
    polls: int = 0
    state: RunState = RunState.TERMINAL


class PredictionPoller:
    """Drive one prediction from creation to a terminal status.

    Args:
        client: `PredictionClient` (or compatible) used for create/get calls.
        poll_interval_ms: Sleep between polls.
        timeout_ms: Wall-clock budget from creation.
        sleep: Blocking sleep taking seconds; injectable for tests.
        clock: Monotonic clock returning seconds; injectable for tests.
    """

    def __init__(
        self,
        client,
        poll_interval_ms: int = 2000,
        timeout_ms: int = 120000,
        sleep=time.sleep,
        clock=time.monotonic,
    ):
        self.client = client
        self.poll_interval_ms = poll_interval_ms
        self.timeout_ms = timeout_ms
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, session=None) -> "PredictionPoller":
        client = PredictionClient(
            settings.api_token,
            base_url=settings.api_base_url,
            session=session,
            timeout=settings.request_timeout,
        )
        return cls(
            client,
            poll_interval_ms=settings.poll_interval_ms,
            timeout_ms=settings.poll_timeout_ms,
        )

    def _elapsed_ms(self, started_at) -> float:
        return (self._clock() - started_at) * 1000

    def run(self, request) -> PredictionRun:
        """Create the prediction described by `request` and wait for it.

        Args:
            request: `PredictionRequest` (anything exposing `to_payload()`).

        Returns:
            `PredictionRun` with the terminal snapshot.

        Raises:
            ProviderError: Non-2xx response at create or poll time, or a
                non-terminal prediction without an id.
            TransportError: The provider could not be reached.
            PredictionTimeout: The budget elapsed before a terminal status.
        """
        prediction = self.client.create(request.to_payload())
        started_at = self._clock()
        state = RunState.CREATED
        polls = 0

        logger.info(
            "Created prediction %s (status=%s)", prediction.get("id"), prediction.get("status")
        )

        try:
            while not is_terminal(prediction.get("status")):
                state = RunState.POLLING
                prediction_id = prediction.get("id")
                if not prediction_id:
                    raise ProviderError(
                        "Prediction API did not return a prediction id.", details=prediction
                    )

                if self._elapsed_ms(started_at) > self.timeout_ms:
                    state = RunState.TIMED_OUT
                    logger.warning(
                        "Prediction %s timed out after %d polls (status=%s)",
                        prediction_id,
                        polls,
                        prediction.get("status"),
                    )
                    raise PredictionTimeout(
                        "Timed out while waiting for prediction to finish.",
                        details=prediction,
                    )

                self._sleep(self.poll_interval_ms / 1000)
                prediction = self.client.get(prediction_id)
                polls += 1
                logger.debug(
                    "Polled prediction %s (poll=%d, status=%s)",
                    prediction_id,
                    polls,
                    prediction.get("status"),
                )
        except PlaygroundError as err:
            if state is not RunState.TIMED_OUT:
                state = RunState.ERRORED
            logger.info(
                "Prediction %s stopped in state=%s: %s",
                prediction.get("id"),
                state.value,
                err.message,
            )
            raise

        state = RunState.TERMINAL
        elapsed_seconds = round(self._elapsed_ms(started_at) / 1000, 2)
        logger.info(
            "Prediction %s finished with status=%s in %.2fs",
            prediction.get("id"),
            prediction.get("status"),
            elapsed_seconds,
        )
        return PredictionRun(
            prediction=prediction,
            elapsed_seconds=elapsed_seconds,
            polls=polls,
            state=state,
        )
