"""Image prediction service used by `POST /api/predictions` and the CLI.

Role in pipeline:
    normalize request body -> create and poll prediction -> extract image.

Error handling strategy:
    Exceptions from the normalizer and poller propagate unchanged; the API
    adapter maps them to HTTP statuses. A failed or canceled prediction is
    returned normally with `image_url` set to `None`.
"""

import logging

from playground.core.extraction import extract_image
from playground.image.payload import build_prediction_request
from playground.llm.provider_config import Settings


logger = logging.getLogger(__name__)


def generate_image(body, settings: Settings, poller) -> dict:
    """Run one image prediction for a raw browser request body.

    Args:
        body: Untyped request body (`model_key`, `prompt`, variant fields).
        settings: Runtime configuration.
        poller: `PredictionPoller` used for the create-then-poll cycle.

    Returns:
        `{"elapsed_seconds", "prediction", "image_url"}`.
    """
    selector, request = build_prediction_request(body, settings)
    logger.info("Starting %s prediction", selector.key)
    logger.debug("Prediction input fields: %s", sorted(request.input))

    run = poller.run(request)

    output_format = request.input.get("output_format") or selector.default_output_format
    image_url = extract_image(run.prediction, output_format)
    if image_url is None and run.prediction.get("status") == "succeeded":
        logger.warning(
            "Prediction %s succeeded without a recognizable image output",
            run.prediction.get("id"),
        )

    return {
        "elapsed_seconds": run.elapsed_seconds,
        "prediction": run.prediction,
        "image_url": image_url,
    }
