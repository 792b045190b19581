"""Prompt refinement through a text-generation model.

Model call flow:
    prompt -> refine payload construction -> create and poll prediction ->
    `extract_text` -> refined prompt (or the original prompt when no text
    could be extracted).

Parameter semantics:
    - `temperature=0.3`: conservative rewrites.
    - `top_p=0.9`: nucleus sampling cap.
    - `max_output_tokens=400`: a refined prompt is a single paragraph.
    Both `messages` and a flat `prompt` are sent because text models on the
    provider accept one or the other.
"""

import logging

from playground.core.errors import MissingProviderVersion
from playground.core.extraction import extract_text
from playground.image.payload import PredictionRequest, require_prompt
from playground.llm.provider_config import Settings


logger = logging.getLogger(__name__)

REFINE_SYSTEM_MESSAGE = (
    "You are an expert prompt engineer for text-to-image diffusion models. "
    "Refine prompts for clarity, vivid detail, and photo-realism while preserving "
    "the original intent. Respond with the improved prompt only."
)

REFINE_INSTRUCTION = (
    "Refine the following image-generation prompt while keeping its core intent "
    "intact. Respond with the improved prompt only."
)


def require_refine_version(settings: Settings) -> str:
    if not settings.refine_version:
        raise MissingProviderVersion("refine", "REPLICATE_REFINE_MODEL_VERSION")
    return settings.refine_version


def build_refine_request(prompt: str, version: str) -> PredictionRequest:
    """Build the text-model prediction request for an already-trimmed prompt."""
    return PredictionRequest(
        version=version,
        input={
            "messages": [
                {"role": "system", "content": REFINE_SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            "max_output_tokens": 400,
            "temperature": 0.3,
            "top_p": 0.9,
            "prompt": f"{REFINE_INSTRUCTION}\n\n{prompt}",
        },
    )


def refine_prompt(body, settings: Settings, poller) -> dict:
    """Refine the `prompt` field of a raw request body.

    Returns:
        `{"refined_prompt", "elapsed_seconds", "prediction"}`.

    Failure scenarios:
        The version check runs before prompt validation, so an unconfigured
        server answers 500 regardless of input.
    """
    if not isinstance(body, dict):
        body = {}
    version = require_refine_version(settings)
    prompt = require_prompt(body)
    run = poller.run(build_refine_request(prompt, version))

    refined = extract_text(run.prediction)
    if not refined:
        logger.info(
            "No text extracted from prediction %s; returning original prompt",
            run.prediction.get("id"),
        )
        refined = prompt

    return {
        "refined_prompt": refined,
        "elapsed_seconds": run.elapsed_seconds,
        "prediction": run.prediction,
    }
