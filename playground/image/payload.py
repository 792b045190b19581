"""Request normalization for image predictions.

Processing flow:
    1. Resolve `model_key` (case-insensitive, configured default) to a
       `ModelSelector` with a non-empty version.
    2. Validate the prompt (trimmed before the emptiness check).
    3. Build the variant-specific input for the resolved model, applying
       defaults and clamps and dropping every field the variant does not define.

Leniency:
    Malformed optional fields never fail the request. Unknown sizes fall back
    to "2K", unparseable `max_images` falls back to 1, and unparseable custom
    dimensions are omitted. Only the model key and prompt are hard failures.

Determinism:
    Pure functions; no I/O.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any

from playground.core.errors import MissingPrompt, MissingProviderVersion, UnknownModel
from playground.llm.provider_config import NANO_BANANA, SEEDREAM, ModelSelector, Settings


SIZE_PRESETS = ("1K", "2K", "4K")
CUSTOM_SIZE = "custom"
DEFAULT_SIZE = "2K"

DIMENSION_LIMITS = (1024, 4096)
MAX_IMAGES_LIMITS = (1, 15)

_LEADING_INT = re.compile(r"^\s*([+-]?)([0-9]+)")

# Digit runs longer than this saturate; every clamp bound is far below it.
MAX_INT_DIGITS = 18


@dataclass(frozen=True)
class PredictionRequest:
    """Create-prediction body: provider version plus normalized input."""

    version: str
    input: dict = field(default_factory=dict)

    def to_payload(self) -> dict:
        return {"version": self.version, "input": dict(self.input)}


def clamp(value: int, lower: int, upper: int) -> int:
    return min(upper, max(lower, value))


def parse_int(value) -> int | None:
    """Parse the leading integer of `value`, or `None` when there is none.

    Strings such as "1500px" parse to 1500 and "3.9" to 3. Floats truncate.
    Only ASCII digits count. Runs of more than `MAX_INT_DIGITS` digits
    saturate to a huge signed value, so clamping pins them to the bound.
    Booleans, `None`, and non-finite numbers are unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    if not match:
        return None
    sign, digits = match.groups()
    digits = digits.lstrip("0") or "0"
    magnitude = 10 ** MAX_INT_DIGITS if len(digits) > MAX_INT_DIGITS else int(digits)
    return -magnitude if sign == "-" else magnitude


def normalize_text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _string_or(value, default: str) -> str:
    return value if isinstance(value, str) else default


def normalize_image_input(value) -> list[str]:
    """Keep the non-blank string references; drop everything else silently."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


def normalize_size(value) -> str:
    trimmed = value.strip() if isinstance(value, str) else ""
    if trimmed.lower() == CUSTOM_SIZE:
        return CUSTOM_SIZE
    if trimmed.upper() in SIZE_PRESETS:
        return trimmed.upper()
    return DEFAULT_SIZE


def require_prompt(body: dict) -> str:
    prompt = normalize_text(body.get("prompt"))
    if not prompt:
        raise MissingPrompt()
    return prompt


def resolve_model(model_key, settings: Settings) -> ModelSelector:
    """Resolve a raw model key to a configured selector.

    Raises:
        UnknownModel: The key does not name a supported model.
        MissingProviderVersion: The model has no configured version.
    """
    raw_key = model_key if isinstance(model_key, str) and model_key else None
    key = (raw_key or settings.default_model_key).lower()

    selector = settings.models.get(key)
    if selector is None:
        raise UnknownModel(key)
    if not selector.configured:
        raise MissingProviderVersion(key, selector.env_hint or selector.env_key)
    return selector


# ============================================================
# Variant builders
# ============================================================

def _seedream_input(body: dict, prompt: str) -> dict:
    size = normalize_size(body.get("size"))

    parsed_max_images = parse_int(body.get("max_images"))
    max_images = 1 if parsed_max_images is None else clamp(parsed_max_images, *MAX_IMAGES_LIMITS)

    payload = {
        "prompt": prompt,
        "size": size,
        "aspect_ratio": _string_or(body.get("aspect_ratio"), "match_input_image"),
        "sequential_image_generation": _string_or(
            body.get("sequential_image_generation"), "disabled"
        ),
        "max_images": max_images,
    }

    if size == CUSTOM_SIZE:
        for dimension in ("width", "height"):
            parsed = parse_int(body.get(dimension))
            if parsed is not None:
                payload[dimension] = clamp(parsed, *DIMENSION_LIMITS)

    return payload


def _nano_banana_input(body: dict, prompt: str) -> dict:
    return {
        "prompt": prompt,
        "aspect_ratio": _string_or(body.get("aspect_ratio"), "16:9"),
        "output_format": _string_or(body.get("output_format"), "jpg"),
    }


VARIANT_BUILDERS = {
    SEEDREAM: _seedream_input,
    NANO_BANANA: _nano_banana_input,
}


def normalize_input(body: dict, selector: ModelSelector) -> dict[str, Any]:
    """Build the provider input for `selector` from a raw request body.

    Raises:
        MissingPrompt: `prompt` is absent, not a string, or blank.
    """
    prompt = require_prompt(body)
    payload = VARIANT_BUILDERS[selector.key](body, prompt)

    image_input = normalize_image_input(body.get("image_input"))
    if image_input:
        payload["image_input"] = image_input

    return payload


def build_prediction_request(body, settings: Settings) -> tuple[ModelSelector, PredictionRequest]:
    """Resolve the model and normalize `body` into a create-prediction request.

    Returns:
        `(selector, request)`; the selector is returned so callers can pick
        the expected output format for result extraction.
    """
    if not isinstance(body, dict):
        body = {}
    selector = resolve_model(body.get("model_key"), settings)
    request = PredictionRequest(version=selector.version, input=normalize_input(body, selector))
    return selector, request
