"""Result extraction from finished prediction documents.

Role in pipeline:
    The provider's `output` field is schema-less: a string, a list of strings,
    a list of objects, or a single object depending on the model. Extraction is
    an ordered sequence of probes; the first candidate that normalizes wins.

Image references:
    - `http://`, `https://` and `data:` strings are accepted as-is.
    - Long raw base64 strings (>100 chars) are wrapped as a data URI using the
      expected output format as MIME subtype.
    - Anything else is rejected.

Text:
    Candidates are gathered from string outputs, list items (`text`,
    `message`, nested `content`), `output_text`, and finally the tail of
    `logs`. The first non-blank candidate wins.

Determinism:
    Pure functions over the input document.
"""

import re


IMAGE_SOURCE_KEYS = ("image", "url", "uri", "path")
BASE64_MIN_LENGTH = 100
LOG_TAIL_LINES = 5

_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/=\s]+$")
_WHITESPACE = re.compile(r"\s")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def _mime_subtype(output_format) -> str:
    if not isinstance(output_format, str):
        return "jpeg"
    return _NON_ALNUM.sub("", output_format) or "jpeg"


def normalize_image_value(value, output_format=None) -> str | None:
    """Return a displayable image reference for `value`, or `None`."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    if trimmed.startswith(("http://", "https://", "data:")):
        return trimmed

    if _BASE64_PATTERN.match(trimmed) and len(trimmed) > BASE64_MIN_LENGTH:
        payload = _WHITESPACE.sub("", trimmed)
        return f"data:image/{_mime_subtype(output_format)};base64,{payload}"

    return None


def _object_candidates(item: dict):
    for key in IMAGE_SOURCE_KEYS:
        yield item.get(key)


def _image_candidates(output):
    if isinstance(output, str):
        yield output
    elif isinstance(output, list):
        for item in output:
            if isinstance(item, str):
                yield item
            elif isinstance(item, dict):
                yield from _object_candidates(item)
    elif isinstance(output, dict):
        yield from _object_candidates(output)


def extract_image(prediction, output_format=None) -> str | None:
    """Locate the first usable image reference in a prediction.

    Args:
        prediction: Provider prediction document.
        output_format: Expected image format ("png", "jpg", ...) used when a
            raw base64 payload has to be wrapped.

    Returns:
        URL or data URI string, or `None` when nothing usable is present.
    """
    if not isinstance(prediction, dict):
        return None

    output = prediction.get("output")
    if output is None:
        output = prediction.get("images")

    for candidate in _image_candidates(output):
        normalized = normalize_image_value(candidate, output_format)
        if normalized:
            return normalized
    return None


def _text_candidates(prediction: dict):
    output = prediction.get("output")

    if isinstance(output, str):
        yield output

    if isinstance(output, list):
        for item in output:
            if isinstance(item, str):
                yield item
            elif isinstance(item, dict):
                yield item.get("text")
                yield item.get("message")
                content = item.get("content")
                if isinstance(content, list):
                    for piece in content:
                        if isinstance(piece, str):
                            yield piece
                        elif isinstance(piece, dict):
                            yield piece.get("text")

    yield prediction.get("output_text")

    logs = prediction.get("logs")
    if isinstance(logs, str):
        yield " ".join(logs.split("\n")[-LOG_TAIL_LINES:])


def extract_text(prediction) -> str:
    """Return the first non-blank text candidate (trimmed), or ""."""
    if not isinstance(prediction, dict):
        return ""

    for candidate in _text_candidates(prediction):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return ""
