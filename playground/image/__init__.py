"""Image prediction package.

Scope:
    Normalizes browser payloads into provider requests, drives the
    create-then-poll workflow, and dispatches image predictions for the API.

Module split:
    - `payload`: model resolution and per-model input normalization (no I/O).
    - `client`: authenticated HTTP calls to the prediction API.
    - `poller`: create-then-poll state machine with timeout.
    - `service`: end-to-end image prediction used by API/CLI adapters.

Non-goals:
    - No image decoding, resizing, or compression.
    - No persistence of predictions.
"""
