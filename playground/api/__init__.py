"""Playground adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level parsing and error-to-status mapping.
- Delegates normalization and polling to the `image`/`llm` service layers.
"""
