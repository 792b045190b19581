"""Core contracts shared across the playground.

Module split:
    - `errors`: exception taxonomy mapped to HTTP statuses by the API adapter.
    - `extraction`: ordered probes that pull an image reference or text out of
      a finished prediction document.
"""
