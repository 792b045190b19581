"""Provider configuration and text-model access.

Module split:
    - `provider_config`: environment-driven settings and model selectors.
    - `service`: prompt refinement through a text-generation model.
"""
