"""Browser-facing proxy for hosted image-generation predictions."""

__version__ = "0.1.0"
