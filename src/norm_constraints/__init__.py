"""Per-unit L2 norm constraints for Keras models."""

__version__ = "0.1.0"
