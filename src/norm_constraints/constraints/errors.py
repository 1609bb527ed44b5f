"""Exceptions raised by the norm constraints."""

from typing import Any

# ---------------------------------------------------------------------


class ConfigurationError(ValueError):
    """Invalid constructor argument for a constraint.

    Raised eagerly when the constraint is built, never while it is applied.

    Attributes:
        name: Name of the offending argument.
        value: The rejected value.
    """

    def __init__(self, name: str, value: Any, reason: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid {name}: {reason}. Received: {name}={value!r}")


class ShapeMismatchError(ValueError):
    """Reduction dimensions do not fit the rank of the tensor being constrained."""

# ---------------------------------------------------------------------
