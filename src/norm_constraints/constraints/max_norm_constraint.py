"""
Upper-bound-only and unit L2 norm constraints.

Both share the grouping and in-place application of ``BaseNormConstraint``:

-   ``MaxNormConstraint`` scales a unit down when its norm exceeds
    ``max_value`` and leaves it alone otherwise.
-   ``UnitNormConstraint`` rescales every nonzero unit to norm ``1``.

All-zero units stay zero in both.
"""

import keras
from typing import Any, Dict, Sequence, Union

# ---------------------------------------------------------------------
# local imports
# ---------------------------------------------------------------------

from norm_constraints.utils.logger import logger
from norm_constraints.utils.tensors import clamp
from .base_constraint import BaseNormConstraint
from .config import (
    DEFAULT_DIMENSIONS,
    DEFAULT_EPSILON,
    STR_MAX_VALUE,
    validate_float_arg,
)
from .errors import ConfigurationError

# ---------------------------------------------------------------------

DEFAULT_MAX_NORM: float = 2.0

# ---------------------------------------------------------------------


@keras.saving.register_keras_serializable()
class MaxNormConstraint(BaseNormConstraint):
    """Constrain the per-unit L2 norm to be at most ``max_value``.

    Args:
        max_value: Maximum L2 norm per unit. Must be non-negative.
        dimensions: Axis or axes the norm is computed over.
        epsilon: Added to the norm in the denominator.

    Raises:
        ConfigurationError: If ``max_value`` is negative or not finite.
    """

    def __init__(
            self,
            max_value: float = DEFAULT_MAX_NORM,
            dimensions: Union[int, Sequence[int]] = DEFAULT_DIMENSIONS,
            epsilon: float = DEFAULT_EPSILON,
    ) -> None:
        super().__init__(dimensions=dimensions, epsilon=epsilon)
        max_value = validate_float_arg(max_value, STR_MAX_VALUE)
        if max_value < 0.0:
            raise ConfigurationError(STR_MAX_VALUE, max_value, "must be non-negative")
        self.max_value = max_value

        logger.debug(
            f"Initialized MaxNormConstraint with max_value={self.max_value}, "
            f"dimensions={self.dimensions}, epsilon={self.epsilon}"
        )

    def compute_scale(self, norms: keras.KerasTensor) -> keras.KerasTensor:
        """Scale each unit down to ``max_value`` if its norm exceeds it.

        Args:
            norms: Non-negative per-unit norms, any shape.

        Returns:
            keras.KerasTensor: Scale factors with the same shape as ``norms``.
        """
        return clamp(norms, 0.0, self.max_value) / (norms + self.epsilon)

    def get_config(self) -> Dict[str, Any]:
        """Return the configuration of the constraint for serialization.

        Returns:
            Dict[str, Any]: ``max_value``, ``dimensions`` and ``epsilon``.
        """
        config = super().get_config()
        config[STR_MAX_VALUE] = self.max_value
        return config

    def __repr__(self) -> str:
        return (
            f"MaxNormConstraint(max_value={self.max_value}, "
            f"dimensions={self.dimensions}, epsilon={self.epsilon})"
        )

# ---------------------------------------------------------------------


@keras.saving.register_keras_serializable()
class UnitNormConstraint(BaseNormConstraint):
    """Rescale every unit to unit L2 norm."""

    def compute_scale(self, norms: keras.KerasTensor) -> keras.KerasTensor:
        """Scale each unit by the inverse of its norm."""
        return 1.0 / (norms + self.epsilon)

    def __repr__(self) -> str:
        return (
            f"UnitNormConstraint(dimensions={self.dimensions}, "
            f"epsilon={self.epsilon})"
        )

# ---------------------------------------------------------------------
