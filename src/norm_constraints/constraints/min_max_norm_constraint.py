"""
Min/max L2 norm constraint with an optional enforcement rate.

Constrains the L2 norm of the incoming weights of every unit to lie in
``[min_value, max_value]``. Units whose norm exceeds ``max_value`` are scaled
down, units whose norm is below ``min_value`` are scaled up, and units already
inside the interval are left as they are.

For each unit ``g`` with weights ``w_g``:

1.  ``norm = ||w_g||_2``
2.  ``clipped = clamp(norm, min_value, max_value)``, computed on the raw norm
3.  ``scale = clipped / (norm + epsilon)``, the denominator uses the raw norm
    plus ``epsilon``, never the clipped one
4.  if ``rate != 1``: ``scale = rate * scale + (1 - rate)``
5.  ``w_g <- scale * w_g``

With ``rate == 1`` this is a strict projection onto the norm shell. With
``rate < 1`` the resulting norm is approximately
``rate * clipped + (1 - rate) * norm``, so repeated application moves the
weights gradually towards the interval instead of jumping there in one step.

A unit whose weights are all zero has norm ``0`` and gets a large scale
``clipped / epsilon``, which may overflow to ``inf``. Units with a zero norm
are written back as zeros instead of being multiplied, so they are never
changed, whatever ``min_value`` is. Half precision weights are rescaled in
``float32`` and cast back to their own dtype.

When ``min_value > max_value`` the lower bound wins and every nonzero unit is
rescaled to norm ``min_value``.

Example:
    >>> constraint = MinMaxNormConstraint(min_value=0.5, max_value=2.0, dimensions=0)
    >>> layer = keras.layers.Dense(64, kernel_constraint=constraint)

    >>> # Conv2D kernel (kh, kw, in, out): constrain each output filter
    >>> constraint = MinMaxNormConstraint(0.0, 3.0, rate=0.1, dimensions=(0, 1, 2))
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
    DEFAULT_MAX_VALUE,
    DEFAULT_MIN_VALUE,
    DEFAULT_RATE,
    STR_MAX_VALUE,
    STR_MIN_VALUE,
    STR_RATE,
    MinMaxNormConfig,
)
from .errors import ConfigurationError

# ---------------------------------------------------------------------


@keras.saving.register_keras_serializable()
class MinMaxNormConstraint(BaseNormConstraint):
    """Constrain the per-unit L2 norm to ``[min_value, max_value]``.

    Args:
        min_value: Minimum L2 norm per unit. May be zero or negative, in which
            case only the upper bound is effective.
        max_value: Maximum L2 norm per unit. Not checked against
            ``min_value``.
        rate: Enforcement rate in ``(0, 1]``. ``1.0`` is a strict
            constraint.
        dimensions: Axis or axes the norm is computed over. Use ``0`` for a
            ``Dense`` kernel and ``(0, 1, 2)`` for a channels-last ``Conv2D``
            kernel.
        epsilon: Added to the raw norm in the denominator.

    Raises:
        ConfigurationError: If ``rate`` is outside ``(0, 1]`` or any argument
            is not a finite number.
    """

    def __init__(
            self,
            min_value: float = DEFAULT_MIN_VALUE,
            max_value: float = DEFAULT_MAX_VALUE,
            rate: float = DEFAULT_RATE,
            dimensions: Union[int, Sequence[int]] = DEFAULT_DIMENSIONS,
            epsilon: float = DEFAULT_EPSILON,
    ) -> None:
        super().__init__(dimensions=dimensions, epsilon=epsilon)
        self.config = MinMaxNormConfig(
            min_value=min_value,
            max_value=max_value,
            rate=rate,
        )

        logger.debug(
            f"Initialized MinMaxNormConstraint with min_value={self.min_value}, "
            f"max_value={self.max_value}, rate={self.rate}, "
            f"dimensions={self.dimensions}, epsilon={self.epsilon}"
        )

    @property
    def min_value(self) -> float:
        return self.config.min_value

    @property
    def max_value(self) -> float:
        return self.config.max_value

    @property
    def rate(self) -> float:
        return self.config.rate

    def compute_scale(self, norms: keras.KerasTensor) -> keras.KerasTensor:
        """Map per-unit norms to per-unit scale factors.

        The clamp uses the raw norm while the denominator is ``norm + epsilon``.

        Args:
            norms: Non-negative per-unit norms, any shape.

        Returns:
            keras.KerasTensor: Scale factors with the same shape as ``norms``.
        """
        clipped = clamp(norms, self.min_value, self.max_value)
        scale = clipped / (norms + self.epsilon)

        if not self.config.is_strict:
            scale = scale * self.rate + (1.0 - self.rate)

        return scale

    def get_config(self) -> Dict[str, Any]:
        """Return the configuration of the constraint for serialization.

        Returns:
            Dict[str, Any]: Bounds, rate, dimensions and epsilon, enough to
                recreate this constraint with ``from_config``.
        """
        config = super().get_config()
        config.update({
            STR_MIN_VALUE: self.min_value,
            STR_MAX_VALUE: self.max_value,
            STR_RATE: self.rate,
        })
        return config

    def __repr__(self) -> str:
        """Return string representation of the constraint.

        Returns:
            str: String representation showing the constraint parameters.
        """
        return (
            f"MinMaxNormConstraint(min_value={self.min_value}, "
            f"max_value={self.max_value}, rate={self.rate}, "
            f"dimensions={self.dimensions}, epsilon={self.epsilon})"
        )

# ---------------------------------------------------------------------


def create_min_max_norm_constraint(
        min_value: float = DEFAULT_MIN_VALUE,
        max_value: float = DEFAULT_MAX_VALUE,
        rate: float = DEFAULT_RATE,
        dimensions: Union[int, Sequence[int]] = DEFAULT_DIMENSIONS,
        **kwargs: Any
) -> MinMaxNormConstraint:
    """Factory function to create min/max norm constraints.

    Unlike the class constructor, this also rejects an empty interval.

    Args:
        min_value: Minimum L2 norm per unit.
        max_value: Maximum L2 norm per unit. Must be ``>= min_value``.
        rate: Enforcement rate in ``(0, 1]``.
        dimensions: Axis or axes the norm is computed over.
        **kwargs: Additional arguments passed to ``MinMaxNormConstraint``.

    Returns:
        Configured MinMaxNormConstraint instance.

    Raises:
        ConfigurationError: If an argument is not a finite number, the rate is
            outside ``(0, 1]``, ``min_value > max_value``, or the constructor
            rejects the remaining arguments.
    """
    config = MinMaxNormConfig(min_value=min_value, max_value=max_value, rate=rate)
    if config.min_value > config.max_value:
        raise ConfigurationError(
            STR_MIN_VALUE, config.min_value, f"must be <= max_value ({config.max_value})"
        )

    logger.debug(
        f"Creating MinMaxNormConstraint with min_value={config.min_value}, "
        f"max_value={config.max_value}, rate={config.rate}, dimensions={dimensions}"
    )

    return MinMaxNormConstraint(
        min_value=config.min_value,
        max_value=config.max_value,
        rate=config.rate,
        dimensions=dimensions,
        **kwargs
    )

# ---------------------------------------------------------------------
