"""
Validated configuration values for the norm constraints.

``MinMaxNormConfig`` is built once, when the constraint is created, and reused
for every call afterwards. All validation happens here so that applying the
constraint never has to check its arguments again.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Any, Sequence, Tuple, Union

# ---------------------------------------------------------------------
# local imports
# ---------------------------------------------------------------------

from .errors import ConfigurationError

# ---------------------------------------------------------------------
# constants
# ---------------------------------------------------------------------

DEFAULT_MIN_VALUE: float = 0.0
DEFAULT_MAX_VALUE: float = 1.0
DEFAULT_RATE: float = 1.0
DEFAULT_EPSILON: float = 1e-6
DEFAULT_DIMENSIONS: Tuple[int, ...] = (0,)

STR_MIN_VALUE: str = "min_value"
STR_MAX_VALUE: str = "max_value"
STR_RATE: str = "rate"
STR_DIMENSIONS: str = "dimensions"
STR_EPSILON: str = "epsilon"

# ---------------------------------------------------------------------


def validate_float_arg(value: Any, name: str) -> float:
    """check the value is a finite real number, raise ConfigurationError if not."""
    if (
        isinstance(value, bool)
        or not isinstance(value, (float, int, np.floating, np.integer))
        or math.isinf(value)
        or math.isnan(value)
    ):
        raise ConfigurationError(name, value, "expected a finite float")
    return float(value)


def validate_dimensions(dimensions: Union[int, Sequence[int]]) -> Tuple[int, ...]:
    """Normalize the reduction axes to a non-empty tuple of ints.

    Range checks against a concrete tensor rank happen when the constraint is
    applied, since the rank is not known here.
    """
    if isinstance(dimensions, (int, np.integer)) and not isinstance(dimensions, bool):
        return (int(dimensions),)

    try:
        dims = tuple(dimensions)
    except TypeError:
        raise ConfigurationError(
            STR_DIMENSIONS, dimensions, "expected an int or a sequence of ints"
        ) from None

    if len(dims) == 0:
        raise ConfigurationError(STR_DIMENSIONS, dimensions, "at least one axis is required")

    for dim in dims:
        if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)):
            raise ConfigurationError(
                STR_DIMENSIONS, dimensions, "every axis must be an int"
            )
    return tuple(int(d) for d in dims)


def validate_epsilon(epsilon: Any) -> float:
    epsilon = validate_float_arg(epsilon, STR_EPSILON)
    if epsilon <= 0.0:
        raise ConfigurationError(STR_EPSILON, epsilon, "must be positive")
    return epsilon

# ---------------------------------------------------------------------


@dataclass(frozen=True)
class MinMaxNormConfig:
    """Bounds and rate of a min/max norm constraint.

    ``rate`` must lie in ``(0, 1]``. ``min_value`` and ``max_value`` are not
    checked against each other; if ``min_value > max_value`` the lower bound
    wins when clipping.

    Attributes:
        min_value: Minimum allowed L2 norm per unit. May be zero or negative.
        max_value: Maximum allowed L2 norm per unit.
        rate: Fraction of the clipping correction applied per call.
            ``1.0`` is a strict constraint.
    """
    min_value: float = DEFAULT_MIN_VALUE
    max_value: float = DEFAULT_MAX_VALUE
    rate: float = DEFAULT_RATE

    def __post_init__(self) -> None:
        # frozen dataclass, so normalized values go through object.__setattr__
        object.__setattr__(self, STR_MIN_VALUE, validate_float_arg(self.min_value, STR_MIN_VALUE))
        object.__setattr__(self, STR_MAX_VALUE, validate_float_arg(self.max_value, STR_MAX_VALUE))
        rate = validate_float_arg(self.rate, STR_RATE)
        if rate <= 0.0 or rate > 1.0:
            raise ConfigurationError(STR_RATE, rate, "must be in interval (0, 1]")
        object.__setattr__(self, STR_RATE, rate)

    @property
    def is_strict(self) -> bool:
        """True when the full clipping correction is applied (``rate == 1``)."""
        return self.rate == 1.0

# ---------------------------------------------------------------------
