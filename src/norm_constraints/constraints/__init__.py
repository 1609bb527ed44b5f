"""L2 norm constraints for Keras weights.

Available Constraints:
----------------------
-   `MinMaxNormConstraint`: Keeps the per-unit L2 norm inside `[min, max]`,
    optionally enforced gradually through a `rate` in `(0, 1]`.
-   `MaxNormConstraint`: Caps the per-unit L2 norm.
-   `UnitNormConstraint`: Rescales every unit to unit L2 norm.

Every constraint can be passed to a Keras layer (`kernel_constraint=...`) or
applied in place to a variable or numpy array with `apply`.
"""

from .errors import (
    ConfigurationError,
    ShapeMismatchError,
)

from .config import (
    MinMaxNormConfig,
)

from .base_constraint import (
    BaseNormConstraint,
)

from .min_max_norm_constraint import (
    MinMaxNormConstraint,
    create_min_max_norm_constraint,
)

from .max_norm_constraint import (
    MaxNormConstraint,
    UnitNormConstraint,
)


# Define the public API for the package
__all__ = [
    # Classes
    "BaseNormConstraint",
    "MaxNormConstraint",
    "MinMaxNormConfig",
    "MinMaxNormConstraint",
    "UnitNormConstraint",
    # Errors
    "ConfigurationError",
    "ShapeMismatchError",
    # Factory Functions
    "create_min_max_norm_constraint",
]
