"""
Base class for constraints that rescale weights by a function of their L2 norm.

Every norm constraint in this package follows the same pattern:

1.  Collapse the weight tensor into one row per unit, where a unit is an index
    combination of the axes that are *not* reduced.
2.  Compute the L2 norm of every row.
3.  Turn each norm into a scale factor (this is the only part subclasses
    implement, in ``compute_scale``).
4.  Multiply each row by its scale factor and expand back to the original
    layout.

Two entry points are offered:

-   ``__call__(weights)`` is the Keras constraint hook. It is functional: it
    returns a new tensor and Keras assigns it to the variable after each
    optimizer step.
-   ``apply(param)`` mutates a ``keras.Variable`` (or anything with an
    ``assign`` method) or a ``numpy.ndarray`` in place. The rescaled values are
    fully computed before anything is written back.

Neither entry point is safe to call concurrently on the same variable; a
constraint instance itself holds only immutable configuration and can be
shared.
"""

import keras
import numpy as np
from keras import ops
from typing import Any, Dict, Sequence, Tuple, Union

# ---------------------------------------------------------------------
# local imports
# ---------------------------------------------------------------------

from norm_constraints.utils.tensors import (
    collapse_to_groups,
    expand_from_groups,
    get_broadcast_dims,
)
from .config import (
    DEFAULT_DIMENSIONS,
    DEFAULT_EPSILON,
    STR_DIMENSIONS,
    STR_EPSILON,
    validate_dimensions,
    validate_epsilon,
)
from .errors import ShapeMismatchError

# ---------------------------------------------------------------------

HALF_PRECISION_DTYPES = ("float16", "bfloat16")
MIN_COMPUTE_DTYPE: str = "float32"

# ---------------------------------------------------------------------


def compute_dtype(dtype: str) -> str:
    """Dtype the norms and scales are computed in for weights of ``dtype``.

    Half precision weights are upcast to ``float32``; ``clipped / epsilon``
    overflows ``float16`` for any ``min_value`` above roughly ``0.066``.
    Wider dtypes are kept as they are.
    """
    if dtype in HALF_PRECISION_DTYPES:
        return MIN_COMPUTE_DTYPE
    return dtype

# ---------------------------------------------------------------------


class BaseNormConstraint(keras.constraints.Constraint):
    """Shared machinery for per-unit L2 norm constraints.

    This class is not usable on its own: subclasses must override
    ``compute_scale``, which maps each unit's norm to its scale factor.
    Everything else (grouping, broadcasting, in-place writes and
    serialization of ``dimensions``/``epsilon``) is handled here.

    Args:
        dimensions: Axis or axes to compute the norm over. For a ``Dense``
            kernel of shape ``(input_dim, units)`` use ``0``. For a
            channels-last ``Conv2D`` kernel of shape
            ``(kh, kw, in_channels, out_channels)`` use ``(0, 1, 2)``.
        epsilon: Added to the norm before dividing. Must be positive.

    Raises:
        ConfigurationError: If ``dimensions`` or ``epsilon`` is invalid.
    """

    def __init__(
            self,
            dimensions: Union[int, Sequence[int]] = DEFAULT_DIMENSIONS,
            epsilon: float = DEFAULT_EPSILON,
    ) -> None:
        self.dimensions = validate_dimensions(dimensions)
        self.epsilon = validate_epsilon(epsilon)

    # -----------------------------------------------------------------
    # dimension handling
    # -----------------------------------------------------------------

    def resolve_dimensions(self, rank: int) -> Tuple[int, ...]:
        """Resolve the configured axes against a tensor of the given rank.

        Args:
            rank: Rank of the tensor the constraint is about to be applied to.

        Returns:
            The reduction axes as unique non-negative indices, in the
            configured order.

        Raises:
            ShapeMismatchError: If the tensor is a scalar, an axis is out of
                range, or two axes refer to the same dimension.
        """
        if rank == 0:
            raise ShapeMismatchError(
                f"Cannot apply {self.__class__.__name__} to a scalar tensor"
            )

        resolved = []
        for dim in self.dimensions:
            if not -rank <= dim < rank:
                raise ShapeMismatchError(
                    f"Dimension {dim} is out of range for a tensor of rank {rank}, "
                    f"configured dimensions={self.dimensions}"
                )
            axis = dim % rank
            if axis in resolved:
                raise ShapeMismatchError(
                    f"Dimension {dim} repeats axis {axis} for a tensor of rank {rank}, "
                    f"configured dimensions={self.dimensions}"
                )
            resolved.append(axis)
        return tuple(resolved)

    def get_broadcast_dims(self, rank: int) -> Tuple[int, ...]:
        """Axes of a rank ``rank`` tensor that index the units."""
        return get_broadcast_dims(self.resolve_dimensions(rank), rank)

    # -----------------------------------------------------------------
    # norm computation
    # -----------------------------------------------------------------

    def group_norms(self, weights: Any) -> keras.KerasTensor:
        """Per-unit L2 norms, flattened to shape ``(num_groups,)``.

        Units are ordered as the row-major enumeration of the broadcast axes.
        Norms of half precision weights are returned in ``float32``.
        """
        weights = ops.convert_to_tensor(weights)
        dtype = keras.backend.standardize_dtype(weights.dtype)
        dimensions = self.resolve_dimensions(len(weights.shape))
        grouped, _ = collapse_to_groups(weights, dimensions)
        grouped = ops.cast(grouped, compute_dtype(dtype))
        return ops.sqrt(ops.sum(ops.square(grouped), axis=1))

    def compute_scale(self, norms: keras.KerasTensor) -> keras.KerasTensor:
        """Map per-unit norms to per-unit scale factors.

        Args:
            norms: Non-negative norms, any shape.

        Returns:
            Scale factors with the same shape as ``norms``.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement compute_scale"
        )

    # -----------------------------------------------------------------
    # application
    # -----------------------------------------------------------------

    def __call__(self, weights: Any) -> keras.KerasTensor:
        """Return ``weights`` with every unit rescaled by ``compute_scale``.

        Args:
            weights: Floating point tensor with a fully defined shape.

        Returns:
            Tensor of the same shape and dtype as ``weights``.

        Raises:
            ShapeMismatchError: If the reduction axes do not fit the tensor.
        """
        weights = ops.convert_to_tensor(weights)
        dtype = keras.backend.standardize_dtype(weights.dtype)
        dimensions = self.resolve_dimensions(len(weights.shape))

        grouped, layout = collapse_to_groups(weights, dimensions)
        grouped = ops.cast(grouped, compute_dtype(dtype))
        norms = ops.sqrt(ops.sum(ops.square(grouped), axis=1, keepdims=True))
        scale = ops.cast(self.compute_scale(norms), grouped.dtype)

        # an all-zero unit can get an infinite scale, and 0 * inf is nan
        constrained = ops.where(norms > 0.0, grouped * scale, ops.zeros_like(grouped))

        return ops.cast(expand_from_groups(constrained, layout), dtype)

    def apply(self, param: Any) -> None:
        """Rescale ``param`` in place.

        Args:
            param: A ``keras.Variable`` (or any object exposing ``assign``) or
                a writable ``numpy.ndarray``.

        Raises:
            ShapeMismatchError: If the reduction axes do not fit the tensor.
                ``param`` is left untouched.
            TypeError: If ``param`` cannot be updated in place.
        """
        if isinstance(param, np.ndarray):
            constrained = self(param)
            param[...] = ops.convert_to_numpy(constrained)
        elif hasattr(param, "assign"):
            constrained = self(param)
            param.assign(ops.cast(constrained, param.dtype))
        else:
            raise TypeError(
                f"{self.__class__.__name__}.apply needs a variable or a numpy array "
                f"to update in place, got {type(param).__name__}; "
                f"call the constraint directly to get a new tensor"
            )

    # -----------------------------------------------------------------
    # serialization
    # -----------------------------------------------------------------

    def get_config(self) -> Dict[str, Any]:
        """Return the configuration of the constraint for serialization.

        Returns:
            Dict[str, Any]: ``dimensions`` (as a list) and ``epsilon``;
                subclasses add their own arguments.
        """
        return {
            STR_DIMENSIONS: list(self.dimensions),
            STR_EPSILON: self.epsilon,
        }

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "BaseNormConstraint":
        """Creates a constraint from its configuration dictionary.

        Args:
            config (Dict[str, Any]): Dictionary produced by ``get_config``.

        Returns:
            BaseNormConstraint: A new instance of ``cls`` built from ``config``.
        """
        return cls(**config)

# ---------------------------------------------------------------------
