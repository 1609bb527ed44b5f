"""
Group bookkeeping for per-unit norm constraints.

A norm constraint reduces a weight tensor over a set of axes, producing one
norm per "unit" (one per index combination of the remaining axes), and then
multiplies each unit's weights by a scale factor derived from that norm.

Instead of relying on implicit broadcasting with ``keepdims``, the weights are
laid out explicitly as a 2D matrix:

1.  **Collapse**: the kept (broadcast) axes are moved to the front and the
    reduction axes to the back, then the tensor is reshaped to
    ``(num_groups, group_size)``. Row ``g`` holds every element of group ``g``.
2.  **Expand**: the exact inverse, reshape to the transposed shape and apply
    the inverse permutation.

For a Dense kernel ``(input_dim, units)`` reduced over axis ``0`` this yields
``(units, input_dim)``; for a Conv2D kernel ``(kh, kw, in, out)`` reduced over
``(0, 1, 2)`` it yields ``(out, kh * kw * in)``, the same layout
``reshape_to_2d`` style helpers use for orthogonality regularizers.
"""

import numpy as np
from keras import ops
from dataclasses import dataclass
from typing import Sequence, Tuple, Any

# ---------------------------------------------------------------------


@dataclass(frozen=True)
class GroupLayout:
    """Everything needed to undo ``collapse_to_groups``.

    Attributes:
        permutation: Axis order applied before reshaping (kept axes first).
        transposed_shape: Shape of the tensor after the transpose.
        num_groups: Number of rows of the collapsed matrix.
        group_size: Number of columns of the collapsed matrix.
    """
    permutation: Tuple[int, ...]
    transposed_shape: Tuple[int, ...]
    num_groups: int
    group_size: int

    @property
    def inverse_permutation(self) -> Tuple[int, ...]:
        return tuple(int(i) for i in np.argsort(self.permutation))

# ---------------------------------------------------------------------


def get_broadcast_dims(
        dimensions: Sequence[int],
        rank: int) -> Tuple[int, ...]:
    """Return the axes of a rank ``rank`` tensor that are not reduced.

    Args:
        dimensions: Reduction axes, already resolved to non-negative indices.
        rank: Rank of the tensor.

    Returns:
        Tuple of the remaining axes in ascending order.
    """
    reduced = set(dimensions)
    return tuple(axis for axis in range(rank) if axis not in reduced)

# ---------------------------------------------------------------------


def collapse_to_groups(
        weights: Any,
        dimensions: Sequence[int]) -> Tuple[Any, GroupLayout]:
    """Collapse ``weights`` to a ``(num_groups, group_size)`` matrix.

    Args:
        weights: Tensor with a fully defined static shape.
        dimensions: Reduction axes, resolved to unique non-negative indices.

    Returns:
        Tuple of the 2D grouped tensor and the ``GroupLayout`` to undo it.
    """
    shape = tuple(int(s) for s in weights.shape)
    rank = len(shape)
    reduced = tuple(dimensions)
    kept = get_broadcast_dims(reduced, rank)

    permutation = kept + reduced
    transposed_shape = tuple(shape[axis] for axis in permutation)
    num_groups = int(np.prod([shape[axis] for axis in kept], dtype=np.int64))
    group_size = int(np.prod([shape[axis] for axis in reduced], dtype=np.int64))

    layout = GroupLayout(
        permutation=permutation,
        transposed_shape=transposed_shape,
        num_groups=num_groups,
        group_size=group_size,
    )

    grouped = ops.transpose(weights, axes=permutation)
    grouped = ops.reshape(grouped, (num_groups, group_size))
    return grouped, layout

# ---------------------------------------------------------------------


def expand_from_groups(grouped: Any, layout: GroupLayout) -> Any:
    """Inverse of ``collapse_to_groups``."""
    expanded = ops.reshape(grouped, layout.transposed_shape)
    return ops.transpose(expanded, axes=layout.inverse_permutation)

# ---------------------------------------------------------------------


def clamp(x: Any, min_value: float, max_value: float) -> Any:
    """Clip ``x`` to ``[min_value, max_value]``.

    The upper bound is applied first and the lower bound last, so when
    ``min_value > max_value`` every element becomes ``min_value``.
    """
    return ops.maximum(ops.minimum(x, max_value), min_value)

# ---------------------------------------------------------------------
