"""Shared helpers: package logger and the grouping utilities used by the norm constraints."""

from .logger import logger
from .tensors import (
    GroupLayout,
    clamp,
    collapse_to_groups,
    expand_from_groups,
    get_broadcast_dims,
)

__all__ = [
    "logger",
    "GroupLayout",
    "clamp",
    "collapse_to_groups",
    "expand_from_groups",
    "get_broadcast_dims",
]
