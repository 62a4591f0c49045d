from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol, Tuple, List, Union, Callable, Iterable, Iterator, Sequence, cast
from typing_extensions import TypeAlias, Self

import numpy as np
from numpy.typing import NDArray

#: 1. Arrays
ArrayFloat: TypeAlias = NDArray[np.floating]
ArrayFloat1D: TypeAlias = NDArray[np.floating]
ArrayFloat2D: TypeAlias = NDArray[np.floating]

ArrayLikeFloat1D: TypeAlias = Union[ArrayFloat1D, Sequence[float]]
"""A one-dimensional NumPy array of `float`
or a sequence of `float`."""

ArrayLikeFloat2D: TypeAlias = Union[ArrayFloat2D, Sequence[ArrayLikeFloat1D]]
"""A two-dimensional NumPy array of `float`
or a sequence of one-dimensional `ArrayLikeFloat1D`."""

#: 2. Geometric type-aliases, everything lives in the plane
Vector2D: TypeAlias = ArrayFloat1D
"""Two-dimensional vector
as `(2,)` NumPy array of `float`."""

VectorLike2D: TypeAlias = ArrayLikeFloat1D
"""Two-dimensional vector
as `(2,)` NumPy array or sequence of `float`."""

Vectors2D: TypeAlias = ArrayFloat2D
"""Batch of two-dimensional vectors
as `(N, 2)` NumPy array of `float`."""

Point2D: TypeAlias = ArrayFloat1D
"""Position in the plane as `(2,)` NumPy array of `float`."""

PointLike2D: TypeAlias = ArrayLikeFloat1D
"""Position in the plane as `(2,)` NumPy array or sequence of `float`."""

Points2D: TypeAlias = ArrayFloat2D
"""Batch of positions as `(N, 2)` NumPy array of `float`."""

PointsLike2D: TypeAlias = ArrayLikeFloat2D
"""Batch of positions as `(N, 2)` NumPy array or sequence of `PointLike2D`."""

Bounds2D: TypeAlias = ArrayFloat2D
"""Axis aligned rectangle as `(2, 2)` array of the form `((xmin, xmax), (ymin, ymax))`."""

BoundsLike2D: TypeAlias = Union[Bounds2D, Sequence[Sequence[float]]]
"""Anything that can be converted into `Bounds2D`."""


class CancelToken(Protocol):
    """Anything with an `is_set` method, for example `threading.Event`."""
    def is_set(self) -> bool: ...
