"""
Tube Along Path Module

Generates a tube (pipe) along a polyline using convex hulls of spheres.
Each pair of consecutive path points becomes one capsule-shaped hull; the
capsules are unioned into a single solid. This stays manifold for curved
paths where a swept profile would self-intersect.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from .csg_kernel import get_kernel
from .errors import InvalidParameterError

logger = logging.getLogger(__name__)

# Default extension beyond open path ends, as a fraction of the radius
DEFAULT_EXTENSION_FACTOR = 0.1


def _normalize(v: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(v)
    if length < 1e-12:
        return np.array([1.0, 0.0, 0.0])
    return v / length


def _validate(path: Sequence[Sequence[float]], radius: float) -> np.ndarray:
    if len(path) < 2:
        raise InvalidParameterError("Path must have at least 2 points")
    if radius <= 0:
        raise InvalidParameterError(f"Tube radius must be positive, got {radius}")
    return np.asarray(path, dtype=np.float64).reshape(-1, 3)


def tube_along_path(
    path: Sequence[Sequence[float]],
    radius: float,
    segments: Optional[int] = None,
    kernel=None
):
    """
    Create a tube along a polyline path.

    Args:
        path: Sequence of 3D points (at least 2)
        radius: Tube radius
        segments: Circular segments for sphere quality (None = kernel default)
        kernel: CSG kernel (defaults to the shared manifold3d kernel)

    Returns:
        Solid representing the tube

    Raises:
        InvalidParameterError: Fewer than 2 points or non-positive radius
    """
    points = _validate(path, radius)
    kernel = kernel or get_kernel()

    sphere = kernel.sphere(radius, segments)
    spheres = [kernel.translate(sphere, p) for p in points]

    # Hull adjacent spheres into capsule segments
    pieces = [
        kernel.hull([spheres[i], spheres[i + 1]])
        for i in range(len(spheres) - 1)
    ]

    if len(pieces) == 1:
        return pieces[0]

    logger.debug(f"Unioning {len(pieces)} tube segments")
    return kernel.union(pieces)


def tube_along_path_extended(
    path: Sequence[Sequence[float]],
    radius: float,
    extension_factor: float = DEFAULT_EXTENSION_FACTOR,
    segments: Optional[int] = None,
    kernel=None
):
    """
    Create a tube that extends slightly past both path ends.

    One extra point is added before the start and after the end, displaced
    by extension_factor * radius along the local path direction, so the tube
    overlaps cleanly with whatever it is combined with.

    Args:
        path: Sequence of 3D points (at least 2)
        radius: Tube radius
        extension_factor: Extension beyond the ends as a fraction of radius
        segments: Circular segments for sphere quality
        kernel: CSG kernel

    Returns:
        Solid representing the extended tube
    """
    points = _validate(path, radius)

    start_dir = _normalize(points[0] - points[1])
    end_dir = _normalize(points[-1] - points[-2])
    ext = radius * extension_factor

    extended = np.vstack([
        points[0] + start_dir * ext,
        points,
        points[-1] + end_dir * ext,
    ])

    return tube_along_path(extended, radius, segments, kernel)
