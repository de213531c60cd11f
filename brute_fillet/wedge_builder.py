"""
Wedge/Tube Tool Builder Module

Builds the per-edge cutting tool used to round an edge by subtraction.

Algorithm (per edge):
1. TUBE: hull of two spheres placed inward of the edge endpoints so the
   resulting capsule is tangent to both adjacent faces
2. WEDGE: triangular prism covering the corner tip, shallow enough that its
   back side stays inside the tube
3. TOOL = WEDGE - TUBE, i.e. just the corner tip
4. Subtracting the tool from the solid leaves a rounded edge

The inward offset uses the sum of the two face normals, which is the true
bisector offset only for 90 degree corners. Acute or obtuse corners get an
approximate fillet.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from .csg_kernel import get_kernel
from .edge_extraction import MeshEdge
from .edge_selection import edge_direction
from .pipe_along_path import tube_along_path

logger = logging.getLogger(__name__)

# Edges shorter than this produce no tool
MIN_EDGE_LENGTH = 1e-9

# Tools with less volume than this are numerically degenerate
MIN_TOOL_VOLUME = 1e-9

# Extension of tube and wedge past each edge end, as a fraction of radius
TUBE_EXTENSION_FACTOR = 0.1

# Wedge depth along each face normal, as a fraction of radius. A wedge that
# reaches past the back of the tube leaves debris inside the solid once the
# tube is removed; 1.1 is calibrated for 90 degree corners.
WEDGE_DEPTH_FACTOR = 1.1

# Default inflation for the standalone in-face wedge
DEFAULT_WEDGE_INFLATE = 0.001


def _extended_endpoints(edge: MeshEdge, ext: float) -> Tuple[np.ndarray, np.ndarray]:
    """Edge endpoints pushed outward by ext along the edge direction."""
    direction = edge_direction(edge)
    return edge.p0 - direction * ext, edge.p1 + direction * ext


def build_fillet_tube(
    edge: MeshEdge,
    radius: float,
    segments: Optional[int] = None,
    kernel=None
):
    """
    Build the tube tangent to both faces adjacent to an edge.

    Sphere centers sit at each (extended) endpoint offset by -radius along
    each face normal.
    """
    offset = (edge.n0 + edge.n1) * radius
    start, end = _extended_endpoints(edge, radius * TUBE_EXTENSION_FACTOR)
    return tube_along_path([start - offset, end - offset], radius, segments, kernel)


def build_fillet_wedge(edge: MeshEdge, radius: float, kernel=None):
    """
    Build the corner wedge for an edge.

    Convex hull of six points: at each extended endpoint, the edge point and
    the two points pushed inward by the wedge depth along each face normal.
    """
    kernel = kernel or get_kernel()
    depth = radius * WEDGE_DEPTH_FACTOR
    start, end = _extended_endpoints(edge, radius * TUBE_EXTENSION_FACTOR)

    points: List[np.ndarray] = []
    for p in (start, end):
        points.append(p)
        points.append(p - edge.n0 * depth)
        points.append(p - edge.n1 * depth)

    return kernel.hull_points(points)


def create_fillet_cutting_tool(
    edge: MeshEdge,
    radius: float,
    segments: Optional[int] = None,
    kernel=None
):
    """
    Create the fillet cutting tool for one edge (wedge minus tube).

    Args:
        edge: Edge to round
        radius: Fillet radius
        segments: Circular segments for the tube spheres
        kernel: CSG kernel

    Returns:
        Cutting tool solid, or None for degenerate edges or tools
    """
    kernel = kernel or get_kernel()

    if edge.length < MIN_EDGE_LENGTH:
        logger.debug(f"Skipping zero-length edge {edge.key}")
        return None

    tube = build_fillet_tube(edge, radius, segments, kernel)
    wedge = build_fillet_wedge(edge, radius, kernel)
    tool = kernel.subtract(wedge, tube)

    volume = kernel.volume(tool)
    if volume < MIN_TOOL_VOLUME:
        logger.debug(f"Discarding degenerate tool for edge {edge.key} (volume={volume:.3e})")
        return None

    return tool


def _cross_normalized(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    c = np.cross(a, b)
    length = np.linalg.norm(c)
    if length < 1e-12:
        return np.array([0.0, 0.0, 1.0])
    return c / length


def in_face_offsets(edge: MeshEdge) -> Tuple[np.ndarray, np.ndarray]:
    """
    Unit directions lying in each adjacent face, perpendicular to the edge.

    Each direction is oriented by dot products against the other face's
    normal so it points away from the edge into its own face. The result does
    not depend on the order of n0 and n1.

    Returns:
        Tuple of (offset in face 0, offset in face 1)
    """
    direction = edge_direction(edge)
    offset_a = _cross_normalized(edge.n0, direction)
    offset_b = _cross_normalized(edge.n1, direction)

    # Moving into face 0 goes against face 1's normal on a convex edge
    if np.dot(offset_a, edge.n1) > 0:
        offset_a = -offset_a
    if np.dot(offset_b, edge.n0) > 0:
        offset_b = -offset_b

    return offset_a, offset_b


def build_wedge(
    edge: MeshEdge,
    distance: float,
    inflate: float = DEFAULT_WEDGE_INFLATE,
    kernel=None
):
    """
    Create a wedge solid lying along the two faces of an edge.

    The wedge is a triangular prism spanning the edge (extended by inflate
    at each end) and reaching distance + inflate into each face.

    Args:
        edge: The edge to build the wedge for
        distance: How far to reach into each face
        inflate: Extra size for boolean overlap
        kernel: CSG kernel

    Returns:
        Wedge solid
    """
    kernel = kernel or get_kernel()
    offset_a, offset_b = in_face_offsets(edge)
    d = distance + inflate
    start, end = _extended_endpoints(edge, inflate)

    points = [
        start, start + offset_a * d, start + offset_b * d,
        end, end + offset_a * d, end + offset_b * d,
    ]
    return kernel.hull_points(points)
