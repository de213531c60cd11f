"""
Edge Selection Module

Selects which mesh edges get filleted.

Point-based selection: the single edge nearest to a 3D point
Angle-based selection: every edge sharper than a threshold angle

Also provides small edge utilities (direction, inward direction, sampling)
shared by the tool builders.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Sequence, Union

import numpy as np

from .edge_extraction import MeshEdge
from .errors import InvalidParameterError

logger = logging.getLogger(__name__)

# Segments with squared length below this are treated as points
DEGENERATE_SEGMENT_EPSILON = 1e-12


@dataclass(frozen=True)
class PointEdgeSelection:
    """Fillet the edge nearest to a point, optionally within max_distance."""
    point: Sequence[float]
    max_distance: Optional[float] = None

    type: ClassVar[str] = 'point'


@dataclass(frozen=True)
class AngleEdgeSelection:
    """
    Fillet every edge sharper than min_angle.

    min_angle is the sharpness in degrees (180 - dihedral angle); 80 selects
    edges whose dihedral angle is at most 100 degrees.
    """
    min_angle: float

    type: ClassVar[str] = 'angle'


EdgeSelection = Union[PointEdgeSelection, AngleEdgeSelection]


def selection_from_dict(data: dict) -> EdgeSelection:
    """
    Build a selection from a plain dictionary.

    Accepts {'type': 'point', 'point': [x, y, z], 'max_distance': d} and
    {'type': 'angle', 'min_angle': a}; camelCase keys (maxDistance, minAngle)
    are accepted too.

    Raises:
        InvalidParameterError: Unknown type or missing fields
    """
    selection_type = data.get('type')

    if selection_type == 'point':
        point = data.get('point')
        if point is None or len(point) != 3:
            raise InvalidParameterError("Point selection requires a 3D 'point'")
        max_distance = data.get('max_distance', data.get('maxDistance'))
        return PointEdgeSelection(
            point=tuple(float(c) for c in point),
            max_distance=None if max_distance is None else float(max_distance)
        )

    if selection_type == 'angle':
        min_angle = data.get('min_angle', data.get('minAngle'))
        if min_angle is None:
            raise InvalidParameterError("Angle selection requires 'min_angle'")
        return AngleEdgeSelection(min_angle=float(min_angle))

    raise InvalidParameterError(f"Unknown edge selection type: {selection_type!r}")


def select_edges(edges: List[MeshEdge], selection: EdgeSelection) -> List[MeshEdge]:
    """
    Select edges based on selection criteria.

    Args:
        edges: Candidate edges
        selection: Point or angle selection

    Returns:
        Selected edges (at most one for point selection)
    """
    if isinstance(selection, dict):
        selection = selection_from_dict(selection)

    if selection.type == 'point':
        selected = select_by_point(edges, selection)
    else:
        selected = select_by_angle(edges, selection)

    logger.debug(f"Selected {len(selected)} of {len(edges)} edges by {selection.type}")
    return selected


def select_by_point(edges: List[MeshEdge], selection: PointEdgeSelection) -> List[MeshEdge]:
    """Find the edge closest to a point."""
    if not edges:
        return []

    max_dist = np.inf if selection.max_distance is None else selection.max_distance

    p0 = np.array([edge.p0 for edge in edges])
    p1 = np.array([edge.p1 for edge in edges])
    distances = point_to_segments_distance(selection.point, p0, p1)

    # argmin returns the first edge on ties
    closest = int(np.argmin(distances))
    if distances[closest] > max_dist:
        return []

    return [edges[closest]]


def select_by_angle(edges: List[MeshEdge], selection: AngleEdgeSelection) -> List[MeshEdge]:
    """
    Find all edges sharper than a threshold angle.

    min_angle is not clamped; values outside [0, 180] select all or nothing.
    """
    threshold = 180.0 - selection.min_angle
    return [edge for edge in edges if edge.dihedral_angle <= threshold]


def point_to_segments_distance(
    point: Sequence[float],
    a: np.ndarray,
    b: np.ndarray
) -> np.ndarray:
    """
    Distance from a point to each of many line segments.

    Args:
        point: Query point (3,)
        a: (E, 3) segment start points
        b: (E, 3) segment end points

    Returns:
        (E,) distances
    """
    p = np.asarray(point, dtype=np.float64)
    a = np.asarray(a, dtype=np.float64).reshape(-1, 3)
    b = np.asarray(b, dtype=np.float64).reshape(-1, 3)

    ab = b - a
    ap = p - a
    ab_len_sq = np.einsum('ij,ij->i', ab, ab)

    degenerate = ab_len_sq < DEGENERATE_SEGMENT_EPSILON
    safe_len_sq = np.where(degenerate, 1.0, ab_len_sq)

    # Project onto the line, clamped to the segment
    t = np.clip(np.einsum('ij,ij->i', ap, ab) / safe_len_sq, 0.0, 1.0)
    t = np.where(degenerate, 0.0, t)

    closest = a + t[:, None] * ab
    return np.linalg.norm(p - closest, axis=1)


def point_to_segment_distance(
    point: Sequence[float],
    a: Sequence[float],
    b: Sequence[float]
) -> float:
    """Distance from a point to a single line segment."""
    return float(point_to_segments_distance(point, np.asarray(a), np.asarray(b))[0])


def edge_direction(edge: MeshEdge) -> np.ndarray:
    """Unit direction p0 -> p1 ([1, 0, 0] for zero-length edges)."""
    d = edge.p1 - edge.p0
    length = np.linalg.norm(d)
    if length < 1e-12:
        return np.array([1.0, 0.0, 0.0])
    return d / length


def edge_inward_direction(edge: MeshEdge) -> np.ndarray:
    """
    Direction perpendicular to the edge pointing into the solid.

    The mean of the face normals points outward from the edge; this is its
    negated, normalized value ([0, 0, 1] when the normals cancel).
    """
    n = (edge.n0 + edge.n1) / 2
    length = np.linalg.norm(n)
    if length < 1e-12:
        return np.array([0.0, 0.0, 1.0])
    return -n / length


def sample_edge(edge: MeshEdge, num_samples: int = 10) -> np.ndarray:
    """
    Evenly spaced points along an edge, endpoints included.

    Returns:
        (num_samples + 1, 3) array
    """
    t = np.linspace(0.0, 1.0, num_samples + 1)[:, None]
    return edge.p0 + t * (edge.p1 - edge.p0)
