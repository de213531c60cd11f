"""
Edge Extraction Module

Builds the manifold edge set of a triangulated solid together with the
normals of the two adjacent faces and the dihedral angle between them.

Algorithm:
1. Compute a unit normal per triangle (cross product of two edge vectors)
2. Key each triangle edge by its unordered vertex pair
3. Keep only edges shared by exactly two triangles
4. Dihedral angle = acos(clamp(n0 . n1, -1, 1)) in degrees

Boundary and non-manifold edges are dropped silently, so malformed input
yields fewer edges instead of an error.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np
import trimesh

from .csg_kernel import get_kernel

logger = logging.getLogger(__name__)

# Normals shorter than this (zero-area triangles) are left unnormalized
NORMAL_EPSILON = 1e-12


@dataclass(frozen=True, eq=False)
class MeshEdge:
    """
    A manifold edge of a triangle mesh.

    The normals n0/n1 are stored in the order the adjacent triangles were
    encountered. Consumers must not assume any handedness between them.
    """
    v0: int
    v1: int
    p0: np.ndarray  # [x, y, z]
    p1: np.ndarray  # [x, y, z]
    n0: np.ndarray  # unit normal of first adjacent triangle
    n1: np.ndarray  # unit normal of second adjacent triangle
    # Angle between the face normals in degrees: 0 for coplanar faces,
    # 90 for a right-angle corner
    dihedral_angle: float
    faces: Tuple[int, int] = (-1, -1)

    @property
    def key(self) -> Tuple[int, int]:
        """Unordered vertex pair, smaller index first."""
        return (min(self.v0, self.v1), max(self.v0, self.v1))

    @property
    def vector(self) -> np.ndarray:
        return self.p1 - self.p0

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.p1 - self.p0))

    @property
    def midpoint(self) -> np.ndarray:
        return (self.p0 + self.p1) / 2

    @property
    def sharpness(self) -> float:
        """Sharpness angle used by angle selection (180 - dihedral)."""
        return 180.0 - self.dihedral_angle

    def to_dict(self) -> dict:
        return {
            'v0': self.v0,
            'v1': self.v1,
            'p0': self.p0.tolist(),
            'p1': self.p1.tolist(),
            'n0': self.n0.tolist(),
            'n1': self.n1.tolist(),
            'faces': list(self.faces),
            'dihedral_angle': self.dihedral_angle,
        }


@dataclass
class EdgeAdjacencyStats:
    """Counts of unique edges by number of adjacent triangles."""
    total_edges: int
    manifold_edges: int      # exactly 2 triangles
    boundary_edges: int      # 1 triangle
    non_manifold_edges: int  # more than 2 triangles

    @property
    def is_closed(self) -> bool:
        return self.total_edges > 0 and self.manifold_edges == self.total_edges


MeshLike = Union[trimesh.Trimesh, Tuple[np.ndarray, np.ndarray], object]


def compute_face_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """
    Compute unit face normals.

    Degenerate triangles keep their (near) zero cross product rather than
    being divided by a zero length.

    Args:
        vertices: (N, 3) vertex positions
        faces: (M, 3) triangle vertex indices

    Returns:
        (M, 3) array of face normals
    """
    v0 = vertices[faces[:, 0]]  # (F, 3)
    v1 = vertices[faces[:, 1]]  # (F, 3)
    v2 = vertices[faces[:, 2]]  # (F, 3)

    normals = np.cross(v1 - v0, v2 - v0)  # (F, 3)
    lengths = np.linalg.norm(normals, axis=1)

    valid = lengths >= NORMAL_EPSILON
    normals[valid] /= lengths[valid, None]

    n_degenerate = int(np.count_nonzero(~valid))
    if n_degenerate:
        logger.debug(f"{n_degenerate} degenerate triangles left with unnormalized normals")

    return normals


def _triangle_edges(faces: np.ndarray) -> np.ndarray:
    """
    All triangle edges in encounter order.

    Row 3*t + k is edge k of triangle t: (i0, i1), (i1, i2), (i2, i0).

    Returns:
        (3F, 2) array of vertex index pairs
    """
    return np.stack(
        [faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]],
        axis=1
    ).reshape(-1, 2)


def _group_edges(faces: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Group triangle edges by unordered vertex pair.

    Returns:
        Tuple of (unique_keys (E, 2), counts (E,), order (3F,), starts (E,))
        where order lists half-edge rows grouped by key in encounter order
        and starts[e] is the offset of key e's group within order.
    """
    keys = np.sort(_triangle_edges(faces), axis=1)
    unique_keys, inverse, counts = np.unique(
        keys, axis=0, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)

    # Stable sort keeps triangles within a group in ascending (encounter) order
    order = np.argsort(inverse, kind='stable')
    starts = np.cumsum(counts) - counts

    return unique_keys, counts, order, starts


def _mesh_arrays(mesh: MeshLike, kernel=None) -> Tuple[np.ndarray, np.ndarray]:
    """Read (vertices, faces) from a kernel solid, trimesh mesh or array pair."""
    if isinstance(mesh, trimesh.Trimesh):
        return np.asarray(mesh.vertices), np.asarray(mesh.faces)
    if isinstance(mesh, (list, tuple)):
        vertices, faces = mesh
        return np.asarray(vertices), np.asarray(faces)
    return (kernel or get_kernel()).mesh_arrays(mesh)


def extract_edges_from_arrays(vertices: np.ndarray, faces: np.ndarray) -> List[MeshEdge]:
    """
    Extract manifold edges from vertex and face arrays.

    Args:
        vertices: (N, 3+) vertex buffer; positions are the first 3 columns
        faces: (M, 3) triangle vertex indices

    Returns:
        List of MeshEdge, one per edge shared by exactly two triangles
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    if vertices.ndim == 2 and vertices.shape[1] > 3:
        vertices = vertices[:, :3]
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)

    if len(faces) == 0:
        return []

    face_normals = compute_face_normals(vertices, faces)
    unique_keys, counts, order, starts = _group_edges(faces)

    manifold = np.where(counts == 2)[0]
    if len(manifold) == 0:
        return []

    # Half-edge row // 3 is the owning triangle
    first_tri = order[starts[manifold]] // 3
    second_tri = order[starts[manifold] + 1] // 3

    n0 = face_normals[first_tri]
    n1 = face_normals[second_tri]
    dots = np.clip(np.einsum('ij,ij->i', n0, n1), -1.0, 1.0)
    angles = np.degrees(np.arccos(dots))

    edge_keys = unique_keys[manifold]
    p0 = vertices[edge_keys[:, 0]]
    p1 = vertices[edge_keys[:, 1]]

    edges = [
        MeshEdge(
            v0=int(edge_keys[i, 0]),
            v1=int(edge_keys[i, 1]),
            p0=p0[i],
            p1=p1[i],
            n0=n0[i],
            n1=n1[i],
            dihedral_angle=float(angles[i]),
            faces=(int(first_tri[i]), int(second_tri[i])),
        )
        for i in range(len(manifold))
    ]

    skipped = len(unique_keys) - len(edges)
    if skipped:
        logger.debug(f"Skipped {skipped} boundary or non-manifold edges")

    return edges


def extract_edges(mesh: MeshLike, kernel=None) -> List[MeshEdge]:
    """
    Extract manifold edges with dihedral angles from a mesh.

    Args:
        mesh: Kernel solid, trimesh.Trimesh, or (vertices, faces) pair

    Returns:
        List of MeshEdge
    """
    vertices, faces = _mesh_arrays(mesh, kernel)
    edges = extract_edges_from_arrays(vertices, faces)
    logger.debug(f"Extracted {len(edges)} manifold edges from {len(faces)} triangles")
    return edges


def edge_adjacency_counts(faces: np.ndarray) -> EdgeAdjacencyStats:
    """
    Count unique edges by how many triangles share them.

    Args:
        faces: (M, 3) triangle vertex indices

    Returns:
        EdgeAdjacencyStats
    """
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if len(faces) == 0:
        return EdgeAdjacencyStats(0, 0, 0, 0)

    _, counts, _, _ = _group_edges(faces)
    return EdgeAdjacencyStats(
        total_edges=int(len(counts)),
        manifold_edges=int(np.count_nonzero(counts == 2)),
        boundary_edges=int(np.count_nonzero(counts == 1)),
        non_manifold_edges=int(np.count_nonzero(counts > 2)),
    )
