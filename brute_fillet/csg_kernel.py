"""
CSG Kernel Module

Thin adapter over manifold3d, the CSG engine used for every solid operation
in the fillet pipeline:
- Primitive construction (sphere, cube, cylinder)
- Convex hulls of solids or raw points
- Boolean union and subtraction
- Volume queries and mesh access

Solids are manifold3d.Manifold objects and are treated as immutable values:
every operation returns a new solid. Any object exposing the same methods
as ManifoldKernel can be passed where a `kernel` argument is accepted.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import trimesh
from manifold3d import Manifold, Mesh, OpType

logger = logging.getLogger(__name__)


def _as_vec3(value: Sequence[float]) -> Tuple[float, float, float]:
    """Convert any length-3 sequence to a tuple of Python floats."""
    return (float(value[0]), float(value[1]), float(value[2]))


class ManifoldKernel:
    """
    CSG kernel backed by manifold3d.

    All methods are stateless; a single instance can be shared.
    """

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def sphere(self, radius: float, segments: Optional[int] = None) -> Manifold:
        """
        Create a sphere centered at the origin.

        Args:
            radius: Sphere radius
            segments: Circular segments (None lets manifold3d choose)
        """
        return Manifold.sphere(float(radius), int(segments or 0))

    def cube(self, size: Sequence[float] = (1.0, 1.0, 1.0), center: bool = False) -> Manifold:
        """Create an axis-aligned box, optionally centered at the origin."""
        if np.isscalar(size):
            size = (size, size, size)
        return Manifold.cube(_as_vec3(size), center)

    def cylinder(
        self,
        height: float,
        radius_low: float,
        radius_high: float = -1.0,
        segments: Optional[int] = None,
        center: bool = False
    ) -> Manifold:
        """Create a Z-aligned cylinder or cone."""
        return Manifold.cylinder(
            float(height), float(radius_low), float(radius_high),
            int(segments or 0), center
        )

    # ------------------------------------------------------------------
    # Hulls and booleans
    # ------------------------------------------------------------------

    def hull(self, solids: List[Manifold]) -> Manifold:
        """Convex hull of a list of solids."""
        return Manifold.batch_hull(list(solids))

    def hull_points(self, points: Sequence[Sequence[float]]) -> Manifold:
        """Convex hull of raw 3D points."""
        return Manifold.hull_points([_as_vec3(p) for p in points])

    def union(self, solids: List[Manifold]) -> Manifold:
        """Boolean union of a list of solids."""
        solids = list(solids)
        if len(solids) == 1:
            return solids[0]
        return Manifold.batch_boolean(solids, OpType.Add)

    def subtract(self, a: Manifold, b: Manifold) -> Manifold:
        """Boolean difference a - b."""
        return a - b

    def translate(self, solid: Manifold, offset: Sequence[float]) -> Manifold:
        """Rigid translation."""
        return solid.translate(_as_vec3(offset))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def volume(self, solid: Manifold) -> float:
        """Enclosed volume of a solid."""
        return float(solid.volume())

    def is_empty(self, solid: Manifold) -> bool:
        return bool(solid.is_empty())

    def mesh_arrays(self, solid: Manifold) -> Tuple[np.ndarray, np.ndarray]:
        """
        Read the indexed triangle list of a solid.

        Returns:
            Tuple of (positions (N, 3) float64, triangles (M, 3) int64).
            Positions are the first three vertex properties.
        """
        mesh = solid.to_mesh()
        properties = np.asarray(mesh.vert_properties, dtype=np.float64)
        triangles = np.asarray(mesh.tri_verts, dtype=np.int64).reshape(-1, 3)
        if properties.size == 0:
            return np.zeros((0, 3), dtype=np.float64), triangles
        return properties.reshape(len(properties), -1)[:, :3].copy(), triangles

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def from_arrays(self, vertices: np.ndarray, faces: np.ndarray) -> Manifold:
        """
        Build a solid from vertex and face arrays.

        Args:
            vertices: (N, 3) vertex positions
            faces: (M, 3) triangle vertex indices
        """
        vertices = np.asarray(vertices, dtype=np.float32)
        faces = np.asarray(faces, dtype=np.uint32)

        manifold_mesh = Mesh(vert_properties=vertices, tri_verts=faces)
        return Manifold(mesh=manifold_mesh)

    def from_trimesh(self, mesh: trimesh.Trimesh) -> Manifold:
        """Convert a trimesh mesh to a solid."""
        return self.from_arrays(mesh.vertices, mesh.faces)

    def to_trimesh(self, solid: Manifold) -> trimesh.Trimesh:
        """
        Convert a solid back to trimesh.

        The kernel mesh is already indexed and manifold. Coincident vertices
        must stay separate, so the mesh is not merged or processed.
        """
        vertices, faces = self.mesh_arrays(solid)
        return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


_default_kernel: Optional[ManifoldKernel] = None


def get_kernel() -> ManifoldKernel:
    """Get the shared default kernel instance."""
    global _default_kernel
    if _default_kernel is None:
        _default_kernel = ManifoldKernel()
        logger.debug("Created default manifold3d kernel")
    return _default_kernel
