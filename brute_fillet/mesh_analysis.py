"""
Solid Analysis Module

Diagnostics for solids before and after filleting.

Analyzes:
- Vertex and triangle counts
- Edge adjacency (manifold, boundary, non-manifold edges)
- Sharp edges that are fillet candidates
- Volume and surface area
- Bounding box dimensions
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import trimesh

from .csg_kernel import get_kernel
from .edge_extraction import EdgeAdjacencyStats, edge_adjacency_counts, extract_edges_from_arrays
from .fillet import is_fillet_candidate


@dataclass
class BoundingBox:
    """3D bounding box representation."""
    min_point: np.ndarray  # [x, y, z]
    max_point: np.ndarray  # [x, y, z]

    @property
    def size(self) -> np.ndarray:
        """Get the size (dimensions) of the bounding box."""
        return self.max_point - self.min_point

    @property
    def center(self) -> np.ndarray:
        return (self.min_point + self.max_point) / 2

    @property
    def diagonal(self) -> float:
        return float(np.linalg.norm(self.size))

    def __str__(self) -> str:
        size = self.size
        return f"Size: {size[0]:.2f} x {size[1]:.2f} x {size[2]:.2f}"


@dataclass
class SolidDiagnostics:
    """Diagnostics of a solid's boundary mesh."""
    vertex_count: int
    triangle_count: int
    edges: EdgeAdjacencyStats
    sharp_edge_count: int
    min_dihedral_angle: Optional[float]
    max_dihedral_angle: Optional[float]
    is_watertight: bool
    euler_number: int
    volume: float
    surface_area: float
    bounding_box: BoundingBox
    issues: List[str] = field(default_factory=list)

    def format(self) -> str:
        """Format diagnostics for display."""
        lines = [
            f"Vertices: {self.vertex_count:,}",
            f"Triangles: {self.triangle_count:,}",
            f"Edges: {self.edges.total_edges:,} "
            f"({self.edges.manifold_edges:,} manifold, {self.sharp_edge_count:,} sharp)",
            "",
            f"Watertight: {'✓ Yes' if self.is_watertight else '✗ No'}",
            f"Euler Number: {self.euler_number}",
        ]

        if self.min_dihedral_angle is not None:
            lines.append(f"Dihedral Range: {self.min_dihedral_angle:.1f}° - {self.max_dihedral_angle:.1f}°")

        lines.append("")
        lines.append(f"Volume: {self.volume:,.3f}")
        lines.append(f"Surface Area: {self.surface_area:,.3f}")
        lines.append(f"Bounding Box: {self.bounding_box}")

        if self.issues:
            lines.append("")
            lines.append("Issues:")
            for issue in self.issues:
                lines.append(f"  • {issue}")

        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            'vertex_count': self.vertex_count,
            'triangle_count': self.triangle_count,
            'edges': {
                'total': self.edges.total_edges,
                'manifold': self.edges.manifold_edges,
                'boundary': self.edges.boundary_edges,
                'non_manifold': self.edges.non_manifold_edges,
                'sharp': self.sharp_edge_count,
            },
            'min_dihedral_angle': self.min_dihedral_angle,
            'max_dihedral_angle': self.max_dihedral_angle,
            'is_watertight': self.is_watertight,
            'euler_number': self.euler_number,
            'volume': self.volume,
            'surface_area': self.surface_area,
            'bounding_box': {
                'min': self.bounding_box.min_point.tolist(),
                'max': self.bounding_box.max_point.tolist(),
                'size': self.bounding_box.size.tolist(),
            },
            'issues': self.issues,
        }


class SolidAnalyzer:
    """
    Solid analysis and diagnostics.

    Works on kernel solids; geometric measures come from trimesh.
    """

    def __init__(self, solid, kernel=None):
        """
        Initialize analyzer with a solid.

        Args:
            solid: The kernel solid to analyze
            kernel: CSG kernel
        """
        self.solid = solid
        self.kernel = kernel or get_kernel()
        self._diagnostics: Optional[SolidDiagnostics] = None

    def analyze(self) -> SolidDiagnostics:
        """
        Perform the analysis.

        Returns:
            SolidDiagnostics containing all analysis results
        """
        issues: List[str] = []
        vertices, faces = self.kernel.mesh_arrays(self.solid)

        adjacency = edge_adjacency_counts(faces)
        edges = extract_edges_from_arrays(vertices, faces)
        angles = [edge.dihedral_angle for edge in edges]
        sharp_count = sum(1 for edge in edges if is_fillet_candidate(edge))

        if adjacency.boundary_edges:
            issues.append(f"{adjacency.boundary_edges} boundary edges (mesh has holes)")
        if adjacency.non_manifold_edges:
            issues.append(f"{adjacency.non_manifold_edges} non-manifold edges")

        if len(faces) == 0:
            issues.append("Solid is empty")
            bounding_box = BoundingBox(np.zeros(3), np.zeros(3))
            is_watertight = False
            euler_number = 0
            surface_area = 0.0
        else:
            mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
            bounds = mesh.bounds
            bounding_box = BoundingBox(min_point=bounds[0].copy(), max_point=bounds[1].copy())
            is_watertight = bool(mesh.is_watertight)
            euler_number = int(mesh.euler_number)
            surface_area = float(mesh.area)

        self._diagnostics = SolidDiagnostics(
            vertex_count=len(vertices),
            triangle_count=len(faces),
            edges=adjacency,
            sharp_edge_count=sharp_count,
            min_dihedral_angle=min(angles) if angles else None,
            max_dihedral_angle=max(angles) if angles else None,
            is_watertight=is_watertight,
            euler_number=euler_number,
            volume=self.kernel.volume(self.solid),
            surface_area=surface_area,
            bounding_box=bounding_box,
            issues=issues,
        )
        return self._diagnostics

    @property
    def diagnostics(self) -> SolidDiagnostics:
        """Get cached diagnostics, analyzing on first access."""
        if self._diagnostics is None:
            self.analyze()
        return self._diagnostics


def analyze_solid(solid, kernel=None) -> SolidDiagnostics:
    """Convenience function to analyze a solid."""
    return SolidAnalyzer(solid, kernel).analyze()
