"""
Bound fillet API.

create_fillet() returns an object whose geometry operations all use one
CSG kernel, so callers holding a custom kernel do not have to thread it
through every call.

Usage:
    from brute_fillet import create_fillet

    api = create_fillet()
    box = api.kernel.cube((10, 10, 10), center=True)
    rounded = api.fillet(box, {'radius': 1, 'selection': {'type': 'angle', 'min_angle': 80}})
"""

from typing import Optional, Sequence, Union

from .csg_kernel import get_kernel
from .edge_extraction import MeshEdge, extract_edges
from .edge_selection import (
    edge_direction,
    edge_inward_direction,
    sample_edge,
    select_edges,
)
from .fillet import FilletOptions, FilletResult, ProgressCallback, fillet, fillet_with_report
from .pipe_along_path import DEFAULT_EXTENSION_FACTOR, tube_along_path, tube_along_path_extended
from .wedge_builder import DEFAULT_WEDGE_INFLATE, build_wedge, create_fillet_cutting_tool


class FilletAPI:
    """Fillet operations bound to a specific CSG kernel."""

    # Kernel-independent helpers
    select_edges = staticmethod(select_edges)
    edge_direction = staticmethod(edge_direction)
    edge_inward_direction = staticmethod(edge_inward_direction)
    sample_edge = staticmethod(sample_edge)

    def __init__(self, kernel=None):
        self.kernel = kernel or get_kernel()

    def fillet(self, solid, options: Union[FilletOptions, dict]):
        return fillet(solid, options, self.kernel)

    def fillet_with_report(
        self,
        solid,
        options: Union[FilletOptions, dict],
        progress_callback: Optional[ProgressCallback] = None
    ) -> FilletResult:
        return fillet_with_report(solid, options, self.kernel, progress_callback)

    def extract_edges(self, mesh):
        return extract_edges(mesh, self.kernel)

    def tube_along_path(
        self,
        path: Sequence[Sequence[float]],
        radius: float,
        segments: Optional[int] = None
    ):
        return tube_along_path(path, radius, segments, self.kernel)

    def tube_along_path_extended(
        self,
        path: Sequence[Sequence[float]],
        radius: float,
        extension_factor: float = DEFAULT_EXTENSION_FACTOR,
        segments: Optional[int] = None
    ):
        return tube_along_path_extended(path, radius, extension_factor, segments, self.kernel)

    def build_wedge(self, edge: MeshEdge, distance: float, inflate: float = DEFAULT_WEDGE_INFLATE):
        return build_wedge(edge, distance, inflate, self.kernel)

    def create_cutting_tool(self, edge: MeshEdge, radius: float, segments: Optional[int] = None):
        return create_fillet_cutting_tool(edge, radius, segments, self.kernel)


def create_fillet(kernel=None) -> FilletAPI:
    """
    Create a fillet API bound to a CSG kernel.

    Args:
        kernel: CSG kernel (defaults to the shared manifold3d kernel)
    """
    return FilletAPI(kernel)
