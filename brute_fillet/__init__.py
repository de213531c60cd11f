# Brute-force fillet operations for triangulated solids
from .csg_kernel import ManifoldKernel, get_kernel
from .errors import InvalidParameterError
from .edge_extraction import (
    MeshEdge,
    EdgeAdjacencyStats,
    extract_edges,
    extract_edges_from_arrays,
    edge_adjacency_counts,
    compute_face_normals,
)
from .edge_selection import (
    PointEdgeSelection,
    AngleEdgeSelection,
    EdgeSelection,
    selection_from_dict,
    select_edges,
    point_to_segment_distance,
    edge_direction,
    edge_inward_direction,
    sample_edge,
)
from .pipe_along_path import tube_along_path, tube_along_path_extended
from .wedge_builder import (
    build_wedge,
    build_fillet_tube,
    build_fillet_wedge,
    create_fillet_cutting_tool,
)
from .fillet import (
    fillet,
    fillet_with_report,
    FilletOptions,
    FilletResult,
    SubtractionStrategy,
    DEFAULT_SEGMENTS,
)
from .api import FilletAPI, create_fillet
from .mesh_loader import MeshLoader, LoadResult, load_mesh_file, export_solid
from .mesh_analysis import SolidAnalyzer, SolidDiagnostics, analyze_solid

__version__ = "1.0.0"

__all__ = [
    'ManifoldKernel',
    'get_kernel',
    'InvalidParameterError',
    # Edge extraction
    'MeshEdge',
    'EdgeAdjacencyStats',
    'extract_edges',
    'extract_edges_from_arrays',
    'edge_adjacency_counts',
    'compute_face_normals',
    # Edge selection
    'PointEdgeSelection',
    'AngleEdgeSelection',
    'EdgeSelection',
    'selection_from_dict',
    'select_edges',
    'point_to_segment_distance',
    'edge_direction',
    'edge_inward_direction',
    'sample_edge',
    # Tools
    'tube_along_path',
    'tube_along_path_extended',
    'build_wedge',
    'build_fillet_tube',
    'build_fillet_wedge',
    'create_fillet_cutting_tool',
    # Fillet
    'fillet',
    'fillet_with_report',
    'FilletOptions',
    'FilletResult',
    'SubtractionStrategy',
    'DEFAULT_SEGMENTS',
    'FilletAPI',
    'create_fillet',
    # Files and diagnostics
    'MeshLoader',
    'LoadResult',
    'load_mesh_file',
    'export_solid',
    'SolidAnalyzer',
    'SolidDiagnostics',
    'analyze_solid',
]
