"""
Mesh File Loader

Loads triangle mesh files (STL, OBJ, PLY, OFF) with trimesh and converts
them into kernel solids ready for filleting. Also exports solids back to
any format trimesh can write.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import trimesh

from .csg_kernel import get_kernel

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Result of a mesh file loading operation."""
    solid: Optional[object]
    mesh: Optional[trimesh.Trimesh]
    file_path: str
    file_name: str
    file_size_bytes: int
    success: bool
    error_message: Optional[str] = None
    load_time_ms: float = 0.0


class MeshLoader:
    """
    Mesh file loader producing kernel solids.

    Uses trimesh for parsing and the CSG kernel for solid construction.
    """

    SUPPORTED_EXTENSIONS = {'.stl', '.obj', '.ply', '.off'}

    def __init__(self, kernel=None):
        self.kernel = kernel or get_kernel()
        self._last_result: Optional[LoadResult] = None

    @property
    def last_result(self) -> Optional[LoadResult]:
        """Get the result of the last load operation."""
        return self._last_result

    def is_valid_mesh_file(self, file_path: str) -> Tuple[bool, str]:
        """
        Check if a file can be loaded.

        Args:
            file_path: Path to the file to check

        Returns:
            Tuple of (is_valid, error_message)
        """
        path = Path(file_path)

        if not path.exists():
            return False, f"File does not exist: {file_path}"

        if not path.is_file():
            return False, f"Path is not a file: {file_path}"

        if path.suffix.lower() not in self.SUPPORTED_EXTENSIONS:
            allowed = ', '.join(sorted(self.SUPPORTED_EXTENSIONS))
            return False, f"Unsupported file extension: {path.suffix}. Expected one of {allowed}"

        if path.stat().st_size == 0:
            return False, "File is empty"

        return True, ""

    def load(self, file_path: str) -> LoadResult:
        """
        Load a mesh file and convert it to a solid.

        Args:
            file_path: Path to the mesh file

        Returns:
            LoadResult containing the solid or error information
        """
        start_time = time.perf_counter()

        path = Path(file_path)
        file_name = path.name

        is_valid, error_msg = self.is_valid_mesh_file(file_path)
        if not is_valid:
            self._last_result = LoadResult(
                solid=None,
                mesh=None,
                file_path=str(path.absolute()),
                file_name=file_name,
                file_size_bytes=0,
                success=False,
                error_message=error_msg
            )
            return self._last_result

        file_size = path.stat().st_size

        try:
            mesh = load_trimesh(str(path))
            solid = self.kernel.from_trimesh(mesh)

            if self.kernel.is_empty(solid):
                raise ValueError("Mesh is not a closed manifold solid")

            load_time = (time.perf_counter() - start_time) * 1000
            logger.info(f"Loaded {file_name}: {len(mesh.vertices):,} vertices, "
                        f"{len(mesh.faces):,} faces in {load_time:.0f}ms")

            self._last_result = LoadResult(
                solid=solid,
                mesh=mesh,
                file_path=str(path.absolute()),
                file_name=file_name,
                file_size_bytes=file_size,
                success=True,
                load_time_ms=load_time
            )

        except Exception as e:
            load_time = (time.perf_counter() - start_time) * 1000
            logger.warning(f"Failed to load {file_name}: {e}")
            self._last_result = LoadResult(
                solid=None,
                mesh=None,
                file_path=str(path.absolute()),
                file_name=file_name,
                file_size_bytes=file_size,
                success=False,
                error_message=str(e),
                load_time_ms=load_time
            )

        return self._last_result


def load_trimesh(file_path: str, file_type: Optional[str] = None) -> trimesh.Trimesh:
    """
    Load a file as a single processed Trimesh.

    Raises:
        ValueError: The file holds no triangle geometry
    """
    mesh = trimesh.load(file_path, file_type=file_type, force='mesh')

    # Ensure we have a Trimesh object
    if isinstance(mesh, trimesh.Scene):
        geometries = list(mesh.geometry.values())
        if not geometries:
            raise ValueError("No geometry found in mesh file")
        mesh = trimesh.util.concatenate(geometries)

    if not isinstance(mesh, trimesh.Trimesh):
        raise ValueError(f"Expected Trimesh, got {type(mesh)}")

    if len(mesh.faces) == 0:
        raise ValueError("Mesh has no faces")

    mesh.process()
    return mesh


def load_mesh_file(file_path: str, kernel=None) -> LoadResult:
    """
    Convenience function to load a mesh file.

    Args:
        file_path: Path to the mesh file
        kernel: CSG kernel

    Returns:
        LoadResult containing the solid or error information
    """
    loader = MeshLoader(kernel)
    return loader.load(file_path)


def export_solid(solid, file_path: str, kernel=None) -> Path:
    """
    Write a solid to disk; the format follows the file extension.

    Returns:
        Path of the written file
    """
    kernel = kernel or get_kernel()
    path = Path(file_path)
    mesh = kernel.to_trimesh(solid)
    mesh.export(str(path))
    logger.info(f"Exported {len(mesh.faces):,} faces to {path}")
    return path
