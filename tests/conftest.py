"""Shared fixtures for brute_fillet tests."""

import numpy as np
import pytest
import trimesh

from brute_fillet import MeshEdge, get_kernel


CUBE_SIZE = 20.0
CUBE_VOLUME = CUBE_SIZE ** 3


class FakeSolid:
    """Opaque stand-in for a kernel solid."""

    def __init__(self, kind: str, name: str = ""):
        self.kind = kind
        self.name = name

    def __repr__(self):
        return f"FakeSolid({self.kind!r}, {self.name!r})"


class RecordingKernel:
    """
    Kernel double that records calls instead of doing geometry.

    Every solid shares one mesh (given at construction) and reports
    tool_volume as its volume.
    """

    def __init__(self, vertices, faces, tool_volume: float = 1.0):
        self.vertices = np.asarray(vertices, dtype=np.float64)
        self.faces = np.asarray(faces, dtype=np.int64)
        self.tool_volume = tool_volume
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name,) + args)

    def calls_named(self, name):
        return [call for call in self.calls if call[0] == name]

    def sphere(self, radius, segments=None):
        self._record('sphere', radius, segments)
        return FakeSolid('sphere')

    def translate(self, solid, offset):
        self._record('translate', solid, np.asarray(offset, dtype=np.float64))
        return FakeSolid(solid.kind, 'translated')

    def hull(self, solids):
        self._record('hull', list(solids))
        return FakeSolid('tube')

    def hull_points(self, points):
        self._record('hull_points', np.asarray(points, dtype=np.float64))
        return FakeSolid('wedge')

    def union(self, solids):
        solids = list(solids)
        self._record('union', solids)
        return solids[0] if len(solids) == 1 else FakeSolid('union')

    def subtract(self, a, b):
        self._record('subtract', a, b)
        if a.kind in ('input', 'work'):
            return FakeSolid('work')
        return FakeSolid('tool')

    def volume(self, solid):
        return self.tool_volume

    def is_empty(self, solid):
        return False

    def mesh_arrays(self, solid):
        return self.vertices, self.faces


@pytest.fixture
def kernel():
    return get_kernel()


@pytest.fixture
def cube_solid(kernel):
    """20 x 20 x 20 cube centered at the origin."""
    return kernel.cube((CUBE_SIZE, CUBE_SIZE, CUBE_SIZE), center=True)


@pytest.fixture
def box_mesh():
    """Triangulated 20 unit box: 8 vertices, 12 outward-facing triangles."""
    return trimesh.creation.box(extents=(CUBE_SIZE, CUBE_SIZE, CUBE_SIZE))


@pytest.fixture
def recording_kernel(box_mesh):
    return RecordingKernel(box_mesh.vertices, box_mesh.faces)


@pytest.fixture
def corner_edge():
    """The +x/+y vertical edge of the 20 unit cube."""
    return MeshEdge(
        v0=0,
        v1=1,
        p0=np.array([10.0, 10.0, -10.0]),
        p1=np.array([10.0, 10.0, 10.0]),
        n0=np.array([1.0, 0.0, 0.0]),
        n1=np.array([0.0, 1.0, 0.0]),
        dihedral_angle=90.0,
        faces=(0, 1),
    )


@pytest.fixture
def box_stl_bytes(box_mesh):
    return box_mesh.export(file_type='stl')
