import dataclasses

import numpy as np
import pytest

from brute_fillet import build_fillet_tube, build_fillet_wedge, build_wedge, create_fillet_cutting_tool
from brute_fillet.wedge_builder import in_face_offsets


def swapped(edge):
    return dataclasses.replace(edge, n0=edge.n1, n1=edge.n0)


def test_cutting_tool_is_corner_sliver(kernel, corner_edge):
    tool = create_fillet_cutting_tool(corner_edge, 2.0, segments=32, kernel=kernel)

    assert tool is not None
    # Roughly r^2 * (1 - pi/4) per unit length over the extended edge
    volume = kernel.volume(tool)
    assert 10.0 < volume < 30.0

    wedge = build_fillet_wedge(corner_edge, 2.0, kernel)
    assert volume < kernel.volume(wedge)


def test_cutting_tool_stays_near_edge(kernel, corner_edge):
    tool = create_fillet_cutting_tool(corner_edge, 2.0, segments=32, kernel=kernel)
    vertices, _ = kernel.mesh_arrays(tool)

    # The corner is at x = y = 10; nothing reaches past the wedge depth
    assert vertices[:, 0].min() >= 10.0 - 2.2 - 1e-4
    assert vertices[:, 1].min() >= 10.0 - 2.2 - 1e-4
    assert vertices[:, 0].max() <= 10.0 + 1e-4
    assert vertices[:, 1].max() <= 10.0 + 1e-4


def test_tube_is_tangent_to_both_faces(kernel, corner_edge):
    tube = build_fillet_tube(corner_edge, 2.0, segments=32, kernel=kernel)
    vertices, _ = kernel.mesh_arrays(tube)

    assert vertices[:, 0].max() == pytest.approx(10.0, abs=0.05)
    assert vertices[:, 1].max() == pytest.approx(10.0, abs=0.05)


def test_zero_length_edge_gives_no_tool(kernel, corner_edge):
    edge = dataclasses.replace(corner_edge, p1=corner_edge.p0.copy())
    assert create_fillet_cutting_tool(edge, 2.0, kernel=kernel) is None


def test_degenerate_tool_is_discarded(recording_kernel, corner_edge):
    recording_kernel.tool_volume = 0.0
    assert create_fillet_cutting_tool(corner_edge, 2.0, kernel=recording_kernel) is None


def test_in_face_offsets(corner_edge):
    offset_a, offset_b = in_face_offsets(corner_edge)

    # Into the x = 10 face (along -y) and the y = 10 face (along -x)
    np.testing.assert_allclose(offset_a, [0.0, -1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(offset_b, [-1.0, 0.0, 0.0], atol=1e-12)


def test_in_face_offsets_ignore_normal_order(corner_edge):
    offset_a, offset_b = in_face_offsets(corner_edge)
    swapped_a, swapped_b = in_face_offsets(swapped(corner_edge))

    np.testing.assert_allclose(swapped_a, offset_b, atol=1e-12)
    np.testing.assert_allclose(swapped_b, offset_a, atol=1e-12)


def test_build_wedge_volume(kernel, corner_edge):
    distance, inflate = 2.0, 0.001
    wedge = build_wedge(corner_edge, distance, inflate, kernel)

    d = distance + inflate
    expected = 0.5 * d * d * (corner_edge.length + 2 * inflate)
    assert kernel.volume(wedge) == pytest.approx(expected, rel=1e-4)


def test_build_wedge_same_for_swapped_normals(kernel, corner_edge):
    wedge = build_wedge(corner_edge, 2.0, kernel=kernel)
    other = build_wedge(swapped(corner_edge), 2.0, kernel=kernel)

    assert kernel.volume(other) == pytest.approx(kernel.volume(wedge), rel=1e-6)
    first, _ = kernel.mesh_arrays(wedge)
    second, _ = kernel.mesh_arrays(other)
    np.testing.assert_allclose(first.min(axis=0), second.min(axis=0), atol=1e-5)
    np.testing.assert_allclose(first.max(axis=0), second.max(axis=0), atol=1e-5)


def test_build_wedge_lies_on_faces(kernel, corner_edge):
    wedge = build_wedge(corner_edge, 2.0, kernel=kernel)
    vertices, _ = kernel.mesh_arrays(wedge)

    assert vertices[:, 0].max() == pytest.approx(10.0, abs=1e-5)
    assert vertices[:, 1].max() == pytest.approx(10.0, abs=1e-5)
    assert vertices[:, 0].min() == pytest.approx(10.0 - 2.001, abs=1e-5)
