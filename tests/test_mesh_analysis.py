import pytest

from brute_fillet import AngleEdgeSelection, FilletOptions, SolidAnalyzer, analyze_solid, fillet

from conftest import CUBE_VOLUME


def test_cube_diagnostics(kernel, cube_solid):
    diagnostics = analyze_solid(cube_solid, kernel)

    assert diagnostics.vertex_count == 8
    assert diagnostics.triangle_count == 12
    assert diagnostics.edges.total_edges == 18
    assert diagnostics.edges.is_closed
    assert diagnostics.sharp_edge_count == 12
    assert diagnostics.is_watertight
    assert diagnostics.euler_number == 2
    assert diagnostics.volume == pytest.approx(CUBE_VOLUME)
    assert diagnostics.surface_area == pytest.approx(2400.0)
    assert diagnostics.bounding_box.size.tolist() == pytest.approx([20.0, 20.0, 20.0])
    assert diagnostics.issues == []


def test_filleted_cube_diagnostics(kernel, cube_solid):
    options = FilletOptions(radius=2.0, selection=AngleEdgeSelection(min_angle=80.0))
    diagnostics = analyze_solid(fillet(cube_solid, options, kernel), kernel)

    assert diagnostics.is_watertight
    assert diagnostics.triangle_count > 12
    assert diagnostics.volume < CUBE_VOLUME
    assert diagnostics.bounding_box.size.tolist() == pytest.approx([20.0, 20.0, 20.0], abs=1e-4)


def test_diagnostics_are_cached(kernel, cube_solid):
    analyzer = SolidAnalyzer(cube_solid, kernel)
    first = analyzer.diagnostics
    assert analyzer.diagnostics is first


def test_format_and_dict(kernel, cube_solid):
    diagnostics = analyze_solid(cube_solid, kernel)

    text = diagnostics.format()
    assert "Triangles: 12" in text
    assert "Volume: 8,000.000" in text

    data = diagnostics.to_dict()
    assert data['edges']['sharp'] == 12
    assert data['bounding_box']['size'] == pytest.approx([20.0, 20.0, 20.0])


def test_empty_solid(kernel, cube_solid):
    empty = kernel.subtract(cube_solid, cube_solid)
    diagnostics = analyze_solid(empty, kernel)

    assert diagnostics.triangle_count == 0
    assert diagnostics.volume == 0.0
    assert "Solid is empty" in diagnostics.issues


def test_filleted_solid_converts_watertight(kernel, cube_solid):
    options = FilletOptions(radius=2.0, selection=AngleEdgeSelection(min_angle=80.0))
    rounded = fillet(cube_solid, options, kernel)

    mesh = kernel.to_trimesh(rounded)
    vertices, faces = kernel.mesh_arrays(rounded)
    assert mesh.is_watertight
    assert len(mesh.vertices) == len(vertices)
    assert len(mesh.faces) == len(faces)
    assert mesh.volume == pytest.approx(kernel.volume(rounded), rel=1e-5)
