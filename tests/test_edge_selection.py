import numpy as np
import pytest

from brute_fillet import (
    AngleEdgeSelection,
    InvalidParameterError,
    MeshEdge,
    PointEdgeSelection,
    edge_direction,
    edge_inward_direction,
    extract_edges,
    point_to_segment_distance,
    sample_edge,
    select_edges,
    selection_from_dict,
)


def make_edge(p0, p1, dihedral_angle=90.0, n0=(1.0, 0.0, 0.0), n1=(0.0, 1.0, 0.0)):
    return MeshEdge(
        v0=0,
        v1=1,
        p0=np.asarray(p0, dtype=float),
        p1=np.asarray(p1, dtype=float),
        n0=np.asarray(n0, dtype=float),
        n1=np.asarray(n1, dtype=float),
        dihedral_angle=dihedral_angle,
    )


@pytest.fixture
def box_edges(box_mesh):
    return extract_edges(box_mesh)


class TestPointSelection:

    def test_selects_single_nearest_edge(self, box_edges):
        selected = select_edges(box_edges, PointEdgeSelection(point=(10.0, 10.0, 0.0)))

        assert len(selected) == 1
        edge = selected[0]
        assert edge.dihedral_angle == pytest.approx(90.0)
        assert point_to_segment_distance((10, 10, 0), edge.p0, edge.p1) == pytest.approx(0.0)

    def test_selected_edge_is_closest(self, box_edges):
        point = (3.0, -12.0, 7.0)
        selected = select_edges(box_edges, PointEdgeSelection(point=point))[0]
        best = point_to_segment_distance(point, selected.p0, selected.p1)

        for edge in box_edges:
            assert best <= point_to_segment_distance(point, edge.p0, edge.p1) + 1e-12

    def test_max_distance_excludes_far_edges(self, box_edges):
        selection = PointEdgeSelection(point=(0.0, 0.0, 100.0), max_distance=5.0)
        assert select_edges(box_edges, selection) == []

    def test_max_distance_keeps_near_edge(self, box_edges):
        selection = PointEdgeSelection(point=(11.0, 11.0, 0.0), max_distance=2.0)
        assert len(select_edges(box_edges, selection)) == 1

    def test_empty_edge_list(self):
        assert select_edges([], PointEdgeSelection(point=(0, 0, 0))) == []

    def test_ties_go_to_first_edge(self):
        first = make_edge((-1, 1, 0), (1, 1, 0))
        second = make_edge((-1, -1, 0), (1, -1, 0))

        selected = select_edges([first, second], PointEdgeSelection(point=(0, 0, 0)))
        assert selected == [first]


class TestAngleSelection:

    def test_threshold_is_inclusive(self):
        edges = [make_edge((0, 0, 0), (1, 0, 0), dihedral_angle=a) for a in (90.0, 100.0, 100.5)]
        selected = select_edges(edges, AngleEdgeSelection(min_angle=80.0))
        assert [e.dihedral_angle for e in selected] == [90.0, 100.0]

    def test_cube_edges(self, box_edges):
        # Coplanar diagonals (dihedral 0) pass the threshold too
        selected = select_edges(box_edges, AngleEdgeSelection(min_angle=80.0))
        assert len(selected) == 18

        selected = select_edges(box_edges, AngleEdgeSelection(min_angle=170.0))
        assert len(selected) == 6

    def test_larger_min_angle_selects_subset(self, box_edges):
        for small, large in [(0.0, 45.0), (45.0, 89.0), (89.0, 91.0), (91.0, 180.0)]:
            loose = {id(e) for e in select_edges(box_edges, AngleEdgeSelection(min_angle=small))}
            strict = {id(e) for e in select_edges(box_edges, AngleEdgeSelection(min_angle=large))}
            assert strict <= loose

    def test_out_of_range_thresholds(self, box_edges):
        assert len(select_edges(box_edges, AngleEdgeSelection(min_angle=-10.0))) == 18
        assert select_edges(box_edges, AngleEdgeSelection(min_angle=200.0)) == []


class TestSelectionFromDict:

    def test_point(self):
        selection = selection_from_dict({'type': 'point', 'point': [1, 2, 3], 'maxDistance': 4})
        assert selection == PointEdgeSelection(point=(1.0, 2.0, 3.0), max_distance=4.0)

    def test_angle(self):
        assert selection_from_dict({'type': 'angle', 'minAngle': 30}) == AngleEdgeSelection(30.0)
        assert selection_from_dict({'type': 'angle', 'min_angle': 45}) == AngleEdgeSelection(45.0)

    def test_select_edges_accepts_dict(self, box_edges):
        selected = select_edges(box_edges, {'type': 'angle', 'min_angle': 170})
        assert len(selected) == 6

    @pytest.mark.parametrize('data', [
        {'type': 'sphere'},
        {},
        {'type': 'point', 'point': [1, 2]},
        {'type': 'angle'},
    ])
    def test_invalid(self, data):
        with pytest.raises(InvalidParameterError):
            selection_from_dict(data)


class TestSegmentDistance:

    def test_interior_projection(self):
        assert point_to_segment_distance((5, 3, 0), (0, 0, 0), (10, 0, 0)) == pytest.approx(3.0)

    def test_clamped_to_endpoints(self):
        assert point_to_segment_distance((-3, 4, 0), (0, 0, 0), (10, 0, 0)) == pytest.approx(5.0)
        assert point_to_segment_distance((13, 0, 4), (0, 0, 0), (10, 0, 0)) == pytest.approx(5.0)

    def test_degenerate_segment(self):
        assert point_to_segment_distance((3, 4, 0), (0, 0, 0), (0, 0, 0)) == pytest.approx(5.0)


class TestEdgeUtilities:

    def test_edge_direction(self):
        edge = make_edge((0, 0, 0), (0, 0, 4))
        np.testing.assert_allclose(edge_direction(edge), [0, 0, 1])

    def test_edge_direction_zero_length(self):
        edge = make_edge((1, 1, 1), (1, 1, 1))
        np.testing.assert_allclose(edge_direction(edge), [1, 0, 0])

    def test_inward_direction(self):
        edge = make_edge((10, 10, -10), (10, 10, 10))
        expected = -np.array([1.0, 1.0, 0.0]) / np.sqrt(2)
        np.testing.assert_allclose(edge_inward_direction(edge), expected)

    def test_inward_direction_opposed_normals(self):
        edge = make_edge((0, 0, 0), (1, 0, 0), n0=(0, 1, 0), n1=(0, -1, 0))
        np.testing.assert_allclose(edge_inward_direction(edge), [0, 0, 1])

    def test_sample_edge(self):
        edge = make_edge((0, 0, 0), (10, 0, 0))
        samples = sample_edge(edge, num_samples=5)

        assert samples.shape == (6, 3)
        np.testing.assert_allclose(samples[0], edge.p0)
        np.testing.assert_allclose(samples[-1], edge.p1)
        np.testing.assert_allclose(samples[:, 0], [0, 2, 4, 6, 8, 10])
