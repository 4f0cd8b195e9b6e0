import numpy as np
import pytest

from meshsmith import PolylineExtruder, TriangulationFailed, extrude_polyline
from meshsmith.gen.extrude import (
    ExtrudeStage,
    boundary_edges,
    orient_downward,
    sanitize_paths,
)

SQUARE = [(0, 0), (1, 0), (1, 1), (0, 1)]


def _signed_volume(sub):
    v = sub.vertices
    t = sub.triangles
    return float(np.einsum("ij,ij->i", v[t[:, 0]], np.cross(v[t[:, 1]], v[t[:, 2]])).sum() / 6.0)


def test_sanitize_drops_short_paths_and_closing_point():
    clean = sanitize_paths([SQUARE + [(0, 0)], [(0, 0), (1, 1)]])
    assert len(clean) == 1
    assert clean[0].shape == (4, 2)


def test_boundary_edges_wrap_around():
    edges = boundary_edges(sanitize_paths([SQUARE]))
    assert len(edges) == 4
    assert edges[-1] == ((0.0, 1.0), (0.0, 0.0))


def test_orient_downward_makes_triangles_clockwise():
    pts = np.array(SQUARE, dtype=float)
    tris = orient_downward(pts, np.array([[0, 1, 2], [0, 3, 2]]))
    assert tris.tolist() == [[0, 2, 1], [0, 3, 2]]


def test_extrude_unit_square(square_triangulator):
    ex = PolylineExtruder(square_triangulator)
    mesh = ex.run([SQUARE], 2.0, "block")

    assert ex.stage is ExtrudeStage.DONE
    assert len(square_triangulator.calls) == 1
    assert len(ex.edges) == 4
    np.testing.assert_allclose(
        ex.edge_normals,
        [[0, -1, 0], [1, 0, 0], [0, 1, 0], [-1, 0, 0]],
        atol=1e-12,
    )

    sub = mesh.submesh(0)
    # 4 bottom + 4 top + 6 per wall
    assert sub.vertex_count == 8 + 24
    assert sub.normal_count == sub.vertex_count
    assert sub.index_count == 12 + 24
    assert mesh.name == "block"

    lo, hi = mesh.bounds()
    np.testing.assert_allclose(lo, [0, 0, 0])
    np.testing.assert_allclose(hi, [1, 1, 2])
    assert _signed_volume(sub) == pytest.approx(2.0)


def test_cap_faces_point_away_from_solid(square_triangulator):
    sub = extrude_polyline([SQUARE], 1.0, triangulator=square_triangulator).submesh(0)
    v, t = sub.vertices, sub.triangles
    face_n = np.cross(v[t[:, 1]] - v[t[:, 0]], v[t[:, 2]] - v[t[:, 0]])
    assert np.all(face_n[:2, 2] < 0)   # bottom
    assert np.all(face_n[2:4, 2] > 0)  # top
    # wall faces agree with their stored normals
    walls = t[4:]
    assert np.all(np.einsum("ij,ij->i", face_n[4:], sub.normals[walls[:, 0]]) > 0)


def test_incomplete_triangulation_fails(square_triangulator):
    def half(paths):
        pts, tris = square_triangulator(paths)
        return pts, tris[:1]

    ex = PolylineExtruder(half)
    with pytest.raises(TriangulationFailed):
        ex.run([SQUARE], 1.0, "broken")
    assert ex.stage is ExtrudeStage.FAILED


def test_triangulator_errors_become_triangulation_failed():
    def boom(paths):
        raise RuntimeError("engine crashed")

    ex = PolylineExtruder(boom)
    with pytest.raises(TriangulationFailed):
        ex.run([SQUARE], 1.0)
    assert ex.stage is ExtrudeStage.FAILED


def test_no_usable_path(square_triangulator):
    with pytest.raises(TriangulationFailed):
        extrude_polyline([[(0, 0), (1, 0)]], 1.0, triangulator=square_triangulator)
    assert square_triangulator.calls == []


@pytest.mark.parametrize(
    "path,area",
    [
        (SQUARE, 1.0),
        ([(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)], 3.0),
    ],
)
def test_extrude_with_earcut(path, area):
    pytest.importorskip("shapely")
    pytest.importorskip("mapbox_earcut")
    from meshsmith.gen.triangulate import triangulate_paths

    mesh = extrude_polyline(
        [path], 1.5, triangulator=lambda paths: triangulate_paths(paths, engine="earcut")
    )
    assert _signed_volume(mesh.submesh(0)) == pytest.approx(1.5 * area)
