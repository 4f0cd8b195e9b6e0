import numpy as np
import pytest

from meshsmith import IndexOutOfRange, Mesh, SubMesh


def _triangle():
    sm = SubMesh()
    sm.add_vertex(0, 0, 0)
    sm.add_vertex((1, 0, 0))
    sm.add_vertex(np.array([0.0, 1.0, 0.0]))
    sm.add_triangle(0, 1, 2)
    return sm


def test_add_vertex_returns_insertion_index():
    sm = SubMesh()
    assert sm.add_vertex(1, 2, 3) == 0
    assert sm.add_vertex((4, 5, 6)) == 1
    assert sm.vertex_count == 2
    assert sm.vertices.shape == (2, 3)
    np.testing.assert_allclose(sm.vertex(1), [4, 5, 6])


def test_add_vertex_rejects_wrong_arity():
    sm = SubMesh()
    with pytest.raises(TypeError):
        sm.add_vertex(1, 2)


def test_accessors_raise_index_out_of_range():
    sm = _triangle()
    with pytest.raises(IndexOutOfRange):
        sm.vertex(3)
    with pytest.raises(IndexOutOfRange):
        sm.set_normal(0, (0, 0, 1))  # no normals yet
    with pytest.raises(IndexError):
        sm.index(-1)
    with pytest.raises(IndexOutOfRange):
        sm.add_index(-2)


def test_recalculate_normals_single_triangle():
    sm = _triangle()
    sm.recalculate_normals()
    assert sm.normal_count == 3
    np.testing.assert_allclose(sm.normals, [[0, 0, 1]] * 3)


def test_recalculate_normals_averages_shared_corner():
    sm = SubMesh()
    for p in [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)]:
        sm.add_vertex(p)
    sm.add_triangle(0, 1, 2)  # faces +z
    sm.add_triangle(0, 2, 3)  # faces +x
    sm.recalculate_normals()

    expected = np.array([1.0, 0.0, 1.0]) / np.sqrt(2.0)
    np.testing.assert_allclose(sm.normal(0), expected)
    np.testing.assert_allclose(sm.normal(1), [0, 0, 1])
    np.testing.assert_allclose(sm.normal(3), [1, 0, 0])


def test_recalculate_normals_leaves_unreferenced_vertex_zero():
    sm = _triangle()
    sm.add_vertex(5, 5, 5)
    sm.recalculate_normals()
    np.testing.assert_allclose(sm.normal(3), [0, 0, 0])


def test_mesh_bounds_span_all_submeshes():
    m = Mesh("two")
    a = m.add_submesh()
    a.add_vertex(-1, 0, 0)
    b = m.add_submesh()
    b.add_vertex(0, 2, 3)

    lo, hi = m.bounds()
    np.testing.assert_allclose(lo, [-1, 0, 0])
    np.testing.assert_allclose(hi, [0, 2, 3])

    center, _, _ = m.aabb()
    np.testing.assert_allclose(center, [-0.5, 1.0, 1.5])


def test_empty_mesh_bounds_are_zero():
    lo, hi = Mesh().bounds()
    np.testing.assert_allclose(lo, 0)
    np.testing.assert_allclose(hi, 0)


def test_fill_arrays_offsets_indices():
    m = Mesh()
    m.add_submesh(_triangle())
    m.add_submesh(_triangle())
    verts, inds = m.fill_arrays()
    assert verts.shape == (6, 3) and verts.dtype == np.float32
    assert inds.dtype == np.uint32
    assert inds.tolist() == [0, 1, 2, 3, 4, 5]


def test_scale_translate_center():
    m = Mesh()
    m.add_submesh(_triangle())
    m.scale((2, 2, 2))
    m.translate((1, 1, 1))
    lo, hi = m.bounds()
    np.testing.assert_allclose(lo, [1, 1, 1])
    np.testing.assert_allclose(hi, [3, 3, 1])

    m.center((0, 0, 0))
    center, _, _ = m.aabb()
    np.testing.assert_allclose(center, [0, 0, 0], atol=1e-12)


def test_spherical_texcoords_replace_existing():
    sm = _triangle()
    sm.add_texcoord(9, 9)
    sm.gen_spherical_texcoord((0, 0, 0))
    assert sm.texcoord_count == sm.vertex_count
    uv = sm.texcoords
    assert np.all((uv >= 0) & (uv <= 1))
    # +x lies on the z=0, y=0 great circle -> (0.5, 0.5)
    np.testing.assert_allclose(uv[1], [0.5, 0.5])


def test_copy_is_independent():
    m = Mesh("orig")
    m.add_submesh(_triangle())
    c = m.copy()
    c.submesh(0).set_vertex(0, (7, 7, 7))
    np.testing.assert_allclose(m.submesh(0).vertex(0), [0, 0, 0])


def test_from_arrays_and_trimesh_bridge():
    sm = SubMesh.from_arrays(
        np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]]),
        np.array([[0, 1, 2]]),
    )
    m = Mesh("tri")
    m.add_submesh(sm)
    tm = m.to_trimesh()
    assert len(tm.faces) == 1
    np.testing.assert_allclose(tm.face_normals[0], [0, 0, 1])
