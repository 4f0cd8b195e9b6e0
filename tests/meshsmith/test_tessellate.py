import numpy as np

from meshsmith import MeshStore, SubMesh
from meshsmith.gen.tessellate import tessellate_grid


def _grid(width, height):
    sub = SubMesh()
    for row in range(height):
        for col in range(width):
            sub.add_vertex(col, row, 0)
    return sub


def _face_z(sub):
    v, t = sub.vertices, sub.triangles
    return np.cross(v[t[:, 1]] - v[t[:, 0]], v[t[:, 2]] - v[t[:, 0]])[:, 2]


def test_three_by_two_grid():
    sub = _grid(3, 2)
    assert tessellate_grid(sub, 3, 2) == 4
    assert sub.indices.tolist() == [3, 0, 4, 4, 0, 1, 4, 1, 5, 5, 1, 2]
    assert np.all(_face_z(sub) > 0)


def test_double_sided_adds_reversed_faces():
    sub = _grid(3, 2)
    assert tessellate_grid(sub, 3, 2, double_sided=True) == 8
    assert sub.index_count == 24
    z = _face_z(sub)
    assert np.all(z[:4] > 0)
    assert np.all(z[4:] < 0)
    assert sub.indices[12:18].tolist() == [0, 3, 1, 1, 3, 4]


def test_degenerate_grid_emits_nothing():
    sub = _grid(1, 4)
    assert tessellate_grid(sub, 1, 4) == 0
    assert sub.index_count == 0


def test_store_exposes_tessellation():
    sub = _grid(4, 4)
    assert MeshStore.tessellate_2d_mesh(sub, 4, 4) == 18
    assert sub.indices.max() == 15
