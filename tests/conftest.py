import numpy as np
import pytest

from meshsmith import MeshStore, MeshStoreConfig


@pytest.fixture
def store():
    """A store without the built-in catalog."""
    s = MeshStore(MeshStoreConfig(create_builtins=False))
    yield s
    s.close()


@pytest.fixture
def square_triangulator():
    """Triangulates any input as the unit square split along (0,0)-(1,1)."""
    calls = []

    def triangulate(paths):
        calls.append(paths)
        pts = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=np.float64)
        tris = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.int64)
        return pts, tris

    triangulate.calls = calls
    return triangulate
