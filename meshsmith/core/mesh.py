from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np

from meshsmith.errors import IndexOutOfRange


Vec3 = Tuple[float, float, float]
Vec2 = Tuple[float, float]


def _as_vec(args: Sequence[Any], n: int, what: str) -> Tuple[float, ...]:
    # accepts add_vertex(x, y, z) as well as add_vertex((x, y, z)) / ndarray
    if len(args) == 1:
        args = tuple(np.asarray(args[0], dtype=np.float64).reshape(-1))
    if len(args) != n:
        raise TypeError(f"{what} expects {n} floats, got {len(args)}")
    return tuple(float(a) for a in args)


def _check(i: int, n: int, what: str) -> int:
    i = int(i)
    if i < 0 or i >= n:
        raise IndexOutOfRange(f"{what} index {i} out of range [0, {n})")
    return i


class SubMesh:
    """
    One drawable geometry batch.

    Appends go into plain lists (insertion order is the vertex index space);
    the numpy properties build fresh arrays on access:

      vertices:  (N,3) float64
      normals:   (N,3) float64 (may be empty)
      texcoords: (N,2) float64 (may be empty)
      indices:   (K,)  int64, K % 3 == 0, CCW seen from the outward normal
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._vertices: List[Vec3] = []
        self._normals: List[Vec3] = []
        self._texcoords: List[Vec2] = []
        self._indices: List[int] = []

    # ---------- appends ----------
    def add_vertex(self, *xyz) -> int:
        """Append a vertex; returns its index."""
        self._vertices.append(_as_vec(xyz, 3, "add_vertex"))
        return len(self._vertices) - 1

    def add_normal(self, *xyz) -> None:
        self._normals.append(_as_vec(xyz, 3, "add_normal"))

    def add_texcoord(self, *uv) -> None:
        self._texcoords.append(_as_vec(uv, 2, "add_texcoord"))

    def add_index(self, i: int) -> None:
        i = int(i)
        if i < 0:
            raise IndexOutOfRange(f"negative vertex index {i}")
        self._indices.append(i)

    def add_triangle(self, a: int, b: int, c: int) -> None:
        self.add_index(a)
        self.add_index(b)
        self.add_index(c)

    # ---------- accessors ----------
    def vertex(self, i: int) -> np.ndarray:
        return np.array(self._vertices[_check(i, len(self._vertices), "vertex")])

    def set_vertex(self, i: int, *xyz) -> None:
        self._vertices[_check(i, len(self._vertices), "vertex")] = _as_vec(xyz, 3, "set_vertex")

    def normal(self, i: int) -> np.ndarray:
        return np.array(self._normals[_check(i, len(self._normals), "normal")])

    def set_normal(self, i: int, *xyz) -> None:
        self._normals[_check(i, len(self._normals), "normal")] = _as_vec(xyz, 3, "set_normal")

    def texcoord(self, i: int) -> np.ndarray:
        return np.array(self._texcoords[_check(i, len(self._texcoords), "texcoord")])

    def set_texcoord(self, i: int, *uv) -> None:
        self._texcoords[_check(i, len(self._texcoords), "texcoord")] = _as_vec(uv, 2, "set_texcoord")

    def index(self, i: int) -> int:
        return self._indices[_check(i, len(self._indices), "index")]

    def set_index(self, i: int, value: int) -> None:
        self._indices[_check(i, len(self._indices), "index")] = int(value)

    # ---------- counts ----------
    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def normal_count(self) -> int:
        return len(self._normals)

    @property
    def texcoord_count(self) -> int:
        return len(self._texcoords)

    @property
    def index_count(self) -> int:
        return len(self._indices)

    # ---------- numpy views ----------
    @property
    def vertices(self) -> np.ndarray:
        return np.array(self._vertices, dtype=np.float64).reshape(-1, 3)

    @property
    def normals(self) -> np.ndarray:
        return np.array(self._normals, dtype=np.float64).reshape(-1, 3)

    @property
    def texcoords(self) -> np.ndarray:
        return np.array(self._texcoords, dtype=np.float64).reshape(-1, 2)

    @property
    def indices(self) -> np.ndarray:
        return np.array(self._indices, dtype=np.int64)

    @property
    def triangles(self) -> np.ndarray:
        return self.indices.reshape(-1, 3)

    # ---------- bounds ----------
    def min(self) -> np.ndarray:
        if not self._vertices:
            return np.zeros(3)
        return self.vertices.min(axis=0)

    def max(self) -> np.ndarray:
        if not self._vertices:
            return np.zeros(3)
        return self.vertices.max(axis=0)

    # ---------- normals ----------
    def recalculate_normals(self) -> None:
        """
        Recompute per-vertex normals from the triangles.

        Every triangle adds its unit face normal (cross product of its two
        edges in vertex order) to its three corners; non-zero sums are then
        normalized. Normals are resized to one per vertex.
        """
        n_v = len(self._vertices)
        acc = np.zeros((n_v, 3), dtype=np.float64)

        tris = self.triangles
        if n_v and len(tris):
            v = self.vertices
            fn = np.cross(v[tris[:, 1]] - v[tris[:, 0]], v[tris[:, 2]] - v[tris[:, 0]])
            ln = np.linalg.norm(fn, axis=1)
            ok = ln > 0
            fn[ok] /= ln[ok, None]
            fn[~ok] = 0.0
            for k in range(3):
                np.add.at(acc, tris[:, k], fn)

        ln = np.linalg.norm(acc, axis=1)
        nz = ln > 0
        acc[nz] /= ln[nz, None]
        self._normals = [tuple(map(float, n)) for n in acc]

    # ---------- transforms ----------
    def scale(self, factor: Union[float, Sequence[float]]) -> None:
        f = np.broadcast_to(np.asarray(factor, dtype=np.float64), (3,))
        self._vertices = [tuple(map(float, v * f)) for v in self.vertices]

    def translate(self, offset: Sequence[float]) -> None:
        t = np.asarray(offset, dtype=np.float64).reshape(3)
        self._vertices = [tuple(map(float, v + t)) for v in self.vertices]

    def center(self, point: Sequence[float] = (0.0, 0.0, 0.0)) -> None:
        """Translate so the AABB center lands on `point`."""
        if not self._vertices:
            return
        mid = 0.5 * (self.min() + self.max())
        self.translate(np.asarray(point, dtype=np.float64) - mid)

    def gen_spherical_texcoord(self, center: Sequence[float]) -> None:
        """Replace texcoords with a spherical projection around `center`."""
        c = np.asarray(center, dtype=np.float64).reshape(3)
        uvs: List[Vec2] = []
        for x, y, z in self.vertices - c:
            r = max(1e-6, math.sqrt(x * x + y * y + z * z))
            s = min(1.0, max(-1.0, z / r))
            t = min(1.0, max(-1.0, y / r))
            uvs.append((math.acos(s) / math.pi, math.acos(t) / math.pi))
        self._texcoords = uvs

    def copy(self) -> "SubMesh":
        sm = SubMesh(self.name)
        sm._vertices = list(self._vertices)
        sm._normals = list(self._normals)
        sm._texcoords = list(self._texcoords)
        sm._indices = list(self._indices)
        return sm

    @classmethod
    def from_arrays(
        cls,
        vertices: np.ndarray,
        faces: np.ndarray,
        normals: Optional[np.ndarray] = None,
        texcoords: Optional[np.ndarray] = None,
        name: str = "",
    ) -> "SubMesh":
        """Build a SubMesh from (N,3) vertices and (M,3) faces."""
        sm = cls(name)
        v = np.ascontiguousarray(vertices, dtype=np.float64).reshape(-1, 3)
        f = np.ascontiguousarray(faces, dtype=np.int64).reshape(-1)
        sm._vertices = [tuple(map(float, p)) for p in v]
        if normals is not None and len(normals) == len(v):
            sm._normals = [tuple(map(float, n)) for n in np.asarray(normals).reshape(-1, 3)]
        if texcoords is not None and len(texcoords) == len(v):
            sm._texcoords = [tuple(map(float, t)) for t in np.asarray(texcoords).reshape(-1, 2)]
        for i in f:
            sm.add_index(int(i))
        return sm

    def __repr__(self) -> str:
        return (
            f"SubMesh(name={self.name!r}, vertices={self.vertex_count}, "
            f"normals={self.normal_count}, indices={self.index_count})"
        )


class Mesh:
    """
    Named aggregate of SubMeshes.

    The AABB is not cached; `bounds()` scans every submesh vertex.
    """

    def __init__(self, name: str = "", path: Optional[str] = None):
        self.name = name
        self.path = path
        self.submeshes: List[SubMesh] = []

    def add_submesh(self, sub: Optional[SubMesh] = None) -> SubMesh:
        sub = sub if sub is not None else SubMesh()
        self.submeshes.append(sub)
        return sub

    def submesh(self, i: int) -> SubMesh:
        return self.submeshes[_check(i, len(self.submeshes), "submesh")]

    @property
    def submesh_count(self) -> int:
        return len(self.submeshes)

    @property
    def vertex_count(self) -> int:
        return sum(s.vertex_count for s in self.submeshes)

    @property
    def normal_count(self) -> int:
        return sum(s.normal_count for s in self.submeshes)

    @property
    def texcoord_count(self) -> int:
        return sum(s.texcoord_count for s in self.submeshes)

    @property
    def index_count(self) -> int:
        return sum(s.index_count for s in self.submeshes)

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """(min_xyz, max_xyz) over all submeshes; zeros for an empty mesh."""
        filled = [s for s in self.submeshes if s.vertex_count]
        if not filled:
            return np.zeros(3), np.zeros(3)
        lo = np.min([s.min() for s in filled], axis=0)
        hi = np.max([s.max() for s in filled], axis=0)
        return lo, hi

    def aabb(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(center, min_xyz, max_xyz)"""
        lo, hi = self.bounds()
        return 0.5 * (lo + hi), lo, hi

    def recalculate_normals(self) -> None:
        for s in self.submeshes:
            s.recalculate_normals()

    def scale(self, factor: Union[float, Sequence[float]]) -> None:
        for s in self.submeshes:
            s.scale(factor)

    def translate(self, offset: Sequence[float]) -> None:
        for s in self.submeshes:
            s.translate(offset)

    def center(self, point: Sequence[float] = (0.0, 0.0, 0.0)) -> None:
        """Translate all submeshes so the mesh AABB center lands on `point`."""
        if not self.vertex_count:
            return
        mid, _, _ = self.aabb()
        self.translate(np.asarray(point, dtype=np.float64) - mid)

    def gen_spherical_texcoord(self, center: Sequence[float]) -> None:
        for s in self.submeshes:
            s.gen_spherical_texcoord(center)

    def fill_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Render-ready buffers.

        Returns:
          vertices: (N,3) float32, all submeshes concatenated
          indices:  (K,) uint32, offset into the concatenated vertex array
        """
        verts, inds = [], []
        offset = 0
        for s in self.submeshes:
            verts.append(s.vertices)
            inds.append(s.indices + offset)
            offset += s.vertex_count
        if not verts:
            return np.zeros((0, 3), dtype=np.float32), np.zeros((0,), dtype=np.uint32)
        return (
            np.concatenate(verts).astype(np.float32),
            np.concatenate(inds).astype(np.uint32),
        )

    def to_trimesh(self, process: bool = False):
        """Concatenate all submeshes into a trimesh.Trimesh."""
        import trimesh

        v, i = self.fill_arrays()
        return trimesh.Trimesh(
            vertices=v.astype(np.float64),
            faces=i.astype(np.int64).reshape(-1, 3),
            process=process,
        )

    def copy(self) -> "Mesh":
        m = Mesh(self.name, self.path)
        m.submeshes = [s.copy() for s in self.submeshes]
        return m

    def __repr__(self) -> str:
        return (
            f"Mesh(name={self.name!r}, submeshes={self.submesh_count}, "
            f"vertices={self.vertex_count}, indices={self.index_count})"
        )
