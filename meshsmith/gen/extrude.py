from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from meshsmith.core.mesh import Mesh, SubMesh
from meshsmith.errors import MeshError, TriangulationFailed

logger = logging.getLogger(__name__)


# paths -> (points (N,2), triangles (M,3))
Triangulator = Callable[[List[np.ndarray]], Tuple[np.ndarray, np.ndarray]]

Edge = Tuple[Tuple[float, float], Tuple[float, float]]


class ExtrudeStage(Enum):
    SANITIZE = "sanitize"
    TRIANGULATE = "triangulate"
    CLASSIFY = "classify_boundary_edges"
    RESOLVE = "resolve_outward_normals"
    BUILD = "build_caps_and_walls"
    DONE = "done"
    FAILED = "failed"


def sanitize_paths(paths: Sequence[Sequence[Sequence[float]]]) -> List[np.ndarray]:
    """
    Drop paths with fewer than 3 points and a trailing point that repeats
    the first one (the closing edge is implicit).
    """
    out: List[np.ndarray] = []
    for p in paths:
        a = np.asarray(p, dtype=np.float64).reshape(-1, 2)
        if len(a) < 3:
            continue
        if np.array_equal(a[0], a[-1]):
            a = a[:-1]
        out.append(a)
    return out


def boundary_edges(paths: Sequence[np.ndarray]) -> List[Edge]:
    """Every consecutive pair of every path, including the wrap-around."""
    edges: List[Edge] = []
    for p in paths:
        pts = [(float(x), float(y)) for x, y in p]
        for j in range(1, len(pts)):
            edges.append((pts[j - 1], pts[j]))
        edges.append((pts[-1], pts[0]))
    return edges


def _unit(v: np.ndarray) -> np.ndarray:
    ln = np.linalg.norm(v)
    return v / ln if ln > 0 else v


def resolve_outward_normals(
    edges: Sequence[Edge],
    points: np.ndarray,
    triangles: np.ndarray,
) -> List[np.ndarray]:
    """
    Outward 3D normal (z=0) for each boundary edge.

    For every triangle holding both edge endpoints, the perpendicular that
    points away from the triangle's third corner is kept. One normal is
    recorded per matching triangle, so a consistent triangulation yields
    exactly one per edge.
    """
    corners = [[(float(x), float(y)) for x, y in points[t]] for t in triangles]
    normals: List[np.ndarray] = []

    for p0, p1 in edges:
        for tri in corners:
            if p0 not in tri:
                continue
            ev0 = tri.index(p0)
            ev1 = -1
            for k in (1, 2):
                idx = (ev0 + k) % 3
                if tri[idx] == p1:
                    ev1 = idx
                    break
            if ev1 < 0:
                continue
            ev2 = 3 - ev0 - ev1

            a = np.array(tri[ev0])
            edge_dir = _unit(a - np.array(tri[ev1]))
            n = np.array([edge_dir[1], -edge_dir[0]])
            other = _unit(a - np.array(tri[ev2]))
            s0 = float(other @ n)
            s1 = float(other @ -n)

            if s0 > s1:
                if s0 >= 0:
                    normals.append(np.array([n[0], n[1], 0.0]))
            elif s1 >= 0:
                normals.append(np.array([-n[0], -n[1], 0.0]))
    return normals


def orient_downward(points: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Reorder triangles so each is clockwise seen from +z (faces -z)."""
    tris = np.array(triangles, dtype=np.int64).reshape(-1, 3)
    if not len(tris):
        return tris
    a, b, c = points[tris[:, 0]], points[tris[:, 1]], points[tris[:, 2]]
    area = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    ccw = area > 0
    tris[ccw] = tris[ccw][:, [0, 2, 1]]
    return tris


class PolylineExtruder:
    """
    Extrude closed 2D paths along +Z into a solid.

    Stages: sanitize -> triangulate -> classify boundary edges -> resolve
    outward normals -> build caps and walls. `stage` holds the last stage
    entered (FAILED if the run raised).
    """

    def __init__(self, triangulator: Optional[Triangulator] = None):
        if triangulator is None:
            from meshsmith.gen.triangulate import triangulate_paths
            triangulator = triangulate_paths
        self.triangulator = triangulator
        self.stage = ExtrudeStage.SANITIZE
        self.edges: List[Edge] = []
        self.edge_normals: List[np.ndarray] = []

    def run(self, paths, height: float, name: str = "") -> Mesh:
        try:
            return self._run(paths, float(height), name)
        except MeshError:
            self.stage = ExtrudeStage.FAILED
            logger.error("Unable to extrude polyline '%s'", name)
            raise

    def _run(self, paths, height: float, name: str) -> Mesh:
        self.stage = ExtrudeStage.SANITIZE
        clean = sanitize_paths(paths)
        if not clean:
            raise TriangulationFailed("No path with at least 3 points.")

        self.stage = ExtrudeStage.TRIANGULATE
        try:
            points, triangles = self.triangulator(clean)
        except MeshError:
            raise
        except Exception as e:
            raise TriangulationFailed(f"Triangulation error: {e}") from e
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        if not len(triangles):
            raise TriangulationFailed("Triangulation returned no triangles.")

        self.stage = ExtrudeStage.CLASSIFY
        self.edges = boundary_edges(clean)

        self.stage = ExtrudeStage.RESOLVE
        self.edge_normals = resolve_outward_normals(self.edges, points, triangles)
        if len(self.edge_normals) != len(self.edges):
            raise TriangulationFailed(
                f"Resolved {len(self.edge_normals)} edge normals for {len(self.edges)} boundary edges."
            )

        self.stage = ExtrudeStage.BUILD
        mesh = Mesh(name)
        sub = mesh.add_submesh()
        self._caps(sub, points, orient_downward(points, triangles), height)
        self._walls(sub, height)

        self.stage = ExtrudeStage.DONE
        return mesh

    def _caps(self, sub: SubMesh, points: np.ndarray, tris: np.ndarray, height: float) -> None:
        n = len(points)
        for x, y in points:
            sub.add_vertex(x, y, 0.0)
            sub.add_normal(0.0, 0.0, -1.0)
        for x, y in points:
            sub.add_vertex(x, y, height)
            sub.add_normal(0.0, 0.0, 1.0)

        for i0, i1, i2 in tris:
            sub.add_triangle(i0, i1, i2)
        for i0, i1, i2 in tris:
            sub.add_triangle(n + i0, n + i2, n + i1)

    def _walls(self, sub: SubMesh, height: float) -> None:
        # six unshared vertices per edge so every wall keeps a flat normal
        for (p0, p1), normal in zip(self.edges, self.edge_normals):
            edge = np.array([p1[0] - p0[0], p1[1] - p0[1], 0.0])
            up = np.cross(edge, normal)[2] > 0

            b0, t0 = (p0[0], p0[1], 0.0), (p0[0], p0[1], height)
            b1, t1 = (p1[0], p1[1], 0.0), (p1[0], p1[1], height)
            quad = (b0, t0, t1, b0, t1, b1) if up else (b0, t1, t0, b0, b1, t1)

            for v in quad:
                sub.add_index(sub.add_vertex(v))
                sub.add_normal(normal)


def extrude_polyline(
    paths,
    height: float,
    *,
    name: str = "",
    triangulator: Optional[Triangulator] = None,
) -> Mesh:
    """Convenience wrapper around PolylineExtruder.run()."""
    return PolylineExtruder(triangulator).run(paths, height, name)
