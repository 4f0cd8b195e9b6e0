from __future__ import annotations

import importlib.util
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from meshsmith.errors import TriangulationFailed, TriangulationUnavailable

logger = logging.getLogger(__name__)


# engine name (as trimesh spells it) -> module that provides it
_ENGINE_MODULES = (
    ("earcut", "mapbox_earcut"),
    ("manifold", "manifold3d"),
    ("triangle", "triangle"),
)


def available_engines() -> List[str]:
    return [name for name, mod in _ENGINE_MODULES if importlib.util.find_spec(mod) is not None]


def triangulation_available() -> bool:
    try:
        import shapely  # noqa: F401
        import trimesh  # noqa: F401
    except Exception:
        return False
    return bool(available_engines())


def _group_shells(polygons) -> List[Tuple[int, List[int]]]:
    """
    Pair each path with the shell it sits in.

    Paths are visited largest-first; a path whose polygon lies inside an
    already accepted shell becomes one of its holes, otherwise it starts a
    new shell.
    """
    order = sorted(range(len(polygons)), key=lambda k: polygons[k].area, reverse=True)
    shells: List[Tuple[int, List[int]]] = []
    for k in order:
        for shell, holes in shells:
            if polygons[shell].contains(polygons[k]):
                holes.append(k)
                break
        else:
            shells.append((k, []))
    return shells


def triangulate_paths(
    paths: Sequence[np.ndarray],
    *,
    engine: Optional[str] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Constrained triangulation of closed 2D paths.

    Uses shapely to build (multiply connected) polygons and
    trimesh.creation.triangulate_polygon to triangulate each shell.

    Returns:
      points:    (N,2) float64, exact copies of the input coordinates
                 (engines may repeat ring-closing points)
      triangles: (M,3) int64 indices into `points`

    Raises:
      TriangulationUnavailable: shapely/trimesh, every engine or the
                                requested engine is missing
      TriangulationFailed: invalid input or empty result
    """
    if not triangulation_available():
        raise TriangulationUnavailable(
            "2D triangulation needs shapely, trimesh and one of: "
            "mapbox-earcut, manifold3d, triangle."
        )
    if engine is not None and engine not in available_engines():
        raise TriangulationUnavailable(f"Triangulation engine '{engine}' is not installed.")

    import trimesh
    from shapely.geometry import Polygon

    if not paths:
        raise TriangulationFailed("No paths to triangulate.")

    polygons = [Polygon(np.asarray(p, dtype=np.float64)) for p in paths]
    for k, poly in enumerate(polygons):
        if poly.is_empty or poly.area <= 0.0:
            raise TriangulationFailed(f"Path {k} encloses no area.")

    points: List[np.ndarray] = []
    triangles: List[np.ndarray] = []
    offset = 0
    for shell, holes in _group_shells(polygons):
        poly = Polygon(
            polygons[shell].exterior.coords,
            holes=[polygons[h].exterior.coords for h in holes],
        )
        try:
            v, f = trimesh.creation.triangulate_polygon(poly, engine=engine)
        except ImportError as e:
            raise TriangulationUnavailable(f"Triangulation engine '{engine}' is not installed.") from e
        except ValueError as e:
            raise TriangulationFailed(str(e)) from e

        v = np.asarray(v, dtype=np.float64).reshape(-1, 2)
        f = np.asarray(f, dtype=np.int64).reshape(-1, 3)
        if len(f) == 0:
            raise TriangulationFailed(f"Triangulation of path {shell} produced no triangles.")

        points.append(v)
        triangles.append(f + offset)
        offset += len(v)

    logger.debug("triangulated %d path(s) into %d triangles", len(paths), sum(len(t) for t in triangles))
    return np.concatenate(points), np.concatenate(triangles)
