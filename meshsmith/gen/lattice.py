from __future__ import annotations

import math
from typing import Callable, Optional

import numpy as np

from meshsmith.core.mesh import SubMesh


TWO_PI = 2.0 * math.pi

RingFn = Callable[[int], float]
NormalFn = Callable[[np.ndarray], np.ndarray]


def clamp_rings(rings: int) -> int:
    return max(int(rings), 1)


def clamp_segments(segments: int) -> int:
    return max(int(segments), 3)


def radial_normal(axis: str = "z") -> NormalFn:
    """Unit normal pointing away from the sweep axis."""
    k = "xyz".index(axis)

    def fn(p: np.ndarray) -> np.ndarray:
        n = np.array(p, dtype=np.float64)
        n[k] = 0.0
        ln = np.linalg.norm(n)
        return n / ln if ln > 0 else n

    return fn


def point_normal(p: np.ndarray) -> np.ndarray:
    """Unit vector from the origin to `p` (sphere normals)."""
    ln = np.linalg.norm(p)
    return p / ln if ln > 0 else np.zeros(3)


def constant_normal(n) -> NormalFn:
    c = np.asarray(n, dtype=np.float64)
    return lambda p: c


def ring_position(radius: float, height: float, angle: float, axis: str = "z") -> np.ndarray:
    """
    Point on a ring around `axis`.

    axis "z": x = r sin(a), y = r cos(a), z = h   (cylinder family)
    axis "y": x = r sin(a), z = r cos(a), y = h   (sphere)
    """
    s, c = radius * math.sin(angle), radius * math.cos(angle)
    if axis == "z":
        return np.array([s, c, height])
    if axis == "y":
        return np.array([s, height, c])
    raise ValueError(f"Unsupported sweep axis '{axis}'. Use 'y' or 'z'.")


def sweep_lattice(
    sub: SubMesh,
    *,
    rings: int,
    segments: int,
    radius: RingFn,
    height: RingFn,
    normal: NormalFn,
    arc: float = TWO_PI,
    axis: str = "z",
    v_rings: Optional[int] = None,
) -> int:
    """
    Append a ring x segment lattice to `sub` and triangulate it.

    Rows 0..rings each hold segments+1 vertices (the seam column is
    duplicated so the first and last columns carry distinct u). Row `ring`
    gets texcoord v = ring / v_rings (v_rings defaults to rings).

    Each band between row r and r+1 gets 2*segments triangles with
    v = base + r*(segments+1) + seg:
      A = (v+segments+1, v, v+segments)   for seg in 1..segments
      B = (v+segments+1, v+1, v)          for seg in 0..segments-1
    which winds outward for axis "z" with rows climbing +z, and for axis "y"
    with rows descending from +y. Sweeping the rows the other way reverses
    the winding.

    Returns the index of the first vertex appended.
    """
    base = sub.vertex_count
    delta = arc / segments
    v_rings = v_rings or rings or 1
    stride = segments + 1

    for ring in range(rings + 1):
        r = radius(ring)
        h = height(ring)
        for seg in range(segments + 1):
            p = ring_position(r, h, seg * delta, axis)
            sub.add_vertex(p)
            sub.add_normal(normal(p))
            sub.add_texcoord(seg / segments, ring / v_rings)

    for ring in range(rings):
        for seg in range(segments + 1):
            v = base + ring * stride + seg
            if seg != 0:
                sub.add_triangle(v + segments + 1, v, v + segments)
            if seg != segments:
                sub.add_triangle(v + segments + 1, v + 1, v)

    return base


def cap_fan(
    sub: SubMesh,
    *,
    segments: int,
    radius: float,
    height: float,
    normal,
    v: float,
    up: bool,
    arc: float = TWO_PI,
) -> int:
    """
    Append a flat cap: one ring of flat-normal vertices plus a center vertex,
    then `segments` fan triangles. `up` selects the winding that faces +z.

    Returns the index of the center vertex.
    """
    delta = arc / segments
    start = sub.vertex_count
    for seg in range(segments + 1):
        sub.add_vertex(ring_position(radius, height, seg * delta))
        sub.add_normal(normal)
        sub.add_texcoord(seg / segments, v)

    center = sub.add_vertex(0.0, 0.0, height)
    sub.add_normal(normal)
    sub.add_texcoord(0.0, 0.0)

    for seg in range(segments):
        if up:
            sub.add_triangle(center, start + seg + 1, start + seg)
        else:
            sub.add_triangle(center, start + seg, start + seg + 1)
    return center
