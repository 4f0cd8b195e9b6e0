from __future__ import annotations

import logging
import math
from typing import Any, Sequence, Tuple

import numpy as np

from meshsmith.core.mesh import Mesh
from meshsmith.gen.lattice import (
    TWO_PI,
    cap_fan,
    clamp_rings,
    clamp_segments,
    point_normal,
    radial_normal,
    sweep_lattice,
)
from meshsmith.gen.tessellate import tessellate_grid

logger = logging.getLogger(__name__)


# Unit cube corners, scaled by the half extents
_BOX_CORNERS = np.array(
    [
        [-1, -1, -1],
        [-1, -1, +1],
        [+1, -1, +1],
        [+1, -1, -1],
        [-1, +1, -1],
        [-1, +1, +1],
        [+1, +1, +1],
        [+1, +1, -1],
    ],
    dtype=np.float64,
)

_BOX_FACE_NORMALS = [
    (0.0, -1.0, 0.0),
    (0.0, +1.0, 0.0),
    (0.0, 0.0, +1.0),
    (-1.0, 0.0, 0.0),
    (0.0, 0.0, -1.0),
    (+1.0, 0.0, 0.0),
]

# four corners per face, in the order texcoords are assigned
_BOX_FACES = [
    (2, 1, 0, 3),
    (5, 6, 7, 4),
    (2, 6, 5, 1),
    (1, 5, 4, 0),
    (0, 4, 7, 3),
    (6, 2, 3, 7),
]

_BOX_INDICES = [
    0, 1, 2,
    2, 3, 0,
    4, 5, 7,
    7, 5, 6,
    11, 8, 9,
    9, 10, 11,
    12, 13, 15,
    15, 13, 14,
    16, 17, 18,
    18, 19, 16,
    21, 22, 23,
    23, 20, 21,
]

_CORNER = 1.0 / math.sqrt(3.0)


def _as_3tuple(v: Any, default: Tuple[float, float, float]) -> Tuple[float, float, float]:
    if v is None:
        return default
    if isinstance(v, (int, float)):
        x = float(v)
        return (x, x, x)
    if isinstance(v, (list, tuple, np.ndarray)) and len(v) == 3:
        return (float(v[0]), float(v[1]), float(v[2]))
    raise TypeError(f"Expected a scalar or 3-tuple, got: {type(v).__name__} {v}")


def _as_2tuple(v: Any, default: Tuple[float, float]) -> Tuple[float, float]:
    if v is None:
        return default
    if isinstance(v, (int, float)):
        x = float(v)
        return (x, x)
    if isinstance(v, (list, tuple, np.ndarray)) and len(v) == 2:
        return (float(v[0]), float(v[1]))
    raise TypeError(f"Expected a scalar or 2-tuple, got: {type(v).__name__} {v}")


def perpendicular(v: np.ndarray) -> np.ndarray:
    """A vector perpendicular to `v` (v x X, or v x Y when v is along X)."""
    p = np.cross(v, [1.0, 0.0, 0.0])
    if np.dot(p, p) < 1e-12:
        p = np.cross(v, [0.0, 1.0, 0.0])
    return p


def _plane_frame(normal: Sequence[float], d: float) -> Tuple[np.ndarray, np.ndarray]:
    """Rotation (columns x, y, z=normal) and translation -d * normal."""
    n = np.asarray(normal, dtype=np.float64)
    z = n / np.linalg.norm(n)
    y = perpendicular(z)
    y = y / np.linalg.norm(y)
    x = np.cross(y, z)
    rot = np.column_stack([x, y, z])
    return rot, n * -float(d)


# ---------------------------------------------------------------------------
# Primitive factories. Each returns a new Mesh with a single SubMesh.
# ---------------------------------------------------------------------------

def create_plane(
    name: str = "",
    *,
    normal: Sequence[float] = (0.0, 0.0, 1.0),
    d: float = 0.0,
    size: Sequence[float] = (1.0, 1.0),
    segments: Sequence[int] = (1, 1),
    uv_tile: Sequence[float] = (1.0, 1.0),
    thickness: float = 0.01,
) -> Mesh:
    """
    Grid plane of `segments` cells, oriented by `normal` and offset by `d`.

    Two vertex layers are generated (z=0 and z=-thickness in plane space) so
    the plane has a little depth for downstream shadow casting; only the
    first layer is triangulated.
    """
    sx, sy = (max(int(s), 1) for s in _as_2tuple(segments, (1, 1)))
    width, height = _as_2tuple(size, (1.0, 1.0))
    u_tile, v_tile = _as_2tuple(uv_tile, (1.0, 1.0))

    mesh = Mesh(name)
    sub = mesh.add_submesh()

    rot, offset = _plane_frame(normal, d)
    world_normal = rot @ np.array([0.0, 0.0, 1.0])

    x_space, y_space = width / sx, height / sy
    x_tex, y_tex = u_tile / sx, v_tile / sy

    for layer in range(2):
        z = -layer * float(thickness)
        for y in range(sy + 1):
            for x in range(sx + 1):
                local = np.array([x * x_space - width / 2.0, y * y_space - height / 2.0, z])
                sub.add_vertex(rot @ local + offset)
                sub.add_normal(world_normal)
                sub.add_texcoord(x * x_tex, 1.0 - y * y_tex)

    tessellate_grid(sub, sx + 1, sy + 1, False)
    return mesh


def _box_submesh(mesh: Mesh, half: np.ndarray, uv: Tuple[float, float], corner_normals: bool):
    sub = mesh.add_submesh()
    corners = _BOX_CORNERS * half[None, :]
    tex = [(uv[0], 0.0), (0.0, 0.0), (0.0, uv[1]), (uv[0], uv[1])]

    for face, corner_ids in enumerate(_BOX_FACES):
        for k, c in enumerate(corner_ids):
            sub.add_vertex(corners[c])
            if corner_normals:
                sub.add_normal(_BOX_CORNERS[c] * _CORNER)
            else:
                sub.add_normal(_BOX_FACE_NORMALS[face])
                sub.add_texcoord(tex[k])

    for i in _BOX_INDICES:
        sub.add_index(i)
    return sub


def create_box(
    name: str = "",
    *,
    sides: Any = (1.0, 1.0, 1.0),
    uv: Sequence[float] = (1.0, 1.0),
) -> Mesh:
    """Axis-aligned box centered at the origin; 24 vertices, 36 indices."""
    half = 0.5 * np.array(_as_3tuple(sides, (1.0, 1.0, 1.0)))
    mesh = Mesh(name)
    _box_submesh(mesh, half, _as_2tuple(uv, (1.0, 1.0)), corner_normals=False)
    return mesh


def create_camera(name: str = "", *, scale: float = 1.0) -> Mesh:
    """Cube of edge `scale` with corner-direction normals and no texcoords."""
    half = np.full(3, 0.5 * float(scale))
    mesh = Mesh(name)
    _box_submesh(mesh, half, (0.0, 0.0), corner_normals=True)
    mesh.recalculate_normals()
    return mesh


def create_sphere(
    name: str = "",
    *,
    radius: float = 0.5,
    rings: int = 32,
    segments: int = 32,
) -> Mesh:
    """UV sphere around +Y; (rings+1)*(segments+1) vertices."""
    rings, segments = clamp_rings(rings), clamp_segments(segments)
    radius = float(radius)
    step = math.pi / rings

    mesh = Mesh(name)
    sub = mesh.add_submesh()
    sweep_lattice(
        sub,
        rings=rings,
        segments=segments,
        radius=lambda r: radius * math.sin(r * step),
        height=lambda r: radius * math.cos(r * step),
        normal=point_normal,
        axis="y",
    )
    return mesh


def create_cylinder(
    name: str = "",
    *,
    radius: float = 0.5,
    height: float = 1.0,
    rings: int = 1,
    segments: int = 32,
) -> Mesh:
    """Capped cylinder along Z, centered at the origin."""
    rings, segments = clamp_rings(rings), clamp_segments(segments)
    radius, height = float(radius), float(height)

    mesh = Mesh(name)
    sub = mesh.add_submesh()
    sweep_lattice(
        sub,
        rings=rings,
        segments=segments,
        radius=lambda r: radius,
        height=lambda r: r * height / rings - height / 2.0,
        normal=radial_normal("z"),
    )
    cap_fan(sub, segments=segments, radius=radius, height=height / 2.0,
            normal=(0.0, 0.0, 1.0), v=1.0, up=True)
    cap_fan(sub, segments=segments, radius=radius, height=-height / 2.0,
            normal=(0.0, 0.0, -1.0), v=0.0, up=False)
    return mesh


def create_cone(
    name: str = "",
    *,
    radius: float = 0.5,
    height: float = 1.0,
    rings: int = 1,
    segments: int = 32,
) -> Mesh:
    """
    Cone along Z with its apex at +height/2.

    Lattice rows 0..rings-1 taper linearly; the apex vertex closes the top
    with a fan and a separate flat ring closes the bottom.
    """
    rings, segments = clamp_rings(rings), clamp_segments(segments)
    radius, height = float(radius), float(height)

    mesh = Mesh(name)
    sub = mesh.add_submesh()
    base = sweep_lattice(
        sub,
        rings=rings - 1,
        segments=segments,
        radius=lambda r: radius * (1.0 - r / rings),
        height=lambda r: r * height / rings - height / 2.0,
        normal=radial_normal("z"),
        v_rings=rings,
    )

    last = base + (rings - 1) * (segments + 1)
    apex = sub.add_vertex(0.0, 0.0, height / 2.0)
    sub.add_normal(0.0, 0.0, 1.0)
    sub.add_texcoord(0.0, 0.0)
    for seg in range(segments):
        sub.add_triangle(apex, last + seg + 1, last + seg)

    cap_fan(sub, segments=segments, radius=radius, height=-height / 2.0,
            normal=(0.0, 0.0, -1.0), v=0.0, up=False)

    # flatten: every triangle takes the mean of its corner normals
    for t in range(0, sub.index_count, 3):
        corners = [sub.index(t + j) for j in range(3)]
        n = sum(sub.normal(c) for c in corners) / 3.0
        ln = np.linalg.norm(n)
        if ln > 0:
            n = n / ln
        for c in corners:
            sub.set_normal(c, n)

    mesh.recalculate_normals()
    return mesh


def create_tube(
    name: str = "",
    *,
    inner_radius: float = 1.0,
    outer_radius: float = 1.2,
    height: float = 0.01,
    rings: int = 1,
    segments: int = 64,
    arc: float = TWO_PI,
) -> Mesh:
    """
    Hollow cylinder (annulus swept along Z), optionally a partial arc.

    Vertex layout: outer lattice (rows bottom-up), then inner lattice (rows
    top-down, which reverses its winding so it faces the axis).
    """
    rings, segments = clamp_rings(rings), clamp_segments(segments)
    ri, ro, height, arc = float(inner_radius), float(outer_radius), float(height), float(arc)
    stride = segments + 1

    mesh = Mesh(name)
    sub = mesh.add_submesh()

    outward = radial_normal("z")
    outer = sweep_lattice(
        sub,
        rings=rings,
        segments=segments,
        radius=lambda r: ro,
        height=lambda r: r * height / rings - height / 2.0,
        normal=outward,
        arc=arc,
    )
    inner = sweep_lattice(
        sub,
        rings=rings,
        segments=segments,
        radius=lambda r: ri,
        height=lambda r: height / 2.0 - r * height / rings,
        normal=lambda p: -outward(p),
        arc=arc,
    )

    def o(ring, seg):
        return outer + ring * stride + seg

    def i(ring, seg):
        # inner vertex level with outer row `ring`
        return inner + (rings - ring) * stride + seg

    for seg in range(segments):
        # top annulus
        sub.add_triangle(o(rings, seg), i(rings, seg), o(rings, seg + 1))
        sub.add_triangle(o(rings, seg + 1), i(rings, seg), i(rings, seg + 1))
        # bottom annulus
        sub.add_triangle(o(0, seg + 1), i(0, seg), o(0, seg))
        sub.add_triangle(i(0, seg + 1), i(0, seg), o(0, seg + 1))

    if not math.isclose(arc, TWO_PI):
        last = segments
        for ring in range(rings):
            # radial cut at angle 0
            sub.add_triangle(o(ring + 1, 0), o(ring, 0), i(ring + 1, 0))
            sub.add_triangle(i(ring + 1, 0), o(ring, 0), i(ring, 0))
            # radial cut at angle `arc`
            sub.add_triangle(i(ring + 1, last), i(ring, last), o(ring + 1, last))
            sub.add_triangle(o(ring + 1, last), i(ring, last), o(ring, last))

    mesh.recalculate_normals()
    return mesh


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_ALIASES = {
    "cube": "box",
    "cuboid": "box",
    "rect": "box",
    "camera_box": "camera",
    "annulus": "tube",
}

_FACTORIES = {
    "plane": create_plane,
    "box": create_box,
    "camera": create_camera,
    "sphere": create_sphere,
    "cylinder": create_cylinder,
    "cone": create_cone,
    "tube": create_tube,
}


def primitive_kinds() -> Tuple[str, ...]:
    return tuple(sorted(_FACTORIES))


def build_primitive(kind: str, name: str = "", **params) -> Mesh:
    """
    Build a parametric primitive by kind.

    Supported kinds:
      - "plane":     normal, d, size=(x,y), segments=(nx,ny), uv_tile, thickness
      - "box":       sides=(x,y,z) or side=s, uv=(u,v)   aliases: cube, cuboid, rect
      - "camera":    scale
      - "sphere":    radius, rings, segments
      - "cylinder":  radius, height, rings, segments
      - "cone":      radius, height, rings, segments
      - "tube":      inner_radius, outer_radius, height, rings, segments, arc
    """
    key = (kind or "").lower().strip()
    key = _ALIASES.get(key, key)

    if key == "box" and "side" in params and params.get("sides") is None:
        params["sides"] = params.pop("side")

    factory = _FACTORIES.get(key)
    if factory is None:
        raise ValueError(
            f"Unsupported primitive '{kind}'. Supported: {', '.join(primitive_kinds())}."
        )

    mesh = factory(name, **params)
    logger.debug("built %s '%s': %d vertices, %d indices", key, name, mesh.vertex_count, mesh.index_count)
    return mesh
