from __future__ import annotations

import logging
import math
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from meshsmith.config import MeshStoreConfig
from meshsmith.core.mesh import Mesh, SubMesh
from meshsmith.core.spec import MeshSpec
from meshsmith.errors import UnsupportedFormat
from meshsmith.gen.boolean import BooleanOp, boolean_mesh
from meshsmith.gen.extrude import Triangulator, extrude_polyline
from meshsmith.gen.primitives import build_primitive
from meshsmith.gen.tessellate import tessellate_grid
from meshsmith.io.loaders import LoaderRegistry

logger = logging.getLogger(__name__)


# name -> (kind, params); created on every store construction
BUILTIN_MESHES: Tuple[Tuple[str, str, Dict], ...] = (
    ("unit_plane", "plane", dict(normal=(0, 0, 1), d=0.0, size=(1, 1), segments=(1, 1), uv_tile=(1, 1))),
    ("unit_sphere", "sphere", dict(radius=0.5, rings=32, segments=32)),
    ("joint_anchor", "sphere", dict(radius=0.01, rings=32, segments=32)),
    ("body_cg", "box", dict(sides=(0.014, 0.014, 0.014), uv=(0.014, 0.014))),
    ("unit_box", "box", dict(sides=(1, 1, 1), uv=(1, 1))),
    ("unit_cylinder", "cylinder", dict(radius=0.5, height=1.0, rings=1, segments=32)),
    ("unit_cone", "cone", dict(radius=0.5, height=1.0, rings=5, segments=32)),
    ("unit_camera", "camera", dict(scale=0.5)),
    ("axis_shaft", "cylinder", dict(radius=0.01, height=0.2, rings=1, segments=16)),
    ("axis_head", "cone", dict(radius=0.02, height=0.08, rings=1, segments=16)),
    ("selection_tube", "tube", dict(inner_radius=1.0, outer_radius=1.2, height=0.01, rings=1, segments=64)),
)


class _NameLock:
    """Build lock for one name; `users` counts holders plus waiters."""

    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class MeshStore:
    """
    Name-keyed registry that owns every Mesh it holds.

    Notes:
      - first writer wins: a create request for a name that already exists
        returns the stored mesh and ignores the new parameters
      - "check, build, insert" runs under a per-name lock, so concurrent
        requests for one name build once; different names do not block
      - a build that raises leaves no entry behind; a name lock lives only
        while some caller holds or waits on it
    """

    def __init__(
        self,
        config: Optional[MeshStoreConfig] = None,
        *,
        loaders: Optional[LoaderRegistry] = None,
        triangulator: Optional[Triangulator] = None,
    ):
        self.config = config or MeshStoreConfig()
        self.loaders = loaders or LoaderRegistry.default()
        self.triangulator = triangulator
        self._meshes: Dict[str, Mesh] = {}
        self._lock = threading.Lock()
        self._name_locks: Dict[str, _NameLock] = {}

        if self.config.create_builtins:
            for name, kind, params in BUILTIN_MESHES:
                self.get_or_create(name, MeshSpec(kind=kind, params=dict(params)))

    # ---------- lifecycle ----------
    def close(self) -> None:
        """Drop every mesh; the store stays usable but empty."""
        with self._lock:
            self._meshes.clear()

    def __enter__(self) -> "MeshStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------- lookup ----------
    def get(self, name: str) -> Optional[Mesh]:
        with self._lock:
            return self._meshes.get(name)

    def has(self, name: str) -> bool:
        if not name:
            return False
        with self._lock:
            return name in self._meshes

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._meshes)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._meshes)

    # ---------- insert / remove ----------
    def add(self, mesh: Mesh) -> Mesh:
        """Insert `mesh` under its name unless taken; returns the stored mesh."""
        if not mesh.name:
            raise ValueError("Mesh must have a name to be stored.")
        return self._get_or_build(mesh.name, lambda: mesh)

    def remove(self, name: str) -> Optional[Mesh]:
        with self._lock:
            return self._meshes.pop(name, None)

    def _acquire_name_lock(self, name: str) -> _NameLock:
        with self._lock:
            entry = self._name_locks.get(name)
            if entry is None:
                entry = self._name_locks[name] = _NameLock()
            entry.users += 1
        entry.lock.acquire()
        return entry

    def _release_name_lock(self, name: str, entry: _NameLock) -> None:
        entry.lock.release()
        with self._lock:
            entry.users -= 1
            if entry.users == 0 and self._name_locks.get(name) is entry:
                del self._name_locks[name]

    def _get_or_build(self, name: str, build: Callable[[], Mesh]) -> Mesh:
        existing = self.get(name)
        if existing is not None:
            logger.debug("mesh '%s' already stored", name)
            return existing

        entry = self._acquire_name_lock(name)
        try:
            existing = self.get(name)
            if existing is not None:
                return existing

            mesh = build()
            with self._lock:
                stored = self._meshes.setdefault(name, mesh)
            if stored is mesh:
                mesh.name = name
                logger.debug("stored mesh '%s' (%d vertices)", name, mesh.vertex_count)
            return stored
        finally:
            self._release_name_lock(name, entry)

    # ---------- create ----------
    def get_or_create(self, name: str, spec: Union[MeshSpec, Dict]) -> Mesh:
        """
        Return the mesh stored under `name`, building it from `spec` if absent.

        Supported kinds:
          - any primitive kind of gen.primitives.build_primitive
          - "extruded_polyline": paths, height
          - "file": path (or params["path"])
          - "boolean": a, b (meshes or stored names), operation, offset
        """
        spec = MeshSpec.coerce(spec)
        kind = spec.kind.lower().strip()

        if kind == "file":
            path = spec.path or spec.params.get("path")
            if not path:
                raise ValueError("File mesh spec needs a path.")
            return self._get_or_build(name, lambda: self._read(path))

        if kind in ("extruded_polyline", "polyline"):
            params = dict(spec.params)
            return self._get_or_build(
                name,
                lambda: extrude_polyline(
                    params["paths"], params["height"], name=name, triangulator=self._triangulator()
                ),
            )

        if kind == "boolean":
            params = dict(spec.params)
            return self._get_or_build(
                name,
                lambda: boolean_mesh(
                    self._operand(params["a"]),
                    self._operand(params["b"]),
                    params.get("operation", BooleanOp.UNION),
                    params.get("offset"),
                    name=name,
                    engine=self.config.boolean_engine,
                ),
            )

        params = dict(spec.params)
        if kind == "plane":
            params.setdefault("thickness", self.config.plane_thickness)
        return self._get_or_build(name, lambda: build_primitive(kind, name, **params))

    def create_plane(
        self,
        name: str,
        normal: Sequence[float] = (0.0, 0.0, 1.0),
        d: float = 0.0,
        size: Sequence[float] = (1.0, 1.0),
        segments: Sequence[int] = (1, 1),
        uv_tile: Sequence[float] = (1.0, 1.0),
    ) -> Mesh:
        return self.get_or_create(
            name, MeshSpec("plane", dict(normal=normal, d=d, size=size, segments=segments, uv_tile=uv_tile))
        )

    def create_box(self, name: str, sides=(1.0, 1.0, 1.0), uv: Sequence[float] = (1.0, 1.0)) -> Mesh:
        return self.get_or_create(name, MeshSpec("box", dict(sides=sides, uv=uv)))

    def create_camera(self, name: str, scale: float = 1.0) -> Mesh:
        return self.get_or_create(name, MeshSpec("camera", dict(scale=scale)))

    def create_sphere(self, name: str, radius: float, rings: int, segments: int) -> Mesh:
        return self.get_or_create(name, MeshSpec("sphere", dict(radius=radius, rings=rings, segments=segments)))

    def create_cylinder(self, name: str, radius: float, height: float, rings: int, segments: int) -> Mesh:
        return self.get_or_create(
            name, MeshSpec("cylinder", dict(radius=radius, height=height, rings=rings, segments=segments))
        )

    def create_cone(self, name: str, radius: float, height: float, rings: int, segments: int) -> Mesh:
        return self.get_or_create(
            name, MeshSpec("cone", dict(radius=radius, height=height, rings=rings, segments=segments))
        )

    def create_tube(
        self,
        name: str,
        inner_radius: float,
        outer_radius: float,
        height: float,
        rings: int,
        segments: int,
        arc: float = 2.0 * math.pi,
    ) -> Mesh:
        return self.get_or_create(
            name,
            MeshSpec(
                "tube",
                dict(
                    inner_radius=inner_radius,
                    outer_radius=outer_radius,
                    height=height,
                    rings=rings,
                    segments=segments,
                    arc=arc,
                ),
            ),
        )

    def create_extruded_polyline(self, name: str, paths, height: float) -> Mesh:
        return self.get_or_create(name, MeshSpec("extruded_polyline", dict(paths=paths, height=height)))

    def create_boolean(
        self,
        name: str,
        a: Union[str, Mesh],
        b: Union[str, Mesh],
        operation: Union[BooleanOp, int, str] = BooleanOp.UNION,
        offset=None,
    ) -> Mesh:
        """
        Store the union, intersection or difference of `a` and `b` under `name`.

        `a` and `b` are meshes or names of stored meshes; `offset`
        (translation or 4x4 transform) moves `b` first. Operands are only
        resolved when `name` is not stored yet.

        Raises:
          KeyError: an operand name is not stored
          BooleanUnavailable / BooleanFailed: see gen.boolean.boolean_mesh
        """
        return self.get_or_create(
            name, MeshSpec("boolean", dict(a=a, b=b, operation=operation, offset=offset))
        )

    def _operand(self, m: Union[str, Mesh]) -> Mesh:
        if isinstance(m, Mesh):
            return m
        mesh = self.get(m)
        if mesh is None:
            raise KeyError(f"No stored mesh named '{m}'")
        return mesh

    @staticmethod
    def tessellate_2d_mesh(sub: SubMesh, width: int, height: int, double_sided: bool = False) -> int:
        return tessellate_grid(sub, width, height, double_sided)

    def _triangulator(self) -> Optional[Triangulator]:
        if self.triangulator is not None:
            return self.triangulator
        engine = self.config.triangulation_engine
        if engine is None:
            return None

        from meshsmith.gen.triangulate import triangulate_paths

        return lambda paths: triangulate_paths(paths, engine=engine)

    # ---------- files ----------
    def is_valid_filename(self, filename: Union[str, Path]) -> bool:
        return self.loaders.supports(filename)

    def find_file(self, filename: Union[str, Path]) -> Optional[Path]:
        p = Path(filename).expanduser()
        if p.exists():
            return p.resolve()
        if not p.is_absolute():
            for root in self.config.search_paths:
                candidate = Path(root).expanduser() / p
                if candidate.exists():
                    return candidate.resolve()
        return None

    def _read(self, filename: Union[str, Path]) -> Mesh:
        if not self.is_valid_filename(filename):
            raise UnsupportedFormat(f"Invalid mesh filename extension [{filename}]")
        path = self.find_file(filename)
        if path is None:
            raise FileNotFoundError(filename)
        try:
            return self.loaders.load(path)
        except Exception:
            logger.error("Error loading mesh [%s]", path)
            raise

    def load(self, filename: Union[str, Path]) -> Mesh:
        """
        Load a mesh file, keyed by `filename` as given.

        Raises:
          UnsupportedFormat: no loader for the extension
          FileNotFoundError: not found directly or under config.search_paths
        """
        key = str(filename)
        return self._get_or_build(key, lambda: self._read(filename))

    # ---------- per-mesh helpers ----------
    def mesh_aabb(self, name: str) -> Optional[Tuple[np.ndarray, np.ndarray, np.ndarray]]:
        """(center, min, max) of a stored mesh, or None when absent."""
        mesh = self.get(name)
        return None if mesh is None else mesh.aabb()

    def gen_spherical_texcoord(self, name: str, center: Sequence[float]) -> bool:
        mesh = self.get(name)
        if mesh is None:
            return False
        mesh.gen_spherical_texcoord(center)
        return True
