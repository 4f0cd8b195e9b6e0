# meshsmith/__init__.py

"""
meshsmith

Procedural mesh synthesis + a named mesh registry.

Focus:
- Build render-ready vertex/normal/texcoord/index buffers for primitives
  (plane, box, camera box, sphere, cylinder, cone, tube)
- Extrude closed 2D polylines into solids (triangulation via shapely + trimesh)
- Combine stored meshes with CSG booleans (trimesh.boolean)
- Keep generated and loaded meshes in a MeshStore keyed by name

Design principles:
- Generation is synchronous and writes straight into SubMesh buffers
- The store owns its meshes; the first create request for a name wins
- Expose a small stable API surface from `__init__`
"""

from .config import MeshStoreConfig
from .core.mesh import Mesh, SubMesh
from .core.spec import MeshSpec
from .core.store import BUILTIN_MESHES, MeshStore
from .errors import (
    BooleanFailed,
    BooleanUnavailable,
    IndexOutOfRange,
    MeshError,
    TriangulationFailed,
    TriangulationUnavailable,
    UnsupportedFormat,
)
from .gen.extrude import PolylineExtruder, extrude_polyline
from .gen.primitives import build_primitive

__all__ = [
    "MeshStoreConfig",
    "Mesh",
    "SubMesh",
    "MeshSpec",
    "MeshStore",
    "BUILTIN_MESHES",
    "MeshError",
    "BooleanFailed",
    "BooleanUnavailable",
    "IndexOutOfRange",
    "TriangulationFailed",
    "TriangulationUnavailable",
    "UnsupportedFormat",
    "PolylineExtruder",
    "extrude_polyline",
    "build_primitive",
]
