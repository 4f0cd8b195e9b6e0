from __future__ import annotations

import importlib.util
import logging
from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np

from meshsmith.core.mesh import Mesh, SubMesh
from meshsmith.errors import BooleanFailed, BooleanUnavailable

logger = logging.getLogger(__name__)


class BooleanOp(Enum):
    UNION = 0
    INTERSECTION = 1
    DIFFERENCE = 2

    @classmethod
    def coerce(cls, op: Union["BooleanOp", int, str]) -> "BooleanOp":
        if isinstance(op, BooleanOp):
            return op
        if isinstance(op, str):
            try:
                return cls[op.strip().upper()]
            except KeyError:
                raise ValueError(f"Unsupported boolean operation '{op}'.") from None
        return cls(int(op))


def boolean_available() -> bool:
    """True when trimesh's default CSG engine (manifold3d) is installed."""
    return importlib.util.find_spec("manifold3d") is not None


def _offset_matrix(offset) -> np.ndarray:
    if offset is None:
        return np.eye(4)
    m = np.asarray(offset, dtype=np.float64)
    if m.shape == (3,):
        t = np.eye(4)
        t[:3, 3] = m
        return t
    if m.shape == (4, 4):
        return m
    raise TypeError(f"Expected a translation (3,) or transform (4,4), got shape {m.shape}")


def boolean_mesh(
    a: Mesh,
    b: Mesh,
    operation: Union[BooleanOp, int, str] = BooleanOp.UNION,
    offset: Optional[Union[Sequence[float], np.ndarray]] = None,
    *,
    name: str = "",
    engine: Optional[str] = None,
) -> Mesh:
    """
    CSG of two meshes through trimesh.boolean.

    `offset` (translation or 4x4 transform) is applied to `b` first. Both
    inputs are vertex-merged so seam and cap duplicates close up.

    Raises:
      BooleanUnavailable: the default engine is requested but not installed
      BooleanFailed: the engine raised or the result has no faces
    """
    op = BooleanOp.coerce(operation)
    if engine in (None, "manifold") and not boolean_available():
        raise BooleanUnavailable("Mesh booleans need manifold3d (pip install manifold3d).")

    import trimesh.boolean

    ta = a.to_trimesh(process=True)
    tb = b.to_trimesh(process=True)
    tb.apply_transform(_offset_matrix(offset))

    csg = getattr(trimesh.boolean, op.name.lower())
    try:
        result = csg([ta, tb], engine=engine)
    except Exception as e:
        raise BooleanFailed(f"{op.name.lower()} of '{a.name}' and '{b.name}' failed: {e}") from e

    if result is None or len(result.faces) == 0:
        raise BooleanFailed(f"{op.name.lower()} of '{a.name}' and '{b.name}' is empty.")

    mesh = Mesh(name)
    mesh.add_submesh(
        SubMesh.from_arrays(
            result.vertices.view(np.ndarray),
            result.faces.view(np.ndarray),
            normals=result.vertex_normals.view(np.ndarray),
        )
    )
    logger.debug("%s of '%s' and '%s': %d faces", op.name.lower(), a.name, b.name, len(result.faces))
    return mesh
