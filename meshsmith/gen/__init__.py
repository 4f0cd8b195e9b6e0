# meshsmith/gen/__init__.py
from .primitives import (
    build_primitive,
    create_box,
    create_camera,
    create_cone,
    create_cylinder,
    create_plane,
    create_sphere,
    create_tube,
)
from .tessellate import tessellate_grid
from .extrude import ExtrudeStage, PolylineExtruder, extrude_polyline
from .triangulate import triangulate_paths, triangulation_available
from .boolean import BooleanOp, boolean_available, boolean_mesh

__all__ = [
    "build_primitive",
    "create_box",
    "create_camera",
    "create_cone",
    "create_cylinder",
    "create_plane",
    "create_sphere",
    "create_tube",
    "tessellate_grid",
    "ExtrudeStage",
    "PolylineExtruder",
    "extrude_polyline",
    "triangulate_paths",
    "triangulation_available",
    "BooleanOp",
    "boolean_available",
    "boolean_mesh",
]
