from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

import numpy as np

from meshsmith.core.mesh import Mesh, SubMesh
from meshsmith.errors import UnsupportedFormat

logger = logging.getLogger(__name__)


Loader = Callable[[Path], Mesh]


class MeshFormat(Enum):
    """Interchange families the default loaders understand."""
    BINARY = "binary"              # stl / stlb
    ASCII_TRIMESH = "ascii"        # stla, obj, off, ply
    SCENE_GRAPH_XML = "scene_xml"  # dae
    VOLUME_MESH = "volume_mesh"    # vtk / vtu / msh (triangle cells)


_DEFAULT_FORMATS: Dict[str, MeshFormat] = {
    "stl": MeshFormat.BINARY,
    "stlb": MeshFormat.BINARY,
    "stla": MeshFormat.ASCII_TRIMESH,
    "obj": MeshFormat.ASCII_TRIMESH,
    "off": MeshFormat.ASCII_TRIMESH,
    "ply": MeshFormat.ASCII_TRIMESH,
    "dae": MeshFormat.SCENE_GRAPH_XML,
    "vtk": MeshFormat.VOLUME_MESH,
    "vtu": MeshFormat.VOLUME_MESH,
    "msh": MeshFormat.VOLUME_MESH,
}


def extension_of(filename: Union[str, Path]) -> str:
    return Path(filename).suffix.lower().lstrip(".")


def _submesh_from_trimesh(tm, name: str = "") -> SubMesh:
    uv = getattr(getattr(tm, "visual", None), "uv", None)
    return SubMesh.from_arrays(
        vertices=tm.vertices.view(np.ndarray),
        faces=tm.faces.view(np.ndarray),
        normals=tm.vertex_normals.view(np.ndarray),
        texcoords=None if uv is None else np.asarray(uv),
        name=name,
    )


def load_with_trimesh(path: Path) -> Mesh:
    """STL / OBJ / PLY / OFF / DAE; every geometry of a scene becomes a SubMesh."""
    import trimesh

    # stlb / stla are plain STL to trimesh
    ext = extension_of(path)
    file_type = "stl" if ext in ("stlb", "stla") else ext

    loaded = trimesh.load(str(path), file_type=file_type)
    mesh = Mesh(path=str(path))
    if isinstance(loaded, trimesh.Scene):
        for geom_name, geom in loaded.geometry.items():
            if isinstance(geom, trimesh.Trimesh):
                mesh.add_submesh(_submesh_from_trimesh(geom, geom_name))
    elif isinstance(loaded, trimesh.Trimesh):
        mesh.add_submesh(_submesh_from_trimesh(loaded))

    if not mesh.submesh_count:
        raise TypeError("Loaded geometry is not a triangular mesh.")
    return mesh


def load_with_meshio(path: Path) -> Mesh:
    """VTK / VTU / MSH; only triangle cells are kept."""
    import meshio

    m = meshio.read(str(path))
    if "triangle" not in m.cells_dict:
        raise ValueError("Mesh does not contain triangle cells.")
    mesh = Mesh(path=str(path))
    mesh.add_submesh(SubMesh.from_arrays(m.points[:, :3], m.cells_dict["triangle"]))
    return mesh


_FORMAT_LOADERS: Dict[MeshFormat, Loader] = {
    MeshFormat.BINARY: load_with_trimesh,
    MeshFormat.ASCII_TRIMESH: load_with_trimesh,
    MeshFormat.SCENE_GRAPH_XML: load_with_trimesh,
    MeshFormat.VOLUME_MESH: load_with_meshio,
}


class LoaderRegistry:
    """
    Extension -> loader map.

    Extensions are matched case-insensitively without the leading dot.
    """

    def __init__(self, loaders: Optional[Dict[str, Loader]] = None):
        self._loaders: Dict[str, Loader] = {}
        for ext, loader in (loaders or {}).items():
            self.register(ext, loader)

    @classmethod
    def default(cls) -> "LoaderRegistry":
        return cls({ext: _FORMAT_LOADERS[fmt] for ext, fmt in _DEFAULT_FORMATS.items()})

    def register(self, extension: str, loader: Loader) -> None:
        self._loaders[extension.lower().lstrip(".")] = loader

    def unregister(self, extension: str) -> None:
        self._loaders.pop(extension.lower().lstrip("."), None)

    def extensions(self) -> Iterable[str]:
        return sorted(self._loaders)

    def supports(self, filename: Union[str, Path]) -> bool:
        ext = extension_of(filename)
        return bool(ext) and ext in self._loaders

    def load(self, path: Union[str, Path]) -> Mesh:
        path = Path(path)
        ext = extension_of(path)
        loader = self._loaders.get(ext)
        if loader is None:
            raise UnsupportedFormat(f"Unsupported mesh format '{ext}' for file [{path}]")
        return loader(path)
