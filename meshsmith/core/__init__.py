from .mesh import Mesh, SubMesh
from .spec import MeshSpec

__all__ = [
    "Mesh",
    "SubMesh",
    "MeshSpec",
]
