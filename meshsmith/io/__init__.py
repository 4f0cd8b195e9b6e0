from .loaders import LoaderRegistry, MeshFormat, load_with_meshio, load_with_trimesh

__all__ = [
    "LoaderRegistry",
    "MeshFormat",
    "load_with_meshio",
    "load_with_trimesh",
]
