from __future__ import annotations


class MeshError(Exception):
    """Base exception for mesh generation and registry errors."""
    pass


class TriangulationFailed(MeshError):
    """The triangulation produced no usable result for the given paths."""
    pass


class TriangulationUnavailable(TriangulationFailed):
    """No 2D triangulation backend is installed."""
    pass


class BooleanFailed(MeshError):
    """A CSG operation raised or produced an empty mesh."""
    pass


class BooleanUnavailable(BooleanFailed):
    """No CSG backend is installed."""
    pass


class IndexOutOfRange(MeshError, IndexError):
    """A SubMesh accessor was called with a position past the end."""
    pass


class UnsupportedFormat(MeshError, ValueError):
    """No loader is registered for a file extension."""
    pass
