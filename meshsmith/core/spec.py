from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass
class MeshSpec:
    """
    Declarative mesh request.

    Examples:
      {"kind":"sphere","params":{"radius":0.5,"rings":16,"segments":16}}
      {"kind":"extruded_polyline","params":{"paths":[[(0,0),(1,0),(1,1)]],"height":2}}
      {"kind":"file","path":"meshes/part.stl"}
    """
    kind: str
    params: Dict[str, Any] = field(default_factory=dict)
    path: Optional[str] = None

    @classmethod
    def coerce(cls, spec: Union["MeshSpec", Dict[str, Any]]) -> "MeshSpec":
        if isinstance(spec, MeshSpec):
            return spec
        if isinstance(spec, dict):
            return cls(**spec)
        raise TypeError(f"Unsupported mesh spec type: {type(spec)}")
