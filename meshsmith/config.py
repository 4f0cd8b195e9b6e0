from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional


ENV_RESOURCE_PATH = "MESHSMITH_RESOURCE_PATH"
ENV_TRIANGULATION_ENGINE = "MESHSMITH_TRIANGULATION_ENGINE"


@dataclass
class MeshStoreConfig:
    """
    Options for a MeshStore.

    Attributes:
      - search_paths: directories searched (in order) when a relative mesh
        filename does not exist as given
      - plane_thickness: offset of the second vertex layer of generated planes
      - create_builtins: populate the built-in catalog on construction
      - triangulation_engine: None (first installed), "earcut", "manifold"
        or "triangle"; passed through to trimesh
      - boolean_engine: None (manifold3d) or "blender"; passed through to
        trimesh.boolean
    """
    search_paths: List[str] = field(default_factory=list)
    plane_thickness: float = 0.01
    create_builtins: bool = True
    triangulation_engine: Optional[str] = None
    boolean_engine: Optional[str] = None

    @classmethod
    def from_env(cls, **overrides) -> "MeshStoreConfig":
        """
        Build a config from environment variables, then apply overrides.

        MESHSMITH_RESOURCE_PATH         os.pathsep separated directories
        MESHSMITH_TRIANGULATION_ENGINE  engine name
        """
        raw = os.environ.get(ENV_RESOURCE_PATH, "")
        paths = [p for p in raw.split(os.pathsep) if p]
        engine = os.environ.get(ENV_TRIANGULATION_ENGINE) or None

        cfg = cls(search_paths=paths, triangulation_engine=engine)
        for k, v in overrides.items():
            if not hasattr(cfg, k):
                raise TypeError(f"Unknown MeshStoreConfig option: {k}")
            setattr(cfg, k, v)
        return cfg
