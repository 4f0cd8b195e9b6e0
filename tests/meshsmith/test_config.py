import os

import pytest

from meshsmith import MeshStoreConfig
from meshsmith.config import ENV_RESOURCE_PATH, ENV_TRIANGULATION_ENGINE


def test_defaults():
    cfg = MeshStoreConfig()
    assert cfg.search_paths == []
    assert cfg.plane_thickness == 0.01
    assert cfg.create_builtins is True
    assert cfg.triangulation_engine is None


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_RESOURCE_PATH, os.pathsep.join([str(tmp_path), "", "/opt/meshes"]))
    monkeypatch.setenv(ENV_TRIANGULATION_ENGINE, "earcut")

    cfg = MeshStoreConfig.from_env(create_builtins=False)
    assert cfg.search_paths == [str(tmp_path), "/opt/meshes"]
    assert cfg.triangulation_engine == "earcut"
    assert cfg.create_builtins is False


def test_from_env_without_variables(monkeypatch):
    monkeypatch.delenv(ENV_RESOURCE_PATH, raising=False)
    monkeypatch.delenv(ENV_TRIANGULATION_ENGINE, raising=False)
    cfg = MeshStoreConfig.from_env()
    assert cfg.search_paths == []
    assert cfg.triangulation_engine is None


def test_from_env_rejects_unknown_option():
    with pytest.raises(TypeError):
        MeshStoreConfig.from_env(colour="red")
