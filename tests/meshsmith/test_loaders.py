import pytest

from meshsmith import UnsupportedFormat
from meshsmith.gen.primitives import primitive_kinds
from meshsmith.io.loaders import LoaderRegistry, MeshFormat, _DEFAULT_FORMATS, extension_of


def test_extension_of_is_case_insensitive():
    assert extension_of("a/b/Part.STL") == "stl"
    assert extension_of("noext") == ""


def test_default_registry_covers_known_formats():
    reg = LoaderRegistry.default()
    assert set(reg.extensions()) == set(_DEFAULT_FORMATS)
    assert _DEFAULT_FORMATS["dae"] is MeshFormat.SCENE_GRAPH_XML
    assert reg.supports("scene.DAE")
    assert not reg.supports("notes.txt")


def test_register_and_unregister():
    reg = LoaderRegistry()
    reg.register(".XYZ", lambda path: path)
    assert reg.supports("cloud.xyz")
    assert reg.load("cloud.xyz").name == "cloud.xyz"

    reg.unregister("xyz")
    assert not reg.supports("cloud.xyz")
    with pytest.raises(UnsupportedFormat):
        reg.load("cloud.xyz")


def test_primitive_kinds():
    assert {"plane", "box", "camera", "sphere", "cylinder", "cone", "tube"} <= set(primitive_kinds())
