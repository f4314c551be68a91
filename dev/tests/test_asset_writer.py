"""
Asset Rehomer - Asset Writer Tests

Copying, rehoming and the ordering of the two write passes.

Can be run standalone: python test_asset_writer.py
Or via main runner: python tests.py
"""

import json
import sys
from pathlib import Path

TESTS_DIR = Path(__file__).parent
sys.path.insert(0, str(TESTS_DIR))

import pytest

from scene_builders import geometry, keyed_material, two_geometry_scene, write_material_file, write_png
from formats.scene import SceneExporter
from rehomer.core import AssetWriter
from rehomer.errors import (
    IOFailureError, InvalidArgumentError, ResourceNotFoundError, UnsupportedDependencyKindError,
)
from rehomer.graph import ModelInfo
from rehomer.keys import MaterialKey, ModelKey, ResourceKey, TextureKey
from rehomer.scene import LinkNode, Material, Node, Texture, PARAM_INT
from rehomer.scene.material import SmartAsset


def read_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def test_single_material_is_copied_and_rehomed(tmp_path):
    source = tmp_path / "source"
    target = tmp_path / "target"
    write_material_file(source, "mats/red.mat")

    material = keyed_material("mats/red.mat")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(source, "Foo", root)

    out = AssetWriter(target, "Models/Foo").write(info)

    copied = target / "Models" / "Foo" / "mats" / "red.mat"
    assert copied.is_file()
    assert copied.read_bytes() == (source / "mats" / "red.mat").read_bytes()
    assert material.key.render() == "Models/Foo/mats/red.mat"
    assert isinstance(material.key, MaterialKey)
    assert out == target / "Models" / "Foo" / "Foo.scene"

    scene = read_json(out)
    ref = scene["root"]["children"][0]["material"]["ref"]
    assert ref == {"kind": "material", "path": "Models/Foo/mats/red.mat"}


def test_shared_material_is_copied_once_and_all_instances_updated(tmp_path):
    source = tmp_path / "source"
    target = tmp_path / "target"
    write_material_file(source, "mats/red.mat")

    material = keyed_material("mats/red.mat")
    root = two_geometry_scene(material, material)
    info = ModelInfo(source, "Foo", root)
    assert len(info.get_dependencies()) == 1

    AssetWriter(target, "Models/Foo").write(info)

    files = [p for p in target.rglob("*.mat")]
    assert files == [target / "Models" / "Foo" / "mats" / "red.mat"]
    dep = info.get_dependencies()[0]
    assert dep.instance_count == 2
    for child in root.children:
        assert child.material.key == dep.current_key


def test_every_instance_matches_current_key_after_write(tmp_path):
    source = tmp_path / "source"
    write_png(source / "tex" / "wood.png")
    texture = Texture(TextureKey.parse("tex/wood.png", flip_y=True))
    mat_a = Material("Unshaded", "a")
    mat_a.set_texture("ColorMap", texture)
    mat_b = Material("Unshaded", "b")
    mat_b.set_texture("ColorMap", texture)
    info = ModelInfo(source, "Foo", two_geometry_scene(mat_a, mat_b))

    AssetWriter(tmp_path / "target", "Models/Foo").write(info)

    for dep in info.get_dependencies():
        for instance in dep.instances:
            assert instance.key == dep.current_key
    assert texture.key.flip_y is True
    assert texture.key.render() == "Models/Foo/tex/wood.png"


def test_generated_material_sees_rehomed_texture_key(tmp_path):
    source = tmp_path / "source"
    target = tmp_path / "target"
    write_png(source / "tex" / "wood.png")

    texture = Texture(TextureKey.parse("tex/wood.png"))
    material = Material("PBRLighting", "wood")
    material.set_texture("BaseColorMap", texture)
    root = Node("root")
    info = ModelInfo(source, "Foo", root)
    root.attach_child(geometry("g", material))
    # The material is registered ahead of the texture it uses
    info.generate_material(material, "materials/wood")

    AssetWriter(target, "Models/Foo").write(info)

    written = read_json(target / "Models" / "Foo" / "materials" / "wood.mat")
    params = {p["name"]: p for p in written["material"]["params"]}
    assert params["BaseColorMap"]["value"]["key"]["path"] == "Models/Foo/tex/wood.png"
    assert (target / "Models" / "Foo" / "tex" / "wood.png").is_file()


def test_regenerated_material_is_written_under_its_last_name(tmp_path):
    material = Material("Unshaded", "paint")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(tmp_path / "source", "Foo", root)
    info.generate_material(material, "first")
    info.generate_material(material, "second")
    target = tmp_path / "target"

    AssetWriter(target, "M").write(info)

    written = sorted(p.relative_to(target).as_posix() for p in target.rglob("*.mat"))
    assert written == ["M/second.mat"]
    assert material.key.render() == "M/second.mat"


def test_rehoming_is_idempotent(tmp_path):
    source = tmp_path / "source"
    write_material_file(source, "mats/red.mat")
    material = keyed_material("mats/red.mat")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(source, "Foo", root)
    writer = AssetWriter(tmp_path / "target", "Models/Foo")

    writer.write(info)
    first = material.key
    writer.write(info)

    assert material.key == first
    assert material.key.render() == "Models/Foo/mats/red.mat"


def test_no_asset_path_keeps_relative_layout(tmp_path):
    source = tmp_path / "source"
    write_material_file(source, "mats/red.mat")
    material = keyed_material("mats/red.mat")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(source, "Foo", root)

    out = AssetWriter(tmp_path / "target").write(info)

    assert (tmp_path / "target" / "mats" / "red.mat").is_file()
    assert out == tmp_path / "target" / "Foo.scene"
    assert material.key.render() == "mats/red.mat"


# ═══════════════════════════════════════════════════════════════════════════════
# FAILURES
# ═══════════════════════════════════════════════════════════════════════════════

def test_missing_source_file_aborts_before_scene_write(tmp_path):
    material = keyed_material("mats/missing.mat")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(tmp_path / "source", "Foo", root)
    target = tmp_path / "target"

    with pytest.raises(ResourceNotFoundError) as err:
        AssetWriter(target, "Models/Foo").write(info)

    assert err.value.key == MaterialKey.parse("mats/missing.mat")
    assert "mats/missing.mat" in str(err.value)
    assert not (target / "Models" / "Foo" / "Foo.scene").exists()


class FailingExporter(SceneExporter):
    """Exporter whose material writes always fail."""

    def save_material(self, material, path):
        raise PermissionError(f"read-only: {path}")


def test_serialization_failure_is_io_failure(tmp_path):
    material = Material("Unshaded", "gen")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(tmp_path / "source", "Foo", root)
    info.generate_material(material, "gen/new")
    target = tmp_path / "target"

    with pytest.raises(IOFailureError) as err:
        AssetWriter(target, "Models/Foo", exporter=FailingExporter()).write(info)

    assert isinstance(err.value.cause, PermissionError)
    assert err.value.key == MaterialKey.parse("gen/new.mat")
    assert not (target / "Models" / "Foo" / "Foo.scene").exists()


def test_asset_path_outside_target_is_rejected_before_writing(tmp_path):
    source = tmp_path / "source"
    write_material_file(source, "mats/red.mat")
    material = keyed_material("mats/red.mat")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(source, "Foo", root)
    info.generate_material(Material("Unshaded"), "gen/new")

    with pytest.raises(InvalidArgumentError):
        AssetWriter(tmp_path / "target", "../escape").write(info)

    assert not (tmp_path / "escape").exists()
    assert not (tmp_path / "target").exists()
    assert material.key == MaterialKey.parse("mats/red.mat")


def test_unencodable_user_data_is_io_failure(tmp_path):
    root = Node("root")
    root.key = ModelKey.parse("car/car.gltf")
    root.user_data["tags"] = {"a", "b"}
    info = ModelInfo(None, "Foo", root)

    with pytest.raises(IOFailureError) as err:
        AssetWriter(tmp_path / "target").write(info)

    assert isinstance(err.value.cause, TypeError)
    assert err.value.key == ModelKey.parse("car/car.gltf")


def test_unencodable_material_param_is_io_failure(tmp_path):
    material = Material("Unshaded", "gen")
    material.set_param("Flags", PARAM_INT, {1, 2})
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(None, "Foo", root)
    info.generate_material(material, "gen/flags")
    target = tmp_path / "target"

    with pytest.raises(IOFailureError) as err:
        AssetWriter(target, "Models/Foo").write(info)

    assert isinstance(err.value.cause, TypeError)
    assert err.value.key == MaterialKey.parse("gen/flags.mat")
    assert not (target / "Models" / "Foo" / "Foo.scene").exists()


def test_link_without_single_child_is_not_written(tmp_path):
    root = Node("root")
    link = LinkNode("door.scene", ModelKey.parse("door.scene"))
    root.attach_child(link)
    info = ModelInfo(None, "Foo", root)
    info.add_dependency(link, generated=True)
    target = tmp_path / "target"

    with pytest.raises(UnsupportedDependencyKindError) as err:
        AssetWriter(target, "Models/Foo").write(info)

    assert err.value.key == ModelKey.parse("door.scene")
    assert not (target / "Models" / "Foo" / "Foo.scene").exists()


class Sound(SmartAsset):
    pass


def test_generated_kind_without_writer_is_unsupported(tmp_path):
    info = ModelInfo(None, "Foo", Node("root"))
    info.add_dependency(Sound(ResourceKey.parse("sfx/horn.ogg")), generated=True)

    with pytest.raises(UnsupportedDependencyKindError):
        AssetWriter(tmp_path / "target").write(info)


def test_registered_generator_handles_new_kind(tmp_path):
    info = ModelInfo(None, "Foo", Node("root"))
    sound = Sound(ResourceKey.parse("sfx/horn.ogg"))
    info.add_dependency(sound, generated=True)
    writer = AssetWriter(tmp_path / "target", "Audio")
    writer.register_generator(Sound, lambda file, dep, asset: file.write_bytes(b"OggS"))

    writer.write(info)

    assert (tmp_path / "target" / "Audio" / "sfx" / "horn.ogg").read_bytes() == b"OggS"
    assert sound.key.render() == "Audio/sfx/horn.ogg"


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
