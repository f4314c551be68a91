"""
Asset Rehomer - Dependency Discovery Tests

Identity-based deduplication of scene resources.

Can be run standalone: python test_dependency_graph.py
Or via main runner: python tests.py
"""

import sys
from pathlib import Path

TESTS_DIR = Path(__file__).parent
sys.path.insert(0, str(TESTS_DIR))

import pytest

from scene_builders import geometry, keyed_material, two_geometry_scene
from rehomer.errors import InvalidArgumentError
from rehomer.graph import Dependency, DependencyMap, IdentityMap, ModelInfo, discover
from rehomer.keys import MaterialKey, TextureKey
from rehomer.scene import Geometry, Material, Node, Texture


def test_shared_texture_instance_is_one_dependency_with_two_instances():
    texture = Texture(TextureKey.parse("tex/wood.png"))
    mat_a = Material("Unshaded", "a")
    mat_a.set_texture("ColorMap", texture)
    mat_b = Material("Unshaded", "b")
    mat_b.set_texture("ColorMap", texture)

    deps = discover(two_geometry_scene(mat_a, mat_b))

    assert len(deps) == 1
    dep = deps[texture]
    assert dep.instance_count == 2
    assert all(instance is texture for instance in dep.instances)


def test_equal_keys_on_distinct_instances_stay_separate():
    tex_a = Texture(TextureKey.parse("tex/wood.png"))
    tex_b = Texture(TextureKey.parse("tex/wood.png"))
    assert tex_a.key == tex_b.key
    mat_a = Material("Unshaded", "a")
    mat_a.set_texture("ColorMap", tex_a)
    mat_b = Material("Unshaded", "b")
    mat_b.set_texture("ColorMap", tex_b)

    deps = discover(two_geometry_scene(mat_a, mat_b))

    assert len(deps) == 2
    assert deps[tex_a] is not deps[tex_b]
    assert deps[tex_a].instance_count == 1


def test_shared_keyed_material_counts_each_geometry():
    texture = Texture(TextureKey.parse("tex/wood.png"))
    material = keyed_material("mats/red.mat", texture)

    deps = discover(two_geometry_scene(material, material))

    assert len(deps) == 2
    assert deps[material].instance_count == 2
    # Parameters of an already-seen material are not rescanned
    assert deps[texture].instance_count == 1


def test_keyless_assets_are_skipped_but_unkeyed_material_params_are_scanned():
    embedded = Texture(image_data=b"\x89PNG")
    keyed = Texture(TextureKey.parse("tex/normal.png"))
    material = Material("PBRLighting", "inline")
    material.set_texture("BaseColorMap", embedded)
    material.set_texture("NormalMap", keyed)

    root = Node("root")
    root.attach_child(geometry("g", material))
    root.attach_child(geometry("bare"))

    deps = discover(root)

    assert len(deps) == 1
    assert keyed in deps
    assert material not in deps
    assert embedded not in deps


def test_shared_material_params_count_once_with_or_without_key():
    unkeyed_texture = Texture(TextureKey.parse("tex/wood.png"))
    unkeyed = Material("PBRLighting", "inline")
    unkeyed.set_texture("BaseColorMap", unkeyed_texture)
    keyed_texture = Texture(TextureKey.parse("tex/wood.png"))
    keyed = keyed_material("mats/wood.mat", keyed_texture)

    unkeyed_deps = discover(two_geometry_scene(unkeyed, unkeyed))
    keyed_deps = discover(two_geometry_scene(keyed, keyed))

    assert unkeyed_deps[unkeyed_texture].instance_count == 1
    assert keyed_deps[keyed_texture].instance_count == 1


def test_traversal_follows_child_order():
    root = Node("root")
    inner = Node("inner")
    first = keyed_material("mats/first.mat")
    second = keyed_material("mats/second.mat")
    third = keyed_material("mats/third.mat")
    inner.attach_child(geometry("g1", first))
    inner.attach_child(geometry("g2", second))
    root.attach_child(inner)
    root.attach_child(geometry("g3", third))

    deps = discover(root)

    assert [d.original_key.render() for d in deps.values()] == [
        "mats/first.mat", "mats/second.mat", "mats/third.mat"]


def test_source_file_resolved_against_source_root(tmp_path):
    material = keyed_material("mats/red.mat")
    deps = discover(two_geometry_scene(material, keyed_material("mats/blue.mat")), tmp_path)

    assert deps[material].source_file == tmp_path / "mats" / "red.mat"
    assert not deps[material].is_generated


def test_no_source_root_means_no_source_file():
    material = keyed_material("mats/red.mat")
    deps = discover(two_geometry_scene(material, material))
    assert deps[material].source_file is None


# ═══════════════════════════════════════════════════════════════════════════════
# DEPENDENCY RECORDS
# ═══════════════════════════════════════════════════════════════════════════════

def test_set_key_reaches_every_instance():
    texture = Texture(TextureKey.parse("tex/wood.png"))
    dep = Dependency(texture)
    dep.add_instance(texture)

    new_key = TextureKey.parse("Models/Foo/tex/wood.png")
    dep.set_key(new_key)

    assert dep.key == new_key
    assert dep.current_key == new_key
    assert dep.original_key == TextureKey.parse("tex/wood.png")
    assert all(instance.key == new_key for instance in dep.instances)


def test_dependency_requires_a_key():
    with pytest.raises(InvalidArgumentError):
        Dependency(Texture(image_data=b""))


def test_identity_map_uses_identity_not_equality():
    a = [1, 2]
    b = [1, 2]
    mapping = IdentityMap()
    mapping[a] = "a"
    mapping[b] = "b"
    assert len(mapping) == 2
    assert mapping[a] == "a"
    assert mapping.get([1, 2]) is None
    assert mapping.keys() == [a, b]


def test_dependency_map_generated_has_no_source_file(tmp_path):
    deps = DependencyMap(tmp_path)
    material = keyed_material("gen/new.mat")
    dep = deps.add(material, generated=True)
    assert dep.is_generated
    assert deps.add(material) is dep
    assert dep.instance_count == 2


# ═══════════════════════════════════════════════════════════════════════════════
# MODEL INFO
# ═══════════════════════════════════════════════════════════════════════════════

def test_generate_material_appends_extension_and_registers_textures():
    texture = Texture(TextureKey.parse("tex/wood.png"))
    material = Material("PBRLighting", "wood")
    material.set_texture("BaseColorMap", texture)
    root = Node("root")
    root.attach_child(geometry("g", material))

    info = ModelInfo(None, "test", root)
    assert len(info.get_dependencies()) == 1

    dep = info.generate_material(material, "materials/wood")

    assert material.key == MaterialKey.parse("materials/wood.mat")
    assert dep.is_generated
    assert info.get_dependency(material) is dep
    # The texture was already found through the same material slot
    assert info.get_dependency(texture).instance_count == 1
    assert len(info.get_dependencies()) == 2


def test_generating_twice_renames_the_dependency():
    material = Material("Unshaded", "paint")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(None, "test", root)

    first = info.generate_material(material, "first")
    second = info.generate_material(material, "second")

    assert second is first
    assert second.instance_count == 1
    assert second.original_key == MaterialKey.parse("second.mat")
    assert second.key == MaterialKey.parse("second.mat")
    assert material.key == MaterialKey.parse("second.mat")
    assert len(info.get_dependencies()) == 1


def test_generating_a_file_material_makes_it_generated(tmp_path):
    material = keyed_material("mats/red.mat")
    root = Node("root")
    root.attach_child(geometry("g", material))
    info = ModelInfo(tmp_path, "test", root)
    assert not info.get_dependency(material).is_generated

    dep = info.generate_material(material, "gen/red")

    assert dep.is_generated
    assert dep.original_key == MaterialKey.parse("gen/red.mat")


def test_generate_material_keeps_existing_extension():
    info = ModelInfo(None, "test", Node("root"))
    material = Material("Unshaded")
    info.generate_material(material, "materials/plain.MAT")
    assert material.key.render() == "materials/plain.MAT"


def test_add_dependency_ignores_keyless_assets():
    info = ModelInfo(None, "test", Node("root"))
    assert info.add_dependency(Texture(image_data=b"x")) is None
    assert len(info.get_dependencies()) == 0


def test_find_all_is_breadth_first_and_type_checked():
    root = Node("root")
    inner = Node("inner")
    inner.attach_child(geometry("deep"))
    root.attach_child(inner)
    root.attach_child(geometry("shallow"))
    info = ModelInfo(None, "test", root)

    assert [g.name for g in info.find_all(spatial_type=Geometry)] == ["shallow", "deep"]
    assert info.find_first("inner") is inner
    assert info.find_first("missing") is None
    with pytest.raises(InvalidArgumentError):
        info.find_all(spatial_type=Material)


def test_statistics_counts_generated_and_instances():
    material = keyed_material("mats/red.mat")
    info = ModelInfo(None, "test", two_geometry_scene(material, material))
    info.generate_material(Material("Unshaded"), "gen")
    stats = info.statistics()
    assert stats["total_dependencies"] == 2
    assert stats["generated_dependencies"] == 1
    assert stats["total_instances"] == 3


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
