"""
Asset Rehomer - Scene Graph Tests

Transforms, mesh buffers and node bookkeeping.

Can be run standalone: python test_scene_graph.py
Or via main runner: python tests.py
"""

import sys
from pathlib import Path

TESTS_DIR = Path(__file__).parent
sys.path.insert(0, str(TESTS_DIR))

import numpy as np
import pytest

from scene_builders import geometry, triangle_mesh
from rehomer.keys import ModelKey
from rehomer.scene import LinkNode, Mesh, Node, Transform

QUARTER_TURN_Z = [0.0, 0.0, np.sqrt(0.5), np.sqrt(0.5)]


def test_identity_transform():
    t = Transform()
    assert t.is_identity()
    np.testing.assert_allclose(t.to_matrix(), np.identity(4))


def test_transform_applies_scale_rotate_translate():
    t = Transform(translation=[10.0, 0.0, 0.0], rotation=QUARTER_TURN_Z, scale=[2.0, 2.0, 2.0])
    np.testing.assert_allclose(t.transform_point([1.0, 0.0, 0.0]), [10.0, 2.0, 0.0], atol=1e-9)


def test_matrix_round_trip():
    t = Transform(translation=[1.0, 2.0, 3.0], rotation=QUARTER_TURN_Z, scale=[1.0, 3.0, 1.0])
    column_major = t.to_matrix().T.reshape(-1).tolist()
    assert Transform.from_matrix(column_major) == t


def test_combine_with_parent_matches_matrix_product():
    parent = Transform(translation=[0.0, 5.0, 0.0], rotation=QUARTER_TURN_Z)
    child = Transform(translation=[1.0, 0.0, 0.0], scale=[2.0, 2.0, 2.0])
    world = child.combine_with_parent(parent)
    np.testing.assert_allclose(world.to_matrix(), parent.to_matrix() @ child.to_matrix(), atol=1e-9)


def test_mesh_counts_and_bounds():
    mesh = triangle_mesh()
    assert mesh.vertex_count == 3
    assert mesh.triangle_count == 1
    lo, hi = mesh.bounds()
    assert lo.tolist() == [0.0, 0.0, 0.0]
    assert hi.tolist() == [1.0, 1.0, 0.0]
    assert Mesh().bounds() is None


def test_world_bounds_follow_parent_transform():
    root = Node("root")
    root.local_transform = Transform(translation=[5.0, 0.0, 0.0])
    g = geometry("g")
    root.attach_child(g)
    lo, hi = g.world_bounds()
    assert lo.tolist() == [5.0, 0.0, 0.0]
    assert hi.tolist() == [6.0, 1.0, 0.0]


def test_attach_at_index_and_detach_report_positions():
    root = Node("root")
    a, b, c = geometry("a"), geometry("b"), geometry("c")
    root.attach_child(a)
    root.attach_child(c)
    root.attach_child_at(b, 1)
    assert [x.name for x in root.children] == ["a", "b", "c"]

    assert root.detach_child(b) == 1
    assert b.parent is None
    assert root.detach_child(b) == -1

    other = Node("other")
    other.attach_child(a)
    assert a.parent is other
    assert [x.name for x in root.children] == ["c"]


def test_traversal_orders():
    root = Node("root")
    left = Node("left")
    left.attach_child(geometry("leaf"))
    root.attach_child(left)
    root.attach_child(geometry("right"))

    assert [s.name for s in root.depth_first()] == ["root", "left", "leaf", "right"]
    assert [s.name for s in root.breadth_first()] == ["root", "left", "right", "leaf"]


def test_link_node_key_is_first_linked_key():
    link = LinkNode("door.scene", ModelKey.parse("door.scene"))
    assert link.key == ModelKey.parse("door.scene")
    assert link.target_key == link.key

    link.key = ModelKey.parse("Models/door.scene")
    assert link.linked_keys == [ModelKey.parse("Models/door.scene")]

    loaded = []
    link.add_linked_key(ModelKey.parse("extra.scene"))
    count = link.attach_linked_children(lambda key: loaded.append(key) or Node(key.render()))
    assert count == 2
    assert [c.name for c in link.children] == ["Models/door.scene", "extra.scene"]

    link.detach_linked_children()
    assert link.children == []
    assert len(link.linked_keys) == 2


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
