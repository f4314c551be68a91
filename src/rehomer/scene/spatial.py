"""
Scene graph nodes.

Spatial is the base; Node holds ordered children; Geometry holds a mesh and
at most one material; LinkNode stands in for a model stored in its own file.
"""

from collections import deque
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, TypeVar

from .transform import Transform
from .mesh import Mesh
from .material import Material
from ..keys import ModelKey, ResourceKey
from ..errors import InvalidArgumentError

T = TypeVar("T")


class Spatial:
    """Base scene graph element."""

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self.parent: Optional["Node"] = None
        self.local_transform = Transform()
        self.user_data: Dict[str, Any] = {}
        self._key: Optional[ResourceKey] = None

    @property
    def key(self) -> Optional[ResourceKey]:
        """Key the spatial was loaded from, if any."""
        return self._key

    @key.setter
    def key(self, value: Optional[ResourceKey]):
        self._key = value

    def remove_from_parent(self) -> bool:
        if self.parent is None:
            return False
        self.parent.detach_child(self)
        return True

    def world_transform(self) -> Transform:
        transform = self.local_transform
        node = self.parent
        while node is not None:
            transform = transform.combine_with_parent(node.local_transform)
            node = node.parent
        return transform

    def depth_first(self) -> Iterator["Spatial"]:
        yield self

    def breadth_first(self) -> Iterator["Spatial"]:
        queue = deque([self])
        while queue:
            spatial = queue.popleft()
            yield spatial
            if isinstance(spatial, Node):
                queue.extend(spatial.children)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name or ''})"


class Node(Spatial):
    """A spatial with ordered children."""

    def __init__(self, name: Optional[str] = None):
        super().__init__(name)
        self._children: List[Spatial] = []

    @property
    def children(self) -> List[Spatial]:
        return list(self._children)

    def attach_child(self, child: Spatial) -> Spatial:
        return self.attach_child_at(child, len(self._children))

    def attach_child_at(self, child: Spatial, index: int) -> Spatial:
        if child.parent is not None:
            child.parent.detach_child(child)
        index = max(0, min(index, len(self._children)))
        self._children.insert(index, child)
        child.parent = self
        return child

    def detach_child(self, child: Spatial) -> int:
        """Detach child and return the index it occupied, or -1."""
        idx = self.child_index(child)
        if idx < 0:
            return -1
        del self._children[idx]
        child.parent = None
        return idx

    def detach_all_children(self) -> None:
        for child in list(self._children):
            self.detach_child(child)

    def child_index(self, child: Spatial) -> int:
        for i, c in enumerate(self._children):
            if c is child:
                return i
        return -1

    def depth_first(self) -> Iterator[Spatial]:
        yield self
        for child in self._children:
            yield from child.depth_first()


class Geometry(Spatial):
    """A renderable leaf: one mesh, at most one material."""

    def __init__(self, name: Optional[str] = None, mesh: Optional[Mesh] = None,
                 material: Optional[Material] = None):
        super().__init__(name)
        self.mesh = mesh if mesh is not None else Mesh()
        self.material = material

    def world_bounds(self):
        bounds = self.mesh.bounds()
        if bounds is None:
            return None
        lo, hi = bounds
        corners = [[x, y, z] for x in (lo[0], hi[0]) for y in (lo[1], hi[1]) for z in (lo[2], hi[2])]
        pts = self.world_transform().transform_points(corners)
        return pts.min(axis=0), pts.max(axis=0)


class LinkNode(Node):
    """
    A placeholder for one or more models stored in their own files.

    The linked keys are what gets persisted. Children are only a resolved,
    in-memory copy and are never written with the owning scene.
    """

    def __init__(self, name: Optional[str] = None, key: Optional[ModelKey] = None):
        super().__init__(name)
        self.linked_keys: List[ResourceKey] = []
        if key is not None:
            self.linked_keys.append(key)

    @property
    def key(self) -> Optional[ResourceKey]:
        """The primary linked key (the target of the placeholder)."""
        return self.linked_keys[0] if self.linked_keys else None

    @key.setter
    def key(self, value: Optional[ResourceKey]):
        if value is None:
            self.linked_keys.clear()
        elif self.linked_keys:
            self.linked_keys[0] = value
        else:
            self.linked_keys.append(value)

    target_key = key

    def add_linked_key(self, key: ResourceKey) -> None:
        self.linked_keys.append(key)

    def attach_linked_child(self, child: Spatial, key: ResourceKey) -> None:
        if key not in self.linked_keys:
            self.linked_keys.append(key)
        self.attach_child(child)

    def detach_linked_children(self) -> None:
        """Drop resolved children. Linked keys are kept."""
        self.detach_all_children()

    def attach_linked_children(self, loader: Callable[[ResourceKey], Spatial]) -> int:
        """
        Resolve every linked key through loader and attach the results.

        Already-attached children are replaced. Returns the number attached.
        """
        self.detach_linked_children()
        for key in self.linked_keys:
            self.attach_child(loader(key))
        return len(self._children)


def find_all(root: Spatial, name: Optional[str] = None, spatial_type: Type[T] = Spatial) -> List[T]:
    """
    All spatials under root (inclusive) matching name and type, breadth first.

    A name of None matches any name.
    """
    if not (isinstance(spatial_type, type) and issubclass(spatial_type, Spatial)):
        raise InvalidArgumentError(f"Type is not a Spatial compatible type: {spatial_type}")
    return [s for s in root.breadth_first()
            if isinstance(s, spatial_type) and (name is None or s.name == name)]


def find_first(root: Spatial, name: Optional[str] = None, spatial_type: Type[T] = Spatial) -> Optional[T]:
    results = find_all(root, name, spatial_type)
    return results[0] if results else None
