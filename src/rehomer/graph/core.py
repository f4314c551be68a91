"""
Dependency discovery for a loaded scene.

Resources are deduplicated by object identity, never by key equality: two
distinct texture objects that happen to share a key stay two dependencies.
"""

import logging
from pathlib import Path
from typing import Dict, Generic, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from ..errors import InvalidArgumentError
from ..keys import MaterialKey, ResourceKey
from ..scene import Geometry, LinkNode, Material, Node, Spatial, find_all, find_first
from ..scene.material import SmartAsset
from utils.paths import asset_file

logger = logging.getLogger(__name__)

MATERIAL_EXTENSION = "mat"

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")


class IdentityMap(Generic[K, V]):
    """
    Mapping keyed by object identity.

    The key objects are held alongside the values, so their id() stays valid
    for as long as the entry exists. Iteration follows insertion order.
    """

    def __init__(self):
        self._entries: Dict[int, Tuple[K, V]] = {}

    def get(self, obj: K, default: Optional[V] = None) -> Optional[V]:
        entry = self._entries.get(id(obj))
        return entry[1] if entry is not None else default

    def __setitem__(self, obj: K, value: V) -> None:
        self._entries[id(obj)] = (obj, value)

    def __getitem__(self, obj: K) -> V:
        return self._entries[id(obj)][1]

    def __contains__(self, obj: K) -> bool:
        return id(obj) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> List[K]:
        return [obj for obj, _ in self._entries.values()]

    def values(self) -> List[V]:
        return [value for _, value in self._entries.values()]

    def items(self) -> List[Tuple[K, V]]:
        return list(self._entries.values())

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())


class Dependency:
    """
    One distinct external resource and every place in the scene using it.

    The dependency owns the current key. Setting it rewrites the key on every
    instance, so no instance can hold a stale key once rehoming starts.
    """

    def __init__(self, asset: SmartAsset, source_file: Optional[Path] = None):
        if asset.key is None:
            raise InvalidArgumentError(f"Dependency asset has no key: {asset!r}")
        self.original_key: ResourceKey = asset.key
        self.source_file: Optional[Path] = source_file
        self.instances: List[SmartAsset] = [asset]
        self._key: ResourceKey = asset.key

    @property
    def key(self) -> ResourceKey:
        """The current key, equal to original_key until rehomed."""
        return self._key

    current_key = key

    def set_key(self, key: ResourceKey) -> None:
        self._key = key
        for asset in self.instances:
            asset.key = key

    def add_instance(self, asset: SmartAsset) -> None:
        self.instances.append(asset)

    def reset_key(self, key: ResourceKey) -> None:
        """Make key both the original and the current key, as if first registered with it."""
        self.original_key = key
        self.set_key(key)

    @property
    def asset(self) -> SmartAsset:
        """The first instance. Every dependency has at least one."""
        return self.instances[0]

    @property
    def instance_count(self) -> int:
        return len(self.instances)

    @property
    def is_generated(self) -> bool:
        """True for assets synthesized during conversion rather than read from a file."""
        return self.source_file is None

    def __lt__(self, other: "Dependency") -> bool:
        return self.original_key.render() < other.original_key.render()

    def __repr__(self) -> str:
        return f"Dependency[file={self.source_file}, originalKey={self.original_key}]"


class DependencyMap(IdentityMap[SmartAsset, Dependency]):
    """Asset instance -> Dependency, with the discovery dedup rule built in."""

    def __init__(self, source_root: Optional[Path] = None):
        super().__init__()
        self.source_root = Path(source_root) if source_root is not None else None
        self._scanned: IdentityMap[Material, bool] = IdentityMap()

    def add(self, asset: SmartAsset, generated: bool = False) -> Dependency:
        """
        Record one reference to asset.

        A second reference to the same object grows the existing dependency.
        New file-backed dependencies resolve their source file against the
        source root; generated ones (or any without a root) have none.
        """
        existing = self.get(asset)
        if existing is not None:
            existing.add_instance(asset)
            return existing

        source_file = None
        if not generated and self.source_root is not None:
            source_file = asset_file(self.source_root, asset.key.render())
        dep = Dependency(asset, source_file)
        self[asset] = dep
        return dep

    def scan_parameters(self, material: Material) -> None:
        """
        Register the keyed assets in material's parameters.

        Each material object is scanned once, keyed or not, so a material
        shared by several geometries counts its parameter slots one time.
        """
        if material in self._scanned:
            return
        self._scanned[material] = True
        for param in material.params:
            value = param.value
            if not isinstance(value, SmartAsset):
                continue
            logger.debug("material asset: %s -> %r", param.name, value)
            if value.key is not None:
                self.add(value)


def discover(root: Spatial, source_root: Optional[Path] = None,
             dependencies: Optional[DependencyMap] = None) -> DependencyMap:
    """
    Walk root depth first and map every keyed resource to its Dependency.

    Assets with no key are embedded in the scene and are skipped, though an
    unkeyed material's texture parameters are still scanned.
    """
    if dependencies is None:
        dependencies = DependencyMap(source_root)
    _visit(root, dependencies)
    return dependencies


def _visit(spatial: Spatial, dependencies: DependencyMap) -> None:
    logger.debug("discover(%r)", spatial)
    if isinstance(spatial, Node):
        for child in spatial.children:
            _visit(child, dependencies)
    elif isinstance(spatial, Geometry):
        if spatial.material is not None:
            _visit_material(spatial.material, dependencies)


def _visit_material(material: Material, dependencies: DependencyMap) -> None:
    if material.key is not None:
        dependencies.add(material)
    dependencies.scan_parameters(material)


class ModelInfo:
    """
    A loaded model plus its dependency map, for the length of one conversion.

    Processors (probe, scripts, writer) all work against one ModelInfo.
    """

    def __init__(self, root: Optional[Union[str, Path]], name: str, model: Spatial):
        self.root = Path(root) if root is not None else None
        self.name = name
        self.model = model
        self.dependencies = discover(model, self.root)

    # ─────────────────────────────────────────────────────────────
    # LOOKUP
    # ─────────────────────────────────────────────────────────────

    @property
    def model_root(self) -> Spatial:
        return self.model

    @property
    def model_name(self) -> str:
        return self.name

    @model_name.setter
    def model_name(self, name: str):
        self.name = name

    def find_all(self, name: Optional[str] = None, spatial_type: Type[T] = Spatial) -> List[T]:
        """Every spatial matching name and type, breadth first, so shallower results come first."""
        return find_all(self.model, name, spatial_type)

    def find_first(self, name: Optional[str] = None, spatial_type: Type[T] = Spatial) -> Optional[T]:
        return find_first(self.model, name, spatial_type)

    def get_dependencies(self) -> List[Dependency]:
        return self.dependencies.values()

    def get_dependency(self, asset: SmartAsset) -> Optional[Dependency]:
        return self.dependencies.get(asset)

    # ─────────────────────────────────────────────────────────────
    # MUTATION
    # ─────────────────────────────────────────────────────────────

    def add_dependency(self, asset: SmartAsset, generated: bool = False) -> Optional[Dependency]:
        """Register an asset loaded or created outside discovery. Keyless assets are ignored."""
        if asset.key is None:
            logger.debug("Ignoring keyless asset: %r", asset)
            return None
        return self.dependencies.add(asset, generated=generated)

    def generate_material(self, material: Material, asset_name: str) -> Dependency:
        """
        Register material to be written as its own material file.

        The '.mat' extension is appended when missing. Keyed textures in its
        parameters are registered as dependencies too. Generating a material
        that is already registered renames its dependency to asset_name.
        """
        logger.debug("generate_material(%r, %s)", material, asset_name)
        if not asset_name.lower().endswith("." + MATERIAL_EXTENSION):
            asset_name = f"{asset_name}.{MATERIAL_EXTENSION}"
        key = MaterialKey.parse(asset_name)
        dep = self.dependencies.get(material)
        if dep is None:
            material.key = key
            dep = self.dependencies.add(material, generated=True)
        else:
            dep.source_file = None
            dep.reset_key(key)
        self.dependencies.scan_parameters(material)
        return dep

    def extract_submodel(self, submodel: Spatial, asset_name: str) -> LinkNode:
        """Move submodel into its own model file, leaving a LinkNode in its place."""
        from ..core.extractor import SubtreeExtractor
        return SubtreeExtractor(self).extract(submodel, asset_name)

    # ─────────────────────────────────────────────────────────────
    # REPORTING
    # ─────────────────────────────────────────────────────────────

    def report(self):
        """ConversionReport for the current state of the dependencies."""
        from ..core.report import ConversionReport
        return ConversionReport.from_model(self)

    def statistics(self) -> Dict:
        deps = self.get_dependencies()
        generated = sum(1 for d in deps if d.is_generated)
        return {
            'total_dependencies': len(deps),
            'file_dependencies': len(deps) - generated,
            'generated_dependencies': generated,
            'total_instances': sum(d.instance_count for d in deps),
        }

    def __str__(self) -> str:
        stats = self.statistics()
        return (
            f"ModelInfo({self.name}):\n"
            f"  Dependencies: {stats['total_dependencies']}\n"
            f"  From files:   {stats['file_dependencies']}\n"
            f"  Generated:    {stats['generated_dependencies']}\n"
            f"  Instances:    {stats['total_instances']}\n"
        )
