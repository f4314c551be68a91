"""Flattened, display-ready views of a model tree and its dependencies."""

from dataclasses import dataclass
from typing import List, Optional

from ..graph import ModelInfo
from ..scene import Geometry, LinkNode, Node, Spatial


@dataclass
class OutlineRow:
    depth: int
    label: str
    kind: str
    key: Optional[str] = None

    def text(self, indent: str = "  ") -> str:
        line = f"{indent * self.depth}{self.label}"
        if self.key:
            line += f"  [{self.key}]"
        return line


def _kind(spatial: Spatial) -> str:
    if isinstance(spatial, LinkNode):
        return "link"
    if isinstance(spatial, Node):
        return "node"
    if isinstance(spatial, Geometry):
        return "geometry"
    return "spatial"


def outline_rows(root: Spatial) -> List[OutlineRow]:
    """One row per spatial, depth first. Geometry materials get a row of their own."""
    rows: List[OutlineRow] = []

    def visit(spatial: Spatial, depth: int):
        key = spatial.key.render() if spatial.key is not None else None
        rows.append(OutlineRow(depth, spatial.name or f"<{_kind(spatial)}>", _kind(spatial), key))
        if isinstance(spatial, Node):
            for child in spatial.children:
                visit(child, depth + 1)
        elif isinstance(spatial, Geometry) and spatial.material is not None:
            material = spatial.material
            mat_key = material.key.render() if material.key is not None else None
            rows.append(OutlineRow(depth + 1, repr(material), "material", mat_key))

    visit(root, 0)
    return rows


def dependency_rows(info: ModelInfo) -> List[List[str]]:
    """Table rows: original key, current key, instances, source."""
    report = info.report()
    return [
        [r.original_key, r.current_key, str(r.instance_count),
         "generated" if r.generated else (r.source_file or "")]
        for r in report.records
    ]
