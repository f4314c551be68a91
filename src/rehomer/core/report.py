"""Conversion report - one row per dependency, for display or auditing."""

import json
from dataclasses import dataclass, field, asdict
from typing import List, Optional

from ..graph import ModelInfo


@dataclass
class DependencyRecord:
    original_key: str
    current_key: str
    source_file: Optional[str]
    instance_count: int
    generated: bool

    @property
    def rehomed(self) -> bool:
        return self.original_key != self.current_key


@dataclass
class ConversionReport:
    model_name: str
    records: List[DependencyRecord] = field(default_factory=list)

    @classmethod
    def from_model(cls, info: ModelInfo) -> "ConversionReport":
        records = [
            DependencyRecord(
                original_key=dep.original_key.render(),
                current_key=dep.key.render(),
                source_file=str(dep.source_file) if dep.source_file is not None else None,
                instance_count=dep.instance_count,
                generated=dep.is_generated,
            )
            for dep in sorted(info.get_dependencies())
        ]
        return cls(info.model_name, records)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def to_yaml(self) -> str:
        lines = [f"model: {self.model_name}"]
        if not self.records:
            lines.append("dependencies: []")
            return "\n".join(lines)
        lines.append("dependencies:")
        for r in self.records:
            lines.append(f"  - original_key: {r.original_key}")
            lines.append(f"    current_key: {r.current_key}")
            lines.append(f"    source_file: {r.source_file if r.source_file is not None else 'null'}")
            lines.append(f"    instance_count: {r.instance_count}")
            lines.append(f"    generated: {'true' if r.generated else 'false'}")
        return "\n".join(lines)

    def to_table(self) -> str:
        lines = [f"Model: {self.model_name}", f"Dependencies: {len(self.records)}", ""]
        for r in self.records:
            origin = "generated" if r.generated else (r.source_file or "")
            line = f"  {r.original_key}"
            if r.rehomed:
                line += f" -> {r.current_key}"
            if r.instance_count > 1:
                line += f" (x{r.instance_count})"
            lines.append(line)
            lines.append(f"      {origin}")
        return "\n".join(lines)
