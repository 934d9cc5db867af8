"""Per-run record of struct types whose interfaces were already emitted."""
from __future__ import annotations

from dataclasses import dataclass, field

from .descriptors import StructType


@dataclass
class TypeRegistry:
    """Tracks emitted struct types for exactly one conversion run."""
    emitted_types: set[StructType] = field(default_factory=set)

    def mark_emitted(self, struct_type: StructType) -> bool:
        """Mark struct_type as emitted. Returns False if it already was."""
        if struct_type in self.emitted_types:
            return False
        self.emitted_types.add(struct_type)
        return True

    def __contains__(self, struct_type: object) -> bool:
        return struct_type in self.emitted_types

    def __len__(self) -> int:
        return len(self.emitted_types)
