"""Override bundles and per-struct registrations."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .descriptors import StructType, TypeDescriptor, is_descriptor
from .introspect import describe


@dataclass(frozen=True)
class TypeOptions:
    """Overrides for the options normally set by `ts_*` tags."""
    ts_type: str = ""
    ts_doc: str = ""

    def merged_with(self, override: "TypeOptions") -> "TypeOptions":
        """Apply the non-empty values of override on top of these options."""
        return TypeOptions(
            ts_type=override.ts_type or self.ts_type,
            ts_doc=override.ts_doc or self.ts_doc,
        )


@dataclass
class StructSpec:
    """Settings for converting one struct: the type plus field overrides keyed by field type."""
    type: StructType
    field_options: dict[TypeDescriptor, TypeOptions] = field(default_factory=dict)

    def __post_init__(self) -> None:
        described = describe(self.type)
        if not isinstance(described, StructType):
            raise TypeError(f"{described.type_name} is not a struct type")
        self.type = described

    def with_field_options(self, field_type: Any, options: TypeOptions) -> "StructSpec":
        """Override options for every field of field_type declared on this struct."""
        self.field_options[describe(field_type)] = options
        return self


def new_struct(obj: Any) -> StructSpec:
    """Build a StructSpec from a struct descriptor, a class, or an instance of one."""
    if isinstance(obj, StructSpec):
        return obj
    if not isinstance(obj, type) and not is_descriptor(obj):
        obj = type(obj)
    return StructSpec(type=obj)
