"""Type descriptors the converter walks instead of live reflection objects."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union


# ============================================================
# Kinds
# ============================================================

class Kind(str, Enum):
    """Underlying kind of a described type."""
    INVALID = "invalid"
    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINTPTR = "uintptr"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"
    STRING = "string"
    ARRAY = "array"
    SLICE = "slice"
    MAP = "map"
    POINTER = "pointer"
    STRUCT = "struct"
    INTERFACE = "interface"
    FUNC = "func"
    CHAN = "chan"
    UNSAFE_POINTER = "unsafe_pointer"


COMPOSITE_KINDS = frozenset({Kind.ARRAY, Kind.SLICE, Kind.MAP, Kind.POINTER, Kind.STRUCT, Kind.INTERFACE})

# Tag keys read from struct fields
JSON_TAG = "json"
TS_TYPE_TAG = "ts_type"
TS_DOC_TAG = "ts_doc"


# ============================================================
# Descriptor variants
# ============================================================

@dataclass(frozen=True)
class ScalarType:
    """A leaf type: booleans, numbers, strings and the kinds with no TS mapping."""
    kind: Kind
    name: str = ""

    def __post_init__(self) -> None:
        if self.kind in COMPOSITE_KINDS:
            raise ValueError(f"{self.kind.value} is not a scalar kind")

    @property
    def type_name(self) -> str:
        return self.name or self.kind.value


@dataclass(frozen=True)
class PointerType:
    """One level of indirection around another type."""
    elem: "TypeDescriptor"

    @property
    def kind(self) -> Kind:
        return Kind.POINTER

    @property
    def type_name(self) -> str:
        return f"*{self.elem.type_name}"


@dataclass(frozen=True)
class ArrayType:
    """A slice (length is None) or a fixed-length array."""
    elem: "TypeDescriptor"
    length: Optional[int] = None

    @property
    def kind(self) -> Kind:
        return Kind.SLICE if self.length is None else Kind.ARRAY

    @property
    def type_name(self) -> str:
        size = "" if self.length is None else str(self.length)
        return f"[{size}]{self.elem.type_name}"


@dataclass(frozen=True)
class MapType:
    """A key/value mapping."""
    key: "TypeDescriptor"
    value: "TypeDescriptor"

    @property
    def kind(self) -> Kind:
        return Kind.MAP

    @property
    def type_name(self) -> str:
        return f"map[{self.key.type_name}]{self.value.type_name}"


@dataclass(frozen=True)
class OpenType:
    """The dynamic "any" kind, rendered as a generic placeholder."""

    @property
    def kind(self) -> Kind:
        return Kind.INTERFACE

    @property
    def type_name(self) -> str:
        return "interface {}"


@dataclass(eq=False)
class StructType:
    """
    A structure type. Identity is the qualified name, so two descriptors for
    the same module + name are the same type. Fields may be assigned after
    construction, which is how self-referencing graphs get built.
    """
    name: str
    module: str = ""
    fields: list["StructField"] = field(default_factory=list, repr=False)

    @property
    def kind(self) -> Kind:
        return Kind.STRUCT

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}" if self.module else self.name

    @property
    def type_name(self) -> str:
        return self.qualified_name

    def define_fields(self, *fields: "StructField") -> "StructType":
        """Replace the field list and return the struct for chaining."""
        self.fields = list(fields)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructType):
            return NotImplemented
        return self.qualified_name == other.qualified_name

    def __hash__(self) -> int:
        return hash((StructType, self.qualified_name))


TypeDescriptor = Union[ScalarType, PointerType, ArrayType, MapType, OpenType, StructType]


@dataclass(frozen=True)
class StructField:
    """One declared field of a structure type."""
    name: str
    type: TypeDescriptor
    tags: Mapping[str, str] = field(default_factory=dict, hash=False)
    anonymous: bool = False
    exported: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.exported is None:
            object.__setattr__(self, "exported", not self.name.startswith("_"))

    def tag(self, key: str) -> str:
        """Return the tag value for key, or "" when the tag is absent."""
        return self.tags.get(key, "") or ""

    def with_type(self, new_type: TypeDescriptor) -> "StructField":
        """Return a copy of the field carrying a different type."""
        return StructField(
            name=self.name,
            type=new_type,
            tags=self.tags,
            anonymous=self.anonymous,
            exported=self.exported,
        )


# ============================================================
# Walk helpers
# ============================================================

def unwrap_pointer(type_descriptor: TypeDescriptor) -> TypeDescriptor:
    """Strip one level of pointer indirection, if present."""
    if isinstance(type_descriptor, PointerType):
        return type_descriptor.elem
    return type_descriptor


def deep_fields(type_descriptor: TypeDescriptor) -> list[StructField]:
    """
    Return the fields of a struct with anonymous struct fields hoisted in place,
    depth-first. Anything that is not a struct (or pointer to one) has no fields.
    """
    collected_fields: list[StructField] = []

    def visit(struct_type: StructType, *, resolving: set[str]) -> None:
        """Append the fields of struct_type, inlining embedded structs."""
        for struct_field in struct_type.fields:
            embedded_type = unwrap_pointer(struct_field.type)
            if struct_field.anonymous and isinstance(embedded_type, StructType):
                if embedded_type.qualified_name in resolving:
                    continue
                resolving.add(embedded_type.qualified_name)
                visit(embedded_type, resolving=resolving)
                resolving.remove(embedded_type.qualified_name)
                continue
            collected_fields.append(struct_field)

    root_type = unwrap_pointer(type_descriptor)
    if isinstance(root_type, StructType):
        visit(root_type, resolving={root_type.qualified_name})
    return collected_fields


def is_descriptor(candidate: object) -> bool:
    """Return True if candidate is one of the descriptor variants."""
    return isinstance(candidate, (ScalarType, PointerType, ArrayType, MapType, OpenType, StructType))
