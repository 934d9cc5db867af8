"""Decide how a single struct field is rendered."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional

from .descriptors import ArrayType, MapType, OpenType, StructField, StructType, TypeDescriptor, unwrap_pointer
from .options import StructSpec, TypeOptions
from .resolver import json_field_name, resolve_field_options


class FieldCategory(str, Enum):
    """Rendering branch chosen for a field."""
    OVERRIDE = "override"
    STRUCT = "struct"
    MAP = "map"
    ARRAY = "array"
    SCALAR = "scalar"
    OPEN = "open"


@dataclass(frozen=True)
class ClassifiedField:
    """A serialized field with its merged options and rendering branch."""
    field: StructField
    json_name: str
    options: TypeOptions
    category: FieldCategory

    # ARRAY only: innermost element type (pointers removed) and number of [] levels
    element_type: Optional[TypeDescriptor] = None
    array_depth: int = 0

    @property
    def field_type(self) -> TypeDescriptor:
        return self.field.type


def collapse_array(array_type: ArrayType) -> tuple[TypeDescriptor, int]:
    """
    Fold nested array/slice levels into one depth counter.

      [][]*Point -> (Point, 2)
    """
    element_type = unwrap_pointer(array_type.elem)
    array_depth = 1
    while isinstance(element_type, ArrayType):
        element_type = unwrap_pointer(element_type.elem)
        array_depth += 1
    return element_type, array_depth


def classify_field(
    owner_type: StructType,
    struct_field: StructField,
    *,
    struct_specs: Iterable[StructSpec],
    global_type_options: Mapping[TypeDescriptor, TypeOptions],
) -> Optional[ClassifiedField]:
    """Classify one field of owner_type. Returns None for fields that are not serialized."""
    struct_field = struct_field.with_type(unwrap_pointer(struct_field.type))

    json_name = json_field_name(struct_field)
    if not json_name:
        return None

    field_options = resolve_field_options(
        owner_type,
        struct_field,
        struct_specs=struct_specs,
        global_type_options=global_type_options,
    )
    field_type = struct_field.type

    if field_options.ts_type:
        category = FieldCategory.OVERRIDE
    elif isinstance(field_type, StructType):
        category = FieldCategory.STRUCT
    elif isinstance(field_type, MapType):
        category = FieldCategory.MAP
    elif isinstance(field_type, ArrayType):
        element_type, array_depth = collapse_array(field_type)
        return ClassifiedField(
            field=struct_field,
            json_name=json_name,
            options=field_options,
            category=FieldCategory.ARRAY,
            element_type=element_type,
            array_depth=array_depth,
        )
    elif isinstance(field_type, OpenType):
        category = FieldCategory.OPEN
    else:
        category = FieldCategory.SCALAR

    return ClassifiedField(
        field=struct_field,
        json_name=json_name,
        options=field_options,
        category=category,
    )
