"""Serialized field names and the three-layer option merge."""
from __future__ import annotations

from typing import Iterable, Mapping

from .descriptors import JSON_TAG, TS_DOC_TAG, TS_TYPE_TAG, StructField, StructType, TypeDescriptor, unwrap_pointer
from .options import StructSpec, TypeOptions


OMIT_EMPTY_MARKER = "omitempty"
SKIP_FIELD_NAME = "-"
OPTIONAL_MARKER = "?"


def json_field_name(struct_field: StructField) -> str:
    """
    Return the name a field is serialized under, or "" when it is not serialized.

      `json:"size,omitempty"` -> "size?"
      `json:"-"`              -> ""
      no tag, exported        -> declared name
      no tag, unexported      -> ""
    """
    json_tag = struct_field.tag(JSON_TAG)
    if not json_tag:
        return struct_field.name if struct_field.exported else ""

    tag_parts = json_tag.split(",")
    serialized_name = tag_parts[0].strip()
    if not serialized_name or serialized_name == SKIP_FIELD_NAME:
        return ""

    if OMIT_EMPTY_MARKER in (part.strip() for part in tag_parts[1:]):
        return f"{serialized_name}{OPTIONAL_MARKER}"
    return serialized_name


def resolve_field_options(
    owner_type: StructType,
    struct_field: StructField,
    *,
    struct_specs: Iterable[StructSpec],
    global_type_options: Mapping[TypeDescriptor, TypeOptions],
) -> TypeOptions:
    """
    Merge tag options with struct-specific and global overrides.

    Layers apply in order: tags, then every struct spec registered for owner_type
    (keyed by the field's type with one pointer level removed), then the global
    override for that field type. Non-empty values of a later layer win.
    """
    field_options = TypeOptions(
        ts_type=struct_field.tag(TS_TYPE_TAG),
        ts_doc=struct_field.tag(TS_DOC_TAG),
    )
    field_type = unwrap_pointer(struct_field.type)

    overrides: list[TypeOptions] = []
    for struct_spec in struct_specs:
        if not struct_spec.field_options or struct_spec.type != owner_type:
            continue
        struct_override = struct_spec.field_options.get(field_type)
        if struct_override is not None:
            overrides.append(struct_override)

    global_override = global_type_options.get(field_type)
    if global_override is not None:
        overrides.append(global_override)

    for override in overrides:
        field_options = field_options.merged_with(override)
    return field_options
