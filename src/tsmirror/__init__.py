"""Mirror Python data shapes as TypeScript interfaces."""
from __future__ import annotations

from .config import ConverterConfig, ConverterSettings, load_kind_mapping
from .descriptors import (
    ArrayType,
    Kind,
    MapType,
    OpenType,
    PointerType,
    ScalarType,
    StructField,
    StructType,
    TypeDescriptor,
    deep_fields,
)
from .errors import TsMirrorError, UnresolvedTypeError, UnsupportedUnionValueError
from .introspect import describe, ts_field
from .options import StructSpec, TypeOptions, new_struct
from .union import union_ts_type
from .walker import BANNER, Converter

__all__ = [
    "ArrayType",
    "BANNER",
    "Converter",
    "ConverterConfig",
    "ConverterSettings",
    "Kind",
    "MapType",
    "OpenType",
    "PointerType",
    "ScalarType",
    "StructField",
    "StructSpec",
    "StructType",
    "TsMirrorError",
    "TypeDescriptor",
    "TypeOptions",
    "UnresolvedTypeError",
    "UnsupportedUnionValueError",
    "deep_fields",
    "describe",
    "load_kind_mapping",
    "new_struct",
    "ts_field",
    "union_ts_type",
]
