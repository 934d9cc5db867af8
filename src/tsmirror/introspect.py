"""Build type descriptors from Python annotations, dataclasses and pydantic models."""
from __future__ import annotations

import collections
import collections.abc
import dataclasses
import datetime
import types
import typing
import uuid
import weakref
from enum import Enum
from typing import Annotated, Any, Callable, Literal, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from .descriptors import (
    JSON_TAG,
    TS_DOC_TAG,
    TS_TYPE_TAG,
    ArrayType,
    Kind,
    MapType,
    OpenType,
    PointerType,
    ScalarType,
    StructField,
    StructType,
    TypeDescriptor,
    is_descriptor,
)
from .errors import TsMirrorError


EMBED_TAG = "embed"
TAG_KEYS = (JSON_TAG, TS_TYPE_TAG, TS_DOC_TAG)

# Struct descriptors are cached per class so repeated and cyclic references share one node.
_STRUCT_CACHE: "weakref.WeakKeyDictionary[type, StructType]" = weakref.WeakKeyDictionary()

_SCALAR_KINDS_BY_CLASS: tuple[tuple[type, Kind], ...] = (
    # bool first: it is a subclass of int
    (bool, Kind.BOOL),
    (int, Kind.INT),
    (float, Kind.FLOAT64),
    (complex, Kind.COMPLEX128),
    (str, Kind.STRING),
)

# Types that serialize as strings in JSON payloads
_STRING_LIKE_CLASSES: tuple[type, ...] = (uuid.UUID, datetime.datetime, datetime.date, datetime.time)

_BYTES_CLASSES: tuple[type, ...] = (bytes, bytearray, memoryview)

_SEQUENCE_ORIGINS: frozenset[Any] = frozenset(
    {
        list,
        set,
        frozenset,
        collections.deque,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
        collections.abc.Iterable,
        collections.abc.Collection,
    }
)

_MAPPING_ORIGINS: frozenset[Any] = frozenset(
    {
        dict,
        collections.OrderedDict,
        collections.defaultdict,
        collections.abc.Mapping,
        collections.abc.MutableMapping,
    }
)


# ============================================================
# Field declaration helper
# ============================================================

def ts_field(
    *,
    json: str = "",
    ts_type: str = "",
    ts_doc: str = "",
    embed: bool = False,
    **field_kwargs: Any,
) -> Any:
    """
    dataclasses.field() with the serialization tags stored in metadata.

      page: int = ts_field(json="page")
      size: int = ts_field(json="size,omitempty", default=0)
      base: Base = ts_field(embed=True, default_factory=Base)
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    if json:
        metadata[JSON_TAG] = json
    if ts_type:
        metadata[TS_TYPE_TAG] = ts_type
    if ts_doc:
        metadata[TS_DOC_TAG] = ts_doc
    if embed:
        metadata[EMBED_TAG] = True
    return dataclasses.field(metadata=metadata, **field_kwargs)


# ============================================================
# Annotation -> descriptor
# ============================================================

def describe(annotation: Any) -> TypeDescriptor:
    """Translate a Python annotation (or a descriptor) into a type descriptor."""
    if is_descriptor(annotation):
        return annotation

    if annotation is Any or annotation is object or isinstance(annotation, typing.TypeVar):
        return OpenType()

    if annotation is None or annotation is type(None):
        return ScalarType(kind=Kind.INVALID, name="None")

    origin = get_origin(annotation)
    arguments = get_args(annotation)

    if origin is Annotated:
        base_annotation, *extras = arguments
        described = describe(base_annotation)
        kind_marker = next((extra for extra in extras if isinstance(extra, Kind)), None)
        if kind_marker is not None and isinstance(described, ScalarType):
            return ScalarType(kind=kind_marker, name=described.name)
        return described

    if origin is Union or origin is types.UnionType:
        return _describe_union(arguments)

    if origin is Literal:
        return _describe_literal(arguments)

    if origin in _SEQUENCE_ORIGINS or annotation in _SEQUENCE_ORIGINS:
        element_type = describe(arguments[0]) if arguments else OpenType()
        return ArrayType(elem=element_type)

    if origin is tuple or annotation is tuple:
        return _describe_tuple(arguments)

    if origin in _MAPPING_ORIGINS or annotation in _MAPPING_ORIGINS:
        key_type = describe(arguments[0]) if arguments else OpenType()
        value_type = describe(arguments[1]) if len(arguments) > 1 else OpenType()
        return MapType(key=key_type, value=value_type)

    if origin is collections.abc.Callable or annotation is collections.abc.Callable:
        return ScalarType(kind=Kind.FUNC)

    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        described = describe(supertype)
        if isinstance(described, ScalarType):
            return ScalarType(kind=described.kind, name=annotation.__name__)
        return described

    if isinstance(annotation, str):
        raise TsMirrorError(f"cannot describe unresolved forward reference {annotation!r}")

    if not isinstance(annotation, type):
        return ScalarType(kind=Kind.INVALID, name=_display_name(annotation))

    return _describe_class(annotation)


def _describe_class(cls: type) -> TypeDescriptor:
    """Describe a concrete class."""
    if cls in _STRUCT_CACHE:
        return _STRUCT_CACHE[cls]

    if dataclasses.is_dataclass(cls):
        return _describe_dataclass(cls)

    if issubclass(cls, BaseModel):
        return _describe_pydantic_model(cls)

    if issubclass(cls, _BYTES_CLASSES):
        return ArrayType(elem=ScalarType(kind=Kind.UINT8))

    if issubclass(cls, _STRING_LIKE_CLASSES):
        return ScalarType(kind=Kind.STRING, name=cls.__name__)

    for scalar_class, kind in _SCALAR_KINDS_BY_CLASS:
        if issubclass(cls, scalar_class):
            name = "" if cls is scalar_class else cls.__name__
            return ScalarType(kind=kind, name=name)

    if issubclass(cls, Enum):
        return ScalarType(kind=Kind.INVALID, name=cls.__name__)

    if issubclass(cls, collections.abc.Callable):
        return ScalarType(kind=Kind.FUNC, name=cls.__name__)

    return ScalarType(kind=Kind.INVALID, name=cls.__name__)


def _describe_union(arguments: tuple[Any, ...]) -> TypeDescriptor:
    """Optional[X] becomes a pointer; other unions have no scalar mapping."""
    members = [member for member in arguments if member is not type(None)]
    if len(members) == 1 and len(members) < len(arguments):
        return PointerType(elem=describe(members[0]))
    return ScalarType(kind=Kind.INVALID, name=" | ".join(_display_name(member) for member in arguments))


def _describe_literal(arguments: tuple[Any, ...]) -> TypeDescriptor:
    """Literal values collapse to the kind they share."""
    value_classes = {type(value) for value in arguments}
    if len(value_classes) == 1:
        described = _describe_class(value_classes.pop())
        if isinstance(described, ScalarType) and described.kind is not Kind.INVALID:
            return ScalarType(kind=described.kind)
    return ScalarType(kind=Kind.INVALID, name="Literal")


def _describe_tuple(arguments: tuple[Any, ...]) -> TypeDescriptor:
    """tuple[X, ...] is a slice; tuple[X, X] a fixed array; mixed tuples are unmapped."""
    if not arguments or arguments == ((),):
        return ArrayType(elem=OpenType())
    if len(arguments) == 2 and arguments[1] is Ellipsis:
        return ArrayType(elem=describe(arguments[0]))

    element_types = [describe(argument) for argument in arguments]
    if all(element_type == element_types[0] for element_type in element_types):
        return ArrayType(elem=element_types[0], length=len(element_types))
    return ScalarType(kind=Kind.INVALID, name="tuple")


def _struct_identity(cls: type) -> StructType:
    """
    Create an empty struct node named after cls, scoped by module and enclosing qualname.
    Classes defined inside a function also carry their id: one factory can build many.
    """
    qualname_prefix = cls.__qualname__.rpartition(".")[0]
    module = f"{cls.__module__}.{qualname_prefix}" if qualname_prefix else cls.__module__
    if "<locals>" in qualname_prefix:
        module = f"{module}#{id(cls):x}"
    return StructType(name=cls.__name__, module=module)


def _describe_struct(cls: type, collect_fields: Callable[[type], list[StructField]]) -> StructType:
    """
    Cache the struct node before collecting its fields so cycles resolve to it.
    On failure every node cached since this call began is dropped again.
    """
    cached_before = set(_STRUCT_CACHE.keys())
    struct_type = _struct_identity(cls)
    _STRUCT_CACHE[cls] = struct_type

    try:
        struct_fields = collect_fields(cls)
    except BaseException:
        for described_cls in set(_STRUCT_CACHE.keys()) - cached_before:
            _STRUCT_CACHE.pop(described_cls, None)
        raise

    return struct_type.define_fields(*struct_fields)


def _describe_dataclass(cls: type) -> StructType:
    """Describe a dataclass, base class fields first, tags from field metadata."""
    return _describe_struct(cls, _dataclass_fields)


def _dataclass_fields(cls: type) -> list[StructField]:
    try:
        type_hints = get_type_hints(cls, include_extras=True)
    except NameError as name_error:
        raise TsMirrorError(f"cannot resolve annotations of {cls.__qualname__}: {name_error}") from name_error

    struct_fields: list[StructField] = []
    for dataclass_field in dataclasses.fields(cls):
        metadata = dataclass_field.metadata
        tags = {tag_key: str(metadata[tag_key]) for tag_key in TAG_KEYS if metadata.get(tag_key)}
        annotation = type_hints.get(dataclass_field.name, dataclass_field.type)
        struct_fields.append(
            StructField(
                name=dataclass_field.name,
                type=describe(annotation),
                tags=tags,
                anonymous=bool(metadata.get(EMBED_TAG, False)),
            )
        )
    return struct_fields


def _describe_pydantic_model(cls: type[BaseModel]) -> StructType:
    """Describe a pydantic model; alias, description and exclude map onto tags."""
    return _describe_struct(cls, _pydantic_model_fields)


def _pydantic_model_fields(cls: type[BaseModel]) -> list[StructField]:
    struct_fields: list[StructField] = []
    for field_name, model_field in cls.model_fields.items():
        tags: dict[str, str] = {}
        serialized_name = model_field.serialization_alias or model_field.alias
        if model_field.exclude is True:
            tags[JSON_TAG] = "-"
        elif serialized_name:
            tags[JSON_TAG] = serialized_name
        if model_field.description:
            tags[TS_DOC_TAG] = model_field.description

        extra = model_field.json_schema_extra
        if isinstance(extra, dict):
            for tag_key in TAG_KEYS:
                if extra.get(tag_key):
                    tags[tag_key] = str(extra[tag_key])

        annotation: Any = model_field.annotation
        kind_marker = next((item for item in model_field.metadata if isinstance(item, Kind)), None)
        if kind_marker is not None:
            annotation = Annotated[annotation, kind_marker]

        struct_fields.append(StructField(name=field_name, type=describe(annotation), tags=tags))
    return struct_fields


def _display_name(annotation: Any) -> str:
    """Short human-readable name for an annotation."""
    if annotation is type(None):
        return "None"
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")
