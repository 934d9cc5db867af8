# tests/test_introspect.py
"""Tests for building descriptors from Python annotations."""

import sys
import uuid
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Annotated, Any, Callable, Literal, NewType, Optional, Sequence, TypeVar, Union

import pytest
from pydantic import BaseModel, Field

from tsmirror import (
    ArrayType,
    Kind,
    MapType,
    OpenType,
    PointerType,
    ScalarType,
    StructType,
    TsMirrorError,
    describe,
    ts_field,
)

UserId = NewType("UserId", int)
T = TypeVar("T")


class Color(str, Enum):
    RED = "red"


class Priority(IntEnum):
    LOW = 1


class Shape(Enum):
    CIRCLE = object()


@dataclass
class Tagged:
    page: int = ts_field(json="page")
    keyword: str = ts_field(json="keyword", ts_doc="search keyword")
    raw: str = ts_field(ts_type="Uint8Array", default="")


@dataclass
class Base:
    id: int = 0


@dataclass
class Derived(Base):
    name: str = ""
    base_copy: Base = ts_field(embed=True, default_factory=Base)


@dataclass
class LinkedNode:
    value: int
    next: Optional["LinkedNode"] = None


@dataclass
class Catalog:
    entry: Optional["CatalogEntry"] = None
    source: Optional["CatalogSource"] = None


@dataclass
class CatalogEntry:
    catalog: Optional[Catalog] = None


@dataclass
class CatalogSource:
    origin: "CatalogOrigin" = None


def _make_record(value_type):
    @dataclass
    class Record:
        value: value_type = None

    return Record


class Account(BaseModel):
    account_id: int = Field(alias="accountId", description="primary key")
    secret: str = Field(default="", exclude=True)
    role: str = Field(default="member", json_schema_extra={"ts_type": '"admin"|"member"'})


class TestDescribeScalars:

    def test_builtin_scalars(self):
        assert describe(bool) == ScalarType(Kind.BOOL)
        assert describe(int) == ScalarType(Kind.INT)
        assert describe(float) == ScalarType(Kind.FLOAT64)
        assert describe(str) == ScalarType(Kind.STRING)
        assert describe(complex) == ScalarType(Kind.COMPLEX128)

    def test_annotated_kind_selects_width(self):
        assert describe(Annotated[int, Kind.UINT8]) == ScalarType(Kind.UINT8)

    def test_new_type_keeps_its_name(self):
        assert describe(UserId) == ScalarType(Kind.INT, name="UserId")

    def test_enums(self):
        assert describe(Color) == ScalarType(Kind.STRING, name="Color")
        assert describe(Priority) == ScalarType(Kind.INT, name="Priority")
        assert describe(Shape).kind is Kind.INVALID

    def test_string_like_classes(self):
        assert describe(uuid.UUID) == ScalarType(Kind.STRING, name="UUID")

    def test_literal_collapses_to_shared_kind(self):
        assert describe(Literal["a", "b"]) == ScalarType(Kind.STRING)
        assert describe(Literal["a", 1]).kind is Kind.INVALID

    def test_callables_are_func_kind(self):
        assert describe(Callable[[int], str]).kind is Kind.FUNC

    def test_unknown_class_is_invalid(self):
        class Opaque:
            pass

        assert describe(Opaque) == ScalarType(Kind.INVALID, name="Opaque")


class TestDescribeComposites:

    def test_optional_is_pointer(self):
        assert describe(Optional[str]) == PointerType(ScalarType(Kind.STRING))
        assert describe(str | None) == PointerType(ScalarType(Kind.STRING))

    def test_other_unions_are_invalid(self):
        assert describe(Union[int, str]).kind is Kind.INVALID

    def test_sequences_are_slices(self):
        assert describe(list[int]) == ArrayType(ScalarType(Kind.INT))
        assert describe(Sequence[str]) == ArrayType(ScalarType(Kind.STRING))
        assert describe(set[float]) == ArrayType(ScalarType(Kind.FLOAT64))
        assert describe(tuple[int, ...]) == ArrayType(ScalarType(Kind.INT))
        assert describe(list) == ArrayType(OpenType())

    def test_homogeneous_tuple_is_fixed_array(self):
        assert describe(tuple[int, int]) == ArrayType(ScalarType(Kind.INT), length=2)

    def test_bytes_is_slice_of_uint8(self):
        assert describe(bytes) == ArrayType(ScalarType(Kind.UINT8))

    def test_mappings(self):
        assert describe(dict[str, float]) == MapType(ScalarType(Kind.STRING), ScalarType(Kind.FLOAT64))
        assert describe(dict) == MapType(OpenType(), OpenType())

    def test_open_types(self):
        assert describe(Any) == OpenType()
        assert describe(object) == OpenType()
        assert describe(T) == OpenType()

    def test_descriptor_passes_through(self):
        struct_type = StructType("Handmade", module="m")
        assert describe(struct_type) is struct_type


class TestDescribeDataclasses:

    def test_tags_come_from_metadata(self):
        struct_type = describe(Tagged)
        assert isinstance(struct_type, StructType)
        assert struct_type.name == "Tagged"
        page, keyword, raw = struct_type.fields
        assert page.tag("json") == "page"
        assert keyword.tag("ts_doc") == "search keyword"
        assert raw.tag("ts_type") == "Uint8Array"
        assert raw.tag("json") == ""

    def test_struct_is_cached_per_class(self):
        assert describe(Tagged) is describe(Tagged)

    def test_base_fields_come_first_and_embed_is_anonymous(self):
        struct_type = describe(Derived)
        assert [f.name for f in struct_type.fields] == ["id", "name", "base_copy"]
        assert struct_type.fields[2].anonymous is True
        assert struct_type.fields[2].type == describe(Base)

    def test_self_reference_resolves_to_same_node(self):
        struct_type = describe(LinkedNode)
        next_field = struct_type.fields[1]
        assert next_field.type == PointerType(struct_type)
        assert next_field.type.elem is struct_type

    def test_local_classes_are_scoped_by_enclosing_qualname(self):
        @dataclass
        class Tagged:
            value: int = 0

        local_type = describe(Tagged)
        assert local_type.name == "Tagged"
        assert "<locals>" in local_type.module
        assert local_type != describe(globals()["Tagged"])

    def test_metadata_kwarg_is_preserved(self):
        @dataclass
        class WithMetadata:
            value: int = ts_field(json="value", default=0, metadata={"unit": "ms"})

        dataclass_field = WithMetadata.__dataclass_fields__["value"]
        assert dataclass_field.metadata["unit"] == "ms"
        assert dataclass_field.metadata["json"] == "value"

    def test_failed_description_leaves_nothing_cached(self, monkeypatch):
        with pytest.raises(TsMirrorError, match="CatalogOrigin"):
            describe(Catalog)

        monkeypatch.setattr(sys.modules[__name__], "CatalogOrigin", str, raising=False)
        entry_type = describe(CatalogEntry)
        catalog_type = entry_type.fields[0].type.elem
        assert [f.name for f in catalog_type.fields] == ["entry", "source"]
        assert catalog_type.fields[1].type.elem.fields[0].type == ScalarType(Kind.STRING)

    def test_factory_classes_have_distinct_identities(self):
        int_record = _make_record(int)
        str_record = _make_record(str)
        int_type = describe(int_record)
        str_type = describe(str_record)
        assert int_type.name == str_type.name == "Record"
        assert int_type != str_type
        assert int_type.fields[0].type == ScalarType(Kind.INT)
        assert str_type.fields[0].type == ScalarType(Kind.STRING)


class TestDescribePydanticModels:

    def test_alias_description_exclude_and_extra(self):
        struct_type = describe(Account)
        fields_by_name = {f.name: f for f in struct_type.fields}
        assert fields_by_name["account_id"].tag("json") == "accountId"
        assert fields_by_name["account_id"].tag("ts_doc") == "primary key"
        assert fields_by_name["secret"].tag("json") == "-"
        assert fields_by_name["role"].tag("ts_type") == '"admin"|"member"'
        assert fields_by_name["account_id"].type == ScalarType(Kind.INT)
