# tests/test_classifier.py
"""Tests for field classification."""

from tsmirror import ArrayType, Kind, MapType, OpenType, PointerType, ScalarType, StructField, StructType, TypeOptions
from tsmirror.classifier import FieldCategory, classify_field, collapse_array

STRING = ScalarType(Kind.STRING)
POINT = StructType("Point", module="geo").define_fields(StructField("X", ScalarType(Kind.FLOAT64)))
OWNER = StructType("Owner", module="geo")


def _classify(struct_field, global_type_options=None):
    return classify_field(
        OWNER,
        struct_field,
        struct_specs=(),
        global_type_options=global_type_options or {},
    )


class TestCollapseArray:

    def test_single_level(self):
        assert collapse_array(ArrayType(STRING)) == (STRING, 1)

    def test_nested_levels_and_pointers(self):
        nested = ArrayType(ArrayType(PointerType(POINT)))
        assert collapse_array(nested) == (POINT, 2)

    def test_pointer_on_outer_element(self):
        assert collapse_array(ArrayType(PointerType(ArrayType(STRING)))) == (STRING, 2)


class TestClassifyField:

    def test_skipped_field_returns_none(self):
        assert _classify(StructField("_hidden", STRING)) is None

    def test_scalar(self):
        classified = _classify(StructField("Name", STRING))
        assert classified.category is FieldCategory.SCALAR
        assert classified.json_name == "Name"

    def test_pointer_is_unwrapped_once(self):
        classified = _classify(StructField("Origin", PointerType(POINT)))
        assert classified.category is FieldCategory.STRUCT
        assert classified.field_type == POINT

    def test_map(self):
        classified = _classify(StructField("Index", MapType(STRING, POINT)))
        assert classified.category is FieldCategory.MAP

    def test_array_records_element_and_depth(self):
        classified = _classify(StructField("Grid", ArrayType(ArrayType(POINT))))
        assert classified.category is FieldCategory.ARRAY
        assert classified.element_type == POINT
        assert classified.array_depth == 2

    def test_open(self):
        assert _classify(StructField("Extra", OpenType())).category is FieldCategory.OPEN

    def test_override_wins_over_any_kind(self):
        struct_field = StructField("Extra", OpenType(), tags={"ts_type": "Record<string, unknown>"})
        classified = _classify(struct_field)
        assert classified.category is FieldCategory.OVERRIDE
        assert classified.options.ts_type == "Record<string, unknown>"

    def test_global_override_turns_struct_into_override(self):
        classified = _classify(StructField("Origin", POINT), {POINT: TypeOptions(ts_type="string")})
        assert classified.category is FieldCategory.OVERRIDE
