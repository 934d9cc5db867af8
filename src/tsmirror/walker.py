"""Walk struct type graphs and emit TypeScript interfaces, dependencies first."""
from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from .classifier import ClassifiedField, FieldCategory, classify_field, collapse_array
from .config import ConverterConfig, ConverterSettings, to_interface_name
from .descriptors import ArrayType, MapType, OpenType, StructType, TypeDescriptor, deep_fields, unwrap_pointer
from .emitter import InterfaceBuilder, render_index_signature
from .errors import UnresolvedTypeError
from .introspect import describe
from .options import StructSpec, TypeOptions, new_struct
from .registry import TypeRegistry


BANNER = "/* Do not change, this code is generated from Python types */"
TRACE_PREFIX = "[tsmirror]"


# ============================================================
# One conversion run
# ============================================================

@dataclass
class ConversionRun:
    """
    State for a single convert() call. Config and overrides are snapshots and
    are only read; the registry belongs to this run alone.
    """
    config: ConverterConfig
    struct_specs: tuple[StructSpec, ...]
    global_type_options: Mapping[TypeDescriptor, TypeOptions]
    registry: TypeRegistry = field(default_factory=TypeRegistry)

    def trace(self, depth: int, message: str) -> None:
        """Print a walk trace line when debugging is enabled."""
        if self.config.debug:
            print(f"{TRACE_PREFIX} {'   ' * depth}{message}", file=sys.stderr, flush=True)

    def interface_name(self, struct_type: StructType) -> str:
        return to_interface_name(self.config, struct_type.name)

    def convert_type(self, depth: int, struct_type: StructType) -> str:
        """
        Return the TypeScript for struct_type preceded by every dependency not
        yet emitted in this run, or "" if struct_type itself was already emitted.
        """
        if not self.registry.mark_emitted(struct_type):
            return ""
        self.trace(depth, f"Converting type {struct_type.qualified_name}")

        builder = InterfaceBuilder(kind_names=self.config.kind_names, indent=self.config.indent)
        dependency_chunks: list[str] = []

        for struct_field in deep_fields(struct_type):
            classified_field = classify_field(
                struct_type,
                struct_field,
                struct_specs=self.struct_specs,
                global_type_options=self.global_type_options,
            )
            if classified_field is None:
                continue
            self._add_field(depth, struct_type, classified_field, builder, dependency_chunks)

        interface_text = builder.render(self.interface_name(struct_type), export=self.config.export)
        return "\n\n".join([*dependency_chunks, interface_text])

    def _add_field(
        self,
        depth: int,
        owner_type: StructType,
        classified_field: ClassifiedField,
        builder: InterfaceBuilder,
        dependency_chunks: list[str],
    ) -> None:
        """Render one classified field into builder, emitting what it depends on."""
        field_name = classified_field.json_name
        field_options = classified_field.options
        field_type = classified_field.field_type
        field_label = f"{owner_type.name}.{classified_field.field.name}"

        category = classified_field.category
        if category is FieldCategory.OVERRIDE:
            self.trace(depth, f"- simple field {field_label}")
            builder.add_field(field_name, field_options.ts_type, field_options)

        elif category is FieldCategory.STRUCT:
            self.trace(depth, f"- struct {field_label} ({field_type.type_name})")
            self._emit_dependency(depth, field_type, dependency_chunks)
            builder.add_field(field_name, self.interface_name(field_type), field_options)

        elif category is FieldCategory.MAP:
            self.trace(depth, f"- map field {field_label}")
            value_type_name = self._map_value_reference(depth, field_type, builder, dependency_chunks, field_name)
            builder.add_map_field(field_name, value_type_name, field_options)

        elif category is FieldCategory.ARRAY:
            element_type = classified_field.element_type
            if isinstance(element_type, StructType):
                self.trace(depth, f"- struct slice {field_label} ({field_type.type_name})")
            else:
                self.trace(depth, f"- slice field {field_label}")
            element_type_name = self._array_element_reference(depth, element_type, builder, dependency_chunks, field_name)
            builder.add_array_field(field_name, element_type_name, classified_field.array_depth, field_options)

        elif category is FieldCategory.OPEN:
            self.trace(depth, f"- open field {field_label}")
            builder.add_open_field(field_name, field_options)

        else:
            self.trace(depth, f"- simple field {field_label}")
            builder.add_scalar_field(field_name, field_type, field_options)

    def _emit_dependency(self, depth: int, struct_type: StructType, dependency_chunks: list[str]) -> None:
        """Convert a struct the current one depends on; keep its text if it was new."""
        dependency_text = self.convert_type(depth + 1, struct_type)
        if dependency_text:
            dependency_chunks.append(dependency_text)

    def _map_value_reference(
        self,
        depth: int,
        map_type: MapType,
        builder: InterfaceBuilder,
        dependency_chunks: list[str],
        field_name: str,
    ) -> str:
        """Emit a struct key if there is one, then return the TS name of the value type."""
        key_type = unwrap_pointer(map_type.key)
        if isinstance(key_type, StructType):
            self._emit_dependency(depth, key_type, dependency_chunks)
        return self._type_reference(depth, map_type.value, builder, dependency_chunks, field_name)

    def _type_reference(
        self,
        depth: int,
        type_descriptor: Optional[TypeDescriptor],
        builder: InterfaceBuilder,
        dependency_chunks: list[str],
        field_name: str,
    ) -> str:
        """TS name for a map value, emitting structs it reaches."""
        if type_descriptor is None:
            type_descriptor = OpenType()
        type_descriptor = unwrap_pointer(type_descriptor)

        if isinstance(type_descriptor, StructType):
            self._emit_dependency(depth, type_descriptor, dependency_chunks)
            return self.interface_name(type_descriptor)

        if isinstance(type_descriptor, ArrayType):
            element_type, array_depth = collapse_array(type_descriptor)
            element_type_name = self._array_element_reference(depth, element_type, builder, dependency_chunks, field_name)
            return f"{element_type_name}{'[]' * array_depth}"

        if isinstance(type_descriptor, MapType):
            value_type_name = self._map_value_reference(depth, type_descriptor, builder, dependency_chunks, field_name)
            return render_index_signature(value_type_name)

        if isinstance(type_descriptor, OpenType):
            return builder.allocate_placeholder()

        return builder.scalar_type_name(type_descriptor, field_name)

    def _array_element_reference(
        self,
        depth: int,
        element_type: TypeDescriptor,
        builder: InterfaceBuilder,
        dependency_chunks: list[str],
        field_name: str,
    ) -> str:
        """TS name for a collapsed array element: a struct or a mapped scalar, nothing else."""
        if isinstance(element_type, StructType):
            self._emit_dependency(depth, element_type, dependency_chunks)
            return self.interface_name(element_type)

        if isinstance(element_type, (OpenType, MapType)):
            raise UnresolvedTypeError(field_name, element_type.kind.value, element_type.type_name)

        return builder.scalar_type_name(element_type, field_name)


# ============================================================
# Converter
# ============================================================

class Converter:
    """
    Collects struct types and overrides, then renders them as TypeScript.

      converter = Converter().with_prefix("Api").add(PageParameter)
      typescript = converter.convert()
    """

    def __init__(self, config: Optional[ConverterConfig] = None) -> None:
        self.config = config or ConverterConfig()
        self.struct_specs: list[StructSpec] = []
        self.global_type_options: dict[TypeDescriptor, TypeOptions] = {}

    @classmethod
    def from_settings(cls, settings: Optional[ConverterSettings] = None) -> "Converter":
        """Build a converter configured from TSMIRROR_* environment settings."""
        settings = settings or ConverterSettings()
        return cls(settings.to_config())

    def with_prefix(self, prefix: str) -> "Converter":
        self.config = replace(self.config, prefix=prefix)
        return self

    def with_suffix(self, suffix: str) -> "Converter":
        self.config = replace(self.config, suffix=suffix)
        return self

    def with_indent(self, indent: str) -> "Converter":
        self.config = replace(self.config, indent=indent)
        return self

    def with_export(self, export: bool) -> "Converter":
        self.config = replace(self.config, export=export)
        return self

    def debug(self, enabled: bool = True) -> "Converter":
        self.config = replace(self.config, debug=enabled)
        return self

    def manage_type(self, field_type: Any, options: TypeOptions) -> "Converter":
        """
        Override options for every field of field_type, in every struct.
        Use this instead of tagging each field of a given type with ts_type.
        """
        self.global_type_options[describe(field_type)] = options
        return self

    def add(self, *objs: Any) -> "Converter":
        """Register struct specs, descriptors, classes or instances, in order."""
        for obj in objs:
            if isinstance(obj, StructSpec):
                self.struct_specs.append(obj)
            else:
                self.add_type(obj)
        return self

    def add_type(self, struct_type: Any) -> "Converter":
        self.struct_specs.append(new_struct(struct_type))
        return self

    def convert(self) -> str:
        """Render every registered type (and what it reaches) into one TypeScript text."""
        conversion_run = ConversionRun(
            config=self.config,
            struct_specs=tuple(self.struct_specs),
            global_type_options=dict(self.global_type_options),
        )

        output_chunks: list[str] = [BANNER]
        trim_characters = " " + conversion_run.config.indent + "\r\n"
        for struct_spec in conversion_run.struct_specs:
            typescript_text = conversion_run.convert_type(0, struct_spec.type)
            trimmed_text = typescript_text.strip(trim_characters)
            if trimmed_text:
                output_chunks.append(trimmed_text)
        return "\n\n".join(output_chunks) + "\n"
