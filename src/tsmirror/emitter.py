"""Accumulate field lines for one interface and render the interface block."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .descriptors import Kind, TypeDescriptor
from .errors import UnresolvedTypeError
from .options import TypeOptions


DEFAULT_KIND_NAMES: dict[Kind, str] = {
    Kind.BOOL: "boolean",
    Kind.INT: "number",
    Kind.INT8: "number",
    Kind.INT16: "number",
    Kind.INT32: "number",
    Kind.INT64: "number",
    Kind.UINT: "number",
    Kind.UINT8: "number",
    Kind.UINT16: "number",
    Kind.UINT32: "number",
    Kind.UINT64: "number",
    Kind.FLOAT32: "number",
    Kind.FLOAT64: "number",
    Kind.STRING: "string",
}

# Every generic placeholder defaults to this
TOP_TYPE = "any"


def placeholder_name(index: int) -> str:
    """A, B, ... Z, then A1, B1, ..."""
    letter = chr(ord("A") + index % 26)
    cycle = index // 26
    return f"{letter}{cycle}" if cycle else letter


def render_doc_block(indent: str, doc: str) -> str:
    """Render a /** */ block placed directly above a field line."""
    doc_lines = [f"{indent}/**", f"{indent} *"]
    doc_lines.extend(f"{indent} * {doc_line}".rstrip() for doc_line in doc.splitlines())
    doc_lines.append(f"{indent} */")
    return "\n".join(doc_lines) + "\n"


@dataclass
class InterfaceBuilder:
    """Collects the rendered fields of one interface, in declaration order."""
    kind_names: Mapping[Kind, str]
    indent: str
    field_lines: list[str] = field(default_factory=list)
    placeholders: list[str] = field(default_factory=list)

    def allocate_placeholder(self) -> str:
        """Reserve the next generic placeholder letter for this interface."""
        allocated_name = placeholder_name(len(self.placeholders))
        self.placeholders.append(allocated_name)
        return allocated_name

    def scalar_type_name(self, type_descriptor: TypeDescriptor, field_name: str) -> str:
        """Look up the TS name for a scalar kind, failing when the kind has none."""
        typescript_type = self.kind_names.get(type_descriptor.kind, "")
        if not typescript_type:
            raise UnresolvedTypeError(field_name, type_descriptor.kind.value, type_descriptor.type_name)
        return typescript_type

    def add_field(self, field_name: str, typescript_type: str, options: TypeOptions) -> None:
        """Append one `name: type;` line, preceded by its doc block if any."""
        doc_block = render_doc_block(self.indent, options.ts_doc) if options.ts_doc else ""
        self.field_lines.append(f"{doc_block}{self.indent}{field_name}: {typescript_type};")

    def add_scalar_field(self, field_name: str, type_descriptor: TypeDescriptor, options: TypeOptions) -> None:
        """Add a field whose type comes from the kind table."""
        self.add_field(field_name, self.scalar_type_name(type_descriptor, field_name), options)

    def add_open_field(self, field_name: str, options: TypeOptions) -> None:
        """Add a field typed by a freshly allocated generic placeholder."""
        self.add_field(field_name, self.allocate_placeholder(), options)

    def add_array_field(self, field_name: str, element_type_name: str, array_depth: int, options: TypeOptions) -> None:
        """Add an array field, one [] per nesting level."""
        self.add_field(field_name, f"{element_type_name}{'[]' * array_depth}", options)

    def add_map_field(self, field_name: str, value_type_name: str, options: TypeOptions) -> None:
        """Add a string-indexed map field."""
        self.add_field(field_name, render_index_signature(value_type_name), options)

    def render_generic_parameters(self) -> str:
        """`<A = any, B = any>` for the placeholders in use, or ""."""
        if not self.placeholders:
            return ""
        parameters = ", ".join(f"{name} = {TOP_TYPE}" for name in self.placeholders)
        return f"<{parameters}>"

    def render(self, interface_name: str, *, export: bool) -> str:
        """Render the complete interface block."""
        header = f"interface {interface_name}{self.render_generic_parameters()} {{"
        interface_text = f"{header}\n" + "\n".join(self.field_lines) + "\n}"
        if export:
            return f"export {interface_text}"
        return interface_text


def render_index_signature(value_type_name: str) -> str:
    """`{[key: string]: V}`"""
    return f"{{[key: string]: {value_type_name}}}"
