"""Errors raised while converting type graphs into TypeScript."""
from __future__ import annotations

from typing import Any


class TsMirrorError(RuntimeError):
    """Base class for conversion failures."""


class UnresolvedTypeError(TsMirrorError):
    """A field's kind has no TypeScript mapping and no override was given."""

    def __init__(self, field_name: str, kind: str, type_name: str) -> None:
        self.field_name = field_name
        self.kind = kind
        self.type_name = type_name
        super().__init__(f"cannot find type for {kind} ({field_name}/{type_name})")


class UnsupportedUnionValueError(TsMirrorError, TypeError):
    """A union member is neither a string nor a number."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            f"cannot render {value!r} ({type(value).__name__}) as a union member; "
            "only strings and numbers are supported"
        )
