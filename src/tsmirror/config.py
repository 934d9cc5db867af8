"""Converter configuration: naming, layout, kind table and env-driven settings."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .descriptors import Kind
from .emitter import DEFAULT_KIND_NAMES


DEFAULT_INDENT = "    "


# ============================================================
# Config
# ============================================================

@dataclass(frozen=True)
class ConverterConfig:
    """How interfaces are named and laid out."""
    prefix: str = ""
    suffix: str = ""
    indent: str = DEFAULT_INDENT

    # Emit `export interface ...` rather than `interface ...`
    export: bool = True

    # Print a trace of the schema walk to stderr
    debug: bool = False

    kind_names: Mapping[Kind, str] = field(default_factory=lambda: dict(DEFAULT_KIND_NAMES))


def to_interface_name(config: ConverterConfig, type_name: str) -> str:
    """Wrap a struct name in the configured prefix and suffix."""
    return f"{config.prefix}{type_name}{config.suffix}"


def load_kind_mapping(path: Path) -> dict[Kind, str]:
    """
    Load kind -> TypeScript name overrides from a YAML-like file:

      # int64 values travel as strings
      int64: string
      uint64: string
    """
    if not path.exists():
        return {}

    kind_mapping: dict[Kind, str] = {}
    for line_number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if ":" not in stripped:
            continue
        key, value = stripped.split(":", 1)
        try:
            kind = Kind(key.strip())
        except ValueError as value_error:
            raise ValueError(f"{path}:{line_number} unknown kind {key.strip()!r}") from value_error
        kind_mapping[kind] = value.strip()
    return kind_mapping


# ============================================================
# Settings (environment / .env)
# ============================================================

class ConverterSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    prefix: str = Field(default="", alias="TSMIRROR_PREFIX")
    suffix: str = Field(default="", alias="TSMIRROR_SUFFIX")
    indent: str = Field(default=DEFAULT_INDENT, alias="TSMIRROR_INDENT")
    export: bool = Field(default=True, alias="TSMIRROR_EXPORT")
    debug: bool = Field(default=False, alias="TSMIRROR_DEBUG")
    kind_map_path: Path | None = Field(default=None, alias="TSMIRROR_KIND_MAP")

    def to_config(self) -> ConverterConfig:
        kind_names = dict(DEFAULT_KIND_NAMES)
        if self.kind_map_path is not None:
            kind_names.update(load_kind_mapping(self.kind_map_path))
        return ConverterConfig(
            prefix=self.prefix,
            suffix=self.suffix,
            indent=self.indent,
            export=self.export,
            debug=self.debug,
            kind_names=kind_names,
        )
