"""Configuration for the edbml compiler.

Loaded from an optional YAML file:
- nested_pattern: regex matching an enclosing template marker inside a template
- runtime_name: global name under which generated code sees the runtime
- filename: filename reported in syntax errors
- error_class: css class of the inline error fragment
- fallback_name: function name shown in diagnostic source
- indent: indent unit used by the fallback formatter
"""

from __future__ import annotations

import keyword
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from edbml.errors import ConfigError

NESTED_PATTERN = r"<script.*type=[\"']?text/edbml[\"']?.*>([\s\S]+?)"


class CompilerConfig(BaseModel):
    """Compiler settings."""

    model_config = {"extra": "forbid"}

    nested_pattern: str = Field(
        default=NESTED_PATTERN,
        description="Pattern of a template marker that may not appear in a template",
    )
    runtime_name: str = Field(
        default="__edb__", description="Global name of the runtime in generated code"
    )
    filename: str = Field(default="edbml", description="Filename for compile()")
    error_class: str = Field(
        default="edberror", description="CSS class of the inline error fragment"
    )
    fallback_name: str = Field(
        default="dysfunction", description="Function name in diagnostic source"
    )
    indent: str = Field(default="    ", description="Fallback formatter indent unit")

    @field_validator("nested_pattern")
    @classmethod
    def check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid nested_pattern: {e}") from e
        return value

    @field_validator("runtime_name", "fallback_name")
    @classmethod
    def check_identifier(cls, value: str) -> str:
        if not value.isidentifier() or keyword.iskeyword(value):
            raise ValueError(f"Not a valid identifier: {value!r}")
        return value


def load_config(path: Path) -> CompilerConfig:
    """Load compiler config from a YAML file."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML: {path}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping at the top level: {path}")

    try:
        return CompilerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
