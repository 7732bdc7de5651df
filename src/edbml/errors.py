"""edbml exceptions

Custom exceptions raised by the template compiler.
"""

from __future__ import annotations


class EdbmlError(Exception):
    """Base exception for all edbml errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StructuralError(EdbmlError):
    """Raised when the template source cannot be compiled at all."""

    pass


class NestedTemplateError(StructuralError):
    """Raised when a template contains another template marker."""

    def __init__(self, marker: str):
        self.marker = marker
        super().__init__(f"Nested template not allowed: {marker!r}")


class MaterializeError(EdbmlError):
    """Raised when even the fallback function cannot be built."""

    pass


class ConfigError(EdbmlError):
    """Raised when a compiler config file is missing or invalid."""

    pass
