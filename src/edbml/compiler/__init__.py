"""edbml compiler - transforms template source into Python functions."""

from edbml.compiler.compiler import FunctionCompiler, compile_template, validate
from edbml.compiler.formatter import emergency_format
from edbml.compiler.renderer import Renderer
from edbml.compiler.result import Degraded, Result, Success, materialize
from edbml.compiler.spec import Assembly, Head, Import

__all__ = [
    "FunctionCompiler",
    "compile_template",
    "validate",
    "emergency_format",
    "Renderer",
    "Result",
    "Success",
    "Degraded",
    "materialize",
    "Assembly",
    "Head",
    "Import",
]
