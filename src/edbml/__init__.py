"""edbml - compiles markup templates with embedded Python into functions.

A template declares its inputs with processing instructions::

    <?param name="user"?>
    return user.name

and compiles to a function taking ``user``.
"""

from edbml._version import __version__
from edbml.compiler import (
    Degraded,
    FunctionCompiler,
    Import,
    Result,
    Success,
    compile_template,
    materialize,
)
from edbml.config import CompilerConfig, load_config
from edbml.errors import EdbmlError, NestedTemplateError, StructuralError
from edbml.instruction import Instruction, extract
from edbml.runtime import Att, Out, Registry, Runtime

__all__ = [
    "__version__",
    # Compiler
    "FunctionCompiler",
    "compile_template",
    "materialize",
    "Result",
    "Success",
    "Degraded",
    "Import",
    # Instructions
    "Instruction",
    "extract",
    # Runtime
    "Runtime",
    "Registry",
    "Out",
    "Att",
    # Config and errors
    "CompilerConfig",
    "load_config",
    "EdbmlError",
    "StructuralError",
    "NestedTemplateError",
]
