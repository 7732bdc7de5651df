"""Compiler - transforms template source into an invocable function."""

from __future__ import annotations

import logging
import re
import textwrap
from typing import Dict, List, Mapping, Optional, Sequence

from edbml.compiler.renderer import Renderer
from edbml.compiler.result import Result, materialize
from edbml.compiler.spec import Assembly, Head, Import, Preamble, ResolverScope
from edbml.config import CompilerConfig
from edbml.errors import NestedTemplateError
from edbml.instruction import Instruction, extract
from edbml.runtime import Runtime

log = logging.getLogger(__name__)

# Accumulators injected unless the template declares a param of the same name.
DEFAULTS = ("out", "att")


def validate(script: str, pattern: str | re.Pattern[str]) -> str:
    """Confirm that script holds no nested template.

    Raises:
        NestedTemplateError: If pattern matches anywhere in script.
    """
    match = re.search(pattern, script)
    if match:
        raise NestedTemplateError(match.group(0))
    return script


class FunctionCompiler:
    """Compiles template source to a function.

    Each step in ``sequence`` takes the current script and the shared head
    and returns the next script. Subclasses may override ``_direct`` to
    handle directives (attributes of the enclosing template tag).
    """

    sequence = ["_validate", "_direct", "_extract", "_declare", "_define"]

    def __init__(
        self,
        config: Optional[CompilerConfig] = None,
        runtime: Optional[Runtime] = None,
    ):
        self.config = config or CompilerConfig()
        self.runtime = runtime or Runtime()
        self.renderer = Renderer(self.config.runtime_name)
        self.directives: Dict[str, str] = {}
        self.dependencies: List[Import] = []
        self._params: List[str] = []

    def compile(
        self,
        source: str,
        directives: Optional[Mapping[str, str]] = None,
        dependencies: Optional[Sequence[Import]] = None,
    ) -> Result:
        """Compile source to an invocable function.

        Args:
            source: Template source.
            directives: Attributes of the enclosing template tag.
            dependencies: Functions and tags resolved when the function runs.

        Returns:
            Result holding the function. Invalid Python in the template
            gives a Degraded result rather than an exception.

        Raises:
            NestedTemplateError: If the source contains a nested template.
        """
        assembly = self.assemble(source, directives, dependencies)
        return materialize(
            assembly.body, assembly.params, self.runtime, self.config
        )

    def assemble(
        self,
        source: str,
        directives: Optional[Mapping[str, str]] = None,
        dependencies: Optional[Sequence[Import]] = None,
    ) -> Assembly:
        """Run the text pipeline and return the function body and params."""
        self.directives = dict(directives or {})
        self.dependencies = list(dependencies or [])
        self._params = []
        head = Head()
        script = source
        for step in self.sequence:
            log.debug("Compile step %s", step)
            script = getattr(self, step)(script, head)
        return Assembly(body=script, params=list(self._params), head=head)

    # Steps

    def _validate(self, script: str, head: Head) -> str:
        return validate(script, self.config.nested_pattern)

    def _direct(self, script: str, head: Head) -> str:
        """Handle directives. Nothing by default."""
        return script

    def _extract(self, script: str, head: Head) -> str:
        """Evaluate processing instructions and strip them from the script."""
        instructions, script = extract(script)
        for pi in instructions:
            self._instruct(pi)
        return script

    def _instruct(self, pi: Instruction) -> None:
        if pi.type == "param":
            name = pi.atts.get("name")
            if name and name not in self._params:
                self._params.append(name)
        else:
            log.debug("Ignoring processing instruction %r", pi.type)

    def _declare(self, script: str, head: Head) -> str:
        """Declare dependencies and assign them from the resolver."""
        for dep in self.dependencies:
            head.declare(dep.name)
        if self.dependencies:
            scope = ResolverScope(imports=self.dependencies)
            head.functiondefs.append(self.renderer.render_scope(scope))
        return script

    def _define(self, script: str, head: Head) -> str:
        """Prepend default accumulators, declarations and preamble blocks."""
        preamble = Preamble(
            runtime=self.config.runtime_name,
            defaults=[name for name in DEFAULTS if name not in self._params],
            declarations=list(head.declarations),
            functiondefs=list(head.functiondefs),
        )
        return self.renderer.render_preamble(preamble) + textwrap.dedent(script)


def compile_template(
    source: str,
    directives: Optional[Mapping[str, str]] = None,
    dependencies: Optional[Sequence[Import]] = None,
    config: Optional[CompilerConfig] = None,
    runtime: Optional[Runtime] = None,
) -> Result:
    """Compile source with a fresh FunctionCompiler."""
    compiler = FunctionCompiler(config, runtime)
    return compiler.compile(source, directives, dependencies)
