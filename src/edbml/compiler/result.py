"""Result - turns assembled source into a callable function.

Materialization never fails for invalid source. A broken body produces a
:class:`Degraded` result whose function re-delivers the formatted source to
the runtime's script loader and returns an inline error fragment.
"""

from __future__ import annotations

import ast
import html
import logging
import textwrap
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from edbml.compiler.formatter import emergency_format
from edbml.compiler.renderer import Renderer
from edbml.config import CompilerConfig
from edbml.errors import MaterializeError
from edbml.runtime import Runtime

log = logging.getLogger(__name__)

# Name of the function object itself; display source always uses "function".
ANONYMOUS = "anonymous"


@dataclass
class Result:
    """Compiled template function."""

    function: Callable[..., Any]
    params: List[str] = field(default_factory=list)
    source: str = ""
    errormessage: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.errormessage is None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.function(*args, **kwargs)


@dataclass
class Success(Result):
    """The template body compiled as written."""


@dataclass
class Degraded(Result):
    """The template body was invalid; ``function`` reports the error."""


def materialize(
    body: str,
    params: Sequence[str] = (),
    runtime: Runtime | None = None,
    config: CompilerConfig | None = None,
    fallback: bool = True,
) -> Result:
    """Build a function with the given parameters and body.

    Args:
        body: Python statements forming the function body.
        params: Parameter names, in call order.
        runtime: Runtime visible to the function; a new one if omitted.
        config: Compiler config.
        fallback: Whether invalid source degrades to a replacement function.
            The replacement is built with ``fallback=False``.

    Returns:
        Success, or Degraded when the body is not valid Python.

    Raises:
        MaterializeError: If ``fallback`` is False and the body is invalid.
    """
    runtime = runtime or Runtime()
    config = config or CompilerConfig()
    params = list(params)

    try:
        function = _construct(body, params, runtime, config)
    except (SyntaxError, ValueError, MemoryError, RecursionError) as exc:
        if not fallback:
            raise MaterializeError(
                f"Could not build fallback function: {exc}"
            ) from exc
        log.warning("Template failed to compile: %s", exc)
        return _fallback(body, params, str(exc), runtime, config)

    return Success(function=function, params=params, source=_source(body, params))


def _construct(
    body: str, params: List[str], runtime: Runtime, config: CompilerConfig
) -> Callable[..., Any]:
    """Compile body into a function via the AST, so no re-indenting is needed."""
    for param in params:
        if not param.lstrip("*").isidentifier():
            raise ValueError(f"Invalid parameter name: {param!r}")
    module = ast.parse(f"def {ANONYMOUS}({', '.join(params)}):\n    pass\n")
    statements = ast.parse(body, filename=config.filename).body
    module.body[0].body = statements or [ast.Pass()]  # type: ignore[attr-defined]
    ast.fix_missing_locations(module)

    code = compile(module, config.filename, "exec")
    namespace: dict[str, Any] = {config.runtime_name: runtime}
    exec(code, namespace)
    return namespace[ANONYMOUS]


def _source(body: str, params: Sequence[str]) -> str:
    """Compute display source for the function."""
    header = f"def function({', '.join(params)}):"
    text = body.rstrip("\n") or "pass"
    return header + "\n" + textwrap.indent(text, "    ", lambda line: True)


def _fallback(
    body: str,
    params: List[str],
    message: str,
    runtime: Runtime,
    config: CompilerConfig,
) -> Result:
    """Replace a broken template with a function that shows the error."""
    diagnostic = emergency_format(body, params, config.fallback_name, config.indent)
    escaped = html.escape(message, quote=False)
    fragment = f'<p class="{config.error_class}">{escaped}</p>'
    replacement = Renderer(config.runtime_name).render_fallback(
        Runtime.b64encode(diagnostic), fragment
    )
    result = materialize(
        replacement, ["*args", "**kwargs"], runtime, config, fallback=False
    )
    return Degraded(
        function=result.function,
        params=[],
        source=result.source,
        errormessage=message,
    )
