"""Renderer - converts preamble IR to Python source text."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from edbml.compiler.spec import Preamble, ResolverScope


class Renderer:
    """Renders IR nodes with the Jinja2 templates in edbml/templates."""

    def __init__(self, runtime: str = "__edb__", env: Environment | None = None):
        self.runtime = runtime
        self.env = env or self._create_env()

    def render_scope(self, scope: ResolverScope) -> str:
        """Render a resolver scope block.

        Args:
            scope: The imports to assign from the resolver.

        Returns:
            A nested function definition followed by its single call.
        """
        names = list(dict.fromkeys(dep.name for dep in scope.imports))
        tmpl = self.env.get_template("functions.py.j2")
        return tmpl.render(scope=scope, names=names, runtime=self.runtime)

    def render_preamble(self, preamble: Preamble) -> str:
        """Render default accumulators, declarations and preamble blocks."""
        tmpl = self.env.get_template("preamble.py.j2")
        return tmpl.render(preamble=preamble)

    def render_fallback(self, encoded: str, fragment: str) -> str:
        """Render the body of a replacement function for a broken template.

        Args:
            encoded: Base64 encoded diagnostic source.
            fragment: Markup returned in place of the template output.
        """
        tmpl = self.env.get_template("fallback.py.j2")
        return tmpl.render(encoded=encoded, fragment=fragment, runtime=self.runtime)

    @staticmethod
    def _create_env() -> Environment:
        templates_dir = Path(__file__).parent.parent / "templates"
        env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            autoescape=False,
        )
        env.filters["pyrepr"] = repr
        return env
