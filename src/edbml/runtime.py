"""Runtime - what compiled template functions see at call time.

Generated code only talks to a single global (``__edb__`` by default), a
:class:`Runtime`. It provides:
- ``Out()`` / ``Att()``: default output and attribute accumulators
- ``resolve(key)``: dependency lookup in a :class:`Registry`
- ``load_script(source)``: re-delivery of diagnostic source for broken templates
- ``b64decode(text)``: decoding of the embedded diagnostic source
"""

from __future__ import annotations

import base64
import html
import logging
from collections.abc import Callable
from typing import Any

from uuid_extensions import uuid7str

log = logging.getLogger(__name__)


class Out:
    """Output accumulator."""

    def __init__(self) -> None:
        self.html = ""

    def write(self, *parts: Any) -> "Out":
        self.html += "".join(str(part) for part in parts)
        return self

    def __iadd__(self, other: Any) -> "Out":
        return self.write(other)

    def __str__(self) -> str:
        return self.html


class Att(dict):
    """Attribute accumulator.

    Renders as html attributes, skipping ``None`` and ``False`` values.
    """

    def __str__(self) -> str:
        parts = []
        for name, value in self.items():
            if value is None or value is False:
                continue
            if value is True:
                parts.append(f" {name}")
            else:
                parts.append(f' {name}="{html.escape(str(value))}"')
        return "".join(parts)


class Registry:
    """Dependency registry: maps temporary names to functions and tags."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    def register(self, key: str, value: Any) -> None:
        self._items[key] = value

    def tempname(self, value: Any) -> str:
        """Store value under a fresh key and return the key."""
        key = f"edb-{uuid7str()}"
        self.register(key, value)
        return key

    def resolve(self, key: str) -> Any:
        try:
            return self._items[key]
        except KeyError:
            raise KeyError(f"Unresolved dependency: {key}") from None

    def __contains__(self, key: object) -> bool:
        return key in self._items


def default_loader(source: str, context: Any) -> None:
    log.error("Broken template source:\n%s", source)


class Runtime:
    """Namespace object exposed to generated code."""

    def __init__(
        self,
        registry: Registry | None = None,
        loader: Callable[[str, Any], None] | None = None,
        context: Any = None,
    ):
        self.registry = registry or Registry()
        self.loader = loader or default_loader
        self.context = context
        self.outputs: list[Out] = []
        self.scripts: list[str] = []

    def Out(self) -> Out:
        out = Out()
        self.outputs.append(out)
        return out

    def Att(self) -> Att:
        return Att()

    def resolve(self, key: str) -> Any:
        return self.registry.resolve(key)

    def load_script(self, source: str) -> None:
        self.scripts.append(source)
        self.loader(source, self.context)

    @staticmethod
    def b64encode(text: str) -> str:
        return base64.b64encode(text.encode("utf-8")).decode("ascii")

    @staticmethod
    def b64decode(text: str) -> str:
        return base64.b64decode(text).decode("utf-8")
