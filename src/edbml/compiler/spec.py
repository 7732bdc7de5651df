"""Compiler IR spec - intermediate representation of a compiled template."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class Import:
    """A function or tag resolved from the registry when the template runs."""

    name: str  # identifier used in generated code, e.g. "button"
    tempname: str  # registry key, e.g. "edb-3f2a9c"


@dataclass
class Head:
    """Per-compile accumulator of declared names and preamble blocks."""

    declarations: Dict[str, bool] = field(default_factory=dict)  # ordered set
    functiondefs: List[str] = field(default_factory=list)

    def declare(self, name: str) -> None:
        self.declarations[name] = True


@dataclass
class ResolverScope:
    """Assigns every import from the resolver inside one nested function."""

    imports: List[Import] = field(default_factory=list)
    name: str = "__functions__"


@dataclass
class Preamble:
    """Everything prepended to the template body."""

    runtime: str = "__edb__"
    defaults: List[str] = field(default_factory=list)  # "out", "att"
    declarations: List[str] = field(default_factory=list)
    functiondefs: List[str] = field(default_factory=list)


@dataclass
class Assembly:
    """Output of the text pipeline, ready to be materialized."""

    body: str
    params: List[str] = field(default_factory=list)
    head: Head = field(default_factory=Head)
