"""Processing instructions - compile-time metadata embedded in template source.

A processing instruction looks like::

    <?param name="user"?>

It has a type (``param``) and zero or more quoted attributes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

PI_PATTERN = re.compile(
    r"<\?([A-Za-z_][\w-]*)((?:\s+[\w-]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*)\s*\?>"
)

ATT_PATTERN = re.compile(r"([\w-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")


@dataclass
class Instruction:
    """A single processing instruction."""

    type: str
    atts: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, match: re.Match[str]) -> "Instruction":
        atts = {}
        for att in ATT_PATTERN.finditer(match.group(2)):
            value = att.group(2) if att.group(2) is not None else att.group(3)
            atts[att.group(1)] = value
        return cls(type=match.group(1), atts=atts)

    @classmethod
    def from_source(cls, source: str) -> List["Instruction"]:
        """Get the instructions in source, in source order."""
        return extract(source)[0]

    @staticmethod
    def clean(source: str) -> str:
        """Strip all instructions from source."""
        return extract(source)[1]


def extract(source: str) -> Tuple[List[Instruction], str]:
    """Extract processing instructions from source.

    Removal is repeated until nothing matches, since stripping a marker can
    join the text around it into a new one. Instructions found that way are
    listed after the ones visible in the original text.

    Returns:
        The instructions and the source without them.
    """
    instructions: List[Instruction] = []
    while True:
        found = [Instruction.parse(m) for m in PI_PATTERN.finditer(source)]
        if not found:
            return instructions, source
        instructions.extend(found)
        source = PI_PATTERN.sub("", source)
