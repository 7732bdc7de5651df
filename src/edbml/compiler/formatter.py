"""Fallback formatter - re-indents broken template source for display.

This is a bracket-counting heuristic, not a parser. It runs when the source
is already known to be invalid, so it must accept any input.
"""

from __future__ import annotations

from typing import Sequence

OPENERS = ("{", "[", "(")
CLOSERS = ("}", "]", ")")


def emergency_format(
    body: str,
    params: Sequence[str] = (),
    name: str = "dysfunction",
    indent: str = "    ",
) -> str:
    """Format invalid source for readability.

    Args:
        body: Source text, possibly not valid Python.
        params: Parameter names echoed in the function header.
        name: Function name shown in the header.
        indent: Indent unit.

    Returns:
        The body re-indented inside a display-only function header, with one
        header line and one footer line added.
    """
    depth = 1
    lines = [f"def {name}({', '.join(params)}):"]
    for line in body.split("\n"):
        line = line.strip()
        if line.startswith(CLOSERS) and depth > 0:
            depth -= 1
        lines.append((indent * depth + line).rstrip())
        stripped = line.split("#")[0].rstrip()
        if line.endswith(OPENERS) or stripped.endswith(OPENERS):
            depth += 1
    lines.append(f"# end {name}")
    return "\n".join(lines)
