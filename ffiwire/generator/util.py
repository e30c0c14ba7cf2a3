"""Identifier helpers shared by the code generators."""

import re

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """Convert ``camelCase``/``PascalCase`` to ``snake_case``."""
    return _WORD_BOUNDARY.sub("_", name).lower()


def to_camel_case(name: str, *, upper: bool = False) -> str:
    """Convert ``snake_case`` or ``PascalCase`` to ``camelCase``.

    With ``upper=True`` the first letter is capitalized as well.
    """
    parts = [p for p in to_snake_case(name).split("_") if p]
    if not parts:
        return name
    head = parts[0].capitalize() if upper else parts[0]
    return head + "".join(p.capitalize() for p in parts[1:])


def docstring_lines(text: str | None) -> list[str]:
    """Split a docstring into lines, dropping trailing blank lines."""
    if not text:
        return []
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    return lines
