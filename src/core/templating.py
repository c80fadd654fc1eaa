"""Placeholder substitution.

Bundles are written against a generic app name in six spellings
(`My_App`, `MyApp`, `My App`, `my-app`, `myapp`, `my_app`). Each is replaced
by the matching case form of the project name, then any user supplied
`(term, replacement)` pairs are applied as plain substring replacements.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field


SEPARATOR_CHARS = (" ", "-", "+", "_")
_SEPARATOR_RE = re.compile("[" + re.escape("".join(SEPARATOR_CHARS)) + "]")
_KEBAB_BOUNDARY_RE = re.compile(r"([a-z])([A-Z])")


def camel_to_kebab(value: str) -> str:
    return _KEBAB_BOUNDARY_RE.sub(r"\1-\2", value or "").lower()


def split_pascal_case(value: str) -> str:
    """`MyAPIApp` -> `My API App`.

    An uppercase letter starts a new word when the previous letter is
    lowercase or the next one is; runs of capitals stay together.
    """

    if not value:
        return value
    out: list[str] = []
    for i, ch in enumerate(value):
        if ch.isupper():
            after_lower = i > 0 and value[i - 1].islower()
            before_lower = i + 1 < len(value) and value[i + 1].islower()
            if after_lower or before_lower:
                out.append(" ")
        out.append(ch)
    return "".join(out).strip()


def sanitize_project_name(name: str | None) -> str | None:
    """`my-cool app` -> `MyCoolApp`; names without separators pass through."""

    if not name:
        return None
    if not any(c in name for c in SEPARATOR_CHARS):
        return name
    words = [w for w in _SEPARATOR_RE.split(name) if w]
    return "".join(w[0].upper() + w[1:] for w in words)


def replace_placeholders(text: str, project_name: str) -> str:
    condensed = project_name.replace("_", "")
    return (
        text.replace("My_App", project_name)
        .replace("MyApp", condensed)
        .replace("My App", split_pascal_case(condensed))
        .replace("my-app", camel_to_kebab(condensed))
        .replace("myapp", condensed.lower())
        .replace("my_app", project_name.lower())
    )


@dataclass(frozen=True)
class Substitution:
    """Project name plus extra replacements, applied to content and paths."""

    project_name: str
    replacements: tuple[tuple[str, str], ...] = ()
    strip_carriage_returns: bool = field(default_factory=lambda: sys.platform != "win32")

    def apply(self, text: str) -> str:
        if not text or not self.project_name:
            return text
        result = replace_placeholders(text, self.project_name)
        if self.strip_carriage_returns:
            result = result.replace("\r", "")
        for term, replacement in self.replacements:
            if term:
                result = result.replace(term, replacement)
        return result

    def for_commands(self) -> "Substitution":
        """Package names use `_` where project names may carry `.`."""

        return Substitution(
            project_name=self.project_name.replace(".", "_"),
            replacements=self.replacements,
            strip_carriage_returns=self.strip_carriage_returns,
        )
