"""Identifier resolution.

A token given on the command line is, in priority order: a 1-based index
into the registry, a raw gist id, an absolute URL, or a registry alias.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from core.domain.errors import AliasNotFoundError
from core.domain.models import LinkRecord
from core.registry import find_link


GIST_ID_LENGTH_SHORT = 20
GIST_ID_LENGTH_LONG = 32
GIST_ID_LENGTH_FULL = 40

GIST_URL_PREFIX = "https://gist.github.com/"


class IdentifierKind(str, Enum):
    GIST_ID = "gist_id"
    URL = "url"
    ALIAS = "alias"


@dataclass(frozen=True)
class ResolvedIdentifier:
    """Where a token's bundle comes from and where it should go."""

    token: str
    kind: IdentifierKind
    ref: str
    url: str
    to: str

    @property
    def label(self) -> str:
        """Quoted alias prefix for messages, empty for URLs."""

        if not self.token or "://" in self.token:
            return ""
        return f"'{self.token}' "

    @property
    def error_suffix(self) -> str:
        return f" required by {self.label}{self.url}"


def is_gist_id(token: str) -> bool:
    """Raw gist ids are 20 or 32 chars, optionally followed by `/revision`."""

    if any(c in token for c in "-.:"):
        return False
    first = token.split("/", 1)[0]
    if "/" in token and len(first) == GIST_ID_LENGTH_FULL:
        return False
    return len(first) in (GIST_ID_LENGTH_SHORT, GIST_ID_LENGTH_LONG)


def is_url(token: str) -> bool:
    return token.startswith(("https://", "http://"))


def expand_indexes(tokens: Iterable[str], links: Sequence[LinkRecord]) -> list[str]:
    """Replace 1-based registry indexes by the entry's name."""

    out: list[str] = []
    for token in tokens:
        if token.isdecimal() and 0 < int(token) <= len(links):
            out.append(links[int(token) - 1].name)
        else:
            out.append(token)
    return out


def resolve_identifier(
    token: str,
    links: Sequence[LinkRecord],
    *,
    output_dir: str | None = None,
) -> ResolvedIdentifier:
    """Classify `token`; raises `AliasNotFoundError` for unknown aliases.

    Only registry entries carry a destination hint. Everything else lands in
    `output_dir` or the current directory.
    """

    if is_gist_id(token):
        url = GIST_URL_PREFIX + token
        return ResolvedIdentifier(token, IdentifierKind.GIST_ID, ref=url, url=url, to=output_dir or ".")

    if is_url(token):
        return ResolvedIdentifier(token, IdentifierKind.URL, ref=token, url=token, to=output_dir or ".")

    link = find_link(links, token)
    if link is None:
        raise AliasNotFoundError(token, links)
    return ResolvedIdentifier(
        token,
        IdentifierKind.ALIAS,
        ref=link.fetch_ref,
        url=link.url,
        to=output_dir or link.to or ".",
    )
