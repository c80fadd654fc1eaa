"""Registry parsing.

The registry is a markdown document where every bundle is one bullet line:

    - [name](url) {to:"$HOST"} `tag1,tag2` Free text description

The brace block, the backtick block and the description are each optional,
in that order. Lines that do not start with a bullet link are ignored.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence
from urllib.parse import urlsplit

from core.domain.models import LinkRecord


CANONICAL_ORGANIZATION = "ServiceStack"
LEGACY_AUTHOR_HANDLES: frozenset[str] = frozenset({"gistlyn", "mythz"})

GIST_HOST = "gist.github.com"
REPO_HOST = "github.com"

_BULLETS = ("-", "*")
_MODIFIER_RE = re.compile(r"""(\w+):(?:"([^"]+)"|'([^']+)'|([^\s,}]+))""")


def normalize_user(user: str) -> str:
    return CANONICAL_ORGANIZATION if user in LEGACY_AUTHOR_HANDLES else user


def _take_bullet_link(line: str) -> tuple[str, str, str] | None:
    """Consume `- [name](url)` and return (name, url, rest)."""

    if not line or line[0] not in _BULLETS:
        return None
    rest = line[1:].lstrip()
    if not rest.startswith("["):
        return None

    name_end = rest.find("]", 1)
    if name_end <= 1 or rest[name_end + 1 : name_end + 2] != "(":
        return None
    url_start = name_end + 2
    url_end = rest.find(")", url_start)
    if url_end <= url_start:
        return None

    return rest[1:name_end], rest[url_start:url_end], rest[url_end + 1 :].strip()


def _take_block(text: str, opener: str, closer: str) -> tuple[str | None, str]:
    """Consume a delimited block at the start of `text`.

    Returns (inner, rest); inner is None when `text` does not start with a
    complete block.
    """

    if not text.startswith(opener):
        return None, text
    end = text.find(closer, 1)
    if end < 1:
        return None, text
    return text[1:end], text[end + 1 :].strip()


def parse_modifiers(block: str) -> dict[str, str]:
    modifiers: dict[str, str] = {}
    for match in _MODIFIER_RE.finditer(block):
        key = match.group(1)
        modifiers[key] = match.group(2) or match.group(3) or match.group(4)
    return modifiers


def parse_tags(block: str) -> tuple[str, ...]:
    # Order preserving dedupe.
    tags = (t.strip() for t in block.split(","))
    return tuple(dict.fromkeys(t for t in tags if t))


def _url_metadata(url: str) -> dict[str, str | None]:
    parts = urlsplit(url)
    segments = [s for s in parts.path.split("/") if s]
    host = parts.netloc.lower() if parts.scheme in ("http", "https") else ""

    meta: dict[str, str | None] = {
        "user": segments[0] if host and segments else "",
        "gist_id": None,
        "repo_owner": None,
        "repo_name": None,
    }
    if host == GIST_HOST and segments:
        meta["gist_id"] = segments[-1]
    elif host == REPO_HOST and segments:
        meta["repo_owner"] = segments[0]
        meta["repo_name"] = segments[1] if len(segments) > 1 else None
    meta["user"] = normalize_user(meta["user"] or "")
    return meta


def parse_link(line: str) -> LinkRecord | None:
    """Parse one registry line, None when it is not a bullet link."""

    taken = _take_bullet_link(line.strip())
    if taken is None:
        return None
    name, url, rest = taken

    modifiers: dict[str, str] = {}
    block, rest = _take_block(rest, "{", "}")
    if block is not None:
        modifiers = parse_modifiers(block)

    tags: tuple[str, ...] | None = None
    block, rest = _take_block(rest, "`", "`")
    if block is not None:
        tags = parse_tags(block)

    return LinkRecord(
        name=name,
        url=url,
        to=modifiers.get("to"),
        description=rest,
        tags=tags,
        modifiers=modifiers,
        **_url_metadata(url),
    )


def parse_registry(markdown: str | None) -> list[LinkRecord]:
    """Parse every bullet link of the registry, in document order."""

    if not markdown:
        return []
    links: list[LinkRecord] = []
    for line in markdown.splitlines():
        link = parse_link(line)
        if link is not None:
            links.append(link)
    return links


def _alias_key(value: str) -> str:
    return value.replace("-", "").lower()


def find_link(links: Iterable[LinkRecord], alias: str) -> LinkRecord | None:
    """Look up an alias ignoring case and hyphens (`my-addin` == `MyAddin`)."""

    key = _alias_key(alias)
    for link in links:
        if _alias_key(link.name) == key:
            return link
    return None


def matches_tag(link: LinkRecord, tag_query: str) -> bool:
    """True when the link carries any of the comma separated tags."""

    if not link.tags:
        return False
    wanted = {t.strip().lower() for t in tag_query.split(",") if t.strip()}
    return any(t.lower() in wanted for t in link.tags)


def filter_by_tag(links: Sequence[LinkRecord], tag_query: str) -> list[LinkRecord]:
    return [link for link in links if matches_tag(link, tag_query)]


def all_tags(links: Iterable[LinkRecord]) -> list[str]:
    return sorted({tag for link in links for tag in (link.tags or ())})
