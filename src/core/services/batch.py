"""Shared plumbing for the apply and delete pipelines.

Both pipelines load the registry once, expand numeric indexes, resolve each
token and compute the same project name substitution. UI concerns (prompts,
printing) are injected through `PipelineHooks` so the core stays headless.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Sequence

from core.config import AppSettings
from core.destinations import DestinationResolver
from core.domain.models import LinkRecord
from core.identifiers import expand_indexes
from core.interfaces.fetcher import BundleFetcher
from core.registry import parse_registry
from core.templating import Substitution, sanitize_project_name


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    confirm: Callable[[str], bool] | None = None
    notify: Callable[[str], None] | None = None
    unmatched: Callable[[str, list[LinkRecord]], None] | None = None

    def ask(self, message: str) -> bool:
        # Non-interactive callers approve by default.
        return self.confirm(message) if self.confirm else True

    def say(self, message: str) -> None:
        if self.notify:
            self.notify(message)


@dataclass
class Batch:
    """Everything resolved once per batch call."""

    settings: AppSettings
    fetcher: BundleFetcher
    resolver: DestinationResolver
    hooks: PipelineHooks
    substitution: Substitution
    links: list[LinkRecord] = field(default_factory=list)
    tokens: list[str] = field(default_factory=list)


def project_name_for(settings: AppSettings, override: str | None, resolver: DestinationResolver) -> str:
    name = override or settings.project_name or resolver.cwd.name
    return sanitize_project_name(name) or name


def open_batch(
    tokens: Sequence[str],
    project_name: str | None,
    *,
    settings: AppSettings,
    fetcher: BundleFetcher,
    hooks: PipelineHooks | None = None,
    resolver: DestinationResolver | None = None,
) -> Batch:
    resolver = resolver or DestinationResolver()
    substitution = Substitution(
        project_name=project_name_for(settings, project_name, resolver),
        replacements=tuple(settings.token_replacements),
    )
    links = parse_registry(fetcher.fetch_registry(settings.registry_id))
    return Batch(
        settings=settings,
        fetcher=fetcher,
        resolver=resolver,
        hooks=hooks or PipelineHooks(),
        substitution=substitution,
        links=links,
        tokens=expand_indexes(tokens, links),
    )
