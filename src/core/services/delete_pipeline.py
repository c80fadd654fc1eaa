"""Delete pipeline.

Resolves bundle files exactly like the apply pipeline, removes the ones that
exist after a single combined confirmation, then prunes emptied folders.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from core.config import AppSettings
from core.destinations import DestinationResolver, split_markers
from core.domain.errors import AliasNotFoundError, TraversalError, UserCancelledError
from core.identifiers import ResolvedIdentifier, resolve_identifier
from core.interfaces.fetcher import BundleFetcher
from core.sandbox import INIT_FILENAME
from core.services.batch import Batch, PipelineHooks, open_batch


logger = logging.getLogger(__name__)


def existing_bundle_files(batch: Batch, ident: ResolvedIdentifier) -> dict[Path, Path]:
    """Existing files of a bundle, each mapped to the root it was resolved under.

    The root is the base directory, or the cwd for files that took the
    project-qualified `$HOST` fallback.
    """

    files = batch.fetcher.fetch(ident.ref)
    base = batch.resolver.resolve_base_path(ident.to, ident.error_suffix)

    found: dict[Path, Path] = {}
    for name in files:
        if name == INIT_FILENAME:
            continue
        if ".." in name:
            raise TraversalError(f"Invalid file name '{name}' from '{ident.url}'")
        path, _ = split_markers(batch.resolver.resolve_file_path(name, base, batch.substitution, ident.to))
        if not path.exists():
            logger.debug("Skipping deleting non-existent file: %s", path)
            continue
        found[path] = base if base in path.parents else batch.resolver.cwd
    return found


def _folders_below(path: Path, root: Path) -> list[Path]:
    """Ancestors of `path` strictly inside `root`."""

    return [parent for parent in path.parents if root in parent.parents]


def remove_empty_folders(folders: set[Path]) -> list[Path]:
    """Remove emptied folders, deepest first. Returns the removed ones."""

    removed: list[Path] = []
    for folder in sorted(folders, key=lambda p: len(str(p)), reverse=True):
        try:
            if any(folder.iterdir()):
                continue
            logger.debug("RMDIR: %s", folder)
            folder.rmdir()
            removed.append(folder)
        except OSError as exc:
            logger.debug("Could not remove %s: %s", folder, exc)
    return removed


def delete_batch(
    tokens: Sequence[str],
    project_name: str | None = None,
    *,
    settings: AppSettings,
    fetcher: BundleFetcher,
    hooks: PipelineHooks | None = None,
    resolver: DestinationResolver | None = None,
) -> bool:
    """Delete the files previously written by `tokens`.

    Returns False, without touching the filesystem, when an alias has no
    match or none of the bundle files exist.
    """

    batch = open_batch(tokens, project_name, settings=settings, fetcher=fetcher, hooks=hooks, resolver=resolver)

    to_delete: dict[Path, Path] = {}
    output = ""
    for token in batch.tokens:
        try:
            ident = resolve_identifier(token, batch.links, output_dir=settings.output_dir)
        except AliasNotFoundError as exc:
            if batch.hooks.unmatched:
                batch.hooks.unmatched(exc.alias, exc.links)
            return False

        found = existing_bundle_files(batch, ident)
        if found:
            plural = "s" if len(found) != 1 else ""
            output += f"\nDelete {len(found)} file{plural} from {ident.label}{ident.url}:\n\n"
            output += "".join(f"{path}\n" for path in found)
        to_delete.update(found)

    if not to_delete:
        batch.hooks.say(f"Did not find any existing files from '{','.join(tokens)}' to delete")
        return False

    if not settings.silent:
        if settings.force_approval:
            batch.hooks.say(output)
        elif not batch.hooks.ask(output):
            raise UserCancelledError()
        batch.hooks.say(f"\nDeleting {len(to_delete)} files...")

    folders: set[Path] = set()
    for path, root in to_delete.items():
        logger.debug("RM: %s", path)
        try:
            path.unlink()
            folders.update(_folders_below(path, root))
        except OSError as exc:
            logger.warning("Could not delete %s: %s", path, exc)

    remove_empty_folders(folders)

    if not settings.silent:
        batch.hooks.say("Done.")
    return True
