"""Apply pipeline.

For each requested bundle, in order: fetch, resolve every destination,
confirm, run the `_init` script, write the files and apply JSON patches.
Each bundle is finished before the next one starts.
"""

from __future__ import annotations

import base64
import binascii
import logging
import subprocess
from pathlib import Path
from typing import Sequence
from urllib.parse import unquote

from core.config import AppSettings
from core.destinations import OPTIONAL_MARKER, DestinationResolver, split_markers
from core.domain.errors import AddInError, AliasNotFoundError, TraversalError, UserCancelledError
from core.domain.models import ResolvedFile
from core.identifiers import ResolvedIdentifier, resolve_identifier
from core.interfaces.fetcher import BundleFetcher
from core.json_patch import patch_json_file
from core.sandbox import INIT_FILENAME, Runner, run_init_script
from core.services.batch import Batch, PipelineHooks, open_batch


logger = logging.getLogger(__name__)


def plan_bundle(batch: Batch, ident: ResolvedIdentifier, files: dict[str, str]) -> tuple[list[ResolvedFile], str | None]:
    """Resolve the write targets of one bundle.

    Returns the files to write and the `_init` script, if any. Files that
    must not be overwritten and already exist are left out.
    """

    base = batch.resolver.resolve_base_path(ident.to, ident.error_suffix)
    init_script: str | None = None
    planned: list[ResolvedFile] = []

    for name, content in files.items():
        if ".." in name:
            raise TraversalError(f"Invalid file name '{name}' from '{ident.url}'")
        if name == INIT_FILENAME:
            init_script = content
            continue

        path, binary = split_markers(batch.resolver.resolve_file_path(name, base, batch.substitution, ident.to))
        optional = name.endswith(OPTIONAL_MARKER)
        if (batch.settings.preserve_existing or optional) and path.exists():
            logger.debug("Skipping existing optional file: %s", path)
            continue

        planned.append(
            ResolvedFile(
                path=path,
                content=content if binary else batch.substitution.apply(content),
                original_name=name,
                binary=binary,
            )
        )
    return planned, init_script


def write_file(file: ResolvedFile, hooks: PipelineHooks) -> Path:
    logger.debug("Writing %s...", file.path)
    file.path.parent.mkdir(parents=True, exist_ok=True)

    if file.binary:
        try:
            data = base64.b64decode(file.content)
        except (binascii.Error, ValueError) as exc:
            raise AddInError(f"Invalid base64 content in '{file.original_name}'") from exc
        file.path.write_bytes(data)
    else:
        file.path.write_text(file.content, encoding="utf-8", newline="")

    if file.is_json_patch and file.patch_target.exists():
        hooks.say(f"Patching {file.patch_target}...")
        patch_json_file(file.patch_target, file.path)
        file.path.unlink()
    return file.path


def apply_bundle(
    batch: Batch,
    ident: ResolvedIdentifier,
    *,
    auto_approve: bool,
    runner: Runner = subprocess.run,
) -> list[Path]:
    files = batch.fetcher.fetch(ident.ref)
    planned, init_script = plan_bundle(batch, ident, files)

    if not batch.settings.silent:
        listing = "".join(f"  {f.path}\n" for f in planned)
        message = f"\nWrite files from {ident.label}{unquote(ident.url)} to:\n\n{listing}"
        if auto_approve:
            batch.hooks.say(message.replace("Write files from", "Writing files from", 1))
        elif not batch.hooks.ask(message):
            raise UserCancelledError()

    if init_script is not None:
        host_dir = batch.resolver.resolve_base_path(ident.to, ident.error_suffix)
        run_init_script(init_script, host_dir, batch.substitution, runner=runner, notify=batch.hooks.say)

    return [write_file(f, batch.hooks) for f in planned]


def apply_batch(
    tokens: Sequence[str],
    project_name: str | None = None,
    *,
    settings: AppSettings,
    fetcher: BundleFetcher,
    hooks: PipelineHooks | None = None,
    resolver: DestinationResolver | None = None,
    runner: Runner = subprocess.run,
) -> bool:
    """Apply every bundle in `tokens`; False when an alias has no match.

    Only the first bundle asks for confirmation, the rest of the batch is
    auto approved. `UserCancelledError` aborts the remaining bundles.
    """

    batch = open_batch(tokens, project_name, settings=settings, fetcher=fetcher, hooks=hooks, resolver=resolver)
    auto_approve = settings.force_approval

    for token in batch.tokens:
        try:
            ident = resolve_identifier(token, batch.links, output_dir=settings.output_dir)
        except AliasNotFoundError as exc:
            if batch.hooks.unmatched:
                batch.hooks.unmatched(exc.alias, exc.links)
            return False

        apply_bundle(batch, ident, auto_approve=auto_approve, runner=runner)
        auto_approve = True

    return True
