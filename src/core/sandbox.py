"""Init script sandbox.

A bundle may ship an `_init` entry: newline separated build-tool commands
run in the destination directory before any file is written. Only the tools
and subcommands in `ALLOWED_COMMANDS` run, never through a shell.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

from core.domain.errors import ExternalToolError
from core.templating import Substitution


logger = logging.getLogger(__name__)

INIT_FILENAME = "_init"

# tool -> allowed leading argument sequences (None: any subcommand).
ALLOWED_COMMANDS: dict[str, tuple[tuple[str, ...], ...] | None] = {
    "npm": None,
    "yarn": None,
    "pnpm": None,
    "nuget": (("add",), ("restore",), ("update",)),
    "dotnet": (("add",), ("restore",)),
    "flutter": (("create",),),
    "dart": (("pub", "add"), ("pub", "get")),
    "kamal": (("init",),),
}

ILLEGAL_CHARACTERS = frozenset("\"'`&;$@|<>")


class Verdict(str, Enum):
    ALLOWED = "allowed"
    SKIPPED = "skipped"
    UNSUPPORTED = "unsupported"
    DISALLOWED = "disallowed"
    ILLEGAL = "illegal"


@dataclass(frozen=True)
class CommandDecision:
    line: str
    verdict: Verdict
    argv: tuple[str, ...] = ()


@dataclass(frozen=True)
class CommandOutcome:
    command: str
    returncode: int | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0


Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]


def evaluate_command(line: str) -> CommandDecision:
    """Decide whether one init script line may run."""

    cmd = line.strip()
    if not cmd or cmd.startswith("#"):
        return CommandDecision(cmd, Verdict.SKIPPED)
    if any(c in ILLEGAL_CHARACTERS for c in cmd):
        return CommandDecision(cmd, Verdict.ILLEGAL)

    argv = tuple(cmd.split())
    tool, args = argv[0], argv[1:]
    if tool not in ALLOWED_COMMANDS or not args:
        return CommandDecision(cmd, Verdict.UNSUPPORTED)

    subcommands = ALLOWED_COMMANDS[tool]
    if subcommands is not None and not any(args[: len(s)] == s for s in subcommands):
        return CommandDecision(cmd, Verdict.DISALLOWED)

    return CommandDecision(cmd, Verdict.ALLOWED, argv)


def _execute(argv: Sequence[str], cwd: Path, runner: Runner) -> int:
    executable = shutil.which(argv[0]) or argv[0]
    try:
        completed = runner([executable, *argv[1:]], cwd=cwd, shell=False, check=False)
    except OSError as exc:
        raise ExternalToolError(" ".join(argv), str(exc)) from exc
    if completed.returncode != 0:
        raise ExternalToolError(" ".join(argv), f"exit code {completed.returncode}")
    return completed.returncode


def run_init_script(
    script: str,
    cwd: Path,
    substitution: Substitution,
    *,
    runner: Runner = subprocess.run,
    notify: Callable[[str], None] | None = None,
) -> list[CommandOutcome]:
    """Run every allowed command of `script` in `cwd`, in order.

    Rejected lines are skipped with a diagnostic. A failing command is logged
    and the remaining commands still run.
    """

    arg_substitution = substitution.for_commands()
    outcomes: list[CommandOutcome] = []

    for raw in script.splitlines():
        decision = evaluate_command(raw)
        if decision.verdict is Verdict.SKIPPED:
            continue
        if decision.verdict is Verdict.ILLEGAL:
            logger.warning("Command contains illegal characters, ignoring: '%s'", decision.line)
            continue
        if decision.verdict is Verdict.UNSUPPORTED:
            logger.debug("Command '%s' not supported", decision.line)
            continue
        if decision.verdict is Verdict.DISALLOWED:
            logger.debug("Command '%s' not allowed", decision.line)
            continue

        if notify:
            notify(decision.line)
        argv = [decision.argv[0], *(arg_substitution.apply(a) for a in decision.argv[1:])]
        try:
            code = _execute(argv, cwd, runner)
            outcomes.append(CommandOutcome(decision.line, code))
        except ExternalToolError as exc:
            logger.warning("%s", exc)
            outcomes.append(CommandOutcome(decision.line, None, exc.reason))

    return outcomes
