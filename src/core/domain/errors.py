"""Errors raised by the apply/delete engine.

Every message names the identifier or URL that caused it, so the operator
can find the offending registry entry.
"""

from __future__ import annotations

from typing import Sequence

from core.domain.models import LinkRecord


class AddInError(Exception):
    """Base class for all expected failures."""


class NotFoundError(AddInError):
    """A host marker, hinted file/directory or registry file could not be found."""


class AliasNotFoundError(NotFoundError):
    def __init__(self, alias: str, links: Sequence[LinkRecord]) -> None:
        super().__init__(f"No match found for '{alias}'")
        self.alias = alias
        self.links = list(links)


class TraversalError(AddInError):
    """A location hint or bundle filename tried to leave its base directory."""


class PlatformMismatchError(AddInError):
    """An absolute path was written in the other operating system's style."""


class InvalidLocationError(AddInError):
    """A `$`-prefixed location hint with an unknown sentinel."""


class UserCancelledError(AddInError):
    def __init__(self, message: str = "Operation cancelled by user.") -> None:
        super().__init__(message)


class ExternalToolError(AddInError):
    """An init command exited non-zero or could not be launched."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"Failed to execute: {command} ({reason})")
        self.command = command
        self.reason = reason


class FetchError(AddInError):
    """The content of a bundle could not be downloaded."""


class EmptyBundleError(FetchError):
    """The referenced bundle exists but carries no files."""
