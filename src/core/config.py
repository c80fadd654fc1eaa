"""Configuración de la sesión.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Un único valor inmutable recorre los pipelines de apply/delete y el
  adaptador de GitHub; nadie lee flags globales del proceso.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_REGISTRY_ID = "9b32b03f207a191099137429051ebde8"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "add-in"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "add-in"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "add-in"
    return Path.home() / ".config" / "add-in"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración de una invocación.

    Fuentes, de mayor a menor prioridad: argumentos del constructor (la CLI),
    entorno, `./.env` y por último el `.env` del usuario. Inmutable una vez creada.
    """

    model_config = SettingsConfigDict(
        env_prefix="ADD_IN_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=(str(get_user_env_file()), ".env"),
        env_file_encoding="utf-8",
    )

    registry_id: str = Field(
        default=DEFAULT_REGISTRY_ID,
        min_length=1,
        validation_alias=AliasChoices("registry_id", "ADD_IN_REGISTRY_ID", "MIX_SOURCE"),
        description="Gist id holding the registry markdown.",
    )
    registry_file: str = Field(
        default="mix.md",
        min_length=1,
        description="File inside the registry gist listing the available bundles.",
    )
    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("github_token", "ADD_IN_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="Token sent to the GitHub API (raises rate limits, enables private gists).",
    )
    api_base_url: str = Field(
        default="https://api.github.com",
        min_length=8,
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="add-in python tool",
        min_length=1,
    )

    verbose: bool = False
    silent: bool = Field(
        default=False,
        description="Do not print the file list or prompt before writing.",
    )
    force_approval: bool = Field(
        default=False,
        description="Skip the confirmation prompt.",
    )
    preserve_existing: bool = Field(
        default=False,
        description="Never overwrite files that already exist.",
    )
    output_dir: str | None = Field(
        default=None,
        description="Location hint overriding the registry's `to` modifier.",
    )
    project_name: str | None = Field(
        default=None,
        description="Replaces the MyApp placeholder family (defaults to the cwd name).",
    )
    token_replacements: tuple[tuple[str, str], ...] = Field(
        default=(),
        description="Extra (term, replacement) pairs applied after the placeholders.",
    )
    ignore_tls_errors: bool = False
