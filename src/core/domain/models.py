"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Registros inmutables y validados, con campos autodocumentados (Field).
- El dominio no sabe nada de HTTP ni de la consola, solo qué es una entrada
  del registro y un destino de escritura.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class LinkRecord(BaseModel):
    """Representa un bundle listado en el markdown del registro.

    `to` es la pista de destino: una ruta literal, `$HOST`, `$HOME/...` o
    None para el directorio actual. `tags` es None cuando la línea no trae
    bloque de tags, que no es lo mismo que un bloque vacío.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    user: str = Field(
        default="",
        description="Author handle, legacy personal handles collapse to the organisation.",
    )
    to: str | None = None
    description: str = ""
    tags: tuple[str, ...] | None = None
    gist_id: str | None = Field(
        default=None,
        description="Gist id when the URL points at gist.github.com.",
    )
    repo_owner: str | None = None
    repo_name: str | None = None
    modifiers: dict[str, str] = Field(
        default_factory=dict,
        description="Every key:value pair of the brace block, including `to`.",
    )

    @property
    def fetch_ref(self) -> str:
        """Referencia que se entrega al fetcher para esta entrada."""

        return self.gist_id or self.url


class ResolvedFile(BaseModel):
    """Destino de escritura concreto producido al aplicar un bundle."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute destination with all markers removed.")
    content: str
    original_name: str
    binary: bool = Field(
        default=False,
        description="Content is base64 text to be decoded before writing.",
    )

    @property
    def is_json_patch(self) -> bool:
        return self.path.name.endswith(".json.patch")

    @property
    def patch_target(self) -> Path:
        return self.path.with_name(self.path.name.removesuffix(".patch"))
