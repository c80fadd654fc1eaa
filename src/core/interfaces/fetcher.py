"""Contrato de obtención de bundles.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia.
- Los pipelines solo necesitan "dame los archivos de esta ref"; el cliente de
  GitHub y los fakes en memoria de los tests lo cumplen por igual.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class BundleFetcher(Protocol):
    """Contrato mínimo para una fuente de contenido.

    Reglas de diseño:
    - `fetch` devuelve nombre de archivo -> contenido y lanza `EmptyBundleError`
      cuando el bundle referenciado no tiene archivos.
    - Las implementaciones cachean por ref durante una invocación.
    """

    def fetch(self, ref: str) -> dict[str, str]:
        """Archivos de un gist id, URL de gist o URL JSON con forma de gist."""

        ...

    def fetch_registry(self, registry_id: str) -> str:
        """Markdown crudo del registro `registry_id`."""

        ...
