"""Cliente de gists de GitHub.

`BundleFetcher` concreto: convierte un gist id, una URL de gist o una URL JSON
propia en un mapeo nombre de archivo -> contenido. Los resultados se cachean
por ref mientras vive el cliente, es decir, una invocación de la CLI.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.errors import EmptyBundleError, FetchError, NotFoundError
from core.identifiers import GIST_ID_LENGTH_LONG, GIST_ID_LENGTH_SHORT, GIST_URL_PREFIX


logger = logging.getLogger(__name__)


def gist_id_from_url(url: str) -> str:
    """`https://gist.github.com/<user>/<id>[/<rev>]` -> `<id>[/<rev>]`."""

    parts = [p for p in url[len(GIST_URL_PREFIX) :].split("/") if p]
    if len(parts) == 3:
        return "/".join(parts[1:])
    if len(parts) == 2:
        if len(parts[0]) in (GIST_ID_LENGTH_SHORT, GIST_ID_LENGTH_LONG):
            return "/".join(parts)
        return parts[1]
    if len(parts) == 1:
        return parts[0]
    raise FetchError(f"Invalid Gist URL '{url}'")


class GistClient:
    """Fetches gist files from the GitHub API."""

    def __init__(self, settings: AppSettings | None = None, *, client: httpx.Client | None = None) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_client(self._settings)
        self._cache: dict[str, dict[str, str]] = {}

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GistClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get(self, url: str, ref: str) -> httpx.Response:
        logger.debug("API: %s", url)
        try:
            resp = self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(f"HTTP {exc.response.status_code} fetching '{ref}': {exc.response.text[:200]}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Could not fetch '{ref}': {exc}") from exc
        return resp

    def _get_json(self, url: str, ref: str) -> Any:
        resp = self._get(url, ref)
        try:
            return resp.json()
        except ValueError as exc:
            raise FetchError(f"Invalid JSON returned for '{ref}'") from exc

    def _files_from_gist(self, payload: Any, ref: str) -> dict[str, str]:
        files = payload.get("files") if isinstance(payload, dict) else None
        if not isinstance(files, dict) or not files:
            raise EmptyBundleError(f"Invalid gist response returned for '{ref}'")

        out: dict[str, str] = {}
        for filename, meta in files.items():
            meta = meta if isinstance(meta, dict) else {}
            content = meta.get("content") or ""
            if meta.get("truncated") and meta.get("raw_url"):
                logger.debug("File '%s' is truncated, downloading %s", filename, meta["raw_url"])
                content = self._get(str(meta["raw_url"]), ref).text
            out[filename] = content
        return out

    def fetch(self, ref: str) -> dict[str, str]:
        if ref in self._cache:
            return self._cache[ref]

        if "://" not in ref:
            url = f"{self._settings.api_base_url}/gists/{ref}"
        elif ref.startswith(GIST_URL_PREFIX):
            url = f"{self._settings.api_base_url}/gists/{gist_id_from_url(ref)}"
        else:
            url = ref

        files = self._files_from_gist(self._get_json(url, ref), ref)
        self._cache[ref] = files
        return files

    def fetch_registry(self, registry_id: str) -> str:
        files = self.fetch(registry_id)
        markdown = files.get(self._settings.registry_file)
        if markdown is None:
            raise NotFoundError(f"Could not find '{self._settings.registry_file}' file in gist '{registry_id}'")
        return markdown
