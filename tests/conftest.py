from __future__ import annotations

from pathlib import Path

import pytest

from core.config import AppSettings
from core.destinations import DestinationResolver
from core.domain.errors import EmptyBundleError

INIT_ID = "58030e271595520d87873c5df5e14f60"
REDIS_ID = "67d6c72fba8e07c4aeb82d3bb6bfef0f"
DOCS_ID = "0123456789abcdef0123"

REGISTRY_MD = f"""
# Mix Registry

 - [init](https://gist.github.com/gistlyn/{INIT_ID}) {{}} `project,sharp` Empty App
 - [redis](https://gist.github.com/gistlyn/{REDIS_ID}) {{to:"$HOST"}} `db` Use Redis
 - [my-addin](https://gist.github.com/mythz/{DOCS_ID}) {{to:"docs/"}} `docs` Docs pages
"""


class FakeFetcher:
    """In-memory `BundleFetcher`."""

    def __init__(self, bundles: dict[str, dict[str, str]], registry: str = REGISTRY_MD) -> None:
        self.bundles = bundles
        self.registry = registry
        self.calls: list[str] = []

    def fetch(self, ref: str) -> dict[str, str]:
        self.calls.append(ref)
        try:
            return self.bundles[ref]
        except KeyError as exc:
            raise EmptyBundleError(f"Invalid gist response returned for '{ref}'") from exc

    def fetch_registry(self, registry_id: str) -> str:
        return self.registry


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("MIX_SOURCE", "GITHUB_TOKEN", "ADD_IN_REGISTRY_ID", "ADD_IN_GITHUB_TOKEN"):
        monkeypatch.delenv(key, raising=False)


def make_settings(**overrides: object) -> AppSettings:
    return AppSettings(_env_file=None, **overrides)


@pytest.fixture()
def resolver(tmp_path: Path) -> DestinationResolver:
    return DestinationResolver(cwd=tmp_path, windows=False, home=tmp_path / "home")
