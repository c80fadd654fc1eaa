from __future__ import annotations

from pathlib import Path

import pytest
from conftest import INIT_ID, REDIS_ID, FakeFetcher, make_settings

from core.destinations import DestinationResolver
from core.domain.errors import UserCancelledError
from core.services.apply_pipeline import apply_batch
from core.services.batch import PipelineHooks
from core.services.delete_pipeline import delete_batch, remove_empty_folders

BUNDLE = {
    "_init": "npm install",
    "MyApp\\Services\\MyServices.cs": "class MyServices {}",
    "MyApp\\Configure.cs": "// MyApp",
    "README.md?": "# My App",
}


@pytest.fixture()
def applied(resolver: DestinationResolver, tmp_path: Path) -> FakeFetcher:
    fetcher = FakeFetcher({INIT_ID: dict(BUNDLE, _init="# nothing to run")})
    apply_batch(["init"], "Acme", settings=make_settings(silent=True), fetcher=fetcher, resolver=resolver)
    (tmp_path / "keep.txt").write_text("user file", encoding="utf-8")
    return fetcher


def test_delete_removes_files_and_emptied_folders(
    applied: FakeFetcher, resolver: DestinationResolver, tmp_path: Path
) -> None:
    prompts: list[str] = []
    notes: list[str] = []
    hooks = PipelineHooks(confirm=lambda m: prompts.append(m) or True, notify=notes.append)

    ok = delete_batch(["init"], "Acme", settings=make_settings(), fetcher=applied, hooks=hooks, resolver=resolver)

    assert ok is True
    assert not (tmp_path / "Acme").exists()
    assert not (tmp_path / "README.md").exists()
    assert (tmp_path / "keep.txt").exists()
    assert tmp_path.exists()
    assert len(prompts) == 1
    assert "Delete 3 files from 'init' " in prompts[0]
    assert notes[-1] == "Done."


def test_nothing_to_delete_reports_and_returns_false(resolver: DestinationResolver, tmp_path: Path) -> None:
    fetcher = FakeFetcher({INIT_ID: BUNDLE})
    notes: list[str] = []
    hooks = PipelineHooks(confirm=lambda m: pytest.fail("must not prompt"), notify=notes.append)

    ok = delete_batch(["init"], "Acme", settings=make_settings(), fetcher=fetcher, hooks=hooks, resolver=resolver)

    assert ok is False
    assert notes == ["Did not find any existing files from 'init' to delete"]
    assert list(tmp_path.iterdir()) == []


def test_declining_keeps_every_file(applied: FakeFetcher, resolver: DestinationResolver, tmp_path: Path) -> None:
    hooks = PipelineHooks(confirm=lambda m: False)

    with pytest.raises(UserCancelledError):
        delete_batch(["init"], "Acme", settings=make_settings(), fetcher=applied, hooks=hooks, resolver=resolver)

    assert (tmp_path / "Acme" / "Services" / "MyServices.cs").exists()
    assert (tmp_path / "README.md").exists()


def test_forced_delete_does_not_prompt(applied: FakeFetcher, resolver: DestinationResolver, tmp_path: Path) -> None:
    hooks = PipelineHooks(confirm=lambda m: pytest.fail("must not prompt"))

    ok = delete_batch(
        ["init"], "Acme", settings=make_settings(force_approval=True), fetcher=applied, hooks=hooks,
        resolver=resolver,
    )

    assert ok is True
    assert not (tmp_path / "Acme").exists()


def test_remove_empty_folders_skips_non_empty(tmp_path: Path) -> None:
    empty = tmp_path / "a" / "b"
    empty.mkdir(parents=True)
    busy = tmp_path / "c"
    busy.mkdir()
    (busy / "x.txt").write_text("x", encoding="utf-8")

    removed = remove_empty_folders({tmp_path / "a", empty, busy})

    assert removed == [empty, tmp_path / "a"]
    assert busy.exists()


def test_delete_prunes_folders_of_project_qualified_host_files(
    resolver: DestinationResolver, tmp_path: Path
) -> None:
    (tmp_path / "Acme").mkdir()
    (tmp_path / "Acme" / "appsettings.json").write_text("{}", encoding="utf-8")
    (tmp_path / "Acme.ServiceModel" / "Types").mkdir(parents=True)
    fetcher = FakeFetcher({REDIS_ID: {"ServiceModel\\Types\\Hello.cs": "class Hello {}"}})
    settings = make_settings(silent=True)

    apply_batch(["redis"], "Acme", settings=settings, fetcher=fetcher, resolver=resolver)
    assert (tmp_path / "Acme.ServiceModel" / "Types" / "Hello.cs").exists()

    assert delete_batch(["redis"], "Acme", settings=settings, fetcher=fetcher, resolver=resolver) is True

    assert not (tmp_path / "Acme.ServiceModel").exists()
    assert (tmp_path / "Acme" / "appsettings.json").exists()
    assert tmp_path.exists()
