from __future__ import annotations

from pathlib import Path

import pytest

from core.destinations import (
    HOST_FILES,
    DestinationResolver,
    find_directories,
    find_files,
    split_markers,
)
from core.domain.errors import (
    InvalidLocationError,
    NotFoundError,
    PlatformMismatchError,
    TraversalError,
)
from core.templating import Substitution


def _touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.parametrize("hint", [None, "", "."])
def test_empty_hint_is_cwd(resolver: DestinationResolver, tmp_path: Path, hint: str | None) -> None:
    assert resolver.resolve_base_path(hint) == tmp_path


@pytest.mark.parametrize("hint", ["..", "../x", "a/../b", "$HOME/..", "/tmp/../etc", "x..y/", "C:\\..\\x"])
def test_any_parent_segment_is_rejected(resolver: DestinationResolver, hint: str) -> None:
    with pytest.raises(TraversalError):
        resolver.resolve_base_path(hint, " required by test")


def test_absolute_paths_follow_platform_style(tmp_path: Path) -> None:
    posix = DestinationResolver(cwd=tmp_path, windows=False)
    windows = DestinationResolver(cwd=tmp_path, windows=True)

    assert posix.resolve_base_path("/opt/app") == Path("/opt/app")
    with pytest.raises(PlatformMismatchError):
        windows.resolve_base_path("/opt/app")
    with pytest.raises(PlatformMismatchError):
        posix.resolve_base_path("C:\\app")
    assert windows.resolve_base_path("C:\\app") == Path("C:\\app")


def test_home_sentinel(resolver: DestinationResolver, tmp_path: Path) -> None:
    assert resolver.resolve_base_path("$HOME") == tmp_path / "home"
    assert resolver.resolve_base_path("$HOME/.config/tool") == tmp_path / "home" / ".config" / "tool"


def test_unknown_sentinel(resolver: DestinationResolver) -> None:
    with pytest.raises(InvalidLocationError):
        resolver.resolve_base_path("$NOPE")


def test_host_sentinel_finds_marker_in_priority_order(resolver: DestinationResolver, tmp_path: Path) -> None:
    _touch(tmp_path / "a" / "Program.cs")
    _touch(tmp_path / "b" / "c" / "appsettings.json")

    assert resolver.resolve_base_path("$HOST") == tmp_path / "b" / "c"


def test_host_sentinel_matches_wildcard_markers(resolver: DestinationResolver, tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "Acme" / "Acme.csproj")

    assert resolver.resolve_base_path("$HOST") == tmp_path / "src" / "Acme"


def test_host_sentinel_skips_dot_and_build_dirs(resolver: DestinationResolver, tmp_path: Path) -> None:
    _touch(tmp_path / ".git" / "appsettings.json")
    _touch(tmp_path / "node_modules" / "appsettings.json")
    _touch(tmp_path / "bin" / "Debug" / "appsettings.json")

    with pytest.raises(NotFoundError) as excinfo:
        resolver.resolve_base_path("$HOST", " required by 'redis' url")

    message = str(excinfo.value)
    assert all(marker in message for marker in HOST_FILES)
    assert message.endswith("required by 'redis' url")


def test_trailing_slash_hint_finds_directory(resolver: DestinationResolver, tmp_path: Path) -> None:
    (tmp_path / "src" / "wwwroot").mkdir(parents=True)

    assert resolver.resolve_base_path("wwwroot/") == tmp_path / "src" / "wwwroot"
    with pytest.raises(NotFoundError):
        resolver.resolve_base_path("missing/")


def test_file_hint_returns_containing_directory(resolver: DestinationResolver, tmp_path: Path) -> None:
    _touch(tmp_path / "deep" / "er" / "package.json")

    assert resolver.resolve_base_path("package.json") == tmp_path / "deep" / "er"
    with pytest.raises(NotFoundError):
        resolver.resolve_base_path("nothing.txt")


def test_tree_search_is_depth_bounded(tmp_path: Path) -> None:
    deep = tmp_path
    for i in range(12):
        deep = deep / f"d{i}"
    _touch(deep / "target.txt")
    _touch(tmp_path / "d0" / "target.txt")

    assert find_files(tmp_path, "target.txt") == [tmp_path / "d0" / "target.txt"]


def test_find_directories_reports_skip_dirs_without_descending(tmp_path: Path) -> None:
    (tmp_path / "bin" / "bin").mkdir(parents=True)
    (tmp_path / "x" / "bin").mkdir(parents=True)

    assert find_directories(tmp_path, "bin") == [tmp_path / "bin", tmp_path / "x" / "bin"]


def test_resolve_file_path_substitutes_and_strips_optional_marker(
    resolver: DestinationResolver, tmp_path: Path
) -> None:
    sub = Substitution("Acme")

    path = resolver.resolve_file_path("MyApp\\Configure.MyApp.cs?", tmp_path, sub, ".")

    assert path == tmp_path / "Acme" / "Configure.Acme.cs"


def test_resolve_file_path_rejects_escaping_names(resolver: DestinationResolver, tmp_path: Path) -> None:
    sub = Substitution("Acme")

    with pytest.raises(TraversalError):
        resolver.resolve_file_path("..\\evil.txt", tmp_path, sub, ".")
    with pytest.raises(TraversalError):
        resolver.resolve_file_path("/etc/passwd", tmp_path, sub, ".")


def test_host_bundle_falls_back_to_project_qualified_folder(
    resolver: DestinationResolver, tmp_path: Path
) -> None:
    _touch(tmp_path / "Acme" / "appsettings.json")
    (tmp_path / "Acme.ServiceModel").mkdir()
    sub = Substitution("Acme")
    base = resolver.resolve_base_path("$HOST")

    path = resolver.resolve_file_path("ServiceModel\\Hello.cs", base, sub, "$HOST")

    assert path == tmp_path / "Acme.ServiceModel" / "Hello.cs"


def test_host_bundle_keeps_naive_path_without_qualified_folder(
    resolver: DestinationResolver, tmp_path: Path
) -> None:
    _touch(tmp_path / "Acme" / "appsettings.json")
    sub = Substitution("Acme")
    base = resolver.resolve_base_path("$HOST")

    path = resolver.resolve_file_path("ServiceModel\\Hello.cs", base, sub, "$HOST")

    assert path == tmp_path / "Acme" / "ServiceModel" / "Hello.cs"


def test_split_markers(tmp_path: Path) -> None:
    assert split_markers(tmp_path / "logo.png|base64") == (tmp_path / "logo.png", True)
    assert split_markers(tmp_path / "logo.png") == (tmp_path / "logo.png", False)
