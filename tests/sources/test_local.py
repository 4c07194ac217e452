"""Tests for designreport.sources.local."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from designreport.adapters.sketch import SketchAdapter
from designreport.sources import DiscoveryError, LocalTreeSource, tidy_file_name


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("Checkout (WIP).sketch", "Checkout"),
        ("Checkout.sketch", "Checkout"),
        ("Icons (old) (v2).SKETCH", "Icons"),
        ("  Spaced Name .sketch", "Spaced Name"),
    ],
)
def test_tidy_file_name(filename: str, expected: str) -> None:
    assert tidy_file_name(filename) == expected


def test_discovers_projects_and_matching_files(tmp_path: Path) -> None:
    root = tmp_path / "designs"
    (root / "Core").mkdir(parents=True)
    (root / "App").mkdir()
    (root / ".cache").mkdir()
    (root / "Core" / "Library.sketch").write_bytes(b"")
    (root / "App" / "Checkout (WIP).sketch").write_bytes(b"")
    (root / "App" / "notes.txt").write_text("skip", encoding="utf-8")
    (root / "App" / "nested").mkdir()
    (root / "App" / "nested" / "Deep.sketch").write_bytes(b"")
    (root / "loose.sketch").write_bytes(b"")

    discovery = asyncio.run(LocalTreeSource(root).discover())

    assert discovery.projects == ["App", "Core"]
    assert [(f.project_name, f.file_name) for f in discovery.files] == [
        ("App", "Checkout"),
        ("Core", "Library"),
    ]
    assert discovery.files[0].location == str((root / "App" / "Checkout (WIP).sketch").resolve())


def test_extension_is_configurable(tmp_path: Path) -> None:
    root = tmp_path / "designs"
    (root / "App").mkdir(parents=True)
    (root / "App" / "Screen.fig").write_bytes(b"")
    (root / "App" / "Screen.sketch").write_bytes(b"")

    discovery = LocalTreeSource(root, extension="fig").scan()

    assert [f.file_name for f in discovery.files] == ["Screen"]
    assert discovery.files[0].location.endswith("Screen.fig")


def test_missing_root_raises_discovery_error(tmp_path: Path) -> None:
    with pytest.raises(DiscoveryError):
        LocalTreeSource(tmp_path / "missing").scan()


def test_file_root_raises_discovery_error(tmp_path: Path) -> None:
    target = tmp_path / "file.sketch"
    target.write_bytes(b"")
    with pytest.raises(DiscoveryError):
        LocalTreeSource(target).scan()


def test_unreadable_project_is_skipped(tmp_path: Path, monkeypatch) -> None:
    root = tmp_path / "designs"
    (root / "Locked").mkdir(parents=True)
    (root / "Open").mkdir()
    (root / "Open" / "Home.sketch").write_bytes(b"")

    source = LocalTreeSource(root)
    original = source._project_files

    def _project_files(project_dir: Path):  # type: ignore[no-untyped-def]
        if project_dir.name == "Locked":
            raise PermissionError("permission denied")
        return original(project_dir)

    monkeypatch.setattr(source, "_project_files", _project_files)

    discovery = source.scan()

    assert discovery.projects == ["Open"]
    assert discovery.skipped_projects == ["Locked"]
    assert [f.file_name for f in discovery.files] == ["Home"]


def test_default_adapter_reads_sketch(tmp_path: Path) -> None:
    assert isinstance(LocalTreeSource(tmp_path).adapter(), SketchAdapter)
