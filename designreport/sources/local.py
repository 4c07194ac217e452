"""Local directory tree of downloaded design files."""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from typing import List, Tuple

from .base import Discovery, DiscoveryError, FileSource
from ..adapters.base import ExtractionAdapter
from ..adapters.sketch import SketchAdapter
from ..logging import get_logger
from ..models import FileLocator

DEFAULT_EXTENSION = ".sketch"

_ANNOTATION_PATTERN = re.compile(r"\s*\(.*\)\s*")


def tidy_file_name(filename: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Strip parenthesized annotations and the extension from ``filename``.

    ``"Checkout (WIP).sketch"`` becomes ``"Checkout"``.
    """
    name = filename
    if extension and name.lower().endswith(extension.lower()):
        name = name[: -len(extension)]
    return _ANNOTATION_PATTERN.sub("", name).strip()


def _normalise_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = f".{extension}"
    return extension


class LocalTreeSource(FileSource):
    """Reads ``root/<project>/<file><extension>`` layouts.

    First-level subdirectories are projects. Only files directly inside a
    project directory are considered.
    """

    name = "local"

    def __init__(
        self,
        root: str | Path,
        *,
        extension: str = DEFAULT_EXTENSION,
        adapter: ExtractionAdapter | None = None,
    ) -> None:
        self.root = Path(root).expanduser()
        self.extension = _normalise_extension(extension)
        self._adapter = adapter or SketchAdapter()
        self.logger = get_logger("sources.local")

    def adapter(self) -> ExtractionAdapter:
        return self._adapter

    async def discover(self) -> Discovery:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.scan)

    def scan(self) -> Discovery:
        """Synchronously enumerate projects and design files under the root."""
        root = self.root.resolve()
        if not root.exists():
            raise DiscoveryError(f"Design file directory not found: {self.root}")
        if not root.is_dir():
            raise DiscoveryError(f"Design file path is not a directory: {self.root}")

        try:
            project_dirs = sorted(
                entry for entry in root.iterdir() if entry.is_dir() and not entry.name.startswith(".")
            )
        except OSError as exc:
            raise DiscoveryError(f"Unable to list {root}: {exc}") from exc

        discovery = Discovery()
        for project_dir in project_dirs:
            project_name = project_dir.name
            try:
                files = self._project_files(project_dir)
            except OSError as exc:
                self.logger.warning("Skipping project '%s': %s", project_name, exc)
                discovery.skipped_projects.append(project_name)
                continue
            discovery.projects.append(project_name)
            for filename, path in files:
                discovery.files.append(
                    FileLocator(
                        project_name=project_name,
                        file_name=tidy_file_name(filename, self.extension),
                        location=str(path),
                    )
                )
        self.logger.debug(
            "Discovered %d files in %d projects under %s",
            len(discovery.files),
            len(discovery.projects),
            root,
        )
        return discovery

    def _project_files(self, project_dir: Path) -> List[Tuple[str, Path]]:
        matches: List[Tuple[str, Path]] = []
        with os.scandir(project_dir) as entries:
            for entry in entries:
                if entry.name.startswith("."):
                    continue
                if os.path.splitext(entry.name)[1].lower() != self.extension:
                    continue
                if not entry.is_file():
                    continue
                matches.append((entry.name, Path(entry.path)))
        return sorted(matches)


__all__ = ["DEFAULT_EXTENSION", "LocalTreeSource", "tidy_file_name"]
