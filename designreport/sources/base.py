"""Base classes for design file sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from ..adapters.base import ExtractionAdapter
from ..models import FileLocator


class DiscoveryError(RuntimeError):
    """Raised when a source cannot be enumerated at all."""


@dataclass
class Discovery:
    """Projects and files found by one enumeration of a source."""

    projects: List[str] = field(default_factory=list)
    files: List[FileLocator] = field(default_factory=list)
    skipped_projects: List[str] = field(default_factory=list)


class FileSource(ABC):
    """Contract for sources that enumerate (project, file) pairs."""

    name: str = "source"

    @abstractmethod
    async def discover(self) -> Discovery:
        """Enumerate every project and design file available right now.

        A project whose files cannot be listed is recorded in
        ``skipped_projects`` instead of failing the whole enumeration.
        """

    @abstractmethod
    def adapter(self) -> ExtractionAdapter:
        """Return the extraction adapter matching this source's file format."""
