"""Base classes for extraction adapters."""

from abc import ABC, abstractmethod

from ..models import FileAnalysis, FileLocator


class ExtractionError(RuntimeError):
    """Raised when a design file cannot be analysed."""


class ExtractionAdapter(ABC):
    """Contract for adapters that turn one design file into a FileAnalysis."""

    @abstractmethod
    def extract(self, locator: FileLocator) -> FileAnalysis:
        """Return the file's shareables and reference counts.

        Implementations raise :class:`ExtractionError` on failure and must not
        touch any state shared with other extractions.
        """
