"""Core data models shared across designreport components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ResourceKind(Enum):
    """A family of shareable design resources.

    Each kind knows the keys it lives under in a file's ``shareables``, in a
    file's ``counts`` and in the persisted report, so the merge logic can be
    written once and run for every kind.
    """

    SYMBOLS = ("symbols", "externalSymbols", "allSymbols")
    TEXT_STYLES = ("textStyles", "externalTextStyles", "allTextStyles")
    LAYER_STYLES = ("layerStyles", "externalLayerStyles", "allLayerStyles")

    def __init__(self, shareables_key: str, counts_key: str, report_key: str) -> None:
        self.shareables_key = shareables_key
        self.counts_key = counts_key
        self.report_key = report_key

    @property
    def local_counts_key(self) -> str:
        """Key of the per-file count of references to resources defined locally."""
        return "local" + self.shareables_key[0].upper() + self.shareables_key[1:]


Definition = Dict[str, Any]


def empty_shareables() -> Dict[str, Dict[str, Definition]]:
    return {kind.shareables_key: {} for kind in ResourceKind}


def empty_counts() -> Dict[str, Dict[str, int]]:
    return {kind.counts_key: {} for kind in ResourceKind}


@dataclass(frozen=True)
class FileLocator:
    """Identifies one design file and where it came from."""

    project_name: str
    file_name: str
    location: str

    @property
    def label(self) -> str:
        return f"{self.project_name} > {self.file_name}"


@dataclass
class FileAnalysis:
    """Shareable resources and reference counts extracted from one design file."""

    project_name: str
    file_name: str
    shareables: Dict[str, Dict[str, Definition]] = field(default_factory=empty_shareables)
    counts: Dict[str, Dict[str, int]] = field(default_factory=empty_counts)

    @property
    def label(self) -> str:
        return f"{self.project_name} > {self.file_name}"

    def definitions(self, kind: ResourceKind) -> Dict[str, Definition]:
        return self.shareables.get(kind.shareables_key) or {}

    def add_definition(self, kind: ResourceKind, identifier: str, definition: Definition) -> None:
        self.shareables.setdefault(kind.shareables_key, {})[identifier] = definition

    def external_counts(self, kind: ResourceKind) -> Dict[str, int]:
        return self.counts.get(kind.counts_key) or {}


@dataclass(frozen=True)
class IntegrityWarning:
    """A recoverable data-integrity condition found while aggregating."""

    code: str
    kind: ResourceKind
    identifier: str
    source: str
    detail: str = ""

    def describe(self) -> str:
        message = f"{self.code} for {self.kind.shareables_key} '{self.identifier}' from {self.source}"
        if self.detail:
            message += f" ({self.detail})"
        return message


@dataclass
class Report:
    """Cross-file usage report for one run."""

    timestamp: int
    projects: Dict[str, Dict[str, Dict[str, Any]]] = field(default_factory=dict)
    registries: Dict[ResourceKind, Dict[str, Definition]] = field(
        default_factory=lambda: {kind: {} for kind in ResourceKind}
    )
    warnings: List[IntegrityWarning] = field(default_factory=list)

    def resources(self, kind: ResourceKind) -> Dict[str, Definition]:
        return self.registries[kind]

    def count_for(self, kind: ResourceKind, identifier: str) -> Optional[int]:
        definition = self.registries[kind].get(identifier)
        if definition is None:
            return None
        return definition.get("count")

    def to_dict(self) -> Dict[str, Any]:
        """Return the persisted shape of the report."""
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "projects": self.projects,
        }
        for kind in ResourceKind:
            payload[kind.report_key] = self.registries[kind]
        return payload
