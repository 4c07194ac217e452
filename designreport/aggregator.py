"""Cross-file aggregation of extracted design file analyses into one report."""

from __future__ import annotations

import copy
from typing import Dict, List, Sequence

from .logging import get_logger
from .models import FileAnalysis, IntegrityWarning, ResourceKind, Report
from .registry import ResourceRegistry

Registries = Dict[ResourceKind, ResourceRegistry]


class Aggregator:
    """Folds collected :class:`FileAnalysis` records into a :class:`Report`.

    Aggregation runs in two passes over the fully collected list. The registry
    union pass must complete before counts are distributed, because external
    references are resolved against the finished global registries.
    """

    def __init__(self) -> None:
        self.logger = get_logger("aggregator")

    def aggregate(
        self,
        analyses: Sequence[FileAnalysis],
        *,
        timestamp: int,
        project_names: Sequence[str] = (),
    ) -> Report:
        """Build the report for ``analyses``; the inputs are left untouched.

        ``project_names`` seeds empty entries for discovered projects that
        contributed no successfully extracted file.
        """
        analyses = self.deduplicate(analyses)
        report = Report(timestamp=timestamp)
        report.projects = {name: {} for name in project_names}
        for project, files in self.collect_projects(analyses).items():
            report.projects.setdefault(project, {}).update(files)

        registries, union_warnings = self.union_registries(analyses)
        count_warnings = self.distribute_counts(analyses, registries)
        report.warnings.extend(union_warnings)
        report.warnings.extend(count_warnings)

        for kind, registry in registries.items():
            report.registries[kind] = registry.to_dict()

        for warning in union_warnings + count_warnings:
            self.logger.warning("Integrity warning: %s", warning.describe())
        self.logger.debug(
            "Aggregated %d files: %s",
            len(analyses),
            ", ".join(f"{len(registries[kind])} {kind.shareables_key}" for kind in ResourceKind),
        )
        return report

    def deduplicate(self, analyses: Sequence[FileAnalysis]) -> List[FileAnalysis]:
        """Keep one analysis per project and file name, the later one winning.

        Names are tidied before they reach the aggregator, so ``Checkout (v1)``
        and ``Checkout (v2)`` collide. The dropped file contributes to neither
        the per-file view nor the global totals.
        """
        latest: Dict[tuple[str, str], int] = {}
        for position, analysis in enumerate(analyses):
            key = (analysis.project_name, analysis.file_name)
            if key in latest:
                self.logger.warning(
                    "Two files in project '%s' share the name '%s'; keeping the later one",
                    analysis.project_name,
                    analysis.file_name,
                )
            latest[key] = position
        kept = set(latest.values())
        return [analysis for position, analysis in enumerate(analyses) if position in kept]

    def collect_projects(
        self, analyses: Sequence[FileAnalysis]
    ) -> Dict[str, Dict[str, Dict[str, object]]]:
        """Return the per-file detail view: project -> file -> local counts."""
        projects: Dict[str, Dict[str, Dict[str, object]]] = {}
        for analysis in analyses:
            files = projects.setdefault(analysis.project_name, {})
            files[analysis.file_name] = copy.deepcopy(analysis.counts)
        return projects

    def union_registries(
        self, analyses: Sequence[FileAnalysis]
    ) -> tuple[Registries, List[IntegrityWarning]]:
        """Union every file's shareables into one registry per resource kind."""
        registries: Registries = {kind: ResourceRegistry(kind) for kind in ResourceKind}
        warnings: List[IntegrityWarning] = []
        for analysis in analyses:
            for kind in ResourceKind:
                registry = registries[kind]
                for identifier, definition in analysis.definitions(kind).items():
                    warning = registry.insert(identifier, definition, source=analysis.label)
                    if warning is not None:
                        warnings.append(warning)
        return registries, warnings

    def distribute_counts(
        self, analyses: Sequence[FileAnalysis], registries: Registries
    ) -> List[IntegrityWarning]:
        """Add every file's external reference counts onto the global registries."""
        warnings: List[IntegrityWarning] = []
        for analysis in analyses:
            for kind in ResourceKind:
                registry = registries[kind]
                for identifier, amount in analysis.external_counts(kind).items():
                    if isinstance(amount, bool) or not isinstance(amount, int):
                        warnings.append(
                            IntegrityWarning(
                                code="invalid-count",
                                kind=kind,
                                identifier=identifier,
                                source=analysis.label,
                                detail=f"count {amount!r} is not an integer",
                            )
                        )
                        continue
                    if not registry.add_count(identifier, amount):
                        warnings.append(
                            IntegrityWarning(
                                code="dangling-reference",
                                kind=kind,
                                identifier=identifier,
                                source=analysis.label,
                                detail="no file in this run defines it",
                            )
                        )
        return warnings


__all__ = ["Aggregator", "Registries"]
