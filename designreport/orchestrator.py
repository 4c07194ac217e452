"""Pipeline orchestration for one report run."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

from .adapters.figma import FigmaClient
from .aggregator import Aggregator
from .config import ReportConfig
from .logging import get_logger
from .models import Report
from .scheduler import FailedExtraction, FanOutScheduler
from .sources import FigmaTeamSource, FileSource, LocalTreeSource
from .stores import SnapshotWriter

FIGMA_KEYWORD = "figma"


@dataclass
class RunOutcome:
    """Result of a completed report run."""

    report: Report
    path: Path
    elapsed: float
    files_discovered: int
    failures: List[FailedExtraction]
    skipped_projects: List[str]


def build_source(selector: str, config: ReportConfig) -> FileSource:
    """Return the file source named by the CLI selector."""
    if selector.strip().lower() == FIGMA_KEYWORD:
        client = FigmaClient(
            config.figma.token or "",
            base_url=config.figma.base_url,
            request_timeout=config.figma.request_timeout,
        )
        return FigmaTeamSource(client, config.figma.teams)
    return LocalTreeSource(selector, extension=config.extension)


class Orchestrator:
    """Runs discovery, extraction, aggregation and persistence in order.

    The report is only handed to the writer after every extraction has
    settled, and only the write itself may fail the run.
    """

    def __init__(
        self,
        scheduler: FanOutScheduler | None = None,
        aggregator: Aggregator | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.scheduler = scheduler or FanOutScheduler()
        self.aggregator = aggregator or Aggregator()
        self.clock = clock
        self.logger = get_logger("orchestrator")

    def run(self, source: FileSource, reports_dir: Path) -> RunOutcome:
        started = time.monotonic()
        timestamp = int(self.clock() * 1000)
        self.logger.info("Starting %s report run %d", source.name, timestamp)

        collected = self.scheduler.run(source)
        report = self.aggregator.aggregate(
            collected.analyses,
            timestamp=timestamp,
            project_names=collected.discovery.projects,
        )

        path = SnapshotWriter(reports_dir).write(report)
        elapsed = time.monotonic() - started
        self.logger.info("Report written to %s", path)
        self.logger.info("It took %.3f seconds to finish", elapsed)
        return RunOutcome(
            report=report,
            path=path,
            elapsed=elapsed,
            files_discovered=len(collected.discovery.files),
            failures=collected.failures,
            skipped_projects=collected.discovery.skipped_projects,
        )


__all__ = ["FIGMA_KEYWORD", "Orchestrator", "RunOutcome", "build_source"]
