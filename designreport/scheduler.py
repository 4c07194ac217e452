"""Concurrent fan-out of per-file extraction over a discovered source."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .adapters.base import ExtractionAdapter, ExtractionError
from .logging import get_logger, log_exception
from .models import FileAnalysis, FileLocator
from .sources.base import Discovery, FileSource

ProgressCallback = Callable[[int, int, FileLocator, Optional[BaseException]], None]


@dataclass
class FailedExtraction:
    """A file whose extraction raised instead of producing an analysis."""

    locator: FileLocator
    error: BaseException


@dataclass
class CollectedRun:
    """Everything one fan-out produced, in discovery order."""

    discovery: Discovery
    analyses: List[FileAnalysis] = field(default_factory=list)
    failures: List[FailedExtraction] = field(default_factory=list)


class FanOutScheduler:
    """Runs one extraction per discovered file and waits for all of them.

    Extractions are blocking calls dispatched to the loop's default executor,
    so many of them can be outstanding at once. A failing extraction is
    recorded and never cancels its siblings. Results are returned in
    discovery order whatever order the extractions complete in.
    """

    def __init__(
        self,
        *,
        max_concurrency: int | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be a positive integer")
        self.max_concurrency = max_concurrency
        self.progress = progress
        self.logger = get_logger("scheduler")

    def run(self, source: FileSource) -> CollectedRun:
        """Synchronous wrapper around :meth:`collect`."""
        return asyncio.run(self.collect(source))

    async def collect(self, source: FileSource) -> CollectedRun:
        discovery = await source.discover()
        self.logger.info(
            "Found %d files in %d projects", len(discovery.files), len(discovery.projects)
        )
        adapter = source.adapter()
        total = len(discovery.files)
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        completed = 0

        async def _extract(locator: FileLocator) -> FileAnalysis:
            nonlocal completed
            error: BaseException | None = None
            try:
                if semaphore is None:
                    return await self._dispatch(adapter, locator)
                async with semaphore:
                    return await self._dispatch(adapter, locator)
            except Exception as exc:
                error = exc
                raise
            finally:
                completed += 1
                self._report_progress(completed, total, locator, error)

        results = await asyncio.gather(
            *(_extract(locator) for locator in discovery.files),
            return_exceptions=True,
        )

        collected = CollectedRun(discovery=discovery)
        for locator, result in zip(discovery.files, results):
            if isinstance(result, BaseException):
                collected.failures.append(FailedExtraction(locator=locator, error=result))
            else:
                collected.analyses.append(result)
        if collected.failures:
            self.logger.warning(
                "%d of %d files could not be analysed and were left out of the report",
                len(collected.failures),
                total,
            )
        return collected

    @staticmethod
    async def _dispatch(adapter: ExtractionAdapter, locator: FileLocator) -> FileAnalysis:
        loop = asyncio.get_running_loop()
        analysis = await loop.run_in_executor(None, adapter.extract, locator)
        if not isinstance(analysis, FileAnalysis):
            raise ExtractionError(
                f"{adapter.__class__.__name__} returned {type(analysis).__name__}, expected FileAnalysis"
            )
        return analysis

    def _report_progress(
        self,
        completed: int,
        total: int,
        locator: FileLocator,
        error: BaseException | None,
    ) -> None:
        if error is None:
            self.logger.info("[%d/%d] %s", completed, total, locator.label)
        else:
            log_exception(
                self.logger, f"[{completed}/{total}] {locator.label} failed", error
            )
        if self.progress is not None:
            self.progress(completed, total, locator, error)


__all__ = ["CollectedRun", "FailedExtraction", "FanOutScheduler", "ProgressCallback"]
