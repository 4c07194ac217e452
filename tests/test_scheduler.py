"""Tests for designreport.scheduler."""

from __future__ import annotations

import threading
import time
from typing import Dict, List

import pytest

from designreport.adapters.base import ExtractionAdapter, ExtractionError
from designreport.models import FileAnalysis, FileLocator
from designreport.scheduler import FanOutScheduler
from designreport.sources.base import Discovery, FileSource


class _StaticSource(FileSource):
    name = "static"

    def __init__(self, locators: List[FileLocator], adapter: ExtractionAdapter) -> None:
        self.locators = locators
        self._adapter = adapter

    async def discover(self) -> Discovery:
        projects = sorted({locator.project_name for locator in self.locators})
        return Discovery(projects=projects, files=list(self.locators))

    def adapter(self) -> ExtractionAdapter:
        return self._adapter


class _RecordingAdapter(ExtractionAdapter):
    def __init__(self, *, fail: set[str] | None = None, delays: Dict[str, float] | None = None) -> None:
        self.fail = fail or set()
        self.delays = delays or {}
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def extract(self, locator: FileLocator) -> FileAnalysis:
        with self._lock:
            self.calls.append(locator.file_name)
        time.sleep(self.delays.get(locator.file_name, 0))
        if locator.file_name in self.fail:
            raise ExtractionError(f"{locator.file_name} is corrupt")
        return FileAnalysis(project_name=locator.project_name, file_name=locator.file_name)


def _locators(*names: str) -> List[FileLocator]:
    return [FileLocator(project_name="App", file_name=name, location=f"/tmp/{name}") for name in names]


def test_results_follow_discovery_order_not_completion_order() -> None:
    adapter = _RecordingAdapter(delays={"A": 0.2, "B": 0.1, "C": 0.0})
    collected = FanOutScheduler().run(_StaticSource(_locators("A", "B", "C"), adapter))

    assert [analysis.file_name for analysis in collected.analyses] == ["A", "B", "C"]
    assert sorted(adapter.calls) == ["A", "B", "C"]
    assert collected.failures == []


def test_failure_is_isolated_from_siblings() -> None:
    adapter = _RecordingAdapter(fail={"B"})
    collected = FanOutScheduler().run(_StaticSource(_locators("A", "B", "C"), adapter))

    assert [analysis.file_name for analysis in collected.analyses] == ["A", "C"]
    assert [failure.locator.file_name for failure in collected.failures] == ["B"]
    assert isinstance(collected.failures[0].error, ExtractionError)
    assert sorted(adapter.calls) == ["A", "B", "C"]


def test_unexpected_exceptions_are_also_contained() -> None:
    class _Exploding(ExtractionAdapter):
        def extract(self, locator: FileLocator) -> FileAnalysis:
            raise ValueError("boom")

    collected = FanOutScheduler().run(_StaticSource(_locators("A"), _Exploding()))

    assert collected.analyses == []
    assert isinstance(collected.failures[0].error, ValueError)


def test_adapter_returning_wrong_type_is_a_failure() -> None:
    class _Wrong(ExtractionAdapter):
        def extract(self, locator: FileLocator) -> FileAnalysis:
            return {"counts": {}}  # type: ignore[return-value]

    collected = FanOutScheduler().run(_StaticSource(_locators("A"), _Wrong()))

    assert isinstance(collected.failures[0].error, ExtractionError)


def test_extractions_run_concurrently() -> None:
    barrier = threading.Barrier(3, timeout=5)

    class _Rendezvous(ExtractionAdapter):
        def extract(self, locator: FileLocator) -> FileAnalysis:
            # Only passes if all three extractions are in flight together.
            barrier.wait()
            return FileAnalysis(project_name=locator.project_name, file_name=locator.file_name)

    collected = FanOutScheduler().run(_StaticSource(_locators("A", "B", "C"), _Rendezvous()))

    assert len(collected.analyses) == 3
    assert collected.failures == []


def test_max_concurrency_bounds_in_flight_extractions() -> None:
    in_flight = 0
    peak = 0
    lock = threading.Lock()

    class _Counting(ExtractionAdapter):
        def extract(self, locator: FileLocator) -> FileAnalysis:
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            time.sleep(0.05)
            with lock:
                in_flight -= 1
            return FileAnalysis(project_name=locator.project_name, file_name=locator.file_name)

    scheduler = FanOutScheduler(max_concurrency=2)
    collected = scheduler.run(_StaticSource(_locators("A", "B", "C", "D", "E"), _Counting()))

    assert len(collected.analyses) == 5
    assert peak <= 2


def test_progress_reports_every_file_once() -> None:
    events: List[tuple[int, int, str, bool]] = []

    def _progress(done, total, locator, error) -> None:  # type: ignore[no-untyped-def]
        events.append((done, total, locator.file_name, error is None))

    adapter = _RecordingAdapter(fail={"B"})
    FanOutScheduler(progress=_progress).run(_StaticSource(_locators("A", "B", "C"), adapter))

    assert sorted(done for done, _, _, _ in events) == [1, 2, 3]
    assert {total for _, total, _, _ in events} == {3}
    assert {(name, ok) for _, _, name, ok in events} == {("A", True), ("B", False), ("C", True)}


def test_empty_source_completes() -> None:
    collected = FanOutScheduler().run(_StaticSource([], _RecordingAdapter()))

    assert collected.analyses == []
    assert collected.failures == []


def test_rejects_non_positive_concurrency() -> None:
    with pytest.raises(ValueError):
        FanOutScheduler(max_concurrency=0)
