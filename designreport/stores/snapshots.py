"""Persistence of finished reports as timestamped JSON snapshots."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import Report

_SUFFIX = ".json"


class SnapshotError(RuntimeError):
    """Raised when a report snapshot cannot be written or read."""


def serialise_report(report: Report) -> str:
    """Return the stable JSON text persisted for ``report``."""
    return json.dumps(report.to_dict(), indent=4, sort_keys=True, ensure_ascii=False) + "\n"


class SnapshotWriter:
    """Writes each report once, as ``<timestamp>.json`` under ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, report: Report) -> Path:
        return self.directory / f"{report.timestamp}{_SUFFIX}"

    def write(self, report: Report) -> Path:
        """Persist ``report`` atomically and return the artifact path.

        Raises :class:`SnapshotError` when a snapshot with the same timestamp
        already exists.
        """
        if not isinstance(report, Report):
            raise SnapshotError(f"Expected a finished Report, got {type(report).__name__}")
        target = self.path_for(report)
        try:
            text = serialise_report(report)
        except (TypeError, ValueError) as exc:
            raise SnapshotError(f"Report {report.timestamp} is not serialisable: {exc}") from exc

        tmp_name: Optional[str] = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            handle, tmp_name = tempfile.mkstemp(
                prefix=f".{report.timestamp}.", suffix=".tmp", dir=self.directory
            )
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                stream.write(text)
            # link() fails instead of replacing, so a snapshot is never rewritten.
            os.link(tmp_name, target)
        except FileExistsError as exc:
            raise SnapshotError(
                f"Report {target.name} already exists; snapshots are never overwritten"
            ) from exc
        except OSError as exc:
            raise SnapshotError(f"Unable to write report to {target}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        return target


class SnapshotStore:
    """Read access to the snapshots persisted in ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def timestamps(self) -> List[int]:
        """Return the stored snapshot timestamps, newest first."""
        if not self.directory.is_dir():
            return []
        found: List[int] = []
        for path in self.directory.iterdir():
            if path.suffix != _SUFFIX or not path.stem.isdigit():
                continue
            found.append(int(path.stem))
        return sorted(found, reverse=True)

    def latest(self) -> Optional[int]:
        stamps = self.timestamps()
        return stamps[0] if stamps else None

    def load(self, timestamp: int) -> Dict[str, Any]:
        path = self.directory / f"{timestamp}{_SUFFIX}"
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise
        except (OSError, json.JSONDecodeError) as exc:
            raise SnapshotError(f"Unable to read snapshot {path.name}: {exc}") from exc
        if not isinstance(payload, dict):
            raise SnapshotError(f"Snapshot {path.name} does not contain a report object")
        return payload


__all__ = ["SnapshotError", "SnapshotStore", "SnapshotWriter", "serialise_report"]
