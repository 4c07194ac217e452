"""Persistent stores for report snapshots."""

from .snapshots import SnapshotError, SnapshotStore, SnapshotWriter, serialise_report

__all__ = ["SnapshotError", "SnapshotStore", "SnapshotWriter", "serialise_report"]
