"""HTTP service mode for browsing stored report snapshots."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
