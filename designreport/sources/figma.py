"""Hosted Figma teams as a design file source."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Sequence, Tuple

from .base import Discovery, DiscoveryError, FileSource
from ..adapters.base import ExtractionAdapter
from ..adapters.figma import FigmaAdapter, FigmaAPIError, FigmaClient
from ..logging import get_logger
from ..models import FileLocator


class FigmaTeamSource(FileSource):
    """Enumerates projects of the configured teams, then files per project."""

    name = "figma"

    def __init__(self, client: FigmaClient, teams: Sequence[str]) -> None:
        self.client = client
        self.teams = [team.strip() for team in teams if team and team.strip()]
        self._adapter = FigmaAdapter(client)
        self.logger = get_logger("sources.figma")

    def adapter(self) -> ExtractionAdapter:
        return self._adapter

    async def discover(self) -> Discovery:
        if not self.teams:
            raise DiscoveryError("No Figma teams configured. Set FIGMA_TEAMS or figma.teams.")

        loop = asyncio.get_running_loop()
        projects: List[Dict[str, Any]] = []
        failed_teams = 0
        for team in self.teams:
            try:
                team_projects = await loop.run_in_executor(None, self.client.get_team_projects, team)
            except FigmaAPIError as exc:
                failed_teams += 1
                self.logger.warning("Unable to list projects for team %s: %s", team, exc)
                continue
            projects.extend(project for project in team_projects if project.get("id") is not None)
        if failed_teams == len(self.teams):
            raise DiscoveryError("Unable to list projects for any configured Figma team")

        listings = await asyncio.gather(
            *(self._list_files(loop, project) for project in projects),
            return_exceptions=True,
        )

        discovery = Discovery()
        for project, listing in zip(projects, listings):
            project_name = str(project.get("name") or project["id"])
            if isinstance(listing, BaseException):
                self.logger.warning("Skipping project '%s': %s", project_name, listing)
                discovery.skipped_projects.append(project_name)
                continue
            discovery.projects.append(project_name)
            for file_key, file_name in listing:
                discovery.files.append(
                    FileLocator(project_name=project_name, file_name=file_name, location=file_key)
                )
        self.logger.debug(
            "Discovered %d files in %d Figma projects", len(discovery.files), len(discovery.projects)
        )
        return discovery

    async def _list_files(
        self, loop: asyncio.AbstractEventLoop, project: Dict[str, Any]
    ) -> List[Tuple[str, str]]:
        files = await loop.run_in_executor(None, self.client.get_project_files, str(project["id"]))
        listing: List[Tuple[str, str]] = []
        for item in files:
            key = item.get("key")
            if not isinstance(key, str) or not key:
                continue
            name = str(item.get("name") or key).strip()
            listing.append((key, name))
        return listing


__all__ = ["FigmaTeamSource"]
