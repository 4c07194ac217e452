"""Figma REST API client and the matching extraction adapter."""

from __future__ import annotations

import json
from collections import Counter
from typing import Any, Dict, Iterator, List, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from .base import ExtractionAdapter, ExtractionError
from ..models import FileAnalysis, FileLocator, ResourceKind

DEFAULT_BASE_URL = "https://api.figma.com"


class FigmaAPIError(RuntimeError):
    """Raised when the Figma API cannot be reached or answers with an error."""


class FigmaClient:
    """Minimal read-only client for the endpoints the report needs."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout: Optional[float] = 60.0,
    ) -> None:
        if not token:
            raise FigmaAPIError("A Figma personal access token is required.")
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout

    def get_team_projects(self, team_id: str) -> List[Dict[str, Any]]:
        payload = self._get(f"/v1/teams/{quote(team_id, safe='')}/projects")
        return _as_list(payload.get("projects"))

    def get_project_files(self, project_id: str) -> List[Dict[str, Any]]:
        payload = self._get(f"/v1/projects/{quote(str(project_id), safe='')}/files")
        return _as_list(payload.get("files"))

    def get_file(self, file_key: str) -> Dict[str, Any]:
        return self._get(f"/v1/files/{quote(file_key, safe='')}")

    def _get(self, path: str) -> Dict[str, Any]:
        endpoint = f"{self.base_url}{path}"
        http_request = Request(
            endpoint,
            headers={"X-Figma-Token": self.token, "Accept": "application/json"},
            method="GET",
        )
        timeout = self.request_timeout or 60.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise FigmaAPIError(f"Figma API {path} failed with status {exc.code}: {message}") from exc
        except URLError as exc:
            raise FigmaAPIError(f"Figma API {path} failed: {exc.reason}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FigmaAPIError(f"Figma API {path} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise FigmaAPIError(f"Figma API {path} returned an unexpected payload")
        return payload


class FigmaAdapter(ExtractionAdapter):
    """Lists the components and styles a hosted Figma file defines and uses.

    Components and styles are identified by their published key, which is
    stable across files. Entries flagged ``remote`` come from a team library
    and count as external references.
    """

    def __init__(self, client: FigmaClient) -> None:
        self.client = client

    def extract(self, locator: FileLocator) -> FileAnalysis:
        try:
            payload = self.client.get_file(locator.location)
        except FigmaAPIError as exc:
            raise ExtractionError(str(exc)) from exc

        document = payload.get("document")
        if not isinstance(document, dict):
            raise ExtractionError(f"Figma file {locator.location} has no document tree")

        components = _as_mapping(payload.get("components"))
        styles = _as_mapping(payload.get("styles"))
        analysis = FileAnalysis(project_name=locator.project_name, file_name=locator.file_name)
        provenance = {"project": locator.project_name, "file": locator.file_name}

        for component in components.values():
            key = component.get("key")
            if isinstance(key, str) and key and not component.get("remote"):
                analysis.add_definition(
                    ResourceKind.SYMBOLS,
                    key,
                    {
                        "name": component.get("name") or key,
                        "description": component.get("description") or "",
                        **provenance,
                    },
                )
        for style in styles.values():
            key = style.get("key")
            if isinstance(key, str) and key and not style.get("remote"):
                analysis.add_definition(
                    _style_kind(style),
                    key,
                    {
                        "name": style.get("name") or key,
                        "styleType": style.get("styleType") or "",
                        **provenance,
                    },
                )

        references: Dict[ResourceKind, Counter[str]] = {kind: Counter() for kind in ResourceKind}
        remote: Dict[ResourceKind, set] = {kind: set() for kind in ResourceKind}
        for node in _walk_nodes(document):
            component = components.get(node.get("componentId") or "")
            if node.get("type") == "INSTANCE" and component and component.get("key"):
                references[ResourceKind.SYMBOLS][component["key"]] += 1
                if component.get("remote"):
                    remote[ResourceKind.SYMBOLS].add(component["key"])
            for style_id in _as_mapping_of_str(node.get("styles")).values():
                style = styles.get(style_id)
                if not style or not style.get("key"):
                    continue
                kind = _style_kind(style)
                references[kind][style["key"]] += 1
                if style.get("remote"):
                    remote[kind].add(style["key"])

        for kind in ResourceKind:
            external = analysis.counts.setdefault(kind.counts_key, {})
            local = analysis.counts.setdefault(kind.local_counts_key, {})
            for key, amount in sorted(references[kind].items()):
                target = external if key in remote[kind] else local
                target[key] = amount
        return analysis


def _style_kind(style: Mapping[str, Any]) -> ResourceKind:
    if style.get("styleType") == "TEXT":
        return ResourceKind.TEXT_STYLES
    return ResourceKind.LAYER_STYLES


def _walk_nodes(root: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    stack: List[Mapping[str, Any]] = [root]
    while stack:
        node = stack.pop()
        yield node
        children = node.get("children")
        if isinstance(children, list):
            stack.extend(child for child in reversed(children) if isinstance(child, dict))


def _as_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _as_mapping(value: Any) -> Dict[str, Dict[str, Any]]:
    if not isinstance(value, dict):
        return {}
    return {key: item for key, item in value.items() if isinstance(item, dict)}


def _as_mapping_of_str(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {key: item for key, item in value.items() if isinstance(item, str)}


__all__ = ["DEFAULT_BASE_URL", "FigmaAPIError", "FigmaAdapter", "FigmaClient"]
