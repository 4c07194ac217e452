"""Configuration loading for designreport (.designreport.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .adapters.figma import DEFAULT_BASE_URL
from .sources.local import DEFAULT_EXTENSION

CONFIG_FILENAME = ".designreport.yml"
DEFAULT_REPORTS_DIR = "reports"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class FigmaConfig:
    """Credentials and team selection for the hosted Figma source."""

    token: Optional[str] = None
    teams: List[str] = field(default_factory=list)
    base_url: str = DEFAULT_BASE_URL
    request_timeout: Optional[float] = 60.0


@dataclass
class ReportConfig:
    """Represents the settings defined in .designreport.yml."""

    root: Path
    reports_dir: Path
    extension: str = DEFAULT_EXTENSION
    max_concurrency: Optional[int] = None
    figma: FigmaConfig = field(default_factory=FigmaConfig)


def load_config(config_path: Path) -> ReportConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ReportConfig(root=root, reports_dir=root / DEFAULT_REPORTS_DIR)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    reports_dir_str = _as_str(data.get("reports_dir")) or DEFAULT_REPORTS_DIR
    extension = _as_str(data.get("extension")) or DEFAULT_EXTENSION

    max_concurrency = None
    if data.get("max_concurrency") is not None:
        max_concurrency = _as_int(data.get("max_concurrency"))
        if max_concurrency is None or max_concurrency < 1:
            raise ConfigError("max_concurrency must be a positive integer")

    figma = FigmaConfig()
    figma_data = _as_dict(data.get("figma"))
    if figma_data:
        figma.token = _as_str(figma_data.get("token"))
        figma.teams = _as_team_list(figma_data.get("teams"))
        figma.base_url = _as_str(figma_data.get("base_url")) or DEFAULT_BASE_URL
        if figma_data.get("request_timeout") is not None:
            figma.request_timeout = _as_float(figma_data.get("request_timeout"))

    return ReportConfig(
        root=root,
        reports_dir=_resolve_dir(root, reports_dir_str),
        extension=extension,
        max_concurrency=max_concurrency,
        figma=figma,
    )


def apply_env_overrides(
    config: ReportConfig, environ: Mapping[str, str] | None = None
) -> ReportConfig:
    """Return ``config`` with FIGMA_TOKEN, FIGMA_TEAMS and DESIGNREPORT_REPORTS_DIR applied."""
    env = os.environ if environ is None else environ
    figma = replace(config.figma, teams=list(config.figma.teams))
    token = env.get("FIGMA_TOKEN")
    if token:
        figma.token = token
    teams = env.get("FIGMA_TEAMS")
    if teams:
        figma.teams = _as_team_list(teams)

    reports_dir = config.reports_dir
    reports_override = env.get("DESIGNREPORT_REPORTS_DIR")
    if reports_override:
        reports_dir = _resolve_dir(config.root, reports_override)

    return replace(config, reports_dir=reports_dir, figma=figma)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_dir(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_team_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items: Sequence[Any] = value.split(",")
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        items = [value]
    elif isinstance(value, Sequence):
        items = value
    else:
        return []
    teams = [str(item).strip() for item in items if isinstance(item, (str, int))]
    return [team for team in teams if team]


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "FigmaConfig",
    "ReportConfig",
    "apply_env_overrides",
    "load_config",
]
