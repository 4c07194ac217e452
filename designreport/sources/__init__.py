"""Design file sources: where the files of a run come from."""

from .base import Discovery, DiscoveryError, FileSource
from .figma import FigmaTeamSource
from .local import LocalTreeSource, tidy_file_name

__all__ = [
    "Discovery",
    "DiscoveryError",
    "FileSource",
    "FigmaTeamSource",
    "LocalTreeSource",
    "tidy_file_name",
]
