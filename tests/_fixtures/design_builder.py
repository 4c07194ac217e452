"""Helpers for writing throwaway Sketch archives and analyses in tests."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Mapping, Sequence

from designreport.models import FileAnalysis, ResourceKind


def make_analysis(
    project: str,
    file: str,
    *,
    symbols: Iterable[str] = (),
    text_styles: Iterable[str] = (),
    layer_styles: Iterable[str] = (),
    external_symbols: Mapping[str, int] | None = None,
    external_text_styles: Mapping[str, int] | None = None,
    external_layer_styles: Mapping[str, int] | None = None,
) -> FileAnalysis:
    """Return a FileAnalysis defining the given ids and referencing external ones."""
    analysis = FileAnalysis(project_name=project, file_name=file)
    for kind, ids in (
        (ResourceKind.SYMBOLS, symbols),
        (ResourceKind.TEXT_STYLES, text_styles),
        (ResourceKind.LAYER_STYLES, layer_styles),
    ):
        for identifier in ids:
            analysis.shareables[kind.shareables_key][identifier] = {
                "name": f"{identifier} name",
                "project": project,
                "file": file,
            }
    analysis.counts[ResourceKind.SYMBOLS.counts_key] = dict(external_symbols or {})
    analysis.counts[ResourceKind.TEXT_STYLES.counts_key] = dict(external_text_styles or {})
    analysis.counts[ResourceKind.LAYER_STYLES.counts_key] = dict(external_layer_styles or {})
    return analysis


class SketchBuilder:
    """Writes minimal .sketch archives into a ``root/<project>/`` tree."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "designs"
        self.root.mkdir()

    def write(
        self,
        project: str,
        filename: str,
        *,
        symbols: Mapping[str, str] | None = None,
        instances: Sequence[str] = (),
        foreign_symbols: Mapping[str, str] | None = None,
        text_styles: Mapping[str, str] | None = None,
        layer_styles: Mapping[str, str] | None = None,
        foreign_text_styles: Mapping[str, str] | None = None,
        foreign_layer_styles: Mapping[str, str] | None = None,
        style_refs: Sequence[str] = (),
    ) -> Path:
        """Write one archive.

        ``symbols`` maps local master ids to names; ``foreign_*`` map the id of
        the local copy to the library's original id; ``instances`` and
        ``style_refs`` list the ids referenced by layers on the page.
        """
        project_dir = self.root / project
        project_dir.mkdir(parents=True, exist_ok=True)
        path = project_dir / filename
        build_sketch_archive(
            path,
            symbols=symbols or {},
            instances=instances,
            foreign_symbols=foreign_symbols or {},
            text_styles=text_styles or {},
            layer_styles=layer_styles or {},
            foreign_text_styles=foreign_text_styles or {},
            foreign_layer_styles=foreign_layer_styles or {},
            style_refs=style_refs,
        )
        return path


def build_sketch_archive(
    path: Path,
    *,
    symbols: Mapping[str, str],
    instances: Sequence[str],
    foreign_symbols: Mapping[str, str],
    text_styles: Mapping[str, str],
    layer_styles: Mapping[str, str],
    foreign_text_styles: Mapping[str, str],
    foreign_layer_styles: Mapping[str, str],
    style_refs: Sequence[str],
) -> None:
    document = {
        "_class": "document",
        "pages": [{"_class": "MSJSONFileReference", "_ref": "pages/PAGE-1"}],
        "layerStyles": {"objects": _shared_styles(layer_styles)},
        "layerTextStyles": {"objects": _shared_styles(text_styles)},
        "foreignSymbols": [
            {
                "_class": "MSImmutableForeignSymbol",
                "originalMaster": {"_class": "symbolMaster", "symbolID": remote},
                "symbolMaster": {"_class": "symbolMaster", "symbolID": local},
            }
            for local, remote in foreign_symbols.items()
        ],
        "foreignTextStyles": _foreign_styles(foreign_text_styles),
        "foreignLayerStyles": _foreign_styles(foreign_layer_styles),
    }
    masters = [
        {"_class": "symbolMaster", "symbolID": symbol_id, "name": name, "layers": []}
        for symbol_id, name in symbols.items()
    ]
    artboard = {
        "_class": "artboard",
        "name": "Screen",
        "layers": [
            {"_class": "symbolInstance", "symbolID": symbol_id, "name": "instance"}
            for symbol_id in instances
        ]
        + [
            {"_class": "rectangle", "sharedStyleID": style_id, "name": "shape"}
            for style_id in style_refs
        ],
    }
    page = {"_class": "page", "name": "Page 1", "layers": masters + [artboard]}

    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("document.json", json.dumps(document))
        archive.writestr("pages/PAGE-1.json", json.dumps(page))
        archive.writestr("meta.json", json.dumps({"appVersion": "99"}))


def _shared_styles(styles: Mapping[str, str]) -> list[Dict[str, object]]:
    return [
        {"_class": "sharedStyle", "do_objectID": style_id, "name": name, "value": {}}
        for style_id, name in styles.items()
    ]


def _foreign_styles(styles: Mapping[str, str]) -> list[Dict[str, object]]:
    return [
        {
            "_class": "MSImmutableForeignLayerStyle",
            "remoteStyleID": remote,
            "localSharedStyle": {"_class": "sharedStyle", "do_objectID": local, "name": local},
        }
        for local, remote in styles.items()
    ]


__all__ = ["SketchBuilder", "build_sketch_archive", "make_analysis"]
