"""Extraction adapter for Sketch documents (.sketch zip archives)."""

from __future__ import annotations

import json
import zipfile
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Set

from .base import ExtractionAdapter, ExtractionError
from ..models import FileAnalysis, FileLocator, ResourceKind

_DOCUMENT_ENTRY = "document.json"
_SYMBOL_OVERRIDE_SUFFIX = "_symbolID"


class SketchAdapter(ExtractionAdapter):
    """Lists the symbols and shared styles a Sketch file defines and uses.

    Symbols and styles pulled in from a library are stored in the document
    under a local copy with its own identifier. References to those copies are
    reported under the library's original identifier so that they line up
    with the definition recorded from the library file itself.
    """

    def extract(self, locator: FileLocator) -> FileAnalysis:
        path = Path(locator.location)
        try:
            with zipfile.ZipFile(path) as archive:
                document = _read_json(archive, _DOCUMENT_ENTRY)
                pages = [
                    _read_json(archive, name) for name in _page_entries(archive, document)
                ]
        except FileNotFoundError as exc:
            raise ExtractionError(f"Sketch file not found: {path}") from exc
        except (zipfile.BadZipFile, OSError) as exc:
            raise ExtractionError(f"Unable to open {path.name}: {exc}") from exc

        analysis = FileAnalysis(project_name=locator.project_name, file_name=locator.file_name)
        provenance = {"project": locator.project_name, "file": locator.file_name}

        text_styles = _local_styles(document.get("layerTextStyles"))
        layer_styles = _local_styles(document.get("layerStyles"))
        foreign_text = _foreign_styles(document.get("foreignTextStyles"))
        foreign_layer = _foreign_styles(document.get("foreignLayerStyles"))
        foreign_symbols = _foreign_symbols(document.get("foreignSymbols"))

        for style_id, name in text_styles.items():
            analysis.add_definition(ResourceKind.TEXT_STYLES, style_id, {"name": name, **provenance})
        for style_id, name in layer_styles.items():
            analysis.add_definition(ResourceKind.LAYER_STYLES, style_id, {"name": name, **provenance})

        symbol_refs: Counter[str] = Counter()
        style_refs: Counter[str] = Counter()
        for page in pages:
            page_name = _as_str(page.get("name")) or ""
            for layer in _walk_layers(page):
                layer_class = layer.get("_class")
                symbol_id = _as_str(layer.get("symbolID"))
                if layer_class == "symbolMaster" and symbol_id:
                    analysis.add_definition(
                        ResourceKind.SYMBOLS,
                        symbol_id,
                        {
                            "name": _as_str(layer.get("name")) or symbol_id,
                            "page": page_name,
                            **provenance,
                        },
                    )
                elif layer_class == "symbolInstance" and symbol_id:
                    symbol_refs[symbol_id] += 1
                    for override_id in _symbol_overrides(layer):
                        symbol_refs[override_id] += 1
                style_id = _as_str(layer.get("sharedStyleID"))
                if style_id:
                    style_refs[style_id] += 1

        local_symbols = set(analysis.definitions(ResourceKind.SYMBOLS))
        _tally(
            analysis,
            ResourceKind.SYMBOLS,
            symbol_refs,
            local_ids=local_symbols,
            foreign=foreign_symbols,
        )
        _tally(
            analysis,
            ResourceKind.TEXT_STYLES,
            {key: value for key, value in style_refs.items() if key in text_styles or key in foreign_text},
            local_ids=set(text_styles),
            foreign=foreign_text,
        )
        _tally(
            analysis,
            ResourceKind.LAYER_STYLES,
            {key: value for key, value in style_refs.items() if key not in text_styles and key not in foreign_text},
            local_ids=set(layer_styles),
            foreign=foreign_layer,
        )
        return analysis


def _tally(
    analysis: FileAnalysis,
    kind: ResourceKind,
    references: Mapping[str, int],
    *,
    local_ids: Set[str],
    foreign: Mapping[str, str],
) -> None:
    external: Dict[str, int] = analysis.counts.setdefault(kind.counts_key, {})
    local: Dict[str, int] = analysis.counts.setdefault(kind.local_counts_key, {})
    for identifier, amount in sorted(references.items()):
        if identifier in local_ids:
            local[identifier] = local.get(identifier, 0) + amount
        elif identifier in foreign:
            remote_id = foreign[identifier]
            external[remote_id] = external.get(remote_id, 0) + amount
        # Anything else points at a detached copy with no library link; skip it.


def _read_json(archive: zipfile.ZipFile, name: str) -> Dict[str, Any]:
    try:
        raw = archive.read(name)
    except KeyError as exc:
        raise ExtractionError(f"Sketch archive is missing {name}") from exc
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ExtractionError(f"Sketch archive entry {name} is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise ExtractionError(f"Sketch archive entry {name} must contain an object")
    return payload


def _page_entries(archive: zipfile.ZipFile, document: Mapping[str, Any]) -> List[str]:
    names = set(archive.namelist())
    entries: List[str] = []
    for ref in document.get("pages") or []:
        if not isinstance(ref, dict):
            continue
        target = _as_str(ref.get("_ref"))
        if not target:
            continue
        entry = target if target.endswith(".json") else f"{target}.json"
        if entry in names:
            entries.append(entry)
    if entries:
        return entries
    return sorted(name for name in names if name.startswith("pages/") and name.endswith(".json"))


def _walk_layers(node: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    stack: List[Mapping[str, Any]] = [node]
    while stack:
        current = stack.pop()
        children = current.get("layers")
        if not isinstance(children, list):
            continue
        for child in reversed(children):
            if isinstance(child, dict):
                yield child
                stack.append(child)


def _symbol_overrides(layer: Mapping[str, Any]) -> Iterable[str]:
    for override in layer.get("overrideValues") or []:
        if not isinstance(override, dict):
            continue
        name = _as_str(override.get("overrideName")) or ""
        value = _as_str(override.get("value"))
        if name.endswith(_SYMBOL_OVERRIDE_SUFFIX) and value:
            yield value


def _local_styles(container: Any) -> Dict[str, str]:
    styles: Dict[str, str] = {}
    if not isinstance(container, dict):
        return styles
    for style in container.get("objects") or []:
        if not isinstance(style, dict):
            continue
        style_id = _as_str(style.get("do_objectID"))
        if style_id:
            styles[style_id] = _as_str(style.get("name")) or style_id
    return styles


def _foreign_styles(entries: Any) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        local = entry.get("localSharedStyle")
        remote_id = _as_str(entry.get("remoteStyleID"))
        if isinstance(local, dict) and remote_id:
            local_id = _as_str(local.get("do_objectID"))
            if local_id:
                mapping[local_id] = remote_id
    return mapping


def _foreign_symbols(entries: Any) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        local = entry.get("symbolMaster")
        original = entry.get("originalMaster")
        if not isinstance(local, dict) or not isinstance(original, dict):
            continue
        local_id = _as_str(local.get("symbolID"))
        remote_id = _as_str(original.get("symbolID"))
        if local_id and remote_id:
            mapping[local_id] = remote_id
    return mapping


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


__all__ = ["SketchAdapter"]
