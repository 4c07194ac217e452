"""Tests for designreport.models."""

from __future__ import annotations

from designreport.models import FileAnalysis, ResourceKind, Report


def test_resource_kind_keys() -> None:
    assert [kind.shareables_key for kind in ResourceKind] == ["symbols", "textStyles", "layerStyles"]
    assert ResourceKind.SYMBOLS.counts_key == "externalSymbols"
    assert ResourceKind.TEXT_STYLES.report_key == "allTextStyles"
    assert ResourceKind.LAYER_STYLES.local_counts_key == "localLayerStyles"


def test_new_analysis_has_empty_mappings_for_every_kind() -> None:
    analysis = FileAnalysis(project_name="App", file_name="Checkout")

    assert analysis.shareables == {"symbols": {}, "textStyles": {}, "layerStyles": {}}
    assert analysis.counts == {
        "externalSymbols": {},
        "externalTextStyles": {},
        "externalLayerStyles": {},
    }
    assert analysis.label == "App > Checkout"


def test_report_to_dict_has_exact_top_level_fields() -> None:
    report = Report(timestamp=1700000000000)

    assert set(report.to_dict()) == {
        "timestamp",
        "projects",
        "allSymbols",
        "allTextStyles",
        "allLayerStyles",
    }
