"""Tests for enriched-template resolution and template discovery."""

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from conftest import make_template_doc, write_template

from specmint.errors import AutoEnrichmentUnavailable, TemplateLoadError
from specmint.templates.loader import (
    discover_template_files,
    get_all_templates,
    load_discovered_template,
)
from specmint.templates.resolver import (
    enriched_template_path,
    is_enriched_template_path,
    needs_enrichment,
    resolve_template_path,
)

METADATA = {
    "changelog": [
        {
            "version": "2.0.0",
            "date": "2026-02-01T00:00:00.000Z",
            "type": "major",
            "changes": [{"category": "enrichment", "description": "Enriched docs"}],
        }
    ],
    "breaking_changes": [],
    "deprecated": False,
}


def _write_pair(tmp_path: Path, derivative_doc: dict[str, Any] | None = None) -> Path:
    base = write_template(tmp_path / "shadcn-template.json5", make_template_doc(version="2.0.0"))
    if derivative_doc is not None:
        write_template(tmp_path / "shadcn-template.enriched-2.0.0.json5", derivative_doc)
    return base


class TestEnrichedNaming:
    """Tests for enriched-derivative file naming."""

    def test_enriched_template_path(self) -> None:
        """Test that the derivative name is keyed by version."""
        path = Path("/specs/shadcn-template.json5")
        assert enriched_template_path(path, "2.0.0") == Path(
            "/specs/shadcn-template.enriched-2.0.0.json5"
        )

    def test_is_enriched_template_path(self) -> None:
        """Test enriched-path detection."""
        assert is_enriched_template_path(Path("a-template.enriched-1.0.0.json5"))
        assert not is_enriched_template_path(Path("a-template.json5"))


class TestResolveTemplatePath:
    """Tests for resolve_template_path."""

    def test_prefers_derivative_without_warnings(self, tmp_path: Path) -> None:
        """Test that an existing derivative with version metadata resolves cleanly."""
        derivative_doc = make_template_doc(version="2.0.0", version_metadata=METADATA)
        base = _write_pair(tmp_path, derivative_doc)

        resolved = resolve_template_path(base)

        assert resolved.is_enriched
        assert resolved.path == (tmp_path / "shadcn-template.enriched-2.0.0.json5").resolve()
        assert resolved.warnings == ()

    def test_base_without_metadata_warns(self, tmp_path: Path) -> None:
        """Test that a base template with no version ledger is reported."""
        base = _write_pair(tmp_path)
        resolved = resolve_template_path(base)

        assert not resolved.is_enriched
        assert resolved.path == base.resolve()
        assert any("no version metadata" in w for w in resolved.warnings)

    def test_no_version_check_skips_warnings(self, tmp_path: Path) -> None:
        """Test that validate_version=False suppresses warnings."""
        base = _write_pair(tmp_path)
        assert resolve_template_path(base, validate_version=False).warnings == ()

    def test_auto_enrich_raises_without_derivative(self, tmp_path: Path) -> None:
        """Test that auto-enrichment is reported as unavailable."""
        base = _write_pair(tmp_path)
        with pytest.raises(AutoEnrichmentUnavailable, match="specmint enrich"):
            resolve_template_path(base, auto_enrich=True)

    def test_auto_enrich_ignored_when_derivative_exists(self, tmp_path: Path) -> None:
        """Test that an existing derivative satisfies auto_enrich."""
        base = _write_pair(tmp_path, make_template_doc(version="2.0.0", version_metadata=METADATA))
        assert resolve_template_path(base, auto_enrich=True).is_enriched

    def test_deprecation_and_breaking_warnings(self, tmp_path: Path) -> None:
        """Test that deprecation and breaking changes are surfaced."""
        metadata = {
            "changelog": [
                {
                    "version": "2.0.0",
                    "date": "2026-02-01T00:00:00.000Z",
                    "type": "major",
                    "changes": [
                        {
                            "category": "prompt",
                            "description": "Renamed task prompts",
                            "breaking": True,
                        }
                    ],
                }
            ],
            "deprecated": True,
            "deprecated_reason": "Superseded",
            "replacement": "@acme/shadcn-v2",
        }
        base = write_template(
            tmp_path / "shadcn-template.json5",
            make_template_doc(version="2.0.0", version_metadata=metadata),
        )

        warnings = resolve_template_path(base).warnings

        assert len(warnings) == 2
        assert "DEPRECATED: Superseded" in warnings[0]
        assert "@acme/shadcn-v2" in warnings[0]
        assert "v2.0.0: Renamed task prompts" in warnings[1]

    def test_enriched_path_input(self, tmp_path: Path) -> None:
        """Test that passing a derivative path returns it directly."""
        derivative = write_template(
            tmp_path / "shadcn-template.enriched-2.0.0.json5",
            make_template_doc(version="2.0.0", version_metadata=METADATA),
        )
        resolved = resolve_template_path(derivative)
        assert resolved.is_enriched
        assert resolved.path == derivative.resolve()

    def test_derivative_without_metadata_warns(self, tmp_path: Path) -> None:
        """Test that an enriched template with no version ledger is reported."""
        base = _write_pair(tmp_path, make_template_doc(version="2.0.0"))
        derivative = tmp_path / "shadcn-template.enriched-2.0.0.json5"

        via_base = resolve_template_path(base)
        direct = resolve_template_path(derivative)

        assert via_base.is_enriched
        assert via_base.path == derivative.resolve()
        assert any("no version metadata" in w for w in via_base.warnings)
        assert direct.is_enriched
        assert any("no version metadata" in w for w in direct.warnings)

    def test_missing_template_raises(self, tmp_path: Path) -> None:
        """Test that an unreadable base template raises TemplateLoadError."""
        with pytest.raises(TemplateLoadError):
            resolve_template_path(tmp_path / "missing-template.json5")


class TestNeedsEnrichment:
    """Tests for needs_enrichment."""

    def test_true_without_derivative(self, tmp_path: Path) -> None:
        """Test that a base template without a derivative needs enrichment."""
        assert needs_enrichment(_write_pair(tmp_path))

    def test_false_with_derivative(self, tmp_path: Path) -> None:
        """Test that an existing derivative satisfies enrichment."""
        assert not needs_enrichment(_write_pair(tmp_path, make_template_doc(version="2.0.0")))

    def test_false_for_unreadable_and_enriched(self, tmp_path: Path) -> None:
        """Test the non-base cases."""
        assert not needs_enrichment(tmp_path / "missing-template.json5")
        assert not needs_enrichment(tmp_path / "a-template.enriched-1.0.0.json5")


class TestTemplateDiscovery:
    """Tests for template discovery."""

    def test_discover_skips_derivatives(self, tmp_path: Path) -> None:
        """Test that only base templates are discovered, recursively."""
        nested = write_template(
            tmp_path / "specialists" / "shadcn" / "shadcn-template.json5", make_template_doc()
        )
        write_template(
            tmp_path / "specialists" / "shadcn" / "shadcn-template.enriched-1.0.0.json5",
            make_template_doc(),
        )
        (tmp_path / "notes.json5").write_text("{}")

        assert discover_template_files(tmp_path) == [nested]

    def test_discover_missing_dir(self, tmp_path: Path) -> None:
        """Test that a missing directory yields nothing."""
        assert discover_template_files(tmp_path / "nope") == []

    def test_load_discovered_reports_enrichment(self, tmp_path: Path) -> None:
        """Test that the enriched derivative is detected."""
        base = _write_pair(tmp_path, make_template_doc(version="2.0.0"))
        discovered = load_discovered_template(base)

        assert discovered is not None
        assert discovered.is_enriched

    def test_load_discovered_skips_malformed(self, tmp_path: Path) -> None:
        """Test that malformed files are skipped."""
        bad = tmp_path / "bad-template.json5"
        bad.write_text("{ nope")
        assert load_discovered_template(bad) is None

    def test_local_overrides_global(self, tmp_path: Path) -> None:
        """Test that project templates win over global ones of the same name."""
        global_dir = tmp_path / "global"
        local_dir = tmp_path / "local"
        write_template(global_dir / "shadcn-template.json5", make_template_doc(version="1.0.0"))
        write_template(local_dir / "shadcn-template.json5", make_template_doc(version="3.0.0"))
        write_template(
            tmp_path / "extra" / "react-template.json5",
            make_template_doc(name="@acme/react-specialist"),
        )

        with (
            patch("specmint.templates.loader.get_global_templates_path", return_value=global_dir),
            patch("specmint.templates.loader.get_local_templates_path", return_value=local_dir),
        ):
            templates = get_all_templates([tmp_path / "extra"])

        assert set(templates) == {"@acme/shadcn-specialist", "@acme/react-specialist"}
        assert templates["@acme/shadcn-specialist"].template.version == "3.0.0"
