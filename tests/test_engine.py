"""Tests for the specialist creation workflow."""

from pathlib import Path
from unittest.mock import MagicMock

import json5
import pytest
from conftest import FakeClient, FakeFetcher

from specmint.errors import TemplateValidationFailed
from specmint.pipeline import Engine, Enricher, Extractor, Generator
from specmint.pipeline.engine import SpecialistConfig

GUIDE = """# Installation

Run the init command.

## Theming

Colors are CSS variables.
"""


def _engine(client: FakeClient | None = None, generator: Generator | None = None) -> Engine:
    fetcher = FakeFetcher({"guide.md": GUIDE, "https://ui.shadcn.com/docs": GUIDE})
    return Engine(
        extractor=Extractor(fetcher=fetcher),
        enricher=Enricher(client, fetcher=fetcher),
        generator=generator or Generator(),
    )


class TestSpecialistConfig:
    """Tests for SpecialistConfig defaults."""

    def test_template_name_from_domain(self, tmp_path: Path) -> None:
        """Test that the name defaults to the slugified domain."""
        assert SpecialistConfig(domain="shadcn UI", output_dir=tmp_path).template_name == (
            "shadcn-ui-specialist"
        )

    def test_no_enrichment_options_by_default(self, tmp_path: Path) -> None:
        """Test that enrichment is off unless requested."""
        config = SpecialistConfig(domain="x", output_dir=tmp_path)
        assert config.enrichment_options is None
        options = SpecialistConfig(
            domain="x", output_dir=tmp_path, generate_tiers=True, base_task="t", scenario="s"
        ).enrichment_options
        assert options is not None
        assert not options.enrich_documentation


class TestCreateSpecialist:
    """Tests for Engine.create_specialist."""

    def test_creates_package(self, tmp_path: Path) -> None:
        """Test the full workflow without enrichment."""
        config = SpecialistConfig(
            domain="shadcn-ui", framework="React", sources=("guide.md",), output_dir=tmp_path
        )

        result = _engine().create_specialist(config)

        assert result.path == tmp_path / "shadcn-ui-specialist-template.json5"
        written = json5.loads(result.path.read_text())
        assert written["capabilities"]["tags"] == ["installation", "theming"]
        assert written["version_metadata"]["changelog"][0]["changes"][0]["description"] == (
            "Initial version"
        )
        assert result.knowledge.sources[0].location == "guide.md"
        assert result.enrichment is None
        assert (tmp_path / "README.md").exists()

    def test_enrichment_and_tiers(self, tmp_path: Path) -> None:
        """Test that enrichment and tiers flow into the package."""
        config = SpecialistConfig(
            domain="shadcn-ui",
            sources=("https://ui.shadcn.com/docs",),
            output_dir=tmp_path,
            enrich=True,
            generate_tiers=True,
            base_task="Set up a project",
            scenario="project-setup",
        )

        result = _engine(FakeClient()).create_specialist(config)

        assert result.enrichment is not None
        assert result.enrichment.enriched == 1
        written = json5.loads(result.path.read_text())
        assert written["documentation"][0]["enrichment"]["summary"] == "How to add components."
        assert "project-setup" in written["prompts"]
        assert (tmp_path / "prompts" / "project-setup" / "Lx-adversarial.md").exists()

    def test_missing_client_records_error(self, tmp_path: Path) -> None:
        """Test that enrichment without a client is skipped and reported."""
        config = SpecialistConfig(
            domain="shadcn-ui", sources=("guide.md",), output_dir=tmp_path, enrich=True
        )

        result = _engine(None).create_specialist(config)

        assert result.enrichment is None
        assert result.enrichment_error is not None
        assert "ANTHROPIC_API_KEY" in result.enrichment_error
        assert result.path.exists()

    def test_missing_client_still_writes_tier_scaffold(self, tmp_path: Path) -> None:
        """Test that tiers survive when documentation enrichment has no client."""
        config = SpecialistConfig(
            domain="shadcn-ui",
            sources=("guide.md",),
            output_dir=tmp_path,
            enrich=True,
            generate_tiers=True,
            base_task="Set up a project",
            scenario="project-setup",
        )

        result = _engine(None).create_specialist(config)

        assert result.enrichment_error is not None
        assert "ANTHROPIC_API_KEY" in result.enrichment_error
        assert result.enrichment is not None
        assert result.enrichment.tiers is not None
        assert result.enrichment.enriched == 0
        written = json5.loads(result.path.read_text())
        assert written["prompts"]["project-setup"]["tiers"]["L0"] == "Set up a project"
        assert (tmp_path / "prompts" / "project-setup" / "L0-minimal.md").exists()

    def test_validation_failure_writes_nothing(self, tmp_path: Path) -> None:
        """Test that a structurally invalid template stops before generation."""
        generator = MagicMock(spec=Generator)
        config = SpecialistConfig(domain="shadcn-ui", output_dir=tmp_path, version="latest")

        with pytest.raises(TemplateValidationFailed) as exc_info:
            _engine(generator=generator).create_specialist(config)

        assert "version" in [i.path for i in exc_info.value.result.errors]
        generator.generate.assert_not_called()
        assert list(tmp_path.iterdir()) == []

    def test_failed_sources_do_not_stop_creation(self, tmp_path: Path) -> None:
        """Test that all sources failing still produces a valid package."""
        config = SpecialistConfig(domain="prisma", sources=("missing.md",), output_dir=tmp_path)

        result = _engine().create_specialist(config)

        assert [f.location for f in result.knowledge.failures] == ["missing.md"]
        assert result.path.exists()
