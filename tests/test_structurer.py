"""Tests for building draft templates from extracted knowledge."""

from specmint.pipeline.knowledge import (
    BestPractice,
    Concept,
    ExtractedKnowledge,
    Gotcha,
    Source,
)
from specmint.pipeline.structurer import (
    PRIMARY_MODEL,
    TemplateIdentity,
    display_name,
    slugify,
    structure,
)
from specmint.pipeline.validator import validate


def _knowledge() -> ExtractedKnowledge:
    return ExtractedKnowledge(
        domain="shadcn-ui",
        framework="React",
        concepts=(
            Concept(name="Components JSON", description="Project config", importance="critical"),
            Concept(name="Theming", description="CSS variables", importance="medium"),
        ),
        gotchas=(
            Gotcha(
                title="Missing alias",
                description="Imports fail",
                impact="critical",
                solution="Configure path aliases",
            ),
        ),
        best_practices=(BestPractice(title="Use the CLI", category="setup"),),
        sources=(
            Source(location="https://ui.shadcn.com/docs"),
            Source(location="docs/guide.md"),
        ),
    )


class TestStructure:
    """Tests for structure."""

    def test_empty_knowledge_is_valid(self) -> None:
        """Test that structure on empty knowledge passes validation."""
        knowledge = ExtractedKnowledge(domain="prisma", framework="Node")
        template = structure(knowledge, TemplateIdentity(name="prisma-specialist"))

        result = validate(template)
        assert result.errors == ()
        assert template.persona.values
        assert template.persona.tech_stack == ("Node",)
        assert template.capabilities.considerations

    def test_populated_knowledge_is_valid(self) -> None:
        """Test that a populated draft validates and carries the knowledge."""
        template = structure(_knowledge(), TemplateIdentity(name="@acme/shadcn-specialist"))

        assert validate(template).errors == ()
        assert template.display_name == "shadcn"
        assert template.version == "1.0.0"
        assert template.persona.tech_stack == ("Components JSON",)
        assert template.persona.values == ("setup",)
        assert template.capabilities.tags == ("components-json", "theming")
        assert template.capabilities.considerations == ("Imports fail",)

    def test_documentation_from_sources(self) -> None:
        """Test that URLs and paths become documentation entries."""
        template = structure(_knowledge(), TemplateIdentity(name="shadcn-specialist"))

        assert template.documentation is not None
        assert template.documentation[0].url == "https://ui.shadcn.com/docs"
        assert template.documentation[1].path == "docs/guide.md"
        assert not any(entry.is_enriched for entry in template.documentation)

    def test_prompts_keep_placeholders(self) -> None:
        """Test that task prompts keep runtime placeholders."""
        template = structure(_knowledge(), TemplateIdentity(name="shadcn-specialist"))
        setup = template.prompts.tasks["project_setup"]

        assert "{{packageManager}}" in setup["default"]["systemPrompt"]
        assert "React" in setup["default"]["systemPrompt"]
        assert "Missing alias" in template.prompts.model_specific[PRIMARY_MODEL]["spawnerPrompt"]

    def test_identity_version_is_used(self) -> None:
        """Test that an explicit version is kept."""
        knowledge = ExtractedKnowledge(domain="prisma", framework="Node")
        template = structure(knowledge, TemplateIdentity(name="prisma", version="0.3.0"))
        assert template.version == "0.3.0"


class TestNames:
    """Tests for name helpers."""

    def test_slugify(self) -> None:
        """Test slug generation."""
        assert slugify("Next.js App Router") == "next-js-app-router"

    def test_display_name(self) -> None:
        """Test scope and suffix stripping."""
        assert display_name("@acme/shadcn-specialist") == "shadcn"
        assert display_name("prisma") == "prisma"
