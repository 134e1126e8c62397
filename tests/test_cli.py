"""Tests for the CLI."""

from pathlib import Path
from typing import Any
from unittest.mock import patch

import json5
import pytest
from click.testing import CliRunner
from conftest import FakeClient, FakeFetcher, make_template_doc, write_template

from specmint import __version__
from specmint.cli import main
from specmint.errors import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from real ~/.specmint and ./.specmint configs."""
    monkeypatch.delenv("SPECMINT_ENRICHMENT_MODEL", raising=False)
    with (
        patch(
            "specmint.config.loader.get_home_config_path",
            return_value=tmp_path / "home" / "config.yaml",
        ),
        patch(
            "specmint.config.loader.get_local_config_path",
            return_value=tmp_path / "local" / "config.yaml",
        ),
    ):
        yield


def _read(path: Path) -> dict[str, Any]:
    return json5.loads(path.read_text())


def test_cli_help() -> None:
    """Test that --help exits cleanly."""
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "specmint" in result.output.lower()


def test_cli_version() -> None:
    """Test that --version shows the version."""
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestValidateCommand:
    """Tests for `specmint validate`."""

    def test_valid(self, template_file: Path) -> None:
        """Test that a valid template exits 0."""
        result = CliRunner().invoke(main, ["validate", str(template_file)])
        assert result.exit_code == 0
        assert "valid" in result.output

    def test_invalid(self, tmp_path: Path) -> None:
        """Test that structural errors exit 1 and name the field."""
        doc = make_template_doc()
        del doc["persona"]["purpose"]
        path = write_template(tmp_path / "bad-template.json5", doc)

        result = CliRunner().invoke(main, ["validate", str(path)])

        assert result.exit_code == 1
        assert "persona.purpose" in result.output

    def test_malformed(self, tmp_path: Path) -> None:
        """Test that an unparseable file exits 1."""
        path = tmp_path / "x-template.json5"
        path.write_text("{ nope")
        assert CliRunner().invoke(main, ["validate", str(path)]).exit_code == 1


class TestBumpVersionCommand:
    """Tests for `specmint bump-version`."""

    def test_default_patch(self, template_file: Path) -> None:
        """Test that the default bump is a patch."""
        result = CliRunner().invoke(main, ["bump-version", str(template_file)])

        assert result.exit_code == 0
        assert _read(template_file)["version"] == "1.0.1"

    def test_minor_with_message(self, template_file: Path) -> None:
        """Test a minor bump categorized from its message."""
        result = CliRunner().invoke(
            main, ["bump-version", str(template_file), "--minor", "-m", "add docs"]
        )

        assert result.exit_code == 0
        assert "[documentation]" in result.output
        doc = _read(template_file)
        assert doc["version"] == "1.1.0"
        head = doc["version_metadata"]["changelog"][0]
        assert head["type"] == "minor"
        assert head["changes"][0]["category"] == "documentation"
        assert head["author"] == "specmint"

    def test_breaking_major(self, template_file: Path) -> None:
        """Test a breaking major bump with an explicit category and author."""
        result = CliRunner().invoke(
            main,
            [
                "bump-version",
                str(template_file),
                "--major",
                "-m",
                "Rename tasks",
                "--category",
                "prompt",
                "--breaking",
                "--migration-notes",
                "Use project_setup",
                "--author",
                "jo",
            ],
        )

        assert result.exit_code == 0
        metadata = _read(template_file)["version_metadata"]
        assert metadata["changelog"][0]["changes"][0]["breaking"] is True
        assert metadata["changelog"][0]["author"] == "jo"
        assert metadata["breaking_changes"][0]["version"] == "2.0.0"
        assert metadata["breaking_changes"][0]["migration_guide"] == "Use project_setup"

    def test_invalid_version(self, tmp_path: Path) -> None:
        """Test that a non-semver version exits 1 without writing."""
        path = write_template(tmp_path / "a-template.json5", make_template_doc(version="1.0"))
        before = path.read_text()

        result = CliRunner().invoke(main, ["bump-version", str(path)])

        assert result.exit_code == 1
        assert path.read_text() == before

    def test_write_failure_exits_1(self, template_file: Path) -> None:
        """Test that an OSError while saving is reported, not raised."""
        before = template_file.read_text()
        with patch("specmint.cli.save_template", side_effect=OSError("disk full")):
            result = CliRunner().invoke(main, ["bump-version", str(template_file)])

        assert result.exit_code == 1
        assert "Error: disk full" in result.output
        assert not isinstance(result.exception, OSError)
        assert template_file.read_text() == before


class TestChangelogCommand:
    """Tests for `specmint changelog`."""

    def test_no_history(self, template_file: Path) -> None:
        """Test the message for templates without a changelog."""
        result = CliRunner().invoke(main, ["changelog", str(template_file)])
        assert result.exit_code == 0
        assert "No version history" in result.output

    def test_history_and_limit(self, template_file: Path) -> None:
        """Test that entries are listed newest first and limited."""
        runner = CliRunner()
        for message in ("fix typo", "add docs", "fix crash"):
            runner.invoke(main, ["bump-version", str(template_file), "-m", message])

        result = runner.invoke(main, ["changelog", str(template_file), "-n", "2"])

        assert result.exit_code == 0
        assert result.output.index("v1.0.3") < result.output.index("v1.0.2")
        assert "v1.0.1" not in result.output
        assert "1 more entries" in result.output

    def test_breaking_only(self, template_file: Path) -> None:
        """Test filtering to breaking entries."""
        runner = CliRunner()
        runner.invoke(main, ["bump-version", str(template_file), "-m", "fix typo"])
        runner.invoke(main, ["bump-version", str(template_file), "--major", "--breaking"])

        result = runner.invoke(main, ["changelog", str(template_file), "--breaking-only"])

        assert "v2.0.0 (BREAKING)" in result.output
        assert "v1.0.1" not in result.output


class TestResolveCommand:
    """Tests for `specmint resolve`."""

    def test_base(self, template_file: Path) -> None:
        """Test resolving a template without a derivative."""
        result = CliRunner().invoke(main, ["resolve", str(template_file)])
        assert result.exit_code == 0
        assert "base" in result.output

    def test_auto_enrich_fails(self, template_file: Path) -> None:
        """Test that --auto-enrich without a derivative exits 1."""
        result = CliRunner().invoke(main, ["resolve", str(template_file), "--auto-enrich"])
        assert result.exit_code == 1
        assert "specmint enrich" in result.output


class TestEnrichCommand:
    """Tests for `specmint enrich`."""

    def test_missing_key_exits(self, template_file: Path) -> None:
        """Test that enrichment without credentials exits 1."""
        with patch(
            "specmint.cli.require_client",
            side_effect=ConfigurationError("ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY is not set"),
        ):
            result = CliRunner().invoke(main, ["enrich", str(template_file)])

        assert result.exit_code == 1
        assert "ANTHROPIC_API_KEY" in result.output
        assert not (template_file.parent / "shadcn-template.enriched-1.0.0.json5").exists()

    def test_writes_derivative(self, template_file: Path) -> None:
        """Test that the derivative is written and versioned."""
        fetcher = FakeFetcher({"https://ui.shadcn.com/docs": "docs"})
        with (
            patch("specmint.cli.require_client", return_value=FakeClient()),
            patch("specmint.cli.DocumentFetcher", return_value=fetcher),
        ):
            result = CliRunner().invoke(main, ["enrich", str(template_file)])

        assert result.exit_code == 0
        derivative = template_file.parent / "shadcn-template.enriched-1.0.0.json5"
        doc = _read(derivative)
        assert doc["version"] == "1.0.1"
        assert doc["documentation"][0]["enrichment"]["summary"] == "How to add components."
        head = doc["version_metadata"]["changelog"][0]
        assert head["changes"][0]["category"] == "enrichment"
        assert doc["version_metadata"]["last_enriched_at"] == head["date"]
        assert _read(template_file)["version"] == "1.0.0"

        resolved = CliRunner().invoke(main, ["resolve", str(template_file)])
        assert "enriched" in resolved.output

    def test_nothing_to_enrich(self, template_file: Path) -> None:
        """Test that a second run skips enriched entries and writes nothing new."""
        fetcher = FakeFetcher({"https://ui.shadcn.com/docs": "docs"})
        runner = CliRunner()
        with (
            patch("specmint.cli.require_client", return_value=FakeClient()),
            patch("specmint.cli.DocumentFetcher", return_value=fetcher),
        ):
            runner.invoke(main, ["enrich", str(template_file)])
            result = runner.invoke(main, ["enrich", str(template_file)])

        assert result.exit_code == 0
        assert "No documentation entries were enriched" in result.output
        derivative = template_file.parent / "shadcn-template.enriched-1.0.0.json5"
        assert _read(derivative)["version"] == "1.0.1"

    def test_write_failure_exits_1(self, template_file: Path) -> None:
        """Test that an OSError while writing the derivative is reported."""
        fetcher = FakeFetcher({"https://ui.shadcn.com/docs": "docs"})
        with (
            patch("specmint.cli.require_client", return_value=FakeClient()),
            patch("specmint.cli.DocumentFetcher", return_value=fetcher),
            patch("specmint.cli.save_template", side_effect=OSError("read-only")),
        ):
            result = CliRunner().invoke(main, ["enrich", str(template_file)])

        assert result.exit_code == 1
        assert "Error: read-only" in result.output
        assert not isinstance(result.exception, OSError)

    def test_partial_failure_exits_1(self, tmp_path: Path, template_doc: dict[str, Any]) -> None:
        """Test that per-entry failures are reported after writing the rest."""
        template_doc["documentation"].append(
            {"type": "reference", "url": "https://example.com/gone", "description": "Gone"}
        )
        path = write_template(tmp_path / "shadcn-template.json5", template_doc)
        fetcher = FakeFetcher({"https://ui.shadcn.com/docs": "docs"})
        with (
            patch("specmint.cli.require_client", return_value=FakeClient()),
            patch("specmint.cli.DocumentFetcher", return_value=fetcher),
        ):
            result = CliRunner().invoke(main, ["enrich", str(path)])

        assert result.exit_code == 1
        assert "example.com/gone" in result.output
        derivative = _read(tmp_path / "shadcn-template.enriched-1.0.0.json5")
        assert "enrichment" in derivative["documentation"][0]
        assert "enrichment" not in derivative["documentation"][1]


class TestMintCommand:
    """Tests for `specmint mint`."""

    def test_mint_with_runs(self, template_file: Path, tmp_path: Path) -> None:
        """Test minting with a runs file."""
        runs = tmp_path / "runs.json"
        runs.write_text(
            '[{"run_id": "1", "model": "m", "overall_score": 0.5, "specialist_enabled": false},'
            ' {"run_id": "2", "model": "m", "overall_score": 0.7, "specialist_enabled": true}]'
        )
        out = tmp_path / "snaps"

        result = CliRunner().invoke(
            main, ["mint", str(template_file), "-o", str(out), "--runs", str(runs)]
        )

        assert result.exit_code == 0
        assert "Minted snapshot 001" in result.output
        snapshot = out.resolve() / "shadcn-specialist" / "1.0.0" / "snapshot-001.json5"
        assert len(_read(snapshot)["benchmarks"]["runs"]) == 2

    def test_mint_invalid_template(self, tmp_path: Path) -> None:
        """Test that an invalid template exits 1."""
        doc = make_template_doc()
        del doc["prompts"]
        path = write_template(tmp_path / "bad-template.json5", doc)

        result = CliRunner().invoke(main, ["mint", str(path), "-o", str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "prompts" in result.output


class TestListCommand:
    """Tests for `specmint list`."""

    def test_lists_directory(self, tmp_path: Path) -> None:
        """Test listing templates from an explicit directory."""
        write_template(tmp_path / "t" / "shadcn-template.json5", make_template_doc())
        with (
            patch("specmint.templates.loader.get_global_templates_path", return_value=tmp_path / "g"),
            patch("specmint.templates.loader.get_local_templates_path", return_value=tmp_path / "l"),
        ):
            result = CliRunner().invoke(main, ["list", str(tmp_path / "t")])

        assert result.exit_code == 0
        assert "@acme/shadcn-specialist" in result.output
        assert "not enriched" in result.output

    def test_empty(self, tmp_path: Path) -> None:
        """Test the message when nothing is found."""
        with (
            patch("specmint.templates.loader.get_global_templates_path", return_value=tmp_path / "g"),
            patch("specmint.templates.loader.get_local_templates_path", return_value=tmp_path / "l"),
        ):
            result = CliRunner().invoke(main, ["list"])
        assert "No templates found" in result.output


class TestInitCommand:
    """Tests for `specmint init`."""

    def test_show(self) -> None:
        """Test that --show prints the effective configuration."""
        result = CliRunner().invoke(main, ["init", "--show"])
        assert result.exit_code == 0
        assert "concurrency: 3" in result.output

    def test_writes_local_config(self, tmp_path: Path) -> None:
        """Test that init --local writes defaults once."""
        config_file = tmp_path / ".specmint" / "config.yaml"
        runner = CliRunner()
        with (
            patch("specmint.config.init.Path.cwd", return_value=tmp_path),
            patch("specmint.config.init.get_local_config_path", return_value=config_file),
        ):
            first = runner.invoke(main, ["init", "--local"])
            second = runner.invoke(main, ["init", "--local"])

        assert first.exit_code == 0
        assert config_file.exists()
        assert "already exists" in second.output


class TestCreateCommand:
    """Tests for `specmint create`."""

    def test_create_from_local_source(self, tmp_path: Path) -> None:
        """Test creating a package from a Markdown file."""
        source = tmp_path / "guide.md"
        source.write_text("# Installation\n\nRun init.\n\n## Theming\n\nCSS variables.\n")
        out = tmp_path / "out"

        result = CliRunner().invoke(
            main,
            ["create", "--domain", "shadcn-ui", "--source", str(source), "--output", str(out)],
        )

        assert result.exit_code == 0, result.output
        doc = _read(out / "shadcn-ui-specialist-template.json5")
        assert doc["capabilities"]["tags"] == ["installation", "theming"]
        assert (out / "README.md").exists()

    def test_tiers_need_task(self, tmp_path: Path) -> None:
        """Test that --tiers without --base-task exits 1."""
        result = CliRunner().invoke(
            main, ["create", "--domain", "x", "--tiers", "--output", str(tmp_path)]
        )
        assert result.exit_code == 1
        assert "--base-task" in result.output

    @pytest.mark.parametrize("scenario", ["default", "model_specific", "prompt_strategy"])
    def test_tiers_reject_reserved_scenario(self, tmp_path: Path, scenario: str) -> None:
        """Test that a scenario named after a reserved prompts key exits 1."""
        out = tmp_path / "out"
        result = CliRunner().invoke(
            main,
            [
                "create",
                "--domain",
                "x",
                "--tiers",
                "--base-task",
                "Set up",
                "--scenario",
                scenario,
                "--output",
                str(out),
            ],
        )

        assert result.exit_code == 1
        assert "reserved" in result.output
        assert not out.exists()

    def test_enrich_without_key_still_creates(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that --enrich without credentials warns and continues."""
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        result = CliRunner().invoke(
            main, ["create", "--domain", "prisma", "--enrich", "--output", str(tmp_path)]
        )

        assert result.exit_code == 0, result.output
        assert "ANTHROPIC_API_KEY" in result.output
        assert (tmp_path / "prisma-specialist-template.json5").exists()
