"""Reading and writing template documents."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import json5
import yaml

from specmint.errors import TemplateLoadError
from specmint.templates.base import SpecialistTemplate

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def load_document(path: Path) -> dict[str, Any]:
    """Parse a JSON5/JSONC or YAML template document into a dict.

    Raises TemplateLoadError when the file is missing, unreadable, malformed
    or not a mapping at the top level.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateLoadError(path, e.strerror or str(e)) from e

    try:
        if path.suffix in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json5.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise TemplateLoadError(path, f"malformed document: {e}") from e

    if not isinstance(data, dict):
        raise TemplateLoadError(path, "top-level value must be an object")
    return data


def load_template(path: Path) -> SpecialistTemplate:
    """Load a template file into a SpecialistTemplate."""
    data = load_document(path)
    return SpecialistTemplate.from_dict(data, source=path)


def dumps_document(data: dict[str, Any], fmt: str = "json5") -> str:
    """Serialize a document as JSON5 or YAML text."""
    if fmt == "yaml":
        return yaml.safe_dump(
            data, default_flow_style=False, sort_keys=False, allow_unicode=True
        )
    return json5.dumps(data, indent=2, quote_keys=True, ensure_ascii=False) + "\n"


def write_text_atomic(path: Path, content: str) -> None:
    """Write `content` to `path` via a temp file and rename.

    Readers never observe a partially written file. Parent directories
    are created as needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s", path)


def write_document(path: Path, data: dict[str, Any], fmt: str | None = None) -> None:
    """Atomically write a document, inferring the format from the suffix."""
    if fmt is None:
        fmt = "yaml" if path.suffix in YAML_SUFFIXES else "json5"
    write_text_atomic(path, dumps_document(data, fmt))


def save_template(template: SpecialistTemplate, path: Path, fmt: str | None = None) -> None:
    """Atomically write a template to `path`."""
    write_document(path, template.to_dict(), fmt)
