"""Basic file IO helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

STRUCTURED_SUFFIXES = (".yaml", ".yml", ".json")


def read_structured_file(path: Path) -> Any:
    """Parse a YAML or JSON document; JSON is read through the YAML loader."""

    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def read_text_file(path: Path) -> str:
    """Return the file contents as UTF-8 text.

    Errors (missing file, permissions, undecodable bytes) propagate to the caller.
    """

    with path.open("r", encoding="utf-8") as handle:
        return handle.read()
