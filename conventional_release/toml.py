"""pyproject.toml reading utilities.

Uses tomlkit, the same parser used to read and write project files elsewhere
in the toolchain, so documents are parsed with identical semantics.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit

TOOL_TABLE = "conventional-release"


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text())


def get_tool_config(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract the [tool.conventional-release] table as plain Python values.

    Dashed keys are converted to underscores so that ``tag-prefix`` and
    ``tag_prefix`` are both accepted.

    Returns:
        The settings found, or an empty dict when the table is absent.
    """
    table = doc.get("tool", {}).get(TOOL_TABLE)
    if table is None:
        return {}
    return {str(key).replace("-", "_"): value for key, value in table.unwrap().items()}
