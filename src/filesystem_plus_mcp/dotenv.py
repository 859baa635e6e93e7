"""Load settings from ``~/.config/filesystem-plus-mcp/.env``.

Desktop MCP hosts often launch servers with a bare environment or with
unexpanded placeholders such as ``FS_PLUS_READONLY_DIRS=${FS_PLUS_READONLY_DIRS}``.
Values from the file fill those gaps; real process values always win.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "filesystem-plus-mcp" / ".env"

_LINE = re.compile(r"^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _needs_value(key: str, current: str | None) -> bool:
    """True when *current* is missing, blank, or a placeholder for *key* itself."""
    if current is None:
        return True
    value = _unquote(current.strip()).strip()
    if not value:
        return True
    return value in (f"${key}", f"${{{key}}}") or (
        value.startswith(f"${{{key}:-") and value.endswith("}")
    )


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines from *path*.

    Blank lines, ``#`` comments and an ``export`` prefix are allowed; values
    may be single- or double-quoted. No variable expansion. A missing file
    yields an empty dict.
    """
    if not path.is_file():
        return {}
    parsed: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        match = _LINE.match(line)
        if match:
            parsed[match["key"]] = _unquote(match["value"].strip())
    return parsed


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Inject values from *path* (default :data:`DEFAULT_ENV_PATH`) into ``os.environ``.

    Returns:
        The variables that were injected.
    """
    injected = {
        key: value
        for key, value in parse_dotenv(path or DEFAULT_ENV_PATH).items()
        if _needs_value(key, os.environ.get(key))
    }
    os.environ.update(injected)
    return injected
