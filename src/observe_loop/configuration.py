"""Locate and read the ``[tool.observe_loop]`` table of ``pyproject.toml``.

Sources are tried in order: an explicit path, the file named by the
``OBSERVE_LOOP_CONFIG`` environment variable and the working directory.
Paths may point at the ``pyproject.toml`` itself or at its directory.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping as ABCMapping
from pathlib import Path
from typing import Any, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


CONFIG_ENV_VAR = "OBSERVE_LOOP_CONFIG"
_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "observe_loop"


def _plain(value: Any) -> Any:
    """Copy TOML tables into plain ``dict`` objects, recursing into arrays."""

    if isinstance(value, ABCMapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _pyproject_for(candidate: Path) -> Optional[Path]:
    candidate = candidate.expanduser()
    if candidate.name == _PROJECT_FILENAME:
        return candidate.resolve(strict=False)
    # Any other file name (``settings.toml``) is not a project file.
    if candidate.suffix:
        return None
    return (candidate / _PROJECT_FILENAME).resolve(strict=False)


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Return the ``[tool.observe_loop]`` table and the file it came from.

    ``None`` is returned when ``path`` does not lead to a ``pyproject.toml``
    or the file has no such table.
    """

    pyproject = _pyproject_for(path)
    if pyproject is None or not pyproject.is_file():
        return None
    with pyproject.open("rb") as handle:
        document = tomllib.load(handle)

    section = document.get("tool", {})
    section = section.get(_TOOL_SECTION) if isinstance(section, ABCMapping) else None
    if not isinstance(section, ABCMapping):
        return None
    return _plain(section), pyproject


def _candidate_paths(path: Optional[Path]) -> Iterator[Path]:
    seen: set[Path] = set()
    env_config = os.environ.get(CONFIG_ENV_VAR)
    for candidate in (path, Path(env_config) if env_config else None, Path.cwd()):
        if candidate is None:
            continue
        resolved = candidate.expanduser().resolve(strict=False)
        if resolved not in seen:
            seen.add(resolved)
            yield resolved


def load_config(path: Optional[Path] = None) -> dict[str, Any]:
    """Resolve configuration from ``path``, the environment or the CWD.

    The first source carrying a ``[tool.observe_loop]`` table wins.  The
    returned mapping records its origin under ``_config_path``.
    """

    for candidate in _candidate_paths(path):
        loaded = load_project_config(candidate)
        if loaded is None:
            continue
        payload, source = loaded
        payload["_config_path"] = str(source)
        return payload
    return {"_config_path": None}


__all__ = ["CONFIG_ENV_VAR", "load_config", "load_project_config"]
