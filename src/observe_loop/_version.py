"""Version lookup for observe-loop.

The version comes from ``PYTHON_SEMANTIC_RELEASE_VERSION`` while a release
is being cut, from the installed distribution metadata otherwise, and from
the newest ``CHANGELOG.md`` heading in a source checkout.
"""

import os
import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

_DISTRIBUTION = "observe-loop"
_RELEASE_ENV_VAR = "PYTHON_SEMANTIC_RELEASE_VERSION"
_CHANGELOG_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _changelog_version() -> str:
    # src/observe_loop/_version.py -> the checkout root is two levels up.
    for root in Path(__file__).resolve().parents[1:3]:
        changelog = root / "CHANGELOG.md"
        if not changelog.is_file():
            continue
        for line in changelog.read_text(encoding="utf-8").splitlines():
            match = _CHANGELOG_HEADING.match(line)
            if match:
                return match.group("version")
    raise RuntimeError(
        f"Unable to determine the {_DISTRIBUTION!r} version from package metadata "
        "or CHANGELOG.md."
    )


def _validated(raw_version: str) -> str:
    try:
        release = Version(raw_version).release
    except InvalidVersion as exc:
        raise RuntimeError(
            f"Invalid version string for {_DISTRIBUTION!r}: {raw_version!r}."
        ) from exc
    if len(release) != 3:
        raise RuntimeError(
            f"The {_DISTRIBUTION!r} version must follow MAJOR.MINOR.PATCH, "
            f"got {raw_version!r}."
        )
    return raw_version


def _load_version() -> str:
    raw_version = os.environ.get(_RELEASE_ENV_VAR)
    if not raw_version:
        try:
            raw_version = metadata.version(_DISTRIBUTION)
        except metadata.PackageNotFoundError:
            raw_version = _changelog_version()
    return _validated(raw_version)


__version__ = _load_version()

__all__ = ["__version__"]
