"""Version and build metadata shown in the About box and set on the QApplication.

The version comes from the installed distribution. Packaged builds can
override it and add the commit and date through ``SERVERDECK_*`` variables.
"""

from __future__ import annotations

import os
from importlib import metadata

DISTRIBUTION = "serverdeck"
DEV_VERSION = "0.0.0-dev"


def _installed_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return DEV_VERSION


def get_build_info() -> dict[str, str]:
    """Return ``version``, ``git_sha`` and ``build_date``.

    - SERVERDECK_VERSION overrides the distribution version
    - SERVERDECK_GIT_SHA: short git sha
    - SERVERDECK_BUILD_DATE: ISO date
    """
    return {
        "version": os.getenv("SERVERDECK_VERSION", "").strip() or _installed_version(),
        "git_sha": os.getenv("SERVERDECK_GIT_SHA", "").strip(),
        "build_date": os.getenv("SERVERDECK_BUILD_DATE", "").strip(),
    }


def get_version_string() -> str:
    info = get_build_info()
    extras = [part for part in (info["git_sha"], info["build_date"]) if part]
    if extras:
        return f"{info['version']} ({', '.join(extras)})"
    return info["version"]
