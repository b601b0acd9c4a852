"""
Version information for the Catalog & Order Engine.

Single source of truth: pyproject.toml
Runtime access via importlib.metadata with fallback.
"""

from __future__ import annotations

import os
import subprocess
import sys
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from typing import Any

DISTRIBUTION_NAME = "catalog-order-engine"

# Fallback version if package metadata unavailable (dev mode)
_FALLBACK_VERSION = "0.1.0"


def get_version() -> str:
    """Get the package version from metadata or fallback."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _FALLBACK_VERSION


VERSION = get_version()


@lru_cache(maxsize=1)
def get_git_info() -> dict[str, str | None]:
    """
    Get git commit info (cached for performance).

    GIT_COMMIT / GIT_BRANCH build args take priority over the local checkout.

    Returns:
        dict with commit hash, branch name, and source
    """
    commit = os.environ.get("GIT_COMMIT")
    if commit:
        return {"commit": commit[:8], "branch": os.environ.get("GIT_BRANCH"), "source": "env"}

    try:
        commit = subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=5,
        ).strip()
        branch = subprocess.check_output(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=5,
        ).strip()
        return {"commit": commit, "branch": branch, "source": "git"}
    except (OSError, subprocess.SubprocessError):
        return {"commit": None, "branch": None, "source": None}


def get_version_info() -> dict[str, Any]:
    """
    Get version information for the /version endpoint.

    Returns:
        dict with version, python_version and git info
    """
    git = get_git_info()
    return {
        "name": DISTRIBUTION_NAME,
        "version": VERSION,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "git_commit": git.get("commit"),
        "git_branch": git.get("branch"),
        "environment": os.environ.get("ENVIRONMENT", "development"),
    }
