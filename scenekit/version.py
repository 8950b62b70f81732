"""
SceneKit Version Information
Central version management for the SceneKit project.
"""

from typing import Dict, Optional, Union

# Semantic Versioning: MAJOR.MINOR.PATCH
VERSION = "0.4.0"

VERSION_INFO: Dict[str, Union[int, Optional[str]]] = {
    "major": 0,
    "minor": 4,
    "patch": 0,
    "pre_release": None,  # e.g., "alpha", "beta", "rc1"
    "build": None
}

APP_NAME = "SceneKit"


def get_version() -> str:
    """Get the current version string.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return VERSION


def get_full_version() -> str:
    """Get version with pre-release and build info if available."""
    version = VERSION
    if VERSION_INFO["pre_release"]:
        version += f"-{VERSION_INFO['pre_release']}"
    if VERSION_INFO["build"]:
        version += f"+{VERSION_INFO['build']}"
    return version


def get_app_info() -> str:
    """Get application name and version, e.g. "SceneKit v0.4.0"."""
    return f"{APP_NAME} v{get_version()}"
