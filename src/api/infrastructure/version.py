"""Gatehouse API version.

The ``gatehouse-api`` distribution metadata is authoritative. A source
checkout that was never installed reads the root pyproject.toml, three
levels above ``src/api/infrastructure``.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "gatehouse-api"
PYPROJECT_PATH = Path(__file__).resolve().parents[3] / "pyproject.toml"


def get_version() -> str:
    """Return the version reported in the OpenAPI document."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        with open(PYPROJECT_PATH, "rb") as f:
            return tomllib.load(f)["project"]["version"]


__version__ = get_version()
