"""Unit tests for version lookup."""

from importlib.metadata import PackageNotFoundError
from unittest.mock import patch

from infrastructure import version as version_module


class TestGetVersion:
    def test_prefers_installed_distribution(self):
        with patch.object(version_module, "version", return_value="9.9.9") as lookup:
            assert version_module.get_version() == "9.9.9"

        lookup.assert_called_once_with("gatehouse-api")

    def test_source_checkout_reads_pyproject(self):
        with patch.object(
            version_module, "version", side_effect=PackageNotFoundError("gatehouse-api")
        ):
            assert version_module.get_version() == "0.1.0"
