"""
Unit tests for the external package check.
"""

from unittest.mock import patch

from web.src.services.external_packages import check_external_packages, is_importable


class TestExternalPackages:
    """Test package availability reporting."""

    def test_installed_package(self):
        assert is_importable("pymongo")

    def test_missing_package(self):
        assert not is_importable("mr_travels_missing_pkg")

    def test_invalid_name(self):
        """Test malformed names count as unavailable."""
        assert not is_importable("")

    def test_report_keeps_order(self):
        results = check_external_packages(["pymongo", "mr_travels_missing_pkg", "jinja2"])

        assert list(results) == ["pymongo", "mr_travels_missing_pkg", "jinja2"]
        assert results == {"pymongo": True, "mr_travels_missing_pkg": False, "jinja2": True}

    def test_missing_packages_logged(self):
        with patch("web.src.services.external_packages.logger") as mock_logger:
            check_external_packages(["pymongo", "mr_travels_missing_pkg"])

        mock_logger.warning.assert_called_once_with(
            "external_packages_missing",
            packages=["mr_travels_missing_pkg"]
        )
