"""Unit tests for client app version gating"""

import pytest
from forecast_gateway.domain.versions import min_version_check, should_show_available_to_spend


@pytest.mark.parametrize(
    "app_version,device_type,expected",
    [
        ("2.12.2", "ios", True),
        ("2.13.0", "android", True),
        ("2.9.10", "ios", False),
        (None, "ios", False),
        ("not-a-version", "ios", False),
        (None, "web", True),
        ("1.0.0", "admin_web", True),
    ],
)
def test_min_version_check(app_version, device_type, expected):
    assert min_version_check(app_version, device_type, "2.12.2") is expected


def test_versions_compare_numerically():
    """2.10.0 is newer than 2.9.0 even though it sorts lower as text"""
    assert min_version_check("2.10.0", "ios", "2.9.0") is True


def test_users_without_stored_version_see_available_to_spend():
    assert should_show_available_to_spend(None, None, has_stored_version=False) is True


def test_old_clients_do_not_see_available_to_spend():
    assert should_show_available_to_spend("2.11.0", "android") is False
    assert should_show_available_to_spend("2.12.2", "android") is True


@pytest.mark.parametrize("app_version", ["2.13", "v2.12.2", "2.12.2.1", "02.12.2"])
def test_non_semantic_versions_rejected(app_version):
    assert min_version_check(app_version, "ios", "2.12.2") is False


def test_semantic_version_with_build_metadata():
    assert min_version_check("2.12.3+481", "android", "2.12.2") is True
