"""Client app version gating"""

import re
from typing import Optional

from packaging.version import InvalidVersion, Version

from forecast_gateway.config import settings

WEB_DEVICE_TYPES = ("web", "admin_web")

# Strict MAJOR.MINOR.PATCH, optional pre-release and build; rejects "2.13" and "v2.12.2"
_SEMVER = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


def min_version_check(app_version: Optional[str], device_type: Optional[str], minimum: str) -> bool:
    """Web clients always meet the minimum; native apps need a semantic version >= minimum"""
    if device_type in WEB_DEVICE_TYPES:
        return True

    if not app_version or not _SEMVER.match(app_version):
        return False

    try:
        return Version(app_version) >= Version(minimum)
    except InvalidVersion:
        return False


def should_show_available_to_spend(
    app_version: Optional[str],
    device_type: Optional[str],
    has_stored_version: bool = True,
) -> bool:
    """
    Whether the client can render the forecast ("available to spend").

    Users with no recorded app version are assumed to be new and on the
    latest release.
    """
    if not has_stored_version:
        return True
    return min_version_check(app_version, device_type, settings.available_to_spend_min_version)
