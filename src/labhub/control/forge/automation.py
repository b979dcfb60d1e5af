"""Automation policy - decides whether status-check driven termination applies.

Pure function, no I/O.
"""

from labhub.core.models import InstanceCustomizationUrls


def automation_enabled(customization_urls: InstanceCustomizationUrls | None) -> bool:
    """Automation is enabled iff a non-empty status-check endpoint is configured."""
    if customization_urls is None:
        return False
    return bool(customization_urls.status_check)


def automation_termination_label(
    customization_urls: InstanceCustomizationUrls | None,
) -> str | None:
    """Termination-selector value proposed for an instance.

    Returns:
        "true" when automation is enabled, None when no value is proposed
        (customization absent, or status_check missing/empty).
    """
    if automation_enabled(customization_urls):
        return "true"
    return None
