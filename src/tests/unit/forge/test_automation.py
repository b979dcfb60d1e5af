"""Tests for forge/automation.py."""

import pytest

from labhub.control.forge import automation_enabled, automation_termination_label
from labhub.core.models import InstanceCustomizationUrls


class TestAutomationPolicy:
    @pytest.mark.parametrize(
        "customization,expected",
        [
            (None, None),
            (InstanceCustomizationUrls(), None),
            (InstanceCustomizationUrls(status_check=""), None),
            (InstanceCustomizationUrls(content_origin="https://origin"), None),
            (InstanceCustomizationUrls(status_check="https://some/url"), "true"),
        ],
    )
    def test_termination_label(self, customization, expected):
        assert automation_termination_label(customization) == expected

    def test_enabled_matches_label(self):
        customization = InstanceCustomizationUrls(status_check="https://some/url")

        assert automation_enabled(customization) is True
        assert automation_enabled(None) is False
