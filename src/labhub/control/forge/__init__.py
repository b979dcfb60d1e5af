"""Label forge - deterministic label computation (no I/O, no state)."""

from labhub.control.forge.automation import (
    automation_enabled,
    automation_termination_label,
)
from labhub.control.forge.labels import (
    INSTANCE_LABEL,
    INSTANCE_SUBMISSION_SELECTOR_LABEL,
    INSTANCE_TERMINATION_SELECTOR_LABEL,
    LABEL_PREFIX,
    MANAGED_BY_LABEL,
    PERSISTENT_LABEL,
    RESERVED_LABELS,
    TEMPLATE_LABEL,
    TENANT_LABEL,
    WORKSPACE_LABEL,
    bool_label,
    instance_automation_labels_on_termination,
    instance_labels,
    instance_object_labels,
    instance_selector_labels,
    match_labels,
)

__all__ = [
    "LABEL_PREFIX",
    "MANAGED_BY_LABEL",
    "WORKSPACE_LABEL",
    "TEMPLATE_LABEL",
    "PERSISTENT_LABEL",
    "INSTANCE_LABEL",
    "TENANT_LABEL",
    "INSTANCE_TERMINATION_SELECTOR_LABEL",
    "INSTANCE_SUBMISSION_SELECTOR_LABEL",
    "RESERVED_LABELS",
    "automation_enabled",
    "automation_termination_label",
    "bool_label",
    "instance_labels",
    "instance_object_labels",
    "instance_selector_labels",
    "instance_automation_labels_on_termination",
    "match_labels",
]
