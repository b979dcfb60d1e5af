"""Label forging for instances and the objects derived from them.

Every function here is pure: the input label set is never mutated and a
new dict is always returned. Applying instance_labels to its own output
reports no change, so a reconcile loop that writes only on change settles
after a single write.
"""

from collections.abc import Mapping

from labhub.control.forge.automation import automation_termination_label
from labhub.core.models import Instance, InstanceCustomizationUrls, Template

LABEL_PREFIX = "crownlabs.polito.it/"

MANAGED_BY_LABEL = LABEL_PREFIX + "managed-by"
WORKSPACE_LABEL = LABEL_PREFIX + "workspace"
TEMPLATE_LABEL = LABEL_PREFIX + "template"
PERSISTENT_LABEL = LABEL_PREFIX + "persistent"
INSTANCE_LABEL = LABEL_PREFIX + "instance"
TENANT_LABEL = LABEL_PREFIX + "tenant"
INSTANCE_TERMINATION_SELECTOR_LABEL = LABEL_PREFIX + "instance-termination-selector"
INSTANCE_SUBMISSION_SELECTOR_LABEL = LABEL_PREFIX + "instance-submission-selector"

MANAGED_BY_INSTANCE = "instance"

RESERVED_LABELS = frozenset({
    MANAGED_BY_LABEL,
    WORKSPACE_LABEL,
    TEMPLATE_LABEL,
    PERSISTENT_LABEL,
    INSTANCE_LABEL,
    TENANT_LABEL,
    INSTANCE_TERMINATION_SELECTOR_LABEL,
    INSTANCE_SUBMISSION_SELECTOR_LABEL,
})


def bool_label(value: bool) -> str:
    """Render a boolean the way label values store it."""
    return "true" if value else "false"


def instance_labels(
    labels: Mapping[str, str] | None,
    template: Template,
    customization_urls: InstanceCustomizationUrls | None = None,
) -> tuple[dict[str, str], bool]:
    """Labels of an Instance object.

    Args:
        labels: Current labels (None when the object has none)
        template: Template the instance is created from
        customization_urls: Optional instance customization

    Returns:
        (labels, changed): changed is True iff a key was added or a value
        differs from the input.
    """
    result = dict(labels or {})
    changed = False

    def update(key: str, value: str) -> None:
        nonlocal changed
        if result.get(key) != value:
            result[key] = value
            changed = True

    update(MANAGED_BY_LABEL, MANAGED_BY_INSTANCE)
    update(WORKSPACE_LABEL, template.spec.workspace_ref.name)
    update(TEMPLATE_LABEL, template.metadata.name)
    update(
        PERSISTENT_LABEL,
        bool_label(any(env.persistent for env in template.spec.environment_list)),
    )

    # An explicit termination value (e.g. forced on submission) always wins
    if INSTANCE_TERMINATION_SELECTOR_LABEL not in result:
        if (value := automation_termination_label(customization_urls)) is not None:
            update(INSTANCE_TERMINATION_SELECTOR_LABEL, value)

    return result, changed


def instance_object_labels(
    labels: Mapping[str, str] | None,
    instance: Instance,
) -> dict[str, str]:
    """Labels of an object owned by (derived from) an Instance."""
    result = dict(labels or {})
    result[MANAGED_BY_LABEL] = MANAGED_BY_INSTANCE
    result.update(instance_selector_labels(instance))
    return result


def instance_selector_labels(instance: Instance) -> dict[str, str]:
    """Labels selecting the objects that belong to an Instance."""
    return {
        INSTANCE_LABEL: instance.metadata.name,
        TEMPLATE_LABEL: instance.spec.template.name,
        TENANT_LABEL: instance.spec.tenant.name,
    }


def instance_automation_labels_on_termination(
    labels: Mapping[str, str] | None,
) -> dict[str, str]:
    """Labels of an Instance terminated by its submitter.

    Disables automatic termination and raises the submission marker,
    overwriting any previous value of those two keys.
    """
    result = dict(labels or {})
    result[INSTANCE_TERMINATION_SELECTOR_LABEL] = bool_label(False)
    result[INSTANCE_SUBMISSION_SELECTOR_LABEL] = bool_label(True)
    return result


def match_labels(labels: Mapping[str, str] | None, selector: Mapping[str, str]) -> bool:
    """Check if every selector pair is present in labels."""
    current = labels or {}
    return all(current.get(key) == value for key, value in selector.items())
