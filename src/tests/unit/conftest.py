"""Shared factories for unit tests."""

from collections.abc import Callable

import pytest

from labhub.core.domain.instance import Phase
from labhub.core.models import (
    Environment,
    GenericRef,
    Instance,
    InstanceCustomizationUrls,
    InstanceSpec,
    InstanceStatus,
    ObjectMeta,
    Template,
    TemplateSpec,
)

INSTANCE_NAME = "kubernetes-0000"
INSTANCE_NAMESPACE = "tenant-tester"
TEMPLATE_NAME = "kubernetes"
TEMPLATE_NAMESPACE = "workspace-netgroup"
TENANT_NAME = "tester"
WORKSPACE_NAME = "netgroup"
STATUS_CHECK_URL = "https://some/url"


@pytest.fixture
def make_template() -> Callable[..., Template]:
    """Template factory."""

    def _make(
        name: str = TEMPLATE_NAME,
        workspace: str = WORKSPACE_NAME,
        environments: list[Environment] | None = None,
    ) -> Template:
        return Template(
            metadata=ObjectMeta(name=name, namespace=TEMPLATE_NAMESPACE),
            spec=TemplateSpec(
                workspace_ref=GenericRef(name=workspace),
                environment_list=environments or [],
            ),
        )

    return _make


@pytest.fixture
def make_instance() -> Callable[..., Instance]:
    """Instance factory."""

    def _make(
        name: str = INSTANCE_NAME,
        namespace: str = INSTANCE_NAMESPACE,
        phase: Phase | None = None,
        labels: dict[str, str] | None = None,
        status_check: str | None = None,
        tenant: str = TENANT_NAME,
        pretty_name: str | None = None,
    ) -> Instance:
        customization = (
            InstanceCustomizationUrls(status_check=status_check)
            if status_check is not None
            else None
        )
        return Instance(
            metadata=ObjectMeta(name=name, namespace=namespace, labels=labels),
            spec=InstanceSpec(
                template=GenericRef(name=TEMPLATE_NAME, namespace=TEMPLATE_NAMESPACE),
                tenant=GenericRef(name=tenant),
                pretty_name=pretty_name,
                customization_urls=customization,
            ),
            status=InstanceStatus(phase=phase) if phase is not None else None,
        )

    return _make


@pytest.fixture
def template(make_template: Callable[..., Template]) -> Template:
    return make_template()


@pytest.fixture
def instance(make_instance: Callable[..., Instance]) -> Instance:
    return make_instance()
