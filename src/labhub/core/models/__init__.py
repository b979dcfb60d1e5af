"""Object models shared by the forge and the synchronizer.

Models are plain pydantic models; persistence belongs to the orchestration
platform.
"""

from labhub.core.models.event import ChangeEvent
from labhub.core.models.instance import (
    Environment,
    GenericRef,
    Instance,
    InstanceCustomizationUrls,
    InstanceIdentity,
    InstanceSpec,
    InstanceStatus,
    ObjectMeta,
    Template,
    TemplateSpec,
)

__all__ = [
    "ChangeEvent",
    "Environment",
    "GenericRef",
    "Instance",
    "InstanceCustomizationUrls",
    "InstanceIdentity",
    "InstanceSpec",
    "InstanceStatus",
    "ObjectMeta",
    "Template",
    "TemplateSpec",
]
