"""Instance and Template models.

Only the fields the label forge and the state synchronizer read are
modelled; unknown fields in wire payloads are ignored.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from labhub.core.domain.instance import Phase


class InstanceIdentity(BaseModel):
    """(namespace, name) pair identifying an instance."""

    namespace: str
    name: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class ObjectMeta(BaseModel):
    name: str
    namespace: str = ""
    labels: dict[str, str] | None = None


class GenericRef(BaseModel):
    """Reference to another object by name (and optionally namespace)."""

    name: str
    namespace: str = ""


class Environment(BaseModel):
    """Single runnable unit of a template."""

    name: str = ""
    persistent: bool = False


class TemplateSpec(BaseModel):
    workspace_ref: GenericRef
    environment_list: list[Environment] = Field(default_factory=list)


class Template(BaseModel):
    metadata: ObjectMeta
    spec: TemplateSpec


class InstanceCustomizationUrls(BaseModel):
    """Optional per-instance customization endpoints.

    status_check: endpoint polled to decide automatic termination.
    """

    status_check: str | None = None
    content_origin: str | None = None
    content_destination: str | None = None


class InstanceSpec(BaseModel):
    template: GenericRef
    tenant: GenericRef
    running: bool = True
    pretty_name: str | None = None
    customization_urls: InstanceCustomizationUrls | None = None


class InstanceStatus(BaseModel):
    phase: Phase = Phase.UNKNOWN
    ip: str | None = None
    url: str | None = None
    node_name: str | None = None

    @field_validator("phase", mode="before")
    @classmethod
    def _coerce_phase(cls, value: object) -> Phase:
        return Phase.parse(value)


class Instance(BaseModel):
    """Provisioned lab environment (last known snapshot)."""

    metadata: ObjectMeta
    spec: InstanceSpec
    status: InstanceStatus | None = None

    @property
    def identity(self) -> InstanceIdentity:
        return InstanceIdentity(namespace=self.metadata.namespace, name=self.metadata.name)

    @property
    def phase(self) -> Phase:
        return self.status.phase if self.status else Phase.UNKNOWN

    @property
    def display_name(self) -> str:
        return self.spec.pretty_name or self.metadata.name
