from dataclasses import dataclass, field

from entpb import log
from entpb.config import GeneratorSettings
from entpb.descriptors.dedupe import dedupe_messages
from entpb.descriptors.extra import synthesize_extra_method
from entpb.descriptors.methods import MethodResources, StandardMethodSynthesizer
from entpb.descriptors.models import MessageDescriptor, ServiceDescriptor
from entpb.descriptors.named import NamedMessageComposer
from entpb.errors import DuplicateMethodNameError, MissingServiceAnnotationError
from entpb.schema.annotations import STANDARD_METHOD_ORDER, ServiceConfig
from entpb.schema.models import Entity


@dataclass(frozen=True)
class ServiceResources:
    """The service of an entity and every message it needs, deduplicated."""

    service: ServiceDescriptor
    messages: list[MessageDescriptor] = field(default_factory=list)


class ServiceAssembler:
    """Assembles the service descriptor and message set of one entity.

    Args:
        entity: The entity to assemble the service for
        settings: Limits documented on the generated methods
    """

    def __init__(self, entity: Entity, settings: GeneratorSettings | None = None) -> None:
        self.entity = entity
        self.settings = settings or GeneratorSettings()

    def service_config(self) -> ServiceConfig:
        """The entity's service configuration.

        Raises:
            MissingServiceAnnotationError: If the entity has none
        """
        if self.entity.service is None:
            raise MissingServiceAnnotationError("entity has no service annotation", entity=self.entity.name)
        return self.entity.service

    def service_name(self) -> str:
        config = self.service_config()
        return config.block_name or f"{self.entity.name}Service"

    def assemble(self) -> ServiceResources:
        """Build the service and its messages.

        Standard methods come first, in the order Create, Get, Update, Delete, List, BatchCreate
        (filtered by the configured method set), followed by the extra methods in declared order.
        The messages of every method and every named message are deduplicated by name.

        Raises:
            MissingServiceAnnotationError: If the entity has no service annotation
            EntpbError: If any method or named message cannot be synthesized
        """
        config = self.service_config()
        log.debug(f"Assembling service for '{self.entity.name}' with methods {config.methods}")

        resources: list[MethodResources] = []
        standard = StandardMethodSynthesizer(self.entity, self.settings)
        for method in STANDARD_METHOD_ORDER:
            if method in config.methods:
                resources.append(standard.synthesize(method))

        for extra_method in config.extra_methods:
            resources.append(synthesize_extra_method(extra_method, entity=self.entity.name))

        method_names: set[str] = set()
        for resource in resources:
            if resource.method.name in method_names:
                raise DuplicateMethodNameError(
                    f"method '{resource.method.name}' is declared twice", entity=self.entity.name
                )
            method_names.add(resource.method.name)

        messages = [message for resource in resources for message in resource.messages]
        messages.extend(NamedMessageComposer(self.entity).compose_all())

        service = ServiceDescriptor(
            name=self.service_name(),
            methods=tuple(resource.method for resource in resources),
        )
        return ServiceResources(service, dedupe_messages(messages))


def assemble_service(entity: Entity, settings: GeneratorSettings | None = None) -> ServiceResources:
    """Assemble the service descriptor and message set of ``entity``."""
    return ServiceAssembler(entity, settings).assemble()
