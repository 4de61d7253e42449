"""Generation of protobuf file descriptors for every entity of a schema."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from entpb import log
from entpb.config import GeneratorSettings
from entpb.descriptors.dedupe import dedupe_messages
from entpb.descriptors.entity import build_entity_message
from entpb.descriptors.models import FileDescriptor, MessageDescriptor, MethodDescriptor, ServiceDescriptor
from entpb.descriptors.named import NamedMessageComposer
from entpb.descriptors.service import ServiceAssembler
from entpb.errors import DuplicateMethodNameError, EntpbError, TypeMappingError
from entpb.schema.annotations import DEFAULT_PACKAGE_NAME
from entpb.schema.models import Entity, SchemaGraph

_WELL_KNOWN_FILES = {
    "any.proto": ("Any",),
    "duration.proto": ("Duration",),
    "empty.proto": ("Empty",),
    "field_mask.proto": ("FieldMask",),
    "struct.proto": ("Struct", "Value", "ListValue", "NullValue"),
    "timestamp.proto": ("Timestamp",),
    "wrappers.proto": (
        "DoubleValue",
        "FloatValue",
        "Int64Value",
        "UInt64Value",
        "Int32Value",
        "UInt32Value",
        "BoolValue",
        "StringValue",
        "BytesValue",
    ),
}
WELL_KNOWN_IMPORTS = {
    f"google.protobuf.{name}": f"google/protobuf/{file}" for file, names in _WELL_KNOWN_FILES.items() for name in names
}


@dataclass(frozen=True)
class EntityError:
    """A failure to generate the descriptors of one entity."""

    entity: str
    error: EntpbError

    def __str__(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class EntityResources:
    """The messages and optional service generated for one entity."""

    entity: Entity
    messages: list[MessageDescriptor]
    service: ServiceDescriptor | None = None


@dataclass
class GenerationResult:
    """Generated files, plus the entities that could not be generated."""

    files: list[FileDescriptor] = field(default_factory=list)
    errors: list[EntityError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def file(self, package: str) -> FileDescriptor:
        """Return the file of ``package``.

        Raises:
            KeyError: If nothing was generated for the package
        """
        for file_descriptor in self.files:
            if file_descriptor.package == package:
                return file_descriptor
        raise KeyError(f"No file generated for package '{package}'")


def file_name(package: str) -> str:
    return f"{package}/{package}.proto"


def import_for(type_name: str) -> str | None:
    """The .proto import that defines ``type_name``, for well-known types."""
    return WELL_KNOWN_IMPORTS.get(type_name)


def collect_dependencies(messages: Iterable[MessageDescriptor], methods: Iterable[MethodDescriptor]) -> list[str]:
    """Sorted imports needed by the well-known types the messages and methods reference."""
    type_names: list[str] = []
    for message in messages:
        type_names.extend(f.type_name for f in message.fields if f.type_name)
    for method in methods:
        type_names.extend((method.input_type, method.output_type))

    return sorted({dependency for name in type_names if (dependency := import_for(name))})


class _PackageBuilder:
    def __init__(self, package: str) -> None:
        self.package = package
        self.messages: list[MessageDescriptor] = []
        self.services: dict[str, list[MethodDescriptor]] = {}

    def check_methods(self, entity: Entity, service: ServiceDescriptor) -> None:
        existing = {method.name for method in self.services.get(service.name, [])}
        for method in service.methods:
            if method.name in existing:
                raise DuplicateMethodNameError(
                    f"method '{method.name}' already exists in service '{service.name}'",
                    entity=entity.name,
                    element=method.name,
                )

    def add(self, resources: EntityResources) -> None:
        self.messages.extend(resources.messages)
        if resources.service is not None:
            self.services.setdefault(resources.service.name, []).extend(resources.service.methods)

    def build(self) -> FileDescriptor:
        messages = dedupe_messages(self.messages)
        services = [ServiceDescriptor(name=name, methods=tuple(methods)) for name, methods in self.services.items()]
        return FileDescriptor(
            name=file_name(self.package),
            package=self.package,
            dependencies=tuple(
                collect_dependencies(messages, (method for service in services for method in service.methods))
            ),
            messages=tuple(messages),
            services=tuple(services),
        )


class Generator:
    """Generates one file descriptor per protobuf package of a schema.

    Entities sharing a package share a file; services sharing a name within a package are
    merged. An entity that fails to generate is reported and left out, the others are
    unaffected.

    Args:
        graph: The resolved schema
        settings: Limits documented on the generated methods
    """

    def __init__(self, graph: SchemaGraph, settings: GeneratorSettings | None = None) -> None:
        self.graph = graph
        self.settings = settings or GeneratorSettings()

    def package_of(self, entity: Entity) -> str:
        return entity.package_name or DEFAULT_PACKAGE_NAME

    def generate_entity(self, entity: Entity) -> EntityResources:
        """Generate the entity message, its service (if annotated) and its named messages.

        Raises:
            EntpbError: If any descriptor of the entity cannot be synthesized
        """
        self._check_edges(entity)
        messages = [build_entity_message(entity)]

        if entity.service is None:
            log.debug(f"Entity '{entity.name}' has no service annotation, generating messages only")
            messages.extend(NamedMessageComposer(entity).compose_all())
            return EntityResources(entity, dedupe_messages(messages))

        resources = ServiceAssembler(entity, self.settings).assemble()
        messages.extend(resources.messages)
        return EntityResources(entity, dedupe_messages(messages), resources.service)

    def generate(self) -> GenerationResult:
        """Generate the file descriptors of every annotated entity."""
        result = GenerationResult()
        packages: dict[str, _PackageBuilder] = {}

        for entity in self.graph.entities:
            if entity.message is None and entity.service is None:
                log.debug(f"Entity '{entity.name}' has no protobuf annotations, skipping")
                continue

            builder = packages.setdefault(self.package_of(entity), _PackageBuilder(self.package_of(entity)))
            try:
                resources = self.generate_entity(entity)
                if resources.service is not None:
                    builder.check_methods(entity, resources.service)
            except EntpbError as e:
                log.debug(f"Generation failed for '{entity.name}': {e}")
                result.errors.append(EntityError(entity.name, e))
                continue

            builder.add(resources)
            log.debug(f"Generated {len(resources.messages)} messages for '{entity.name}'")

        result.files = [builder.build() for builder in packages.values() if builder.messages]
        return result

    def _check_edges(self, entity: Entity) -> None:
        package = self.package_of(entity)
        for edge in entity.edges:
            if edge.skipped or (edge.annotation is not None and edge.annotation.type_name):
                continue
            try:
                target = self.graph.entity(edge.target)
            except KeyError as e:
                raise TypeMappingError(
                    f"edge targets unknown entity '{edge.target}'", entity=entity.name, element=edge.name
                ) from e
            if self.package_of(target) != package:
                raise TypeMappingError(
                    f"edge targets entity '{edge.target}' of package '{self.package_of(target)}', "
                    f"cross-package edges are not supported",
                    entity=entity.name,
                    element=edge.name,
                )


def generate(graph: SchemaGraph, settings: GeneratorSettings | None = None) -> GenerationResult:
    """Generate the file descriptors of every annotated entity of ``graph``."""
    log.info(f"Generating protobuf descriptors for {len(graph.entities)} entities")
    result = Generator(graph, settings).generate()
    log.info(f"Generated {len(result.files)} files with {len(result.errors)} failing entities")
    return result
