"""Synthesis of the six standard service methods of an entity."""

from collections.abc import Callable
from dataclasses import dataclass, field

from entpb import log
from entpb.config import GeneratorSettings
from entpb.descriptors.models import (
    EnumDescriptor,
    EnumValueDescriptor,
    FieldDescriptor,
    MessageDescriptor,
    MethodDescriptor,
    WireType,
)
from entpb.descriptors.types import TypeMapper
from entpb.errors import UnsupportedIDTypeError
from entpb.naming import plural, snake
from entpb.schema.annotations import MethodSet
from entpb.schema.models import Entity, FieldType

EMPTY_TYPE = "google.protobuf.Empty"

VIEW_ENUM = EnumDescriptor(
    name="View",
    values=(
        EnumValueDescriptor(name="VIEW_UNSPECIFIED", number=0),
        EnumValueDescriptor(name="BASIC", number=1),
        EnumValueDescriptor(name="WITH_EDGE_IDS", number=2),
    ),
)


@dataclass(frozen=True)
class MethodResources:
    """A method descriptor and the messages synthesized for it."""

    method: MethodDescriptor
    messages: list[MessageDescriptor] = field(default_factory=list)


def _is_paginated_id_type(id_type: FieldType) -> bool:
    return id_type.is_integer or id_type in (FieldType.UUID, FieldType.STRING)


class StandardMethodSynthesizer:
    """Synthesizes the request/response messages and method descriptors of the standard methods.

    Request and response field numbers are fixed per method; they never derive from the
    entity's own field numbers, which live in the entity message.

    Args:
        entity: The entity the methods operate on
        settings: Limits documented on List and BatchCreate
    """

    def __init__(self, entity: Entity, settings: GeneratorSettings | None = None) -> None:
        self.entity = entity
        self.settings = settings or GeneratorSettings()
        self.type_mapper = TypeMapper(entity.name)

        self._synthesizers: dict[MethodSet, Callable[[], MethodResources]] = {
            MethodSet.CREATE: self.create,
            MethodSet.GET: self.get,
            MethodSet.UPDATE: self.update,
            MethodSet.DELETE: self.delete,
            MethodSet.LIST: self.list,
            MethodSet.BATCH_CREATE: self.batch_create,
        }

    @property
    def entity_name(self) -> str:
        return self.entity.name

    @property
    def plural_name(self) -> str:
        return plural(self.entity.name)

    def synthesize(self, method: MethodSet) -> MethodResources:
        """Synthesize a single standard method.

        Raises:
            ValueError: If ``method`` is not exactly one standard method
        """
        synthesizer = self._synthesizers.get(method)
        if synthesizer is None:
            raise ValueError(f"unknown method {method!r}")
        log.debug(f"Synthesizing {method.name} method for '{self.entity_name}'")
        return synthesizer()

    def get(self) -> MethodResources:
        request = MessageDescriptor(
            name=f"Get{self.entity_name}Request",
            fields=(
                self._id_field(),
                FieldDescriptor(name="view", number=2, wire_type=WireType.ENUM, type_name=VIEW_ENUM.name),
            ),
            nested_enums=(VIEW_ENUM,),
        )
        method = MethodDescriptor(name=f"Get{self.entity_name}", input_type=request.name, output_type=self.entity_name)
        return MethodResources(method, [request])

    def create(self) -> MethodResources:
        request = self.create_request()
        method = MethodDescriptor(
            name=f"Create{self.entity_name}", input_type=request.name, output_type=self.entity_name
        )
        return MethodResources(method, [request])

    def update(self) -> MethodResources:
        request = MessageDescriptor(name=f"Update{self.entity_name}Request", fields=(self._entity_field(),))
        method = MethodDescriptor(
            name=f"Update{self.entity_name}", input_type=request.name, output_type=self.entity_name
        )
        return MethodResources(method, [request])

    def delete(self) -> MethodResources:
        request = MessageDescriptor(name=f"Delete{self.entity_name}Request", fields=(self._id_field(),))
        method = MethodDescriptor(name=f"Delete{self.entity_name}", input_type=request.name, output_type=EMPTY_TYPE)
        return MethodResources(method, [request])

    def list(self) -> MethodResources:
        """Synthesize the paginated List method.

        Raises:
            UnsupportedIDTypeError: If the entity's ID is not an integer, UUID or string
        """
        id_type = self.entity.id.type
        if not _is_paginated_id_type(id_type):
            raise UnsupportedIDTypeError(
                f"list method does not support id type '{id_type.value}'",
                entity=self.entity_name,
                element=f"List{self.entity_name}",
            )

        request = MessageDescriptor(
            name=f"List{self.entity_name}Request",
            fields=(
                FieldDescriptor(name="page_size", number=1, wire_type=WireType.INT32),
                FieldDescriptor(name="page_token", number=2, wire_type=WireType.STRING),
                FieldDescriptor(name="view", number=3, wire_type=WireType.ENUM, type_name=VIEW_ENUM.name),
            ),
            nested_enums=(VIEW_ENUM,),
        )
        response = MessageDescriptor(
            name=f"List{self.entity_name}Response",
            fields=(
                FieldDescriptor(
                    name=f"{snake(self.entity_name)}_list",
                    number=1,
                    wire_type=WireType.MESSAGE,
                    type_name=self.entity_name,
                    repeated=True,
                ),
                FieldDescriptor(name="next_page_token", number=2, wire_type=WireType.STRING),
            ),
        )
        method = MethodDescriptor(
            name=f"List{self.entity_name}",
            input_type=request.name,
            output_type=response.name,
            description=f"Page size is capped at {self.settings.max_page_size} entries.",
        )
        return MethodResources(method, [request, response])

    def batch_create(self) -> MethodResources:
        # The batch request refers to Create's request message, so it is synthesized here
        # whether or not the Create method itself is enabled.
        create_request = self.create_request()

        request = MessageDescriptor(
            name=f"BatchCreate{self.plural_name}Request",
            fields=(
                FieldDescriptor(
                    name="requests",
                    number=1,
                    wire_type=WireType.MESSAGE,
                    type_name=create_request.name,
                    repeated=True,
                ),
            ),
        )
        response = MessageDescriptor(
            name=f"BatchCreate{self.plural_name}Response",
            fields=(
                FieldDescriptor(
                    name=f"{snake(self.plural_name)}_list",
                    number=1,
                    wire_type=WireType.MESSAGE,
                    type_name=self.entity_name,
                    repeated=True,
                ),
            ),
        )
        method = MethodDescriptor(
            name=f"BatchCreate{self.plural_name}",
            input_type=request.name,
            output_type=response.name,
            description=f"At most {self.settings.max_batch_create_size} requests are accepted per batch.",
        )
        return MethodResources(method, [create_request, request, response])

    def create_request(self) -> MessageDescriptor:
        """The ``Create<Entity>Request`` message shared by Create and BatchCreate."""
        return MessageDescriptor(name=f"Create{self.entity_name}Request", fields=(self._entity_field(),))

    def _entity_field(self) -> FieldDescriptor:
        return FieldDescriptor(
            name=snake(self.entity_name),
            number=1,
            wire_type=WireType.MESSAGE,
            type_name=self.entity_name,
        )

    def _id_field(self) -> FieldDescriptor:
        return self.type_mapper.id_descriptor(self.entity.id)
