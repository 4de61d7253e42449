from entpb import log
from entpb.descriptors.extra import pb_field_descriptor
from entpb.descriptors.groups import resolve_group
from entpb.descriptors.models import EnumDescriptor, FieldDescriptor, MessageDescriptor
from entpb.descriptors.types import TypeMapper
from entpb.descriptors.validation import ensure_no_enum_shadowing, ensure_unique_fields
from entpb.errors import FieldNumberCollisionError
from entpb.schema.annotations import NamedMessageSpec
from entpb.schema.models import Edge, Entity


class NamedMessageComposer:
    """Composes independently named messages from an entity's field groups and extra fields.

    Args:
        entity: The entity owning the field groups
    """

    def __init__(self, entity: Entity) -> None:
        self.entity = entity
        self.type_mapper = TypeMapper(entity.name)

    def compose_all(self) -> list[MessageDescriptor]:
        """Compose every named message declared by the entity's message configuration."""
        if self.entity.message is None:
            return []
        return [self.compose(spec) for spec in self.entity.message.named_messages]

    def compose(self, spec: NamedMessageSpec) -> MessageDescriptor:
        """Compose the message ``spec.name``.

        Fields come in this order: the entity ID (unless ``skip_id``), the fields of the source
        group (without edges when ``skip_edges``), then the extra fields with their own numbers.

        Raises:
            UnknownGroupError: If the source group does not exist
            FieldNumberCollisionError: If an extra field reuses a number already in the message
            DuplicateFieldNumberError: If group fields, or extra fields among themselves, share a number
        """
        log.debug(f"Composing named message '{spec.name}' for '{self.entity.name}'")

        fields: list[FieldDescriptor] = []
        enums: list[EnumDescriptor] = []

        if not spec.skip_id:
            fields.append(self.type_mapper.id_descriptor(self.entity.id))

        if spec.source_group is not None:
            for member in resolve_group(self.entity.field_groups, spec.source_group, self.entity):
                if member.skipped:
                    continue
                if isinstance(member, Edge):
                    if spec.skip_edges:
                        continue
                    fields.append(self.type_mapper.edge_descriptor(member))
                    continue
                descriptor, enum = self.type_mapper.field_descriptor(member)
                fields.append(descriptor)
                if enum is not None:
                    enums.append(enum)

        ensure_unique_fields(fields, entity=self.entity.name, message=spec.name)

        taken = {field.number: field.name for field in fields}
        extra_fields = [pb_field_descriptor(extra) for extra in spec.extra_fields]
        for extra in extra_fields:
            if extra.number in taken:
                raise FieldNumberCollisionError(
                    f"extra field '{extra.name}' reuses field number {extra.number} of field '{taken[extra.number]}'",
                    entity=self.entity.name,
                    element=spec.name,
                )
        ensure_unique_fields(extra_fields, entity=self.entity.name, message=spec.name)
        fields.extend(extra_fields)
        ensure_unique_fields(fields, entity=self.entity.name, message=spec.name)
        ensure_no_enum_shadowing(fields, enums, entity=self.entity.name, message=spec.name)

        return MessageDescriptor(name=spec.name, fields=tuple(fields), nested_enums=tuple(enums))
