from entpb import log
from entpb.descriptors.models import EnumDescriptor, FieldDescriptor, MessageDescriptor
from entpb.descriptors.types import ID_FIELD_NAME, TypeMapper
from entpb.descriptors.validation import ensure_no_enum_shadowing, ensure_unique_fields
from entpb.errors import TypeMappingError
from entpb.schema.models import Entity


def build_entity_message(entity: Entity) -> MessageDescriptor:
    """Build the message describing the entity itself.

    The message holds ``id = 1``, then every field and every edge that is not skipped,
    each under its annotated number. Enum fields contribute nested enums.

    Raises:
        MissingFieldAnnotationError: If a field or edge has no explicit number
        TypeMappingError: If a field type cannot be mapped, or a nested enum shadows a referenced message type
        DuplicateFieldNumberError: If two fields share a number
    """
    mapper = TypeMapper(entity.name)
    fields: list[FieldDescriptor] = [mapper.id_descriptor(entity.id)]
    enums: list[EnumDescriptor] = []

    if entity.lookup(ID_FIELD_NAME) is not None:
        raise TypeMappingError("the name 'id' is reserved for the entity ID", entity=entity.name, element=ID_FIELD_NAME)

    for field in entity.fields:
        if field.skipped:
            log.debug(f"Skipping field '{entity.name}.{field.name}'")
            continue
        descriptor, enum = mapper.field_descriptor(field)
        fields.append(descriptor)
        if enum is not None:
            enums.append(enum)

    for edge in entity.edges:
        if edge.skipped:
            log.debug(f"Skipping edge '{entity.name}.{edge.name}'")
            continue
        fields.append(mapper.edge_descriptor(edge))

    ensure_unique_fields(fields, entity=entity.name, message=entity.name)
    ensure_no_enum_shadowing(fields, enums, entity=entity.name, message=entity.name)

    return MessageDescriptor(name=entity.name, fields=tuple(fields), nested_enums=tuple(enums))
