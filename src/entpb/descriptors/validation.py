from collections.abc import Iterable

from entpb.descriptors.models import EnumDescriptor, FieldDescriptor, WireType
from entpb.errors import DuplicateFieldNameError, DuplicateFieldNumberError, TypeMappingError


def ensure_unique_fields(fields: Iterable[FieldDescriptor], *, entity: str | None, message: str) -> None:
    """Check that no two fields of ``message`` share a field number or a name.

    Raises:
        DuplicateFieldNumberError: Naming the first pair of fields sharing a number
        DuplicateFieldNameError: Naming the first field name used twice
    """
    numbers: dict[int, str] = {}
    names: set[str] = set()
    for field in fields:
        if field.number in numbers:
            raise DuplicateFieldNumberError(
                f"fields '{numbers[field.number]}' and '{field.name}' share field number {field.number}",
                entity=entity,
                element=message,
            )
        if field.name in names:
            raise DuplicateFieldNameError(f"field name '{field.name}' is used twice", entity=entity, element=message)
        numbers[field.number] = field.name
        names.add(field.name)


def ensure_no_enum_shadowing(
    fields: Iterable[FieldDescriptor], enums: Iterable[EnumDescriptor], *, entity: str | None, message: str
) -> None:
    """Check that no nested enum of ``message`` is named like a message type its fields reference.

    Inside the message, the nested enum would shadow the message type in .proto source.

    Raises:
        TypeMappingError: Naming the field whose message type is shadowed
    """
    enum_names = {enum.name for enum in enums}
    for field in fields:
        if field.wire_type is WireType.MESSAGE and field.type_name in enum_names:
            raise TypeMappingError(
                f"field '{field.name}' refers to message type '{field.type_name}', "
                f"which is shadowed by the nested enum of the same name",
                entity=entity,
                element=message,
            )
