from collections.abc import Sequence

from entpb import log
from entpb.descriptors.methods import MethodResources
from entpb.descriptors.models import FieldDescriptor, MessageDescriptor, MethodDescriptor, WireType
from entpb.descriptors.validation import ensure_unique_fields
from entpb.schema.annotations import ExtraMethodSpec, PbField


def pb_field_descriptor(pb_field: PbField) -> FieldDescriptor:
    """Build the descriptor of a field declared in configuration.

    A type name always makes the field a message field, even if a scalar type was given too.
    """
    if pb_field.type_name:
        wire_type, type_name = WireType.MESSAGE, pb_field.type_name
    else:
        # PbField guarantees a scalar wire type when no type name is set.
        wire_type, type_name = pb_field.wire_type or WireType.STRING, None

    return FieldDescriptor(
        name=pb_field.name,
        number=pb_field.number,
        wire_type=wire_type,
        type_name=type_name,
        repeated=pb_field.repeated,
    )


def _build_message(name: str, pb_fields: Sequence[PbField], entity: str | None) -> MessageDescriptor:
    fields = [pb_field_descriptor(pb_field) for pb_field in pb_fields]
    ensure_unique_fields(fields, entity=entity, message=name)
    return MessageDescriptor(name=name, fields=tuple(fields))


def synthesize_extra_method(spec: ExtraMethodSpec, entity: str | None = None) -> MethodResources:
    """Synthesize ``<Name>Request``, ``<Name>Response`` and the ``<Name>`` method of a custom RPC.

    Field names and numbers are kept verbatim.

    Args:
        spec: The declared method
        entity: Name of the entity declaring the method, for error context

    Returns:
        The method descriptor with its request and response messages

    Raises:
        DuplicateFieldNumberError: If two request fields or two response fields share a number
    """
    log.debug(f"Synthesizing extra method '{spec.name}'")

    request = _build_message(f"{spec.name}Request", spec.input_fields, entity)
    response = _build_message(f"{spec.name}Response", spec.output_fields, entity)

    method = MethodDescriptor(name=spec.name, input_type=request.name, output_type=response.name)
    return MethodResources(method, [request, response])
