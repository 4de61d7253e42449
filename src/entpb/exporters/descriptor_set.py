"""Conversion of file descriptors to google.protobuf descriptor messages."""

from collections.abc import Iterable

from google.protobuf import descriptor_pb2

from entpb.descriptors.models import FieldDescriptor, FileDescriptor, MessageDescriptor, WireType

WIRE_TYPE_TO_PROTO_TYPE = {
    WireType.BOOL: descriptor_pb2.FieldDescriptorProto.TYPE_BOOL,
    WireType.STRING: descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
    WireType.INT32: descriptor_pb2.FieldDescriptorProto.TYPE_INT32,
    WireType.INT64: descriptor_pb2.FieldDescriptorProto.TYPE_INT64,
    WireType.UINT32: descriptor_pb2.FieldDescriptorProto.TYPE_UINT32,
    WireType.UINT64: descriptor_pb2.FieldDescriptorProto.TYPE_UINT64,
    WireType.FLOAT: descriptor_pb2.FieldDescriptorProto.TYPE_FLOAT,
    WireType.DOUBLE: descriptor_pb2.FieldDescriptorProto.TYPE_DOUBLE,
    WireType.BYTES: descriptor_pb2.FieldDescriptorProto.TYPE_BYTES,
    WireType.ENUM: descriptor_pb2.FieldDescriptorProto.TYPE_ENUM,
    WireType.MESSAGE: descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE,
}


def qualify_type_name(type_name: str, package: str, message: MessageDescriptor | None = None) -> str:
    """Fully qualify a type name as protoc does in descriptors.

    Well-known ``google.protobuf`` types keep their own package, enums nested in ``message``
    are scoped to it, everything else lives in ``package``. Pass ``message`` only for enum
    fields: a message field never refers to a nested enum.
    """
    if type_name.startswith("google.protobuf."):
        return f".{type_name}"
    if message is not None and any(enum.name == type_name for enum in message.nested_enums):
        return f".{package}.{message.name}.{type_name}"
    return f".{package}.{type_name}"


def _field_proto(
    field: FieldDescriptor, package: str, message: MessageDescriptor
) -> descriptor_pb2.FieldDescriptorProto:
    field_proto = descriptor_pb2.FieldDescriptorProto(
        name=field.name,
        number=field.number,
        type=WIRE_TYPE_TO_PROTO_TYPE[field.wire_type],
        label=(
            descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED
            if field.repeated
            else descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL
        ),
        json_name=_json_name(field.name),
    )
    if field.type_name:
        scope = message if field.wire_type is WireType.ENUM else None
        field_proto.type_name = qualify_type_name(field.type_name, package, scope)
    return field_proto


def _json_name(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in tail)


def _message_proto(message: MessageDescriptor, package: str) -> descriptor_pb2.DescriptorProto:
    message_proto = descriptor_pb2.DescriptorProto(name=message.name)
    for enum in message.nested_enums:
        enum_proto = message_proto.enum_type.add(name=enum.name)
        for value in enum.values:
            enum_proto.value.add(name=value.name, number=value.number)
    message_proto.field.extend([_field_proto(field, package, message) for field in message.fields])
    return message_proto


def to_file_descriptor_proto(file_descriptor: FileDescriptor) -> descriptor_pb2.FileDescriptorProto:
    """Convert a file descriptor to a ``FileDescriptorProto``."""
    package = file_descriptor.package
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=file_descriptor.name,
        package=package,
        syntax=file_descriptor.syntax,
    )
    file_proto.dependency.extend(file_descriptor.dependencies)
    file_proto.message_type.extend([_message_proto(message, package) for message in file_descriptor.messages])

    for service in file_descriptor.services:
        service_proto = file_proto.service.add(name=service.name)
        for method in service.methods:
            service_proto.method.add(
                name=method.name,
                input_type=qualify_type_name(method.input_type, package),
                output_type=qualify_type_name(method.output_type, package),
            )
    return file_proto


def to_descriptor_set(file_descriptors: Iterable[FileDescriptor]) -> descriptor_pb2.FileDescriptorSet:
    """Bundle file descriptors into a ``FileDescriptorSet``."""
    descriptor_set = descriptor_pb2.FileDescriptorSet()
    descriptor_set.file.extend([to_file_descriptor_proto(file_descriptor) for file_descriptor in file_descriptors])
    return descriptor_set
