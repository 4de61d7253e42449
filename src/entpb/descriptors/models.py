"""Pydantic models for protobuf descriptor structures."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class WireType(str, Enum):
    BOOL = "bool"
    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT = "float"
    DOUBLE = "double"
    BYTES = "bytes"
    ENUM = "enum"
    MESSAGE = "message"

    @property
    def is_named(self) -> bool:
        """Whether fields of this type must reference a named enum or message type."""
        return self in (WireType.ENUM, WireType.MESSAGE)


class FieldDescriptor(BaseModel):
    """Represents a field in a protobuf message."""

    model_config = ConfigDict(frozen=True)

    name: str
    number: int = Field(ge=1)
    wire_type: WireType
    type_name: str | None = None
    repeated: bool = False
    description: str | None = None

    @model_validator(mode="after")
    def validate_type_name(self) -> "FieldDescriptor":
        if self.wire_type.is_named and not self.type_name:
            raise ValueError(f"Field '{self.name}' of type {self.wire_type.value} requires a type name")
        if not self.wire_type.is_named and self.type_name:
            raise ValueError(f"Field '{self.name}' of type {self.wire_type.value} cannot carry a type name")
        return self

    @property
    def proto_type(self) -> str:
        """The type as written in a .proto file."""
        return self.type_name or self.wire_type.value


class EnumValueDescriptor(BaseModel):
    """Represents a value in a protobuf enum."""

    model_config = ConfigDict(frozen=True)

    name: str
    number: int


class EnumDescriptor(BaseModel):
    """Represents a protobuf enum type."""

    model_config = ConfigDict(frozen=True)

    name: str
    values: tuple[EnumValueDescriptor, ...]

    @field_validator("values")
    @classmethod
    def validate_unique_values(cls, values: tuple[EnumValueDescriptor, ...]) -> tuple[EnumValueDescriptor, ...]:
        numbers = [v.number for v in values]
        if len(numbers) != len(set(numbers)):
            raise ValueError("Enum values must have unique numbers")
        names = [v.name for v in values]
        if len(names) != len(set(names)):
            raise ValueError("Enum values must have unique names")
        return values


class MessageDescriptor(BaseModel):
    """Represents a protobuf message type."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[FieldDescriptor, ...] = ()
    nested_enums: tuple[EnumDescriptor, ...] = ()
    description: str | None = None

    @field_validator("fields")
    @classmethod
    def validate_unique_fields(cls, fields: tuple[FieldDescriptor, ...]) -> tuple[FieldDescriptor, ...]:
        numbers = [f.number for f in fields]
        if len(numbers) != len(set(numbers)):
            raise ValueError("Fields must have unique numbers")
        names = [f.name for f in fields]
        if len(names) != len(set(names)):
            raise ValueError("Fields must have unique names")
        return fields

    def field(self, name: str) -> FieldDescriptor:
        """Return the field called ``name``.

        Raises:
            KeyError: If the message has no such field
        """
        for field_descriptor in self.fields:
            if field_descriptor.name == name:
                return field_descriptor
        raise KeyError(f"Message '{self.name}' has no field '{name}'")


class MethodDescriptor(BaseModel):
    """Represents an RPC method of a protobuf service."""

    model_config = ConfigDict(frozen=True)

    name: str
    input_type: str
    output_type: str
    description: str | None = None


class ServiceDescriptor(BaseModel):
    """Represents a protobuf service."""

    model_config = ConfigDict(frozen=True)

    name: str
    methods: tuple[MethodDescriptor, ...] = ()

    @field_validator("methods")
    @classmethod
    def validate_unique_methods(cls, methods: tuple[MethodDescriptor, ...]) -> tuple[MethodDescriptor, ...]:
        names = [m.name for m in methods]
        if len(names) != len(set(names)):
            raise ValueError("Service methods must have unique names")
        return methods

    @property
    def method_names(self) -> list[str]:
        return [method.name for method in self.methods]


class FileDescriptor(BaseModel):
    """Represents a complete .proto file."""

    model_config = ConfigDict(frozen=True)

    name: str
    package: str
    syntax: str = "proto3"
    dependencies: tuple[str, ...] = ()
    messages: tuple[MessageDescriptor, ...] = ()
    services: tuple[ServiceDescriptor, ...] = ()

    def message(self, name: str) -> MessageDescriptor:
        """Return the message called ``name``.

        Raises:
            KeyError: If the file has no such message
        """
        for message in self.messages:
            if message.name == name:
                return message
        raise KeyError(f"File '{self.name}' has no message '{name}'")
