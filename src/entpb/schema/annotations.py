"""Typed annotation payloads attached to entities, fields and edges."""

from enum import Flag, auto
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainValidator, field_validator, model_validator

from entpb.descriptors.models import WireType

DEFAULT_PACKAGE_NAME = "entpb"


class MethodSet(Flag):
    """The standard service methods to generate for an entity."""

    CREATE = auto()
    GET = auto()
    UPDATE = auto()
    DELETE = auto()
    LIST = auto()
    BATCH_CREATE = auto()
    ALL = CREATE | GET | UPDATE | DELETE | LIST | BATCH_CREATE

    @classmethod
    def parse(cls, value: Any) -> "MethodSet":
        """Build a method set from a name ("all", "get"), a list of names, a MethodSet or its integer bitmask.

        An empty selection means every method, as does ``None`` or ``0``.

        Raises:
            ValueError: If a name or a bitmask does not denote methods
        """
        if isinstance(value, cls):
            return value if value else cls.ALL
        if value is None:
            return cls.ALL
        if isinstance(value, str):
            value = [value]
        if isinstance(value, int) and not isinstance(value, bool):
            if value < 0 or value & ~cls.ALL.value:
                raise ValueError(f"Method bitmask {value} does not denote a set of methods")
            methods = cls(value)
            return methods if methods else cls.ALL
        if not isinstance(value, list | tuple | set):
            raise ValueError(f"Methods must be a name or a list of names, got {type(value).__name__}")

        methods = cls(0)
        for name in value:
            if not isinstance(name, str):
                raise ValueError(f"Method names must be strings, got {name!r}")
            member = cls.__members__.get(name.strip().upper().replace("-", "_"))
            if member is None:
                raise ValueError(f"Unknown method '{name}'")
            methods |= member
        return methods if methods else cls.ALL


STANDARD_METHOD_ORDER: tuple[MethodSet, ...] = (
    MethodSet.CREATE,
    MethodSet.GET,
    MethodSet.UPDATE,
    MethodSet.DELETE,
    MethodSet.LIST,
    MethodSet.BATCH_CREATE,
)


class FieldAnnotation(BaseModel):
    """Explicit protobuf settings of a field or edge.

    A bare integer is accepted as shorthand for ``{"number": <int>}``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    number: int = Field(ge=1)
    type: WireType | None = None
    type_name: str | None = None
    skip: bool = False

    @model_validator(mode="before")
    @classmethod
    def accept_number_shorthand(cls, data: Any) -> Any:
        if isinstance(data, int) and not isinstance(data, bool):
            return {"number": data}
        return data


class EnumAnnotation(BaseModel):
    """Explicit value table of an enum field, in declaration order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    values: dict[str, int]

    @model_validator(mode="before")
    @classmethod
    def accept_bare_table(cls, data: Any) -> Any:
        if isinstance(data, dict) and "values" not in data:
            return {"values": data}
        return data

    @field_validator("values")
    @classmethod
    def validate_unique_numbers(cls, values: dict[str, int]) -> dict[str, int]:
        numbers = list(values.values())
        if len(numbers) != len(set(numbers)):
            raise ValueError("Enum values must map to unique numbers")
        return values


class PbField(BaseModel):
    """A synthetic field declared directly in configuration.

    When ``type_name`` is set the field is a message field, whatever ``wire_type`` says.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str
    number: int = Field(ge=1)
    wire_type: WireType | None = Field(default=None, alias="type")
    type_name: str | None = None
    repeated: bool = False

    @model_validator(mode="after")
    def validate_type(self) -> "PbField":
        if self.type_name:
            return self
        if self.wire_type is None:
            raise ValueError(f"Field '{self.name}' needs either a type or a type_name")
        if self.wire_type.is_named:
            raise ValueError(f"Field '{self.name}' of type {self.wire_type.value} needs a type_name")
        return self


ExtraField = PbField


class ExtraMethodSpec(BaseModel):
    """A custom RPC with explicit request and response fields."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str
    input_fields: tuple[PbField, ...] = Field(default=(), alias="input")
    output_fields: tuple[PbField, ...] = Field(default=(), alias="output")


class NamedMessageSpec(BaseModel):
    """A message derived from a field group of the entity, plus extra fields."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str
    source_group: str | None = Field(default=None, alias="group")
    extra_fields: tuple[PbField, ...] = ()
    skip_id: bool = False
    skip_edges: bool = False


class ServiceConfig(BaseModel):
    """Service generation settings of an entity."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    methods: Annotated[MethodSet, PlainValidator(MethodSet.parse)] = MethodSet.ALL
    block_name: str | None = None
    extra_methods: tuple[ExtraMethodSpec, ...] = ()


class MessageConfig(BaseModel):
    """Message generation settings of an entity."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    package_name: str = DEFAULT_PACKAGE_NAME
    named_messages: tuple[NamedMessageSpec, ...] = ()
