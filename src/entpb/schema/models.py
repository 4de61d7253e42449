"""Resolved entity schema model consumed by the descriptor synthesizers."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from entpb.schema.annotations import EnumAnnotation, FieldAnnotation, MessageConfig, ServiceConfig


class FieldType(str, Enum):
    BOOL = "bool"
    TIME = "time"
    JSON = "json"
    UUID = "uuid"
    BYTES = "bytes"
    ENUM = "enum"
    STRING = "string"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT = "int"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT = "uint"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    OTHER = "other"

    @property
    def is_integer(self) -> bool:
        return self in INTEGER_TYPES


INTEGER_TYPES = frozenset(
    {
        FieldType.INT8,
        FieldType.INT16,
        FieldType.INT32,
        FieldType.INT,
        FieldType.INT64,
        FieldType.UINT8,
        FieldType.UINT16,
        FieldType.UINT32,
        FieldType.UINT,
        FieldType.UINT64,
    }
)


class EntityField(BaseModel):
    """A field of an entity with its constraints and protobuf annotations."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str
    type: FieldType
    unique: bool = False
    immutable: bool = False
    optional: bool = False
    enum_values: tuple[str, ...] = Field(default=(), alias="values")
    annotation: FieldAnnotation | None = None
    enum_annotation: EnumAnnotation | None = None

    @property
    def skipped(self) -> bool:
        return self.annotation is not None and self.annotation.skip


class Edge(BaseModel):
    """A relation from an entity to another entity."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    target: str
    unique: bool = False
    annotation: FieldAnnotation | None = None

    @property
    def skipped(self) -> bool:
        return self.annotation is not None and self.annotation.skip


class IDField(BaseModel):
    """The ID field of an entity. It always becomes protobuf field ``id = 1``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: FieldType = FieldType.INT


class FieldGroup(BaseModel):
    """A named, ordered subset of an entity's fields and edges."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    fields: tuple[str, ...]


FieldGroups = dict[str, FieldGroup]


class Entity(BaseModel):
    """A fully resolved entity: fields, edges, groups and its annotations."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    id: IDField = Field(default_factory=IDField)
    fields: tuple[EntityField, ...] = ()
    edges: tuple[Edge, ...] = ()
    field_groups: FieldGroups = Field(default_factory=dict)
    service: ServiceConfig | None = None
    message: MessageConfig | None = None

    @field_validator("field_groups", mode="before")
    @classmethod
    def accept_group_lists(cls, groups: Any) -> Any:
        if not isinstance(groups, dict):
            return groups
        return {
            name: {"name": name, "fields": members} if isinstance(members, list | tuple) else members
            for name, members in groups.items()
        }

    @model_validator(mode="after")
    def validate_unique_names(self) -> "Entity":
        names = [f.name for f in self.fields] + [e.name for e in self.edges]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Entity '{self.name}' declares duplicate field or edge names: {duplicates}")
        for group_name, group in self.field_groups.items():
            if group.name != group_name:
                raise ValueError(f"Field group '{group_name}' is registered under a different name '{group.name}'")
        return self

    @property
    def package_name(self) -> str | None:
        return self.message.package_name if self.message else None

    def lookup(self, name: str) -> EntityField | Edge | None:
        """Return the field or edge called ``name``, if any."""
        for field in self.fields:
            if field.name == name:
                return field
        for edge in self.edges:
            if edge.name == name:
                return edge
        return None


class SchemaGraph(BaseModel):
    """All entities of a schema, in declaration order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    entities: tuple[Entity, ...] = ()

    @field_validator("entities")
    @classmethod
    def validate_unique_entities(cls, entities: tuple[Entity, ...]) -> tuple[Entity, ...]:
        names = [e.name for e in entities]
        if len(names) != len(set(names)):
            raise ValueError("Entity names must be unique")
        return entities

    def entity(self, name: str) -> Entity:
        """Return the entity called ``name``.

        Raises:
            KeyError: If the schema has no such entity
        """
        for entity in self.entities:
            if entity.name == name:
                return entity
        raise KeyError(f"Schema has no entity '{name}'")
