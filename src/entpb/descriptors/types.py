from dataclasses import dataclass

from caseconverter import macrocase, pascalcase

from entpb.descriptors.models import EnumDescriptor, EnumValueDescriptor, FieldDescriptor, WireType
from entpb.errors import MissingFieldAnnotationError, TypeMappingError
from entpb.schema.annotations import FieldAnnotation
from entpb.schema.models import Edge, EntityField, FieldType, IDField

ID_FIELD_NAME = "id"
ID_FIELD_NUMBER = 1

TIMESTAMP_TYPE = "google.protobuf.Timestamp"

FIELD_TYPE_TO_WIRE_TYPE = {
    FieldType.BOOL: WireType.BOOL,
    FieldType.STRING: WireType.STRING,
    FieldType.INT32: WireType.INT32,
    FieldType.INT: WireType.INT64,
    FieldType.INT64: WireType.INT64,
    FieldType.UINT32: WireType.UINT32,
    FieldType.UINT: WireType.UINT64,
    FieldType.UINT64: WireType.UINT64,
    FieldType.FLOAT32: WireType.FLOAT,
    FieldType.FLOAT64: WireType.DOUBLE,
    FieldType.BYTES: WireType.BYTES,
    FieldType.UUID: WireType.BYTES,
}

FIELD_TYPE_TO_MESSAGE = {
    FieldType.TIME: TIMESTAMP_TYPE,
}

WRAPPER_TYPES = {
    WireType.BOOL: "google.protobuf.BoolValue",
    WireType.STRING: "google.protobuf.StringValue",
    WireType.INT32: "google.protobuf.Int32Value",
    WireType.INT64: "google.protobuf.Int64Value",
    WireType.UINT32: "google.protobuf.UInt32Value",
    WireType.UINT64: "google.protobuf.UInt64Value",
    WireType.FLOAT: "google.protobuf.FloatValue",
    WireType.DOUBLE: "google.protobuf.DoubleValue",
    WireType.BYTES: "google.protobuf.BytesValue",
}


@dataclass(frozen=True)
class MappedType:
    """The protobuf type of a schema field, plus the enum it defines, if any."""

    wire_type: WireType
    type_name: str | None = None
    enum: EnumDescriptor | None = None


class TypeMapper:
    """Maps the fields, edges and ID of one entity to protobuf field descriptors.

    Args:
        entity_name: Name of the entity whose fields are mapped, used for error context
    """

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name

    def map_type(
        self,
        field_type: FieldType,
        override: FieldAnnotation | None = None,
        *,
        element: str | None = None,
    ) -> tuple[WireType, str | None]:
        """Map a semantic field type to a wire type and type name.

        An explicit ``type_name`` override always yields a message field; an explicit
        ``type`` override replaces the mapped wire type.

        Raises:
            TypeMappingError: If the type has no protobuf equivalent
        """
        if override is not None and override.type_name:
            return WireType.MESSAGE, override.type_name

        if override is not None and override.type is not None:
            if override.type.is_named:
                raise TypeMappingError(
                    f"explicit type {override.type.value} requires a type_name",
                    entity=self.entity_name,
                    element=element,
                )
            return override.type, None

        if field_type in FIELD_TYPE_TO_WIRE_TYPE:
            return FIELD_TYPE_TO_WIRE_TYPE[field_type], None

        if field_type in FIELD_TYPE_TO_MESSAGE:
            return WireType.MESSAGE, FIELD_TYPE_TO_MESSAGE[field_type]

        raise TypeMappingError(
            f"field type '{field_type.value}' has no protobuf equivalent",
            entity=self.entity_name,
            element=element,
        )

    def map_field(self, field: EntityField) -> MappedType:
        """Map an entity field, building its enum descriptor when it is an enum field.

        Raises:
            TypeMappingError: If the type is unsupported or an enum field misses its value table
        """
        if field.type == FieldType.ENUM and not (field.annotation and field.annotation.type_name):
            enum = self.build_enum(field)
            return MappedType(WireType.ENUM, enum.name, enum)

        wire_type, type_name = self.map_type(field.type, field.annotation, element=field.name)
        if field.optional and type_name is None and wire_type in WRAPPER_TYPES:
            return MappedType(WireType.MESSAGE, WRAPPER_TYPES[wire_type])
        return MappedType(wire_type, type_name)

    def build_enum(self, field: EntityField) -> EnumDescriptor:
        """Build the enum descriptor of an enum field from its value table.

        Values keep the table's declaration order and are prefixed with the field name.
        ``<FIELD>_UNSPECIFIED = 0`` comes first unless the table already maps a value to 0.

        Raises:
            TypeMappingError: If the value table is missing or does not cover a declared value
        """
        if field.enum_annotation is None or not field.enum_annotation.values:
            raise TypeMappingError("enum field requires a value table", entity=self.entity_name, element=field.name)

        table = field.enum_annotation.values
        missing = [value for value in field.enum_values if value not in table]
        if missing:
            raise TypeMappingError(
                f"enum value table does not cover values {missing}",
                entity=self.entity_name,
                element=field.name,
            )

        prefix = macrocase(field.name)
        values = []
        if 0 not in table.values():
            values.append(EnumValueDescriptor(name=f"{prefix}_UNSPECIFIED", number=0))
        values.extend(
            EnumValueDescriptor(name=f"{prefix}_{macrocase(value)}", number=number) for value, number in table.items()
        )

        return EnumDescriptor(name=pascalcase(field.name), values=tuple(values))

    def field_descriptor(self, field: EntityField) -> tuple[FieldDescriptor, EnumDescriptor | None]:
        """Build the descriptor of an entity field, together with its enum if it defines one.

        Raises:
            MissingFieldAnnotationError: If the field has no explicit field number
            TypeMappingError: If the field type cannot be mapped
        """
        number = self._field_number(field.annotation, field.name)
        mapped = self.map_field(field)
        descriptor = FieldDescriptor(
            name=field.name,
            number=number,
            wire_type=mapped.wire_type,
            type_name=mapped.type_name,
        )
        return descriptor, mapped.enum

    def edge_descriptor(self, edge: Edge) -> FieldDescriptor:
        """Build the descriptor of an edge: a message field typed by the target entity.

        Non-unique edges are repeated.

        Raises:
            MissingFieldAnnotationError: If the edge has no explicit field number
        """
        number = self._field_number(edge.annotation, edge.name)
        type_name = edge.annotation.type_name if edge.annotation and edge.annotation.type_name else edge.target
        return FieldDescriptor(
            name=edge.name,
            number=number,
            wire_type=WireType.MESSAGE,
            type_name=type_name,
            repeated=not edge.unique,
        )

    def id_descriptor(self, id_field: IDField) -> FieldDescriptor:
        """Build the ``id = 1`` descriptor of the entity's ID.

        Raises:
            TypeMappingError: If the ID type cannot be mapped
        """
        wire_type, type_name = self.map_type(id_field.type, element=ID_FIELD_NAME)
        return FieldDescriptor(name=ID_FIELD_NAME, number=ID_FIELD_NUMBER, wire_type=wire_type, type_name=type_name)

    def _field_number(self, annotation: FieldAnnotation | None, element: str) -> int:
        if annotation is None:
            raise MissingFieldAnnotationError(
                "missing field annotation with an explicit field number", entity=self.entity_name, element=element
            )
        return annotation.number
