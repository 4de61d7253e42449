"""Entity schema model and its annotations."""

from .annotations import (
    STANDARD_METHOD_ORDER,
    EnumAnnotation,
    ExtraField,
    ExtraMethodSpec,
    FieldAnnotation,
    MessageConfig,
    MethodSet,
    NamedMessageSpec,
    PbField,
    ServiceConfig,
)
from .loader import load_schema
from .models import Edge, Entity, EntityField, FieldGroup, FieldGroups, FieldType, IDField, SchemaGraph

__all__ = [
    "STANDARD_METHOD_ORDER",
    "Edge",
    "Entity",
    "EntityField",
    "EnumAnnotation",
    "ExtraField",
    "ExtraMethodSpec",
    "FieldAnnotation",
    "FieldGroup",
    "FieldGroups",
    "FieldType",
    "IDField",
    "MessageConfig",
    "MethodSet",
    "NamedMessageSpec",
    "PbField",
    "SchemaGraph",
    "ServiceConfig",
    "load_schema",
]
