from pathlib import Path
from typing import Any, TypeVar, cast

import yaml
from pydantic import BaseModel, ValidationError

from entpb import log
from entpb.errors import AnnotationDecodeError
from entpb.schema.annotations import EnumAnnotation, FieldAnnotation, MessageConfig, ServiceConfig
from entpb.schema.models import SchemaGraph

ModelT = TypeVar("ModelT", bound=BaseModel)

ENTITY_ANNOTATIONS: dict[str, type[BaseModel]] = {
    "service": ServiceConfig,
    "message": MessageConfig,
}

FIELD_ANNOTATIONS: dict[str, tuple[str, type[BaseModel]]] = {
    "field": ("annotation", FieldAnnotation),
    "enum": ("enum_annotation", EnumAnnotation),
}


def decode_annotation(model: type[ModelT], payload: Any, *, entity: str, element: str | None = None) -> ModelT:
    """Decode a raw annotation payload into its typed configuration.

    Args:
        model: The annotation model to validate against
        payload: The raw payload (mapping, scalar shorthand or None)
        entity: Name of the annotated entity, for error context
        element: Name of the annotated field or edge, for error context

    Returns:
        The validated annotation

    Raises:
        AnnotationDecodeError: If the payload does not match the annotation model
    """
    if payload is None:
        payload = {}
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in e.errors()
        )
        raise AnnotationDecodeError(
            f"unable to decode {model.__name__} annotation ({problems})", entity=entity, element=element
        ) from e


def _decode_member(raw: dict[str, Any], entity: str) -> dict[str, Any]:
    member = dict(raw)
    annotations = member.pop("annotations", None) or {}
    element = str(member.get("name", "<unnamed>"))
    if not isinstance(annotations, dict):
        raise AnnotationDecodeError("annotations must be a mapping", entity=entity, element=element)

    for key, payload in annotations.items():
        if key not in FIELD_ANNOTATIONS:
            raise AnnotationDecodeError(f"unknown annotation '{key}'", entity=entity, element=element)
        attribute, model = FIELD_ANNOTATIONS[key]
        member[attribute] = decode_annotation(model, payload, entity=entity, element=element)
    return member


def _decode_entity(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise TypeError(f"Entity definitions must be mappings, got {type(raw).__name__}")

    entity = dict(raw)
    name = str(entity.get("name", "<unnamed>"))
    annotations = entity.pop("annotations", None) or {}
    if not isinstance(annotations, dict):
        raise AnnotationDecodeError("annotations must be a mapping", entity=name)

    for key, payload in annotations.items():
        model = ENTITY_ANNOTATIONS.get(key)
        if model is None:
            raise AnnotationDecodeError(f"unknown annotation '{key}'", entity=name)
        entity[key] = decode_annotation(model, payload, entity=name)

    entity["fields"] = [_decode_member(field, name) for field in entity.get("fields") or []]
    entity["edges"] = [_decode_member(edge, name) for edge in entity.get("edges") or []]
    return entity


def build_schema_graph(raw: dict[str, Any]) -> SchemaGraph:
    """Build a schema graph from an already parsed schema document.

    Raises:
        TypeError: If the document does not have the expected structure
        AnnotationDecodeError: If an annotation payload is malformed
        ValidationError: If the entity definitions are invalid
    """
    entities = raw.get("entities") or []
    if not isinstance(entities, list):
        raise TypeError(f"'entities' must be a list, got {type(entities).__name__}")

    return SchemaGraph.model_validate({"entities": [_decode_entity(entity) for entity in entities]})


def load_schema(schema_path: Path) -> SchemaGraph:
    """
    Load an entity schema from a YAML file.

    Args:
        schema_path: Path to the YAML schema document

    Returns:
        The resolved schema graph

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        TypeError: If the YAML root is not a mapping.
        AnnotationDecodeError: If an annotation payload is malformed.
        ValidationError: If the entity definitions are invalid.
    """
    raw: Any
    with schema_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug(f"Loaded schema document from {schema_path}")

    if raw is None:
        return SchemaGraph()

    if not isinstance(raw, dict):
        raise TypeError(f"Schema root must be a mapping (YAML object), got {type(raw).__name__}")

    graph = build_schema_graph(cast(dict[str, Any], raw))
    log.debug(f"Schema defines {len(graph.entities)} entities")
    return graph
