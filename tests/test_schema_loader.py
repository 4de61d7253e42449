from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from entpb.descriptors.models import WireType
from entpb.errors import AnnotationDecodeError
from entpb.schema.annotations import FieldAnnotation, MethodSet, ServiceConfig
from entpb.schema.loader import build_schema_graph, decode_annotation, load_schema
from entpb.schema.models import Edge, FieldType, SchemaGraph


class TestLoadSchema:
    """Test suite for loading entity schemas from YAML."""

    def test_zero_schema(self, zero_schema: SchemaGraph) -> None:
        """Test that entities, fields, edges and annotations are decoded."""
        assert [entity.name for entity in zero_schema.entities] == ["User", "Pet", "Tag", "AuditLog"]

        user = zero_schema.entity("User")
        assert user.package_name == "zero"
        assert user.service is not None
        assert user.service.block_name == "Zero"
        assert user.service.methods == MethodSet.ALL
        assert [method.name for method in user.service.extra_methods] == ["Ping"]

        status = user.lookup("status")
        assert status is not None and not isinstance(status, Edge)
        assert status.type == FieldType.ENUM
        assert status.enum_values == ("pending", "active")
        assert status.enum_annotation is not None
        assert status.enum_annotation.values == {"pending": 1, "active": 2}

        password_hash = user.lookup("password_hash")
        assert password_hash is not None and password_hash.skipped
        assert user.field_groups["profile"].fields == ("user_name", "status", "pet")

        pet = zero_schema.entity("Pet")
        assert pet.service is not None
        assert pet.service.methods == MethodSet.GET | MethodSet.LIST | MethodSet.BATCH_CREATE

        assert zero_schema.entity("Tag").id.type == FieldType.STRING
        assert zero_schema.entity("AuditLog").service is None

    def test_unknown_entity(self, zero_schema: SchemaGraph) -> None:
        with pytest.raises(KeyError):
            zero_schema.entity("Nope")

    def test_empty_document(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_schema(path) == SchemaGraph()

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- User\n- Pet\n")
        with pytest.raises(TypeError, match="mapping"):
            load_schema(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("entities: [\n")
        with pytest.raises(yaml.YAMLError):
            load_schema(path)

    def test_unknown_annotation(self) -> None:
        raw = {"entities": [{"name": "User", "annotations": {"openapi": {}}}]}
        with pytest.raises(AnnotationDecodeError, match="openapi"):
            build_schema_graph(raw)

    def test_malformed_field_annotation(self) -> None:
        """Test that a malformed field annotation is reported with its entity and field."""
        raw = {
            "entities": [
                {
                    "name": "User",
                    "fields": [{"name": "points", "type": "uint", "annotations": {"field": {"number": 0}}}],
                }
            ]
        }
        with pytest.raises(AnnotationDecodeError) as exc_info:
            build_schema_graph(raw)

        assert exc_info.value.entity == "User"
        assert exc_info.value.element == "points"

    def test_duplicate_member_names(self) -> None:
        raw = {
            "entities": [
                {
                    "name": "User",
                    "fields": [{"name": "pet", "type": "string"}],
                    "edges": [{"name": "pet", "target": "Pet"}],
                }
            ]
        }
        with pytest.raises(ValidationError, match="duplicate"):
            build_schema_graph(raw)

    def test_duplicate_entities(self) -> None:
        with pytest.raises(ValidationError, match="unique"):
            build_schema_graph({"entities": [{"name": "User"}, {"name": "User"}]})


class TestDecodeAnnotation:
    """Test suite for decoding individual annotation payloads."""

    def test_number_shorthand(self) -> None:
        assert decode_annotation(FieldAnnotation, 7, entity="User") == FieldAnnotation(number=7)

    def test_explicit_type(self) -> None:
        annotation = decode_annotation(FieldAnnotation, {"number": 3, "type": "int32"}, entity="User")
        assert annotation.type == WireType.INT32

    def test_empty_service_payload(self) -> None:
        assert decode_annotation(ServiceConfig, None, entity="User").methods == MethodSet.ALL

    def test_integer_bitmask(self) -> None:
        annotation = decode_annotation(ServiceConfig, {"methods": 3}, entity="User")
        assert annotation.methods == MethodSet.CREATE | MethodSet.GET

    @pytest.mark.parametrize(
        "payload",
        [
            {"methods": ["get", "purge"]},
            {"methods": 1.5},
            {"methods": 128},
            {"block": "Zero"},
        ],
    )
    def test_invalid_service_payload(self, payload: dict[str, object]) -> None:
        with pytest.raises(AnnotationDecodeError) as exc_info:
            decode_annotation(ServiceConfig, payload, entity="User")
        assert str(exc_info.value).startswith("User: unable to decode ServiceConfig annotation")
