import pytest

from entpb.config import GeneratorSettings
from entpb.errors import DuplicateMethodNameError, TypeMappingError
from entpb.generator import Generator, collect_dependencies, file_name, generate, import_for
from entpb.schema.annotations import FieldAnnotation, MessageConfig, MethodSet, ServiceConfig
from entpb.schema.models import Edge, Entity, FieldType, SchemaGraph
from tests.conftest import make_field


class TestGenerator:
    """Test suite for generating file descriptors from a schema graph."""

    def test_zero_package(self, zero_graph: SchemaGraph) -> None:
        """Test that entities sharing a package and a block name share one file and one service."""
        result = generate(zero_graph)

        assert result.ok
        assert [f.name for f in result.files] == ["zero/zero.proto"]
        zero = result.file("zero")
        assert [service.name for service in zero.services] == ["Zero"]
        assert zero.services[0].method_names == [
            "CreateUser",
            "GetUser",
            "UpdateUser",
            "DeleteUser",
            "ListUser",
            "BatchCreateUsers",
            "CreatePet",
            "GetPet",
            "UpdatePet",
            "DeletePet",
            "ListPet",
            "BatchCreatePets",
        ]
        assert zero.dependencies == ("google/protobuf/empty.proto", "google/protobuf/timestamp.proto")

        names = [message.name for message in zero.messages]
        assert len(names) == len(set(names))
        assert names[0] == "User"
        assert "Pet" in names

    def test_entities_without_annotations_are_skipped(self) -> None:
        graph = SchemaGraph(entities=(Entity(name="AuditLog", fields=(make_field("action", FieldType.STRING, 2),)),))
        result = Generator(graph).generate()

        assert result.ok
        assert result.files == []

    def test_message_only_entity(self) -> None:
        entity = Entity(
            name="Tag",
            fields=(make_field("label", FieldType.STRING, 2),),
            message=MessageConfig(package_name="labels"),
        )
        resources = Generator(SchemaGraph(entities=(entity,))).generate_entity(entity)

        assert resources.service is None
        assert [message.name for message in resources.messages] == ["Tag"]

    def test_failing_entity_is_reported(self) -> None:
        """Test that a failing entity is collected as an error and the others still generate."""
        broken = Entity(name="Broken", fields=(make_field("payload", FieldType.JSON, 2),), service=ServiceConfig())
        fine = Entity(name="Fine", service=ServiceConfig(methods=MethodSet.GET))
        result = generate(SchemaGraph(entities=(broken, fine)))

        assert not result.ok
        assert [error.entity for error in result.errors] == ["Broken"]
        assert isinstance(result.errors[0].error, TypeMappingError)
        assert "Broken.payload" in str(result.errors[0])
        assert result.file("entpb").services[0].method_names == ["GetFine"]
        with pytest.raises(KeyError):
            result.file("zero")

    def test_edge_to_unknown_entity(self) -> None:
        entity = Entity(
            name="User",
            edges=(Edge(name="pet", target="Pet", annotation=FieldAnnotation(number=2)),),
            message=MessageConfig(),
        )
        with pytest.raises(TypeMappingError, match="unknown entity"):
            Generator(SchemaGraph(entities=(entity,))).generate_entity(entity)

    def test_cross_package_edge(self, user: Entity) -> None:
        pet = Entity(name="Pet", message=MessageConfig(package_name="pets"))
        with pytest.raises(TypeMappingError, match="cross-package"):
            Generator(SchemaGraph(entities=(user, pet))).generate_entity(user)

    def test_method_clash_within_merged_service(self) -> None:
        """Test that merging two services under one name rejects clashing method names."""
        first = Entity(name="Pet", service=ServiceConfig(methods="get", block_name="Zero"))
        second = Entity(
            name="Toy",
            service=ServiceConfig(methods="get", block_name="Zero", extra_methods=[{"name": "GetPet"}]),
        )
        result = generate(SchemaGraph(entities=(first, second)))

        assert [error.entity for error in result.errors] == ["Toy"]
        assert isinstance(result.errors[0].error, DuplicateMethodNameError)
        assert result.file("entpb").services[0].method_names == ["GetPet"]

    def test_settings_reach_descriptions(self, zero_graph: SchemaGraph) -> None:
        result = generate(zero_graph, GeneratorSettings(max_page_size=25))
        list_user = next(m for m in result.file("zero").services[0].methods if m.name == "ListUser")
        assert list_user.description == "Page size is capped at 25 entries."


class TestImports:
    """Test suite for computing well-known type imports."""

    @pytest.mark.parametrize(
        "type_name, expected",
        [
            ("google.protobuf.Empty", "google/protobuf/empty.proto"),
            ("google.protobuf.Timestamp", "google/protobuf/timestamp.proto"),
            ("google.protobuf.StringValue", "google/protobuf/wrappers.proto"),
            ("google.protobuf.UInt64Value", "google/protobuf/wrappers.proto"),
            ("google.protobuf.Value", "google/protobuf/struct.proto"),
            ("google.protobuf.Struct", "google/protobuf/struct.proto"),
            ("google.protobuf.Any", "google/protobuf/any.proto"),
            ("google.protobuf.Duration", "google/protobuf/duration.proto"),
            ("User", None),
        ],
    )
    def test_import_for(self, type_name: str, expected: str | None) -> None:
        assert import_for(type_name) == expected

    def test_no_dependencies(self) -> None:
        assert collect_dependencies([], []) == []

    def test_file_name(self) -> None:
        assert file_name("zero") == "zero/zero.proto"
