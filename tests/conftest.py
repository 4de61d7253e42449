from pathlib import Path

import pytest
from faker import Faker

from entpb.schema.annotations import EnumAnnotation, FieldAnnotation, MessageConfig, ServiceConfig
from entpb.schema.loader import load_schema
from entpb.schema.models import Edge, Entity, EntityField, FieldType, SchemaGraph


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    ZERO_SCHEMA: Path = TESTS_DATA_DIR / "zero.yaml"
    INVALID_SCHEMA: Path = TESTS_DATA_DIR / "invalid.yaml"


def make_field(name: str, field_type: FieldType, number: int | None = None, **kwargs: object) -> EntityField:
    """Build an entity field, annotated with ``number`` when given."""
    annotation = FieldAnnotation(number=number) if number is not None else None
    return EntityField(name=name, type=field_type, annotation=annotation, **kwargs)


@pytest.fixture
def user() -> Entity:
    return Entity(
        name="User",
        fields=(
            make_field("user_name", FieldType.STRING, 2, unique=True),
            make_field("joined", FieldType.TIME, 3, immutable=True),
            make_field("points", FieldType.UINT, 4),
            make_field("exp", FieldType.UINT64, 5),
            EntityField(
                name="status",
                type=FieldType.ENUM,
                enum_values=("pending", "active"),
                annotation=FieldAnnotation(number=6),
                enum_annotation=EnumAnnotation(values={"pending": 1, "active": 2}),
            ),
        ),
        edges=(Edge(name="pet", target="Pet", unique=True, annotation=FieldAnnotation(number=7)),),
        field_groups={"profile": ["user_name", "status", "pet"]},
        service=ServiceConfig(block_name="Zero"),
        message=MessageConfig(package_name="zero"),
    )


@pytest.fixture
def pet() -> Entity:
    return Entity(
        name="Pet",
        edges=(Edge(name="owner", target="User", unique=True, annotation=FieldAnnotation(number=2)),),
        service=ServiceConfig(block_name="Zero"),
        message=MessageConfig(package_name="zero"),
    )


@pytest.fixture
def zero_graph(user: Entity, pet: Entity) -> SchemaGraph:
    return SchemaGraph(entities=(user, pet))


@pytest.fixture(scope="module")
def zero_schema() -> SchemaGraph:
    assert TestSchemaData.ZERO_SCHEMA.exists(), f"Missing test file: {TestSchemaData.ZERO_SCHEMA}"
    return load_schema(TestSchemaData.ZERO_SCHEMA)


@pytest.fixture
def entity_name() -> str:
    """A random PascalCase entity name made of a single word."""
    return Faker().unique.word().capitalize()
