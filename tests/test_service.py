import pytest
from hypothesis import given
from hypothesis import strategies as st

from entpb.descriptors.dedupe import dedupe_messages
from entpb.descriptors.models import FieldDescriptor, MessageDescriptor, WireType
from entpb.descriptors.service import ServiceAssembler, assemble_service
from entpb.errors import DuplicateMethodNameError, MissingServiceAnnotationError, UnsupportedIDTypeError
from entpb.schema.annotations import ExtraMethodSpec, MessageConfig, MethodSet, NamedMessageSpec, PbField, ServiceConfig
from entpb.schema.models import Entity, FieldType, IDField

message_names = st.sampled_from(["User", "Pet", "GetUserRequest", "CreateUserRequest", "Empty"])


@st.composite
def messages(draw: st.DrawFn) -> list[MessageDescriptor]:
    names = draw(st.lists(message_names, max_size=12))
    return [
        MessageDescriptor(name=name, fields=(FieldDescriptor(name="f", number=index + 1, wire_type=WireType.BOOL),))
        for index, name in enumerate(names)
    ]


class TestDedupeMessages:
    """Test suite for collapsing messages by name."""

    @given(messages())
    def test_names_are_unique_and_first_wins(self, batch: list[MessageDescriptor]) -> None:
        deduped = dedupe_messages(batch)
        names = [message.name for message in deduped]

        assert len(names) == len(set(names))
        assert names == list(dict.fromkeys(message.name for message in batch))
        for message in deduped:
            assert message == next(candidate for candidate in batch if candidate.name == message.name)

    @given(messages())
    def test_idempotent(self, batch: list[MessageDescriptor]) -> None:
        once = dedupe_messages(batch)
        assert dedupe_messages(once) == once


class TestServiceAssembler:
    """Test suite for assembling an entity's service."""

    def test_all_methods_in_order(self, user: Entity) -> None:
        """Test the fixed method order and the service name override."""
        resources = assemble_service(user)

        assert resources.service.name == "Zero"
        assert resources.service.method_names == [
            "CreateUser",
            "GetUser",
            "UpdateUser",
            "DeleteUser",
            "ListUser",
            "BatchCreateUsers",
        ]
        names = [message.name for message in resources.messages]
        assert names == [
            "CreateUserRequest",
            "GetUserRequest",
            "UpdateUserRequest",
            "DeleteUserRequest",
            "ListUserRequest",
            "ListUserResponse",
            "BatchCreateUsersRequest",
            "BatchCreateUsersResponse",
        ]

    def test_default_service_name(self) -> None:
        assert ServiceAssembler(Entity(name="Pet", service=ServiceConfig())).service_name() == "PetService"

    def test_method_subset(self) -> None:
        entity = Entity(name="Pet", service=ServiceConfig(methods=["get", "list"]))
        assert assemble_service(entity).service.method_names == ["GetPet", "ListPet"]

    def test_batch_create_without_create(self) -> None:
        """Test that the Create request is still emitted when only BatchCreate is enabled."""
        entity = Entity(name="Pet", service=ServiceConfig(methods=MethodSet.BATCH_CREATE))
        resources = assemble_service(entity)

        assert resources.service.method_names == ["BatchCreatePets"]
        assert [message.name for message in resources.messages] == [
            "CreatePetRequest",
            "BatchCreatePetsRequest",
            "BatchCreatePetsResponse",
        ]

    @pytest.mark.parametrize("methods", [None, [], "all", MethodSet(0)])
    def test_empty_selection_means_all(self, methods: object) -> None:
        entity = Entity(name="Pet", service=ServiceConfig(methods=methods))
        assert len(assemble_service(entity).service.methods) == 6

    def test_integer_bitmask(self) -> None:
        entity = Entity(name="Pet", service=ServiceConfig(methods=MethodSet.CREATE.value | MethodSet.GET.value))
        assert assemble_service(entity).service.method_names == ["CreatePet", "GetPet"]

    @pytest.mark.parametrize("methods", [-1, 64, True])
    def test_invalid_bitmask(self, methods: object) -> None:
        with pytest.raises(ValueError):
            ServiceConfig(methods=methods)

    def test_unknown_method_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown method"):
            ServiceConfig(methods=["get", "purge"])

    def test_missing_service_annotation(self) -> None:
        with pytest.raises(MissingServiceAnnotationError):
            assemble_service(Entity(name="Pet"))

    def test_extra_methods_follow_standard_ones(self) -> None:
        """Test that extra methods come after the standard methods, with their messages."""
        entity = Entity(
            name="Pet",
            service=ServiceConfig(methods="get", extra_methods=(ExtraMethodSpec(name="Feed"),)),
        )
        resources = assemble_service(entity)

        assert resources.service.method_names == ["GetPet", "Feed"]
        assert [message.name for message in resources.messages][-2:] == ["FeedRequest", "FeedResponse"]

    def test_extra_method_name_clash(self) -> None:
        entity = Entity(
            name="Pet",
            service=ServiceConfig(methods="get", extra_methods=(ExtraMethodSpec(name="GetPet"),)),
        )
        with pytest.raises(DuplicateMethodNameError):
            assemble_service(entity)

    def test_duplicate_named_message_is_dropped(self) -> None:
        """Test that a named message reusing a synthesized message name is dropped, the first one wins."""
        entity = Entity(
            name="Pet",
            service=ServiceConfig(methods="get"),
            message=MessageConfig(named_messages=(NamedMessageSpec(name="GetPetRequest", skip_id=True),)),
        )
        resources = assemble_service(entity)

        get_requests = [message for message in resources.messages if message.name == "GetPetRequest"]
        assert len(get_requests) == 1
        assert [f.name for f in get_requests[0].fields] == ["id", "view"]

    def test_second_named_message_with_same_name_is_dropped(self) -> None:
        """Test that of two named messages sharing a name only the first survives, whatever its fields."""
        title = PbField(name="title", number=1, type="string")
        first = NamedMessageSpec(name="PetCard", skip_id=True, extra_fields=(title,))
        second = NamedMessageSpec(name="PetCard", extra_fields=(PbField(name="price", number=2, type="double"),))
        entity = Entity(
            name="Pet",
            service=ServiceConfig(methods="get"),
            message=MessageConfig(named_messages=(first, second)),
        )
        resources = assemble_service(entity)

        cards = [message for message in resources.messages if message.name == "PetCard"]
        assert len(cards) == 1
        assert [(f.name, f.number) for f in cards[0].fields] == [("title", 1)]

    def test_list_failure_fails_service(self) -> None:
        entity = Entity(name="Flag", id=IDField(type=FieldType.BOOL), service=ServiceConfig())
        with pytest.raises(UnsupportedIDTypeError):
            assemble_service(entity)
