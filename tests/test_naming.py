import pytest

from entpb.naming import plural, snake


class TestNaming:
    """Test suite for the entity name conversions used in generated names."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("User", "user"),
            ("UserGroup", "user_group"),
            ("Pet", "pet"),
            ("HTTPRequest", "http_request"),
            ("APIKey", "api_key"),
            ("UserID", "user_id"),
        ],
    )
    def test_snake(self, name: str, expected: str) -> None:
        assert snake(name) == expected

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("User", "Users"),
            ("Pet", "Pets"),
            ("Category", "Categories"),
            ("Company", "Companies"),
            ("Policy", "Policies"),
            ("Person", "People"),
            ("UserCategory", "UserCategories"),
            ("HTTPRequest", "HTTPRequests"),
        ],
    )
    def test_plural(self, name: str, expected: str) -> None:
        assert plural(name) == expected

    def test_snake_plural(self) -> None:
        assert snake(plural("UserGroup")) == "user_groups"
        assert snake(plural("Category")) == "categories"
