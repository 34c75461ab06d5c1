"""Tests for tag derivation and index keys."""

from routesnap.schema import Valid, parse_dependencies_json
from routesnap.tags import (
    index_key,
    make_tag,
    normalize_identifier,
    split_index_key,
    tags_from_dependencies,
)


class TestNormalizeIdentifier:
    """Tests for normalize_identifier."""

    def test_plain_string_is_verbatim(self) -> None:
        """Test that ordinary strings are kept as they are."""
        assert normalize_identifier("Hero") == "Hero"

    def test_object_is_canonical_json(self) -> None:
        """Test that objects serialize with sorted keys and no spaces."""
        assert normalize_identifier({"b": 1, "a": "x"}) == '{"a":"x","b":1}'

    def test_nested_key_order_does_not_matter(self) -> None:
        """Test that nested objects normalize independently of key order."""
        first = {"outer": {"y": [1, 2], "x": None}, "id": "1"}
        second = {"id": "1", "outer": {"x": None, "y": [1, 2]}}
        assert normalize_identifier(first) == normalize_identifier(second)

    def test_string_cannot_collide_with_object(self) -> None:
        """Test that a string spelling an object's JSON gets a distinct form."""
        obj = {"a": 1}
        spoof = normalize_identifier(obj)
        assert normalize_identifier(spoof) != normalize_identifier(obj)

    def test_quoted_string_cannot_collide_with_escaped_string(self) -> None:
        """Test that a string starting with a quote is escaped too."""
        braced = normalize_identifier("{x")
        assert normalize_identifier(braced) != braced

    def test_integral_float_matches_int(self) -> None:
        """Test that 1 and 1.0 normalize identically, at any depth."""
        assert normalize_identifier({"id": 1.0}) == '{"id":1}'
        assert normalize_identifier({"ids": [{"n": 2.0}], "x": 2.5}) == (
            '{"ids":[{"n":2}],"x":2.5}'
        )

    def test_bool_is_not_a_number(self) -> None:
        """Test that booleans keep their JSON spelling."""
        assert normalize_identifier({"flag": True}) == '{"flag":true}'


class TestTagsFromDependencies:
    """Tests for tags_from_dependencies."""

    def test_string_dependencies(self) -> None:
        """Test tags for string identifiers."""
        assert tags_from_dependencies({"component": ["Hero", "Footer"]}) == {
            "component!Hero",
            "component!Footer",
        }

    def test_object_dependencies(self) -> None:
        """Test tags for object identifiers."""
        tags = tags_from_dependencies({"dataType": [{"type": "x", "id": "1"}]})
        assert tags == {'dataType!{"id":"1","type":"x"}'}

    def test_deterministic_across_insertion_order(self) -> None:
        """Test that derivation ignores mapping and key insertion order."""
        first = {"component": ["Hero"], "dataType": [{"a": 1, "b": 2}]}
        second = {"dataType": [{"b": 2, "a": 1}], "component": ["Hero"]}
        assert tags_from_dependencies(first) == tags_from_dependencies(second)
        assert tags_from_dependencies(first) == tags_from_dependencies(first)

    def test_same_identifier_different_kind(self) -> None:
        """Test that the kind is part of the tag."""
        tags = tags_from_dependencies({"component": ["x"], "pattern": ["x"]})
        assert tags == {"component!x", "pattern!x"}

    def test_empty_and_none(self) -> None:
        """Test that missing dependencies produce no tags."""
        assert tags_from_dependencies(None) == set()
        assert tags_from_dependencies({}) == set()
        assert tags_from_dependencies({"component": []}) == set()

    def test_duplicates_collapse(self) -> None:
        """Test that repeated identifiers yield one tag."""
        assert tags_from_dependencies({"component": ["Hero", "Hero"]}) == {
            "component!Hero"
        }

    def test_make_tag(self) -> None:
        """Test the kind!identifier shape."""
        assert make_tag("component", "Hero") == "component!Hero"

    def test_kind_separator_is_escaped(self) -> None:
        """Test that a ! inside a kind cannot move the kind/identifier split."""
        assert make_tag("a!b", "c") == "a\\!b!c"
        assert make_tag("a!b", "c") != make_tag("a", "b!c")
        assert make_tag("a\\", "!c") != make_tag("a", "\\!c")

    def test_parsed_payload_matches_rendered_float(self) -> None:
        """Test that a payload id and a float-spelled render id share a tag."""
        payload = parse_dependencies_json('{"dataType": [{"id": 1}]}')
        rendered = parse_dependencies_json('{"dataType": [{"id": 1.0}]}')
        assert isinstance(payload, Valid) and isinstance(rendered, Valid)
        assert tags_from_dependencies(payload.value) == tags_from_dependencies(
            rendered.value
        )


class TestIndexKey:
    """Tests for project-scoped index keys."""

    def test_index_key(self) -> None:
        """Test joining project and value."""
        assert index_key("proj", "component!Hero") == "proj|component!Hero"

    def test_split_keeps_separator_in_value(self) -> None:
        """Test that only the first separator splits."""
        assert split_index_key("proj|a|b") == ("proj", "a|b")

    def test_split_malformed(self) -> None:
        """Test that a key without separator is rejected."""
        assert split_index_key("no-separator") is None
