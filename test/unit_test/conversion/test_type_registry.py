from __future__ import annotations

import pytest

from mcp_bridge.conversion import (
    ANY,
    FieldDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeRegistry,
    array_of,
    field_name,
    object_of,
)


def _string_field(name: str, optional: bool = False) -> FieldDescriptor:
    return FieldDescriptor(name=field_name(name), source_name=name, type=TypeDescriptor(TypeKind.STRING), optional=optional)


class TestTypeDescriptor:
    """Invariants of the tagged descriptor model."""

    def test_object_of_sorts_fields(self) -> None:
        descriptor = object_of([_string_field("b"), _string_field("a")])
        assert [f.source_name for f in descriptor.fields] == ["a", "b"]

    def test_unsorted_fields_rejected(self) -> None:
        with pytest.raises(ValueError):
            TypeDescriptor(TypeKind.OBJECT, fields=(_string_field("b"), _string_field("a")))

    def test_fields_only_on_objects(self) -> None:
        with pytest.raises(ValueError):
            TypeDescriptor(TypeKind.STRING, fields=(_string_field("a"),))

    def test_items_only_on_arrays(self) -> None:
        with pytest.raises(ValueError):
            TypeDescriptor(TypeKind.OBJECT, items=ANY)

    def test_name_not_part_of_equality(self) -> None:
        first = object_of([_string_field("a")]).with_name("First")
        second = object_of([_string_field("a")]).with_name("Second")
        assert first == second

    def test_element_defaults_to_any(self) -> None:
        assert array_of(None).element() is ANY


class TestFieldName:
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("user_id", "User_id"),
            ("first-name", "First_name"),
            ("2fa", "F_2fa"),
            ("_private", "F__private"),
            ("", "F_"),
        ],
    )
    def test_identifiers(self, source: str, expected: str) -> None:
        assert field_name(source) == expected

    def test_unique_against_taken(self) -> None:
        taken: set[str] = set()
        assert field_name("a-b", taken) == "A_b"
        assert field_name("a_b", taken) == "A_b_2"


class TestTypeRegistry:
    """Registration, lookup and lifecycle of synthesized types."""

    def test_register_materializes_model(self) -> None:
        registry = TypeRegistry()
        entry = registry.register(object_of([_string_field("name")]), "Greeting")
        instance = entry.model.model_validate({"name": "hi"})
        assert instance.Name == "hi"
        assert registry.lookup("Greeting") is entry

    def test_only_objects(self) -> None:
        with pytest.raises(ValueError):
            TypeRegistry().register(TypeDescriptor(TypeKind.STRING))

    def test_names_made_unique(self) -> None:
        registry = TypeRegistry()
        descriptor = object_of([_string_field("a")])
        assert registry.register(descriptor, "T").name == "T"
        assert registry.register(descriptor, "T").name == "T_2"
        assert len(registry) == 2

    def test_deduplicate(self) -> None:
        registry = TypeRegistry(deduplicate=True)
        descriptor = object_of([_string_field("a")])
        first = registry.register(descriptor, "T")
        assert registry.register(descriptor, "U") is first
        assert len(registry) == 1

    def test_find_by_structure(self) -> None:
        registry = TypeRegistry()
        entry = registry.register(object_of([_string_field("a")]), "T")
        assert registry.find(object_of([_string_field("a")])) is entry
        assert registry.find(object_of([_string_field("b")])) is None

    def test_clear(self) -> None:
        registry = TypeRegistry()
        registry.register(object_of([_string_field("a")]), "T")
        registry.clear()
        assert len(registry) == 0
        assert "T" not in registry
