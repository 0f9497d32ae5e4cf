"""Tests for Changeset definition, construction and diffing."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from hypothesis import given
from hypothesis import strategies as st

from changeset import Changeset, ConfigurationError, FieldSpec, TypeTag


@dataclass
class Person:
    name: str | None = None
    email: str | None = None
    age: int | None = None


class PersonChangeset(Changeset):
    model = Person
    fields = [
        FieldSpec("name", normalize=["strip", "squish"]),
        FieldSpec("email", normalize=["strip", "downcase"]),
        FieldSpec("age", TypeTag.INTEGER),
    ]


class AllNormalizersChangeset(Changeset):
    fields = [
        FieldSpec("strip_field", normalize="strip"),
        FieldSpec("squish_field", normalize="squish"),
        FieldSpec("downcase_field", normalize="downcase"),
        FieldSpec("upcase_field", normalize="upcase"),
        FieldSpec("blank_to_nil_field", normalize="blank_to_nil"),
        FieldSpec("multi_field", normalize=["strip", "squish", "downcase"]),
    ]


class TestDefinition:
    def test_model_hint(self) -> None:
        assert PersonChangeset.model is Person
        assert PersonChangeset.schema.model is Person
        assert AllNormalizersChangeset.model is None

    def test_declared_field_names(self) -> None:
        assert PersonChangeset.declared_field_names() == ("name", "email", "age")

    def test_normalizers_by_field(self) -> None:
        assert PersonChangeset.normalizers() == {
            "name": ("strip", "squish"),
            "email": ("strip", "downcase"),
        }
        assert AllNormalizersChangeset.normalizers()["multi_field"] == ("strip", "squish", "downcase")

    def test_schema_is_frozen(self) -> None:
        assert PersonChangeset.schema.frozen

    def test_subclass_extends_and_overrides_parent_fields(self) -> None:
        class Extended(PersonChangeset):
            fields = [FieldSpec("age", TypeTag.STRING), FieldSpec("bio")]

        assert Extended.declared_field_names() == ("name", "email", "age", "bio")
        assert Extended.schema.type_for("age") == "string"
        assert PersonChangeset.schema.type_for("age") == "integer"

    def test_unknown_normalizer_fails_at_definition(self) -> None:
        with pytest.raises(ConfigurationError):

            class Broken(Changeset):
                fields = [FieldSpec("name", normalize="titlecase")]

    def test_fields_must_be_field_specs(self) -> None:
        with pytest.raises(ConfigurationError):

            class Broken(Changeset):
                fields = ["name"]

    def test_unknown_type_fails_on_first_construction(self) -> None:
        class Odd(Changeset):
            fields = [FieldSpec("token", "uuid_not_registered")]

        with pytest.raises(ConfigurationError, match="unknown type"):
            Odd(None, {})


class TestConstruction:
    def test_keeps_record_and_raw_input(self) -> None:
        person = Person()
        raw = {"name": "Test", "admin": True}
        changeset = PersonChangeset(person, raw)

        assert changeset.record is person
        assert dict(changeset.raw_input) == raw

    def test_raw_input_is_a_read_only_snapshot(self) -> None:
        raw = {"name": "Test"}
        changeset = PersonChangeset(Person(), raw)
        raw["name"] = "Changed"

        assert changeset.raw_input["name"] == "Test"
        with pytest.raises(TypeError):
            changeset.raw_input["name"] = "x"  # type: ignore[index]

    def test_string_keys_and_values(self) -> None:
        changeset = PersonChangeset(Person(), {"name": "Test", "age": "41"})

        assert changeset.name == "Test"
        assert changeset.get("age") == 41

    def test_absent_fields_are_none(self) -> None:
        changeset = PersonChangeset(Person(), {})

        assert changeset.to_dict() == {"name": None, "email": None, "age": None}

    def test_none_input(self) -> None:
        assert PersonChangeset(Person(), None).to_dict() == {"name": None, "email": None, "age": None}

    def test_undeclared_keys_are_not_exposed(self) -> None:
        changeset = PersonChangeset(Person(), {"name": "Test", "unknown": "value"})

        assert not hasattr(changeset, "unknown")
        assert "unknown" not in changeset.values
        with pytest.raises(KeyError):
            changeset.get("unknown")

    def test_normalization(self) -> None:
        changeset = PersonChangeset(Person(), {"name": "  João   Silva  ", "email": " JOAO@EXAMPLE.COM"})

        assert changeset.name == "João Silva"
        assert changeset.email == "joao@example.com"

    @pytest.mark.parametrize(
        ("field", "raw", "expected"),
        [
            ("strip_field", "  texto  ", "texto"),
            ("squish_field", "  texto   com   espaços  ", "texto com espaços"),
            ("downcase_field", "TEXTO", "texto"),
            ("upcase_field", "texto", "TEXTO"),
            ("blank_to_nil_field", "", None),
            ("blank_to_nil_field", "   ", None),
            ("blank_to_nil_field", "texto", "texto"),
            ("multi_field", "  TEXTO   COM   ESPAÇOS  ", "texto com espaços"),
            ("strip_field", None, None),
        ],
    )
    def test_each_normalizer(self, field: str, raw: str | None, expected: str | None) -> None:
        assert AllNormalizersChangeset(None, {field: raw}).get(field) == expected

    def test_values_are_read_only(self) -> None:
        changeset = PersonChangeset(Person(), {"name": "Test"})

        with pytest.raises(AttributeError):
            changeset.name = "Other"
        with pytest.raises(TypeError):
            changeset.values["name"] = "Other"  # type: ignore[index]

    def test_cast_failure_is_inspectable(self) -> None:
        changeset = PersonChangeset(Person(), {"age": "old"})

        assert changeset.age is None
        assert changeset.cast_errors["age"].value == "old"
        assert not changeset.is_valid()
        assert changeset.errors["age"] == ["is not a valid integer"]


class TestDiff:
    def test_no_changes(self) -> None:
        person = Person(name="Original", email="original@example.com", age=30)
        changeset = PersonChangeset(person, {"name": "Original", "email": "ORIGINAL@example.com", "age": 30})

        assert not changeset.is_changed()
        assert changeset.changed_fields() == []
        assert changeset.changes() == {}
        assert changeset.patch_payload() == {}

    def test_changes_old_and_new(self) -> None:
        person = Person(name="Original", email="original@example.com", age=30)
        changeset = PersonChangeset(person, {"name": "Novo Nome", "email": "original@example.com", "age": 30})

        assert changeset.changes() == {"name": ("Original", "Novo Nome")}
        assert changeset.patch_payload() == {"name": "Novo Nome"}

    def test_nil_to_value(self) -> None:
        changeset = PersonChangeset(Person(name="Test"), {"name": "Test", "email": "a@b.c"})

        assert changeset.changes() == {"email": (None, "a@b.c")}

    def test_changes_follow_declaration_order(self) -> None:
        changeset = PersonChangeset(Person(), {"age": 1, "email": "e", "name": "n"})

        assert list(changeset.changes()) == ["name", "email", "age"]
        assert changeset.changed_fields() == ["name", "email", "age"]

    def test_patch_payload_include_nil(self) -> None:
        person = Person(name="Original", email="original@example.com", age=30)
        changeset = PersonChangeset(person, {"name": "Original", "email": "original@example.com"})

        assert changeset.patch_payload() == {}
        assert changeset.patch_payload(include_nil=True) == {"age": None}

    def test_boolean_replacing_number_is_a_change(self) -> None:
        class Flags(Changeset):
            fields = [FieldSpec("active", TypeTag.BOOLEAN)]

        changeset = Flags({"active": 1}, {"active": "true"})

        assert changeset.changes() == {"active": (1, True)}
        assert Flags({"active": True}, {"active": "1"}).changes() == {}

    def test_record_without_field_reads_as_none(self) -> None:
        class Bare:
            name = "Original"

        changeset = PersonChangeset(Bare(), {"name": "Original"})

        assert changeset.changes() == {}

    @given(st.text(), st.text())
    def test_diff_matches_equality(self, current: str, incoming: str) -> None:
        person = Person(name=current)
        changeset = PersonChangeset(person, {"name": incoming})
        normalized = changeset.name

        if normalized == current:
            assert "name" not in changeset.changed_fields()
        else:
            assert changeset.changes()["name"] == (current, normalized)


class TestValidityCache:
    def test_errors_are_cached_until_revalidated(self) -> None:
        calls: list[int] = []

        def _count(changeset, errors) -> None:
            calls.append(1)

        class Counted(Changeset):
            fields = [FieldSpec("name")]
            validators = [_count]

        changeset = Counted(None, {"name": "x"})
        assert changeset.is_valid()
        assert changeset.is_valid()
        _ = changeset.errors
        assert len(calls) == 1

        assert changeset.validate()
        assert len(calls) == 2
