from __future__ import annotations

import pytest

from notion_importer.application.services.property_mapper import default_property_type, map_properties
from notion_importer.domain.entities.mapping import PropertyOverride
from notion_importer.domain.entities.property_types import PropertyType
from notion_importer.shared.exceptions.domain import ValidationException


def test_default_types() -> None:
    schema = {"Edad": "number", "Nombre": "title", "Id": "unique_id"}
    assert default_property_type("Email", schema, "Email") is PropertyType.TITLE
    assert default_property_type("Edad", schema, "Email") is PropertyType.NUMBER
    assert default_property_type("Otro", schema, "Email") is PropertyType.RICH_TEXT
    # Solo puede haber un title
    assert default_property_type("Nombre", schema, "Email") is PropertyType.RICH_TEXT
    assert default_property_type("Id", schema, "Email") is PropertyType.RICH_TEXT


def test_map_properties_defaults_keep_names() -> None:
    mapping = map_properties(["name", "email", "age"], {"age": "number"}, "name")
    assert mapping["name"].type is PropertyType.TITLE
    assert mapping["email"].type is PropertyType.RICH_TEXT
    assert mapping["age"].type is PropertyType.NUMBER
    assert [mapping[h].name for h in mapping] == ["name", "email", "age"]
    assert mapping.title_header == "name"


def test_title_field_must_be_a_header() -> None:
    with pytest.raises(ValidationException) as exc:
        map_properties(["name"], {}, "email")
    assert exc.value.error_code == "VALIDATION_ERROR"


def test_overrides_ignored_without_customize() -> None:
    overrides = {"email": PropertyOverride(name="Correo", type=PropertyType.EMAIL)}
    mapping = map_properties(["name", "email"], {}, "name", overrides=overrides)
    assert mapping["email"].name == "email"
    assert mapping["email"].type is PropertyType.RICH_TEXT


def test_overrides_rename_and_retype() -> None:
    overrides = {
        "email": PropertyOverride(name=" Correo ", type=PropertyType.EMAIL),
        "tags": PropertyOverride(type=PropertyType.MULTI_SELECT),
    }
    mapping = map_properties(["name", "email", "tags"], {}, "name", customize=True, overrides=overrides)
    assert mapping["email"].name == "Correo"
    assert mapping["email"].type is PropertyType.EMAIL
    assert mapping["tags"].name == "tags"
    assert mapping["tags"].type is PropertyType.MULTI_SELECT
    assert mapping.destination_name("email") == "Correo"
    assert mapping.destination_name("missing") == "missing"


def test_title_cannot_be_retyped_away() -> None:
    overrides = {"name": PropertyOverride(type=PropertyType.RICH_TEXT)}
    mapping = map_properties(["name", "email"], {}, "name", customize=True, overrides=overrides)
    assert mapping["name"].type is PropertyType.TITLE


def test_second_title_override_is_ignored() -> None:
    overrides = {"email": PropertyOverride(type=PropertyType.TITLE)}
    mapping = map_properties(["name", "email"], {}, "name", customize=True, overrides=overrides)
    types = [spec.type for _, spec in mapping.items()]
    assert types.count(PropertyType.TITLE) == 1
    assert mapping["email"].type is PropertyType.RICH_TEXT


def test_colliding_destination_names_are_rejected() -> None:
    overrides = {"email": PropertyOverride(name="name")}
    with pytest.raises(ValidationException):
        map_properties(["name", "email"], {}, "name", customize=True, overrides=overrides)


def test_title_field_maps_onto_existing_title() -> None:
    mapping = map_properties(["name", "email"], {"Name": "title"}, "name")
    assert mapping["name"].name == "Name"
    assert mapping["name"].type is PropertyType.TITLE
    assert mapping.destination_name("email") == "email"


def test_renamed_title_field_keeps_its_new_name() -> None:
    overrides = {"name": PropertyOverride(name="Cliente")}
    mapping = map_properties(["name"], {"Name": "title"}, "name", customize=True, overrides=overrides)
    assert mapping["name"].name == "Cliente"


def test_existing_title_named_like_another_header_is_not_reused() -> None:
    mapping = map_properties(["Name", "email"], {"Name": "title"}, "email")
    assert mapping["email"].name == "email"
    assert mapping["Name"].type is PropertyType.RICH_TEXT


def test_unknown_existing_type_is_kept() -> None:
    schema = {"name": "title", "ID": "unique_id"}
    mapping = map_properties(["name", "ID", "email"], schema, "name")
    assert mapping["ID"].keep_existing
    assert not mapping["email"].keep_existing
    assert not mapping["name"].keep_existing

    overrides = {"ID": PropertyOverride(type=PropertyType.NUMBER)}
    mapping = map_properties(["name", "ID"], schema, "name", customize=True, overrides=overrides)
    assert not mapping["ID"].keep_existing
    assert mapping["ID"].type is PropertyType.NUMBER
