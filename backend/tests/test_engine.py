import pytest
from jsonschema.exceptions import SchemaError

from schemaguard.engine import ADDITIONAL_PROPERTIES, ADDITIONAL_PROPERTIES_MESSAGE, ValidationEngine
from schemaguard.models import Options

CUSTOM = {
    "type": "object",
    "properties": {"string": {"type": "string"}},
    "additionalProperties": False,
}


def _engine(**options) -> ValidationEngine:
    engine = ValidationEngine(Options(**options))
    engine.add_schema(CUSTOM, "custom")
    return engine


def test_get_schema_unknown_name_is_none():
    assert ValidationEngine().get_schema("nope") is None


def test_add_schema_rejects_invalid_schema():
    engine = ValidationEngine()
    with pytest.raises(SchemaError):
        engine.add_schema({"type": "not-a-type"}, "bad")
    assert engine.schema_names == []


def test_add_schema_overwrites_same_name():
    engine = _engine()
    engine.add_schema({"type": "integer"}, "custom")

    assert engine.run(engine.get_schema("custom"), 3) == []
    assert engine.schema_names == ["custom"]


def test_compiled_validator_is_cached_until_next_registration():
    engine = _engine()
    first = engine.get_schema("custom")
    assert engine.get_schema("custom") is first

    engine.add_schema({"type": "string"}, "other")
    assert engine.get_schema("custom") is not first


def test_extra_properties_reported_one_per_property():
    engine = _engine()
    errors = engine.run(engine.get_schema("custom"), {"string": "x", "a": 1, "b": 2})

    assert [e.validator for e in errors] == [ADDITIONAL_PROPERTIES, ADDITIONAL_PROPERTIES]
    assert [e.params["additionalProperty"] for e in errors] == ["a", "b"]
    assert {e.message for e in errors} == {ADDITIONAL_PROPERTIES_MESSAGE}


def test_pattern_properties_are_not_extra():
    engine = ValidationEngine()
    engine.add_schema(
        {"type": "object", "patternProperties": {"^x-": {}}, "additionalProperties": False},
        "headers",
    )
    assert engine.run(engine.get_schema("headers"), {"x-trace": "1"}) == []


def test_additional_properties_subschema_keeps_engine_behaviour():
    engine = ValidationEngine()
    engine.add_schema({"type": "object", "additionalProperties": {"type": "integer"}}, "counts")

    errors = engine.run(engine.get_schema("counts"), {"a": 1, "b": "two"})

    assert len(errors) == 1
    assert errors[0].validator == "type"
    assert engine.instance_path(errors[0]) == "/b"


def test_strip_removes_extras_in_place():
    engine = _engine(strip_additional_properties=True)
    data = {"string": "x", "extra": True}

    assert engine.run(engine.get_schema("custom"), data) == []
    assert data == {"string": "x"}


def test_defaults_are_deep_copied():
    engine = ValidationEngine()
    engine.add_schema({"type": "object", "properties": {"tags": {"default": []}}}, "tagged")
    validator = engine.get_schema("tagged")

    first, second = {}, {}
    engine.run(validator, first)
    engine.run(validator, second)
    first["tags"].append("x")

    assert second == {"tags": []}


def test_nested_defaults_applied():
    engine = ValidationEngine()
    engine.add_schema(
        {
            "type": "object",
            "properties": {
                "settings": {
                    "type": "object",
                    "properties": {"theme": {"type": "string", "default": "dark"}},
                },
            },
        },
        "prefs",
    )
    data = {"settings": {}}

    engine.run(engine.get_schema("prefs"), data)

    assert data == {"settings": {"theme": "dark"}}


def test_collect_all_errors_off_stops_at_first():
    engine = _engine(collect_all_errors=False)
    errors = engine.run(engine.get_schema("custom"), {"string": 1, "a": 1, "b": 2})
    assert len(errors) == 1


def test_draft_07_schemas_are_supported():
    engine = ValidationEngine()
    engine.add_schema(
        {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "dependencies": {"a": ["b"]},
        },
        "draft7",
    )
    validator = engine.get_schema("draft7")

    assert engine.run(validator, {"a": 1, "b": 2}) == []
    assert len(engine.run(validator, {"a": 1})) == 1


def test_refs_between_registered_schemas():
    engine = _engine()
    engine.add_schema({"type": "array", "items": {"$ref": "custom"}}, "list")

    errors = engine.run(engine.get_schema("list"), [{"string": "x"}, {"string": 2}])

    assert [engine.instance_path(e) for e in errors] == ["/1/string"]


def test_instance_path_escapes_pointer_tokens():
    engine = ValidationEngine()
    engine.add_schema({"type": "object", "additionalProperties": {"type": "string"}}, "map")

    errors = engine.run(engine.get_schema("map"), {"a/b~c": 1})

    assert engine.instance_path(errors[0]) == "/a~1b~0c"


def test_errors_text():
    engine = _engine()
    errors = engine.run(engine.get_schema("custom"), {"string": "x", "extra": 1})

    assert engine.errors_text(errors) == "data must NOT have additional properties"
    assert engine.errors_text([]) == "No errors"


def test_http_url_format_is_checked():
    engine = ValidationEngine()
    engine.add_schema({"type": "string", "format": "http-url"}, "url")
    validator = engine.get_schema("url")

    assert engine.run(validator, "https://example.com") == []
    assert len(engine.run(validator, "ftp://example.com")) == 1


@pytest.mark.parametrize("schema", [None, 5, "string", [{"type": "string"}]])
def test_add_schema_rejects_non_object_schema(schema):
    engine = ValidationEngine()
    with pytest.raises(SchemaError):
        engine.add_schema(schema, "bad")
    assert engine.schema_names == []


def test_boolean_schemas_are_accepted():
    engine = ValidationEngine()
    engine.add_schema(True, "anything")

    assert engine.run(engine.get_schema("anything"), {"x": 1}) == []


@pytest.mark.parametrize(
    "fmt,valid,invalid",
    [
        ("uri", "https://example.com/a?b=1", "not a uri"),
        ("uri-reference", "../relative/path", "\\\\bad"),
        ("date-time", "2024-05-01T12:30:00Z", "yesterday"),
        ("email", "someone@example.com", "nobody"),
    ],
)
def test_standard_formats_are_checked(fmt, valid, invalid):
    engine = ValidationEngine()
    engine.add_schema({"type": "string", "format": fmt}, "f")
    validator = engine.get_schema("f")

    assert engine.run(validator, valid) == []
    assert [e.validator for e in engine.run(validator, invalid)] == ["format"]
