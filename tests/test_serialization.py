"""
Tests for method table serialization.

Tables are exported by name and import path, and rebuilt by importing
the referenced methods.
"""

import pytest

from s3dispatch.analyzer import explain_dispatch
from s3dispatch.dispatcher import dispatch
from s3dispatch.errors import SerializationError
from s3dispatch.examples import build_example_table, mean_foo
from s3dispatch.serialization import (
    callable_from_ref,
    callable_to_ref,
    load_table,
    report_to_dict,
    report_to_yaml,
    table_from_dict,
    table_from_json,
    table_from_yaml,
    table_to_dict,
    table_to_json,
    table_to_yaml,
)
from s3dispatch.table import MethodTable
from s3dispatch.tags import tag


def test_table_to_dict_structure():
    d = table_to_dict(build_example_table())
    assert d["generics"]["mean"]["primitive"] is False
    assert d["generics"]["describe"]["primitive"] is True
    assert d["generics"]["mean"]["methods"]["foo"] == "s3dispatch.examples:mean_foo"
    assert d["generics"]["baz"]["methods"] == {
        "A": "s3dispatch.examples:baz_a",
        "C": "s3dispatch.examples:baz_c",
    }


def test_json_roundtrip():
    table = build_example_table()
    restored = table_from_json(table_to_json(table))
    assert table_to_dict(restored) == table_to_dict(table)
    assert dispatch("baz", (tag(1, ["C", "A"]),), table=restored) == "CA"


def test_yaml_roundtrip():
    table = build_example_table()
    restored = table_from_yaml(table_to_yaml(table))
    assert table_to_dict(restored) == table_to_dict(table)
    assert restored.is_primitive("describe")


def test_load_into_existing_table():
    table = MethodTable()
    table.register_method("other", "x", mean_foo)
    table_from_dict({"generics": {"mean": {"methods": {"foo": "s3dispatch.examples:mean_foo"}}}}, table)
    assert table.generics() == {"other", "mean"}


def test_load_table_file(tmp_path):
    path = tmp_path / "methods.yaml"
    path.write_text(
        "generics:\n"
        "  bar:\n"
        "    methods:\n"
        "      z: s3dispatch.examples:bar_z\n"
    )
    table = load_table(str(path))
    assert dispatch("bar", (tag(1, ["y", "z"]),), table=table) == "z"


def test_non_mapping_entry_warns():
    with pytest.warns(UserWarning, match="bogus"):
        table = table_from_dict({"generics": {"bogus": ["not", "a", "mapping"]}})
    assert table.generics() == set()


def test_unresolvable_reference():
    with pytest.raises(SerializationError):
        callable_from_ref("s3dispatch.examples:does_not_exist")
    with pytest.raises(SerializationError):
        callable_from_ref("no_such_module_xyz:f")
    with pytest.raises(SerializationError):
        callable_from_ref("missing-colon")


def test_lambda_cannot_be_referenced():
    with pytest.raises(SerializationError):
        callable_to_ref(lambda x: x)


def test_reference_roundtrip():
    assert callable_from_ref(callable_to_ref(mean_foo)) is mean_foo


def test_report_to_dict():
    table = build_example_table()
    d = report_to_dict(explain_dispatch("describe", "text", table))
    assert d["generic"] == "describe"
    assert d["classes"] == []
    assert d["mode"] == "character"
    assert d["candidates"][0] == {
        "key": "character",
        "source": "mode",
        "method": "s3dispatch.examples:describe_character",
        "selected": True,
    }
    assert "describe" in report_to_yaml(explain_dispatch("describe", "text", table))


def test_top_level_list_rejected():
    with pytest.raises(SerializationError, match="top level"):
        table_from_yaml("- a\n- b\n")


def test_empty_generics_loads_nothing():
    assert len(table_from_yaml("generics:\n")) == 0
    assert table_from_yaml("").generics() == set()


def test_generics_not_a_mapping_rejected():
    with pytest.raises(SerializationError, match="generics"):
        table_from_yaml("generics:\n  - mean\n")


def test_methods_not_a_mapping_rejected():
    with pytest.raises(SerializationError, match="mean"):
        table_from_yaml("generics:\n  mean:\n    methods: [foo]\n")


def test_non_string_reference_rejected():
    with pytest.raises(SerializationError, match="must be a string"):
        table_from_yaml("generics:\n  mean:\n    methods:\n      foo: 1\n")
