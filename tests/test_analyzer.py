"""
Tests for the Dispatch Analyzer.

Tests verify that the analyzer correctly:
    - Traces candidate lookups for a value
    - Marks the selected method and the continuation chain
    - Inventories method tables and flags gaps
"""

from s3dispatch.analyzer import analyze_table, explain_dispatch, format_dispatch
from s3dispatch.examples import build_example_table
from s3dispatch.table import DEFAULT, MethodTable
from s3dispatch.tags import tag


def test_explain_selects_first_match():
    """Trace baz on c("C", "A"): C is selected, A follows."""
    table = build_example_table()
    report = explain_dispatch("baz", tag(1, ["C", "A"]), table)

    assert report.resolved
    assert report.selected.key == "C"
    assert report.chain == ["C", "A"]
    assert [c.key for c in report.candidates] == ["C", "A", DEFAULT]
    assert not report.primitive
    assert report.mode is None


def test_explain_unresolved():
    """No method and no default: nothing is selected."""
    table = build_example_table()
    report = explain_dispatch("bar", tag(1, ["x", "y"]), table)
    assert not report.resolved
    assert report.selected is None
    assert report.chain == []


def test_explain_primitive_includes_mode():
    table = build_example_table()
    report = explain_dispatch("describe", tag(3, "factor"), table)
    assert report.primitive
    assert report.mode == "numeric"
    assert [(c.key, c.source) for c in report.candidates] == [
        ("factor", "class"),
        ("numeric", "mode"),
        (DEFAULT, "default"),
    ]
    assert report.chain == ["factor", "numeric", DEFAULT]


def test_format_dispatch():
    table = build_example_table()
    text = format_dispatch(explain_dispatch("baz", tag(1, ["C", "B", "A"]), table))
    assert text.splitlines() == [
        "=> baz.C",
        "   baz.B",
        " * baz.A",
        "   baz.default",
    ]


def test_explain_does_not_call_methods():
    table = MethodTable()
    calls = []
    table.register_method("g", "a", lambda x: calls.append(x))
    explain_dispatch("g", tag(1, "a"), table)
    assert calls == []


def test_analyze_example_table():
    report = analyze_table(build_example_table())

    assert report.total_generics == 4
    assert report.total_methods == 10
    assert report.generics_without_default == {"bar", "baz"}
    assert report.primitive_generics == {"describe"}
    assert report.methods_per_generic["mean"] == {"foo", "bar", DEFAULT}
    assert "A" in report.classes
    assert DEFAULT not in report.classes
    assert any("bar, baz" in w for w in report.warnings)


def test_analyze_flags_empty_generic_and_dotted_class():
    table = MethodTable()
    table.register_generic("lonely")
    table.register_method("print", "data.frame", print)
    table.register_default("print", print)

    report = analyze_table(table)
    assert report.generics_without_methods == {"lonely"}
    assert report.generics_without_default == set()
    assert any("lonely" in w for w in report.warnings)
    assert any("data.frame" in w for w in report.warnings)


def test_analyze_empty_table():
    report = analyze_table(MethodTable())
    assert report.total_generics == 0
    assert report.total_methods == 0
    assert report.warnings == []
