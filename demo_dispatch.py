"""
Demo: build the example generics, explain and run a few dispatches.
"""

import logging

from s3dispatch.analyzer import analyze_table, explain_dispatch, format_dispatch
from s3dispatch.dispatcher import dispatch
from s3dispatch.errors import NoNextMethodError
from s3dispatch.examples import build_example_table
from s3dispatch.serialization import table_to_yaml
from s3dispatch.tags import tag


def main():
    logging.basicConfig(level=logging.INFO)
    table = build_example_table()

    print("=" * 70)
    print("METHOD TABLE")
    print("=" * 70)
    print(table_to_yaml(table))

    calls = [
        ("mean", tag(1, ["foo", "bar"])),
        ("mean", tag(1, ["bar", "foo"])),
        ("bar", tag(1, ["x", "y", "z"])),
        ("baz", tag(1, ["C", "A"])),
        ("describe", tag(3, "factor")),
        ("describe", "text"),
    ]

    for generic, value in calls:
        print()
        print(f"{generic}({value!r})")
        print(format_dispatch(explain_dispatch(generic, value, table)))
        print(f"  -> {dispatch(generic, (value,), table=table)!r}")

    print()
    try:
        dispatch("baz", (tag(1, "C"),), table=table)
    except NoNextMethodError as e:
        print(f"baz on class C alone: {e}")

    report = analyze_table(table)
    print()
    print(f"{report.total_generics} generics, {report.total_methods} methods")
    for warning in report.warnings:
        print(f"  ⚠️  {warning}")


if __name__ == "__main__":
    main()
