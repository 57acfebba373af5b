"""
Worked examples for the dispatch model.

Builds the small generics used to explain S3 dispatch:
    - mean: precedence is the order of the class vector
    - bar:  a method for the last class only
    - baz:  continuation with proceed()
    - describe: a primitive-style generic falling back on the value's mode

Methods are module-level functions so they can be referenced by import
path when the table is serialized.
"""
from typing import Optional

from s3dispatch.dispatcher import Generic, proceed
from s3dispatch.table import MethodTable


def mean_foo(x, *args, **kwargs):
    return "foo"


def mean_bar(x, *args, **kwargs):
    return "bar"


def mean_default(x, *args, **kwargs):
    return "default"


def bar_z(x, *args, **kwargs):
    return "z"


def baz_a(x, *args, **kwargs):
    return "A"


def baz_c(x, *args, **kwargs):
    return "C" + proceed()


def describe_numeric(x, *args, **kwargs):
    return "a number"


def describe_character(x, *args, **kwargs):
    return "a string"


def describe_default(x, *args, **kwargs):
    return "something"


def describe_factor(x, *args, **kwargs):
    return "a factor, stored as " + proceed()


def build_example_table(table: Optional[MethodTable] = None) -> MethodTable:
    table = table if table is not None else MethodTable()

    table.register_method("mean", "foo", mean_foo)
    table.register_method("mean", "bar", mean_bar)
    table.register_default("mean", mean_default)

    table.register_method("bar", "z", bar_z)

    table.register_method("baz", "A", baz_a)
    table.register_method("baz", "C", baz_c)

    describe = Generic("describe", table=table, primitive=True)
    describe.method("numeric")(describe_numeric)
    describe.method("character")(describe_character)
    describe.method("factor")(describe_factor)
    describe.default(describe_default)

    return table
