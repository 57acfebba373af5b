"""
Test the worked examples built by s3dispatch.examples.
"""

import pytest

from s3dispatch.dispatcher import dispatch
from s3dispatch.errors import MethodNotFoundError, NoNextMethodError
from s3dispatch.examples import bar_z, build_example_table
from s3dispatch.tags import tag


@pytest.fixture
def table():
    return build_example_table()


def run(table, generic, value):
    return dispatch(generic, (value,), table=table)


def test_mean_follows_class_order(table):
    assert run(table, "mean", tag(1, ["foo", "bar"])) == "foo"
    assert run(table, "mean", tag(1, ["bar", "foo"])) == "bar"
    assert run(table, "mean", tag(1, "other")) == "default"


def test_bar_z(table):
    value = tag(1, "z")
    assert run(table, "bar", value) == "z"
    assert bar_z(value) == "z"
    with pytest.raises(MethodNotFoundError):
        run(table, "bar", tag(1, "y"))


def test_baz_next_method(table):
    assert run(table, "baz", tag(1, ["C", "A"])) == "CA"
    with pytest.raises(NoNextMethodError):
        run(table, "baz", tag(1, "C"))


def test_describe_mode_fallback(table):
    assert run(table, "describe", 3) == "a number"
    assert run(table, "describe", "x") == "a string"
    assert run(table, "describe", None) == "something"
    assert run(table, "describe", tag(3, "factor")) == "a factor, stored as a number"
