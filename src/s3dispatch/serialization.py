"""
Serialization helpers for method tables and dispatch reports.

A table is exported as names only; methods are referenced by their
import path ("module:qualname") and re-imported on load:

    generics:
      mean:
        primitive: false
        methods:
          foo: s3dispatch.examples:mean_foo
          default: s3dispatch.examples:mean_default
"""
from __future__ import annotations

import importlib
import json
import warnings
from typing import Any, Callable, Dict, Optional

import yaml

from s3dispatch.analyzer import DispatchReport
from s3dispatch.errors import SerializationError
from s3dispatch.table import MethodTable


def callable_to_ref(fn: Callable) -> str:
    module = getattr(fn, "__module__", None)
    qualname = getattr(fn, "__qualname__", None)
    if not module or not qualname or "<" in qualname:
        raise SerializationError(f"Cannot reference {fn!r} by import path")
    return f"{module}:{qualname}"


def callable_from_ref(ref: str) -> Callable:
    if not isinstance(ref, str):
        raise SerializationError(f"Method reference must be a string, got {type(ref).__name__}: {ref!r}")
    module_name, sep, qualname = ref.partition(":")
    if not sep or not module_name or not qualname:
        raise SerializationError(f"Malformed method reference: {ref!r}")
    try:
        obj: Any = importlib.import_module(module_name)
        for part in qualname.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as e:
        raise SerializationError(f"Cannot resolve method reference {ref!r}: {e}") from e
    if not callable(obj):
        raise SerializationError(f"Method reference {ref!r} is not callable")
    return obj


def table_to_dict(table: MethodTable) -> Dict[str, Any]:
    generics: Dict[str, Any] = {}
    for name in sorted(table.generics()):
        generics[name] = {"primitive": table.is_primitive(name), "methods": {}}
    for key, fn in table.items():
        entry = generics.setdefault(key.generic, {"primitive": False, "methods": {}})
        entry["methods"][key.class_name] = callable_to_ref(fn)
    return {"generics": generics}


def table_from_dict(d: Dict[str, Any], table: Optional[MethodTable] = None) -> MethodTable:
    """
    Rebuild a table from its dict form.

    An empty document or `generics:` left empty loads nothing. Any other
    structure that is not a mapping where one is expected raises
    SerializationError.
    """
    table = table if table is not None else MethodTable()
    if d is None:
        return table
    if not isinstance(d, dict):
        raise SerializationError(f"Expected a mapping at top level, got {type(d).__name__}")
    generics = d.get("generics") or {}
    if not isinstance(generics, dict):
        raise SerializationError(f"Expected 'generics' to be a mapping, got {type(generics).__name__}")
    for name, entry in generics.items():
        if not isinstance(entry, dict):
            warnings.warn(f"Skipping generic {name!r}: expected a mapping, got {type(entry).__name__}", UserWarning)
            continue
        methods = entry.get("methods") or {}
        if not isinstance(methods, dict):
            raise SerializationError(f"Expected methods of {name!r} to be a mapping, got {type(methods).__name__}")
        table.register_generic(str(name), primitive=bool(entry.get("primitive", False)))
        for class_name, ref in methods.items():
            table.register_method(str(name), str(class_name), callable_from_ref(ref))
    return table


def table_to_json(table: MethodTable) -> str:
    return json.dumps(table_to_dict(table), sort_keys=True)


def table_from_json(s: str, table: Optional[MethodTable] = None) -> MethodTable:
    return table_from_dict(json.loads(s), table)


def table_to_yaml(table: MethodTable) -> str:
    return yaml.safe_dump(table_to_dict(table))


def table_from_yaml(s: str, table: Optional[MethodTable] = None) -> MethodTable:
    return table_from_dict(yaml.safe_load(s), table)


def load_table(path: str, table: Optional[MethodTable] = None) -> MethodTable:
    """Read a YAML (or JSON, which is valid YAML) table file."""
    with open(path) as fh:
        return table_from_yaml(fh.read(), table)


def report_to_dict(report: DispatchReport) -> Dict[str, Any]:
    return {
        "generic": report.generic,
        "classes": list(report.classes),
        "primitive": report.primitive,
        "mode": report.mode,
        "candidates": [
            {
                "key": c.key,
                "source": c.source,
                "method": callable_to_ref(c.method) if c.method is not None else None,
                "selected": c.selected,
            }
            for c in report.candidates
        ],
    }


def report_to_yaml(report: DispatchReport) -> str:
    return yaml.safe_dump(report_to_dict(report), sort_keys=False)
