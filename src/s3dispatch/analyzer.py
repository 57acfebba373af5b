"""
Dispatch Analyzer — read-only explanation of method resolution.

This module provides:
    - A trace of which method a generic call would select for a value
    - An inventory of a MethodTable with warning flags

IMPORTANT: Nothing here invokes a method or modifies a table.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from s3dispatch.table import DEFAULT, MethodTable, default_table
from s3dispatch.tags import ClassVector, classes_of, mode_of


@dataclass
class CandidateTrace:
    """One lookup key tried during dispatch."""
    key: str
    method: Optional[Callable] = None
    selected: bool = False
    source: str = "class"  # "class", "mode" or "default"

    @property
    def marker(self) -> str:
        if self.selected:
            return "=>"
        if self.method is not None:
            return " *"
        return "  "


@dataclass
class DispatchReport:
    """Which method a call would run, and which would follow via proceed()."""

    generic: str
    classes: ClassVector = ()
    primitive: bool = False
    mode: Optional[str] = None
    candidates: List[CandidateTrace] = field(default_factory=list)

    @property
    def selected(self) -> Optional[CandidateTrace]:
        for candidate in self.candidates:
            if candidate.selected:
                return candidate
        return None

    @property
    def chain(self) -> List[str]:
        """Keys reachable by dispatch followed by repeated proceed() calls."""
        return [c.key for c in self.candidates if c.method is not None]

    @property
    def resolved(self) -> bool:
        return self.selected is not None


def explain_dispatch(generic: str, value: Any, table: Optional[MethodTable] = None) -> DispatchReport:
    """
    Trace method resolution of `generic` for `value` without calling anything.

    Example output of format_dispatch for a value of class c("C", "A"):

        => baz.C
         * baz.A
           baz.default
    """
    table = table if table is not None else default_table
    classes = classes_of(value)
    report = DispatchReport(generic=generic, classes=classes, primitive=table.is_primitive(generic))

    for class_name in classes:
        report.candidates.append(CandidateTrace(key=class_name, method=table.lookup(generic, class_name)))

    if report.primitive:
        report.mode = mode_of(value)
        report.candidates.append(
            CandidateTrace(key=report.mode, method=table.lookup(generic, report.mode), source="mode")
        )

    report.candidates.append(
        CandidateTrace(key=DEFAULT, method=table.lookup(generic, DEFAULT), source="default")
    )

    for candidate in report.candidates:
        if candidate.method is not None:
            candidate.selected = True
            break

    return report


def format_dispatch(report: DispatchReport) -> str:
    """Render a DispatchReport, one candidate per line."""
    return "\n".join(f"{c.marker} {report.generic}.{c.key}" for c in report.candidates)


@dataclass
class TableReport:
    """Inventory of a MethodTable."""

    total_generics: int = 0
    total_methods: int = 0
    methods_per_generic: Dict[str, Set[str]] = field(default_factory=dict)
    generics_without_default: Set[str] = field(default_factory=set)
    generics_without_methods: Set[str] = field(default_factory=set)
    primitive_generics: Set[str] = field(default_factory=set)
    classes: Set[str] = field(default_factory=set)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_table(table: Optional[MethodTable] = None) -> TableReport:
    """
    Summarise a MethodTable.

    Flags generics that cannot always be resolved (no default method),
    generics declared without methods, and methods registered under a
    class name that contains a dot, which reads ambiguously as
    "generic.class".
    """
    table = table if table is not None else default_table
    report = TableReport()

    per_generic: Dict[str, Set[str]] = defaultdict(set)
    for key, _ in table.items():
        per_generic[key.generic].add(key.class_name)

    generics = table.generics() | set(per_generic)
    report.total_generics = len(generics)
    report.total_methods = len(table)
    report.methods_per_generic = {name: set(per_generic.get(name, set())) for name in sorted(generics)}

    for name in generics:
        class_names = per_generic.get(name, set())
        if not class_names:
            report.generics_without_methods.add(name)
        elif DEFAULT not in class_names:
            report.generics_without_default.add(name)
        if table.is_primitive(name):
            report.primitive_generics.add(name)
        report.classes.update(c for c in class_names if c != DEFAULT)

    if report.generics_without_default:
        report.add_warning(
            f"Generics without a default method: {', '.join(sorted(report.generics_without_default))}"
        )

    if report.generics_without_methods:
        report.add_warning(
            f"Generics with no methods: {', '.join(sorted(report.generics_without_methods))}"
        )

    dotted = sorted(c for c in report.classes if "." in c)
    if dotted:
        report.add_warning(f"Class names containing '.': {', '.join(dotted)}")

    return report
