"""
Class Tag Store

Attaches an ordered class vector to a runtime value.

These objects:
    - Do not validate class names (any string is a class)
    - Imply no relationship between class names
    - Keep the underlying value untouched

The class vector is pure ordering. The first name has the highest
dispatch precedence, the last name the lowest.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Tuple, Union


ClassVector = Tuple[str, ...]


def _as_class_vector(classes: Union[str, Iterable[str], None]) -> ClassVector:
    if classes is None:
        return ()
    if isinstance(classes, str):
        return (classes,)
    vector = tuple(classes)
    for name in vector:
        if not isinstance(name, str):
            raise TypeError(f"Class names must be strings, got {type(name).__name__}: {name!r}")
    return vector


@dataclass
class TaggedValue:
    """
    A value paired with an ordered class vector.

    Properties:
        value:
            The underlying (untagged) value

        classes:
            Ordered class names, e.g. ("ordered", "factor").
            May be empty. Duplicates are allowed.

    IMPORTANT:
        Reassigning `classes` is allowed and takes effect for the next
        dispatch only. A dispatch already in progress keeps the vector
        it started with.
    """

    value: Any
    classes: ClassVector = field(default_factory=tuple)

    def __setattr__(self, name: str, new_value: Any) -> None:
        if name == "classes":
            new_value = _as_class_vector(new_value)
        object.__setattr__(self, name, new_value)

    def __repr__(self) -> str:
        shown = ", ".join(f'"{c}"' for c in self.classes)
        return f"TaggedValue({self.value!r}, class=c({shown}))"


def tag(value: Any, classes: Union[str, Iterable[str]]) -> TaggedValue:
    """
    Attach a class vector to a value.

    Tagging an already tagged value replaces its classes (the most recent
    tagging wins); the class vectors are never merged.

    Args:
        value: Any value, tagged or not
        classes: A class name or an ordered iterable of class names

    Returns:
        A new TaggedValue wrapping the underlying value
    """
    return TaggedValue(value=unclass(value), classes=_as_class_vector(classes))


def classes_of(value: Any) -> ClassVector:
    """Return the class vector of a value; untagged values have none."""
    if isinstance(value, TaggedValue):
        return value.classes
    return ()


def unclass(value: Any) -> Any:
    """Strip the class vector, returning the underlying value."""
    if isinstance(value, TaggedValue):
        return value.value
    return value


def inherits(value: Any, what: Union[str, Iterable[str]], which: bool = False) -> Union[bool, List[int]]:
    """
    Test a value's class vector against one or more class names.

    With which=False, True if any name in `what` is in the class vector.
    With which=True, the 1-based position of each name of `what` within
    the class vector, or 0 where it is absent.
    """
    classes = classes_of(value)
    names = _as_class_vector(what)
    if which:
        return [classes.index(name) + 1 if name in classes else 0 for name in names]
    return any(name in classes for name in names)


def mode_of(value: Any) -> str:
    """
    Intrinsic runtime category of a value, ignoring any class vector.

    Used as the fallback dispatch key for primitive-style generics.

    Mapping:
        None                          -> "NULL"
        bool                          -> "logical"
        int, float, Decimal, Fraction -> "numeric"
        complex                       -> "complex"
        str                           -> "character"
        bytes, bytearray              -> "raw"
        list, tuple, dict, set        -> "list"
        other callables               -> "function"
        anything else                 -> "environment"
    """
    value = unclass(value)
    if value is None:
        return "NULL"
    # bool before numbers: bool is an int subclass
    if isinstance(value, bool):
        return "logical"
    if isinstance(value, numbers.Real):
        return "numeric"
    if isinstance(value, numbers.Complex):
        return "complex"
    if isinstance(value, numbers.Number):
        return "numeric"
    if isinstance(value, str):
        return "character"
    if isinstance(value, (bytes, bytearray)):
        return "raw"
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return "list"
    if callable(value):
        return "function"
    return "environment"
