"""
Dispatch error conditions.

Every failure is a distinct, catchable condition. Nothing is retried and
no partial result is ever returned.
"""

from typing import Sequence


class DispatchError(Exception):
    """Base class for all dispatch failures."""
    pass


class MethodNotFoundError(DispatchError, LookupError):
    """No method matched the class vector and no default exists."""

    def __init__(self, generic: str, classes: Sequence[str]):
        self.generic = generic
        self.classes = tuple(classes)
        shown = ", ".join(f'"{c}"' for c in self.classes)
        super().__init__(
            f"no applicable method for '{generic}' applied to an object of class c({shown})"
        )


class NoNextMethodError(DispatchError):
    """proceed() was called with nothing further to try."""

    def __init__(self, generic: str):
        self.generic = generic
        super().__init__(f"no more methods for '{generic}'")


class GenericNotSpecifiedError(DispatchError):
    """proceed() was called outside of any dispatch."""

    def __init__(self):
        super().__init__("generic function not specified: proceed() called outside a method")


class ValueNotSpecifiedError(DispatchError):
    """A generic was called without a value to dispatch on."""

    def __init__(self, generic: str, argument: str = "x"):
        self.generic = generic
        self.argument = argument
        super().__init__(f"'{generic}' called without a value for argument '{argument}'")


class SerializationError(DispatchError):
    """A serialized method table could not be rebuilt."""
    pass
