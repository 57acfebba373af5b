"""
Method Table and Generic Registry

Maps (generic, class) pairs to ordinary Python callables.

ARCHITECTURAL RULE:
    Registration is permissive:
        - Re-registering a pair silently replaces the old method
        - Class names are never validated
        - Methods stay plain callables and can be called directly

Lookups never take a lock. Writes are serialised and publish a fresh,
immutable snapshot, so a reader always sees one consistent table.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Mapping, NamedTuple, Optional, Set


logger = logging.getLogger(__name__)

DEFAULT = "default"
"""Reserved class name under which a generic's fallback method is stored."""


class MethodKey(NamedTuple):
    generic: str
    class_name: str


@dataclass(frozen=True)
class GenericInfo:
    """
    Registry entry for a generic.

    Properties:
        name: Generic name used as the first half of every MethodKey
        primitive:
            If True, dispatch tries the value's mode after the class
            vector is exhausted and before the default method
    """

    name: str
    primitive: bool = False


class _Snapshot(NamedTuple):
    methods: Mapping[MethodKey, Callable]
    generics: Mapping[str, GenericInfo]


class MethodTable:
    """
    Registry of generics and their methods.

    Example:
        table = MethodTable()
        table.register_method("mean", "foo", mean_foo)
        table.register_default("mean", mean_default)
        table.lookup("mean", "foo")   # -> mean_foo
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot = _Snapshot(MappingProxyType({}), MappingProxyType({}))

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _publish(self, methods: Dict[MethodKey, Callable], generics: Dict[str, GenericInfo]) -> None:
        self._snapshot = _Snapshot(MappingProxyType(methods), MappingProxyType(generics))

    def register_generic(self, name: str, primitive: bool = False) -> GenericInfo:
        """
        Declare a generic.

        Generics are declared implicitly by their first method. Declaring
        one explicitly is only needed to mark it primitive-style.
        """
        info = GenericInfo(name=name, primitive=primitive)
        with self._lock:
            generics = dict(self._snapshot.generics)
            generics[name] = info
            self._publish(dict(self._snapshot.methods), generics)
        logger.debug("registered generic %s (primitive=%s)", name, primitive)
        return info

    def register_method(self, generic: str, class_name: str, fn: Callable) -> None:
        """Register `fn` as the method of `generic` for `class_name` (last write wins)."""
        if not callable(fn):
            raise TypeError(f"Method for {generic}.{class_name} must be callable, got {type(fn).__name__}")
        with self._lock:
            methods = dict(self._snapshot.methods)
            methods[MethodKey(generic, class_name)] = fn
            generics = dict(self._snapshot.generics)
            generics.setdefault(generic, GenericInfo(name=generic))
            self._publish(methods, generics)
        logger.debug("registered method %s.%s -> %r", generic, class_name, fn)

    def register_default(self, generic: str, fn: Callable) -> None:
        """Register the fallback method of `generic`."""
        self.register_method(generic, DEFAULT, fn)

    def unregister_method(self, generic: str, class_name: str) -> Callable:
        """Remove and return a registered method. Raises KeyError if absent."""
        key = MethodKey(generic, class_name)
        with self._lock:
            methods = dict(self._snapshot.methods)
            fn = methods.pop(key)
            self._publish(methods, dict(self._snapshot.generics))
        logger.debug("unregistered method %s.%s", generic, class_name)
        return fn

    def method(self, generic: str, class_name: str) -> Callable[[Callable], Callable]:
        """Decorator form of register_method. Returns the function unchanged."""
        def decorator(fn: Callable) -> Callable:
            self.register_method(generic, class_name, fn)
            return fn
        return decorator

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def lookup(self, generic: str, class_name: str) -> Optional[Callable]:
        """Exact-key lookup. Returns None when no method is registered."""
        return self._snapshot.methods.get(MethodKey(generic, class_name))

    def list_methods(self, generic: str) -> Set[str]:
        """Class names with a method for `generic` (DEFAULT included if present)."""
        return {key.class_name for key in self._snapshot.methods if key.generic == generic}

    def methods_for_class(self, class_name: str) -> Set[str]:
        """Generics that have a method for `class_name`."""
        return {key.generic for key in self._snapshot.methods if key.class_name == class_name}

    def generic_info(self, name: str) -> Optional[GenericInfo]:
        return self._snapshot.generics.get(name)

    def is_primitive(self, name: str) -> bool:
        info = self._snapshot.generics.get(name)
        return info is not None and info.primitive

    def generics(self) -> Set[str]:
        return set(self._snapshot.generics)

    def items(self):
        """(MethodKey, callable) pairs of one consistent snapshot."""
        return list(self._snapshot.methods.items())

    def copy(self) -> MethodTable:
        """Independent table with the same registrations."""
        snapshot = self._snapshot
        clone = MethodTable()
        clone._publish(dict(snapshot.methods), dict(snapshot.generics))
        return clone

    def __contains__(self, key) -> bool:
        return MethodKey(*key) in self._snapshot.methods

    def __len__(self) -> int:
        return len(self._snapshot.methods)

    def __repr__(self) -> str:
        return f"MethodTable({len(self._snapshot.generics)} generics, {len(self)} methods)"


default_table = MethodTable()
"""Process-wide table used when no table is given explicitly."""


def register_method(generic: str, class_name: str, fn: Callable) -> None:
    default_table.register_method(generic, class_name, fn)


def register_default(generic: str, fn: Callable) -> None:
    default_table.register_default(generic, fn)


def lookup(generic: str, class_name: str) -> Optional[Callable]:
    return default_table.lookup(generic, class_name)


def list_methods(generic: str) -> Set[str]:
    return default_table.list_methods(generic)
