"""
Dispatcher and Continuation ("next method")

Resolves a generic call by walking the class vector of the dispatched-on
value against a MethodTable. First match wins.

Every dispatch creates its own DispatchFrame:
    - generic being resolved
    - snapshot of the class vector (frozen at dispatch start)
    - cursor just past the method that is currently running
    - the exact arguments the generic was called with

The running method's frame is bound in a context variable for the
duration of the call, so proceed() needs no hidden global state and
re-entrant or concurrent dispatches never see each other's frames.
"""

from __future__ import annotations

import contextvars
import functools
import inspect
import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

from s3dispatch.errors import (
    GenericNotSpecifiedError,
    MethodNotFoundError,
    NoNextMethodError,
    ValueNotSpecifiedError,
)
from s3dispatch.table import DEFAULT, MethodTable, default_table
from s3dispatch.tags import ClassVector, classes_of, mode_of


logger = logging.getLogger(__name__)

_active_frame: contextvars.ContextVar[Optional[DispatchFrame]] = contextvars.ContextVar(
    "s3dispatch_active_frame", default=None
)


@dataclass(frozen=True, eq=False)
class DispatchFrame:
    """
    Per-call dispatch state.

    Properties:
        generic: Name of the generic being resolved
        classes: Class vector of the dispatched value, snapshotted at start
        cursor: Index into `candidates` where the next lookup starts
        table: MethodTable the dispatch resolves against
        args, kwargs: Arguments exactly as passed to the generic
        primitive: Whether the mode fallback applies
        mode: Intrinsic mode of the dispatched value (primitive only)
        method: The method this frame was handed to

    IMPORTANT:
        Frames are immutable. Advancing produces a new frame, so a frame
        handed to one method is never changed by a later continuation.
    """

    generic: str
    classes: ClassVector
    cursor: int
    table: MethodTable
    args: Tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    primitive: bool = False
    mode: Optional[str] = None
    method: Optional[Callable] = None

    @property
    def candidates(self) -> Tuple[str, ...]:
        """Lookup keys in precedence order: classes, then mode, then default."""
        keys = self.classes
        if self.primitive:
            keys = keys + (self.mode,)
        return keys + (DEFAULT,)

    @property
    def exhausted(self) -> bool:
        return self.cursor >= len(self.candidates)


def _next_match(frame: DispatchFrame) -> Tuple[Optional[Callable], Optional[DispatchFrame]]:
    """Scan forward from the frame's cursor. Returns (method, frame for that method)."""
    candidates = frame.candidates
    for position in range(frame.cursor, len(candidates)):
        fn = frame.table.lookup(frame.generic, candidates[position])
        if fn is not None:
            logger.debug("%s: matched %r at position %d", frame.generic, candidates[position], position)
            return fn, replace(frame, cursor=position + 1, method=fn)
    return None, None


def _invoke(fn: Callable, frame: DispatchFrame) -> Any:
    token = _active_frame.set(frame)
    try:
        return fn(*frame.args, **frame.kwargs)
    finally:
        _active_frame.reset(token)


def _dispatch_value(args: Tuple[Any, ...], kwargs: Mapping[str, Any], argument: str) -> Any:
    if args:
        return args[0]
    if argument in kwargs:
        return kwargs[argument]
    raise KeyError(argument)


def dispatch(
    generic: str,
    args: Tuple[Any, ...] = (),
    kwargs: Optional[Mapping[str, Any]] = None,
    table: Optional[MethodTable] = None,
    argument: str = "x",
) -> Any:
    """
    Resolve and invoke a method of `generic`.

    The value dispatched on is the first positional argument or, if there
    are none, the keyword argument named `argument`. The selected method
    receives `args` and `kwargs` unchanged.

    Raises:
        ValueNotSpecifiedError: no value to dispatch on
        MethodNotFoundError: nothing matched and no default exists
    """
    table = table if table is not None else default_table
    kwargs = MappingProxyType(dict(kwargs or {}))
    try:
        value = _dispatch_value(args, kwargs, argument)
    except KeyError:
        raise ValueNotSpecifiedError(generic, argument) from None

    primitive = table.is_primitive(generic)
    frame = DispatchFrame(
        generic=generic,
        classes=tuple(classes_of(value)),
        cursor=0,
        table=table,
        args=tuple(args),
        kwargs=kwargs,
        primitive=primitive,
        mode=mode_of(value) if primitive else None,
    )
    fn, method_frame = _next_match(frame)
    if fn is None:
        raise MethodNotFoundError(generic, frame.classes)
    return _invoke(fn, method_frame)


def current_frame() -> Optional[DispatchFrame]:
    """Frame of the innermost method currently running, or None."""
    return _active_frame.get()


def _called_from_method(frame: DispatchFrame, here) -> bool:
    """Whether the caller of proceed() is the body of the frame's method."""
    code = getattr(inspect.unwrap(frame.method), "__code__", None)
    if code is None:
        # builtins, partials and callable objects have no body to compare
        return True
    caller = here.f_back if here is not None else None
    try:
        return caller is not None and caller.f_code is code
    finally:
        del caller


def proceed(frame: Optional[DispatchFrame] = None) -> Any:
    """
    Invoke the next method in the dispatch sequence.

    Resumes where the running method's dispatch left off, using the class
    vector captured when dispatch started, and passes the same arguments
    the running method received.

    Without an explicit frame, proceed() must be called from the body of
    the method the running frame was handed to. A helper called from that
    method should pass `current_frame()` on explicitly.

    Args:
        frame: Frame to continue from. Defaults to the running method's.

    Raises:
        GenericNotSpecifiedError: not called from within a dispatched method
        NoNextMethodError: no further class, mode or default method
    """
    if frame is None:
        frame = _active_frame.get()
        if frame is not None and not _called_from_method(frame, inspect.currentframe()):
            raise GenericNotSpecifiedError()
    if not isinstance(frame, DispatchFrame):
        raise GenericNotSpecifiedError()
    fn, method_frame = _next_match(frame)
    if fn is None:
        raise NoNextMethodError(frame.generic)
    return _invoke(fn, method_frame)


class Generic:
    """
    Named entry point that dispatches instead of running a body.

    Example:
        mean = Generic("mean")

        @mean.method("foo")
        def mean_foo(x, ...):
            return "foo"

        mean(tag(1, "foo"))   # -> "foo"
    """

    def __init__(
        self,
        name: str,
        table: Optional[MethodTable] = None,
        primitive: bool = False,
        argument: str = "x",
    ):
        self.name = name
        self.table = table if table is not None else default_table
        self.argument = argument
        if primitive or self.table.generic_info(name) is None:
            self.table.register_generic(name, primitive=primitive)

    @property
    def primitive(self) -> bool:
        return self.table.is_primitive(self.name)

    def __call__(self, *args, **kwargs):
        return dispatch(self.name, args, kwargs, table=self.table, argument=self.argument)

    def method(self, class_name: str) -> Callable[[Callable], Callable]:
        """Decorator registering a method for `class_name`."""
        return self.table.method(self.name, class_name)

    def default(self, fn: Callable) -> Callable:
        """Decorator registering the default method."""
        self.table.register_default(self.name, fn)
        return fn

    def lookup(self, class_name: str) -> Optional[Callable]:
        return self.table.lookup(self.name, class_name)

    def list_methods(self):
        return self.table.list_methods(self.name)

    def __repr__(self) -> str:
        kind = "primitive generic" if self.primitive else "generic"
        return f"<{kind} {self.name}>"


def generic(
    name: Any = None,
    table: Optional[MethodTable] = None,
    primitive: bool = False,
    argument: Optional[str] = None,
):
    """
    Decorator turning a function stub into a Generic.

    The stub's body is never run. Its name becomes the generic name unless
    one is given, and its first parameter becomes the dispatch argument.

        @generic
        def area(shape, *args, **kwargs):
            ...
    """
    def decorator(fn: Callable) -> Generic:
        params = list(inspect.signature(fn).parameters)
        dispatch_on = argument or (params[0] if params else "x")
        g = Generic(name or fn.__name__, table=table, primitive=primitive, argument=dispatch_on)
        functools.update_wrapper(g, fn)
        return g

    if callable(name):
        fn, name = name, None
        return decorator(fn)
    return decorator
