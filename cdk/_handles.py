"""
Handle tables and native object lifetimes.

``HandleMap`` maps opaque ``u64`` handles to Python objects so the native
side can refer to host objects it cannot hold directly (callback
implementations, pending dispatches, continuation wakers).

``NativeHandle`` owns one native pointer. Every operation works on a
pointer cloned for that operation alone; the original is freed once the
owning wrapper is destroyed and no operation is in flight.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, ClassVar, Generic, TypeVar

from ._bindings import get_lib
from ._codec import FfiConverterPrimitive
from ._logging import scoped_logger
from ._status import rust_call
from .exceptions import ProtocolError, UsageError

__all__ = ["HandleMap", "NativeHandle", "NativeObject", "FfiConverterObject"]

T = TypeVar("T")
O = TypeVar("O", bound="NativeObject")

log = scoped_logger("handle")

MAX_CALL_COUNT = 2**63 - 1


class HandleMap(Generic[T]):
    """
    Thread-safe table of host objects keyed by monotonically increasing handles.

    Handles start at 1 and are never reused within the process, so a stale
    handle can never resolve to a different object.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._entries: dict[int, T] = {}
        self._counter = itertools.count(1)

    def insert(self, obj: T) -> int:
        with self._lock:
            handle = next(self._counter)
            self._entries[handle] = obj
        return handle

    def get(self, handle: int) -> T:
        with self._lock:
            try:
                return self._entries[handle]
            except KeyError:
                raise ProtocolError(f"{self.name}: unknown handle {handle}") from None

    def remove(self, handle: int) -> T:
        with self._lock:
            try:
                return self._entries.pop(handle)
            except KeyError:
                raise ProtocolError(f"{self.name}: unknown handle {handle}") from None

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class NativeHandle:
    """
    Reference-counted owner of a native object pointer.

    The call counter starts at 0 (the wrapper's own reference). ``acquire``
    adds one per in-flight operation, ``release`` and ``destroy`` subtract
    one each, and the transition to -1 frees the native object. -1 is
    terminal.
    """

    __slots__ = (
        "_pointer",
        "_clone_fn",
        "_free_fn",
        "type_name",
        "_lock",
        "_call_counter",
        "_destroyed",
    )

    def __init__(
        self,
        pointer: int,
        clone_fn: Callable[..., int],
        free_fn: Callable[..., None],
        type_name: str,
    ) -> None:
        self._pointer = pointer
        self._clone_fn = clone_fn
        self._free_fn = free_fn
        self.type_name = type_name
        self._lock = threading.Lock()
        self._call_counter = 0
        self._destroyed = False

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def call_counter(self) -> int:
        return self._call_counter

    def acquire(self) -> int:
        """
        Pin the object for one operation and return a cloned pointer.

        Raises
        ------
            UsageError: If the object was already freed or the counter would
                overflow.
        """
        with self._lock:
            if self._call_counter == -1:
                raise UsageError(f"{self.type_name} object has already been destroyed")
            if self._call_counter == MAX_CALL_COUNT:
                raise UsageError(f"{self.type_name} object call counter would overflow")
            self._call_counter += 1

        try:
            return rust_call(self._clone_fn, self._pointer)
        except BaseException:
            self.release()
            raise

    def release(self) -> None:
        """End an operation started by ``acquire``."""
        with self._lock:
            if self._call_counter == -1:
                raise UsageError(f"{self.type_name} object released more often than acquired")
            self._call_counter -= 1
            free = self._call_counter == -1
        if free:
            self._free()

    def destroy(self) -> None:
        """Drop the wrapper's own reference. Safe to call more than once."""
        with self._lock:
            if self._destroyed:
                return
            self._destroyed = True
            self._call_counter -= 1
            free = self._call_counter == -1
        if free:
            self._free()

    @contextmanager
    def borrow(self) -> Iterator[int]:
        pointer = self.acquire()
        try:
            yield pointer
        finally:
            self.release()

    def _free(self) -> None:
        log.debug("Freeing native object", extra={"object_type": self.type_name})
        rust_call(self._free_fn, self._pointer)


class NativeObject:
    """
    Base for Python wrappers of native objects.

    Subclasses name their clone and free entry points. ``close()`` releases
    the native object deterministically; ``__del__`` is only a backstop.

    Example:
        >>> with Token.decode(encoded) as token:
        ...     print(token.value())
    """

    _clone_symbol: ClassVar[str]
    _free_symbol: ClassVar[str]

    _handle: NativeHandle

    def _init_handle(self, pointer: int) -> None:
        lib = get_lib()
        self._handle = NativeHandle(
            pointer,
            getattr(lib, self._clone_symbol),
            getattr(lib, self._free_symbol),
            type(self).__name__,
        )

    @classmethod
    def _from_pointer(cls: type[O], pointer: int) -> O:
        obj = cls.__new__(cls)
        obj._init_handle(pointer)
        return obj

    @property
    def closed(self) -> bool:
        return self._handle.destroyed

    def close(self) -> None:
        """Release the native object once no call is using it."""
        self._handle.destroy()

    def __enter__(self: O) -> O:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __del__(self) -> None:
        handle = getattr(self, "_handle", None)
        if handle is not None:
            handle.destroy()


class FfiConverterObject(FfiConverterPrimitive[O]):
    """Pass native objects by cloned pointer."""

    def __init__(self, object_type: type[O]) -> None:
        self.object_type = object_type

    def check_lower(self, value: O) -> None:
        if not isinstance(value, self.object_type):
            raise TypeError(f"expected {self.object_type.__name__}, got {type(value).__name__}")

    def lift(self, pointer: int) -> O:
        return self.object_type._from_pointer(pointer)

    def lower(self, value: O) -> int:
        self.check_lower(value)
        # The clone belongs to the callee; only the counter round-trip stays here.
        with value._handle.borrow() as pointer:
            return pointer

    def discard(self, pointer: int) -> None:
        """Free a clone made by ``lower`` that never reached the callee."""
        rust_call(getattr(get_lib(), self.object_type._free_symbol), pointer)
