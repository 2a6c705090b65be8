"""
Native futures driven from Python.

An async native method returns a ``u64`` future handle. The host drives it:

    poll(handle, continuation_callback, continuation) -> wait for wake
      MaybeReady: poll again
      Ready:      complete(handle, status) -> lift result
    free(handle) exactly once, on every exit path

The continuation callback has a fixed address. Each poll registers a one-shot
waker under a fresh continuation handle; the callback removes it and wakes
exactly one waiter.
"""

from __future__ import annotations

import asyncio
import enum
import queue
from collections.abc import Callable
from typing import Any, Generic, NamedTuple, TypeVar

from ._bindings import get_lib
from ._handles import HandleMap
from ._logging import scoped_logger
from ._native import (
    RUST_FUTURE_POLL_MAYBE_READY,
    RUST_FUTURE_POLL_READY,
    RustFutureContinuationCallback,
)
from ._status import report_fault, rust_call_with_error
from .exceptions import ProtocolError

__all__ = ["FutureFamily", "FutureState", "RustFuture", "RUST_BUFFER", "POINTER"]

T = TypeVar("T")

log = scoped_logger("async")


class FutureFamily(NamedTuple):
    """Entry points for futures sharing one ``complete`` return type."""

    name: str
    poll: str
    complete: str
    free: str


def _family(name: str) -> FutureFamily:
    return FutureFamily(
        name,
        f"ffi_cdk_ffi_rust_future_poll_{name}",
        f"ffi_cdk_ffi_rust_future_complete_{name}",
        f"ffi_cdk_ffi_rust_future_free_{name}",
    )


RUST_BUFFER = _family("rust_buffer")
POINTER = _family("pointer")


class FutureState(enum.Enum):
    CREATED = "created"
    POLLING = "polling"
    READY = "ready"
    COMPLETED = "completed"
    FREED = "freed"


# =============================================================================
# Continuations
# =============================================================================

CONTINUATIONS: HandleMap[Callable[[int], None]] = HandleMap("continuation")


def _on_continuation(handle: int, poll_result: int) -> None:
    try:
        wake = CONTINUATIONS.remove(handle)
    except ProtocolError as fault:
        report_fault(fault)
        return
    wake(poll_result)


# Module-level so the function pointer outlives every registration.
_continuation_callback = RustFutureContinuationCallback(_on_continuation)


def _resolve(fut: asyncio.Future[int], poll_result: int) -> None:
    if not fut.done():
        fut.set_result(poll_result)


# =============================================================================
# RustFuture
# =============================================================================


class RustFuture(Generic[T]):
    """
    One native future, driven to completion exactly once.

    Args:
        handle: Future handle returned by the async entry point.
        family: Poll/complete/free entry points matching the return type.
        lift: Converts the raw ``complete`` result into the Python value.
        error_converter: Lifts a domain error reported by ``complete``.
    """

    def __init__(
        self,
        handle: int,
        family: FutureFamily,
        lift: Callable[[Any], T],
        error_converter: Any = None,
    ) -> None:
        lib = get_lib()
        self._handle = handle
        self._family = family
        self._poll_fn = getattr(lib, family.poll)
        self._complete_fn = getattr(lib, family.complete)
        self._free_fn = getattr(lib, family.free)
        self._lift = lift
        self._error_converter = error_converter
        self.state = FutureState.CREATED
        self.poll_count = 0

    def wait(self) -> T:
        """Block the calling thread until the future completes."""
        try:
            while True:
                slot: queue.Queue[int] = queue.Queue(maxsize=1)
                self._poll(slot.put_nowait)
                if self._is_ready(slot.get()):
                    break
            return self._complete()
        finally:
            self._free()

    async def wait_async(self) -> T:
        """Await completion without blocking the event loop."""
        loop = asyncio.get_running_loop()
        try:
            while True:
                fut: asyncio.Future[int] = loop.create_future()
                self._poll(lambda code, fut=fut: loop.call_soon_threadsafe(_resolve, fut, code))
                if self._is_ready(await fut):
                    break
            return self._complete()
        finally:
            self._free()

    def _poll(self, wake: Callable[[int], None]) -> None:
        self.state = FutureState.POLLING
        self.poll_count += 1
        continuation = CONTINUATIONS.insert(wake)
        self._poll_fn(self._handle, _continuation_callback, continuation)

    def _is_ready(self, poll_result: int) -> bool:
        if poll_result == RUST_FUTURE_POLL_READY:
            self.state = FutureState.READY
            return True
        if poll_result == RUST_FUTURE_POLL_MAYBE_READY:
            return False
        raise ProtocolError(f"unknown future poll result {poll_result}")

    def _complete(self) -> T:
        raw = rust_call_with_error(self._error_converter, self._complete_fn, self._handle)
        self.state = FutureState.COMPLETED
        log.debug(
            "Native future completed",
            extra={"family": self._family.name, "polls": self.poll_count},
        )
        return self._lift(raw)

    def _free(self) -> None:
        if self.state is FutureState.FREED:
            return
        self._free_fn(self._handle)
        self.state = FutureState.FREED
