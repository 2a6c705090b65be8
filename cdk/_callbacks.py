"""
Reverse calls: the native library invoking Python implementations.

A callback interface is a vtable of fixed-address dispatch functions plus a
``HandleMap`` of Python implementations. Each dispatch:

1. lifts its arguments and fills the out ``ForeignFuture`` with a guard
   handle and the guard's free function,
2. starts a worker thread running the Python method,
3. starts a waiter thread that delivers whichever arrives first: the
   outcome (completion callback invoked exactly once) or cancellation
   through the guard's free function (completion callback never invoked).

Python methods that have side effects can look at
``current_cancellation()`` to stop before committing to them.
"""

from __future__ import annotations

import contextvars
import functools
import queue
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from ._codec import STRING, FfiConverterPrimitive, FfiConverterRustBuffer
from ._handles import HandleMap
from ._logging import scoped_logger
from ._native import (
    CALL_ERROR,
    CALL_SUCCESS,
    CALL_UNEXPECTED_ERROR,
    ForeignFutureFree,
    RustCallStatus,
)
from ._status import report_fault
from .exceptions import BridgeFault, FfiError, ProtocolError

__all__ = [
    "CancellationToken",
    "current_cancellation",
    "FfiConverterCallbackInterface",
    "dispatch_async",
    "GUARDS",
]

T = TypeVar("T")

log = scoped_logger("callback")


class CancellationToken:
    """
    Cancellation signal for one native-invoked method call.

    The native side cancels a dispatch by dropping its future. The Python
    method is not interrupted; it may check ``cancelled`` or ``wait()`` and
    skip work whose result would be discarded anyway.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return ``cancelled``."""
        return self._event.wait(timeout)

    def cancel(self) -> None:
        self._event.set()


_NEVER_CANCELLED = CancellationToken()
_current_token: contextvars.ContextVar[CancellationToken] = contextvars.ContextVar(
    "cdk_cancellation", default=_NEVER_CANCELLED
)


def current_cancellation() -> CancellationToken:
    """Token of the dispatch running on this thread (never cancelled outside one)."""
    return _current_token.get()


# =============================================================================
# Callback handle tables
# =============================================================================


class FfiConverterCallbackInterface(FfiConverterPrimitive[T]):
    """Pass Python implementations of a callback interface by handle."""

    def __init__(self, interface: type[T]) -> None:
        self.interface = interface
        self.handles: HandleMap[T] = HandleMap(interface.__name__)

    def check_lower(self, value: T) -> None:
        if not isinstance(value, self.interface):
            raise TypeError(f"expected {self.interface.__name__}, got {type(value).__name__}")

    def lift(self, handle: int) -> T:
        return self.handles.get(handle)

    def lower(self, value: T) -> int:
        self.check_lower(value)
        return self.handles.insert(value)

    def discard(self, handle: int) -> None:
        self.handles.remove(handle)

    def free(self, handle: int) -> None:
        """``uniffi_free`` vtable slot: the native side dropped its reference."""
        try:
            self.handles.remove(handle)
        except ProtocolError as fault:
            report_fault(fault)


# =============================================================================
# Dispatch
# =============================================================================

_CANCELLED = object()


class _PendingDispatch:
    __slots__ = ("method", "token", "signals")

    def __init__(self, method: str) -> None:
        self.method = method
        self.token = CancellationToken()
        self.signals: queue.Queue[Any] = queue.Queue()


GUARDS: HandleMap[_PendingDispatch] = HandleMap("foreign future guard")


def _free_guard(guard: int) -> None:
    try:
        pending = GUARDS.remove(guard)
    except ProtocolError as fault:
        report_fault(fault)
        return
    pending.token.cancel()
    pending.signals.put(_CANCELLED)


# Module-level so the function pointer outlives every dispatch.
_free_guard_callback = ForeignFutureFree(_free_guard)


def dispatch_async(
    interface: FfiConverterCallbackInterface[Any],
    handle: int,
    method: str,
    lift_args: Callable[[], tuple[Any, ...]],
    *,
    error_converter: FfiConverterRustBuffer[FfiError],
    struct_type: type,
    lower_return: Callable[[Any], Any] | None,
    complete: Callable[[int, Any], None],
    callback_data: int,
    out_future: Any,
) -> None:
    """
    Start one native-invoked method call and return immediately.

    Args:
        interface: Converter owning the implementation table.
        handle: Implementation handle passed by the native side.
        method: Method name on the implementation.
        lift_args: Lifts the serialized arguments; run before returning.
        error_converter: Serializes domain errors raised by the method.
        struct_type: Completion struct for the method's return family.
        lower_return: Lowers the return value, or None for no return value.
        complete: Native completion callback.
        callback_data: Opaque token passed back to ``complete``.
        out_future: ``ForeignFuture*`` to fill before returning.
    """
    try:
        args = lift_args()
        impl = interface.lift(handle)
    except BridgeFault as fault:
        report_fault(fault)
        return

    pending = _PendingDispatch(method)
    guard = GUARDS.insert(pending)
    out_future.contents.handle = guard
    out_future.contents.free = _free_guard_callback

    call = functools.partial(getattr(impl, method), *args)
    context = contextvars.copy_context()
    worker = threading.Thread(
        target=context.run,
        args=(_run_method, pending, call),
        name=f"cdk-callback-{method}",
        daemon=True,
    )
    waiter = threading.Thread(
        target=_deliver,
        args=(pending, error_converter, struct_type, lower_return, complete, callback_data),
        name=f"cdk-callback-{method}-waiter",
        daemon=True,
    )
    worker.start()
    waiter.start()


def _run_method(pending: _PendingDispatch, call: Callable[[], Any]) -> None:
    _current_token.set(pending.token)
    try:
        outcome = (CALL_SUCCESS, call())
    except FfiError as e:
        outcome = (CALL_ERROR, e)
    except BaseException as e:
        # Includes KeyboardInterrupt and SystemExit: the native side still
        # needs its completion, and this thread ends here either way.
        log.warning(
            "Callback method raised unexpectedly",
            extra={"method": pending.method},
            exc_info=True,
        )
        outcome = (CALL_UNEXPECTED_ERROR, e)

    if pending.token.cancelled:
        log.debug("Cancelled dispatch ran to completion", extra={"method": pending.method})
    pending.signals.put(outcome)


def _deliver(
    pending: _PendingDispatch,
    error_converter: FfiConverterRustBuffer[FfiError],
    struct_type: type,
    lower_return: Callable[[Any], Any] | None,
    complete: Callable[[int, Any], None],
    callback_data: int,
) -> None:
    signal = pending.signals.get()
    if signal is _CANCELLED:
        log.debug("Dispatch cancelled, result discarded", extra={"method": pending.method})
        return

    code, value = signal
    try:
        result = _completion_struct(
            pending.method, code, value, error_converter, struct_type, lower_return
        )
    except BridgeFault as fault:
        report_fault(fault)
        return
    complete(callback_data, result)


def _completion_struct(
    method: str,
    code: int,
    value: Any,
    error_converter: FfiConverterRustBuffer[FfiError],
    struct_type: type,
    lower_return: Callable[[Any], Any] | None,
) -> Any:
    status = RustCallStatus(code=CALL_SUCCESS)
    fields: dict[str, Any] = {}
    try:
        if code == CALL_SUCCESS:
            if lower_return is not None:
                fields["return_value"] = lower_return(value)
        elif code == CALL_ERROR:
            status.code = CALL_ERROR
            status.error_buf = error_converter.lower(value)
        else:
            status.code = CALL_UNEXPECTED_ERROR
            status.error_buf = STRING.lower(f"{type(value).__name__}: {value}")
    except (TypeError, ValueError) as e:
        log.error("Failed to lower callback result", extra={"method": method}, exc_info=True)
        fields.clear()
        status.code = CALL_UNEXPECTED_ERROR
        status.error_buf = STRING.lower(f"failed to lower result of {method}: {e}")
    return struct_type(call_status=status, **fields)
