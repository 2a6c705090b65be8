"""
Call status channel.

Every native entry point takes a trailing ``RustCallStatus*`` out-parameter.
``rust_call`` and ``rust_call_with_error`` allocate it, invoke the entry
point and turn the reported code into a return value, a typed domain error,
or a fault.

Faults detected on a native thread (inside a callback invoked by the native
library) cannot be raised through the C stack; they are handed to the
process fault handler instead. See ``set_fault_handler``.
"""

from __future__ import annotations

import ctypes
import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from ._logging import scoped_logger
from ._native import CALL_ERROR, CALL_SUCCESS, CALL_UNEXPECTED_ERROR, RustCallStatus
from .exceptions import DOUBLE_FAULT_MESSAGE, BridgeFault, InternalError, ProtocolError

if TYPE_CHECKING:
    from ._codec import FfiConverterRustBuffer

__all__ = [
    "rust_call",
    "rust_call_with_error",
    "check_call_status",
    "set_fault_handler",
    "report_fault",
]

T = TypeVar("T")

FaultHandler = Callable[[BridgeFault], None]

log = scoped_logger("ffi")


def rust_call(fn: Callable[..., T], *args: Any) -> T:
    """Call a native entry point that declares no domain error."""
    return rust_call_with_error(None, fn, *args)


def rust_call_with_error(
    error_converter: FfiConverterRustBuffer[Exception] | None,
    fn: Callable[..., T],
    *args: Any,
) -> T:
    """
    Call a native entry point and check its status out-parameter.

    Args:
        error_converter: Converter lifting the serialized domain error, or
            None if the entry point declares no error type.
        fn: Native function (ctypes function pointer or compatible callable).
        *args: Declared arguments; the status pointer is appended.

    Returns
    -------
        The entry point's return value, valid only on success.

    Raises
    ------
        FfiError: Status code 1, lifted through ``error_converter``.
        InternalError: Status code 2 (native panic).
        ProtocolError: Unknown status code, or code 1 with no error type.
    """
    status = RustCallStatus(code=CALL_SUCCESS)
    result = fn(*args, ctypes.pointer(status))
    check_call_status(error_converter, status)
    return result


def check_call_status(
    error_converter: FfiConverterRustBuffer[Exception] | None,
    status: RustCallStatus,
) -> None:
    """Raise the error or fault described by ``status``, if any."""
    from ._codec import STRING

    code = status.code
    if code == CALL_SUCCESS:
        return

    if code == CALL_ERROR:
        if error_converter is None:
            STRING.discard(status.error_buf)
            raise ProtocolError("native call reported a domain error but declares no error type")
        raise error_converter.lift(status.error_buf)

    if code == CALL_UNEXPECTED_ERROR:
        if status.error_buf.len > 0:
            message = STRING.lift(status.error_buf)
            log.error("Native panic", extra={"panic_message": message})
            raise InternalError(message)
        STRING.discard(status.error_buf)
        log.error("Native panic without message")
        raise InternalError(DOUBLE_FAULT_MESSAGE)

    raise ProtocolError(f"unknown RustCallStatus code {code}: protocol violation")


# =============================================================================
# Fault handler
# =============================================================================


def _default_fault_handler(fault: BridgeFault) -> None:
    log.critical("Unrecoverable bridge fault, aborting", exc_info=fault)
    os.abort()


_fault_handler: FaultHandler = _default_fault_handler


def set_fault_handler(handler: FaultHandler | None) -> FaultHandler:
    """
    Install the handler for faults detected inside native-invoked callbacks.

    The default handler logs the fault at CRITICAL and aborts the process.
    A replacement must not let the process keep talking to the native
    library as if nothing happened.

    Args:
        handler: New handler, or None to restore the default.

    Returns
    -------
        The previously installed handler.
    """
    global _fault_handler
    previous = _fault_handler
    _fault_handler = handler or _default_fault_handler
    return previous


def report_fault(fault: BridgeFault) -> None:
    """Hand a fault detected on a native thread to the fault handler."""
    _fault_handler(fault)
