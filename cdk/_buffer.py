"""
Native buffer ownership.

A ``RustBuffer`` returned by the native library is owned by the host until
it is either freed here or handed back as a call argument. Host bytes cross
the other way as a pinned ``ForeignBytes`` view copied by
``ffi_cdk_ffi_rustbuffer_from_bytes``.
"""

from __future__ import annotations

import ctypes

from ._bindings import get_lib
from ._native import ForeignBytes, RustBuffer
from ._status import rust_call
from .exceptions import UsageError

__all__ = ["INT32_MAX", "rustbuffer_from_bytes", "rustbuffer_free", "consume_rust_buffer"]

INT32_MAX = 2**31 - 1


def rustbuffer_from_bytes(data: bytes) -> RustBuffer:
    """Copy host bytes into a new native-owned buffer."""
    size = len(data)
    if size > INT32_MAX:
        raise UsageError(f"buffer of {size} bytes exceeds the int32 length limit")

    if size:
        pinned = (ctypes.c_uint8 * size).from_buffer_copy(data)
        foreign = ForeignBytes(size, ctypes.cast(pinned, ctypes.POINTER(ctypes.c_uint8)))
    else:
        foreign = ForeignBytes(0, None)

    # ``pinned`` stays referenced until the call returns.
    return rust_call(get_lib().ffi_cdk_ffi_rustbuffer_from_bytes, foreign)


def rustbuffer_free(buf: RustBuffer) -> None:
    """Release a native-owned buffer."""
    rust_call(get_lib().ffi_cdk_ffi_rustbuffer_free, buf)


def consume_rust_buffer(buf: RustBuffer) -> bytes:
    """Copy the contents out of ``buf`` and free it."""
    try:
        return buf.to_bytes()
    finally:
        rustbuffer_free(buf)
