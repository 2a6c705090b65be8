"""
Native library loading and interface handshake.

The library is located, loaded and checked lazily on the first ``get_lib()``
call. Checking means: the contract version and every interface checksum
compiled into this package must match what the library reports, and the
callback vtables are registered. Nothing else talks to the library before
that succeeds.

Environment::

    CDK_FFI_LIBRARY=/path/to/libcdk_ffi.so   explicit library path
"""

from __future__ import annotations

import ctypes
import ctypes.util
import os
import sys
import threading
from pathlib import Path
from typing import Any

from ._logging import scoped_logger
from ._native import API_CHECKSUMS, CONTRACT_VERSION, setup_signatures
from .exceptions import LibraryError, ProtocolError

__all__ = ["get_lib", "install_lib", "reset_lib"]

log = scoped_logger("ffi")

_lib: Any = None
_lib_lock = threading.RLock()


def _platform_lib_name() -> str:
    if sys.platform == "darwin":
        return "libcdk_ffi.dylib"
    if os.name == "nt":
        return "cdk_ffi.dll"
    return "libcdk_ffi.so"


def _find_library() -> str:
    """
    Resolve the native library path.

    Resolution: $CDK_FFI_LIBRARY > bundled next to the package > system loader.
    """
    override = os.environ.get("CDK_FFI_LIBRARY")
    if override:
        if not Path(override).exists():
            raise LibraryError(
                f"CDK_FFI_LIBRARY points to a missing file: {override}",
                details={"path": override},
            )
        return override

    bundled = Path(__file__).parent / _platform_lib_name()
    if bundled.exists():
        return str(bundled)

    found = ctypes.util.find_library("cdk_ffi")
    if found:
        return found

    raise LibraryError(
        f"Could not find {_platform_lib_name()}. "
        "Set CDK_FFI_LIBRARY or reinstall cdk-ffi with the native build enabled.",
        details={"searched": [str(bundled), "system loader"]},
    )


def _load_library() -> ctypes.CDLL:
    path = _find_library()
    try:
        lib = ctypes.CDLL(path)
    except OSError as e:
        raise LibraryError(f"Failed to load {path}: {e}", details={"path": path}) from e

    try:
        setup_signatures(lib)
    except AttributeError as e:
        raise ProtocolError(f"native library {path} is missing a symbol: {e}") from e

    log.info("Loaded native library", extra={"path": path})
    return lib


def check_contract_version(lib: Any) -> None:
    actual = lib.ffi_cdk_ffi_uniffi_contract_version()
    if actual != CONTRACT_VERSION:
        raise ProtocolError(
            f"native library contract version {actual} does not match "
            f"expected version {CONTRACT_VERSION}"
        )


def check_api_checksums(lib: Any) -> None:
    for name, expected in API_CHECKSUMS.items():
        try:
            fn = getattr(lib, name)
        except AttributeError:
            raise ProtocolError(f"native library does not export {name}") from None
        actual = fn()
        if actual != expected:
            log.error("Checksum mismatch", extra={"symbol": name})
            raise ProtocolError(
                f"API checksum mismatch for {name}: expected {expected}, got {actual}"
            )


def install_lib(lib: Any) -> None:
    """
    Run the handshake against ``lib`` and make it the active library.

    ``lib`` must already have its signatures applied (see
    ``setup_signatures``). Raises ``ProtocolError`` if the library was built
    from a different interface definition.
    """
    global _lib
    from .db._bindings import register_vtable

    with _lib_lock:
        check_contract_version(lib)
        check_api_checksums(lib)
        try:
            register_vtable(lib)
        except BaseException:
            _lib = None
            raise
        # Published last: get_lib() reads _lib without the lock.
        _lib = lib
    log.debug("Native library installed", extra={"contract_version": CONTRACT_VERSION})


def get_lib() -> Any:
    """Return the active native library, loading it on first use."""
    lib = _lib
    if lib is not None:
        return lib
    with _lib_lock:
        if _lib is None:
            install_lib(_load_library())
        return _lib


def reset_lib() -> None:
    """Forget the active library so the next ``get_lib()`` loads again."""
    global _lib
    with _lib_lock:
        _lib = None
