"""
Module-level functions exported by the native library.
"""

from __future__ import annotations

import logging

from ._bindings import get_lib
from ._codec import BYTES, STRING
from ._status import rust_call_with_error
from .types._converters import FFI_ERROR

__all__ = ["generate_mnemonic", "mnemonic_to_entropy", "init_native_logging"]

_LEVEL_NAMES = (
    (logging.ERROR, "error"),
    (logging.WARNING, "warn"),
    (logging.INFO, "info"),
    (logging.DEBUG, "debug"),
)


def generate_mnemonic() -> str:
    """
    Generate a fresh 12-word BIP-39 mnemonic.

    Example:
        >>> words = cdk.generate_mnemonic()
        >>> len(words.split())
        12
    """
    raw = rust_call_with_error(FFI_ERROR, get_lib().uniffi_cdk_ffi_fn_func_generate_mnemonic)
    return STRING.lift(raw)


def mnemonic_to_entropy(mnemonic: str) -> bytes:
    """
    Decode a BIP-39 mnemonic to its entropy bytes.

    Raises
    ------
        InvalidMnemonicError: If the words or checksum are invalid.
    """
    raw = rust_call_with_error(
        FFI_ERROR, get_lib().uniffi_cdk_ffi_fn_func_mnemonic_to_entropy, STRING.lower(mnemonic)
    )
    return BYTES.lift(raw)


def init_native_logging(level: str | int = "info") -> None:
    """
    Turn on logging inside the native library.

    Args:
        level: "trace", "debug", "info", "warn" or "error", or a ``logging``
            level constant.
    """
    if isinstance(level, int):
        level = next((name for floor, name in _LEVEL_NAMES if level >= floor), "trace")
    rust_call_with_error(
        FFI_ERROR, get_lib().uniffi_cdk_ffi_fn_func_init_logging, STRING.lower(level.lower())
    )
