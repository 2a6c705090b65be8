"""
Shared test fixtures for cdk.

This module provides the in-process fake of the native library and the
wallet fixtures built on it.
"""

from .native import KEYSET_ID, WORDS, DbCallResult, FakeFuture, FakeNativeLibrary

__all__ = [
    # Native library
    "FakeNativeLibrary",
    "FakeFuture",
    "DbCallResult",
    # Constants
    "KEYSET_ID",
    "WORDS",
]
