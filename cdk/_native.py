"""
ctypes declarations for the cdk_ffi C API.

Mirrors the exported surface of the native library: ABI structs, callback
function types, the signature table applied to the loaded library, and the
interface checksums compared during the version handshake.

Keep this file in lockstep with the native crate. Field order of every
Structure and the argument order of every signature is part of the ABI.
"""

from __future__ import annotations

import ctypes
from ctypes import (
    CFUNCTYPE,
    POINTER,
    c_int8,
    c_int32,
    c_uint8,
    c_uint16,
    c_uint32,
    c_uint64,
    c_void_p,
)
from typing import Any

__all__ = [
    "CONTRACT_VERSION",
    "API_CHECKSUMS",
    "SIGNATURES",
    "RustBuffer",
    "ForeignBytes",
    "RustCallStatus",
    "ForeignFuture",
    "ForeignFutureFree",
    "ForeignFutureStructVoid",
    "ForeignFutureStructRustBuffer",
    "ForeignFutureStructU32",
    "ForeignFutureCompleteVoid",
    "ForeignFutureCompleteRustBuffer",
    "ForeignFutureCompleteU32",
    "RustFutureContinuationCallback",
    "CallbackInterfaceFree",
    "VTableCallbackInterfaceWalletDatabase",
    "setup_signatures",
]

# Interface contract version compiled into this package. The native library
# reports its own through ffi_cdk_ffi_uniffi_contract_version().
CONTRACT_VERSION = 29

# RustCallStatus.code values
CALL_SUCCESS = 0
CALL_ERROR = 1
CALL_UNEXPECTED_ERROR = 2

# Poll results delivered to the continuation callback
RUST_FUTURE_POLL_READY = 0
RUST_FUTURE_POLL_MAYBE_READY = 1


# =============================================================================
# Buffers
# =============================================================================


class RustBuffer(ctypes.Structure):
    """Growable byte buffer allocated by the native side.

    Must be released exactly once with ffi_cdk_ffi_rustbuffer_free, unless
    ownership is handed back to the native side as a call argument.
    """

    _fields_ = [
        ("capacity", c_uint64),
        ("len", c_uint64),
        ("data", POINTER(c_uint8)),
    ]

    def to_bytes(self) -> bytes:
        """Copy the valid bytes out of native memory."""
        if not self.data or self.len == 0:
            return b""
        return ctypes.string_at(self.data, self.len)

    def __repr__(self) -> str:
        return f"RustBuffer(capacity={self.capacity}, len={self.len})"


class ForeignBytes(ctypes.Structure):
    """Borrowed view of host memory, valid for the duration of one call."""

    _fields_ = [
        ("len", c_int32),
        ("data", POINTER(c_uint8)),
    ]


class RustCallStatus(ctypes.Structure):
    """Out-parameter every native entry point writes its outcome into."""

    _fields_ = [
        ("code", c_int8),
        ("error_buf", RustBuffer),
    ]

    def __repr__(self) -> str:
        return f"RustCallStatus(code={self.code}, error_buf={self.error_buf!r})"


# =============================================================================
# Async futures (host polls native)
# =============================================================================

# void (*)(uint64_t continuation_handle, int8_t poll_result)
RustFutureContinuationCallback = CFUNCTYPE(None, c_uint64, c_int8)


# =============================================================================
# Foreign futures (native polls host)
# =============================================================================

# void (*)(uint64_t guard_handle)
ForeignFutureFree = CFUNCTYPE(None, c_uint64)

# void (*)(uint64_t callback_handle)
CallbackInterfaceFree = CFUNCTYPE(None, c_uint64)


class ForeignFuture(ctypes.Structure):
    _fields_ = [
        ("handle", c_uint64),
        ("free", ForeignFutureFree),
    ]


class ForeignFutureStructVoid(ctypes.Structure):
    _fields_ = [
        ("call_status", RustCallStatus),
    ]


class ForeignFutureStructRustBuffer(ctypes.Structure):
    _fields_ = [
        ("return_value", RustBuffer),
        ("call_status", RustCallStatus),
    ]


class ForeignFutureStructU32(ctypes.Structure):
    _fields_ = [
        ("return_value", c_uint32),
        ("call_status", RustCallStatus),
    ]


ForeignFutureCompleteVoid = CFUNCTYPE(None, c_uint64, ForeignFutureStructVoid)
ForeignFutureCompleteRustBuffer = CFUNCTYPE(None, c_uint64, ForeignFutureStructRustBuffer)
ForeignFutureCompleteU32 = CFUNCTYPE(None, c_uint64, ForeignFutureStructU32)


# =============================================================================
# WalletDatabase callback interface
# =============================================================================

_P_FF = POINTER(ForeignFuture)

CallbackWalletDatabaseAddMint = CFUNCTYPE(
    None, c_uint64, RustBuffer, RustBuffer, ForeignFutureCompleteVoid, c_uint64, _P_FF
)
CallbackWalletDatabaseRemoveMint = CFUNCTYPE(
    None, c_uint64, RustBuffer, ForeignFutureCompleteVoid, c_uint64, _P_FF
)
CallbackWalletDatabaseGetMints = CFUNCTYPE(
    None, c_uint64, ForeignFutureCompleteRustBuffer, c_uint64, _P_FF
)
CallbackWalletDatabaseAddProofs = CFUNCTYPE(
    None, c_uint64, RustBuffer, ForeignFutureCompleteVoid, c_uint64, _P_FF
)
CallbackWalletDatabaseRemoveProofs = CFUNCTYPE(
    None, c_uint64, RustBuffer, ForeignFutureCompleteVoid, c_uint64, _P_FF
)
CallbackWalletDatabaseGetProofs = CFUNCTYPE(
    None,
    c_uint64,
    RustBuffer,
    RustBuffer,
    RustBuffer,
    ForeignFutureCompleteRustBuffer,
    c_uint64,
    _P_FF,
)
CallbackWalletDatabaseIncrementKeysetCounter = CFUNCTYPE(
    None, c_uint64, RustBuffer, c_uint32, ForeignFutureCompleteU32, c_uint64, _P_FF
)
CallbackWalletDatabaseAddMintQuote = CFUNCTYPE(
    None, c_uint64, RustBuffer, ForeignFutureCompleteVoid, c_uint64, _P_FF
)
CallbackWalletDatabaseGetMintQuote = CFUNCTYPE(
    None, c_uint64, RustBuffer, ForeignFutureCompleteRustBuffer, c_uint64, _P_FF
)


class VTableCallbackInterfaceWalletDatabase(ctypes.Structure):
    _fields_ = [
        ("add_mint", CallbackWalletDatabaseAddMint),
        ("remove_mint", CallbackWalletDatabaseRemoveMint),
        ("get_mints", CallbackWalletDatabaseGetMints),
        ("add_proofs", CallbackWalletDatabaseAddProofs),
        ("remove_proofs", CallbackWalletDatabaseRemoveProofs),
        ("get_proofs", CallbackWalletDatabaseGetProofs),
        ("increment_keyset_counter", CallbackWalletDatabaseIncrementKeysetCounter),
        ("add_mint_quote", CallbackWalletDatabaseAddMintQuote),
        ("get_mint_quote", CallbackWalletDatabaseGetMintQuote),
        ("uniffi_free", CallbackInterfaceFree),
    ]


# =============================================================================
# Signatures
# =============================================================================

_P_STATUS = POINTER(RustCallStatus)

# name -> (restype, argtypes)
SIGNATURES: dict[str, tuple[Any, list[Any]]] = {
    # Buffers
    "ffi_cdk_ffi_rustbuffer_from_bytes": (RustBuffer, [ForeignBytes, _P_STATUS]),
    "ffi_cdk_ffi_rustbuffer_free": (None, [RustBuffer, _P_STATUS]),
    # Contract
    "ffi_cdk_ffi_uniffi_contract_version": (c_uint32, []),
    # Futures
    "ffi_cdk_ffi_rust_future_poll_rust_buffer": (
        None,
        [c_uint64, RustFutureContinuationCallback, c_uint64],
    ),
    "ffi_cdk_ffi_rust_future_complete_rust_buffer": (RustBuffer, [c_uint64, _P_STATUS]),
    "ffi_cdk_ffi_rust_future_free_rust_buffer": (None, [c_uint64]),
    "ffi_cdk_ffi_rust_future_poll_pointer": (
        None,
        [c_uint64, RustFutureContinuationCallback, c_uint64],
    ),
    "ffi_cdk_ffi_rust_future_complete_pointer": (c_void_p, [c_uint64, _P_STATUS]),
    "ffi_cdk_ffi_rust_future_free_pointer": (None, [c_uint64]),
    # Free functions
    "uniffi_cdk_ffi_fn_func_generate_mnemonic": (RustBuffer, [_P_STATUS]),
    "uniffi_cdk_ffi_fn_func_mnemonic_to_entropy": (RustBuffer, [RustBuffer, _P_STATUS]),
    "uniffi_cdk_ffi_fn_func_init_logging": (None, [RustBuffer, _P_STATUS]),
    # Token
    "uniffi_cdk_ffi_fn_clone_token": (c_void_p, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_free_token": (None, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_constructor_token_decode": (c_void_p, [RustBuffer, _P_STATUS]),
    "uniffi_cdk_ffi_fn_constructor_token_from_raw_bytes": (c_void_p, [RustBuffer, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_token_value": (RustBuffer, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_token_memo": (RustBuffer, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_token_unit": (RustBuffer, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_token_mint_url": (RustBuffer, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_token_proofs_simple": (RustBuffer, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_token_encode": (RustBuffer, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_token_to_raw_bytes": (RustBuffer, [c_void_p, _P_STATUS]),
    # Wallet
    "uniffi_cdk_ffi_fn_clone_wallet": (c_void_p, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_free_wallet": (None, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_constructor_wallet_new": (
        c_void_p,
        [RustBuffer, RustBuffer, RustBuffer, c_uint64, RustBuffer, _P_STATUS],
    ),
    "uniffi_cdk_ffi_fn_method_wallet_mint_url": (RustBuffer, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_wallet_unit": (RustBuffer, [c_void_p, _P_STATUS]),
    "uniffi_cdk_ffi_fn_method_wallet_total_balance": (c_uint64, [c_void_p]),
    "uniffi_cdk_ffi_fn_method_wallet_mint_quote": (c_uint64, [c_void_p, RustBuffer, RustBuffer]),
    "uniffi_cdk_ffi_fn_method_wallet_mint": (c_uint64, [c_void_p, RustBuffer, RustBuffer]),
    "uniffi_cdk_ffi_fn_method_wallet_melt_quote": (c_uint64, [c_void_p, RustBuffer]),
    "uniffi_cdk_ffi_fn_method_wallet_melt": (c_uint64, [c_void_p, RustBuffer]),
    "uniffi_cdk_ffi_fn_method_wallet_receive": (c_uint64, [c_void_p, c_void_p]),
    "uniffi_cdk_ffi_fn_method_wallet_send": (c_uint64, [c_void_p, RustBuffer, RustBuffer]),
    # Callback interfaces
    "uniffi_cdk_ffi_fn_init_callback_vtable_walletdatabase": (
        None,
        [POINTER(VTableCallbackInterfaceWalletDatabase)],
    ),
}

# Expected interface checksums, one per exported function and method.
API_CHECKSUMS: dict[str, int] = {
    "uniffi_cdk_ffi_checksum_func_generate_mnemonic": 32410,
    "uniffi_cdk_ffi_checksum_func_mnemonic_to_entropy": 49887,
    "uniffi_cdk_ffi_checksum_func_init_logging": 7801,
    "uniffi_cdk_ffi_checksum_constructor_token_decode": 28751,
    "uniffi_cdk_ffi_checksum_constructor_token_from_raw_bytes": 15624,
    "uniffi_cdk_ffi_checksum_method_token_value": 41173,
    "uniffi_cdk_ffi_checksum_method_token_memo": 62094,
    "uniffi_cdk_ffi_checksum_method_token_unit": 3317,
    "uniffi_cdk_ffi_checksum_method_token_mint_url": 56018,
    "uniffi_cdk_ffi_checksum_method_token_proofs_simple": 20452,
    "uniffi_cdk_ffi_checksum_method_token_encode": 11279,
    "uniffi_cdk_ffi_checksum_method_token_to_raw_bytes": 38863,
    "uniffi_cdk_ffi_checksum_constructor_wallet_new": 44250,
    "uniffi_cdk_ffi_checksum_method_wallet_mint_url": 9146,
    "uniffi_cdk_ffi_checksum_method_wallet_unit": 51992,
    "uniffi_cdk_ffi_checksum_method_wallet_total_balance": 26741,
    "uniffi_cdk_ffi_checksum_method_wallet_mint_quote": 17203,
    "uniffi_cdk_ffi_checksum_method_wallet_mint": 60311,
    "uniffi_cdk_ffi_checksum_method_wallet_melt_quote": 35506,
    "uniffi_cdk_ffi_checksum_method_wallet_melt": 12688,
    "uniffi_cdk_ffi_checksum_method_wallet_receive": 47925,
    "uniffi_cdk_ffi_checksum_method_wallet_send": 2964,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_add_mint": 54377,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_remove_mint": 19830,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_get_mints": 40615,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_add_proofs": 8842,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_remove_proofs": 30157,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_get_proofs": 63519,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_increment_keyset_counter": 24068,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_add_mint_quote": 5593,
    "uniffi_cdk_ffi_checksum_method_walletdatabase_get_mint_quote": 45780,
}

for _name in API_CHECKSUMS:
    SIGNATURES[_name] = (c_uint16, [])
del _name


def setup_signatures(lib: Any) -> None:
    """Apply restype/argtypes to every known symbol of a loaded library.

    Missing argtypes truncate 64-bit pointers on some platforms, so every
    entry point used by the package must be listed in SIGNATURES.

    Raises
    ------
        AttributeError: If the library does not export a listed symbol.
    """
    for name, (restype, argtypes) in SIGNATURES.items():
        fn = getattr(lib, name)
        fn.restype = restype
        fn.argtypes = argtypes
