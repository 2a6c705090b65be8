"""
FFI bindings for the WalletDatabase callback interface.

The native wallet calls storage methods through a vtable of C function
pointers registered once per library install. Each slot lifts its
arguments, then hands the call to ``cdk._callbacks.dispatch_async`` which
runs the Python method on a worker thread and reports the outcome through
the native completion callback.
"""

from __future__ import annotations

import ctypes
from typing import Any

from .._callbacks import FfiConverterCallbackInterface, dispatch_async
from .._codec import STRING, UINT32, FfiConverterOptional
from .._logging import scoped_logger
from .._native import (
    CallbackInterfaceFree,
    CallbackWalletDatabaseAddMint,
    CallbackWalletDatabaseAddMintQuote,
    CallbackWalletDatabaseAddProofs,
    CallbackWalletDatabaseGetMintQuote,
    CallbackWalletDatabaseGetMints,
    CallbackWalletDatabaseGetProofs,
    CallbackWalletDatabaseIncrementKeysetCounter,
    CallbackWalletDatabaseRemoveMint,
    CallbackWalletDatabaseRemoveProofs,
    ForeignFutureStructRustBuffer,
    ForeignFutureStructU32,
    ForeignFutureStructVoid,
    VTableCallbackInterfaceWalletDatabase,
)
from ..types._converters import (
    FFI_ERROR,
    MINT_QUOTE,
    MINT_URL,
    MINTS,
    OPTIONAL_CURRENCY_UNIT,
    OPTIONAL_MINT_QUOTE,
    OPTIONAL_STRING,
    PROOF_INFOS,
    PROOF_STATES,
    STRINGS,
)
from .backends import WalletDatabase

__all__ = ["WALLET_DATABASE", "register_vtable"]

log = scoped_logger("callback")

WALLET_DATABASE: FfiConverterCallbackInterface[WalletDatabase] = FfiConverterCallbackInterface(
    WalletDatabase
)

_OPTIONAL_MINT_URL = FfiConverterOptional(MINT_URL)
_OPTIONAL_PROOF_STATES = FfiConverterOptional(PROOF_STATES)


def _dispatch(
    handle: int,
    method: str,
    lift_args,
    complete,
    callback_data: int,
    out_future,
    *,
    struct_type: type = ForeignFutureStructVoid,
    lower_return=None,
) -> None:
    dispatch_async(
        WALLET_DATABASE,
        handle,
        method,
        lift_args,
        error_converter=FFI_ERROR,
        struct_type=struct_type,
        lower_return=lower_return,
        complete=complete,
        callback_data=callback_data,
        out_future=out_future,
    )


# =============================================================================
# Vtable slots
# =============================================================================


def _add_mint(handle, mint_url, mint_info, complete, callback_data, out_future):
    _dispatch(
        handle,
        "add_mint",
        lambda: (MINT_URL.lift(mint_url), OPTIONAL_STRING.lift(mint_info)),
        complete,
        callback_data,
        out_future,
    )


def _remove_mint(handle, mint_url, complete, callback_data, out_future):
    _dispatch(
        handle,
        "remove_mint",
        lambda: (MINT_URL.lift(mint_url),),
        complete,
        callback_data,
        out_future,
    )


def _get_mints(handle, complete, callback_data, out_future):
    _dispatch(
        handle,
        "get_mints",
        lambda: (),
        complete,
        callback_data,
        out_future,
        struct_type=ForeignFutureStructRustBuffer,
        lower_return=MINTS.lower,
    )


def _add_proofs(handle, proofs, complete, callback_data, out_future):
    _dispatch(
        handle,
        "add_proofs",
        lambda: (PROOF_INFOS.lift(proofs),),
        complete,
        callback_data,
        out_future,
    )


def _remove_proofs(handle, ys, complete, callback_data, out_future):
    _dispatch(
        handle,
        "remove_proofs",
        lambda: (STRINGS.lift(ys),),
        complete,
        callback_data,
        out_future,
    )


def _get_proofs(handle, mint_url, unit, states, complete, callback_data, out_future):
    _dispatch(
        handle,
        "get_proofs",
        lambda: (
            _OPTIONAL_MINT_URL.lift(mint_url),
            OPTIONAL_CURRENCY_UNIT.lift(unit),
            _OPTIONAL_PROOF_STATES.lift(states),
        ),
        complete,
        callback_data,
        out_future,
        struct_type=ForeignFutureStructRustBuffer,
        lower_return=PROOF_INFOS.lower,
    )


def _increment_keyset_counter(handle, keyset_id, count, complete, callback_data, out_future):
    _dispatch(
        handle,
        "increment_keyset_counter",
        lambda: (STRING.lift(keyset_id), UINT32.lift(count)),
        complete,
        callback_data,
        out_future,
        struct_type=ForeignFutureStructU32,
        lower_return=UINT32.lower,
    )


def _add_mint_quote(handle, quote, complete, callback_data, out_future):
    _dispatch(
        handle,
        "add_mint_quote",
        lambda: (MINT_QUOTE.lift(quote),),
        complete,
        callback_data,
        out_future,
    )


def _get_mint_quote(handle, quote_id, complete, callback_data, out_future):
    _dispatch(
        handle,
        "get_mint_quote",
        lambda: (STRING.lift(quote_id),),
        complete,
        callback_data,
        out_future,
        struct_type=ForeignFutureStructRustBuffer,
        lower_return=OPTIONAL_MINT_QUOTE.lower,
    )


def _free(handle):
    WALLET_DATABASE.free(handle)


# Kept alive for the life of the process: the native side stores the pointer.
_VTABLE = VTableCallbackInterfaceWalletDatabase(
    add_mint=CallbackWalletDatabaseAddMint(_add_mint),
    remove_mint=CallbackWalletDatabaseRemoveMint(_remove_mint),
    get_mints=CallbackWalletDatabaseGetMints(_get_mints),
    add_proofs=CallbackWalletDatabaseAddProofs(_add_proofs),
    remove_proofs=CallbackWalletDatabaseRemoveProofs(_remove_proofs),
    get_proofs=CallbackWalletDatabaseGetProofs(_get_proofs),
    increment_keyset_counter=CallbackWalletDatabaseIncrementKeysetCounter(
        _increment_keyset_counter
    ),
    add_mint_quote=CallbackWalletDatabaseAddMintQuote(_add_mint_quote),
    get_mint_quote=CallbackWalletDatabaseGetMintQuote(_get_mint_quote),
    uniffi_free=CallbackInterfaceFree(_free),
)


def register_vtable(lib: Any) -> None:
    """Hand the WalletDatabase vtable to ``lib``."""
    lib.uniffi_cdk_ffi_fn_init_callback_vtable_walletdatabase(ctypes.pointer(_VTABLE))
    log.debug("Registered callback vtable", extra={"interface": "WalletDatabase"})
