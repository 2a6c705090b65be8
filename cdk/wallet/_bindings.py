"""
Native entry points of the Wallet object.

Synchronous entry points return their value directly. Async entry points
return a ``RustFuture`` that the caller drives with ``wait()`` or
``wait_async()``.

Arguments are lowered before the wallet pointer is cloned, and nothing runs
between the clone and the native call that consumes it.
"""

from __future__ import annotations

from typing import Any

from .._async import POINTER, RUST_BUFFER, RustFuture
from .._bindings import get_lib
from .._codec import STRING, discard_all, lower_all
from .._handles import NativeHandle
from .._status import rust_call_with_error
from ..db import WalletDatabase
from ..db._bindings import WALLET_DATABASE
from ..token import TOKEN, Token
from ..types import (
    Amount,
    CurrencyUnit,
    Melted,
    MeltQuote,
    MintQuote,
    MintUrl,
    Proof,
    SplitTarget,
    WalletConfig,
)
from ..types._converters import (
    AMOUNT,
    CURRENCY_UNIT,
    FFI_ERROR,
    MELT_QUOTE,
    MELTED,
    MINT_QUOTE,
    MINT_URL,
    OPTIONAL_STRING,
    OPTIONAL_WALLET_CONFIG,
    PROOFS,
    SPLIT_TARGET,
)


def wallet_new(
    mint_url: str,
    unit: CurrencyUnit,
    mnemonic: str,
    db: WalletDatabase,
    config: WalletConfig | None,
) -> int:
    STRING.check_lower(mint_url)
    CURRENCY_UNIT.check_lower(unit)
    STRING.check_lower(mnemonic)
    WALLET_DATABASE.check_lower(db)
    OPTIONAL_WALLET_CONFIG.check_lower(config)
    fn = get_lib().uniffi_cdk_ffi_fn_constructor_wallet_new
    args = lower_all(
        (STRING, mint_url),
        (CURRENCY_UNIT, unit),
        (STRING, mnemonic),
        (WALLET_DATABASE, db),
        (OPTIONAL_WALLET_CONFIG, config),
    )
    return rust_call_with_error(FFI_ERROR, fn, *args)


def mint_url(handle: NativeHandle) -> MintUrl:
    with handle.borrow() as pointer:
        raw = rust_call_with_error(
            FFI_ERROR, get_lib().uniffi_cdk_ffi_fn_method_wallet_mint_url, pointer
        )
    return MINT_URL.lift(raw)


def unit(handle: NativeHandle) -> CurrencyUnit:
    with handle.borrow() as pointer:
        raw = rust_call_with_error(FFI_ERROR, get_lib().uniffi_cdk_ffi_fn_method_wallet_unit, pointer)
    return CURRENCY_UNIT.lift(raw)


# =============================================================================
# Async methods
# =============================================================================


def _start(handle: NativeHandle, symbol: str, *args: tuple[Any, Any]) -> int:
    """Lower ``args``, then start ``symbol`` on a fresh clone of the wallet."""
    fn = getattr(get_lib(), symbol)
    lowered = lower_all(*args)
    try:
        pointer = handle.acquire()
    except BaseException:
        discard_all(args, lowered)
        raise
    try:
        return fn(pointer, *lowered)
    finally:
        handle.release()


def total_balance(handle: NativeHandle) -> RustFuture[Amount]:
    future = _start(handle, "uniffi_cdk_ffi_fn_method_wallet_total_balance")
    return RustFuture(future, RUST_BUFFER, AMOUNT.lift, FFI_ERROR)


def mint_quote(
    handle: NativeHandle, amount: Amount, description: str | None
) -> RustFuture[MintQuote]:
    future = _start(
        handle,
        "uniffi_cdk_ffi_fn_method_wallet_mint_quote",
        (AMOUNT, amount),
        (OPTIONAL_STRING, description),
    )
    return RustFuture(future, RUST_BUFFER, MINT_QUOTE.lift, FFI_ERROR)


def mint(
    handle: NativeHandle, quote_id: str, split_target: SplitTarget
) -> RustFuture[list[Proof]]:
    future = _start(
        handle,
        "uniffi_cdk_ffi_fn_method_wallet_mint",
        (STRING, quote_id),
        (SPLIT_TARGET, split_target),
    )
    return RustFuture(future, RUST_BUFFER, PROOFS.lift, FFI_ERROR)


def melt_quote(handle: NativeHandle, request: str) -> RustFuture[MeltQuote]:
    future = _start(handle, "uniffi_cdk_ffi_fn_method_wallet_melt_quote", (STRING, request))
    return RustFuture(future, RUST_BUFFER, MELT_QUOTE.lift, FFI_ERROR)


def melt(handle: NativeHandle, quote_id: str) -> RustFuture[Melted]:
    future = _start(handle, "uniffi_cdk_ffi_fn_method_wallet_melt", (STRING, quote_id))
    return RustFuture(future, RUST_BUFFER, MELTED.lift, FFI_ERROR)


def receive(handle: NativeHandle, token: Token) -> RustFuture[Amount]:
    future = _start(handle, "uniffi_cdk_ffi_fn_method_wallet_receive", (TOKEN, token))
    return RustFuture(future, RUST_BUFFER, AMOUNT.lift, FFI_ERROR)


def send(handle: NativeHandle, amount: Amount, memo: str | None) -> RustFuture[Token]:
    future = _start(
        handle,
        "uniffi_cdk_ffi_fn_method_wallet_send",
        (AMOUNT, amount),
        (OPTIONAL_STRING, memo),
    )
    return RustFuture(future, POINTER, TOKEN.lift, FFI_ERROR)
