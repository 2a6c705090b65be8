"""
Ecash tokens.

A ``Token`` wraps a native token object. Decoding, encoding and inspection
are done by the native library; the wrapper only owns the pointer.
"""

from __future__ import annotations

from ._bindings import get_lib
from ._codec import BYTES, STRING
from ._handles import FfiConverterObject, NativeObject
from ._status import rust_call_with_error
from .types import Amount, CurrencyUnit, MintUrl, Proof
from .types._converters import (
    AMOUNT,
    FFI_ERROR,
    MINT_URL,
    OPTIONAL_CURRENCY_UNIT,
    OPTIONAL_STRING,
    PROOFS,
)

__all__ = ["Token"]


class Token(NativeObject):
    """
    A cashu token: proofs from one mint, plus unit and memo.

    Construct with ``Token.decode()`` or ``Token.from_raw_bytes()``; tokens
    returned by ``Wallet.send()`` are ready to use.

    Example:
        >>> with Token.decode("cashuB...") as token:
        ...     print(token.value(), token.mint_url())
    """

    _clone_symbol = "uniffi_cdk_ffi_fn_clone_token"
    _free_symbol = "uniffi_cdk_ffi_fn_free_token"

    def __init__(self) -> None:
        raise TypeError("Use Token.decode() or Token.from_raw_bytes()")

    @classmethod
    def decode(cls, encoded: str) -> Token:
        """
        Parse a serialized token string.

        Raises
        ------
            InvalidTokenError: If the string is not a valid token.
        """
        pointer = rust_call_with_error(
            FFI_ERROR, get_lib().uniffi_cdk_ffi_fn_constructor_token_decode, STRING.lower(encoded)
        )
        return cls._from_pointer(pointer)

    @classmethod
    def from_raw_bytes(cls, data: bytes) -> Token:
        """Parse the binary token representation."""
        pointer = rust_call_with_error(
            FFI_ERROR,
            get_lib().uniffi_cdk_ffi_fn_constructor_token_from_raw_bytes,
            BYTES.lower(data),
        )
        return cls._from_pointer(pointer)

    def _call(self, symbol: str):
        with self._handle.borrow() as pointer:
            return rust_call_with_error(FFI_ERROR, getattr(get_lib(), symbol), pointer)

    def value(self) -> Amount:
        """Sum of all proofs in the token."""
        return AMOUNT.lift(self._call("uniffi_cdk_ffi_fn_method_token_value"))

    def memo(self) -> str | None:
        return OPTIONAL_STRING.lift(self._call("uniffi_cdk_ffi_fn_method_token_memo"))

    def unit(self) -> CurrencyUnit | None:
        return OPTIONAL_CURRENCY_UNIT.lift(self._call("uniffi_cdk_ffi_fn_method_token_unit"))

    def mint_url(self) -> MintUrl:
        return MINT_URL.lift(self._call("uniffi_cdk_ffi_fn_method_token_mint_url"))

    def proofs(self) -> list[Proof]:
        return PROOFS.lift(self._call("uniffi_cdk_ffi_fn_method_token_proofs_simple"))

    def encode(self) -> str:
        """Serialize to the token string format."""
        return STRING.lift(self._call("uniffi_cdk_ffi_fn_method_token_encode"))

    def to_raw_bytes(self) -> bytes:
        return BYTES.lift(self._call("uniffi_cdk_ffi_fn_method_token_to_raw_bytes"))

    def __str__(self) -> str:
        return self.encode()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Token {state}>"


TOKEN = FfiConverterObject(Token)
