"""
CDK exceptions.

This module defines the exception hierarchy for cdk:

    CdkError (base, recoverable)
    ├── FfiError - Domain errors reported by the native library
    │   ├── GenericError
    │   ├── AmountOverflowError
    │   ├── DivisionByZeroError
    │   ├── AmountError
    │   ├── PaymentFailedError
    │   ├── PaymentPendingError
    │   ├── InsufficientFundsError
    │   ├── DatabaseError
    │   ├── NetworkError
    │   ├── InvalidTokenError
    │   ├── WalletError
    │   ├── KeysetUnknownError
    │   ├── UnitNotSupportedError
    │   ├── InvalidMnemonicError
    │   ├── InvalidUrlError
    │   └── SerializationError
    └── LibraryError - Native library could not be located or loaded

    BridgeFault (base, unrecoverable - NOT a CdkError)
    ├── InternalError - Native panic
    ├── ProtocolError - The two sides disagree about the wire contract
    └── UsageError - Caller bug (destroyed object, counter overflow, ...)

Usage:
    try:
        wallet.melt(quote.id)
    except cdk.InsufficientFundsError:
        print("Not enough funds")
    except cdk.CdkError as e:
        print(f"Error {e.code}: {e}")

``BridgeFault`` is never raised for conditions a caller can handle. Code
that catches ``CdkError`` lets faults escape.
"""

from typing import Any, ClassVar

__all__ = [
    # Base
    "CdkError",
    # Domain
    "FfiError",
    "GenericError",
    "AmountOverflowError",
    "DivisionByZeroError",
    "AmountError",
    "PaymentFailedError",
    "PaymentPendingError",
    "InsufficientFundsError",
    "DatabaseError",
    "NetworkError",
    "InvalidTokenError",
    "WalletError",
    "KeysetUnknownError",
    "UnitNotSupportedError",
    "InvalidMnemonicError",
    "InvalidUrlError",
    "SerializationError",
    # Loading
    "LibraryError",
    # Faults
    "BridgeFault",
    "InternalError",
    "ProtocolError",
    "UsageError",
    "DOUBLE_FAULT_MESSAGE",
]

DOUBLE_FAULT_MESSAGE = "native panic while building the panic message (double fault)"


class CdkError(Exception):
    """
    Base exception for all recoverable cdk errors.

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "INSUFFICIENT_FUNDS").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"symbol": "..."}).
    original_code : int | None
        The native variant tag (for debugging/logging).
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_code = original_code

    @property
    def message(self) -> str:
        return self.args[0]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Domain Errors
# =============================================================================


class FfiError(CdkError):
    """
    Typed domain error reported by the native library (status code 1).

    Each subclass corresponds to one variant of the native error enum.
    ``TAG`` is the 1-based wire tag; ``HAS_MESSAGE`` tells whether the
    variant carries a ``msg`` string on the wire.

    Callback implementations (see ``cdk.db.WalletDatabase``) raise these to
    report an expected failure back to the native side.
    """

    TAG: ClassVar[int] = 0
    CODE: ClassVar[str] = "FFI_ERROR"
    HAS_MESSAGE: ClassVar[bool] = True
    DEFAULT_MESSAGE: ClassVar[str] = "native library error"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(
            message if message is not None else self.DEFAULT_MESSAGE,
            code or self.CODE,
            details,
            original_code if original_code is not None else self.TAG,
        )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class GenericError(FfiError):
    """Uncategorised native failure."""

    TAG = 1
    CODE = "GENERIC"


class AmountOverflowError(FfiError, OverflowError):
    """Arithmetic on amounts overflowed."""

    TAG = 2
    CODE = "AMOUNT_OVERFLOW"
    HAS_MESSAGE = False
    DEFAULT_MESSAGE = "amount overflow"


class DivisionByZeroError(FfiError, ZeroDivisionError):
    """Amount split by zero."""

    TAG = 3
    CODE = "DIVISION_BY_ZERO"
    HAS_MESSAGE = False
    DEFAULT_MESSAGE = "division by zero"


class AmountError(FfiError, ValueError):
    """Invalid amount value."""

    TAG = 4
    CODE = "AMOUNT"


class PaymentFailedError(FfiError):
    """The mint reported the lightning payment as failed."""

    TAG = 5
    CODE = "PAYMENT_FAILED"
    HAS_MESSAGE = False
    DEFAULT_MESSAGE = "payment failed"


class PaymentPendingError(FfiError):
    """The lightning payment has not settled yet."""

    TAG = 6
    CODE = "PAYMENT_PENDING"
    HAS_MESSAGE = False
    DEFAULT_MESSAGE = "payment pending"


class InsufficientFundsError(FfiError):
    """
    Wallet balance does not cover the requested amount.

    Example:
        >>> try:
        ...     wallet.send(Amount(10_000))
        ... except cdk.InsufficientFundsError:
        ...     print("top up first")
    """

    TAG = 7
    CODE = "INSUFFICIENT_FUNDS"
    HAS_MESSAGE = False
    DEFAULT_MESSAGE = "insufficient funds"


class DatabaseError(FfiError):
    """
    Storage backend failure.

    Raised by the native library when its storage failed, and raised by
    ``WalletDatabase`` implementations to report a storage failure back.
    """

    TAG = 8
    CODE = "DATABASE"


class NetworkError(FfiError, ConnectionError):
    """Request to the mint failed."""

    TAG = 9
    CODE = "NETWORK"


class InvalidTokenError(FfiError, ValueError):
    """Token string or bytes could not be decoded."""

    TAG = 10
    CODE = "INVALID_TOKEN"


class WalletError(FfiError):
    """Wallet state machine rejected the operation."""

    TAG = 11
    CODE = "WALLET"


class KeysetUnknownError(FfiError):
    """Keyset id is not known to the mint."""

    TAG = 12
    CODE = "KEYSET_UNKNOWN"
    HAS_MESSAGE = False
    DEFAULT_MESSAGE = "unknown keyset"


class UnitNotSupportedError(FfiError):
    """The mint does not support the requested currency unit."""

    TAG = 13
    CODE = "UNIT_NOT_SUPPORTED"
    HAS_MESSAGE = False
    DEFAULT_MESSAGE = "unit not supported"


class InvalidMnemonicError(FfiError, ValueError):
    """BIP-39 mnemonic is malformed."""

    TAG = 14
    CODE = "INVALID_MNEMONIC"


class InvalidUrlError(FfiError, ValueError):
    """Mint URL could not be parsed."""

    TAG = 15
    CODE = "INVALID_URL"


class SerializationError(FfiError):
    """Native side failed to (de)serialize a domain value."""

    TAG = 16
    CODE = "SERIALIZATION"


FFI_ERROR_VARIANTS: dict[int, type[FfiError]] = {
    cls.TAG: cls
    for cls in (
        GenericError,
        AmountOverflowError,
        DivisionByZeroError,
        AmountError,
        PaymentFailedError,
        PaymentPendingError,
        InsufficientFundsError,
        DatabaseError,
        NetworkError,
        InvalidTokenError,
        WalletError,
        KeysetUnknownError,
        UnitNotSupportedError,
        InvalidMnemonicError,
        InvalidUrlError,
        SerializationError,
    )
}


# =============================================================================
# Loading Errors
# =============================================================================


class LibraryError(CdkError, OSError):
    """
    The native library could not be located or loaded.

    Set ``CDK_FFI_LIBRARY`` to the path of ``libcdk_ffi`` or reinstall the
    package with the native build enabled.
    """

    def __init__(
        self,
        message: str,
        code: str = "LIBRARY_NOT_FOUND",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)


# =============================================================================
# Faults
# =============================================================================


class BridgeFault(Exception):
    """
    Base class for unrecoverable bridge faults.

    A fault means the process can no longer trust the state shared with the
    native library. It is not a ``CdkError``: catch-all handlers for domain
    errors do not swallow it.
    """

    code: ClassVar[str] = "BRIDGE_FAULT"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r})" if self.args else super().__repr__()


class InternalError(BridgeFault):
    """The native library panicked (status code 2)."""

    code = "NATIVE_PANIC"


class ProtocolError(BridgeFault):
    """
    The host and the native library disagree about the interface contract.

    Raised for contract-version or checksum mismatches, unknown status or
    poll codes, unknown enum tags, bytes left over after decoding, and
    handle tables that went out of sync.
    """

    code = "PROTOCOL_VIOLATION"


class UsageError(BridgeFault):
    """
    The bridge was used incorrectly.

    Raised when a destroyed object is used, when an object's call counter
    would overflow, or when a string or byte array is too long for the
    int32 length prefix.
    """

    code = "USAGE_FAULT"
