"""
CDK exceptions.

This module defines the exception hierarchy for cdk:

    CdkError (base, recoverable)
    ├── FfiError - Domain errors reported by the native library (and variants)
    └── LibraryError - Native library could not be located or loaded

    BridgeFault (base, unrecoverable)
    ├── InternalError - Native panic
    ├── ProtocolError - Wire contract mismatch
    └── UsageError - Caller bug
"""

from .exceptions import (
    DOUBLE_FAULT_MESSAGE,
    AmountError,
    AmountOverflowError,
    BridgeFault,
    CdkError,
    DatabaseError,
    DivisionByZeroError,
    FfiError,
    GenericError,
    InsufficientFundsError,
    InternalError,
    InvalidMnemonicError,
    InvalidTokenError,
    InvalidUrlError,
    KeysetUnknownError,
    LibraryError,
    NetworkError,
    PaymentFailedError,
    PaymentPendingError,
    ProtocolError,
    SerializationError,
    UnitNotSupportedError,
    UsageError,
    WalletError,
)

# =============================================================================
# Public API - See cdk/__init__.py for documentation mapping guidelines
# =============================================================================
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
