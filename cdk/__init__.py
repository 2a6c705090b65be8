"""
cdk - Cashu wallet for Python, backed by the native CDK library.

cdk drives the native ``cdk_ffi`` wallet through ctypes. Wallet logic, mint
communication and cryptography live in the native library; storage lives in
Python, behind a ``WalletDatabase`` the native wallet calls back into.

Quick Start
-----------

    >>> import cdk
    >>> from cdk import Amount, CurrencyUnit, MemoryDatabase, Wallet
    >>>
    >>> mnemonic = cdk.generate_mnemonic()
    >>> with Wallet("https://mint.example.com", CurrencyUnit.SAT, mnemonic, MemoryDatabase()) as w:
    ...     quote = w.mint_quote(Amount(100))
    ...     print(quote.request)        # pay this lightning invoice
    ...     proofs = w.mint(quote.id)   # once paid
    ...     token = w.send(Amount(21), memo="coffee")
    ...     print(token.encode())

Receiving a token:

    >>> with cdk.Token.decode(encoded) as token:
    ...     received = wallet.receive(token)


Async Support
-------------

For asyncio applications, use AsyncWallet:

    >>> from cdk import AsyncWallet
    >>>
    >>> async with AsyncWallet(url, CurrencyUnit.SAT, mnemonic, MemoryDatabase()) as w:
    ...     balance = await w.total_balance()


Core Classes
------------

- `Wallet` - Blocking wallet interface
- `AsyncWallet` - asyncio wallet interface
- `Token` - Encoded ecash token
- `WalletDatabase` - Storage interface implemented in Python
- `MemoryDatabase` - In-memory storage


Errors and Faults
-----------------

Recoverable failures raise ``CdkError`` subclasses (``InsufficientFundsError``,
``NetworkError``, ...). A broken bridge raises ``BridgeFault`` subclasses,
which are not ``CdkError``. Faults detected inside native
callbacks go to the fault handler (see ``set_fault_handler``).
"""

# Version from _version.py (synced from VERSION file at build time)
from cdk._logging import setup_logging
from cdk._status import set_fault_handler
from cdk._version import __version__ as __version__

# Wallet
from cdk._callbacks import CancellationToken, current_cancellation
from cdk.api import generate_mnemonic, init_native_logging, mnemonic_to_entropy
from cdk.token import Token
from cdk.wallet import AsyncWallet, Wallet

# Storage
from cdk.db import MemoryDatabase, WalletDatabase

# Exceptions
from cdk.exceptions import (
    BridgeFault,
    CdkError,
    DatabaseError,
    FfiError,
    InsufficientFundsError,
    InternalError,
    InvalidMnemonicError,
    InvalidTokenError,
    InvalidUrlError,
    LibraryError,
    NetworkError,
    PaymentFailedError,
    PaymentPendingError,
    ProtocolError,
    UsageError,
    WalletError,
)

# Types
from cdk.types import (
    Amount,
    CurrencyUnit,
    Melted,
    MeltQuote,
    MintQuote,
    MintUrl,
    Proof,
    ProofDleq,
    ProofInfo,
    ProofState,
    QuoteState,
    SplitTarget,
    WalletConfig,
)


def set_log_level(level: str | int) -> None:
    """Set logging verbosity for the Python side and the native library.

    Args:
        level: "trace", "debug", "info", "warn" or "error", or a ``logging`` constant.

    Example:
        >>> import cdk
        >>> cdk.set_log_level('debug')  # Enable debug output
    """
    setup_logging(level)
    init_native_logging(level)


# =============================================================================
# Public API - Mapped 1:1 to Documentation
# =============================================================================
#
# This __all__ defines what appears in the docs navigation, in order.
# Comments act as section headers.
#
# Guidelines for maintainers:
#   - Only add symbols that deserve top-level documentation
#   - Other symbols remain importable via submodules (e.g., from cdk.exceptions import AmountError)
#
__all__ = [
    # Wallet
    "Wallet",
    "AsyncWallet",
    "Token",
    "generate_mnemonic",
    "mnemonic_to_entropy",
    # Storage
    "WalletDatabase",
    "MemoryDatabase",
    "current_cancellation",
    "CancellationToken",
    # Types
    "Amount",
    "CurrencyUnit",
    "MintUrl",
    "Proof",
    "ProofDleq",
    "ProofInfo",
    "ProofState",
    "QuoteState",
    "MintQuote",
    "MeltQuote",
    "Melted",
    "SplitTarget",
    "WalletConfig",
    # Logging
    "setup_logging",
    "set_log_level",
    "init_native_logging",
    # Exceptions
    "CdkError",
    "FfiError",
    "DatabaseError",
    "InsufficientFundsError",
    "InvalidMnemonicError",
    "InvalidTokenError",
    "InvalidUrlError",
    "NetworkError",
    "PaymentFailedError",
    "PaymentPendingError",
    "WalletError",
    "LibraryError",
    "BridgeFault",
    "InternalError",
    "ProtocolError",
    "UsageError",
    "set_fault_handler",
]
