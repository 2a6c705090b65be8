"""
Wallet data model.

Value types passed to and returned from the native wallet. They are plain
frozen dataclasses and enums; serialization lives in
``cdk.types._converters`` so these stay importable without the native
library.

Example:
    >>> from cdk.types import Amount, CurrencyUnit, SplitTarget
    >>> SplitTarget.value(Amount(8))
    SplitTarget(kind='value', amounts=(Amount(value=8),))
    >>> CurrencyUnit.of("SAT") == CurrencyUnit.SAT
    True
"""

from .enums import CurrencyUnit, ProofState, QuoteState, SplitTarget
from .records import (
    Amount,
    Melted,
    MeltQuote,
    MintQuote,
    MintUrl,
    Proof,
    ProofDleq,
    ProofInfo,
    WalletConfig,
)

__all__ = [
    # Enums and unions
    "CurrencyUnit",
    "ProofState",
    "QuoteState",
    "SplitTarget",
    # Records
    "Amount",
    "MintUrl",
    "ProofDleq",
    "Proof",
    "ProofInfo",
    "MintQuote",
    "MeltQuote",
    "Melted",
    "WalletConfig",
]
