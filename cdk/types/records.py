"""
Record types exchanged with the native wallet.

Records are frozen dataclasses. Field order is the wire order; see
``cdk.types._converters``.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import AmountOverflowError
from .enums import CurrencyUnit, ProofState, QuoteState

__all__ = [
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

_U64_MAX = 2**64 - 1


@dataclass(frozen=True, slots=True, order=True)
class Amount:
    """
    Non-negative amount in the smallest denomination of its unit.

    Example:
        >>> Amount(21) + Amount(21)
        Amount(value=42)
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"Amount value must be int, got {type(self.value).__name__}")
        if not 0 <= self.value <= _U64_MAX:
            raise ValueError(f"Amount value {self.value} out of u64 range")

    def __int__(self) -> int:
        return self.value

    def __add__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        total = self.value + other.value
        if total > _U64_MAX:
            raise AmountOverflowError(details={"value": total})
        return Amount(total)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class MintUrl:
    """URL of a mint, as normalised by the native library."""

    url: str

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True, slots=True)
class ProofDleq:
    """DLEQ proof attached to a blind signature."""

    e: str
    s: str
    r: str


@dataclass(frozen=True, slots=True)
class Proof:
    """An ecash proof."""

    amount: Amount
    secret: str
    c: str
    keyset_id: str
    witness: str | None = None
    dleq: ProofDleq | None = None


@dataclass(frozen=True, slots=True)
class ProofInfo:
    """A proof together with the wallet's bookkeeping for it."""

    proof: Proof
    y: str
    mint_url: MintUrl
    state: ProofState
    unit: CurrencyUnit


@dataclass(frozen=True, slots=True)
class MintQuote:
    """Quote for minting ecash against a lightning payment."""

    id: str
    amount: Amount | None
    unit: CurrencyUnit
    request: str
    state: QuoteState
    expiry: int
    mint_url: MintUrl


@dataclass(frozen=True, slots=True)
class MeltQuote:
    """Quote for paying a lightning request with ecash."""

    id: str
    amount: Amount
    unit: CurrencyUnit
    request: str
    fee_reserve: Amount
    state: QuoteState
    expiry: int
    payment_preimage: str | None = None


@dataclass(frozen=True, slots=True)
class Melted:
    """Outcome of a melt."""

    state: QuoteState
    preimage: str | None
    amount: Amount
    fee_paid: Amount


@dataclass(frozen=True, slots=True)
class WalletConfig:
    """Optional wallet tuning."""

    target_proof_count: int | None = None
