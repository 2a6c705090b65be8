"""
Enumerations and tagged unions exchanged with the native wallet.

Numeric values are the 1-based wire tags.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, ClassVar, Literal

if TYPE_CHECKING:
    from .records import Amount

__all__ = ["QuoteState", "ProofState", "CurrencyUnit", "SplitTarget"]


class QuoteState(IntEnum):
    """Lifecycle of a mint or melt quote."""

    UNPAID = 1
    PAID = 2
    PENDING = 3
    ISSUED = 4


class ProofState(IntEnum):
    """Spend state of a proof as last seen by the wallet."""

    UNSPENT = 1
    PENDING = 2
    SPENT = 3
    RESERVED = 4
    PENDING_SPENT = 5


@dataclass(frozen=True, slots=True)
class CurrencyUnit:
    """
    Unit an amount is denominated in.

    The well-known units are available as class attributes; anything else is
    a custom unit.

    Example:
        >>> CurrencyUnit.SAT
        CurrencyUnit(name='sat', custom=False)
        >>> CurrencyUnit.of("points").custom
        True
    """

    name: str
    custom: bool = False

    SAT: ClassVar[CurrencyUnit]
    MSAT: ClassVar[CurrencyUnit]
    USD: ClassVar[CurrencyUnit]
    EUR: ClassVar[CurrencyUnit]
    AUTH: ClassVar[CurrencyUnit]

    KNOWN: ClassVar[tuple[str, ...]] = ("sat", "msat", "usd", "eur", "auth")

    @classmethod
    def of(cls, name: str) -> CurrencyUnit:
        """Return the well-known unit called ``name``, or a custom unit."""
        lowered = name.lower()
        if lowered in cls.KNOWN:
            return cls(lowered)
        return cls(name, custom=True)

    def __str__(self) -> str:
        return self.name


CurrencyUnit.SAT = CurrencyUnit("sat")
CurrencyUnit.MSAT = CurrencyUnit("msat")
CurrencyUnit.USD = CurrencyUnit("usd")
CurrencyUnit.EUR = CurrencyUnit("eur")
CurrencyUnit.AUTH = CurrencyUnit("auth")


@dataclass(frozen=True, slots=True)
class SplitTarget:
    """
    How newly minted or swapped amounts are split into proofs.

    Use the constructors: ``SplitTarget.none()`` lets the wallet decide,
    ``SplitTarget.value(amount)`` splits into proofs of one denomination,
    ``SplitTarget.values(amounts)`` asks for explicit denominations.
    """

    kind: Literal["none", "value", "values"] = "none"
    amounts: tuple[Amount, ...] = ()

    @classmethod
    def none(cls) -> SplitTarget:
        return cls()

    @classmethod
    def value(cls, amount: Amount) -> SplitTarget:
        return cls("value", (amount,))

    @classmethod
    def values(cls, amounts: Iterable[Amount]) -> SplitTarget:
        return cls("values", tuple(amounts))
