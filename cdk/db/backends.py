"""
Wallet storage backends.

The native wallet persists its state through a ``WalletDatabase``
implemented in Python. Methods are called from worker threads started by
the native library, possibly several at once, so implementations must be
thread-safe.

This module provides:

- WalletDatabase: Abstract interface the native wallet calls into
- MemoryDatabase: Thread-safe in-memory implementation
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..exceptions import DatabaseError
from ..types import (
    CurrencyUnit,
    MintQuote,
    MintUrl,
    ProofInfo,
    ProofState,
)

__all__ = [
    "WalletDatabase",
    "MemoryDatabase",
]


class WalletDatabase(ABC):
    """
    Storage interface for the native wallet.

    Raise ``DatabaseError`` (or any other ``FfiError``) to report a storage
    failure to the wallet. Any other exception is reported as an unexpected
    error.

    Long-running methods may check ``cdk.current_cancellation()`` and skip
    side effects when the wallet has already abandoned the call.

    Example:
        >>> class LoggingDatabase(MemoryDatabase):
        ...     def add_proofs(self, proofs):
        ...         print(f"storing {len(proofs)} proofs")
        ...         super().add_proofs(proofs)
    """

    @abstractmethod
    def add_mint(self, mint_url: MintUrl, mint_info: str | None) -> None: ...

    @abstractmethod
    def remove_mint(self, mint_url: MintUrl) -> None: ...

    @abstractmethod
    def get_mints(self) -> dict[MintUrl, str | None]: ...

    @abstractmethod
    def add_proofs(self, proofs: Sequence[ProofInfo]) -> None: ...

    @abstractmethod
    def remove_proofs(self, ys: Sequence[str]) -> None: ...

    @abstractmethod
    def get_proofs(
        self,
        mint_url: MintUrl | None,
        unit: CurrencyUnit | None,
        states: Sequence[ProofState] | None,
    ) -> list[ProofInfo]:
        """Return stored proofs, filtered by every argument that is not None."""

    @abstractmethod
    def increment_keyset_counter(self, keyset_id: str, count: int) -> int:
        """Advance the derivation counter of ``keyset_id`` and return the new value."""

    @abstractmethod
    def add_mint_quote(self, quote: MintQuote) -> None: ...

    @abstractmethod
    def get_mint_quote(self, quote_id: str) -> MintQuote | None: ...


class MemoryDatabase(WalletDatabase):
    """
    In-memory ``WalletDatabase``.

    Nothing survives the process. Useful for tests and short-lived wallets.

    Example:
        >>> wallet = cdk.Wallet(url, CurrencyUnit.SAT, mnemonic, MemoryDatabase())
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._mints: dict[MintUrl, str | None] = {}
        self._proofs: dict[str, ProofInfo] = {}
        self._keyset_counters: dict[str, int] = {}
        self._mint_quotes: dict[str, MintQuote] = {}

    def add_mint(self, mint_url: MintUrl, mint_info: str | None) -> None:
        with self._lock:
            self._mints[mint_url] = mint_info

    def remove_mint(self, mint_url: MintUrl) -> None:
        with self._lock:
            if self._mints.pop(mint_url, _MISSING) is _MISSING:
                raise DatabaseError(f"unknown mint {mint_url}")

    def get_mints(self) -> dict[MintUrl, str | None]:
        with self._lock:
            return dict(self._mints)

    def add_proofs(self, proofs: Sequence[ProofInfo]) -> None:
        with self._lock:
            for info in proofs:
                self._proofs[info.y] = info

    def remove_proofs(self, ys: Sequence[str]) -> None:
        with self._lock:
            for y in ys:
                self._proofs.pop(y, None)

    def get_proofs(
        self,
        mint_url: MintUrl | None,
        unit: CurrencyUnit | None,
        states: Sequence[ProofState] | None,
    ) -> list[ProofInfo]:
        with self._lock:
            return [
                info
                for info in self._proofs.values()
                if (mint_url is None or info.mint_url == mint_url)
                and (unit is None or info.unit == unit)
                and (states is None or info.state in states)
            ]

    def increment_keyset_counter(self, keyset_id: str, count: int) -> int:
        with self._lock:
            value = self._keyset_counters.get(keyset_id, 0) + count
            self._keyset_counters[keyset_id] = value
            return value

    def add_mint_quote(self, quote: MintQuote) -> None:
        with self._lock:
            self._mint_quotes[quote.id] = quote

    def get_mint_quote(self, quote_id: str) -> MintQuote | None:
        with self._lock:
            return self._mint_quotes.get(quote_id)


_MISSING = object()
