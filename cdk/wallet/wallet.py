"""
Wallet - blocking interface to the native wallet.

Each async-native operation is driven to completion on the calling thread.
Use ``AsyncWallet`` from asyncio code.
"""

from __future__ import annotations

from ..token import Token
from ..types import Amount, Melted, MeltQuote, MintQuote, Proof, SplitTarget
from . import _bindings as _c
from ._wallet_base import WalletBase

__all__ = ["Wallet"]


class Wallet(WalletBase):
    """
    Cashu wallet for one mint and unit.

    Args:
        mint_url: URL of the mint.
        unit: Unit the wallet holds.
        mnemonic: BIP-39 seed phrase.
        db: Storage backend (see ``cdk.db``).
        config: Optional wallet tuning.

    Example:
        >>> from cdk import Wallet, MemoryDatabase, CurrencyUnit, Amount
        >>> with Wallet(url, CurrencyUnit.SAT, cdk.generate_mnemonic(), MemoryDatabase()) as w:
        ...     quote = w.mint_quote(Amount(100))
        ...     print(quote.request)  # pay this invoice
        ...     proofs = w.mint(quote.id)
        ...     print(w.total_balance())
    """

    def total_balance(self) -> Amount:
        """Sum of unspent proofs held by the wallet."""
        return _c.total_balance(self._handle).wait()

    def mint_quote(self, amount: Amount, description: str | None = None) -> MintQuote:
        """Request a lightning invoice for minting ``amount``."""
        return _c.mint_quote(self._handle, amount, description).wait()

    def mint(self, quote_id: str, split_target: SplitTarget | None = None) -> list[Proof]:
        """
        Mint proofs for a paid quote.

        Raises
        ------
            PaymentPendingError: If the invoice has not been paid yet.
        """
        return _c.mint(self._handle, quote_id, split_target or SplitTarget.none()).wait()

    def melt_quote(self, request: str) -> MeltQuote:
        """Quote paying the lightning ``request``."""
        return _c.melt_quote(self._handle, request).wait()

    def melt(self, quote_id: str) -> Melted:
        """
        Pay the lightning request of a melt quote.

        Raises
        ------
            InsufficientFundsError: If the balance does not cover amount plus fee reserve.
            PaymentFailedError: If the mint could not pay the request.
        """
        return _c.melt(self._handle, quote_id).wait()

    def receive(self, token: Token) -> Amount:
        """Swap the proofs of ``token`` into the wallet and return the amount received."""
        return _c.receive(self._handle, token).wait()

    def send(self, amount: Amount, memo: str | None = None) -> Token:
        """Select proofs worth ``amount`` and return them as a token."""
        return _c.send(self._handle, amount, memo).wait()
