"""
AsyncWallet - asyncio interface to the native wallet.

Same operations as ``Wallet``; every async-native operation is a coroutine
that suspends on the event loop while the native library works.
"""

from __future__ import annotations

from ..token import Token
from ..types import Amount, Melted, MeltQuote, MintQuote, Proof, SplitTarget
from . import _bindings as _c
from ._wallet_base import WalletBase

__all__ = ["AsyncWallet"]


class AsyncWallet(WalletBase):
    """
    Async cashu wallet for one mint and unit.

    Construction and ``mint_url()``/``unit()`` are synchronous (they do not
    touch the network).

    Example:
        >>> async with AsyncWallet(url, CurrencyUnit.SAT, mnemonic, MemoryDatabase()) as w:
        ...     quote = await w.mint_quote(Amount(100))
        ...     proofs = await w.mint(quote.id)
        ...     token = await w.send(Amount(21), memo="coffee")
    """

    async def total_balance(self) -> Amount:
        return await _c.total_balance(self._handle).wait_async()

    async def mint_quote(self, amount: Amount, description: str | None = None) -> MintQuote:
        return await _c.mint_quote(self._handle, amount, description).wait_async()

    async def mint(self, quote_id: str, split_target: SplitTarget | None = None) -> list[Proof]:
        return await _c.mint(
            self._handle, quote_id, split_target or SplitTarget.none()
        ).wait_async()

    async def melt_quote(self, request: str) -> MeltQuote:
        return await _c.melt_quote(self._handle, request).wait_async()

    async def melt(self, quote_id: str) -> Melted:
        return await _c.melt(self._handle, quote_id).wait_async()

    async def receive(self, token: Token) -> Amount:
        return await _c.receive(self._handle, token).wait_async()

    async def send(self, amount: Amount, memo: str | None = None) -> Token:
        return await _c.send(self._handle, amount, memo).wait_async()

    async def __aenter__(self) -> AsyncWallet:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
