"""
Wallet fixtures shared across test directories.

Registered from the root conftest.py.
"""

import pytest

from cdk import Amount, AsyncWallet, CurrencyUnit, MemoryDatabase, Wallet

from .native import WORDS

MINT_URL = "https://mint.example.com"


@pytest.fixture
def mnemonic():
    """A 12-word mnemonic the fake library accepts."""
    return " ".join(WORDS[:12])


@pytest.fixture
def db():
    return MemoryDatabase()


@pytest.fixture
def wallet(native, db, mnemonic):
    """Blocking wallet on the fake mint, closed after the test."""
    w = Wallet(MINT_URL, CurrencyUnit.SAT, mnemonic, db)
    yield w
    w.close()


@pytest.fixture
def async_wallet(native, db, mnemonic):
    """Async wallet on the fake mint, closed after the test."""
    w = AsyncWallet(MINT_URL, CurrencyUnit.SAT, mnemonic, db)
    yield w
    w.close()


@pytest.fixture
def fund(native):
    """
    Mint ``amount`` into a blocking wallet through a paid quote.

    Usage:
        def test_spend(wallet, fund):
            fund(wallet, 100)
    """

    def _fund(wallet, amount):
        quote = wallet.mint_quote(Amount(amount))
        native.paid_quotes.add(quote.id)
        return wallet.mint(quote.id)

    return _fund
