"""
Wallet persistence.

The native wallet stores mints, proofs, keyset counters and quotes through a
``WalletDatabase`` implemented in Python:

- WalletDatabase: Abstract storage interface called by the native wallet
- MemoryDatabase: Thread-safe in-memory implementation

Example:
    >>> from cdk.db import MemoryDatabase
    >>> wallet = cdk.Wallet(url, CurrencyUnit.SAT, mnemonic, MemoryDatabase())
"""

from .backends import MemoryDatabase, WalletDatabase

__all__ = [
    "WalletDatabase",
    "MemoryDatabase",
]
