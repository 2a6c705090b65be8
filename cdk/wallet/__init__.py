"""
Native wallet objects.

- Wallet: Blocking interface (one call at a time per thread)
- AsyncWallet: asyncio interface
"""

from .async_wallet import AsyncWallet
from .wallet import Wallet

__all__ = ["Wallet", "AsyncWallet"]
