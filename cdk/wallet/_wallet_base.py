"""WalletBase - Shared implementation for Wallet and AsyncWallet.

Construction, lifetime and the synchronous accessors are identical for both
classes. The async-native operations stay in the subclasses since they have
different sync/async signatures.
"""

from __future__ import annotations

from .._handles import NativeObject
from .._logging import scoped_logger
from ..db import WalletDatabase
from ..types import CurrencyUnit, MintUrl, WalletConfig
from . import _bindings as _c

log = scoped_logger("wallet")


class WalletBase(NativeObject):
    """Base class containing the shared Wallet/AsyncWallet implementation.

    Not meant to be instantiated directly. Use Wallet or AsyncWallet.
    """

    _clone_symbol = "uniffi_cdk_ffi_fn_clone_wallet"
    _free_symbol = "uniffi_cdk_ffi_fn_free_wallet"

    def __init__(
        self,
        mint_url: str,
        unit: CurrencyUnit,
        mnemonic: str,
        db: WalletDatabase,
        config: WalletConfig | None = None,
    ) -> None:
        """
        Create a wallet for one mint and unit.

        Args:
            mint_url: URL of the mint.
            unit: Unit the wallet holds.
            mnemonic: BIP-39 seed phrase the wallet derives secrets from.
            db: Storage backend the native wallet persists state through.
            config: Optional wallet tuning.

        Raises
        ------
            InvalidUrlError: If ``mint_url`` cannot be parsed.
            InvalidMnemonicError: If ``mnemonic`` is malformed.
        """
        self._db = db
        self._label = f"{mint_url} ({unit})"
        self._init_handle(_c.wallet_new(mint_url, unit, mnemonic, db, config))
        log.debug("Wallet created", extra={"mint_url": mint_url, "unit": str(unit)})

    @property
    def db(self) -> WalletDatabase:
        """Storage backend passed at construction."""
        return self._db

    def mint_url(self) -> MintUrl:
        return _c.mint_url(self._handle)

    def unit(self) -> CurrencyUnit:
        return _c.unit(self._handle)

    def __repr__(self) -> str:
        if self.closed:
            return f"<{type(self).__name__} closed>"
        return f"<{type(self).__name__} {self._label}>"
