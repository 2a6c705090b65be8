"""
Wire converters for the domain types.

The field lists below define the serialized layout and must match the
native crate field for field.
"""

from __future__ import annotations

from .._codec import (
    STRING,
    UINT32,
    UINT64,
    FfiConverterEnum,
    FfiConverterMap,
    FfiConverterOptional,
    FfiConverterRecord,
    FfiConverterRustBuffer,
    FfiConverterSequence,
    WireReader,
    WireWriter,
    read_tag,
    write_tag,
)
from ..exceptions import ProtocolError
from ..exceptions.exceptions import FFI_ERROR_VARIANTS, FfiError
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

# =============================================================================
# Tagged unions
# =============================================================================


class _FfiConverterCurrencyUnit(FfiConverterRustBuffer[CurrencyUnit]):
    _TAGS = {name: tag for tag, name in enumerate(CurrencyUnit.KNOWN, start=1)}
    _CUSTOM = len(CurrencyUnit.KNOWN) + 1

    def check_lower(self, value: CurrencyUnit) -> None:
        if not isinstance(value, CurrencyUnit):
            raise TypeError(f"expected CurrencyUnit, got {type(value).__name__}")
        if value.custom:
            STRING.check_lower(value.name)
        elif value.name not in self._TAGS:
            raise ValueError(
                f"unknown built-in currency unit {value.name!r}; use CurrencyUnit.of() "
                "for custom units"
            )

    def read(self, reader: WireReader) -> CurrencyUnit:
        tag = read_tag(reader)
        if tag == self._CUSTOM:
            return CurrencyUnit(STRING.read(reader), custom=True)
        if 1 <= tag < self._CUSTOM:
            return CurrencyUnit(CurrencyUnit.KNOWN[tag - 1])
        raise ProtocolError(f"unknown CurrencyUnit tag {tag}")

    def write(self, value: CurrencyUnit, writer: WireWriter) -> None:
        if value.custom:
            write_tag(writer, self._CUSTOM)
            STRING.write(value.name, writer)
            return
        try:
            write_tag(writer, self._TAGS[value.name])
        except KeyError:
            raise ValueError(f"unknown built-in currency unit {value.name!r}") from None


class _FfiConverterSplitTarget(FfiConverterRustBuffer[SplitTarget]):
    def check_lower(self, value: SplitTarget) -> None:
        if not isinstance(value, SplitTarget):
            raise TypeError(f"expected SplitTarget, got {type(value).__name__}")
        expected = {"none": 0, "value": 1}.get(value.kind)
        if value.kind != "values" and expected is None:
            raise ValueError(f"unknown SplitTarget kind {value.kind!r}")
        if expected is not None and len(value.amounts) != expected:
            raise ValueError(f"SplitTarget {value.kind!r} takes {expected} amounts")
        AMOUNTS.check_lower(value.amounts)

    def read(self, reader: WireReader) -> SplitTarget:
        tag = read_tag(reader)
        if tag == 1:
            return SplitTarget.none()
        if tag == 2:
            return SplitTarget.value(AMOUNT.read(reader))
        if tag == 3:
            return SplitTarget.values(AMOUNTS.read(reader))
        raise ProtocolError(f"unknown SplitTarget tag {tag}")

    def write(self, value: SplitTarget, writer: WireWriter) -> None:
        if value.kind == "none":
            write_tag(writer, 1)
        elif value.kind == "value":
            write_tag(writer, 2)
            AMOUNT.write(value.amounts[0], writer)
        elif value.kind == "values":
            write_tag(writer, 3)
            AMOUNTS.write(value.amounts, writer)
        else:
            raise ValueError(f"unknown SplitTarget kind {value.kind!r}")


class _FfiConverterFfiError(FfiConverterRustBuffer[FfiError]):
    def check_lower(self, value: FfiError) -> None:
        if not isinstance(value, FfiError) or type(value).TAG not in FFI_ERROR_VARIANTS:
            raise TypeError(f"{type(value).__name__} is not a native error variant")

    def read(self, reader: WireReader) -> FfiError:
        tag = read_tag(reader)
        try:
            cls = FFI_ERROR_VARIANTS[tag]
        except KeyError:
            raise ProtocolError(f"unknown FfiError tag {tag}") from None
        if cls.HAS_MESSAGE:
            return cls(STRING.read(reader))
        return cls()

    def write(self, value: FfiError, writer: WireWriter) -> None:
        cls = type(value)
        write_tag(writer, cls.TAG)
        if cls.HAS_MESSAGE:
            STRING.write(value.message, writer)


# =============================================================================
# Instances
# =============================================================================

OPTIONAL_STRING = FfiConverterOptional(STRING)
OPTIONAL_UINT32 = FfiConverterOptional(UINT32)
STRINGS = FfiConverterSequence(STRING)

AMOUNT = FfiConverterRecord(Amount, [("value", UINT64)])
AMOUNTS = FfiConverterSequence(AMOUNT)
OPTIONAL_AMOUNT = FfiConverterOptional(AMOUNT)
MINT_URL = FfiConverterRecord(MintUrl, [("url", STRING)])
CURRENCY_UNIT = _FfiConverterCurrencyUnit()
OPTIONAL_CURRENCY_UNIT = FfiConverterOptional(CURRENCY_UNIT)
SPLIT_TARGET = _FfiConverterSplitTarget()
QUOTE_STATE = FfiConverterEnum(QuoteState)
PROOF_STATE = FfiConverterEnum(ProofState)
PROOF_STATES = FfiConverterSequence(PROOF_STATE)
FFI_ERROR = _FfiConverterFfiError()

PROOF_DLEQ = FfiConverterRecord(ProofDleq, [("e", STRING), ("s", STRING), ("r", STRING)])
PROOF = FfiConverterRecord(
    Proof,
    [
        ("amount", AMOUNT),
        ("secret", STRING),
        ("c", STRING),
        ("keyset_id", STRING),
        ("witness", OPTIONAL_STRING),
        ("dleq", FfiConverterOptional(PROOF_DLEQ)),
    ],
)
PROOFS = FfiConverterSequence(PROOF)
PROOF_INFO = FfiConverterRecord(
    ProofInfo,
    [
        ("proof", PROOF),
        ("y", STRING),
        ("mint_url", MINT_URL),
        ("state", PROOF_STATE),
        ("unit", CURRENCY_UNIT),
    ],
)
PROOF_INFOS = FfiConverterSequence(PROOF_INFO)
MINT_QUOTE = FfiConverterRecord(
    MintQuote,
    [
        ("id", STRING),
        ("amount", OPTIONAL_AMOUNT),
        ("unit", CURRENCY_UNIT),
        ("request", STRING),
        ("state", QUOTE_STATE),
        ("expiry", UINT64),
        ("mint_url", MINT_URL),
    ],
)
OPTIONAL_MINT_QUOTE = FfiConverterOptional(MINT_QUOTE)
MELT_QUOTE = FfiConverterRecord(
    MeltQuote,
    [
        ("id", STRING),
        ("amount", AMOUNT),
        ("unit", CURRENCY_UNIT),
        ("request", STRING),
        ("fee_reserve", AMOUNT),
        ("state", QUOTE_STATE),
        ("expiry", UINT64),
        ("payment_preimage", OPTIONAL_STRING),
    ],
)
MELTED = FfiConverterRecord(
    Melted,
    [
        ("state", QUOTE_STATE),
        ("preimage", OPTIONAL_STRING),
        ("amount", AMOUNT),
        ("fee_paid", AMOUNT),
    ],
)
WALLET_CONFIG = FfiConverterRecord(WalletConfig, [("target_proof_count", OPTIONAL_UINT32)])
OPTIONAL_WALLET_CONFIG = FfiConverterOptional(WALLET_CONFIG)
MINTS = FfiConverterMap(MINT_URL, OPTIONAL_STRING)
