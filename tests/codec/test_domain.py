"""
Tests for the domain type converters.

Tests for cdk.types._converters: tagged unions, records and the native
error enum.
"""

import pytest

from cdk._codec import WireReader, WireWriter
from cdk.exceptions import (
    DatabaseError,
    FfiError,
    InsufficientFundsError,
    ProtocolError,
)
from cdk.types import (
    Amount,
    CurrencyUnit,
    MintQuote,
    MintUrl,
    Proof,
    ProofDleq,
    ProofState,
    QuoteState,
    SplitTarget,
)
from cdk.types._converters import (
    AMOUNT,
    CURRENCY_UNIT,
    FFI_ERROR,
    MINT_QUOTE,
    MINTS,
    PROOF,
    PROOF_STATE,
    SPLIT_TARGET,
)


def encode(converter, value):
    writer = WireWriter()
    converter.write(value, writer)
    return writer.getvalue()


def decode(converter, data):
    reader = WireReader(data)
    value = converter.read(reader)
    reader.finish()
    return value


class TestCurrencyUnit:
    """CurrencyUnit tagged union."""

    def test_known_units_use_one_based_tags(self):
        """Well-known units are bare tags starting at 1."""
        assert encode(CURRENCY_UNIT, CurrencyUnit.SAT) == b"\x00\x00\x00\x01"
        assert encode(CURRENCY_UNIT, CurrencyUnit.AUTH) == b"\x00\x00\x00\x05"

    def test_custom_unit_carries_name(self):
        """Custom units are tag 6 followed by the name."""
        data = encode(CURRENCY_UNIT, CurrencyUnit.of("points"))
        assert data == b"\x00\x00\x00\x06" + b"\x00\x00\x00\x06points"
        assert decode(CURRENCY_UNIT, data) == CurrencyUnit("points", custom=True)

    def test_unknown_tag(self):
        """Tags outside the union are a protocol violation."""
        with pytest.raises(ProtocolError, match="CurrencyUnit"):
            decode(CURRENCY_UNIT, b"\x00\x00\x00\x07")

    def test_zero_tag(self):
        """Tag 0 is never valid."""
        with pytest.raises(ProtocolError):
            decode(CURRENCY_UNIT, b"\x00\x00\x00\x00")

    def test_builtin_name_checked_before_lowering(self):
        """A non-custom unit with an unknown name is rejected by check_lower."""
        with pytest.raises(ValueError, match="points"):
            CURRENCY_UNIT.check_lower(CurrencyUnit("points"))
        with pytest.raises(TypeError):
            CURRENCY_UNIT.check_lower(CurrencyUnit(7, custom=True))


class TestSplitTarget:
    """SplitTarget tagged union."""

    def test_none(self):
        assert encode(SPLIT_TARGET, SplitTarget.none()) == b"\x00\x00\x00\x01"

    def test_value(self):
        """value() carries a single amount."""
        data = encode(SPLIT_TARGET, SplitTarget.value(Amount(8)))
        assert data == b"\x00\x00\x00\x02" + (8).to_bytes(8, "big")

    def test_values(self):
        """values() carries a sequence of amounts."""
        target = SplitTarget.values([Amount(1), Amount(2)])
        assert decode(SPLIT_TARGET, encode(SPLIT_TARGET, target)) == target

    def test_amounts_checked_before_lowering(self):
        with pytest.raises(TypeError, match="Amount"):
            SPLIT_TARGET.check_lower(SplitTarget.value(5))
        with pytest.raises(TypeError, match="Amount"):
            SPLIT_TARGET.check_lower(SplitTarget.values([Amount(1), 2]))

    def test_shape_checked_before_lowering(self):
        with pytest.raises(ValueError, match="kind"):
            SPLIT_TARGET.check_lower(SplitTarget("all"))
        with pytest.raises(ValueError, match="takes 1"):
            SPLIT_TARGET.check_lower(SplitTarget("value", ()))


class TestEnums:
    """Fieldless enums."""

    def test_proof_state_tag(self):
        assert encode(PROOF_STATE, ProofState.SPENT) == b"\x00\x00\x00\x03"

    def test_unknown_enum_tag(self):
        """Unknown enum tags are a protocol violation, not a ValueError."""
        with pytest.raises(ProtocolError, match="ProofState"):
            decode(PROOF_STATE, b"\x00\x00\x00\x09")

    def test_wrong_enum_type(self):
        """Lowering a different IntEnum is a TypeError."""
        with pytest.raises(TypeError):
            PROOF_STATE.check_lower(QuoteState.PAID)


class TestRecords:
    """Records serialize their fields in declaration order."""

    def test_amount_layout(self):
        assert encode(AMOUNT, Amount(5)) == b"\x00" * 7 + b"\x05"

    def test_proof_with_dleq(self):
        """Nested optional records survive a round trip."""
        proof = Proof(
            Amount(4),
            "secret",
            "02abc",
            "009a1f293253e41e",
            witness=None,
            dleq=ProofDleq("e", "s", "r"),
        )
        assert decode(PROOF, encode(PROOF, proof)) == proof

    def test_record_type_checked(self):
        """Lowering the wrong record type raises TypeError."""
        with pytest.raises(TypeError, match="MintQuote"):
            MINT_QUOTE.check_lower(Amount(1))

    def test_record_fields_checked(self):
        """Field values are validated before anything is written."""
        quote = MintQuote(
            "q",
            None,
            CurrencyUnit.SAT,
            "lnbc",
            QuoteState.UNPAID,
            -1,
            MintUrl("https://mint.example.com"),
        )
        with pytest.raises(ValueError):
            MINT_QUOTE.check_lower(quote)

    def test_mints_map(self):
        """get_mints results are keyed by MintUrl."""
        mints = {MintUrl("https://a.example"): None, MintUrl("https://b.example"): "{}"}
        assert decode(MINTS, encode(MINTS, mints)) == mints


class TestFfiErrorConverter:
    """The native error enum."""

    def test_variant_without_message(self):
        """Message-less variants are the bare tag."""
        assert encode(FFI_ERROR, InsufficientFundsError()) == b"\x00\x00\x00\x07"

    def test_variant_with_message(self):
        """Variants with a message carry it after the tag."""
        data = encode(FFI_ERROR, DatabaseError("disk full"))
        assert data == b"\x00\x00\x00\x08" + b"\x00\x00\x00\x09disk full"
        error = decode(FFI_ERROR, data)
        assert isinstance(error, DatabaseError)
        assert error.message == "disk full"
        assert error.original_code == 8

    def test_unknown_variant(self):
        """Unknown error tags are a protocol violation."""
        with pytest.raises(ProtocolError, match="FfiError"):
            decode(FFI_ERROR, b"\x00\x00\x00\x63")

    def test_base_class_is_not_a_variant(self):
        """Only concrete variants can be sent to the native side."""
        with pytest.raises(TypeError):
            FFI_ERROR.check_lower(FfiError("generic"))
