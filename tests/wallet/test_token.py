"""
Tests for cdk.Token.

Decoding and encoding, accessors, and the pointer lifetime of token objects.
"""

import base64
import gc
import json

import pytest

from cdk import Amount, CurrencyUnit, InvalidTokenError, MintUrl, Token, UsageError
from cdk.exceptions import InternalError
from tests.fixtures import KEYSET_ID

MINT = "https://mint.example.com"


def encoded_token(proofs=((2, "s1"), (8, "s2")), memo="thanks", unit=("sat", False)):
    doc = {
        "m": MINT,
        "u": list(unit) if unit else None,
        "d": memo,
        "p": [[amount, secret, "02" + secret, KEYSET_ID] for amount, secret in proofs],
    }
    data = json.dumps(doc, separators=(",", ":")).encode()
    return "cashuB" + base64.urlsafe_b64encode(data).decode()


class TestDecode:
    """Token.decode and Token.from_raw_bytes."""

    def test_decode(self, native):
        with Token.decode(encoded_token()) as token:
            assert token.value() == Amount(10)
            assert token.memo() == "thanks"
            assert token.unit() == CurrencyUnit.SAT
            assert token.mint_url() == MintUrl(MINT)
            assert [p.secret for p in token.proofs()] == ["s1", "s2"]

    def test_optional_fields_absent(self, native):
        with Token.decode(encoded_token(memo=None, unit=None)) as token:
            assert token.memo() is None
            assert token.unit() is None

    def test_encode_round_trip(self, native):
        text = encoded_token()
        with Token.decode(text) as token:
            assert token.encode() == text
            assert str(token) == text

    def test_raw_bytes(self, native):
        with Token.decode(encoded_token()) as token:
            raw = token.to_raw_bytes()
        assert raw.startswith(b"crawB")
        with Token.from_raw_bytes(raw) as again:
            assert again.value() == Amount(10)

    def test_invalid_prefix(self, native):
        with pytest.raises(InvalidTokenError, match="prefix"):
            Token.decode("cashuAeyJ9")
        assert native.live_objects() == []

    def test_malformed_payload(self, native):
        garbage = "cashuB" + base64.urlsafe_b64encode(b"{not json").decode()
        with pytest.raises(InvalidTokenError):
            Token.decode(garbage)

    def test_invalid_raw_bytes(self, native):
        with pytest.raises(InvalidTokenError):
            Token.from_raw_bytes(b"nope")

    def test_invalid_token_is_value_error(self, native):
        """Decoding failures can be handled as ValueError."""
        with pytest.raises(ValueError):
            Token.decode("not a token")

    def test_type_checked(self, native):
        with pytest.raises(TypeError):
            Token.decode(b"cashuB")
        assert native.live_buffers == 0

    def test_direct_construction_refused(self):
        with pytest.raises(TypeError, match="Token.decode"):
            Token()


class TestNativeFailures:
    """Errors reported by token methods."""

    def test_panic_in_method(self, native):
        with Token.decode(encoded_token()) as token:
            native.inject_panic("method_token_value", "bad token state")
            with pytest.raises(InternalError, match="bad token state"):
                token.value()
            assert token.value() == Amount(10)

    def test_injected_error(self, native):
        native.inject_error("constructor_token_decode", InvalidTokenError("version 9"))
        with pytest.raises(InvalidTokenError, match="version 9"):
            Token.decode(encoded_token())


class TestLifetime:
    """Pointer ownership."""

    def test_each_method_clones(self, native):
        token = Token.decode(encoded_token())
        token.value()
        token.memo()
        assert native.calls["clone_token"] == 2
        (pointer,) = native.live_objects("token")
        assert native.refcount(pointer) == 1
        token.close()
        assert native.calls["free_token"] == 1
        assert native.live_objects() == []

    def test_use_after_close(self, native):
        token = Token.decode(encoded_token())
        token.close()
        assert token.closed
        assert repr(token) == "<Token closed>"
        with pytest.raises(UsageError, match="Token object has already been destroyed"):
            token.encode()

    def test_garbage_collected(self, native):
        """A dropped wrapper frees its native object."""
        Token.decode(encoded_token())
        gc.collect()
        assert native.live_objects("token") == []
