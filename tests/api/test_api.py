"""
Tests for module-level functions.

generate_mnemonic, mnemonic_to_entropy and init_native_logging.
"""

import logging

import pytest

import cdk
from cdk.exceptions import GenericError, InternalError, InvalidMnemonicError
from tests.fixtures import WORDS


class TestMnemonic:
    def test_generate(self, native):
        words = cdk.generate_mnemonic().split()
        assert len(words) == 12
        assert set(words) <= set(WORDS)
        assert native.live_buffers == 0

    def test_generate_differs(self, native):
        assert cdk.generate_mnemonic() != cdk.generate_mnemonic()

    def test_to_entropy(self, native):
        """Twelve words decode to 16 bytes of entropy."""
        entropy = cdk.mnemonic_to_entropy(" ".join(WORDS[:12]))
        assert isinstance(entropy, bytes)
        assert len(entropy) == 16

    def test_to_entropy_deterministic(self, native):
        words = " ".join(WORDS[:12])
        assert cdk.mnemonic_to_entropy(words) == cdk.mnemonic_to_entropy(words)

    def test_unknown_word(self, native):
        words = " ".join(WORDS[:11] + ["zebra"])
        with pytest.raises(InvalidMnemonicError, match="zebra"):
            cdk.mnemonic_to_entropy(words)
        assert native.live_buffers == 0

    def test_type_checked(self, native):
        with pytest.raises(TypeError):
            cdk.mnemonic_to_entropy(WORDS[:12])

    def test_panic(self, native):
        native.inject_panic("func_generate_mnemonic", "rng unavailable")
        with pytest.raises(InternalError, match="rng unavailable"):
            cdk.generate_mnemonic()


class TestNativeLogging:
    def test_level_name(self, native):
        cdk.init_native_logging("trace")
        assert native.native_log_level == "trace"

    def test_level_name_case(self, native):
        cdk.init_native_logging("DEBUG")
        assert native.native_log_level == "debug"

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (logging.DEBUG, "debug"),
            (logging.INFO, "info"),
            (logging.WARNING, "warn"),
            (logging.ERROR, "error"),
            (logging.CRITICAL, "error"),
            (5, "trace"),
            (25, "info"),
        ],
    )
    def test_logging_constants(self, native, level, expected):
        cdk.init_native_logging(level)
        assert native.native_log_level == expected

    def test_unknown_level(self, native):
        with pytest.raises(GenericError, match="unknown log level"):
            cdk.init_native_logging("loud")
