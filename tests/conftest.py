"""
Global pytest fixtures for cdk tests.

This module provides:
- Fault handling for native crashes
- An in-process fake of the native library, installed for every test
- A recording fault handler replacing the default (which aborts)
- Leak checks: native buffers, objects, futures and handle tables must all
  be released by the end of every test

=============================================================================
Fault Policy
=============================================================================

Faults reported from native-invoked callbacks go to the fault handler, not
to the test. Tests that provoke one on purpose take the ``faults`` fixture,
mark themselves ``@pytest.mark.allow_faults`` and assert on what was
recorded. Any other test fails if a fault was reported.
"""

import faulthandler
import gc
import threading

import pytest

from cdk._async import CONTINUATIONS
from cdk._bindings import install_lib, reset_lib
from cdk._callbacks import GUARDS
from cdk._status import set_fault_handler
from cdk.db._bindings import WALLET_DATABASE
from tests.fixtures.native import FakeNativeLibrary

# Enable faulthandler to trace native crashes (segfaults)
faulthandler.enable()


# =============================================================================
# Fault Recording
# =============================================================================


class FaultRecorder:
    """Fault handler that records faults instead of aborting."""

    def __init__(self):
        self.faults = []
        self._cond = threading.Condition()

    def __call__(self, fault):
        with self._cond:
            self.faults.append(fault)
            self._cond.notify_all()

    def wait_for(self, count=1, timeout=5.0):
        """Block until ``count`` faults were recorded; return them."""
        with self._cond:
            self._cond.wait_for(lambda: len(self.faults) >= count, timeout)
            return list(self.faults)


@pytest.fixture(autouse=True)
def faults(request):
    """Install a recording fault handler for the duration of the test."""
    recorder = FaultRecorder()
    previous = set_fault_handler(recorder)
    yield recorder
    set_fault_handler(previous)
    if request.node.get_closest_marker("allow_faults") is None:
        assert not recorder.faults, f"unexpected bridge faults: {recorder.faults!r}"


# =============================================================================
# Native Library
# =============================================================================


@pytest.fixture(autouse=True)
def native(faults):
    """
    Install a fresh fake native library.

    Teardown fails the test if anything crossing the boundary was leaked.
    """
    fake = FakeNativeLibrary()
    install_lib(fake)
    yield fake
    try:
        gc.collect()
        fake.assert_clean()
        assert len(CONTINUATIONS) == 0, "continuation handles leaked"
        assert len(GUARDS) == 0, "foreign future guards leaked"
        assert len(WALLET_DATABASE.handles) == 0, "database handles leaked"
    finally:
        reset_lib()


def join_with_timeout(threads, timeout=5.0):
    """Join ``threads``, failing the test if any is still running."""
    for thread in threads:
        thread.join(timeout)
        assert not thread.is_alive(), f"thread {thread.name} did not finish"
