"""
Shared fixtures for the LC-3 VM test suite.

Programs in the tests are hand-assembled words with the assembly in a
trailing comment, loaded at x3000 unless a test says otherwise.
"""

import logging

import pytest

from lc3_vm.emu import LC3Emulator
from lc3_vm.host.buffered import BufferedIO
from lc3_vm.log_setup import LOGGER_NAME

ORIGIN = 0x3000


def make_machine(words=(), input_data=b"", origin=ORIGIN, config=None):
    """Build an emulator with a BufferedIO and `words` loaded at `origin`."""
    io = BufferedIO(input_data)
    emu = LC3Emulator(io, config)
    emu.load_words(origin, words)
    emu.regs.PC = origin
    return emu, io


@pytest.fixture(autouse=True)
def package_logger():
    """Undo setup_logging() after each test so caplog sees lc3_vm records."""
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    for handler in list(logger.handlers):
        if handler not in saved[0]:
            logger.removeHandler(handler)
            handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
def machine():
    """Factory fixture: machine(words, input_data=b"") -> (emu, io)."""
    return make_machine


@pytest.fixture
def emu():
    """An empty emulator with PC at x3000."""
    return make_machine()[0]
