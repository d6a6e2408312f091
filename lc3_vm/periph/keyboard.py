"""
LC-3 Virtual Machine - Keyboard Device Registers

Register map:
  xFE00  KBSR  - Keyboard status register
                 bit 15: byte ready (set when a key is waiting)
  xFE02  KBDR  - Keyboard data register
                 bits 7-0: last byte received

A program polls for input by reading KBSR until bit 15 is set, then
reads KBDR. Every CPU read of KBSR asks the input provider whether a
byte is ready; if so the byte is consumed into KBDR and KBSR bit 15 is
set, otherwise KBSR is cleared. KBDR itself has no side effect: it
keeps the last byte until the next successful KBSR poll.
"""

from ..host.base import CharIO

# Device register addresses
KBSR = 0xFE00
KBDR = 0xFE02

# KBSR bits
KB_READY = 0x8000


class KeyboardPeripheral:
    """KBSR/KBDR model backed by a CharIO provider."""

    def __init__(self, io: CharIO):
        self.io = io
        self._mem = None

    def register(self, memory):
        """Wire the KBSR read hook into memory.

        Call this during emulator init.
        """
        self._mem = memory
        memory.register_io_handler(KBSR, self._read_kbsr)

    def _read_kbsr(self, addr: int):
        """Poll the provider and refresh both registers in storage."""
        if self.io.is_byte_ready():
            self._mem.poke(KBSR, KB_READY)
            self._mem.poke(KBDR, self.io.read_byte())
        else:
            self._mem.poke(KBSR, 0)

    @property
    def status(self) -> int:
        return self._mem.peek(KBSR)

    @property
    def data(self) -> int:
        return self._mem.peek(KBDR)

    def reset(self):
        if self._mem is not None:
            self._mem.poke(KBSR, 0)
            self._mem.poke(KBDR, 0)
