"""
LC-3 Virtual Machine - Built-in Trap Routines

TRAP x20-x25 are serviced directly in Python instead of by OS code in
memory. The caller has already saved the return address in R7.

  x20 GETC   read one byte (no echo) into R0, set COND
  x21 OUT    write low byte of R0
  x22 PUTS   write the word-per-char string at R0 (stops at x0000)
  x23 IN     prompt, read one byte, echo it, R0 = byte, set COND
  x24 PUTSP  write the byte-packed string at R0: low byte, then high
             byte if nonzero, per word (stops at x0000)
  x25 HALT   print the halt notice and stop the machine

Any other vector is a fault. String traps read memory through the
storage path (peek) so they never poll the keyboard, and the string
address wraps at xFFFF like every other address.
"""

import logging

from ..cpu.decoder import (
    TRAP_GETC, TRAP_OUT, TRAP_PUTS, TRAP_IN, TRAP_PUTSP, TRAP_HALT,
)
from ..config import VMConfig
from ..outcome import StepResult, CONTINUE, HALTED

log = logging.getLogger(__name__)

R0 = 0


class TrapDispatcher:
    """Vector -> routine table for the six service routines."""

    def __init__(self, regs, mem, io, config: VMConfig):
        self.regs = regs
        self.mem = mem
        self.io = io
        self.config = config
        self._routines = {
            TRAP_GETC:  self._getc,
            TRAP_OUT:   self._out,
            TRAP_PUTS:  self._puts,
            TRAP_IN:    self._in,
            TRAP_PUTSP: self._putsp,
            TRAP_HALT:  self._halt,
        }

    def dispatch(self, vector: int, addr: int) -> StepResult:
        """Run the routine for `vector`; `addr` is the TRAP's own address."""
        routine = self._routines.get(vector & 0xFF)
        if routine is None:
            return StepResult.faulted(
                f"unknown trap vector x{vector & 0xFF:02X} at x{addr:04X}")
        return routine()

    # ── Input ──

    def _getc(self) -> StepResult:
        self.regs.write(R0, self.io.read_byte())
        self.regs.update_flags(R0)
        return CONTINUE

    def _in(self) -> StepResult:
        self.io.write_text(self.config.in_prompt)
        self.io.flush()
        c = self.io.read_byte()
        self.io.write_byte(c)
        self.io.flush()
        self.regs.write(R0, c)
        self.regs.update_flags(R0)
        return CONTINUE

    # ── Output ──

    def _out(self) -> StepResult:
        self.io.write_byte(self.regs.read(R0))
        self.io.flush()
        return CONTINUE

    def _string_words(self):
        """Words of the zero-terminated string at R0, terminator excluded.

        Gives up after one full pass over memory if no x0000 is found.
        """
        addr = self.regs.read(R0)
        for _ in range(0x10000):
            word = self.mem.peek(addr)
            if not word:
                return
            yield word
            addr = (addr + 1) & 0xFFFF

    def _puts(self) -> StepResult:
        """One character per word."""
        for word in self._string_words():
            self.io.write_byte(word)
        self.io.flush()
        return CONTINUE

    def _putsp(self) -> StepResult:
        """Two characters per word, low byte first."""
        for word in self._string_words():
            self.io.write_byte(word & 0xFF)
            high = word >> 8
            if high:
                self.io.write_byte(high)
        self.io.flush()
        return CONTINUE

    # ── Control ──

    def _halt(self) -> StepResult:
        self.io.write_text(self.config.halt_message)
        self.io.flush()
        log.info("HALT trap")
        return HALTED
