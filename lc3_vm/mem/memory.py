"""
LC-3 Virtual Machine - 64K Word Memory with Device Register Routing

Memory map:
  x0000-x00FF  Trap vector table (unused - traps are built in)
  x0100-x01FF  Interrupt vector table (unused)
  x0200-x2FFF  Operating system / supervisor space
  x3000-xFDFF  User program space (programs start at x3000)
  xFE00-xFFFF  Device register addresses
               xFE00 KBSR  keyboard status (bit 15 = byte ready)
               xFE02 KBDR  keyboard data   (low 8 bits = byte)

There is no protection: every address is readable and writable, and
the regions above only describe convention.

Storage is a flat array of 65536 unsigned 16-bit words. Device
registers are handled by read hooks registered with
register_io_handler(). read() checks for a hook first and then falls
back to plain storage; peek()/poke() are the storage path on its own
and never trigger a device.
"""

import logging
from array import array
from typing import Callable, Dict, Iterable

log = logging.getLogger(__name__)

MEMORY_SIZE = 1 << 16
ADDR_MASK = 0xFFFF


class Memory:
    """65536 x 16-bit word-addressable memory.

    Addresses are masked to 16 bits on every access, so address
    arithmetic that runs past xFFFF wraps to x0000 instead of faulting.
    """

    def __init__(self):
        self._mem = array('H', bytes(2 * MEMORY_SIZE))

        # Device read hooks: addr -> read_fn(addr), called before the
        # stored word is returned. The hook updates storage itself.
        self._io_read_handlers: Dict[int, Callable[[int], None]] = {}

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        """Read a word as the CPU sees it (device hooks run first)."""
        addr &= ADDR_MASK
        handler = self._io_read_handlers.get(addr)
        if handler is not None:
            handler(addr)
        return self._mem[addr]

    def write(self, addr: int, value: int):
        """Store a word. No address has a write side effect."""
        self._mem[addr & ADDR_MASK] = value & 0xFFFF

    def peek(self, addr: int) -> int:
        """Read storage without running device hooks."""
        return self._mem[addr & ADDR_MASK]

    def poke(self, addr: int, value: int):
        """Write storage directly (same as write(); kept for symmetry)."""
        self._mem[addr & ADDR_MASK] = value & 0xFFFF

    # --- Bulk load ---

    def load_words(self, origin: int, words: Iterable[int]) -> int:
        """Copy `words` into memory starting at `origin`.

        Words that would land past xFFFF are dropped: an image can fill
        at most MEMORY_SIZE - origin cells. Returns the count stored.
        """
        origin &= ADDR_MASK
        room = MEMORY_SIZE - origin
        count = 0
        for word in words:
            if count == room:
                log.warning("image at x%04X truncated at top of memory "
                            "after %d words", origin, room)
                break
            self._mem[origin + count] = word & 0xFFFF
            count += 1
        return count

    def clear(self):
        """Zero all storage. Device hooks stay registered."""
        self._mem = array('H', bytes(2 * MEMORY_SIZE))

    # --- Device handler registration ---

    def register_io_handler(self, addr: int, read_fn: Callable[[int], None]):
        """Register a read hook for a device register address.

        Peripherals (the keyboard) call this to refresh their
        registers whenever the CPU reads them.
        """
        self._io_read_handlers[addr & ADDR_MASK] = read_fn

    def is_device_register(self, addr: int) -> bool:
        return (addr & ADDR_MASK) in self._io_read_handlers

    # --- Hex dump ---

    def hexdump(self, start: int, length: int = 64) -> str:
        """Dump `length` words from `start`, eight per line."""
        lines = []
        for offset in range(0, length, 8):
            addr = (start + offset) & ADDR_MASK
            words = ' '.join(f'{self._mem[(addr + i) & ADDR_MASK]:04X}'
                             for i in range(min(8, length - offset)))
            lines.append(f'x{addr:04X}  {words}')
        return '\n'.join(lines)

    def __len__(self) -> int:
        return MEMORY_SIZE
