"""
LC-3 Virtual Machine
====================
An emulator for the LC-3 teaching architecture: 16-bit words, 64K
words of memory, eight registers, N/Z/P condition codes, and the
standard GETC/OUT/PUTS/IN/PUTSP/HALT trap routines built in.

Layout:
    cpu/regs.py        register file + COND flags
    cpu/alu.py         sign extension, byte swap, 16-bit arithmetic
    cpu/decoder.py     opcode table and operand fields
    mem/memory.py      word memory with device register hooks
    periph/keyboard.py KBSR/KBDR
    periph/traps.py    built-in trap routines
    host/              character I/O providers (buffer, console, serial)
    loader.py          object file parsing
    emu.py             fetch/decode/execute loop
"""

__version__ = "1.0.0"

from .config import VMConfig, PC_START
from .emu import LC3Emulator
from .errors import LC3Error, ImageLoadError, FaultError
from .loader import ProgramImage, parse_image, read_image
from .outcome import Outcome, StepResult, StopReason

__all__ = [
    'LC3Emulator', 'VMConfig', 'PC_START',
    'LC3Error', 'ImageLoadError', 'FaultError',
    'ProgramImage', 'parse_image', 'read_image',
    'Outcome', 'StepResult', 'StopReason',
]
