"""
LC-3 Virtual Machine - Runtime configuration

Defaults follow the conventional LC-3 layout: user programs are entered
at x3000, and the built-in trap routines print the same prompt and halt
notice as the reference VM.
"""

from dataclasses import dataclass
from typing import Optional


PC_START = 0x3000
EOF_VALUE = 0xFFFF       # getchar() EOF stored into a 16-bit register


@dataclass
class VMConfig:
    """Settings the host passes to LC3Emulator."""
    entry_address: int = PC_START
    max_instructions: Optional[int] = None
    halt_message: str = "HALT\n"
    in_prompt: str = "Enter a character:"
    eof_value: int = EOF_VALUE

    def __post_init__(self):
        self.entry_address &= 0xFFFF
        if self.max_instructions is not None and self.max_instructions < 0:
            raise ValueError("max_instructions must be >= 0")


def parse_word(value: str) -> int:
    """Parse an address or word given as 0x3000, x3000, $3000 or decimal.

    LC-3 assembly listings write hex as x3000, so that prefix is
    accepted alongside the usual 0x form.
    """
    value = value.strip()
    if value[:2] in ("0x", "0X"):
        number = int(value[2:], 16)
    elif value[:1] in ("x", "X", "$"):
        number = int(value[1:], 16)
    else:
        number = int(value)
    if not 0 <= number <= 0xFFFF:
        raise ValueError(f"{value} is outside the 16-bit range")
    return number
