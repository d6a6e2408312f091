"""
LC-3 Virtual Machine - Word Arithmetic Helpers

Every value in the machine is a 16-bit word, and all arithmetic wraps
modulo 2^16. Narrow instruction fields (imm5, offset6, offset9,
offset11) are two's-complement and must be sign extended before they
are added to a register or the PC.
"""

WORD_MASK = 0xFFFF


def sign_extend(value: int, bit_count: int) -> int:
    """Widen the low `bit_count` bits of `value` to a 16-bit word.

    If bit (bit_count - 1) is set, every bit above it is filled with 1s:
      sign_extend(0x1F, 5) == 0xFFFF   (-1)
      sign_extend(0x0F, 5) == 0x000F   (+15)
      sign_extend(0x100, 9) == 0xFF00  (-256)
    """
    if not 1 <= bit_count <= 16:
        raise ValueError(f"bit_count must be 1..16, got {bit_count}")
    value &= (1 << bit_count) - 1
    if (value >> (bit_count - 1)) & 1:
        value |= (WORD_MASK << bit_count) & WORD_MASK
    return value


def swap16(word: int) -> int:
    """Exchange the high and low bytes of a word (image byte order)."""
    word &= WORD_MASK
    return ((word << 8) | (word >> 8)) & WORD_MASK


def add16(a: int, b: int) -> int:
    """Two's-complement 16-bit add; overflow wraps silently."""
    return (a + b) & WORD_MASK


def and16(a: int, b: int) -> int:
    return a & b & WORD_MASK


def not16(a: int) -> int:
    return ~a & WORD_MASK
