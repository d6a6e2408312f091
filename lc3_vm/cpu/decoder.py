"""
LC-3 Virtual Machine - Instruction Decoder

Every LC-3 instruction is a single 16-bit word. Bits 15-12 select the
opcode; the remaining twelve bits are operand fields whose meaning
depends on the opcode:

   15 14 13 12 | 11 10  9 |  8  7  6 |  5 |  4  3 |  2  1  0
  ------------+----------+----------+----+-------+---------
    opcode    |  DR/SR   | SR1/Base | im |  imm5 / SR2
    opcode    |  n  z  p |        PCoffset9
    opcode    | L |            PCoffset11               (JSR)
    opcode    |  DR/SR   |   Base   |     offset6        (LDR/STR)
    opcode    |  0  0  0  0 |         trapvect8          (TRAP)

Offsets and imm5 are sign extended when a handler reads them, so an
opcode only pays for the fields it uses.
"""

from .alu import sign_extend


# ──────────────────────────────────────────────
# Opcodes (bits 15-12)
# ──────────────────────────────────────────────

OP_BR   = 0x0
OP_ADD  = 0x1
OP_LD   = 0x2
OP_ST   = 0x3
OP_JSR  = 0x4
OP_AND  = 0x5
OP_LDR  = 0x6
OP_STR  = 0x7
OP_RTI  = 0x8   # supervisor return - not supported
OP_NOT  = 0x9
OP_LDI  = 0xA
OP_STI  = 0xB
OP_JMP  = 0xC
OP_RES  = 0xD   # reserved
OP_LEA  = 0xE
OP_TRAP = 0xF

# opcode -> mnemonic
OPCODES = {
    OP_BR: 'BR', OP_ADD: 'ADD', OP_LD: 'LD', OP_ST: 'ST',
    OP_JSR: 'JSR', OP_AND: 'AND', OP_LDR: 'LDR', OP_STR: 'STR',
    OP_RTI: 'RTI', OP_NOT: 'NOT', OP_LDI: 'LDI', OP_STI: 'STI',
    OP_JMP: 'JMP', OP_RES: 'RES', OP_LEA: 'LEA', OP_TRAP: 'TRAP',
}


# ──────────────────────────────────────────────
# Trap vectors (TRAP bits 7-0)
# ──────────────────────────────────────────────

TRAP_GETC  = 0x20   # read a char, not echoed
TRAP_OUT   = 0x21   # write a char
TRAP_PUTS  = 0x22   # write a word-per-char string
TRAP_IN    = 0x23   # prompt, read a char, echo it
TRAP_PUTSP = 0x24   # write a byte-packed string
TRAP_HALT  = 0x25   # stop the machine

TRAP_NAMES = {
    TRAP_GETC:  'GETC',
    TRAP_OUT:   'OUT',
    TRAP_PUTS:  'PUTS',
    TRAP_IN:    'IN',
    TRAP_PUTSP: 'PUTSP',
    TRAP_HALT:  'HALT',
}


class Instruction:
    """Positional decode of one instruction word.

    Register numbers and flags are plain bit slices taken up front.
    Fields that are meaningless for the opcode are still present; the
    handler for each opcode only reads the ones it needs.
    """

    __slots__ = ('word', 'opcode', 'dr', 'sr1', 'sr2', 'imm_flag',
                 'long_flag', 'cond', 'trapvect')

    def __init__(self, word: int):
        word &= 0xFFFF
        self.word = word
        self.opcode = word >> 12
        self.dr = (word >> 9) & 0x7          # also SR for stores, nzp for BR
        self.sr1 = (word >> 6) & 0x7         # also BaseR
        self.sr2 = word & 0x7
        self.imm_flag = (word >> 5) & 0x1
        self.long_flag = (word >> 11) & 0x1
        self.cond = (word >> 9) & 0x7
        self.trapvect = word & 0xFF

    @property
    def mnemonic(self) -> str:
        return OPCODES[self.opcode]

    @property
    def base(self) -> int:
        return self.sr1

    # --- Sign-extended fields ---

    @property
    def imm5(self) -> int:
        return sign_extend(self.word & 0x1F, 5)

    @property
    def offset6(self) -> int:
        return sign_extend(self.word & 0x3F, 6)

    @property
    def offset9(self) -> int:
        return sign_extend(self.word & 0x1FF, 9)

    @property
    def offset11(self) -> int:
        return sign_extend(self.word & 0x7FF, 11)

    def __repr__(self):
        return f"Instruction({self.mnemonic}, word=0x{self.word:04X})"


def decode(word: int) -> Instruction:
    """Decode one instruction word."""
    return Instruction(word)


def trap_name(vector: int) -> str:
    """Mnemonic for a trap vector, or its hex value if unassigned."""
    return TRAP_NAMES.get(vector & 0xFF, f"x{vector & 0xFF:02X}")
