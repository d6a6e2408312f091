"""
LC-3 Virtual Machine - Register File + Condition Flags

Register model:
  R0-R7  16-bit general purpose registers
         R7 receives the return address on JSR/JSRR/TRAP
  PC     16-bit program counter
  COND   condition code, exactly one of N Z P set at any time
         bit 2: N (Negative - bit 15 of the last result)
         bit 1: Z (Zero - last result == 0)
         bit 0: P (Positive - neither of the above)

Flag-affecting instructions: ADD, AND, NOT, LD, LDI, LDR, LEA, and the
GETC / IN traps (which write R0). Stores, jumps, branches and the output
traps leave COND untouched.
"""

# COND bit masks
FL_POS = 0x1
FL_ZRO = 0x2
FL_NEG = 0x4

R7 = 7
NUM_GPR = 8


class Registers:
    """LC-3 register file.

    Registers are plain ints kept in the 0..0xFFFF range by the setters
    of the callers; `write()` masks for convenience.
    """

    __slots__ = ('R', 'PC', 'COND')

    def __init__(self):
        self.R: list = [0] * NUM_GPR
        self.PC: int = 0
        self.COND: int = FL_ZRO   # one flag must always be set

    def read(self, index: int) -> int:
        return self.R[index & 0x7]

    def write(self, index: int, value: int):
        self.R[index & 0x7] = value & 0xFFFF

    # --- COND flag access ---

    def update_flags(self, index: int):
        """Set COND from the sign of register `index`."""
        value = self.R[index & 0x7]
        if value == 0:
            self.COND = FL_ZRO
        elif value >> 15:
            self.COND = FL_NEG   # 1 in the leftmost bit means negative
        else:
            self.COND = FL_POS

    @property
    def negative(self) -> bool:
        return bool(self.COND & FL_NEG)

    @property
    def zero(self) -> bool:
        return bool(self.COND & FL_ZRO)

    @property
    def positive(self) -> bool:
        return bool(self.COND & FL_POS)

    # --- Display ---

    def display(self) -> str:
        """Format register state on one line for log records."""
        cond = ''.join(c if self.COND & bit else '.'
                       for c, bit in (('N', FL_NEG), ('Z', FL_ZRO), ('P', FL_POS)))
        gprs = ' '.join(f"R{i}={v:04X}" for i, v in enumerate(self.R))
        return f"PC={self.PC:04X} {gprs} COND=[{cond}]"

    def reset(self, pc: int = 0):
        """Reset to power-on state with PC at `pc`."""
        self.R = [0] * NUM_GPR
        self.PC = pc & 0xFFFF
        self.COND = FL_ZRO
