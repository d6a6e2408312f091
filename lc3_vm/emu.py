"""
LC-3 Virtual Machine - Main Emulator Class

This is the top-level class that integrates:
  - Register file + COND flags (cpu/regs.py)
  - 64K word memory (mem/memory.py)
  - Instruction decoder (cpu/decoder.py)
  - Word arithmetic (cpu/alu.py)
  - Keyboard device registers (periph/keyboard.py)
  - Trap routines (periph/traps.py)

Execution model:
  1. Fetch the word at PC, PC += 1 (wrapping)
  2. Decode opcode (bits 15-12) and operand fields
  3. Execute the opcode handler -> registers, memory, COND, I/O
  4. Stop on HALTED or FAULTED, or when the instruction limit is hit

Stop reasons:
  - HALT:   TRAP x25
  - FAULT:  RTI / RES opcode, or a trap vector with no routine
  - LIMIT:  max_instructions executed

A fault does not abort the process. The machine keeps its state (PC
already points past the faulting word) and the host decides what to
do with it.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import VMConfig
from .cpu.regs import Registers, R7
from .cpu.decoder import (
    decode, Instruction,
    OP_BR, OP_ADD, OP_LD, OP_ST, OP_JSR, OP_AND, OP_LDR, OP_STR,
    OP_RTI, OP_NOT, OP_LDI, OP_STI, OP_JMP, OP_RES, OP_LEA, OP_TRAP,
)
from .cpu import alu
from .errors import FaultError
from .host.base import CharIO
from .host.buffered import BufferedIO
from .loader import ProgramImage, read_image, load_image
from .mem.memory import Memory
from .outcome import (
    Outcome, StepResult, StopReason, CONTINUE, BRANCH_TAKEN,
)
from .periph.keyboard import KeyboardPeripheral
from .periph.traps import TrapDispatcher

log = logging.getLogger(__name__)


class LC3Emulator:
    """LC-3 virtual machine.

    Usage:
        io = BufferedIO()
        emu = LC3Emulator(io)
        emu.load_image_file('hello.obj')
        reason = emu.run()
        print(io.output)        # b"Hello, World!\\nHALT\\n"
    """

    def __init__(self, io: Optional[CharIO] = None,
                 config: Optional[VMConfig] = None):
        self.config = config or VMConfig()
        self.io = io if io is not None else BufferedIO(
            eof_value=self.config.eof_value)

        # Core components
        self.regs = Registers()
        self.mem = Memory()

        # Peripherals
        self.keyboard = KeyboardPeripheral(self.io)
        self.keyboard.register(self.mem)
        self.traps = TrapDispatcher(self.regs, self.mem, self.io, self.config)

        self.instructions_executed = 0
        self._terminal: Optional[StepResult] = None

        # Opcode dispatch table (built in _build_dispatch)
        self._dispatch = self._build_dispatch()

        self.regs.reset(self.config.entry_address)

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_image(self, image: ProgramImage) -> int:
        """Place a parsed program image in memory."""
        return load_image(self.mem, image)

    def load_image_file(self, path: Union[str, Path]) -> ProgramImage:
        """Read an object file and place it in memory.

        Raises ImageLoadError if the file is missing or malformed.
        """
        image = read_image(path)
        self.load_image(image)
        return image

    def load_words(self, origin: int, words) -> int:
        """Place raw words at `origin` (hand-assembled programs)."""
        return self.mem.load_words(origin, words)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    @property
    def halted(self) -> bool:
        return self._terminal is not None and self._terminal.outcome is Outcome.HALTED

    @property
    def faulted(self) -> bool:
        return self._terminal is not None and self._terminal.outcome is Outcome.FAULTED

    @property
    def fault_reason(self) -> Optional[str]:
        return self._terminal.reason if self.faulted else None

    def step(self) -> StepResult:
        """Execute one instruction.

        Once the machine has halted or faulted, further calls do not
        execute anything and return the terminal result again.
        """
        if self._terminal is not None:
            return self._terminal

        # Fetch
        addr = self.regs.PC
        word = self.mem.read(addr)
        self.regs.PC = (addr + 1) & 0xFFFF

        # Decode + execute
        instr = decode(word)
        result = self._dispatch[instr.opcode](instr, addr)
        self.instructions_executed += 1

        if result.terminal:
            self._terminal = result
            if result.outcome is Outcome.FAULTED:
                log.error("fault: %s", result.reason)
                log.error("  %s", self.regs.display())
                log.debug("memory at fault:\n%s",
                          self.mem.hexdump(addr & 0xFFF8, 16))
        return result

    def run(self, max_instructions: Optional[int] = None,
            raise_on_fault: bool = False) -> StopReason:
        """Run until HALT, a fault, or the instruction limit.

        Args:
            max_instructions: stop with LIMIT after this many
                instructions (defaults to config.max_instructions;
                None means no limit)
            raise_on_fault: raise FaultError instead of returning FAULT

        Returns:
            StopReason indicating why execution stopped
        """
        if max_instructions is None:
            max_instructions = self.config.max_instructions

        log.info("run from x%04X", self.regs.PC)
        executed = 0
        while max_instructions is None or executed < max_instructions:
            result = self.step()
            executed += 1
            if result.outcome is Outcome.HALTED:
                log.info("halted after %d instructions", self.instructions_executed)
                return StopReason.HALT
            if result.outcome is Outcome.FAULTED:
                if raise_on_fault:
                    raise FaultError(result.reason, self.regs.PC)
                return StopReason.FAULT

        log.info("instruction limit %d reached at x%04X",
                 max_instructions, self.regs.PC)
        return StopReason.LIMIT

    def reset(self):
        """Reset registers and run state. Memory (loaded images) is kept."""
        self.regs.reset(self.config.entry_address)
        self.keyboard.reset()
        self.instructions_executed = 0
        self._terminal = None

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr, addr) -> StepResult
    # `addr` is where the instruction was fetched; regs.PC already
    # holds addr + 1, which is the base for PC-relative offsets.

    def _build_dispatch(self) -> dict:
        """Build opcode -> handler dispatch table (all 16 opcodes)."""
        return {
            OP_BR:   self._op_br,
            OP_ADD:  self._op_add,
            OP_LD:   self._op_ld,
            OP_ST:   self._op_st,
            OP_JSR:  self._op_jsr,
            OP_AND:  self._op_and,
            OP_LDR:  self._op_ldr,
            OP_STR:  self._op_str,
            OP_RTI:  self._op_illegal,
            OP_NOT:  self._op_not,
            OP_LDI:  self._op_ldi,
            OP_STI:  self._op_sti,
            OP_JMP:  self._op_jmp,
            OP_RES:  self._op_illegal,
            OP_LEA:  self._op_lea,
            OP_TRAP: self._op_trap,
        }

    def _pc_relative(self, instr: Instruction) -> int:
        return alu.add16(self.regs.PC, instr.offset9)

    def _base_relative(self, instr: Instruction) -> int:
        return alu.add16(self.regs.read(instr.base), instr.offset6)

    # ── Operate ──

    def _alu_operand(self, instr: Instruction) -> int:
        if instr.imm_flag:
            return instr.imm5
        return self.regs.read(instr.sr2)

    def _op_add(self, instr, addr):
        a = self.regs.read(instr.sr1)
        self.regs.write(instr.dr, alu.add16(a, self._alu_operand(instr)))
        self.regs.update_flags(instr.dr)
        return CONTINUE

    def _op_and(self, instr, addr):
        a = self.regs.read(instr.sr1)
        self.regs.write(instr.dr, alu.and16(a, self._alu_operand(instr)))
        self.regs.update_flags(instr.dr)
        return CONTINUE

    def _op_not(self, instr, addr):
        self.regs.write(instr.dr, alu.not16(self.regs.read(instr.sr1)))
        self.regs.update_flags(instr.dr)
        return CONTINUE

    # ── Load ──

    def _op_ld(self, instr, addr):
        self.regs.write(instr.dr, self.mem.read(self._pc_relative(instr)))
        self.regs.update_flags(instr.dr)
        return CONTINUE

    def _op_ldi(self, instr, addr):
        pointer = self.mem.read(self._pc_relative(instr))
        self.regs.write(instr.dr, self.mem.read(pointer))
        self.regs.update_flags(instr.dr)
        return CONTINUE

    def _op_ldr(self, instr, addr):
        self.regs.write(instr.dr, self.mem.read(self._base_relative(instr)))
        self.regs.update_flags(instr.dr)
        return CONTINUE

    def _op_lea(self, instr, addr):
        self.regs.write(instr.dr, self._pc_relative(instr))
        self.regs.update_flags(instr.dr)
        return CONTINUE

    # ── Store (COND unchanged) ──

    def _op_st(self, instr, addr):
        self.mem.write(self._pc_relative(instr), self.regs.read(instr.dr))
        return CONTINUE

    def _op_sti(self, instr, addr):
        pointer = self.mem.read(self._pc_relative(instr))
        self.mem.write(pointer, self.regs.read(instr.dr))
        return CONTINUE

    def _op_str(self, instr, addr):
        self.mem.write(self._base_relative(instr), self.regs.read(instr.dr))
        return CONTINUE

    # ── Control ──

    def _op_br(self, instr, addr):
        if instr.cond & self.regs.COND:
            self.regs.PC = self._pc_relative(instr)
            return BRANCH_TAKEN
        return CONTINUE

    def _op_jmp(self, instr, addr):
        """JMP BaseR; RET is JMP R7."""
        self.regs.PC = self.regs.read(instr.base)
        return BRANCH_TAKEN

    def _op_jsr(self, instr, addr):
        """JSR PCoffset11 / JSRR BaseR.

        R7 is written before the target is read, so JSRR R7 jumps to
        the word after itself.
        """
        self.regs.write(R7, self.regs.PC)
        if instr.long_flag:
            self.regs.PC = alu.add16(self.regs.PC, instr.offset11)
        else:
            self.regs.PC = self.regs.read(instr.base)
        return BRANCH_TAKEN

    def _op_trap(self, instr, addr):
        self.regs.write(R7, self.regs.PC)
        return self.traps.dispatch(instr.trapvect, addr)

    def _op_illegal(self, instr, addr):
        """RTI and RES have no behaviour on this machine."""
        return StepResult.faulted(
            f"illegal opcode {instr.mnemonic} at x{addr:04X}")
