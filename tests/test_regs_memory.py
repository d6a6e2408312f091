"""
Register file, COND flags, memory storage and the keyboard registers.
"""

from lc3_vm.cpu.regs import Registers, FL_NEG, FL_ZRO, FL_POS
from lc3_vm.host.buffered import BufferedIO
from lc3_vm.mem.memory import Memory
from lc3_vm.periph.keyboard import KeyboardPeripheral, KBSR, KBDR, KB_READY


class TestRegisters:
    def test_power_on_state(self):
        r = Registers()
        assert r.R == [0] * 8
        assert r.PC == 0
        assert r.COND == FL_ZRO

    def test_update_flags(self):
        r = Registers()
        r.write(3, 0)
        r.update_flags(3)
        assert r.COND == FL_ZRO and r.zero
        r.write(3, 0x8000)
        r.update_flags(3)
        assert r.COND == FL_NEG and r.negative
        r.write(3, 0x7FFF)
        r.update_flags(3)
        assert r.COND == FL_POS and r.positive

    def test_write_masks_to_16_bits(self):
        r = Registers()
        r.write(1, 0x1_2345)
        assert r.read(1) == 0x2345

    def test_reset(self):
        r = Registers()
        r.write(0, 5)
        r.COND = FL_NEG
        r.reset(0x3000)
        assert r.R == [0] * 8
        assert r.PC == 0x3000
        assert r.COND == FL_ZRO

    def test_display(self):
        r = Registers()
        r.PC = 0x3001
        r.write(7, 0xBEEF)
        text = r.display()
        assert "PC=3001" in text
        assert "R7=BEEF" in text
        assert "COND=[.Z.]" in text


class TestMemory:
    def test_read_write(self):
        mem = Memory()
        mem.write(0x3000, 0x1234)
        assert mem.read(0x3000) == 0x1234
        assert len(mem) == 0x10000

    def test_address_wraps(self):
        mem = Memory()
        mem.write(0x1_0005, 0xAAAA)
        assert mem.read(0x0005) == 0xAAAA

    def test_value_masked(self):
        mem = Memory()
        mem.write(0x10, -1)
        assert mem.read(0x10) == 0xFFFF

    def test_load_words(self):
        mem = Memory()
        assert mem.load_words(0x3000, [1, 2, 3]) == 3
        assert [mem.peek(a) for a in range(0x3000, 0x3003)] == [1, 2, 3]

    def test_load_words_truncates_at_top(self):
        mem = Memory()
        stored = mem.load_words(0xFFFE, [0x11, 0x22, 0x33, 0x44])
        assert stored == 2
        assert mem.peek(0xFFFE) == 0x11
        assert mem.peek(0xFFFF) == 0x22
        assert mem.peek(0x0000) == 0   # no wrap into low memory

    def test_clear(self):
        mem = Memory()
        mem.write(0x4000, 9)
        mem.clear()
        assert mem.peek(0x4000) == 0

    def test_hexdump(self):
        mem = Memory()
        mem.load_words(0x3000, [0x1020, 0xF025])
        assert mem.hexdump(0x3000, 8).startswith("x3000  1020 F025 0000")


class TestKeyboard:
    def _wire(self, data=b""):
        mem = Memory()
        io = BufferedIO(data)
        kb = KeyboardPeripheral(io)
        kb.register(mem)
        return mem, io, kb

    def test_kbsr_ready(self):
        """Reading KBSR with a pending byte sets bit 15 and loads KBDR."""
        mem, io, kb = self._wire(b"a")
        assert mem.read(KBSR) == KB_READY
        assert mem.read(KBDR) == ord("a")
        assert io.pending_input == 0

    def test_kbsr_not_ready(self):
        mem, io, kb = self._wire()
        mem.poke(KBSR, KB_READY)          # stale status
        assert mem.read(KBSR) == 0

    def test_kbdr_keeps_last_byte(self):
        mem, io, kb = self._wire(b"x")
        mem.read(KBSR)
        assert mem.read(KBSR) == 0
        assert mem.read(KBDR) == ord("x")

    def test_peek_has_no_side_effect(self):
        mem, io, kb = self._wire(b"z")
        assert mem.peek(KBSR) == 0
        assert io.pending_input == 1
        assert mem.is_device_register(KBSR)
        assert not mem.is_device_register(KBDR)

    def test_one_byte_per_poll(self):
        mem, io, kb = self._wire(b"ab")
        mem.read(KBSR)
        assert kb.data == ord("a")
        mem.read(KBSR)
        assert kb.data == ord("b")
        assert kb.status == KB_READY

    def test_reset(self):
        mem, io, kb = self._wire(b"q")
        mem.read(KBSR)
        kb.reset()
        assert kb.status == 0 and kb.data == 0
