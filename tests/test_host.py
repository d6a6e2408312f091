"""
Character I/O providers: in-memory buffer, terminal and serial port.
"""

import io as _io
import os

import pytest
import serial

from lc3_vm.emu import LC3Emulator
from lc3_vm.errors import LC3Error
from lc3_vm.host.buffered import BufferedIO
from lc3_vm.host import console as console_mod
from lc3_vm.host.console import ConsoleIO
from lc3_vm.host.serial_io import SerialIO
from lc3_vm.outcome import StopReason


class TestBufferedIO:
    def test_read_in_order_then_eof(self):
        io = BufferedIO(b"ab")
        assert io.is_byte_ready()
        assert io.read_byte() == ord("a")
        assert io.read_byte() == ord("b")
        assert not io.is_byte_ready()
        assert io.read_byte() == 0xFFFF

    def test_custom_eof_value(self):
        io = BufferedIO(eof_value=0)
        assert io.read_byte() == 0

    def test_inject_text(self):
        io = BufferedIO()
        io.inject("hi")
        assert io.pending_input == 2

    def test_write_and_reset(self):
        io = BufferedIO()
        io.write_byte(0x141)
        io.write_text("BC")
        assert io.output == b"ABC"
        io.reset()
        assert io.output == b""
        assert io.flush_count == 0

    def test_context_manager(self):
        with BufferedIO(b"x") as io:
            assert io.read_byte() == ord("x")


class TestConsoleIO:
    @pytest.fixture
    def pipe_console(self):
        r, w = os.pipe()
        out = _io.BytesIO()
        yield ConsoleIO(stdin_fd=r, stdout=out), w, out
        os.close(r)

    def test_reads_bytes_then_eof(self, pipe_console):
        console, w, out = pipe_console
        os.write(w, b"ok")
        os.close(w)
        with console:
            assert console.is_byte_ready()
            assert console.read_byte() == ord("o")
            assert console.read_byte() == ord("k")
            assert console.read_byte() == 0xFFFF
            assert console.read_byte() == 0xFFFF
            assert not console.is_byte_ready()

    def test_not_ready_without_data(self, pipe_console):
        console, w, out = pipe_console
        assert not console.is_byte_ready()
        os.close(w)

    def test_write(self, pipe_console):
        console, w, out = pipe_console
        os.close(w)
        console.write_byte(0x48)
        console.write_text("i")
        console.flush()
        assert out.getvalue() == b"Hi"

    def test_runs_program(self, pipe_console):
        console, w, out = pipe_console
        os.write(w, b"z")
        os.close(w)
        emu = LC3Emulator(console)
        emu.load_words(0x3000, [0xF020, 0xF021, 0xF025])   # GETC; OUT; HALT
        with console:
            assert emu.run() is StopReason.HALT
        assert out.getvalue() == b"zHALT\n"


class FakeMsvcrt:
    """Stands in for the msvcrt module: a queue of console key bytes."""

    def __init__(self, keys=b""):
        self.keys = list(keys)

    def kbhit(self):
        return bool(self.keys)

    def getch(self):
        return bytes((self.keys.pop(0),))


class TestConsoleIOWindows:
    @pytest.fixture
    def win_console(self, monkeypatch):
        """A ConsoleIO that believes it sits on a Windows console."""
        r, w = os.pipe()
        real_isatty = os.isatty
        monkeypatch.setattr(console_mod.os, "isatty",
                            lambda fd: fd == r or real_isatty(fd))

        def build(keys):
            fake = FakeMsvcrt(keys)
            monkeypatch.setattr(console_mod, "msvcrt", fake)
            return ConsoleIO(stdin_fd=r, stdout=_io.BytesIO()), fake

        yield build
        os.close(r)
        os.close(w)

    def test_poll_uses_kbhit(self, win_console):
        con, fake = win_console(b"")
        assert not con.is_byte_ready()
        fake.keys.append(ord("a"))
        assert con.is_byte_ready()
        assert con.read_byte() == ord("a")

    def test_enter_becomes_newline(self, win_console):
        con, fake = win_console(b"\r")
        assert con.read_byte() == 0x0A

    def test_extended_keys_skipped(self, win_console):
        con, fake = win_console(b"\xe0H\x00;q")
        assert con.read_byte() == ord("q")
        assert not fake.keys

    def test_ctrl_c_interrupts(self, win_console):
        con, fake = win_console(b"\x03")
        with pytest.raises(KeyboardInterrupt):
            con.read_byte()

    def test_open_leaves_console_alone(self, win_console, monkeypatch):
        monkeypatch.setattr(console_mod, "termios", None)
        con, fake = win_console(b"")
        with con:
            assert con._old_settings is None

    def test_redirected_stdin_always_ready(self, monkeypatch):
        monkeypatch.setattr(console_mod, "msvcrt", FakeMsvcrt())
        r, w = os.pipe()
        os.close(w)
        con = ConsoleIO(stdin_fd=r, stdout=_io.BytesIO())
        assert con.is_byte_ready()
        assert con.read_byte() == 0xFFFF
        assert not con.is_byte_ready()
        os.close(r)


class TestSerialIO:
    @pytest.fixture
    def loop(self):
        ser = serial.serial_for_url("loop://", timeout=1)
        yield SerialIO("loop://", ser=ser)
        ser.close()

    def test_loopback(self, loop):
        with loop as io:
            assert io.is_connected
            assert not io.is_byte_ready()
            io.write_byte(0x41)
            io.flush()
            assert io.is_byte_ready()
            assert io.read_byte() == 0x41

    def test_close(self, loop):
        loop.close()
        assert not loop.is_connected

    def test_runs_program(self, loop):
        loop.ser.write(b"x")
        emu = LC3Emulator(loop)
        emu.load_words(0x3000, [0xF020, 0xF021, 0xF025])   # GETC; OUT; HALT
        assert emu.run() is StopReason.HALT
        assert loop.ser.read(loop.ser.in_waiting) == b"xHALT\n"

    def test_open_failure(self):
        io = SerialIO("/dev/lc3vm-no-such-port")
        with pytest.raises(LC3Error):
            io.open()
        assert not io.is_connected

    def test_scan_ports(self):
        assert isinstance(SerialIO.scan_ports(), list)
