"""
LC-3 Virtual Machine - Terminal Character I/O

Connects the VM to the process's stdin/stdout.

POSIX: while the provider is open, a TTY stdin is switched to cbreak
mode: keys arrive one at a time without waiting for Enter and are not
echoed (the IN trap echoes on its own). ISIG stays on, so Ctrl-C still
raises KeyboardInterrupt in the host; close() / __exit__ put the saved
terminal mode back. Readiness is a zero-timeout select().

Windows: a console stdin is read through msvcrt, which already delivers
single unechoed keys, so no mode change is needed. kbhit() is the
readiness poll; Enter arrives as LF, extended keys (arrows, F-keys) are
skipped and Ctrl-C raises KeyboardInterrupt.

Non-TTY stdin (a pipe or file) is read as-is with no mode change,
which makes `echo y | lc3vm prog.obj` work. select() cannot poll pipes
on Windows, so there a redirected stdin always reports ready.
"""

import logging
import os
import select
import sys
from typing import BinaryIO, Optional

from .base import CharIO
from ..config import EOF_VALUE

if sys.platform == "win32":
    import msvcrt
    termios = None
    tty = None
else:
    import termios
    import tty
    msvcrt = None

log = logging.getLogger(__name__)

# msvcrt.getch() prefixes for extended keys; the next getch() is a scan code
_EXTENDED_PREFIX = (b'\x00', b'\xe0')


class ConsoleIO(CharIO):
    """stdin/stdout provider with raw-ish terminal handling."""

    def __init__(self, stdin_fd: Optional[int] = None,
                 stdout: Optional[BinaryIO] = None,
                 eof_value: int = EOF_VALUE):
        self._fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self._out = sys.stdout.buffer if stdout is None else stdout
        self.eof_value = eof_value
        self._old_settings = None
        self._eof = False
        # Windows console keyboard: read through msvcrt instead of the fd
        self._win_console = msvcrt is not None and os.isatty(self._fd)

    # --- Terminal mode ---

    def open(self):
        """Enter cbreak mode if stdin is a POSIX terminal."""
        if termios is None or not os.isatty(self._fd):
            log.debug("no POSIX terminal on stdin, leaving mode unchanged")
            return
        self._old_settings = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        termios.tcflush(self._fd, termios.TCIFLUSH)
        log.debug("terminal switched to cbreak mode")

    def close(self):
        """Restore the terminal mode saved by open()."""
        self.flush()
        if self._old_settings is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)
            self._old_settings = None
            log.debug("terminal mode restored")

    def __enter__(self):
        self.open()
        return self

    # --- CharIO ---

    def is_byte_ready(self) -> bool:
        if self._eof:
            return False
        if self._win_console:
            return bool(msvcrt.kbhit())
        if msvcrt is not None:
            return True
        r, _, _ = select.select([self._fd], [], [], 0)
        return len(r) > 0

    def read_byte(self) -> int:
        if self._eof:
            return self.eof_value
        self._out.flush()
        if self._win_console:
            return self._read_key()
        data = os.read(self._fd, 1)
        if not data:
            self._eof = True
            return self.eof_value
        return data[0]

    def _read_key(self) -> int:
        """One key from the Windows console."""
        while True:
            ch = msvcrt.getch()
            if ch in _EXTENDED_PREFIX:
                msvcrt.getch()
                continue
            if ch == b'\x03':
                raise KeyboardInterrupt
            if ch == b'\r':
                return 0x0A
            return ch[0]

    def write_byte(self, value: int):
        self._out.write(bytes((value & 0xFF,)))

    def flush(self):
        self._out.flush()
