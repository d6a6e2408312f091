"""
LC-3 Virtual Machine - In-Memory Character I/O

Input is a queue of bytes pushed in ahead of time (or while the program
runs); output accumulates in a bytearray for inspection. Used by the
test suite and by hosts that drive the VM programmatically.

End of input: read_byte() returns `eof_value` (default xFFFF, the same
value C's getchar() EOF leaves in a 16-bit register) instead of
blocking forever.
"""

from collections import deque
from typing import Iterable, Union

from .base import CharIO
from ..config import EOF_VALUE


class BufferedIO(CharIO):
    """Queue-backed provider.

    Example:
        io = BufferedIO(b"y")
        emu = LC3Emulator(io)
        ...
        assert io.output == b"HALT\\n"
    """

    def __init__(self, input_data: Union[bytes, str, Iterable[int]] = b"",
                 eof_value: int = EOF_VALUE):
        # Output buffer - every byte the program writes lands here
        self.tx_buffer: bytearray = bytearray()

        # Input queue - bytes the program will read
        self._rx_queue: deque = deque()
        self.eof_value = eof_value
        self.flush_count = 0
        self.inject(input_data)

    def inject(self, data: Union[bytes, str, Iterable[int]]):
        """Append bytes to the input queue."""
        if isinstance(data, str):
            data = data.encode('ascii')
        for byte in data:
            self._rx_queue.append(byte & 0xFF)

    # --- CharIO ---

    def is_byte_ready(self) -> bool:
        return bool(self._rx_queue)

    def read_byte(self) -> int:
        if not self._rx_queue:
            return self.eof_value
        return self._rx_queue.popleft()

    def write_byte(self, value: int):
        self.tx_buffer.append(value & 0xFF)

    def flush(self):
        self.flush_count += 1

    # --- Inspection ---

    @property
    def output(self) -> bytes:
        """All bytes written since creation or the last reset()."""
        return bytes(self.tx_buffer)

    @property
    def pending_input(self) -> int:
        return len(self._rx_queue)

    def reset(self):
        self.tx_buffer.clear()
        self._rx_queue.clear()
        self.flush_count = 0
