"""
LC-3 Virtual Machine - Serial Port Character I/O

Routes the VM's keyboard and console traps over a UART using pyserial,
so an LC-3 program can talk to a real terminal, a USB-serial adapter or
a second machine. The port is opened without a read timeout: read_byte()
blocks exactly like a keyboard read.
"""

import logging
from typing import List, Optional

import serial
import serial.tools.list_ports

from .base import CharIO
from ..errors import LC3Error

log = logging.getLogger(__name__)

DEFAULT_BAUD = 9600


class SerialIO(CharIO):
    """pyserial-backed provider.

    Usage:
        with SerialIO('/dev/ttyUSB0', 115200) as io:
            emu = LC3Emulator(io)
            emu.run()
    """

    def __init__(self, port: str, baud: int = DEFAULT_BAUD,
                 ser: Optional[serial.Serial] = None):
        self.port = port
        self.baud = baud
        self.ser: Optional[serial.Serial] = ser

    @staticmethod
    def scan_ports() -> List[str]:
        """List serial device names present on this machine."""
        return [p.device for p in serial.tools.list_ports.comports()]

    def open(self):
        if self.ser is not None and self.ser.is_open:
            return
        try:
            self.ser = serial.Serial(
                port=self.port,
                baudrate=self.baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=None,         # blocking reads
            )
        except serial.SerialException as e:
            raise LC3Error(f"cannot open serial port {self.port}: {e}") from e
        self.ser.reset_input_buffer()
        log.info("serial port %s open at %d baud", self.port, self.baud)

    def close(self):
        if self.ser and self.ser.is_open:
            self.ser.flush()
            self.ser.close()
            log.info("serial port %s closed", self.port)

    def __enter__(self):
        self.open()
        return self

    @property
    def is_connected(self) -> bool:
        return self.ser is not None and self.ser.is_open

    # --- CharIO ---

    def is_byte_ready(self) -> bool:
        return self.ser.in_waiting > 0

    def read_byte(self) -> int:
        return self.ser.read(1)[0]

    def write_byte(self, value: int):
        self.ser.write(bytes((value & 0xFF,)))

    def flush(self):
        self.ser.flush()
