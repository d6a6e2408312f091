"""
LC-3 Virtual Machine - Character I/O Provider Contract

The core never touches a terminal, file or port directly. The keyboard
device registers and the trap routines call these four methods on
whatever provider the host supplies:

  is_byte_ready()  non-blocking poll, True if read_byte() won't block
  read_byte()      block until one input byte is available, return it
  write_byte(b)    queue one output byte (low 8 bits of b)
  flush()          make every queued byte visible to the outside world

Providers decide what end of input looks like; the core stores
whatever read_byte() returns into a 16-bit register unchanged.
"""

from abc import ABC, abstractmethod


class CharIO(ABC):
    """Blocking byte I/O capability consumed by the LC-3 core."""

    @abstractmethod
    def is_byte_ready(self) -> bool:
        ...

    @abstractmethod
    def read_byte(self) -> int:
        ...

    @abstractmethod
    def write_byte(self, value: int):
        ...

    @abstractmethod
    def flush(self):
        ...

    def write_text(self, text: str):
        """Write a host string (prompts and notices) byte by byte."""
        for byte in text.encode('ascii', errors='replace'):
            self.write_byte(byte)

    # Providers that hold OS resources override these.

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
