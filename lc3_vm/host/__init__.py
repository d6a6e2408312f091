"""Host-side character I/O providers for the LC-3 core."""

from .base import CharIO
from .buffered import BufferedIO
from .console import ConsoleIO

__all__ = ['CharIO', 'BufferedIO', 'ConsoleIO']
