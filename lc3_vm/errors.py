"""
LC-3 Virtual Machine - Exception hierarchy

Faults raised by the running program (illegal opcode, unknown trap
vector) are normally reported as a FAULTED step outcome, not as an
exception. These classes cover host-level failures and the optional
raise-on-fault mode of LC3Emulator.run().
"""


class LC3Error(Exception):
    """Base class for all lc3_vm errors."""


class ImageLoadError(LC3Error):
    """A program image could not be read or is malformed."""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class FaultError(LC3Error):
    """Execution stopped on an illegal instruction or unknown trap vector."""

    def __init__(self, reason: str, pc: int):
        self.reason = reason
        self.pc = pc
        super().__init__(reason)
