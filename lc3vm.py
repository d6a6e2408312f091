#!/usr/bin/env python3
"""
lc3vm - LC-3 Virtual Machine CLI

Usage:
    lc3vm IMAGE [IMAGE ...] [--entry x3000] [--max-instructions N]
                            [--serial PORT [--baud 9600]]
                            [-v | -vv | -q] [--log-file run.log]

Images are loaded in the order given (later images overwrite earlier
ones where they overlap), then execution starts at the entry address.
Program I/O uses the terminal unless --serial is given.

Exit status:
    0    program executed HALT
    1    illegal instruction / unknown trap, or an image failed to load
    2    bad command line
    3    --max-instructions reached
    130  interrupted with Ctrl-C

Examples:
    lc3vm 2048.obj
    lc3vm os.obj rogue.obj --entry 0x0200
    lc3vm hello.obj --serial /dev/ttyUSB0 --baud 115200
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from lc3_vm import __version__
from lc3_vm.config import VMConfig, PC_START, parse_word
from lc3_vm.emu import LC3Emulator
from lc3_vm.errors import LC3Error, ImageLoadError
from lc3_vm.host.base import CharIO
from lc3_vm.host.console import ConsoleIO
from lc3_vm.loader import ProgramImage, read_image
from lc3_vm.log_setup import setup_logging, level_for
from lc3_vm.outcome import StopReason

log = logging.getLogger("lc3_vm.cli")

EXIT_HALT = 0
EXIT_FAULT = 1
EXIT_LIMIT = 3
EXIT_INTERRUPT = 130

EXIT_CODES = {
    StopReason.HALT: EXIT_HALT,
    StopReason.FAULT: EXIT_FAULT,
    StopReason.LIMIT: EXIT_LIMIT,
}


def word_arg(value: str) -> int:
    """argparse type for addresses (0x3000, x3000, $3000, 12288)."""
    try:
        return parse_word(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lc3vm",
        description="LC-3 virtual machine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("images", nargs="+", metavar="IMAGE",
                        help="LC-3 object file(s) to load")
    parser.add_argument("--entry", type=word_arg, default=PC_START,
                        help="Start address (default: x3000)")
    parser.add_argument("--max-instructions", type=int, default=None,
                        help="Stop after N instructions (exit status 3)")
    parser.add_argument("--serial", metavar="PORT", default=None,
                        help="Use a serial port for program I/O instead of the terminal")
    parser.add_argument("--baud", type=int, default=9600,
                        help="Serial baud rate (default: 9600)")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase log verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Log errors only")
    parser.add_argument("--log-file", default=None,
                        help="Also write a DEBUG log to this file")
    parser.add_argument("--version", action="version",
                        version=f"lc3vm {__version__}")
    return parser


def read_images(paths: Sequence[str]) -> List[ProgramImage]:
    """Read every object file up front so I/O setup only happens once
    all of them are known to be good."""
    return [read_image(path) for path in paths]


def run_images(images: Sequence[ProgramImage], io: CharIO,
               config: VMConfig) -> int:
    """Load the images, run the machine, return the exit status."""
    emu = LC3Emulator(io, config)
    for image in images:
        emu.load_image(image)

    reason = emu.run()
    io.flush()
    if reason is StopReason.FAULT:
        log.error("stopped: %s", emu.fault_reason)
    elif reason is StopReason.LIMIT:
        log.warning("stopped after %d instructions at x%04X",
                    emu.instructions_executed, emu.regs.PC)
    return EXIT_CODES[reason]


def make_io(args, config: VMConfig) -> CharIO:
    if args.serial:
        from lc3_vm.host.serial_io import SerialIO
        return SerialIO(args.serial, args.baud)
    return ConsoleIO(eof_value=config.eof_value)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level_for(args.verbose, args.quiet), args.log_file)

    try:
        config = VMConfig(entry_address=args.entry,
                          max_instructions=args.max_instructions)
    except ValueError as e:
        parser.error(str(e))

    try:
        images = read_images(args.images)
    except ImageLoadError as e:
        log.error("Failed to load image: %s", e)
        return EXIT_FAULT

    try:
        with make_io(args, config) as io:
            return run_images(images, io, config)
    except KeyboardInterrupt:
        sys.stdout.write("\n")
        sys.stdout.flush()
        log.warning("interrupted")
        return EXIT_INTERRUPT
    except LC3Error as e:
        log.error("%s", e)
        return EXIT_FAULT


if __name__ == "__main__":
    sys.exit(main())
