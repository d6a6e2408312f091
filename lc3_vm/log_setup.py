"""
LC-3 Virtual Machine - Logging Setup

All modules log through `logging.getLogger(__name__)` under the
`lc3_vm` namespace. setup_logging() attaches the handlers once:

  - Console: rich.logging.RichHandler on stderr, so log records never
    mix with the program's own output on stdout
  - File (optional): everything at DEBUG and above, pipe-separated

Verbosity mapping used by the CLI:
  -q      ERROR
  (none)  WARNING
  -v      INFO
  -vv     DEBUG
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "lc3_vm"

FILE_FORMAT = ("%(asctime)s | %(levelname)-7s | %(name)s | "
               "%(funcName)s:%(lineno)d | %(message)s")


def level_for(verbose: int = 0, quiet: bool = False) -> int:
    """Map -v count / -q flag to a logging level."""
    if quiet:
        return logging.ERROR
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Safe to call more than once: existing handlers are replaced.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG if log_file else console_level)
    logger.propagate = False

    # ── Console handler ──
    ch = RichHandler(
        console=Console(stderr=True),
        level=console_level,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    ch.setLevel(console_level)
    logger.addHandler(ch)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(fh)
        logger.debug("log file: %s", log_path)

    return logger
