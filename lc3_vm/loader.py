"""
LC-3 Virtual Machine - Program Image Loader

Object file format (as written by lc3as and compatible assemblers):

  offset 0   origin    16-bit big-endian load address
  offset 2   word 0    stored at origin
  offset 4   word 1    stored at origin + 1
  ...

Words are big-endian on disk. They are unpacked as little-endian and
byte swapped, which gives the same result on any host. A trailing odd
byte is ignored. At most 65536 - origin words fit; the rest of an
oversized image is dropped.

Several images can be loaded one after another (e.g. an OS image and a
user program); later images overwrite earlier ones where they overlap.
"""

import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .cpu.alu import swap16
from .errors import ImageLoadError

log = logging.getLogger(__name__)


@dataclass
class ProgramImage:
    """An origin plus the words to place there."""
    origin: int
    words: List[int] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def end(self) -> int:
        """Address one past the last word (may exceed xFFFF)."""
        return self.origin + len(self.words)

    def to_bytes(self) -> bytes:
        """Serialize back to the on-disk object format."""
        return struct.pack(f'>{len(self.words) + 1}H', self.origin,
                           *(w & 0xFFFF for w in self.words))


def parse_image(data: bytes, source: str = '<bytes>') -> ProgramImage:
    """Parse raw object-file bytes into a ProgramImage."""
    if len(data) < 2:
        raise ImageLoadError(source, "image too short to hold an origin word")
    count = len(data) // 2
    raw = struct.unpack(f'<{count}H', data[:count * 2])
    origin = swap16(raw[0])
    words = [swap16(w) for w in raw[1:]]
    if len(data) % 2:
        log.warning("%s: ignoring trailing odd byte", source)
    return ProgramImage(origin, words, source)


def read_image(path: Union[str, Path]) -> ProgramImage:
    """Read and parse an object file from disk."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageLoadError(path, e.strerror or str(e)) from e
    return parse_image(data, str(path))


def load_image(memory, image: ProgramImage) -> int:
    """Copy an image into memory. Returns the number of words stored."""
    stored = memory.load_words(image.origin, image.words)
    log.info("loaded %s: %d words at x%04X", image.source or 'image',
             stored, image.origin)
    return stored
