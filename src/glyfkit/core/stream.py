"""Bounded binary read views.

Every glyph record is decoded from its own ByteReader, so decoding one
glyph never moves a cursor that another decode depends on. Each read names
the field it expects so that truncated or inconsistent data surfaces as a
DecodeError describing what was missing.
"""

import struct
import sys
from array import array
from typing import Any

from fontTools.misc import sstruct

from glyfkit.exceptions import DecodeError


class ByteReader:
    """A read cursor over a byte range of a shared buffer.

    Example:
        reader = ByteReader(data, offset=128, end=200)
        (count,) = reader.unpack(">h", "numberOfContours")
    """

    def __init__(self, data: bytes, offset: int = 0, end: int | None = None) -> None:
        """Initialize the reader.

        Args:
            data: Underlying buffer (not copied)
            offset: Position of the first byte of the view
            end: Position one past the last byte of the view (buffer end if None)

        Raises:
            DecodeError: If the range does not lie within the buffer
        """
        limit = len(data) if end is None else end
        if offset < 0 or offset > limit or limit > len(data):
            raise DecodeError(
                "byte range",
                f"range {offset}..{limit} outside buffer of {len(data)} bytes",
            )
        self._data = data
        self._start = offset
        self._end = limit
        self.pos = offset

    @property
    def remaining(self) -> int:
        """Number of unread bytes in the view."""
        return self._end - self.pos

    @property
    def consumed(self) -> int:
        """Number of bytes read since the start of the view."""
        return self.pos - self._start

    def read_bytes(self, count: int, field: str) -> bytes:
        """Read exactly `count` raw bytes."""
        if count < 0:
            raise DecodeError(field, f"negative length {count}")
        if count > self.remaining:
            raise DecodeError(
                field, f"needs {count} bytes, only {self.remaining} remain"
            )
        chunk = self._data[self.pos : self.pos + count]
        self.pos += count
        return bytes(chunk)

    def unpack(self, fmt: str, field: str) -> tuple[Any, ...]:
        """Read a struct-formatted group of values."""
        return struct.unpack(fmt, self.read_bytes(struct.calcsize(fmt), field))

    def read_struct(self, fmt: str, field: str) -> dict[str, Any]:
        """Read a named record described by an sstruct format."""
        return sstruct.unpack(fmt, self.read_bytes(sstruct.calcsize(fmt), field))

    def read_array(self, typecode: str, count: int, field: str) -> list[int]:
        """Read `count` big-endian integers of the given array typecode."""
        values = array(typecode)
        values.frombytes(self.read_bytes(count * values.itemsize, field))
        if sys.byteorder != "big":
            values.byteswap()
        return values.tolist()

    def read_remainder(self) -> bytes:
        """Read everything left in the view."""
        return self.read_bytes(self.remaining, "remainder")
