"""Small binary I/O helpers for chunked container formats (GLB)."""

import struct
from typing import BinaryIO
from io import BytesIO

# GLB is little-endian throughout
UINT32 = struct.Struct("<I")


class IoBuffer:
    """Little-endian binary reader/writer over a stream."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    @classmethod
    def from_bytes(cls, data: bytes) -> 'IoBuffer':
        """Create from bytes."""
        return cls(BytesIO(data))

    @classmethod
    def for_writing(cls) -> 'IoBuffer':
        """Create an empty in-memory buffer for writing."""
        return cls(BytesIO())

    def has_bytes(self, num_bytes: int) -> bool:
        """Check if there are at least num_bytes remaining."""
        current = self.stream.tell()
        self.stream.seek(0, 2)  # Seek to end
        end = self.stream.tell()
        self.stream.seek(current)  # Seek back
        return (end - current) >= num_bytes

    def read_bytes(self, count: int) -> bytes:
        """Read exactly count raw bytes."""
        data = self.stream.read(count)
        if len(data) != count:
            raise EOFError(f"Expected {count} bytes, got {len(data)}")
        return data

    def read_uint32(self) -> int:
        """Read unsigned 32-bit integer."""
        return UINT32.unpack(self.read_bytes(4))[0]

    def read_tag(self, length: int = 4) -> str:
        """Read a fixed-length ASCII tag, trimming trailing nulls and spaces."""
        data = self.read_bytes(length)
        return data.decode('ascii', errors='replace').rstrip('\0 ')

    def write_bytes(self, data: bytes):
        """Write raw bytes."""
        self.stream.write(data)

    def write_uint32(self, value: int):
        """Write unsigned 32-bit integer."""
        self.stream.write(UINT32.pack(value))

    def write_tag(self, tag: str, length: int = 4):
        """Write a fixed-length ASCII tag, null padded."""
        self.stream.write(tag.encode('ascii')[:length].ljust(length, b'\x00'))

    def getvalue(self) -> bytes:
        """Return everything written to an in-memory buffer."""
        return self.stream.getvalue()


def pad_to(data: bytes, alignment: int = 4, fill: bytes = b'\x00') -> bytes:
    """Pad data with fill bytes up to the next multiple of alignment."""
    remainder = len(data) % alignment
    if remainder == 0:
        return data
    return data + fill * (alignment - remainder)
