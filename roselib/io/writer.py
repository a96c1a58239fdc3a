"""Little-endian writer mirroring BinaryCursor, used to re-encode files."""
import struct
from typing import Sequence

import numpy as np

_PREFIX_FORMATS = {
    'u8': '<B',
    'u16': '<H',
    'u32': '<I',
}


class BinaryWriter:
    """Accumulates little-endian values into a byte buffer."""

    def __init__(self):
        self._buffer = bytearray()

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def write(self, data: bytes) -> None:
        self._buffer.extend(data)

    def write_u8(self, n: int) -> None:
        self.write(struct.pack('<B', n))

    def write_u16(self, n: int) -> None:
        self.write(struct.pack('<H', n))

    def write_u32(self, n: int) -> None:
        self.write(struct.pack('<I', n))

    def write_i16(self, n: int) -> None:
        self.write(struct.pack('<h', n))

    def write_i32(self, n: int) -> None:
        self.write(struct.pack('<i', n))

    def write_f32(self, n: float) -> None:
        self.write(struct.pack('<f', n))

    def write_bool(self, b: bool) -> None:
        self.write_u8(1 if b else 0)

    def write_cstring(self, s: str) -> None:
        self.write(s.encode('utf-8') + b'\0')

    def write_fixed_string(self, s: str, size: int) -> None:
        encoded = s.encode('utf-8')[:size]
        self.write(encoded.ljust(size, b'\0'))

    def write_length_prefixed_string(self, s: str, prefix: str = 'u16') -> None:
        encoded = s.encode('utf-8')
        self.write(struct.pack(_PREFIX_FORMATS[prefix], len(encoded)))
        self.write(encoded)

    def write_floats(self, values: Sequence[float]) -> None:
        self.write(struct.pack(f'<{len(values)}f', *values))

    def write_array(self, array: np.ndarray, dtype) -> None:
        """Write a numpy array in little-endian ``dtype`` order."""
        self.write(np.ascontiguousarray(array, dtype=np.dtype(dtype).newbyteorder('<')).tobytes())
