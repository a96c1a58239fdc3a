"""Sequential little-endian reader for ROSE binary data."""
import struct
import logging
from typing import Tuple, Optional

import numpy as np
from construct import Struct, StreamError

from ..errors import TruncatedInputError

logger = logging.getLogger(__name__)

# Legacy client strings were written as EUC-KR
LEGACY_ENCODING = 'euc-kr'

_PREFIX_FORMATS = {
    'u8': '<B',
    'u16': '<H',
    'u32': '<I',
}


def decode_text(raw: bytes) -> str:
    """Decode raw string bytes, falling back to the legacy encoding."""
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError:
        return raw.decode(LEGACY_ENCODING, 'replace')


class BinaryCursor:
    """Reads typed values from an in-memory byte buffer.

    The offset only moves forward, except through ``seek`` which exists for
    formats that address their blocks through an offset table.
    """

    def __init__(self, data: bytes, name: Optional[str] = None):
        self.data = bytes(data)
        self.name = name
        self.offset = 0

    def __len__(self) -> int:
        return len(self.data)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def at_end(self) -> bool:
        return self.offset >= len(self.data)

    def read(self, size: int) -> bytes:
        """Read ``size`` raw bytes."""
        if size < 0 or size > self.remaining:
            raise TruncatedInputError(self.offset, size, self.remaining)
        chunk = self.data[self.offset:self.offset + size]
        self.offset += size
        return chunk

    def skip(self, size: int) -> None:
        self.read(size)

    def seek(self, offset: int) -> None:
        """Jump to an absolute offset taken from a block offset table."""
        if offset < 0 or offset > len(self.data):
            raise TruncatedInputError(offset, 0, len(self.data))
        self.offset = offset

    def _unpack(self, fmt: str):
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))

    # Primitives
    def read_u8(self) -> int:
        return self._unpack('<B')[0]

    def read_u16(self) -> int:
        return self._unpack('<H')[0]

    def read_u32(self) -> int:
        return self._unpack('<I')[0]

    def read_i8(self) -> int:
        return self._unpack('<b')[0]

    def read_i16(self) -> int:
        return self._unpack('<h')[0]

    def read_i32(self) -> int:
        return self._unpack('<i')[0]

    def read_f32(self) -> float:
        return self._unpack('<f')[0]

    def read_bool(self) -> bool:
        return self.read_u8() != 0

    # Strings
    def read_fixed_string(self, size: int) -> str:
        """Read a fixed-size string buffer, trimming at the first null."""
        return decode_text(self.read(size).split(b'\0', 1)[0])

    def read_cstring(self) -> str:
        """Read a null-terminated string."""
        end = self.data.find(b'\0', self.offset)
        if end == -1:
            raise TruncatedInputError(self.offset, self.remaining + 1, self.remaining)
        raw = self.read(end - self.offset)
        self.offset += 1
        return decode_text(raw)

    def read_length_prefixed_string(self, prefix: str = 'u16') -> str:
        """Read a string preceded by its byte length.

        Args:
            prefix: Width of the length field ('u8', 'u16' or 'u32')
        """
        length = self._unpack(_PREFIX_FORMATS[prefix])[0]
        raw = self.read(length)
        # Some writers count the terminating null in the length
        if raw.endswith(b'\0'):
            raw = raw[:-1]
        return decode_text(raw)

    # Compound values
    def read_vector2(self) -> Tuple[float, float]:
        return self._unpack('<2f')

    def read_vector3(self) -> Tuple[float, float, float]:
        return self._unpack('<3f')

    def read_vector4(self) -> Tuple[float, float, float, float]:
        return self._unpack('<4f')

    def read_quaternion_wxyz(self) -> Tuple[float, float, float, float]:
        """Read a quaternion stored as w, x, y, z and return it as (x, y, z, w)."""
        w, x, y, z = self._unpack('<4f')
        return (x, y, z, w)

    def read_quaternion_xyzw(self) -> Tuple[float, float, float, float]:
        return self._unpack('<4f')

    def read_color4(self) -> Tuple[float, float, float, float]:
        return self._unpack('<4f')

    def read_array(self, dtype, count: int, components: int = 1) -> np.ndarray:
        """Read ``count`` records of ``components`` values into a numpy array."""
        dtype = np.dtype(dtype).newbyteorder('<')
        total = count * components
        raw = self.read(total * dtype.itemsize)
        array = np.frombuffer(raw, dtype=dtype, count=total).astype(dtype.newbyteorder('='))
        if components > 1:
            array = array.reshape(count, components)
        return array

    def read_struct(self, record: Struct):
        """Parse a fixed-size construct record at the current offset."""
        size = record.sizeof()
        raw = self.read(size)
        try:
            return record.parse(raw)
        except StreamError as e:
            raise TruncatedInputError(self.offset - size, size, len(raw)) from e
