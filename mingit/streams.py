"""Stream wrappers used to read object bodies: zlib decompression and byte budgets."""
import io
import zlib

from .errors import ObjectIOError, TrailingDataError, TruncatedObjectError

CHUNK_SIZE = 64 * 1024


def read_full(source, size: int) -> bytes:
    """Read from ``source`` until ``size`` bytes arrive or it returns nothing."""
    chunks = []
    got = 0
    while got < size:
        chunk = source.read(size - got)
        if not chunk:
            break
        chunks.append(chunk)
        got += len(chunk)
    return b''.join(chunks)


class ZlibReader(io.RawIOBase):
    """Raw stream that inflates a zlib-compressed file object on demand.

    Owns ``fileobj``: closing the reader closes the file. Bytes left in the
    file after the end of the zlib stream are an error.
    """

    def __init__(self, fileobj):
        self._fileobj = fileobj
        self._inflater = zlib.decompressobj()
        self._pending = b''

    def readable(self):
        return True

    def readinto(self, b):
        while not self._pending:
            if self._inflater.eof:
                self._check_stream_end()
                return 0
            chunk = self._read_file(CHUNK_SIZE)
            if not chunk:
                raise ObjectIOError('compressed stream ended unexpectedly')
            try:
                self._pending = self._inflater.decompress(chunk)
            except zlib.error as exc:
                raise ObjectIOError(f'invalid zlib stream: {exc}') from exc
        n = min(len(b), len(self._pending))
        b[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def _read_file(self, size):
        try:
            return self._fileobj.read(size)
        except OSError as exc:
            raise ObjectIOError(f'read failed: {exc}') from exc

    def _check_stream_end(self):
        if self._inflater.unused_data or self._read_file(1):
            raise TrailingDataError('garbage at end of zlib stream')

    def close(self):
        if not self.closed:
            try:
                self._fileobj.close()
            finally:
                super().close()


def open_inflated(fileobj) -> io.BufferedReader:
    """Buffered decompressing reader over ``fileobj``."""
    return io.BufferedReader(ZlibReader(fileobj))


class BoundedReader:
    """Reader that refuses to hand out more than ``limit`` bytes.

    Every read asks the source for one byte past the remaining budget, so a
    source that still has data once the budget is spent fails with
    TrailingDataError instead of being silently cut off.
    """

    def __init__(self, source, limit: int):
        self._source = source
        self.limit = limit
        self.remaining = limit

    @property
    def consumed(self) -> int:
        return self.limit - self.remaining

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0 or size > self.remaining:
            size = self.remaining + 1
        data = read_full(self._source, size)
        if len(data) > self.remaining:
            raise TrailingDataError(
                f'object has trailing bytes, expected {self.limit} bytes only',
                expected=self.limit,
            )
        self.remaining -= len(data)
        return data

    def read_exact(self, size: int) -> bytes:
        if size > self.remaining:
            raise TruncatedObjectError(
                f'need {size} bytes but only {self.remaining} remain of {self.limit}',
                expected=self.limit, consumed=self.consumed,
            )
        data = self.read(size)
        if len(data) != size:
            raise TruncatedObjectError(
                f'object truncated: read {self.consumed} of {self.limit} bytes',
                expected=self.limit, consumed=self.consumed,
            )
        return data

    def verify(self):
        """Check the budget was consumed exactly and the source is exhausted."""
        if self.remaining:
            raise TruncatedObjectError(
                f'object truncated: read {self.consumed} of {self.limit} bytes',
                expected=self.limit, consumed=self.consumed,
            )
        if read_full(self._source, 1):
            raise TrailingDataError(
                f'object has trailing bytes, expected {self.limit} bytes only',
                expected=self.limit,
            )

    def close(self):
        self._source.close()
