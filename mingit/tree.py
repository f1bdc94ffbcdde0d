"""Tree (directory listing) objects: entry types, decoding and encoding."""
import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from .errors import CorruptHeaderError, InvalidModeError, TruncatedObjectError
from .objects import DIGEST_SIZE, ObjectKind
from .streams import read_full

logger = logging.getLogger(__name__)

MAX_ENTRY_HEADER_LEN = 4096


class FileMode(enum.Enum):
    REGULAR_FILE = 100644
    EXECUTABLE_FILE = 100755
    SYMBOLIC_LINK = 120000
    DIRECTORY = 40000

    @property
    def code(self) -> int:
        return self.value

    @property
    def object_type(self) -> ObjectKind:
        if self is FileMode.DIRECTORY:
            return ObjectKind.TREE
        return ObjectKind.BLOB

    @classmethod
    def from_code(cls, code: int) -> 'FileMode':
        try:
            return cls(code)
        except ValueError:
            raise InvalidModeError(f'invalid object mode {code}', mode=code) from None


@dataclass(frozen=True)
class TreeEntry:
    mode: FileMode
    name: str
    oid: bytes

    @property
    def hexsha(self) -> str:
        return self.oid.hex()

    def format(self, name_only: bool = False) -> str:
        """One ``ls-tree`` line: ``100644 blob <hex>\\t<name>``."""
        if name_only:
            return self.name
        return f'{self.mode.code:06} {self.mode.object_type} {self.hexsha}\t{self.name}'

    def encode(self) -> bytes:
        return f'{self.mode.code} {self.name}'.encode() + b'\0' + self.oid


def _parse_mode(text: str) -> FileMode:
    if not (text.isascii() and text.isdigit()):
        raise InvalidModeError(f'tree entry has invalid object mode `{text}`', mode=text)
    return FileMode.from_code(int(text))


def decode_entries(body, declared_length: int) -> Iterator[TreeEntry]:
    """Lazily yield the entries of a tree body in stored order.

    ``body`` is any reader with ``read(n)``; at most ``declared_length`` bytes
    are requested from it. An entry running past ``declared_length`` or a body
    that ends mid-entry raises TruncatedObjectError.
    """
    consumed = 0
    while consumed < declared_length:
        buf = bytearray()
        while True:
            if consumed >= declared_length:
                raise TruncatedObjectError(
                    'tree entry runs past the declared length',
                    expected=declared_length, consumed=consumed,
                )
            byte = body.read(1)
            if not byte:
                raise TruncatedObjectError(
                    'tree body ended inside an entry header',
                    expected=declared_length, consumed=consumed,
                )
            consumed += 1
            if byte == b'\0':
                break
            buf += byte
            if len(buf) > MAX_ENTRY_HEADER_LEN:
                raise CorruptHeaderError(f'tree entry header longer than {MAX_ENTRY_HEADER_LEN} bytes')

        try:
            header = buf.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise CorruptHeaderError('tree entry header is invalid UTF-8') from exc
        mode, sep, name = header.partition(' ')
        if not sep:
            raise CorruptHeaderError("tree entry doesn't have a space", header=header)
        mode = _parse_mode(mode)

        if consumed + DIGEST_SIZE > declared_length:
            raise TruncatedObjectError(
                'tree entry runs past the declared length',
                expected=declared_length, consumed=consumed,
            )
        oid = read_full(body, DIGEST_SIZE)
        if len(oid) != DIGEST_SIZE:
            raise TruncatedObjectError(
                f'tree entry SHA is {len(oid)} bytes, expected {DIGEST_SIZE}',
                expected=declared_length, consumed=consumed + len(oid),
            )
        consumed += DIGEST_SIZE
        yield TreeEntry(mode, name, oid)


def encode_entries(entries: Iterable[TreeEntry]) -> bytes:
    """Concatenate entries in the given order into a tree body."""
    return b''.join(e.encode() for e in entries)
