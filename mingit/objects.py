"""Loose object storage: one zlib-compressed file per object, addressed by SHA-1."""
import enum
import hashlib
import logging
import os
import re
import uuid
import zlib
from pathlib import Path
from typing import Tuple, Union

from .errors import (
    CorruptHeaderError,
    InvalidIdentifierError,
    ObjectIOError,
    ObjectNotFoundError,
    UnsupportedTypeError,
)
from .streams import BoundedReader, open_inflated

logger = logging.getLogger(__name__)

DIGEST_SIZE = 20
MAX_HEADER_LEN = 64
_HEX_OID = re.compile(r'[0-9a-f]{40}')


class ObjectKind(enum.Enum):
    BLOB = 'blob'
    TREE = 'tree'

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, tag: Union[str, 'ObjectKind']) -> 'ObjectKind':
        if isinstance(tag, cls):
            return tag
        try:
            return cls(tag)
        except ValueError:
            raise UnsupportedTypeError(f'object type `{tag}` is not supported', type=tag) from None


def frame_header(kind: Union[str, ObjectKind], size: int) -> bytes:
    return f'{ObjectKind.parse(kind)} {size}\0'.encode()


def compute_identifier(kind: Union[str, ObjectKind], payload: bytes) -> bytes:
    """SHA-1 over ``<kind> <len>\\0<payload>``, the same framing write() stores."""
    h = hashlib.sha1(frame_header(kind, len(payload)))
    h.update(payload)
    return h.digest()


def to_hex(oid: Union[str, bytes]) -> str:
    if isinstance(oid, (bytes, bytearray)):
        if len(oid) != DIGEST_SIZE:
            raise InvalidIdentifierError(f'object id must be {DIGEST_SIZE} bytes, got {len(oid)}')
        return bytes(oid).hex()
    if not isinstance(oid, str) or not _HEX_OID.fullmatch(oid):
        raise InvalidIdentifierError(f'not a valid object id: {oid!r}', oid=oid)
    return oid


def parse_header(reader) -> Tuple[ObjectKind, int]:
    """Read ``<kind> <len>\\0`` from a buffered reader, leaving it at the first body byte."""
    buf = bytearray()
    while True:
        byte = reader.read(1)
        if not byte:
            raise CorruptHeaderError('object header has no NUL terminator')
        if byte == b'\0':
            break
        buf += byte
        if len(buf) > MAX_HEADER_LEN:
            raise CorruptHeaderError(f'object header longer than {MAX_HEADER_LEN} bytes')
    try:
        header = buf.decode('utf-8')
    except UnicodeDecodeError as exc:
        raise CorruptHeaderError('object header is invalid UTF-8') from exc
    tag, sep, size = header.partition(' ')
    if not sep:
        raise CorruptHeaderError("object header doesn't have a space", header=header)
    if not (size.isascii() and size.isdigit()):
        raise CorruptHeaderError(f'object header has invalid size `{size}`', header=header)
    return ObjectKind.parse(tag), int(size)


class RawObject:
    """An opened object: its kind, declared size and a bounded body reader.

    Owns the whole reader chain; use as a context manager or call close().
    """

    def __init__(self, oid: str, kind: ObjectKind, size: int, body: BoundedReader):
        self.oid = oid
        self.kind = kind
        self.size = size
        self.body = body

    def read_body(self) -> bytes:
        data = self.body.read()
        self.body.verify()
        return data

    def verify(self):
        self.body.verify()

    def close(self):
        self.body.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ObjectStore:
    def __init__(self, objects_dir: Path, compression: int = -1):
        self.objects_dir = Path(objects_dir)
        self.compression = compression

    def path_for(self, oid: Union[str, bytes]) -> Path:
        h = to_hex(oid)
        return self.objects_dir / h[:2] / h[2:]

    def contains(self, oid: Union[str, bytes]) -> bool:
        return self.path_for(oid).is_file()

    def hash(self, kind: Union[str, ObjectKind], payload: bytes) -> str:
        return compute_identifier(kind, payload).hex()

    def write(self, kind: Union[str, ObjectKind], payload: bytes) -> str:
        header = frame_header(kind, len(payload))
        oid = compute_identifier(kind, payload).hex()
        p = self.path_for(oid)
        if p.exists():
            logger.debug('object %s already stored', oid)
            return oid
        tmp = p.parent / f'.{p.name}.tmp-{uuid.uuid4().hex}'
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, 'wb') as f:
                deflater = zlib.compressobj(self.compression)
                f.write(deflater.compress(header))
                f.write(deflater.compress(payload))
                f.write(deflater.flush())
            os.replace(tmp, p)
        except OSError as exc:
            raise ObjectIOError(f'failed to write object {oid}: {exc}', oid=oid) from exc
        finally:
            try:
                tmp.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning('could not remove temporary file %s: %s', tmp, exc)
        logger.debug('wrote %s %s (%d bytes)', ObjectKind.parse(kind), oid, len(payload))
        return oid

    def open(self, oid: Union[str, bytes]) -> RawObject:
        h = to_hex(oid)
        p = self.path_for(h)
        try:
            f = open(p, 'rb')
        except FileNotFoundError:
            raise ObjectNotFoundError(f'object {h} not found', oid=h) from None
        except OSError as exc:
            raise ObjectIOError(f'failed to open object {h}: {exc}', oid=h) from exc
        reader = open_inflated(f)
        try:
            kind, size = parse_header(reader)
        except BaseException:
            reader.close()
            raise
        logger.debug('opened %s %s (%d bytes)', kind, h, size)
        return RawObject(h, kind, size, BoundedReader(reader, size))

    def read(self, oid: Union[str, bytes]) -> Tuple[ObjectKind, bytes]:
        with self.open(oid) as obj:
            return obj.kind, obj.read_body()
