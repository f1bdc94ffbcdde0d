"""
Error types raised by the object store and tree decoder.

Every failure carries a stable code so callers (and the CLI's --json mode)
can tell them apart without matching on messages:
- MINGIT_ERR_NOT_FOUND: no object file at the derived path
- MINGIT_ERR_CORRUPT: malformed object header or tree entry
- MINGIT_ERR_UNSUPPORTED: object type outside {blob, tree}
- MINGIT_ERR_TRUNCATED: fewer body bytes than declared
- MINGIT_ERR_TRAILING: more body bytes than declared
- MINGIT_ERR_INVALID_MODE: tree entry mode outside the known set
- MINGIT_ERR_IO: filesystem or zlib stream failure
- MINGIT_ERR_INVALID_OID: identifier is not 40 hex chars / 20 bytes
"""
from typing import Any, Dict

ERR_NOT_FOUND = 'MINGIT_ERR_NOT_FOUND'
ERR_CORRUPT = 'MINGIT_ERR_CORRUPT'
ERR_UNSUPPORTED = 'MINGIT_ERR_UNSUPPORTED'
ERR_TRUNCATED = 'MINGIT_ERR_TRUNCATED'
ERR_TRAILING = 'MINGIT_ERR_TRAILING'
ERR_INVALID_MODE = 'MINGIT_ERR_INVALID_MODE'
ERR_IO = 'MINGIT_ERR_IO'
ERR_INVALID_OID = 'MINGIT_ERR_INVALID_OID'


class ObjectStoreError(Exception):
    code = 'MINGIT_ERR'

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {
            'error': True,
            'code': self.code,
            'message': self.message,
            'details': self.details,
        }


class ObjectNotFoundError(ObjectStoreError, FileNotFoundError):
    code = ERR_NOT_FOUND


class CorruptHeaderError(ObjectStoreError):
    code = ERR_CORRUPT


class UnsupportedTypeError(ObjectStoreError):
    code = ERR_UNSUPPORTED


class TruncatedObjectError(ObjectStoreError):
    code = ERR_TRUNCATED


class TrailingDataError(ObjectStoreError):
    code = ERR_TRAILING


class InvalidModeError(ObjectStoreError):
    code = ERR_INVALID_MODE


class ObjectIOError(ObjectStoreError):
    code = ERR_IO


class InvalidIdentifierError(ObjectStoreError, ValueError):
    code = ERR_INVALID_OID
