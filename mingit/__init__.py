"""mingit: a minimal content-addressable object store in git's loose-object format."""
from .objects import ObjectKind, ObjectStore, RawObject, compute_identifier
from .tree import FileMode, TreeEntry, decode_entries, encode_entries
from .repo import Repo

__version__ = '0.1.0'
