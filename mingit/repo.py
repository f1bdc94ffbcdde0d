"""Repository-level operations on top of the object store (init, hash-object, cat-file, ls-tree)."""
from pathlib import Path
import json, logging, os
from typing import Optional, List, Dict, Any, Iterable
from .objects import ObjectStore, ObjectKind, RawObject
from .tree import TreeEntry, decode_entries, encode_entries
from .errors import ObjectIOError, UnsupportedTypeError

logger = logging.getLogger(__name__)

GIT_DIR = '.git'
GIT_DIR_ENV = 'MINGIT_DIR'
CONFIG_FILE = 'config.json'
DEFAULT_CONFIG: Dict[str, Any] = {'core': {'compression': -1}}


class Repo:
    def __init__(self, path: str = '.', git_dir: Optional[str] = None):
        self.workdir = Path(path).resolve()
        git_dir = git_dir or os.environ.get(GIT_DIR_ENV) or GIT_DIR
        self.git_dir = self.workdir / git_dir
        self.objects_dir = self.git_dir / 'objects'
        self.objects = ObjectStore(self.objects_dir, compression=self._compression())

    def init(self):
        try:
            self.objects_dir.mkdir(parents=True, exist_ok=True)
            (self.git_dir / 'refs').mkdir(parents=True, exist_ok=True)
            if not (self.git_dir / 'HEAD').exists():
                (self.git_dir / 'HEAD').write_text('ref: refs/heads/main\n')
            if not (self.git_dir / CONFIG_FILE).exists():
                (self.git_dir / CONFIG_FILE).write_text(json.dumps(DEFAULT_CONFIG, indent=2))
        except OSError as exc:
            raise ObjectIOError(f'failed to initialize {self.git_dir}: {exc}') from exc
        logger.info('initialized git directory at %s', self.git_dir)

    def get_config(self) -> Dict[str, Any]:
        cfgf = self.git_dir / CONFIG_FILE
        if cfgf.exists():
            return json.loads(cfgf.read_text())
        return json.loads(json.dumps(DEFAULT_CONFIG))

    def set_config(self, section: str, key: str, value: Any):
        cfg = self.get_config()
        cfg.setdefault(section, {})[key] = value
        (self.git_dir / CONFIG_FILE).write_text(json.dumps(cfg, indent=2))
        if section == 'core' and key == 'compression':
            self.objects.compression = self._compression()

    def _compression(self) -> int:
        level = self.get_config().get('core', {}).get('compression', -1)
        if not isinstance(level, int) or not -1 <= level <= 9:
            raise ValueError(f'core.compression must be an integer in -1..9, got {level!r}')
        return level

    def hash_object(self, path: str, write: bool = False) -> str:
        p = self.workdir / path
        try:
            data = p.read_bytes()
        except OSError as exc:
            raise ObjectIOError(f'failed to read {path}: {exc}') from exc
        if write:
            return self.objects.write(ObjectKind.BLOB, data)
        return self.objects.hash(ObjectKind.BLOB, data)

    def open_object(self, oid: str) -> RawObject:
        return self.objects.open(oid)

    def object_type(self, oid: str) -> ObjectKind:
        with self.objects.open(oid) as obj:
            return obj.kind

    def object_size(self, oid: str) -> int:
        with self.objects.open(oid) as obj:
            return obj.size

    def cat_file(self, oid: str) -> bytes:
        return self.objects.read(oid)[1]

    def ls_tree(self, oid: str) -> List[TreeEntry]:
        with self.objects.open(oid) as obj:
            if obj.kind is not ObjectKind.TREE:
                raise UnsupportedTypeError(f'object {obj.oid} is a {obj.kind}, not a tree', oid=obj.oid)
            entries = list(decode_entries(obj.body, obj.size))
            obj.verify()
        return entries

    def write_tree_entries(self, entries: Iterable[TreeEntry]) -> str:
        return self.objects.write(ObjectKind.TREE, encode_entries(entries))
