import io
import pytest
from mingit.objects import ObjectStore, ObjectKind
from mingit.tree import FileMode, TreeEntry, decode_entries, encode_entries
from mingit.errors import InvalidModeError, TruncatedObjectError, CorruptHeaderError

ID1 = bytes(range(20))
ID2 = bytes(range(20, 40))

def decode(body, length=None):
    return list(decode_entries(io.BytesIO(body), len(body) if length is None else length))

def test_decodes_entries_in_stored_order():
    body = b'100644 a.txt\0' + ID1 + b'40000 sub\0' + ID2
    entries = decode(body)
    assert entries == [
        TreeEntry(FileMode.REGULAR_FILE, 'a.txt', ID1),
        TreeEntry(FileMode.DIRECTORY, 'sub', ID2),
    ]

def test_order_is_not_resorted():
    body = b'100644 z\0' + ID1 + b'100644 a\0' + ID2
    assert [e.name for e in decode(body)] == ['z', 'a']

def test_all_modes():
    body = b''.join(f'{m} n{m}'.encode() + b'\0' + ID1 for m in (100644, 100755, 120000, 40000))
    assert [e.mode for e in decode(body)] == [
        FileMode.REGULAR_FILE, FileMode.EXECUTABLE_FILE, FileMode.SYMBOLIC_LINK, FileMode.DIRECTORY,
    ]

def test_mode_views():
    assert FileMode.DIRECTORY.code == 40000
    assert FileMode.DIRECTORY.object_type is ObjectKind.TREE
    assert FileMode.SYMBOLIC_LINK.object_type is ObjectKind.BLOB
    assert FileMode.from_code(100755) is FileMode.EXECUTABLE_FILE

def test_empty_tree():
    assert decode(b'') == []

def test_invalid_mode():
    with pytest.raises(InvalidModeError):
        decode(b'999999 x\0' + ID1)
    with pytest.raises(InvalidModeError):
        decode(b'10064a x\0' + ID1)

def test_entry_without_space():
    with pytest.raises(CorruptHeaderError):
        decode(b'100644\0' + ID1)

def test_short_sha():
    with pytest.raises(TruncatedObjectError):
        decode(b'100644 a\0' + ID1[:10], length=29)

def test_body_ends_inside_header():
    with pytest.raises(TruncatedObjectError):
        decode(b'100644 a', length=40)

def test_entry_runs_past_declared_length():
    body = b'100644 a\0' + ID1
    with pytest.raises(TruncatedObjectError):
        decode(body, length=len(body) - 5)
    with pytest.raises(TruncatedObjectError):
        decode(body, length=4)

def test_decoding_is_lazy():
    body = b'100644 a\0' + ID1 + b'999999 b\0' + ID2
    it = decode_entries(io.BytesIO(body), len(body))
    assert next(it).name == 'a'
    with pytest.raises(InvalidModeError):
        next(it)

def test_format_lines():
    e = TreeEntry(FileMode.DIRECTORY, 'sub', ID1)
    assert e.format() == f'040000 tree {ID1.hex()}\tsub'
    assert e.format(name_only=True) == 'sub'
    assert TreeEntry(FileMode.REGULAR_FILE, 'f', ID2).format().startswith('100644 blob ')

def test_stored_tree_round_trip(tmp_path):
    store = ObjectStore(tmp_path/'objects')
    entries = [
        TreeEntry(FileMode.REGULAR_FILE, 'a.txt', ID1),
        TreeEntry(FileMode.DIRECTORY, 'sub', ID2),
        TreeEntry(FileMode.EXECUTABLE_FILE, 'run.sh', ID1),
    ]
    oid = store.write('tree', encode_entries(entries))
    with store.open(oid) as obj:
        assert obj.kind is ObjectKind.TREE
        assert list(decode_entries(obj.body, obj.size)) == entries
        obj.verify()

def test_stored_tree_with_extra_bytes(tmp_path):
    import zlib
    store = ObjectStore(tmp_path/'objects')
    body = b'100644 a\0' + ID1
    oid = '34' * 20
    p = store.path_for(oid)
    p.parent.mkdir(parents=True)
    p.write_bytes(zlib.compress(f'tree {len(body)}\0'.encode() + body + b'junk'))
    from mingit.errors import TrailingDataError
    with store.open(oid) as obj:
        assert len(list(decode_entries(obj.body, obj.size))) == 1
        with pytest.raises(TrailingDataError):
            obj.verify()

class TrickleReader:
    def __init__(self, data, step=3):
        self._buf = io.BytesIO(data)
        self.step = step
    def read(self, size=-1):
        return self._buf.read(min(size, self.step))

def test_decodes_from_source_with_short_reads():
    body = b'100644 a.txt\0' + ID1 + b'40000 sub\0' + ID2
    entries = list(decode_entries(TrickleReader(body), len(body)))
    assert [e.oid for e in entries] == [ID1, ID2]
