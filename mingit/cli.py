"""Command-line interface for mingit"""
import argparse, json, logging, sys
from .repo import Repo
from .objects import ObjectKind
from .errors import ObjectStoreError

logger = logging.getLogger(__name__)


def _report(err: ObjectStoreError, as_json: bool):
    if as_json:
        print(json.dumps(err.to_dict()), file=sys.stderr)
    else:
        print(f'error: {err}', file=sys.stderr)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    parser = argparse.ArgumentParser(prog='mingit')
    parser.add_argument('--git-dir', help='repository directory (default: $MINGIT_DIR or .git)')
    parser.add_argument('-v', '--verbose', action='store_true')
    parser.add_argument('--json', action='store_true', help='report errors as JSON')
    sub = parser.add_subparsers(dest='cmd')

    sub.add_parser('init')

    p_cat = sub.add_parser('cat-file')
    mode = p_cat.add_mutually_exclusive_group(required=True)
    mode.add_argument('-p', action='store_true', dest='pretty_print')
    mode.add_argument('-t', action='store_true', dest='show_type')
    mode.add_argument('-s', action='store_true', dest='show_size')
    p_cat.add_argument('object_hash')

    p_hash = sub.add_parser('hash-object'); p_hash.add_argument('-w', action='store_true', dest='write'); p_hash.add_argument('file_path')

    p_ls = sub.add_parser('ls-tree'); p_ls.add_argument('--name-only', action='store_true'); p_ls.add_argument('object_hash')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    if not args.cmd:
        parser.print_help(); return 2

    try:
        repo = Repo('.', git_dir=args.git_dir)
        if args.cmd == 'init':
            repo.init(); print('Initialized git directory'); return 0
        if args.cmd == 'cat-file':
            if args.show_type:
                print(repo.object_type(args.object_hash)); return 0
            if args.show_size:
                print(repo.object_size(args.object_hash)); return 0
            if repo.object_type(args.object_hash) is ObjectKind.TREE:
                for entry in repo.ls_tree(args.object_hash):
                    print(entry.format())
            else:
                sys.stdout.flush()
                sys.stdout.buffer.write(repo.cat_file(args.object_hash))
                sys.stdout.buffer.flush()
            return 0
        if args.cmd == 'hash-object':
            print(repo.hash_object(args.file_path, write=args.write)); return 0
        if args.cmd == 'ls-tree':
            for entry in repo.ls_tree(args.object_hash):
                print(entry.format(name_only=args.name_only))
            return 0
    except ObjectStoreError as e:
        logger.debug('command %s failed', args.cmd, exc_info=True)
        _report(e, args.json)
        return 1
    except ValueError as e:
        print(f'error: {e}', file=sys.stderr)
        return 1

    parser.print_help(); return 2


if __name__ == '__main__':
    raise SystemExit(main())
