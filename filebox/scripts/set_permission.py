"""
Write a sidecar permission record straight to disk.

Usage:
    uv run python -m filebox.scripts.set_permission /reports/q1.pdf --allow read=admin
    uv run python -m filebox.scripts.set_permission /private --dir --deny read=guest
    uv run python -m filebox.scripts.set_permission /private --dir --show

Paths are logical (relative to BASE_DIR).  Rules are ACTION=ROLE and may
be repeated.  The record REPLACES any existing one; there is no merge.
Use ``*`` as the role to match everyone.
"""

import argparse
import sys

from filebox.core.config import settings
from filebox.models.permission import PermissionRecord
from filebox.services.file_service import Filebox
from filebox.services.metadata_store import MetadataStore


def _rule(value: str) -> tuple[str, str]:
    action, sep, role = value.partition("=")
    if not sep or not action or not role:
        raise argparse.ArgumentTypeError(f"expected ACTION=ROLE, got {value!r}")
    return action.strip().lower(), role.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Set a filebox permission record")
    parser.add_argument("path", help="Logical path under BASE_DIR")
    parser.add_argument("--dir", action="store_true", help="Target a directory record")
    parser.add_argument("--allow", type=_rule, action="append", default=[], metavar="ACTION=ROLE")
    parser.add_argument("--deny", type=_rule, action="append", default=[], metavar="ACTION=ROLE")
    parser.add_argument("--show", action="store_true", help="Print the current record and exit")
    parser.add_argument("--base-dir", default=settings.BASE_DIR)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    box = Filebox(
        args.base_dir,
        store=MetadataStore(settings.META_SUFFIX, settings.DIR_META_NAME),
    )

    target = box.access_dir(args.path) if args.dir else box.access_file(args.path)

    if args.show:
        record = target.get_permission()
        if record is None:
            print(f"No permission record for {target.logical_path}")
            return 1
        print(record.model_dump_json(indent=2))
        return 0

    if not args.allow and not args.deny:
        print("Nothing to write: pass at least one --allow or --deny.", file=sys.stderr)
        return 2

    record = PermissionRecord()
    for action, role in args.allow:
        record.allow(action, role)
    for action, role in args.deny:
        record.deny(action, role)

    target.set_permission(record)
    print(f"Wrote {target.meta_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
