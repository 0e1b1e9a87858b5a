#!/usr/bin/env python3
"""
Archive Signature Maintenance CLI

Usage:
    python manage.py init-db                    # Create tables (existing data kept)
    python manage.py list-components            # List components and their counters
    python manage.py list-elements 3            # List elements of component 3
    python manage.py reindex 3                  # Re-index all elements of component 3
    python manage.py reindex 3 --dry-run        # Show the indices re-index would assign
    python manage.py resolve-path "[12,47]"     # Render a signature path as labels

Via docker:
    docker-compose exec archive-api python manage.py reindex 3
"""
import argparse
import sys
from pathlib import Path

# Add api directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from app_state import AppState
from config import default_config
from errors import ArchiveCoreError
from logging_config import configure_logging
from signature.path_codec import decode_path


def open_state() -> AppState:
    """Open the database configured by DATABASE_URL / ARCHIVE_DB_PATH"""
    return AppState(default_config).open()


def cmd_init_db(args):
    """Create schema"""
    state = open_state()
    state.close()
    print(f"Schema ready at {default_config.database.path}")
    return 0


def cmd_list_components(args):
    """List components"""
    state = open_state()
    try:
        components = state.get_component_service().list_all()
        if not components:
            print("No components")
            return 0

        print(f"{'ID':>5}  {'Type':<11} {'Count':>6}  Name")
        for c in components:
            print(f"{c.id:>5}  {c.index_type.value:<11} {c.index_count:>6}  {c.name}")
        return 0
    finally:
        state.close()


def cmd_list_elements(args):
    """List elements of a component"""
    state = open_state()
    try:
        elements = state.get_element_service().list_by_component(args.component_id)
        for e in elements:
            parents = f"  (parents: {', '.join(str(p) for p in e.parent_ids)})" if e.parent_ids else ""
            print(f"{e.id:>5}  {e.label}{parents}")
        print(f"\n{len(elements)} elements")
        return 0
    except ArchiveCoreError as e:
        print(f"Error: {e}")
        return 1
    finally:
        state.close()


def cmd_reindex(args):
    """Re-index a component"""
    state = open_state()
    try:
        summary = state.get_reindexer().reindex(args.component_id, dry_run=args.dry_run)
    except ArchiveCoreError as e:
        print(f"Error: {e}")
        return 1
    finally:
        state.close()

    if args.verbose or args.dry_run:
        for a in summary.assignments:
            marker = "*" if a.changed else " "
            print(f" {marker} {a.element_id:>5}  {a.previous_index or '-':>8} -> {a.index:<8} {a.name}")
        print()

    print(summary.message)
    if args.dry_run:
        print("\nRun without --dry-run to apply")
    return 0


def cmd_resolve_path(args):
    """Render a signature path"""
    state = open_state()
    try:
        path = decode_path(args.path)
        label = state.get_element_service().resolve_path(path)
        print(label if label is not None else "(empty path)")
        return 0
    except ArchiveCoreError as e:
        print(f"Error: {e}")
        return 1
    finally:
        state.close()


def main():
    configure_logging(default_config.logging)

    parser = argparse.ArgumentParser(
        description='Archive Signature Maintenance CLI',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    # init-db
    p = subparsers.add_parser('init-db', help='Create database schema')
    p.set_defaults(func=cmd_init_db)

    # list-components
    p = subparsers.add_parser('list-components', help='List signature components')
    p.set_defaults(func=cmd_list_components)

    # list-elements
    p = subparsers.add_parser('list-elements', help='List elements of a component')
    p.add_argument('component_id', type=int, help='Component ID')
    p.set_defaults(func=cmd_list_elements)

    # reindex
    p = subparsers.add_parser('reindex', help='Re-index all elements of a component')
    p.add_argument('component_id', type=int, help='Component ID')
    p.add_argument('--dry-run', action='store_true', help='Show what would change')
    p.add_argument('-v', '--verbose', action='store_true', help='Show every assignment')
    p.set_defaults(func=cmd_reindex)

    # resolve-path
    p = subparsers.add_parser('resolve-path', help='Render a signature path as labels')
    p.add_argument('path', help='Canonical path text, e.g. "[12,47]"')
    p.set_defaults(func=cmd_resolve_path)

    args = parser.parse_args()
    sys.exit(args.func(args))


if __name__ == '__main__':
    main()
