import argparse
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from gedcom_changes.cache import ArrayCache
from gedcom_changes.factories import register_factories
from gedcom_changes.processing.db import (
    sqlite_db,
    setup_database,
    insert_tree,
    insert_user,
    insert_change,
    find_user_id,
    set_change_status,
    ACCEPTED,
    REJECTED,
)
from gedcom_changes.processing.parser import GedcomParser
from gedcom_changes.processing.pending import PendingChangesAggregator
from gedcom_changes.processing.trees import TreeService

from config import (
    DATABASE_PATH,
    LOG_LEVEL,
    RECORD_CACHE_TTL,
)

import logging

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def import_gedcom(cursor, file_path: Path, tree_name: str, user_name: str) -> int:
    """Store every record of a GEDCOM file as a pending addition to a tree."""
    tree = TreeService(cursor).find_by_name(tree_name)
    if tree is None:
        logger.error(f"Tree '{tree_name}' does not exist.")
        return 0
    user_id = find_user_id(cursor, user_name)
    if user_id is None:
        logger.error(f"User '{user_name}' does not exist.")
        return 0

    chunks = GedcomParser(str(file_path)).parse()
    logger.info(f"Found {len(chunks)} records in {file_path.name}.")
    for chunk in tqdm(chunks, leave=False):
        insert_change(cursor, tree.id, chunk.xref, None, chunk.gedcom, user_id)
    logger.info(f"Added {len(chunks)} pending changes to tree '{tree_name}'.")
    return len(chunks)


def print_pending_changes(cursor, tree_name: Optional[str] = None) -> None:
    tree_service = TreeService(cursor)
    trees = tree_service.all()
    if not trees:
        logger.error("No trees exist yet.")
        return
    tree = trees.get(tree_name) if tree_name else next(iter(trees.values()))
    if tree is None:
        logger.error(f"Tree '{tree_name}' does not exist.")
        return

    factories = register_factories({}, ArrayCache(default_ttl=RECORD_CACHE_TTL))
    view = PendingChangesAggregator(factories, tree_service).view(tree, "", cursor)

    print(view["title"])
    if not view["changes"]:
        print("  (none)")
    for name, records in view["changes"].items():
        marker = "*" if name == view["active_tree_name"] else " "
        print(f"{marker} {trees[name].display_title()}")
        for xref, rows in records.items():
            print(f"    {rows[0].record.kind} {xref} {rows[0].record.name}")
            for row in rows:
                print(f"      #{row.change_id} {row.change_time:%Y-%m-%d %H:%M} {row.real_name or row.user_name}")


def change_status(cursor, status: str, tree_name: str, xref: Optional[str] = None) -> int:
    tree = TreeService(cursor).find_by_name(tree_name)
    if tree is None:
        logger.error(f"Tree '{tree_name}' does not exist.")
        return 0
    return set_change_status(cursor, status, tree.id, xref)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for command-line tasks."""
    parser = argparse.ArgumentParser(description="Genealogy pending changes - Data Manager")
    parser.add_argument("--database", default=DATABASE_PATH, help="Path of the sqlite database.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="Create the database schema.")

    tree_parser = subparsers.add_parser("create-tree", help="Create a family tree.")
    tree_parser.add_argument("--name", required=True, help="Short name used in URLs.")
    tree_parser.add_argument("--title", help="Title shown to visitors.")

    user_parser = subparsers.add_parser("create-user", help="Create a user.")
    user_parser.add_argument("--name", required=True, help="Login name.")
    user_parser.add_argument("--real-name", help="Name shown next to the user's changes.")

    import_parser = subparsers.add_parser("import", help="Import a GEDCOM file as pending additions.")
    import_parser.add_argument("file", type=Path, help="GEDCOM file to import.")
    import_parser.add_argument("--tree", required=True, help="Tree receiving the records.")
    import_parser.add_argument("--user", required=True, help="User submitting the changes.")

    pending_parser = subparsers.add_parser("pending", help="List pending changes of all trees.")
    pending_parser.add_argument("--tree", help="Current tree, shown first when it has changes.")

    for command, help_text in (("accept", "Accept pending changes."), ("reject", "Reject pending changes.")):
        status_parser = subparsers.add_parser(command, help=help_text)
        status_parser.add_argument("--tree", required=True, help="Tree holding the changes.")
        status_parser.add_argument("--xref", help="Only the changes of this record.")

    args = parser.parse_args(argv)

    if args.command == "init":
        with sqlite_db(args.database, create=True) as cursor:
            setup_database(cursor)
        logger.info(f"Database ready at {args.database}.")
        return

    with sqlite_db(args.database) as cursor:
        if args.command == "create-tree":
            insert_tree(cursor, args.name, args.title)
        elif args.command == "create-user":
            insert_user(cursor, args.name, args.real_name)
        elif args.command == "import":
            if not args.file.is_file():
                logger.error(f"File not found: {args.file}")
                sys.exit(1)
            import_gedcom(cursor, args.file, args.tree, args.user)
        elif args.command == "pending":
            print_pending_changes(cursor, args.tree)
        elif args.command == "accept":
            change_status(cursor, ACCEPTED, args.tree, args.xref)
        elif args.command == "reject":
            change_status(cursor, REJECTED, args.tree, args.xref)

if __name__ == "__main__":
    main()
