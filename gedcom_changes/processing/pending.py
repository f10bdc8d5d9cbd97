# Copyright 2025 Trobz
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

from typing import Any, Dict, Iterable, List, MutableMapping, Optional

from ..exceptions import ConfigurationError, RecordClassificationError
from ..factories import GedcomRecordFactory, dispatch_table
from ..i18n import translate
from ..models import PendingChange, Tree
from .db import fetch_pending_changes
from .parser import RE_LEVEL_0
from .trees import TreeService

import logging

logger = logging.getLogger(__name__)

GroupedChanges = Dict[str, Dict[str, List[PendingChange]]]


def record_type_of(old_gedcom: Optional[str], new_gedcom: Optional[str]) -> str:
    """Read the level-0 tag of a change.

    One side is empty for additions and deletions, so the two texts are
    concatenated and the populated side is matched.
    """
    text = (old_gedcom or "") + (new_gedcom or "")
    if not text:
        raise RecordClassificationError("Change has neither old nor new record text")
    match = RE_LEVEL_0.match(text)
    if not match:
        first_line = text.splitlines()[0]
        raise RecordClassificationError(f"Not a level-0 record line: '{first_line[:80]}'")
    return match.group(2)


def select_active_tree_name(changes: GroupedChanges, tree: Tree) -> Optional[str]:
    """The tab to open first: the current tree if it has changes, else the first one."""
    if changes.get(tree.name):
        return tree.name
    return next(iter(changes), None)


class PendingChangesAggregator:
    def __init__(self, factories: MutableMapping, tree_service: TreeService):
        self.factories = dispatch_table(factories)
        self.fallback_factory = factories[GedcomRecordFactory]
        self.tree_service = tree_service

    def group(self, rows: Iterable[PendingChange]) -> GroupedChanges:
        """Attach a record to each row and group rows by tree name and xref.

        Rows keep their arrival order; rows that cannot be classified are
        logged and left out.
        """
        changes: GroupedChanges = {}
        for row in rows:
            change_tree = self.tree_service.find_by_name(row.gedcom_name)
            if change_tree is None:
                logger.warning(f"Skipping change {row.change_id}: tree '{row.gedcom_name}' no longer exists")
                continue

            try:
                record_type = record_type_of(row.old_gedcom, row.new_gedcom)
            except RecordClassificationError as e:
                logger.warning(f"Skipping change {row.change_id} ({row.gedcom_name}:{row.xref}): {e}")
                continue

            factory = self.factories.get(record_type, self.fallback_factory)
            row.record = factory.new(row.xref, row.old_gedcom, row.new_gedcom, change_tree)

            changes.setdefault(row.gedcom_name, {}).setdefault(row.xref, []).append(row)
        return changes

    def view(self, tree: Optional[Tree], url: str, cursor) -> Dict[str, Any]:
        """Build the data for the pending changes page of tree."""
        if tree is None:
            raise ConfigurationError("No tree in the request context")

        changes = self.group(fetch_pending_changes(cursor))

        return {
            "active_tree_name": select_active_tree_name(changes, tree),
            "changes": changes,
            "title": translate("Pending changes"),
            "tree": tree,
            "trees": self.tree_service.all(),
            "url": url,
        }
