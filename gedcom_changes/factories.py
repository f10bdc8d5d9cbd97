# Copyright 2025 Trobz
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

import hashlib
from typing import Dict, MutableMapping, Optional, Type

from .cache import ArrayCache
from .exceptions import ConfigurationError
from .models import Tree
from .records import (
    GedcomRecord, Individual, Family, Source, Repository, Media, Note,
    Submitter, Submission, Header, RecordType,
)

import logging

logger = logging.getLogger(__name__)


class GedcomRecordFactory:
    """Builds records of one kind, memoizing them in the shared cache."""
    record_class: Type[GedcomRecord] = GedcomRecord

    def __init__(self, cache: ArrayCache):
        self.cache = cache

    def new(self, xref: str, old_gedcom: Optional[str], new_gedcom: Optional[str], tree: Tree) -> GedcomRecord:
        """Create a record from the two sides of a change.

        A missing new side means the record is pending deletion.
        """
        gedcom = old_gedcom or ""
        pending = new_gedcom if new_gedcom is not None else ""
        key = self._cache_key(xref, gedcom, pending, tree)
        return self.cache.remember(key, lambda: self.record_class(xref, gedcom, pending, tree))

    def _cache_key(self, xref: str, gedcom: str, pending: str, tree: Tree) -> str:
        digest = hashlib.sha1(f"{gedcom}\x00{pending}".encode("utf-8")).hexdigest()
        return f"{self.record_class.__name__}-{tree.id}-{xref}-{digest}"


class FamilyFactory(GedcomRecordFactory):
    record_class = Family


class HeaderFactory(GedcomRecordFactory):
    record_class = Header


class IndividualFactory(GedcomRecordFactory):
    record_class = Individual


class MediaFactory(GedcomRecordFactory):
    record_class = Media


class NoteFactory(GedcomRecordFactory):
    record_class = Note


class RepositoryFactory(GedcomRecordFactory):
    record_class = Repository


class SourceFactory(GedcomRecordFactory):
    record_class = Source


class SubmissionFactory(GedcomRecordFactory):
    record_class = Submission


class SubmitterFactory(GedcomRecordFactory):
    record_class = Submitter


FACTORY_CLASSES = (
    FamilyFactory,
    HeaderFactory,
    GedcomRecordFactory,
    IndividualFactory,
    MediaFactory,
    NoteFactory,
    RepositoryFactory,
    SourceFactory,
    SubmissionFactory,
    SubmitterFactory,
)


def register_factories(container: MutableMapping, cache: Optional[ArrayCache]) -> MutableMapping:
    """Store one instance of every factory in container, keyed by class."""
    if cache is None:
        raise ConfigurationError("No record cache is configured")
    for factory_class in FACTORY_CLASSES:
        container[factory_class] = factory_class(cache)
    logger.debug(f"Registered {len(FACTORY_CLASSES)} record factories")
    return container


def dispatch_table(container: MutableMapping) -> Dict[RecordType, GedcomRecordFactory]:
    """Map each record type tag to the registered factory building it."""
    table = {}
    for factory_class in FACTORY_CLASSES:
        record_type = factory_class.record_class.RECORD_TYPE
        if record_type is not None:
            table[record_type] = container[factory_class]
    return table
