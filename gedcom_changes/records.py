# Copyright 2025 Trobz
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

import re
from enum import Enum
from typing import Optional

from .models import Tree
from .processing.parser import RE_LEVEL_0


class RecordType(str, Enum):
    INDIVIDUAL = "INDI"
    FAMILY = "FAM"
    SOURCE = "SOUR"
    REPOSITORY = "REPO"
    MEDIA = "OBJE"
    NOTE = "NOTE"
    SUBMITTER = "SUBM"
    SUBMISSION = "SUBN"
    HEADER = "HEAD"


class GedcomRecord:
    """A level-0 GEDCOM record, possibly carrying an unapproved edit.

    ``gedcom`` is the accepted text (empty for a record that only exists as a
    pending addition). ``pending`` is the proposed text: ``None`` when nothing
    is pending, an empty string when the record is pending deletion.
    """
    RECORD_TYPE: Optional[RecordType] = None

    def __init__(self, xref: str, gedcom: str, pending: Optional[str], tree: Tree):
        self.xref = xref
        self.gedcom = gedcom or ""
        self.pending = pending
        self.tree = tree

    def __repr__(self):
        return f"<{type(self).__name__} {self.tree.name}:{self.xref}>"

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def is_pending_addition(self) -> bool:
        return self.gedcom == "" and bool(self.pending)

    @property
    def is_pending_deletion(self) -> bool:
        return self.gedcom != "" and self.pending == ""

    @property
    def current_gedcom(self) -> str:
        """The text a moderator would see after accepting the change."""
        if self.pending is None:
            return self.gedcom
        return self.pending or self.gedcom

    @property
    def tag(self) -> Optional[str]:
        match = RE_LEVEL_0.match(self.current_gedcom)
        return match.group(2) if match else None

    @property
    def name(self) -> str:
        return self.extract_name() or self.xref

    def extract_name(self) -> Optional[str]:
        return None

    def first_fact(self, tag: str) -> Optional[str]:
        match = re.search(r"^1 " + tag + r" (.+)$", self.current_gedcom, re.MULTILINE)
        return match.group(1).strip() if match else None


class Individual(GedcomRecord):
    RECORD_TYPE = RecordType.INDIVIDUAL

    def extract_name(self):
        name = self.first_fact("NAME")
        if not name:
            return None
        return " ".join(name.replace("/", " ").split())


class Family(GedcomRecord):
    RECORD_TYPE = RecordType.FAMILY

    def extract_name(self):
        spouses = [self.first_fact(tag) for tag in ("HUSB", "WIFE")]
        spouses = [s.strip("@") for s in spouses if s]
        return " + ".join(spouses) or None


class Source(GedcomRecord):
    RECORD_TYPE = RecordType.SOURCE

    def extract_name(self):
        return self.first_fact("TITL")


class Repository(GedcomRecord):
    RECORD_TYPE = RecordType.REPOSITORY

    def extract_name(self):
        return self.first_fact("NAME")


class Media(GedcomRecord):
    RECORD_TYPE = RecordType.MEDIA

    def extract_name(self):
        return self.first_fact("TITL") or self.first_fact("FILE")


class Note(GedcomRecord):
    RECORD_TYPE = RecordType.NOTE

    def extract_name(self):
        match = RE_LEVEL_0.match(self.current_gedcom)
        if match and match.group(3):
            return match.group(3).strip()
        return None


class Submitter(GedcomRecord):
    RECORD_TYPE = RecordType.SUBMITTER

    def extract_name(self):
        return self.first_fact("NAME")


class Submission(GedcomRecord):
    RECORD_TYPE = RecordType.SUBMISSION


class Header(GedcomRecord):
    RECORD_TYPE = RecordType.HEADER

    def extract_name(self):
        return self.first_fact("SOUR") or "Header"
