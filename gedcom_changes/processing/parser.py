# Copyright 2025 Trobz
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

import re
from pathlib import Path
from typing import List, NamedTuple, Optional

import logging

logger = logging.getLogger(__name__)

REGEX_XREF = r"[A-Za-z0-9:_.-]{1,20}"
REGEX_TAG = r"[_A-Za-z][_A-Za-z0-9]*"

# Level-0 line: optional xref, tag, rest of the line
RE_LEVEL_0 = re.compile(r"^0 (?:@(" + REGEX_XREF + r")@ )?(" + REGEX_TAG + r")(?: (.*))?")


class GedcomChunk(NamedTuple):
    xref: str
    tag: str
    gedcom: str


class GedcomParser:
    def __init__(self, file_path: str):
        self.file_path = Path(file_path)
        if not self.file_path.is_file():
            raise FileNotFoundError(f"File not found: {self.file_path}")

    def parse(self) -> List[GedcomChunk]:
        chunks = []
        lines: List[str] = []
        with open(self.file_path, "r", encoding="utf-8-sig", newline="") as f:
            text = f.read()
        for line in re.split(r"\r\n|\r|\n", text):
            line = line.strip()
            if not line:
                continue
            if line.startswith("0 ") and lines:
                chunk = self._make_chunk(lines)
                if chunk:
                    chunks.append(chunk)
                lines = []
            lines.append(line)
        if lines:
            chunk = self._make_chunk(lines)
            if chunk:
                chunks.append(chunk)
        return chunks

    def _make_chunk(self, lines: List[str]) -> Optional[GedcomChunk]:
        match = RE_LEVEL_0.match(lines[0])
        if not match:
            logger.warning(f"Skipping malformed record starting with '{lines[0]}' in {self.file_path.name}")
            return None
        xref, tag = match.group(1), match.group(2)
        if tag == "TRLR":
            return None
        if tag == "HEAD":
            xref = "HEAD"
        if not xref:
            logger.warning(f"Skipping {tag} record without an xref in {self.file_path.name}")
            return None
        return GedcomChunk(xref=xref, tag=tag, gedcom="\n".join(lines))
