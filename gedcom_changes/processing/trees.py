from typing import Dict, Optional

from ..models import Tree


class TreeService:
    """Looks up the trees known to the installation."""

    def __init__(self, cursor):
        self.cursor = cursor
        self._trees: Optional[Dict[str, Tree]] = None

    def all(self) -> Dict[str, Tree]:
        """All trees keyed by name, ordered by title then name."""
        if self._trees is None:
            rows = self.cursor.execute(
                """
                SELECT gedcom_id AS id, gedcom_name AS name, title
                FROM gedcom
                ORDER BY COALESCE(title, gedcom_name), gedcom_name
                """
            ).fetchall()
            self._trees = {row["name"]: Tree.model_validate(dict(row)) for row in rows}
        return self._trees

    def find_by_name(self, name: str) -> Optional[Tree]:
        return self.all().get(name)
