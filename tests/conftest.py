"""Shared fixtures: a temporary sqlite database and a Flask test client."""

import pytest

from gedcom_changes.models import PendingChange, Tree
from gedcom_changes.processing.db import (
    sqlite_db,
    setup_database,
    insert_tree,
    insert_user,
)

ALPHA = Tree(id=1, name="alpha", title="Alpha family")
BETA = Tree(id=2, name="beta", title="Beta family")


class StubTreeService:
    def __init__(self, *trees):
        self.trees = {tree.name: tree for tree in trees}

    def all(self):
        return self.trees

    def find_by_name(self, name):
        return self.trees.get(name)


def make_change(change_id, tree, xref, old=None, new=None):
    return PendingChange(
        change_id=change_id,
        gedcom_id=tree.id,
        gedcom_name=tree.name,
        xref=xref,
        old_gedcom=old,
        new_gedcom=new,
        user_id=1,
        user_name="editor",
        real_name="Eddie Editor",
        change_time="2024-03-01 12:30:00",
    )


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "genealogy.db"
    with sqlite_db(str(path), create=True) as cursor:
        setup_database(cursor)
    return str(path)


@pytest.fixture
def seeded_db(db_path):
    """Two trees, alpha and beta, and one user, all without changes."""
    with sqlite_db(db_path) as cursor:
        alpha_id = insert_tree(cursor, "alpha", "Alpha family")
        beta_id = insert_tree(cursor, "beta", "Beta family")
        user_id = insert_user(cursor, "editor", "Eddie Editor")
    return {"path": db_path, "alpha": alpha_id, "beta": beta_id, "user_id": user_id}


@pytest.fixture
def client(seeded_db):
    from server import app

    app.config.update(TESTING=True, DATABASE_PATH=seeded_db["path"])
    with app.test_client() as client:
        yield client
