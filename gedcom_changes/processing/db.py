import sqlite3
import contextlib
from pathlib import Path
from typing import List, Optional

from ..models import PendingChange

from config import (
    DATABASE_PATH
)

import logging

logger = logging.getLogger(__name__)

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"


@contextlib.contextmanager
def sqlite_db(db_path: Optional[str] = None, clean: bool = False, create: bool = False):
    db_path = Path(db_path or DATABASE_PATH)
    if clean and db_path.exists():
        db_path.unlink()
    logger.debug(f"Connecting to {db_path}")
    if not db_path.exists() and not (clean or create):
        err_msg = 'Database %s does not exist, run "python manage.py init" first' % db_path
        logger.error(err_msg)
        raise OSError(err_msg)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    cursor = conn.cursor()

    try:
        yield cursor
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        conn.close()


def setup_database(cursor) -> None:
    cursor.executescript(
        """
        CREATE TABLE IF NOT EXISTS gedcom (
            gedcom_id INTEGER PRIMARY KEY AUTOINCREMENT,
            gedcom_name TEXT NOT NULL UNIQUE,
            title TEXT
        );
        CREATE TABLE IF NOT EXISTS user (
            user_id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_name TEXT NOT NULL UNIQUE,
            real_name TEXT
        );
        CREATE TABLE IF NOT EXISTS change (
            change_id INTEGER PRIMARY KEY AUTOINCREMENT,
            gedcom_id INTEGER NOT NULL REFERENCES gedcom (gedcom_id) ON DELETE CASCADE,
            xref TEXT NOT NULL,
            old_gedcom TEXT,
            new_gedcom TEXT,
            user_id INTEGER NOT NULL REFERENCES user (user_id),
            change_time TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'accepted', 'rejected'))
        );
        CREATE INDEX IF NOT EXISTS change_status_ix
            ON change (status, gedcom_id, xref, change_id);
        """
    )


def fetch_pending_changes(cursor) -> List[PendingChange]:
    """All pending changes of every tree, ordered by tree, xref and change."""
    cursor.execute(
        """
        SELECT change.*, user.user_name, user.real_name, gedcom.gedcom_name
        FROM change
        JOIN user ON user.user_id = change.user_id
        JOIN gedcom ON gedcom.gedcom_id = change.gedcom_id
        WHERE change.status = ?
        ORDER BY change.gedcom_id, change.xref, change.change_id
        """,
        (PENDING,),
    )
    return [PendingChange.model_validate(dict(row)) for row in cursor.fetchall()]


def count_pending_changes(cursor, gedcom_id: int) -> int:
    cursor.execute(
        "SELECT COUNT(*) FROM change WHERE status = ? AND gedcom_id = ?",
        (PENDING, gedcom_id),
    )
    return cursor.fetchone()[0]


def insert_tree(cursor, name: str, title: Optional[str] = None) -> int:
    cursor.execute("INSERT INTO gedcom (gedcom_name, title) VALUES (?, ?)", (name, title))
    logger.info(f"Created tree '{name}'.")
    return cursor.lastrowid


def insert_user(cursor, user_name: str, real_name: Optional[str] = None) -> int:
    cursor.execute("INSERT INTO user (user_name, real_name) VALUES (?, ?)", (user_name, real_name))
    logger.info(f"Created user '{user_name}'.")
    return cursor.lastrowid


def find_user_id(cursor, user_name: str) -> Optional[int]:
    row = cursor.execute("SELECT user_id FROM user WHERE user_name = ?", (user_name,)).fetchone()
    return row["user_id"] if row else None


def insert_change(
    cursor,
    gedcom_id: int,
    xref: str,
    old_gedcom: Optional[str],
    new_gedcom: Optional[str],
    user_id: int,
    change_time: Optional[str] = None,
) -> int:
    if change_time is None:
        cursor.execute(
            """
            INSERT INTO change (gedcom_id, xref, old_gedcom, new_gedcom, user_id)
            VALUES (?, ?, ?, ?, ?)
            """,
            (gedcom_id, xref, old_gedcom, new_gedcom, user_id),
        )
    else:
        cursor.execute(
            """
            INSERT INTO change (gedcom_id, xref, old_gedcom, new_gedcom, user_id, change_time)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (gedcom_id, xref, old_gedcom, new_gedcom, user_id, change_time),
        )
    return cursor.lastrowid


def set_change_status(cursor, status: str, gedcom_id: int, xref: Optional[str] = None) -> int:
    """Accept or reject the pending changes of a tree, or of one record in it."""
    if status not in (ACCEPTED, REJECTED):
        raise ValueError(f"Cannot move pending changes to status '{status}'")
    query = "UPDATE change SET status = ? WHERE status = ? AND gedcom_id = ?"
    params = [status, PENDING, gedcom_id]
    if xref:
        query += " AND xref = ?"
        params.append(xref)
    cursor.execute(query, tuple(params))
    logger.info(f"Marked {cursor.rowcount} pending changes as {status}.")
    return cursor.rowcount
