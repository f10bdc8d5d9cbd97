import sqlite3

import pytest

from gedcom_changes.exceptions import ConfigurationError
from gedcom_changes.processing.db import sqlite_db, insert_change


@pytest.fixture
def beta_change(seeded_db):
    with sqlite_db(seeded_db["path"]) as cursor:
        insert_change(
            cursor, seeded_db["beta"], "I1", None,
            "0 @I1@ INDI\n1 NAME Bo /Berg/", seeded_db["user_id"], "2024-05-01 09:15:00",
        )
        insert_change(
            cursor, seeded_db["beta"], "I1", None,
            "0 @I1@ INDI\n1 NAME Bo /Bergman/", seeded_db["user_id"], "2024-05-02 10:00:00",
        )


def test_security_headers(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Application-Name"] == "gedcom-pending-changes"


def test_index_lists_trees(client):
    html = client.get("/").get_data(as_text=True)
    assert 'href="/tree/alpha/"' in html
    assert "Beta family" in html


def test_unknown_tree_is_404(client):
    assert client.get("/tree/gamma/pending-changes").status_code == 404
    assert client.get("/api/tree/gamma/pending-changes").status_code == 404


def test_tree_page_counts_pending_changes(client, beta_change):
    html = client.get("/tree/beta/").get_data(as_text=True)
    assert "2 pending changes" in html
    assert 'href="/tree/beta/pending-changes"' in html


def test_pending_changes_page_activates_tree_with_changes(client, beta_change):
    response = client.get("/tree/alpha/pending-changes")
    html = response.get_data(as_text=True)

    assert response.status_code == 200
    assert "<title>Pending changes</title>" in html
    assert 'class="nav-link active" href="#beta"' in html
    assert 'href="#alpha"' not in html
    assert "Bo Berg" in html
    assert "Eddie Editor" in html
    assert 'class="continue" href="/tree/alpha/"' in html


def test_pending_changes_page_honours_url_parameter(client):
    html = client.get("/tree/alpha/pending-changes?url=/tree/beta/").get_data(as_text=True)
    assert "There are no pending changes." in html
    assert 'class="continue" href="/tree/beta/"' in html


def test_pending_changes_api(client, beta_change):
    response = client.get("/api/tree/alpha/pending-changes")
    data = response.get_json()

    assert response.status_code == 200
    assert data["active_tree_name"] == "beta"
    assert data["url"] == "/tree/alpha/"
    rows = data["changes"]["beta"]["I1"]
    assert [row["change_time"] for row in rows] == ["2024-05-01T09:15:00", "2024-05-02T10:00:00"]
    assert rows[0]["record_type"] == "Individual"
    assert rows[0]["record_name"] == "Bo Berg"
    assert rows[1]["record_name"] == "Bo Bergman"
    assert "record" not in rows[0]


def test_pending_changes_api_reports_database_errors(client, monkeypatch):
    def broken(cursor):
        raise sqlite3.OperationalError("no such table: change")

    monkeypatch.setattr("gedcom_changes.processing.pending.fetch_pending_changes", broken)
    response = client.get("/api/tree/alpha/pending-changes")

    assert response.status_code == 500
    assert "no such table" in response.get_json()["message"]


def test_missing_cache_is_fatal(client, monkeypatch):
    from server import app

    monkeypatch.delitem(app.extensions, "cache.array")
    with pytest.raises(ConfigurationError):
        client.get("/tree/alpha/pending-changes")


@pytest.mark.parametrize("target", [
    "javascript:alert(1)",
    "//evil.example/tree/",
    "https://evil.example/tree/",
    "/\\evil.example",
    "tree/beta/",
])
def test_offsite_url_parameter_falls_back_to_tree_page(client, target):
    html = client.get("/tree/alpha/pending-changes", query_string={"url": target}).get_data(as_text=True)
    assert 'class="continue" href="/tree/alpha/"' in html

    data = client.get("/api/tree/alpha/pending-changes", query_string={"url": target}).get_json()
    assert data["url"] == "/tree/alpha/"


def test_same_host_absolute_url_is_kept(client):
    data = client.get(
        "/api/tree/alpha/pending-changes", query_string={"url": "http://localhost/tree/beta/"}
    ).get_json()
    assert data["url"] == "http://localhost/tree/beta/"
