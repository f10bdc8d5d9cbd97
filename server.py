import sqlite3
from urllib.parse import urlparse
from flask import Flask, request, render_template, g, current_app, url_for
from flask_restful import abort, Api, Resource
from config import (
    FLASK_HOST, FLASK_PORT, DEBUG, DATABASE_PATH, CORS_ALLOW, LOG_LEVEL, RECORD_CACHE_TTL
)

from gedcom_changes.cache import ArrayCache
from gedcom_changes.exceptions import ConfigurationError
from gedcom_changes.factories import register_factories
from gedcom_changes.i18n import translate
from gedcom_changes.models import PendingChange, Tree
from gedcom_changes.processing.db import sqlite_db, count_pending_changes
from gedcom_changes.processing.pending import PendingChangesAggregator
from gedcom_changes.processing.trees import TreeService

import logging

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["DATABASE_PATH"] = DATABASE_PATH
app.extensions["cache.array"] = ArrayCache(default_ttl=RECORD_CACHE_TTL)
api = Api(app)
app_name = 'gedcom-pending-changes'

# Add headers to all responses
@app.after_request
def add_headers(response):
    # Add common security headers
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-XSS-Protection'] = '1; mode=block'
    # Add CORS headers
    response.headers['Access-Control-Allow-Origin'] = CORS_ALLOW
    response.headers['X-Application-Name'] = app_name
    return response


@app.before_request
def register_record_factories():
    # Fresh factory instances for every request, all sharing the one cache
    cache = current_app.extensions.get("cache.array")
    g.record_factories = register_factories({}, cache)
    cache.cleanup_expired()


@app.url_value_preprocessor
def pull_tree(endpoint, values):
    if not values or "tree" not in values:
        return
    tree_name = values.pop("tree")
    with sqlite_db(current_app.config["DATABASE_PATH"]) as cursor:
        tree = TreeService(cursor).find_by_name(tree_name)
    if tree is None:
        abort(404, message=f"Tree '{tree_name}' does not exist")
    g.tree = tree


def current_tree() -> Tree:
    tree = g.get("tree")
    if tree is None:
        raise ConfigurationError(f"Endpoint {request.endpoint} has no tree in its URL")
    return tree


def continue_url(tree: Tree) -> str:
    """The ?url= target if it stays on this site, else the tree page."""
    url = request.args.get('url', '').strip()
    parsed = urlparse(url)
    if url and "\\" not in url and (
        (not parsed.scheme and not parsed.netloc and url.startswith('/'))
        or (parsed.scheme in ('http', 'https') and parsed.netloc == request.host)
    ):
        return url
    return url_for('tree_page', tree=tree.name)


def pending_changes_view(tree: Tree, url: str) -> dict:
    with sqlite_db(current_app.config["DATABASE_PATH"]) as cursor:
        aggregator = PendingChangesAggregator(g.record_factories, TreeService(cursor))
        return aggregator.view(tree, url, cursor)


def dump_change(row: PendingChange) -> dict:
    data = row.model_dump(mode="json", exclude={"record"})
    data["record_type"] = row.record.kind
    data["record_name"] = row.record.name
    return data


class PendingChangesResource(Resource):
    def get(self):
        tree = current_tree()
        url = continue_url(tree)

        try:
            view = pending_changes_view(tree, url)
        except sqlite3.Error as e:
            abort(500, message=f"Database error occurred: {str(e)}")

        return {
            "active_tree_name": view["active_tree_name"],
            "url": url,
            "changes": {
                tree_name: {
                    xref: [dump_change(row) for row in rows]
                    for xref, rows in records.items()
                }
                for tree_name, records in view["changes"].items()
            },
        }

api.add_resource(PendingChangesResource, '/api/tree/<string:tree>/pending-changes')


@app.route('/')
def index():
    with sqlite_db(current_app.config["DATABASE_PATH"]) as cursor:
        trees = TreeService(cursor).all()
    return render_template("index.html", trees=trees, title=translate("Family trees"))


@app.route('/tree/<tree>/')
def tree_page():
    tree = current_tree()
    with sqlite_db(current_app.config["DATABASE_PATH"]) as cursor:
        pending_count = count_pending_changes(cursor, tree.id)
    return render_template("tree-page.html", tree=tree, title=tree.display_title(), pending_count=pending_count)


@app.route('/tree/<tree>/pending-changes')
def pending_changes():
    tree = current_tree()
    url = continue_url(tree)
    logger.info(f"GET {request.full_path}")
    return render_template("pending-changes-page.html", **pending_changes_view(tree, url))


if __name__ == '__main__':
    app.run(host=FLASK_HOST, port=FLASK_PORT, debug=DEBUG)
