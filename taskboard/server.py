#!/usr/bin/env python3
"""
Task Board Server
-----------------
JSON API over a BoardStore, for the UI layer (rendering, drag capture,
color pickers) that lives outside this package.

Usage:
    taskboard-server                       # defaults, ~/.local/share/taskboard/taskboard.db
    taskboard-server --port 3000 --db ./board.db
    taskboard-server --config ./taskboard.yaml

API:
    GET    /api/board                         → { board, theme, stats }
    PUT    /api/board/title                   { title }
    POST   /api/columns                       { name }            → 201 { column }
    PATCH  /api/columns/<id>                  { name?, color? }   → { column }
    DELETE /api/columns/<id>                                      → 409 if it holds tasks
    POST   /api/columns/move                  { sourceIndex, destIndex }
    POST   /api/columns/<id>/tasks            { title, description?, dueDate? } → 201 { task }
    PUT    /api/tasks/<id>                    { title?, description?, dueDate?, columnId? }
    DELETE /api/columns/<cid>/tasks/<tid>
    POST   /api/reorder                       { sourceColumnId, sourceIndex, destColumnId, destIndex }
    GET    /api/export                        → task-board.json download
    POST   /api/import                        multipart "file" or raw JSON body
    GET    /api/theme ; PUT /api/theme { theme } ; POST /api/theme/toggle
    GET    /health
"""

import argparse
import hmac
import io
import logging
import sys
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, send_file

from .board import BoardStore
from .codec import dumps
from .config import Config
from .errors import (
    BoardError,
    NotFound,
    ColumnNotEmpty,
    ValidationError,
    ImportFailed,
    PersistenceError,
)
from .reorder import ReorderRequest
from .schema import Task, Theme
from .store import SnapshotStore

logger = logging.getLogger(__name__)

STATUS_FOR_ERROR = [
    (NotFound, 404),
    (ColumnNotEmpty, 409),
    (ValidationError, 400),
    (ImportFailed, 400),
    (PersistenceError, 500),
]


def _status_for(error: BoardError) -> int:
    for kind, status in STATUS_FOR_ERROR:
        if isinstance(error, kind):
            return status
    return 400


def _json_body() -> dict:
    data = request.get_json(force=True, silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _int_field(data: dict, key: str) -> int:
    value = data.get(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    return value


def create_app(
    board_store: BoardStore,
    snapshot_store: Optional[SnapshotStore] = None,
    config: Optional[Config] = None,
) -> Flask:
    """Build the Flask app bound to one BoardStore."""
    config = config or Config()
    app = Flask(__name__)

    # ── Auth ─────────────────────────────────────────────────────────────

    def require_api_key(f):
        """Decorator: when an API secret is configured, require X-API-Key."""
        @wraps(f)
        def decorated(*args, **kwargs):
            if not config.api_secret:
                return f(*args, **kwargs)
            provided = request.headers.get("X-API-Key", "").strip()
            if not hmac.compare_digest(provided, config.api_secret):
                code = 401 if not provided else 403
                return jsonify({"error": "Unauthorized"}), code
            return f(*args, **kwargs)
        return decorated

    # ── Errors ───────────────────────────────────────────────────────────

    @app.errorhandler(BoardError)
    def handle_board_error(error: BoardError):
        status = _status_for(error)
        if status >= 500:
            logger.error(f"{request.method} {request.path} failed: {error}")
        return jsonify({"error": str(error), "kind": type(error).__name__}), status

    def current_theme() -> Theme:
        return snapshot_store.load_theme() if snapshot_store else Theme.DARK

    # ── Board ────────────────────────────────────────────────────────────

    @app.route("/api/board")
    def api_board():
        columns, tasks = board_store.summary()
        return jsonify({
            "board": board_store.export_document(),
            "theme": current_theme().value,
            "stats": {"columns": columns, "tasks": tasks},
        })

    @app.route("/api/board/title", methods=["PUT"])
    @require_api_key
    def api_board_title():
        data = _json_body()
        board = board_store.rename_board(data.get("title"))
        return jsonify({"boardTitle": board.title})

    # ── Columns ──────────────────────────────────────────────────────────

    @app.route("/api/columns", methods=["POST"])
    @require_api_key
    def api_add_column():
        data = _json_body()
        name = data.get("name", "")
        if not isinstance(name, str):
            raise ValidationError("name must be a string")
        column = board_store.add_column(name)
        return jsonify({"column": column.to_dict()}), 201

    @app.route("/api/columns/<column_id>", methods=["PATCH"])
    @require_api_key
    def api_update_column(column_id):
        data = _json_body()
        column = board_store.update_column(
            column_id, name=data.get("name"), color=data.get("color")
        )
        return jsonify({"column": column.to_dict()})

    @app.route("/api/columns/<column_id>", methods=["DELETE"])
    @require_api_key
    def api_delete_column(column_id):
        board_store.delete_column(column_id)
        return jsonify({"deleted": column_id})

    @app.route("/api/columns/move", methods=["POST"])
    @require_api_key
    def api_move_column():
        data = _json_body()
        board = board_store.move_column(
            _int_field(data, "sourceIndex"), _int_field(data, "destIndex")
        )
        return jsonify({"board": board.to_dict()})

    # ── Tasks ────────────────────────────────────────────────────────────

    @app.route("/api/columns/<column_id>/tasks", methods=["POST"])
    @require_api_key
    def api_add_task(column_id):
        data = _json_body()
        description = data.get("description") or ""
        if not isinstance(description, str):
            raise ValidationError("description must be a string")
        task = board_store.add_task(
            column_id,
            data.get("title"),
            description=description,
            due_date=data.get("dueDate"),
        )
        return jsonify({"task": task.to_dict()}), 201

    @app.route("/api/tasks/<task_id>", methods=["PUT"])
    @require_api_key
    def api_update_task(task_id):
        data = _json_body()
        existing = board_store.find_task(task_id)
        description = data.get("description", existing.description)
        if description is not None and not isinstance(description, str):
            raise ValidationError("description must be a string")
        task = Task(
            id=task_id,
            title=data.get("title", existing.title),
            column_id=data.get("columnId") or existing.column_id,
            description=description or "",
            due_date=data.get("dueDate", existing.due_date),
        )
        updated = board_store.update_task(task)
        return jsonify({"task": updated.to_dict()})

    @app.route("/api/columns/<column_id>/tasks/<task_id>", methods=["DELETE"])
    @require_api_key
    def api_delete_task(column_id, task_id):
        deleted = board_store.delete_task(task_id, column_id)
        return jsonify({"deleted": deleted})

    @app.route("/api/reorder", methods=["POST"])
    @require_api_key
    def api_reorder():
        reorder_request = ReorderRequest.from_dict(_json_body())
        board = board_store.apply(reorder_request)
        return jsonify({"board": board.to_dict()})

    # ── Import / export ──────────────────────────────────────────────────

    @app.route("/api/export")
    def api_export():
        payload = dumps(board_store.board).encode("utf-8")
        return send_file(
            io.BytesIO(payload),
            mimetype="application/json",
            as_attachment=True,
            download_name=config.export_filename,
        )

    @app.route("/api/import", methods=["POST"])
    @require_api_key
    def api_import():
        upload = request.files.get("file")
        raw = upload.read() if upload is not None else request.get_data()
        board = board_store.import_document(raw)
        return jsonify({"board": board.to_dict()})

    # ── Theme ────────────────────────────────────────────────────────────

    @app.route("/api/theme", methods=["GET"])
    def api_theme_get():
        return jsonify({"theme": current_theme().value})

    @app.route("/api/theme", methods=["PUT"])
    @require_api_key
    def api_theme_set():
        if snapshot_store is None:
            return jsonify({"error": "theme storage not configured"}), 503
        value = str(_json_body().get("theme", "")).strip().lower()
        if value not in {t.value for t in Theme}:
            raise ValidationError("theme must be 'dark' or 'light'")
        return jsonify({"theme": snapshot_store.save_theme(Theme(value)).value})

    @app.route("/api/theme/toggle", methods=["POST"])
    @require_api_key
    def api_theme_toggle():
        if snapshot_store is None:
            return jsonify({"error": "theme storage not configured"}), 503
        return jsonify({"theme": snapshot_store.toggle_theme().value})

    @app.route("/health")
    def health():
        columns, tasks = board_store.summary()
        return jsonify({
            "status": "ok",
            "db": snapshot_store.db_path if snapshot_store else None,
            "columns": columns,
            "tasks": tasks,
        })

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Task Board Server")
    parser.add_argument("--config", help="Path to taskboard.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to the board database (overrides TASKBOARD_DB)")
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    if args.host:
        cfg.host = args.host
    if args.port:
        cfg.port = args.port
    if args.db:
        cfg.db_path = args.db
        cfg.resolve_paths()

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s [taskboard] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    snapshots = SnapshotStore(cfg.db_path)
    board_store = BoardStore(snapshots)
    app = create_app(board_store, snapshots, cfg)

    columns, tasks = board_store.summary()
    logger.info(f"Serving http://{cfg.host}:{cfg.port}  db={cfg.db_path}")
    logger.info(f"Board loaded: {columns} columns, {tasks} tasks")

    # One request at a time: the board accepts a single mutation at once
    app.run(host=cfg.host, port=cfg.port, debug=False, threaded=False)


if __name__ == "__main__":
    main()
