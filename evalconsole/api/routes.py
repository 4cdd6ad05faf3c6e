"""
Flask route handlers for the local console API.
"""

import logging
from dataclasses import asdict
from datetime import datetime, timezone

from flask import g, jsonify, request

from evalconsole.api.auth import screen_required
from evalconsole.config import API_BASE_URL, MAX_TABLE_ROWS
from evalconsole.dashboard import build_dashboard, dashboard_to_dict, load_records
from evalconsole.errors import ConsoleApiError, NetworkFailure, ServiceUnavailable, Unauthorized, user_message
from evalconsole.filters import parse_filter_state, parse_sort_state
from evalconsole.rbac import capabilities, menu_items, resolve_navigation

logger = logging.getLogger(__name__)


def session_payload(session):
    """Serialise a Session for the browser; tokens never leave the console."""
    caps = capabilities(session.role_name)
    return {
        "is_authenticated": session.is_authenticated,
        "is_loading": session.is_loading,
        "user": session.user.to_dict() if session.user else None,
        "role": caps.role,
        "capabilities": asdict(caps),
        "default_route": caps.default_route,
    }


def register_routes(app, manager, client):
    """Register all console routes on the Flask *app*."""

    # ── Health / info ────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "service": "HR Evaluation Console API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "session": "/api/session",
                "login": "/api/auth/login",
                "logout": "/api/auth/logout",
                "navigate": "/api/navigate/<screen>",
                "menu": "/api/menu",
                "dashboard": "/api/dashboard",
                "my_evaluations": "/api/my-evaluations",
                "health": "/health",
            },
        })

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({
            "status": "healthy",
            "session_state": manager.state,
            "api_base_url": API_BASE_URL,
        }), 200

    # ── Session ──────────────────────────────────────────────────────

    @app.route("/api/session", methods=["GET"])
    def get_session():
        return jsonify(session_payload(manager.session)), 200

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        if not request.is_json:
            return jsonify({"error": "Content-Type must be application/json"}), 400

        data = request.json or {}
        email = (data.get("email") or "").strip()
        password = data.get("password") or ""
        if not email or not password:
            return jsonify({"error": "email and password are required"}), 400

        session = manager.login(email, password)
        return jsonify({"success": True, **session_payload(session)}), 200

    @app.route("/api/auth/logout", methods=["POST"])
    def logout():
        manager.logout()
        return jsonify({"success": True, "message": "Logged out successfully"}), 200

    # ── Navigation ───────────────────────────────────────────────────

    @app.route("/api/navigate/<screen>", methods=["GET"])
    def navigate(screen):
        decision = resolve_navigation(manager.session, screen)
        return jsonify(asdict(decision)), 200

    @app.route("/api/menu", methods=["GET"])
    @screen_required(manager, "my_evaluations")
    def get_menu():
        return jsonify({"items": menu_items(g.session.role_name)}), 200

    # ── Evaluations ──────────────────────────────────────────────────

    def _render_evaluations(personal):
        filter_state = parse_filter_state(request.args)
        sort_state = parse_sort_state(request.args)
        limit = request.args.get("limit", MAX_TABLE_ROWS, type=int) or MAX_TABLE_ROWS
        limit = max(1, min(limit, MAX_TABLE_ROWS))

        records = load_records(client, g.capabilities, filter_state.period_id, personal=personal)
        view = build_dashboard(records, filter_state, sort_state, now=datetime.now(timezone.utc))
        payload = dashboard_to_dict(view)
        payload["truncated"] = len(payload["rows"]) > limit
        payload["rows"] = payload["rows"][:limit]
        payload["filters"] = asdict(filter_state)
        payload["sort"] = asdict(sort_state)
        return jsonify(payload), 200

    @app.route("/api/dashboard", methods=["GET"])
    @screen_required(manager, "dashboard")
    def get_dashboard():
        return _render_evaluations(personal=False)

    @app.route("/api/my-evaluations", methods=["GET"])
    @screen_required(manager, "my_evaluations")
    def get_my_evaluations():
        return _render_evaluations(personal=True)

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(ConsoleApiError)
    def api_error(e):
        if isinstance(e, Unauthorized):
            code = 401
        elif isinstance(e, ServiceUnavailable):
            code = 503
        else:
            code = 502
        if not isinstance(e, (Unauthorized, ServiceUnavailable, NetworkFailure)):
            logger.error("Evaluation API error (%s): %s", e.status, e)
        return jsonify({"error": user_message(e), "details": str(e), "status": e.status}), code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
