"""
Flask application factory and server entry-point for the local console API.
"""

import os

from flask import Flask
from flask_cors import CORS

from evalconsole.api.routes import register_routes
from evalconsole.api_client import ApiClient
from evalconsole.config import API_BASE_URL, CONSOLE_SECRET_KEY, get_env
from evalconsole.credentials import init_credential_store
from evalconsole.session import SessionManager


def build_manager(client=None, store=None):
    """Wire an ApiClient and credential store into a SessionManager."""
    holder = {}
    if client is None:
        client = ApiClient(token_provider=lambda: holder["manager"].token)
    if store is None:
        store = init_credential_store()
    manager = SessionManager(client, store)
    holder["manager"] = manager
    return manager


def create_app(manager=None, restore=True):
    """Build and return a fully configured Flask application."""
    app = Flask(__name__)
    app.config["SECRET_KEY"] = CONSOLE_SECRET_KEY
    CORS(app)

    # ── Session ──────────────────────────────────────────────────────
    if manager is None:
        manager = build_manager()
    if restore:
        print("[init] Restoring persisted session...")
        session = manager.restore()
        if session.is_authenticated:
            print(f"[init] ✓ Session restored for {session.user.display_name} (role={session.role_name})")
        else:
            print("[init] No active session, login required")

    app.extensions["evalconsole"] = manager

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, manager, manager.client)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("HR Evaluation Console – local API server")
    print("=" * 60)

    app = create_app()

    host = os.getenv("CONSOLE_HOST", "127.0.0.1")
    port = int(os.getenv("CONSOLE_PORT", "5050"))
    debug = os.getenv("FLASK_ENV") == "development"
    if not debug:
        # Outside development the secret must come from the environment.
        app.config["SECRET_KEY"] = get_env("CONSOLE_SECRET_KEY")

    print(f"\n[server] Starting Flask API on {host}:{port}")
    print(f"[server] Debug mode: {debug}")
    print(f"[server] Evaluation API: {API_BASE_URL}")
    print("\nAPI Endpoints:")
    print(f"  - GET  http://{host}:{port}/api/session")
    print(f"  - POST http://{host}:{port}/api/auth/login")
    print(f"  - POST http://{host}:{port}/api/auth/logout")
    print(f"  - GET  http://{host}:{port}/api/navigate/<screen>")
    print(f"  - GET  http://{host}:{port}/api/dashboard")
    print(f"  - GET  http://{host}:{port}/api/my-evaluations")
    print(f"  - GET  http://{host}:{port}/health")
    print("\n" + "=" * 60)

    # Single session per process; keep request handling on one thread.
    app.run(host=host, port=port, debug=debug, threaded=False)


if __name__ == "__main__":
    main()
