"""
Navigation guard for the Flask facade.
"""

from functools import wraps

from flask import g, jsonify

from evalconsole.config import ROUTE_LOGIN
from evalconsole.rbac import capabilities, resolve_navigation


def screen_required(manager, screen: str):
    """
    Decorator that protects an endpoint behind the navigation guard for *screen*.

    - session still restoring          -> 503 {"status": "loading"}
    - not authenticated                -> 401 {"redirect_to": "/login"}
    - authenticated, capability denied -> 403 {"redirect_to": <default route>}
    """
    def wrapper(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            session = manager.session
            decision = resolve_navigation(session, screen)

            if decision.action == "loading":
                return jsonify({"status": "loading", "message": "Session is being restored"}), 503

            if decision.action == "redirect":
                code = 401 if decision.target == ROUTE_LOGIN else 403
                return jsonify({"error": decision.reason, "redirect_to": decision.target}), code

            # Attach the resolved state to the request context
            g.session = session
            g.capabilities = capabilities(session.role_name)
            g.route_decision = decision

            return f(*args, **kwargs)

        return decorated

    return wrapper
