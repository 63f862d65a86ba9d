"""
Tracker API routes

Flask blueprints for sync configuration, the activity feed and reports.
"""

import logging
from functools import wraps

from flask import Blueprint, current_app, jsonify, request

from core.settings import SERVER
from datetime_utils import ensure_utc

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")
auth_bp = Blueprint("google_auth", __name__)

AUTH_SUCCESS_PAGE = """
<html>
  <body>
    <script>
      if (window.opener) {
        window.opener.postMessage({ type: 'GOOGLE_AUTH_SUCCESS' }, '*');
        window.close();
      }
    </script>
    <p>Authentication successful! You can close this window.</p>
  </body>
</html>
"""


def services():
    return current_app.extensions["tracker"]


def json_errors(f):
    """Log unexpected failures and answer with a generic 500."""

    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error in {request.path}: {e}")
            return jsonify({"error": "Internal Server Error"}), 500

    return decorated


# ----- Google OAuth -----


@api_bp.route("/auth/google/url", methods=["GET"])
def google_auth_url():
    auth = services().auth
    if not auth.is_available:
        return jsonify({"error": "Google OAuth is not configured"}), 503
    return jsonify({"url": auth.authorization_url()})


@auth_bp.route("/auth/google/callback", methods=["GET"])
def google_auth_callback():
    code = request.args.get("code")
    if not code:
        return "Missing authorization code", 400
    try:
        tokens = services().auth.authorize(code)
        services().store.set_credentials(tokens.access_token, tokens.refresh_token)
    except Exception as e:
        logger.error(f"Google Auth Error: {e}")
        return "Authentication failed", 500
    return AUTH_SUCCESS_PAGE


# ----- Sync settings -----


@api_bp.route("/sync/settings", methods=["POST"])
@json_errors
def update_sync_settings():
    data = request.get_json(silent=True) or {}
    spreadsheet_id = (data.get("spreadsheetId") or "").strip()
    if not spreadsheet_id:
        return jsonify({"error": "spreadsheetId is required"}), 400
    services().store.set_spreadsheet_id(spreadsheet_id)
    return jsonify({"success": True})


@api_bp.route("/sync/status", methods=["GET"])
@json_errors
def sync_status():
    return jsonify(services().store.status())


@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "poller": services().sync.status()})


# ----- Activity and reports -----


@api_bp.route("/activity", methods=["GET"])
@json_errors
def activity():
    limit = request.args.get("limit", SERVER.activity_limit, type=int)
    limit = max(1, min(limit, SERVER.activity_limit_max))
    entries = services().ledger.list(limit=limit)
    return jsonify(
        [
            {
                "id": entry.id,
                "user_name": entry.user_name,
                "project_name": entry.project_name,
                "task": entry.task,
                "manhours": entry.manhours,
                "timestamp": ensure_utc(entry.timestamp).isoformat() if entry.timestamp else None,
            }
            for entry in entries
        ]
    )


@api_bp.route("/reports/user-performance", methods=["GET"])
@json_errors
def user_performance():
    return jsonify({"data": services().reports.user_performance()})


@api_bp.route("/reports/utilization", methods=["GET"])
@json_errors
def utilization():
    return jsonify(services().reports.project_utilization())


@api_bp.route("/stats", methods=["GET"])
@json_errors
def stats():
    return jsonify(services().reports.dashboard_stats())


@api_bp.route("/projects", methods=["GET"])
@json_errors
def projects():
    return jsonify(services().directory.list_projects())


@api_bp.route("/users", methods=["GET"])
@json_errors
def users():
    return jsonify(services().directory.list_users())
