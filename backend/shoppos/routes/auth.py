# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/shoppos/routes/auth.py
"""
Authentication API routes

- Self-registration creates cashier accounts; only an authenticated admin
  may register someone with another role
- Session management with token-based auth
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..errors import AppError
from ..models import ROLE_CASHIER
from ..permissions import has_permission, get_role_permissions
from ..services import auth_service
from ..services import session_service
from ..decorators import bearer_token, require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _issue_session(user, status: int, message: str):
    session, token = session_service.create_session(
        user,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify({
        "user": user.to_dict(),
        "token": token,
        "session": session.to_dict(),
        "message": message,
    }), status


@auth_bp.post("/register")
def register_route():
    """
    Create an account and log it in.

    The requested role is honoured only when the caller holds MANAGE_USERS;
    anyone else gets a cashier account.
    """
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")

    if not all([username, password]):
        return jsonify({"error": "username and password required"}), 400

    role = ROLE_CASHIER
    requested_role = data.get("role")
    if requested_role and requested_role != ROLE_CASHIER:
        token = bearer_token()
        caller = session_service.validate_session(token) if token else None
        if not has_permission(caller, "MANAGE_USERS"):
            return jsonify({"error": "Only an admin can assign that role"}), 403
        role = requested_role

    try:
        user = auth_service.create_user(username, password, role=role)
    except AppError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500

    return _issue_session(user, 201, "User created successfully")


@auth_bp.post("/login")
def login_route():
    """Authenticate user and create session token."""
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400
        if not isinstance(username, str) or not isinstance(password, str):
            return jsonify({"error": "username and password must be strings"}), 400

        user = auth_service.authenticate(username, password)
        if not user:
            current_app.logger.info("Failed login for %r from %s", username, request.remote_addr)
            return jsonify({"error": "Invalid username or password"}), 401

        return _issue_session(user, 200, "Login successful")

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """Revoke session token (logout). Expects Authorization: Bearer <token>."""
    token = bearer_token()
    if not token:
        return jsonify({"error": "Authorization header required"}), 401

    if not session_service.revoke_session(token, reason="User logout"):
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user with the permission codes the UI filters on."""
    return jsonify({
        "user": g.current_user.to_dict(),
        "permissions": sorted(get_role_permissions(g.current_user.role)),
    }), 200
