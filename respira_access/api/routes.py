"""
Flask route handlers for the REST API.
"""

import asyncio
import os
import sys
import traceback
from datetime import datetime, timedelta

from flask import request, jsonify

from respira_access.affordances import affordance_for
from respira_access.config import TOKEN_EXPIRY_HOURS
from respira_access.decision import Guard, account_status, dashboard_for
from respira_access.identity_store import load_identity, load_person
from respira_access.masks import apply_mask
from respira_access.models import Address, AccessRequirements, NotFound
from respira_access.rbac import capabilities_for, parse_role, route_permissions
from respira_access.session import SessionResolutionError
from respira_access.validators import as_kind, validate
from respira_access.api.auth import (
    sessions,
    generate_token,
    token_required,
    access_required,
    resolve_request_auth,
    session_failure_response,
    cleanup_expired_sessions,
)


def _flag(name: str, default: bool) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _list_arg(name: str):
    values = []
    for raw in request.args.getlist(name):
        values.extend(v.strip() for v in raw.split(",") if v.strip())
    return values


def _identity_json(identity):
    return {
        "id": identity.id,
        "name": identity.name,
        "role": identity.role.value if identity.role else None,
        "is_approved": identity.is_approved,
        "profile_complete": identity.profile_complete,
        "status": account_status(identity),
    }


def register_routes(app, engine, address_lookup):
    """Register all API routes on the Flask *app*."""

    # ── Health / info ────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "service": "Respira Access API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "token": "/api/auth/token",
                "logout": "/api/auth/logout",
                "access": "/api/me/access",
                "dashboard": "/api/me/dashboard",
                "validate": "/api/validate/<kind>",
                "cep": "/api/cep/<cep>",
                "health": "/health",
            },
        })

    @app.route("/health", methods=["GET"])
    def health():
        from sqlalchemy import text as sa_text

        checks = {"database": False, "address_lookup": address_lookup is not None}
        try:
            if engine:
                with engine.connect() as conn:
                    conn.execute(sa_text("SELECT 1"))
                checks["database"] = True
        except Exception as e:
            print(f"[WARN] Health check could not reach DB: {e}", file=sys.stderr)

        all_healthy = all(checks.values())
        return jsonify({
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
            "active_sessions": len(sessions),
        }), 200 if all_healthy else 503

    # ── Auth ─────────────────────────────────────────────────────────

    @app.route("/api/auth/token", methods=["POST"])
    def issue_token():
        # Production tokens come from the auth provider, signed with the same secret.
        if os.getenv("FLASK_ENV") != "development" and not app.testing:
            return jsonify({"error": "Not available in production"}), 403
        if not request.is_json:
            return jsonify({"error": "Content-Type must be application/json"}), 400

        auth_user_id = str(request.json.get("auth_user_id", "")).strip()
        if not auth_user_id:
            return jsonify({"error": "auth_user_id is required"}), 400

        try:
            identity = load_identity(engine, auth_user_id)
        except ValueError as e:
            return jsonify({"error": f"Authentication failed: {str(e)}"}), 401
        except Exception as e:
            print(f"[ERROR] Token error: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Internal server error during login"}), 500

        if identity is None:
            return jsonify({"error": "Authentication failed: no person linked to this user"}), 401

        cleanup_expired_sessions()
        token = generate_token(auth_user_id)
        sessions[token] = {
            "auth_user_id": auth_user_id,
            "created_at": datetime.utcnow(),
            "last_activity": datetime.utcnow(),
        }
        print(f"[auth] Issued token for person {identity.id} (role={identity.role})")

        return jsonify({
            "success": True,
            "token": token,
            "user": _identity_json(identity),
            "expires_at": (datetime.utcnow() + timedelta(hours=TOKEN_EXPIRY_HOURS)).isoformat(),
        }), 200

    @app.route("/api/auth/logout", methods=["POST"])
    @token_required
    def logout():
        token = request.token
        if token in sessions:
            del sessions[token]
        return jsonify({"success": True, "message": "Logged out successfully"}), 200

    # ── Access decisions ─────────────────────────────────────────────

    @app.route("/api/me/access", methods=["GET"])
    def my_access():
        try:
            roles = tuple(parse_role(r) for r in _list_arg("roles"))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        requirements = AccessRequirements(
            required_roles=roles,
            required_capabilities=tuple(_list_arg("capabilities")),
            require_approval=_flag("require_approval", True),
            require_complete_profile=_flag("require_complete_profile", False),
        )

        try:
            state = resolve_request_auth(engine)
        except SessionResolutionError as e:
            return session_failure_response(e)

        decision = Guard(state).evaluate(requirements)
        aff = affordance_for(decision)
        return jsonify({
            "decision": decision.value,
            "allowed": decision.allowed,
            "redirect": aff.redirect,
            "message": aff.message,
        }), 200

    @app.route("/api/me/dashboard", methods=["GET"])
    @access_required(require_approval=False)
    def my_dashboard():
        identity = request.identity
        return jsonify({
            "dashboard": dashboard_for(request.auth_state),
            "user": _identity_json(identity),
            "routes": route_permissions(identity.role),
            "capabilities": sorted(capabilities_for(identity.role)),
        }), 200

    @app.route("/api/admin/users/<person_id>/status", methods=["GET"])
    @access_required(required_capabilities=("approve:users",))
    def user_status(person_id):
        try:
            person = load_person(engine, person_id)
        except ValueError as e:
            return jsonify({"error": str(e)}), 422
        if person is None:
            return jsonify({"error": "Person not found"}), 404
        return jsonify({"success": True, "user": _identity_json(person)}), 200

    # ── Identifier validation / masking ──────────────────────────────

    @app.route("/api/validate/<kind>", methods=["POST"])
    def validate_field(kind):
        try:
            mask_kind = as_kind(kind)
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        if not request.is_json:
            return jsonify({"error": "Content-Type must be application/json"}), 400

        value = str(request.json.get("value", ""))
        result = validate(value, mask_kind)
        return jsonify({
            "kind": mask_kind.value,
            "valid": result.valid,
            "normalized": result.normalized,
            "reason": result.reason.value if result.reason else None,
            "masked": apply_mask(value, mask_kind),
        }), 200

    # ── Postal code lookup ───────────────────────────────────────────

    @app.route("/api/cep/<cep>", methods=["GET"])
    def lookup_cep(cep):
        result = validate(cep, "cep")
        if not result.valid:
            return jsonify({"error": "CEP must have 8 digits", "reason": result.reason.value}), 400

        outcome = asyncio.run(address_lookup.lookup_address(result.normalized))
        if isinstance(outcome, Address):
            return jsonify({
                "success": True,
                "address": {
                    "street": outcome.street,
                    "neighborhood": outcome.neighborhood,
                    "city": outcome.city,
                    "state": outcome.state,
                    "postal_code": outcome.postal_code,
                },
            }), 200
        if isinstance(outcome, NotFound):
            return jsonify({"success": False, "error": "CEP not found", "retry": False}), 404
        return jsonify({"success": False, "error": outcome.message, "retry": True}), 502

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
