"""
JWT authentication helpers and access guards for the Flask API.
"""

import sys
from datetime import datetime, timedelta
from functools import wraps
from typing import Dict, Any, Optional

import jwt
from flask import current_app, request, jsonify

from respira_access.affordances import affordance_for
from respira_access.config import SECRET_KEY, TOKEN_EXPIRY_HOURS
from respira_access.decision import Guard
from respira_access.identity_store import load_identity, session_user_id
from respira_access.models import AccessRequirements, AuthState
from respira_access.session import PENDING, SessionResolutionError, resolve_auth_state

# In-memory session registry (use Redis in production)
# Structure: {token: {"auth_user_id": str, "created_at": datetime, "last_activity": datetime}}
sessions: Dict[str, Dict[str, Any]] = {}


def generate_token(auth_user_id: str) -> str:
    """Generate a JWT token for an auth user."""
    now = datetime.utcnow()
    payload = {
        "sub": str(auth_user_id),
        "auth_user_id": str(auth_user_id),
        "iat": now,
        "exp": now + timedelta(hours=TOKEN_EXPIRY_HOURS),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm="HS256")


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a JWT token and return the decoded payload (or None)."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def bearer_token() -> Optional[str]:
    """Read the token from the Authorization header, falling back to ?token=."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header:
        parts = auth_header.split(" ")
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
        return None
    return request.args.get("token")


def current_session() -> Optional[Dict[str, Any]]:
    """The verified, still-registered session payload for this request, if any."""
    token = bearer_token()
    if not token or token not in sessions:
        return None
    payload = verify_token(token)
    if not payload:
        return None
    sessions[token]["last_activity"] = datetime.utcnow()
    return payload


def resolve_request_auth(engine) -> AuthState:
    """Resolve the caller's AuthState; raises SessionResolutionError on store failure."""
    raw_session = current_session()
    lookup = PENDING
    if raw_session:
        try:
            lookup = load_identity(engine, session_user_id(raw_session))
        except Exception as e:
            print(f"[auth] Identity lookup failed: {e}", file=sys.stderr)
            lookup = e
    return resolve_auth_state(raw_session, lookup)


def session_failure_response(e: SessionResolutionError):
    return jsonify({
        "error": "Could not load your profile",
        "details": str(e),
        "retry": True,
    }), 503


def token_required(f):
    """Decorator that only checks for a live session (used by logout)."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication token is missing"}), 401
        if not verify_token(token):
            return jsonify({"error": "Invalid or expired token"}), 401
        if token not in sessions:
            return jsonify({"error": "Session not found. Please login again."}), 401
        request.token = token
        return f(*args, **kwargs)

    return decorated


def access_required(requirements: Optional[AccessRequirements] = None, **overrides):
    """Decorator that runs the access decision engine before the view."""
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            try:
                state = resolve_request_auth(current_app.config["IDENTITY_ENGINE"])
            except SessionResolutionError as e:
                return session_failure_response(e)

            decision = Guard(state).evaluate(requirements, **overrides)
            if not decision.allowed:
                aff = affordance_for(decision)
                return jsonify({
                    "error": aff.message,
                    "decision": decision.value,
                    "redirect": aff.redirect,
                }), aff.http_status

            request.auth_state = state
            request.identity = state.identity
            return f(*args, **kwargs)

        return decorated
    return decorator


def cleanup_expired_sessions():
    """Remove sessions that have been inactive beyond TOKEN_EXPIRY_HOURS."""
    now = datetime.utcnow()
    expired = [
        tok for tok, data in sessions.items()
        if (now - data["last_activity"]).total_seconds() > TOKEN_EXPIRY_HOURS * 3600
    ]
    for tok in expired:
        del sessions[tok]
    if expired:
        print(f"[cleanup] Removed {len(expired)} expired sessions")
