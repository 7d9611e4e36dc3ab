"""
Access decisions for route guards.

``decide`` walks a fixed priority list and reports exactly one reason. Blocking
and approval are checked before role so that a banned or unapproved account is
never told which roles a page wants.
"""

from dataclasses import replace
from typing import Optional

from respira_access.models import (
    AccessDecision, AccessRequirements, AuthState, Authenticated, Identity, Loading,
)
from respira_access.rbac import has_any_capability, parse_role


def decide(auth_state: AuthState, requirements: Optional[AccessRequirements] = None) -> AccessDecision:
    req = requirements or AccessRequirements()

    if isinstance(auth_state, Loading):
        return AccessDecision.PENDING
    if not isinstance(auth_state, Authenticated):
        return AccessDecision.DENY_UNAUTHENTICATED

    identity = auth_state.identity
    if identity.blocked:
        return AccessDecision.DENY_BLOCKED
    # New signups stay inactive until an admin approves them.
    if req.require_approval and not (identity.is_approved and identity.active):
        return AccessDecision.DENY_UNAPPROVED
    if req.require_complete_profile and not identity.profile_complete:
        return AccessDecision.DENY_INCOMPLETE_PROFILE
    if req.required_roles:
        allowed = {parse_role(r) for r in req.required_roles} - {None}
        if identity.role is None or identity.role not in allowed:
            return AccessDecision.DENY_ROLE
    if req.required_capabilities and not has_any_capability(identity.role, req.required_capabilities):
        return AccessDecision.DENY_ROLE
    return AccessDecision.ALLOW


class Guard:
    """Binds the current auth snapshot so route guards only pass requirements."""

    def __init__(self, auth_state: AuthState):
        self.auth_state = auth_state

    def evaluate(self, requirements: Optional[AccessRequirements] = None, **overrides) -> AccessDecision:
        req = requirements or AccessRequirements()
        if overrides:
            if "required_roles" in overrides:
                overrides["required_roles"] = tuple(overrides["required_roles"] or ())
            if "required_capabilities" in overrides:
                overrides["required_capabilities"] = tuple(overrides["required_capabilities"] or ())
            req = replace(req, **overrides)
        return decide(self.auth_state, req)


# ── Dashboard routing ────────────────────────────────────────────────

def dashboard_for(auth_state: AuthState) -> str:
    """Pick the landing dashboard for the current user."""
    if isinstance(auth_state, Loading):
        return "loading"
    if not isinstance(auth_state, Authenticated):
        return "login"

    identity = auth_state.identity
    if identity.blocked:
        return "login"
    if not identity.is_approved or not identity.active or identity.role is None:
        return "pending"
    if not identity.profile_complete:
        return "complete_registration"
    return identity.role.value


def account_status(identity: Identity) -> str:
    """Single status label for admin listings, most severe condition first."""
    if identity.blocked:
        return "blocked"
    if not identity.is_approved:
        return "pending_approval"
    if not identity.profile_complete:
        return "incomplete_profile"
    if identity.active:
        return "active"
    return "inactive"
