"""
Translation of AccessDecision values into what the UI should do about them.
"""

from respira_access.config import (
    REDIRECT_LOGIN, REDIRECT_AWAITING_APPROVAL,
    REDIRECT_COMPLETE_REGISTRATION, REDIRECT_DASHBOARD,
)
from respira_access.models import AccessDecision, Affordance

_AFFORDANCES = {
    AccessDecision.ALLOW: (None, "Access granted.", 200),
    AccessDecision.PENDING: (None, "Loading session...", 202),
    AccessDecision.DENY_UNAUTHENTICATED: (REDIRECT_LOGIN, "Please sign in to continue.", 401),
    AccessDecision.DENY_UNAPPROVED: (
        REDIRECT_AWAITING_APPROVAL, "Your account is awaiting approval.", 403,
    ),
    AccessDecision.DENY_INCOMPLETE_PROFILE: (
        REDIRECT_COMPLETE_REGISTRATION, "Please complete your registration.", 403,
    ),
    AccessDecision.DENY_ROLE: (REDIRECT_DASHBOARD, "You do not have access to this page.", 403),
    # No redirect: a blocked account gets an explicit refusal, not a detour.
    AccessDecision.DENY_BLOCKED: (None, "This account is not permitted to access the system.", 403),
}


def affordance_for(decision: AccessDecision) -> Affordance:
    redirect, message, status = _AFFORDANCES[decision]
    return Affordance(decision=decision, redirect=redirect, message=message, http_status=status)
