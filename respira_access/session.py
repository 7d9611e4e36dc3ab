"""
Session resolution – turning a raw session plus its linked identity into an AuthState.

Resolution has two asynchronous stages (acquire the session, then load the
person linked to it). ``resolve_auth_state`` is the pure reducer over whatever
has arrived so far; ``load_auth_state`` drives both stages to completion.
"""

from typing import Any, Awaitable, Callable, Optional, Union

from respira_access.models import (
    AuthState, Authenticated, Identity, Loading, Unauthenticated,
)


class SessionResolutionError(RuntimeError):
    """The session exists but its identity could not be resolved.

    Callers should offer a retry instead of sending the user back to login.
    """


class _Pending:
    def __repr__(self):
        return "PENDING"


PENDING = _Pending()

IdentityLookup = Union[_Pending, Identity, None, BaseException]


def resolve_auth_state(raw_session: Any, identity_lookup: IdentityLookup) -> AuthState:
    """Reduce (session, identity lookup so far) to an AuthState.

    *identity_lookup* is ``PENDING`` while the load is outstanding, the
    resolved Identity once it lands, or the exception it failed with.
    """
    if not raw_session:
        return Unauthenticated()
    if identity_lookup is PENDING:
        return Loading()
    if isinstance(identity_lookup, BaseException):
        raise SessionResolutionError(
            f"Could not load identity for session: {identity_lookup}"
        ) from identity_lookup
    if identity_lookup is None:
        raise SessionResolutionError("Session has no linked person record.")
    return Authenticated(identity=identity_lookup)


async def load_auth_state(
    get_session: Callable[[], Awaitable[Any]],
    load_identity: Callable[[Any], Awaitable[Optional[Identity]]],
) -> AuthState:
    """Await the session, then its identity, and return the settled state."""
    try:
        raw_session = await get_session()
    except Exception as e:
        raise SessionResolutionError(f"Could not acquire session: {e}") from e

    if not raw_session:
        return Unauthenticated()

    try:
        identity = await load_identity(raw_session)
    except Exception as e:
        return resolve_auth_state(raw_session, e)
    return resolve_auth_state(raw_session, identity)


def sign_out(state: AuthState) -> AuthState:
    return Unauthenticated()
