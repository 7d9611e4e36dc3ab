"""
Role-Based Access Control – role parsing and the role → capability mapping.

The mapping is closed and total: every Role, and the absence of one, has a
defined capability set. Call sites ask this module instead of comparing role
strings themselves.
"""

from typing import Dict, FrozenSet, Iterable, Optional

from respira_access.config import ROLE_CAPABILITIES, ROLE_CODES
from respira_access.models import Role

CapabilitySet = FrozenSet[str]

_CAPABILITIES: Dict[Optional[Role], CapabilitySet] = {
    Role(name): frozenset(tokens) for name, tokens in ROLE_CAPABILITIES.items()
}
_CAPABILITIES[None] = frozenset()

# Accept both the English names and the Portuguese codes stored in dbo.pessoas.
_ROLE_ALIASES: Dict[str, Role] = {}
for _name, _code in ROLE_CODES.items():
    _ROLE_ALIASES[_name] = Role(_name)
    _ROLE_ALIASES[_code] = Role(_name)


def parse_role(raw: Optional[str]) -> Optional[Role]:
    """Map a stored role value to a Role; empty means no role (patient)."""
    if raw is None:
        return None
    if isinstance(raw, Role):
        return raw
    key = str(raw).strip().lower()
    if not key:
        return None
    if key not in _ROLE_ALIASES:
        raise ValueError(f"Unsupported role '{raw}' in dbo.pessoas.")
    return _ROLE_ALIASES[key]


def role_code(role: Optional[Role]) -> Optional[str]:
    """Inverse of parse_role for persistence."""
    return ROLE_CODES[role.value] if role is not None else None


def capabilities_for(role: Optional[Role]) -> CapabilitySet:
    return _CAPABILITIES[parse_role(role)]


def has_capability(role: Optional[Role], token: str) -> bool:
    return token in capabilities_for(role)


def has_any_capability(role: Optional[Role], tokens: Iterable[str]) -> bool:
    caps = capabilities_for(role)
    return any(t in caps for t in tokens)


def is_admin(role: Optional[Role]) -> bool:
    return role is Role.ADMIN


def is_professional(role: Optional[Role]) -> bool:
    return role is Role.PROFESSIONAL


def is_secretary(role: Optional[Role]) -> bool:
    return role is Role.SECRETARY


def route_permissions(role: Optional[Role]) -> Dict[str, bool]:
    """Which top-level areas the role may open."""
    return {
        "/admin": has_capability(role, "access:admin"),
        "/admin/users": has_capability(role, "approve:users"),
        "/dashboard": has_capability(role, "view:dashboard"),
    }
