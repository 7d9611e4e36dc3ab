"""
Domain dataclasses and enumerations used across the application.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class Role(Enum):
    """Closed set of privileged roles. ``None`` stands for a patient identity."""
    ADMIN = "admin"
    PROFESSIONAL = "professional"
    SECRETARY = "secretary"


class MaskKind(Enum):
    CPF = "cpf"
    CNPJ = "cnpj"
    PHONE = "phone"
    CEP = "cep"
    DATE = "date"


class ErrorKind(Enum):
    EMPTY = "empty"
    LENGTH = "length"
    REPEATED_DIGITS = "repeated_digits"
    CHECKSUM = "checksum"
    DATE_RANGE = "date_range"
    FORMAT = "format"


class AccessDecision(Enum):
    ALLOW = "allow"
    DENY_UNAUTHENTICATED = "deny_unauthenticated"
    DENY_UNAPPROVED = "deny_unapproved"
    DENY_INCOMPLETE_PROFILE = "deny_incomplete_profile"
    DENY_ROLE = "deny_role"
    DENY_BLOCKED = "deny_blocked"
    PENDING = "pending"   # auth state still loading; re-evaluate later

    @property
    def is_terminal(self) -> bool:
        return self is not AccessDecision.PENDING

    @property
    def allowed(self) -> bool:
        return self is AccessDecision.ALLOW


@dataclass(frozen=True)
class Identity:
    """The person record behind an authenticated session."""
    id: str
    role: Optional[Role] = None       # None: patient / unprivileged
    is_approved: bool = False
    profile_complete: bool = False
    active: bool = True
    blocked: bool = False
    name: str = ""
    email: Optional[str] = None
    cpf: Optional[str] = None         # digits only
    cnpj: Optional[str] = None        # digits only
    phone: Optional[str] = None       # digits only
    postal_code: Optional[str] = None # digits only
    birth_date: Optional[str] = None  # ddmmyyyy digits


# ── Auth state (tagged union) ────────────────────────────────────────

@dataclass(frozen=True)
class Unauthenticated:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Authenticated:
    identity: Identity


AuthState = Union[Unauthenticated, Loading, Authenticated]


@dataclass(frozen=True)
class AccessRequirements:
    """What a call site demands before it renders."""
    required_roles: Tuple[Role, ...] = ()
    required_capabilities: Tuple[str, ...] = ()
    require_approval: bool = True
    require_complete_profile: bool = False


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    normalized: str
    reason: Optional[ErrorKind] = None

    def __post_init__(self):
        if self.valid == (self.reason is not None):
            raise ValueError("reason must be set exactly when the result is invalid")


@dataclass(frozen=True)
class Affordance:
    """UI-facing translation of an AccessDecision."""
    decision: AccessDecision
    redirect: Optional[str]
    message: str
    http_status: int


# ── Address lookup outcomes ──────────────────────────────────────────

@dataclass(frozen=True)
class Address:
    street: str
    neighborhood: str
    city: str
    state: str
    postal_code: str


@dataclass(frozen=True)
class NotFound:
    postal_code: str


@dataclass(frozen=True)
class LookupFailure:
    message: str


AddressOutcome = Union[Address, NotFound, LookupFailure]
