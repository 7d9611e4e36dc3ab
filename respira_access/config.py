"""
Centralised configuration constants and environment helpers.
"""

import os
import sys
from datetime import date

from dotenv import load_dotenv

load_dotenv()

# ── Roles (stored codes in dbo.pessoas.role) ─────────────────────────
ROLE_CODES = {
    "admin": "admin",
    "professional": "profissional",
    "secretary": "secretaria",
}

# ── Capabilities per role ────────────────────────────────────────────
ROLE_CAPABILITIES = {
    "admin": {"approve:users", "manage:system", "access:admin", "view:dashboard"},
    "professional": {"view:dashboard"},
    "secretary": {"view:dashboard"},
}

# ── Document lengths (digits only) ───────────────────────────────────
CPF_LENGTH = 11
CNPJ_LENGTH = 14
PHONE_LENGTHS = (10, 11)
CEP_LENGTH = 8
DATE_LENGTH = 8

CPF_WEIGHTS_1 = [10, 9, 8, 7, 6, 5, 4, 3, 2]
CPF_WEIGHTS_2 = [11, 10, 9, 8, 7, 6, 5, 4, 3, 2]
CNPJ_WEIGHTS_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
CNPJ_WEIGHTS_2 = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]

MIN_BIRTH_YEAR = 1900
MIN_AGE = 0
MAX_AGE = 120

# ── Redirects (consumed by the affordance layer) ─────────────────────
REDIRECT_LOGIN = "/auth/login"
REDIRECT_AWAITING_APPROVAL = "/auth/awaiting-approval"
REDIRECT_COMPLETE_REGISTRATION = "/auth/complete-registration"
REDIRECT_DASHBOARD = "/dashboard"

# ── Postal code lookup ───────────────────────────────────────────────
VIACEP_URL = os.getenv("VIACEP_URL", "https://viacep.com.br/ws")
CEP_LOOKUP_TIMEOUT = float(os.getenv("CEP_LOOKUP_TIMEOUT", "10"))
CEP_DEBOUNCE_SECONDS = float(os.getenv("CEP_DEBOUNCE_SECONDS", "0.4"))

# ── API server ───────────────────────────────────────────────────────
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_EXPIRY_HOURS = 24


def current_year() -> int:
    return date.today().year


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
