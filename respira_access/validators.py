"""
Checksum and format validation for Brazilian identifiers and contact fields.

Every check strips punctuation first, so masked and raw input behave the same.
Bad input never raises: predicates return False and ``validate`` returns a
ValidationResult carrying the first failing reason.
"""

import calendar
import re
from datetime import date
from typing import List, Optional, Union

from respira_access.config import (
    CPF_LENGTH, CNPJ_LENGTH, PHONE_LENGTHS, CEP_LENGTH, DATE_LENGTH,
    CPF_WEIGHTS_1, CPF_WEIGHTS_2, CNPJ_WEIGHTS_1, CNPJ_WEIGHTS_2,
    MIN_BIRTH_YEAR, MIN_AGE, MAX_AGE, current_year,
)
from respira_access.models import ErrorKind, MaskKind, ValidationResult

_NON_DIGITS = re.compile(r"[^0-9]")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_DAYS_IN_MONTH = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


# ── Helper functions ─────────────────────────────────────────────────

def only_digits(raw: Optional[str]) -> str:
    """Strip every non-digit character."""
    if not raw:
        return ""
    return _NON_DIGITS.sub("", raw)


def as_kind(kind: Union[MaskKind, str]) -> MaskKind:
    """Accept a MaskKind or its string value; anything else is a caller bug."""
    if isinstance(kind, MaskKind):
        return kind
    try:
        return MaskKind(str(kind).strip().lower())
    except ValueError:
        raise ValueError(f"Unsupported mask kind: {kind!r}") from None


def _all_same(digits: str) -> bool:
    return len(set(digits)) == 1


def _mod11_digit(digits: str, weights: List[int]) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def days_in_month(month: int, year: int) -> int:
    if month == 2 and calendar.isleap(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


# ── Per-kind checks (digits in, failing reason out) ──────────────────

def _check_cpf(digits: str) -> Optional[ErrorKind]:
    if len(digits) != CPF_LENGTH:
        return ErrorKind.LENGTH
    if _all_same(digits):
        return ErrorKind.REPEATED_DIGITS

    # (sum * 10) % 11 with 10 -> 0 is the same digit as the mod-11 rule below
    first = _mod11_digit(digits[:9], CPF_WEIGHTS_1)
    if first != int(digits[9]):
        return ErrorKind.CHECKSUM
    second = _mod11_digit(digits[:10], CPF_WEIGHTS_2)
    if second != int(digits[10]):
        return ErrorKind.CHECKSUM
    return None


def _check_cnpj(digits: str) -> Optional[ErrorKind]:
    if len(digits) != CNPJ_LENGTH:
        return ErrorKind.LENGTH
    if _all_same(digits):
        return ErrorKind.REPEATED_DIGITS

    first = _mod11_digit(digits[:12], CNPJ_WEIGHTS_1)
    if first != int(digits[12]):
        return ErrorKind.CHECKSUM
    second = _mod11_digit(digits[:13], CNPJ_WEIGHTS_2)
    if second != int(digits[13]):
        return ErrorKind.CHECKSUM
    return None


def _check_phone(digits: str) -> Optional[ErrorKind]:
    return None if len(digits) in PHONE_LENGTHS else ErrorKind.LENGTH


def _check_cep(digits: str) -> Optional[ErrorKind]:
    return None if len(digits) == CEP_LENGTH else ErrorKind.LENGTH


def _check_date(digits: str, min_year: int, max_year: int) -> Optional[ErrorKind]:
    if len(digits) != DATE_LENGTH:
        return ErrorKind.LENGTH

    day, month, year = int(digits[:2]), int(digits[2:4]), int(digits[4:])
    if not 1 <= month <= 12:
        return ErrorKind.FORMAT
    if not 1 <= day <= days_in_month(month, year):
        return ErrorKind.FORMAT
    if not min_year <= year <= max_year:
        return ErrorKind.DATE_RANGE
    return None


# ── Public predicates ────────────────────────────────────────────────

def is_valid_cpf(raw: str) -> bool:
    return _check_cpf(only_digits(raw)) is None


def is_valid_cnpj(raw: str) -> bool:
    return _check_cnpj(only_digits(raw)) is None


def is_valid_phone(raw: str) -> bool:
    """Landline (10 digits) or mobile (11 digits), area code included."""
    return _check_phone(only_digits(raw)) is None


def is_valid_postal_code(raw: str) -> bool:
    return _check_cep(only_digits(raw)) is None


def is_valid_date(raw: str, min_year: int = MIN_BIRTH_YEAR, max_year: Optional[int] = None) -> bool:
    """Check a ddmmyyyy date (slashes allowed) against the calendar and a year window."""
    if max_year is None:
        max_year = current_year()
    return _check_date(only_digits(raw), min_year, max_year) is None


def is_valid_email(raw: str) -> bool:
    return bool(raw) and _EMAIL.match(raw) is not None


def parse_date(raw: str, min_year: int = MIN_BIRTH_YEAR, max_year: Optional[int] = None) -> Optional[date]:
    """Return the date for a valid ddmmyyyy string, else None."""
    if not is_valid_date(raw, min_year, max_year):
        return None
    digits = only_digits(raw)
    return date(int(digits[4:]), int(digits[2:4]), int(digits[:2]))


def is_valid_age(
    birth_date: Union[str, date],
    min_age: int = MIN_AGE,
    max_age: int = MAX_AGE,
    today: Optional[date] = None,
) -> bool:
    """Age in completed years must fall within [min_age, max_age]."""
    today = today or date.today()
    if isinstance(birth_date, date):
        born = birth_date
    else:
        born = parse_date(birth_date, max_year=today.year)
        if born is None:
            return False

    age = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    return min_age <= age <= max_age


# ── ValidationResult entry point ─────────────────────────────────────

def validate(raw: str, kind: Union[MaskKind, str]) -> ValidationResult:
    """Validate *raw* as *kind* and report the first failing reason."""
    kind = as_kind(kind)
    digits = only_digits(raw)
    if not digits:
        return ValidationResult(valid=False, normalized="", reason=ErrorKind.EMPTY)

    if kind is MaskKind.CPF:
        reason = _check_cpf(digits)
    elif kind is MaskKind.CNPJ:
        reason = _check_cnpj(digits)
    elif kind is MaskKind.PHONE:
        reason = _check_phone(digits)
    elif kind is MaskKind.CEP:
        reason = _check_cep(digits)
    else:
        reason = _check_date(digits, MIN_BIRTH_YEAR, current_year())

    return ValidationResult(valid=reason is None, normalized=digits, reason=reason)
