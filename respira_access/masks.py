"""
Progressive input masks for identifier and contact fields.

``apply_mask`` is called on every keystroke with the field's full value. It
only ever inserts punctuation between the digits already typed and drops
digits past the kind's length, so re-applying it is a no-op.
"""

from typing import List, Tuple, Union

from respira_access.config import CPF_LENGTH, CNPJ_LENGTH, CEP_LENGTH
from respira_access.models import MaskKind
from respira_access.validators import as_kind, only_digits, validate

# (group size, separator written before the group)
_LAYOUTS = {
    MaskKind.CPF: [(3, ""), (3, "."), (3, "."), (2, "-")],
    MaskKind.CNPJ: [(2, ""), (3, "."), (3, "."), (4, "/"), (2, "-")],
    MaskKind.CEP: [(5, ""), (3, "-")],
    MaskKind.DATE: [(2, ""), (2, "/"), (4, "/")],
}

_LANDLINE_LAYOUT = [(2, "("), (4, ") "), (4, "-")]
_MOBILE_LAYOUT = [(2, "("), (5, ") "), (4, "-")]


def _layout_for(kind: MaskKind, digit_count: int) -> List[Tuple[int, str]]:
    if kind is MaskKind.PHONE:
        return _MOBILE_LAYOUT if digit_count > 10 else _LANDLINE_LAYOUT
    return _LAYOUTS[kind]


def max_length(kind: Union[MaskKind, str]) -> int:
    """Number of digits the kind holds once complete."""
    kind = as_kind(kind)
    return sum(size for size, _ in _layout_for(kind, 11))


def remove_mask(masked: str) -> str:
    return only_digits(masked)


def apply_mask(raw: str, kind: Union[MaskKind, str]) -> str:
    """Punctuate *raw* for display as *kind*, progressively for partial input."""
    kind = as_kind(kind)
    digits = only_digits(raw)[:max_length(kind)]
    if not digits:
        return ""

    layout = _layout_for(kind, len(digits))

    # A lone area code stays bare: "(11" only appears once a third digit arrives.
    if kind is MaskKind.PHONE and len(digits) <= layout[0][0]:
        return digits

    parts = []
    pos = 0
    for size, sep in layout:
        chunk = digits[pos:pos + size]
        if not chunk:
            break
        parts.append(sep + chunk)
        pos += size
    return "".join(parts)


def validate_mask(value: str, kind: Union[MaskKind, str]) -> bool:
    """True when the (masked or raw) value is complete and valid for *kind*."""
    return validate(value, kind).valid


# ── Full-value formatters (leave incomplete input untouched) ─────────

def _format_exact(raw: str, kind: MaskKind, lengths) -> str:
    digits = only_digits(raw)
    if len(digits) in lengths:
        return apply_mask(digits, kind)
    return raw


def format_cpf(raw: str) -> str:
    return _format_exact(raw, MaskKind.CPF, (CPF_LENGTH,))


def format_cnpj(raw: str) -> str:
    return _format_exact(raw, MaskKind.CNPJ, (CNPJ_LENGTH,))


def format_cep(raw: str) -> str:
    return _format_exact(raw, MaskKind.CEP, (CEP_LENGTH,))


def format_phone(raw: str) -> str:
    return _format_exact(raw, MaskKind.PHONE, (10, 11))


def format_document(raw: str) -> str:
    """Format a combined CPF/CNPJ field by its digit count."""
    digits = only_digits(raw)
    if len(digits) == CPF_LENGTH:
        return format_cpf(digits)
    if len(digits) == CNPJ_LENGTH:
        return format_cnpj(digits)
    return raw
