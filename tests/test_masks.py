"""
Unit tests for progressive input masks and display formatters.
"""

import pytest

from respira_access.masks import (
    apply_mask,
    remove_mask,
    validate_mask,
    max_length,
    format_cpf,
    format_cnpj,
    format_cep,
    format_phone,
    format_document,
)
from respira_access.models import MaskKind


SAMPLES = ["", "5", "52", "529982", "5299822472", "52998224725", "11222333000181",
           "1198887766", "11998887766", "01310100", "29022024", "(11) 9", "abc-12"]


# ── Tests: complete values ───────────────────────────────────────────

def test_cpf_mask():
    assert apply_mask("52998224725", "cpf") == "529.982.247-25"


def test_cnpj_mask():
    assert apply_mask("11222333000181", "cnpj") == "11.222.333/0001-81"


def test_cep_and_date_masks():
    assert apply_mask("01310100", MaskKind.CEP) == "01310-100"
    assert apply_mask("29022024", MaskKind.DATE) == "29/02/2024"


def test_phone_switches_layout_on_eleventh_digit():
    assert apply_mask("1198887766", "phone") == "(11) 9888-7766"
    assert apply_mask("11998887766", "phone") == "(11) 99888-7766"


# ── Tests: progressive typing ────────────────────────────────────────

def test_partial_cpf():
    assert apply_mask("529", "cpf") == "529"
    assert apply_mask("5299", "cpf") == "529.9"
    assert apply_mask("5299822472", "cpf") == "529.982.247-2"


def test_partial_cnpj_cep_date():
    assert apply_mask("112", "cnpj") == "11.2"
    assert apply_mask("1122233300", "cnpj") == "11.222.333/00"
    assert apply_mask("013101", "cep") == "01310-1"
    assert apply_mask("290", "date") == "29/0"


def test_partial_phone():
    assert apply_mask("11", "phone") == "11"
    assert apply_mask("119", "phone") == "(11) 9"
    assert apply_mask("1198887", "phone") == "(11) 9888-7"


def test_extra_digits_are_truncated():
    assert apply_mask("5299822472599", "cpf") == "529.982.247-25"
    assert apply_mask("119988877661", "phone") == "(11) 99888-7766"
    assert apply_mask("013101009", "cep") == "01310-100"


def test_masked_input_is_accepted():
    assert apply_mask("529.982.247-25", "cpf") == "529.982.247-25"
    assert apply_mask("(11) 9888-77661", "phone") == "(11) 98887-7661"


# ── Tests: properties ────────────────────────────────────────────────

@pytest.mark.parametrize("kind", list(MaskKind))
def test_idempotent(kind):
    for s in SAMPLES:
        once = apply_mask(s, kind)
        assert apply_mask(once, kind) == once


@pytest.mark.parametrize("kind", list(MaskKind))
def test_never_changes_digits(kind):
    for s in SAMPLES:
        digits = remove_mask(s)
        if len(digits) <= max_length(kind):
            assert remove_mask(apply_mask(s, kind)) == digits


def test_max_lengths():
    assert max_length("cpf") == 11
    assert max_length("cnpj") == 14
    assert max_length("phone") == 11
    assert max_length("cep") == 8
    assert max_length("date") == 8


def test_unknown_kind_raises():
    with pytest.raises(ValueError):
        apply_mask("123", "rg")


def test_validate_mask():
    assert validate_mask("529.982.247-25", "cpf") is True
    assert validate_mask("529.982.247-2", "cpf") is False
    assert validate_mask("(11) 9888-7766", "phone") is True


# ── Tests: full-value formatters ─────────────────────────────────────

def test_formatters_leave_incomplete_values_untouched():
    assert format_cpf("52998224725") == "529.982.247-25"
    assert format_cpf("5299") == "5299"
    assert format_cnpj("11222333000181") == "11.222.333/0001-81"
    assert format_cep("01310100") == "01310-100"
    assert format_phone("123") == "123"
    assert format_phone("11998887766") == "(11) 99888-7766"


def test_format_document_picks_by_length():
    assert format_document("52998224725") == "529.982.247-25"
    assert format_document("11222333000181") == "11.222.333/0001-81"
    assert format_document("123") == "123"


def test_non_ascii_digits_are_dropped():
    assert apply_mask("５２９", "cpf") == ""
    assert remove_mask("0１3") == "03"
