"""
Unit tests for loading Identity records from the pessoas table.
"""

import asyncio
from datetime import date

import pytest

from respira_access.identity_store import (
    identity_from_row,
    identity_loader,
    load_identity,
    load_person,
    session_user_id,
)
from respira_access.models import Role


# ── Helpers / Fakes ──────────────────────────────────────────────────

class FakeResult:
    """Mimic SQLAlchemy Result with .mappings().first()."""
    def __init__(self, row_dict_or_none):
        self._row = row_dict_or_none

    def mappings(self):
        return self

    def first(self):
        return self._row


class FakeConn:
    def __init__(self, row_dict_or_none=None):
        self._row = row_dict_or_none
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        return FakeResult(self._row)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeEngine:
    """Mimic engine.connect() context manager."""
    def __init__(self, row_dict_or_none=None):
        self._row = row_dict_or_none
        self.connections = []

    def connect(self):
        conn = FakeConn(self._row)
        self.connections.append(conn)
        return conn


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _row(**overrides):
    row = {
        "id": 7, "nome": "Ana Souza", "email": "ana@respira.com.br",
        "role": "profissional", "is_approved": True, "profile_complete": True,
        "ativo": True, "bloqueado": False, "cpf_cnpj": "529.982.247-25",
        "telefone": "(11) 99888-7766", "data_nascimento": "1990-06-15",
        "cep": "01310-100",
    }
    row.update(overrides)
    return row


# ── Tests: load_identity ─────────────────────────────────────────────

def test_load_identity_ok():
    engine = FakeEngine(_row())
    identity = load_identity(engine, "auth-7")
    assert identity.id == "7"
    assert identity.role is Role.PROFESSIONAL
    assert identity.is_approved and identity.profile_complete
    assert identity.cpf == "52998224725"
    assert identity.cnpj is None
    assert identity.phone == "11998887766"
    assert identity.postal_code == "01310100"
    assert identity.birth_date == "15061990"

    _sql, params = engine.connections[0].executed[0]
    assert params == {"uid": "auth-7"}


def test_load_identity_missing_returns_none():
    assert load_identity(FakeEngine(None), "nobody") is None


def test_load_identity_unsupported_role():
    with pytest.raises(ValueError, match="Unsupported role"):
        load_identity(FakeEngine(_row(role="enfermeira")), "auth-7")


def test_load_person_by_id():
    engine = FakeEngine(_row())
    load_person(engine, "7")
    _sql, params = engine.connections[0].executed[0]
    assert params == {"pid": "7"}


# ── Tests: row mapping ───────────────────────────────────────────────

def test_identity_from_row_patient_with_cnpj_and_date_object():
    identity = identity_from_row(_row(
        role=None, cpf_cnpj="11.222.333/0001-81",
        data_nascimento=date(2015, 2, 3), telefone=None, cep=None,
    ))
    assert identity.role is None
    assert identity.cnpj == "11222333000181"
    assert identity.cpf is None
    assert identity.birth_date == "03022015"
    assert identity.phone is None
    assert identity.postal_code is None


def test_identity_from_row_flags():
    identity = identity_from_row(_row(bloqueado=True, ativo=False, is_approved=False))
    assert identity.blocked is True
    assert identity.active is False
    assert identity.is_approved is False


def test_identity_from_row_null_ativo_counts_as_active():
    assert identity_from_row(_row(ativo=None)).active is True
    assert identity_from_row(_row(ativo=0)).active is False


# ── Tests: async loader ──────────────────────────────────────────────

def test_session_user_id():
    assert session_user_id({"auth_user_id": "a1"}) == "a1"
    assert session_user_id({"sub": "a2"}) == "a2"
    assert session_user_id({}) is None


def test_identity_loader_runs_query():
    loader = identity_loader(FakeEngine(_row()))
    identity = _run(loader({"sub": "auth-7"}))
    assert identity.name == "Ana Souza"


def test_identity_loader_requires_user_id():
    loader = identity_loader(FakeEngine(_row()))
    with pytest.raises(ValueError, match="no auth user id"):
        _run(loader({}))
