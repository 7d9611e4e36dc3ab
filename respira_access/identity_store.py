"""
Loading person records from the identity store into Identity values.
"""

import asyncio
from datetime import date
from typing import Any, Awaitable, Callable, Mapping, Optional

from sqlalchemy import text

from respira_access.config import CPF_LENGTH, CNPJ_LENGTH
from respira_access.models import Identity
from respira_access.rbac import parse_role
from respira_access.validators import only_digits

_SELECT_PERSON = """
    SELECT p.id, p.nome, p.email, p.role, p.is_approved, p.profile_complete,
           p.ativo, p.bloqueado, p.cpf_cnpj, p.telefone, p.data_nascimento,
           e.cep
    FROM pessoas p
    LEFT JOIN enderecos e ON e.id = p.id_endereco
"""


def _birth_digits(value: Any) -> Optional[str]:
    """Stored dates come back as date objects or ISO strings; keep ddmmyyyy digits."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.strftime("%d%m%Y")
    s = str(value).strip()
    if len(s) >= 10 and s[4] == "-" and s[7] == "-":
        return s[8:10] + s[5:7] + s[0:4]
    return only_digits(s) or None


def identity_from_row(row: Mapping[str, Any]) -> Identity:
    """Build an Identity from a pessoas row, normalising identifier fields."""
    document = only_digits(row.get("cpf_cnpj"))
    return Identity(
        id=str(row["id"]),
        role=parse_role(row.get("role")),
        is_approved=bool(row.get("is_approved")),
        profile_complete=bool(row.get("profile_complete")),
        active=True if row.get("ativo") is None else bool(row["ativo"]),
        blocked=bool(row.get("bloqueado")),
        name=str(row.get("nome") or ""),
        email=row.get("email"),
        cpf=document if len(document) == CPF_LENGTH else None,
        cnpj=document if len(document) == CNPJ_LENGTH else None,
        phone=only_digits(row.get("telefone")) or None,
        postal_code=only_digits(row.get("cep")) or None,
        birth_date=_birth_digits(row.get("data_nascimento")),
    )


def _fetch_one(engine, where: str, params: dict) -> Optional[Identity]:
    sql = text(_SELECT_PERSON + where)
    with engine.connect() as conn:
        row = conn.execute(sql, params).mappings().first()
    if not row:
        return None
    return identity_from_row(row)


def load_identity(engine, auth_user_id: str) -> Optional[Identity]:
    """Look up the person linked to an auth user; None when no record exists."""
    return _fetch_one(engine, "WHERE p.auth_user_id = :uid", {"uid": auth_user_id})


def load_person(engine, person_id: str) -> Optional[Identity]:
    return _fetch_one(engine, "WHERE p.id = :pid", {"pid": person_id})


def session_user_id(raw_session: Any) -> Optional[str]:
    """Extract the auth user id from a session payload (JWT claims or similar)."""
    if isinstance(raw_session, Mapping):
        uid = raw_session.get("auth_user_id") or raw_session.get("sub")
    else:
        uid = getattr(raw_session, "auth_user_id", None)
    return str(uid) if uid else None


def identity_loader(engine) -> Callable[[Any], Awaitable[Optional[Identity]]]:
    """Async identity loader for session.load_auth_state, backed by *engine*."""

    async def _load(raw_session: Any) -> Optional[Identity]:
        uid = session_user_id(raw_session)
        if uid is None:
            raise ValueError("Session carries no auth user id.")
        return await asyncio.to_thread(load_identity, engine, uid)

    return _load
