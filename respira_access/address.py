"""
Postal code (CEP) → address lookup.

The core only depends on ``AddressLookup``; ``ViaCepLookup`` is the stock
implementation. Lookups never raise for service trouble: the outcome is an
Address, NotFound, or LookupFailure. Retrying is the caller's call.
"""

import asyncio
import re
import sys
from typing import Optional

import httpx

from respira_access.config import VIACEP_URL, CEP_LOOKUP_TIMEOUT, CEP_DEBOUNCE_SECONDS, CEP_LENGTH
from respira_access.models import Address, AddressOutcome, LookupFailure, NotFound
from respira_access.validators import only_digits

_CEP_DIGITS = re.compile(r"[0-9]{8}")


class AddressLookup:
    """Base adapter. Subclasses implement ``_lookup``."""

    provider: str = "base"

    async def _lookup(self, postal_code: str) -> AddressOutcome:
        raise NotImplementedError

    async def lookup_address(self, postal_code: str) -> AddressOutcome:
        if not _CEP_DIGITS.fullmatch(postal_code):
            raise ValueError(f"Postal code must be {CEP_LENGTH} digits, got {postal_code!r}")
        return await self._lookup(postal_code)


class ViaCepLookup(AddressLookup):
    """Adapter for the public ViaCEP service."""

    provider = "viacep"

    def __init__(
        self,
        *,
        base_url: str = VIACEP_URL,
        timeout_s: float = CEP_LOOKUP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_s
        self._transport = transport

    async def _lookup(self, postal_code: str) -> AddressOutcome:
        url = f"{self._base_url}/{postal_code}/json/"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(url)
        except httpx.TimeoutException:
            print(f"[cep] Lookup for {postal_code} timed out after {self._timeout}s", file=sys.stderr)
            return LookupFailure(message="CEP lookup timed out")
        except httpx.HTTPError as e:
            print(f"[cep] Lookup for {postal_code} failed: {e}", file=sys.stderr)
            return LookupFailure(message=f"CEP lookup failed: {e}")

        if resp.status_code != 200:
            print(f"[cep] ViaCEP returned HTTP {resp.status_code} for {postal_code}", file=sys.stderr)
            return LookupFailure(message=f"CEP service error {resp.status_code}")

        try:
            data = resp.json()
        except ValueError:
            print(f"[cep] Malformed ViaCEP response for {postal_code}", file=sys.stderr)
            return LookupFailure(message="Malformed CEP service response")

        if not isinstance(data, dict):
            return LookupFailure(message="Malformed CEP service response")
        if data.get("erro"):
            return NotFound(postal_code=postal_code)

        return Address(
            street=str(data.get("logradouro") or ""),
            neighborhood=str(data.get("bairro") or ""),
            city=str(data.get("localidade") or ""),
            state=str(data.get("uf") or ""),
            postal_code=only_digits(data.get("cep")) or postal_code,
        )


class CepAutofill:
    """Debounced lookups for a single CEP field.

    Each call to ``request`` starts a new cohort. Only the latest cohort's
    result is returned; earlier calls resolve to None, whether they were
    superseded during the debounce wait or while their lookup was in flight.
    """

    def __init__(self, lookup: AddressLookup, debounce_s: float = CEP_DEBOUNCE_SECONDS):
        self.lookup = lookup
        self.debounce_s = debounce_s
        self.current = ""
        self._generation = 0

    async def request(self, raw: str) -> Optional[AddressOutcome]:
        self._generation += 1
        generation = self._generation
        postal_code = only_digits(raw)
        self.current = postal_code

        if len(postal_code) != CEP_LENGTH:
            return None

        await asyncio.sleep(self.debounce_s)
        if generation != self._generation:
            return None

        outcome = await self.lookup.lookup_address(postal_code)
        if generation != self._generation or self.current != postal_code:
            return None
        return outcome

    def cancel(self):
        """Discard whatever is in flight (field unmounted or cleared)."""
        self._generation += 1
        self.current = ""
