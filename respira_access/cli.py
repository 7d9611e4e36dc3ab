"""
Interactive CLI for checking identifiers by hand.
Type a field kind and a value; CEPs are also looked up on ViaCEP.
"""

import asyncio

from respira_access.address import ViaCepLookup
from respira_access.masks import apply_mask
from respira_access.models import Address, MaskKind, NotFound
from respira_access.validators import as_kind, validate

KINDS = ", ".join(k.value for k in MaskKind)


def describe(value: str, kind: MaskKind) -> str:
    result = validate(value, kind)
    masked = apply_mask(value, kind)
    if result.valid:
        return f"[ok] {masked} (normalized: {result.normalized})"
    return f"[invalid] {masked or '(empty)'} – reason: {result.reason.value}"


def main():
    print("=== Respira Access: identifier checker ===\n")
    lookup = ViaCepLookup()

    while True:
        try:
            raw_kind = input(f"\nKind ({KINDS}) or 'quit': ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if not raw_kind:
            continue
        if raw_kind.lower() in {"quit", "exit"}:
            print("Goodbye.")
            break

        try:
            kind = as_kind(raw_kind)
        except ValueError as e:
            print("[ERROR]", e)
            continue

        try:
            value = input("Value: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        print(describe(value, kind))

        result = validate(value, kind)
        if kind is MaskKind.CEP and result.valid:
            outcome = asyncio.run(lookup.lookup_address(result.normalized))
            if isinstance(outcome, Address):
                print(f"[cep] {outcome.street}, {outcome.neighborhood} – {outcome.city}/{outcome.state}")
            elif isinstance(outcome, NotFound):
                print("[cep] No such postal code.")
            else:
                print(f"[cep] Lookup failed ({outcome.message}); try again later.")


if __name__ == "__main__":
    main()
