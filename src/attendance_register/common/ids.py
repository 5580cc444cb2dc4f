"""Random identifiers and lecturer passwords."""

from __future__ import annotations

import secrets

from ..core.constants import PASSWORDS_PER_LECTURER

# Ambiguous glyphs (I, O, 0, 1, l, o) are left out so printed credentials can
# be typed back without guessing.
_ID_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ0123456789"
_UPPER = "ABCDEFGHJKLMNPQRSTUVWXYZ"
_LOWER = "abcdefghjkmnpqrstuvwxyz"
_DIGITS = "23456789"


def gen_id(length: int = 10) -> str:
    return "".join(secrets.choice(_ID_CHARS) for _ in range(length))


def gen_password() -> str:
    """8 characters: 2 upper, 2 digits, 3 lower and 1 from any class, shuffled."""
    chars = [
        secrets.choice(_UPPER),
        secrets.choice(_UPPER),
        secrets.choice(_DIGITS),
        secrets.choice(_DIGITS),
        secrets.choice(_LOWER),
        secrets.choice(_LOWER),
        secrets.choice(_LOWER),
        secrets.choice(_UPPER + _LOWER + _DIGITS),
    ]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def gen_passwords(count: int = PASSWORDS_PER_LECTURER) -> list[str]:
    """Distinct passwords, in generation order."""
    passwords: list[str] = []
    while len(passwords) < count:
        candidate = gen_password()
        if candidate not in passwords:
            passwords.append(candidate)
    return passwords
