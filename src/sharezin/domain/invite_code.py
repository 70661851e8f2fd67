"""Invite code generation and normalization."""

from __future__ import annotations

import secrets

# I, O, 0 and 1 are left out to avoid confusion when codes are read aloud.
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 6


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    """Return a random uppercase code drawn from the invite alphabet."""

    if length <= 0:
        raise ValueError("Invite code length must be positive")
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(raw_code: str) -> str:
    """Normalize free text input before matching stored codes."""

    return raw_code.strip().upper()
