"""
Deterministic identifiers for treasuries and grants.

Identifiers are pure functions of their seed and inputs so a grant can be
located from ``(treasury, recipient)`` without a separate index. They carry
no ownership semantics.
"""

from __future__ import annotations

import hashlib

from grantstream.core.constants import TREASURY_SEED


def _derive(seed: str, *parts: str) -> str:
    hasher = hashlib.sha256()
    hasher.update(seed.encode("utf-8"))
    for part in parts:
        encoded = part.encode("utf-8")
        # Length prefix keeps ("ab", "c") and ("a", "bc") distinct
        hasher.update(len(encoded).to_bytes(4, "big"))
        hasher.update(encoded)
    return hasher.hexdigest()


def derive_treasury_id(authority: str) -> str:
    """Identifier of the treasury governed by ``authority``."""
    return _derive(TREASURY_SEED, authority)


def derive_id(seed: str, treasury_id: str, recipient: str) -> str:
    """Identifier of the ``seed`` grant (stream or vesting) for a recipient."""
    return _derive(seed, treasury_id, recipient)


def custody_account(grant_id: str) -> str:
    """Account holding the funds of a grant, controlled by the grant itself."""
    return f"custody:{grant_id}"
