from __future__ import annotations

import secrets

# Stored filenames were generated from exactly this set; do not reorder.
RANDOM_STRING_SOURCE = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0987654321_+"


def random_string(n: int, alphabet: str = RANDOM_STRING_SOURCE) -> str:
    """Return n characters drawn from alphabet using the OS CSPRNG.

    Notes:
    - No shared state; safe to call from concurrent handlers.
    - n <= 0 returns an empty string.

    """

    if not alphabet:
        raise ValueError("alphabet must not be empty")
    return "".join(secrets.choice(alphabet) for _ in range(max(0, int(n))))
