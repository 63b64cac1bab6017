"""Identifiers for locally created records."""

import secrets

USER_PREFIX = "user-"


def generate_transaction_id() -> str:
    """Return a new transaction ID such as ``user-3f9a0c1e2d4b5a6978c``.

    Tiller's own IDs never start with ``user-``.
    """
    return USER_PREFIX + secrets.token_hex(10)[:19]
