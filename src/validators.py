"""Predicate functions used to validate input before anything is written."""

import re
from typing import List

PASSWORD_MIN_LENGTH = 8

# (pattern, message) pairs; a symbol is any non-word character
PASSWORD_RULES = [
    (re.compile(r"[A-Z]"), "Password must contain an uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain a lowercase letter"),
    (re.compile(r"\d"), "Password must contain a digit"),
    (re.compile(r"\W"), "Password must contain a symbol"),
]


def password_problems(password: str) -> List[str]:
    """
    Return one message per password strength rule that is not met.

    An empty list means the password is strong: at least 8 characters with
    an uppercase letter, a lowercase letter, a digit and a symbol.

    Args:
        password: Plain text password

    Returns:
        List[str]: Unmet requirements, in a stable order
    """
    if not isinstance(password, str):
        return ["Password must be a string"]

    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

    for pattern, message in PASSWORD_RULES:
        if not pattern.search(password):
            problems.append(message)

    return problems


def is_strong_password(password: str) -> bool:
    """Return True if the password satisfies every strength rule."""
    return not password_problems(password)


def is_blank(value) -> bool:
    """Return True for None or strings that are empty after stripping."""
    return value is None or (isinstance(value, str) and not value.strip())
